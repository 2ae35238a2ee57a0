"""
Identity management module for authentication and community standing.

This module provides:
- CustomUserManager: Manager class for identity operations
- CustomUser: Identity model with email-based authentication and an access tier
- InvalidEmailError: Exception for email validation errors
"""

from __future__ import annotations

import uuid
from typing import Any, ClassVar

from allauth.account.models import EmailAddress
from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


MAX_NAME_LENGTH = 200
MAX_HANDLE_LENGTH = 100


class InvalidEmailError(Exception):
    """Exception raised when an invalid email is provided."""

    def __init__(self, email: str) -> None:
        """
        Initialize the InvalidEmailError.

        Args:
            email: The invalid email that caused the error

        """
        self.email = email
        super().__init__(f"Invalid email address: {email}")


class AccessLevel(models.TextChoices):
    """Community access tiers, from freshly created (L0) to fully vetted investor (L6)."""

    L0 = "L0", _("L0 - New")
    L1 = "L1", _("L1 - Unverified")
    L2 = "L2", _("L2 - Verified")
    L3 = "L3", _("L3 - Member")
    L4 = "L4", _("L4 - Active member")
    L5 = "L5", _("L5 - Core member")
    L6 = "L6", _("L6 - Investor")
    REJECTED = "Rejected", _("Rejected")

    @classmethod
    def restricted(cls) -> frozenset[str]:
        """Tiers that cannot be referenced directly when granting demo day access."""
        return frozenset({cls.L0, cls.L1, cls.REJECTED})


class CustomUserManager(BaseUserManager):
    """Manage identity operations with email-based authentication."""

    def create_user(
        self,
        email: str,
        password: str | None = None,
        **extra_fields: Any,
    ) -> CustomUser:
        """
        Create and save a new identity with a verified email address.

        Args:
            email: The email address for the new identity
            password: Optional password for the new identity
            **extra_fields: Additional fields to be saved on the user model

        Returns:
            CustomUser: The newly created identity

        Raises:
            InvalidEmailError: If the email is invalid or not provided
            ValidationError: If any other field fails validation

        """
        if not email:
            raise InvalidEmailError(email) from None

        try:
            email = self.normalize_email(email).lower()
            user = self.model(email=email, **extra_fields)

            if extra_fields.get("is_superuser"):
                if not password:
                    msg = "Superuser must have a password"
                    raise ValueError(msg)
                user.set_password(password)
            else:
                user.set_unusable_password()

            user.full_clean()
        except ValidationError as exc:
            if "email" in exc.message_dict:
                raise InvalidEmailError(email) from exc
            raise
        else:
            user.save(using=self._db)
            EmailAddress.objects.create(
                user=user,
                email=email,
                primary=True,
                verified=True,
            )
            return user

    def create_superuser(
        self,
        email: str,
        password: str,
        **extra_fields: Any,
    ) -> CustomUser:
        """
        Create and save a new superuser with a verified email address.

        Raises:
            InvalidEmailError: If the email is invalid or not provided
            ValidationError: If superuser flags are not properly set

        """
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("is_active", True)

        if not extra_fields.get("is_staff"):
            msg = "Superuser must have is_staff=True"
            raise ValidationError(msg)

        if not extra_fields.get("is_superuser"):
            msg = "Superuser must have is_superuser=True"
            raise ValidationError(msg)

        if not password:
            msg = "Superuser must have a password"
            raise ValueError(msg)

        return self.create_user(email, password, **extra_fields)

    def find_by_email(self, email: str) -> CustomUser | None:
        """Return the identity registered with *email* (case-insensitive), if any."""
        if not email:
            return None
        return self.filter(email__iexact=email.strip()).first()


class CustomUser(AbstractUser):
    """A person known to the platform, independent of any demo day."""

    username = None
    first_name = None
    last_name = None

    uid = models.UUIDField(
        default=uuid.uuid4,
        unique=True,
        editable=False,
        help_text=_("Stable public identifier of the identity"),
    )
    email = models.EmailField(
        "email address",
        unique=True,
        error_messages={
            "unique": "A user with that email already exists.",
        },
    )
    name = models.CharField(
        max_length=MAX_NAME_LENGTH,
        blank=True,
        help_text=_("Full name shown to other participants. Falls back to the email."),
    )
    access_level = models.CharField(
        max_length=10,
        choices=AccessLevel.choices,
        default=AccessLevel.L0,
        help_text=_("Community access tier of the identity"),
    )
    twitter_handle = models.CharField(
        max_length=MAX_HANDLE_LENGTH,
        blank=True,
        default="",
        help_text=_("Twitter / X handle without the leading '@'"),
    )
    linkedin_handle = models.CharField(
        max_length=MAX_HANDLE_LENGTH,
        blank=True,
        default="",
        help_text=_("LinkedIn profile slug (the part after linkedin.com/in/)"),
    )
    telegram_handle = models.CharField(
        max_length=MAX_HANDLE_LENGTH,
        null=True,
        blank=True,
        unique=True,
        help_text=_("Telegram handle. Owned by at most one identity."),
    )
    date_joined = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS: ClassVar[list] = []

    objects = CustomUserManager()

    class Meta:
        """Metadata for CustomUser model."""

        verbose_name = "identity"
        verbose_name_plural = "identities"

    def __str__(self) -> str:
        """Return string representation of the identity."""
        return self.email

    @property
    def display_name(self) -> str:
        """Return the name, or the email when no name is known."""
        return self.name or self.email

    def clean(self) -> None:
        """
        Validate the identity.

        Ensures email is lowercase and an empty telegram handle is stored as NULL.
        """
        super().clean()
        self.email = self.email.lower()
        if not self.telegram_handle:
            self.telegram_handle = None

    def save(self, *args: Any, **kwargs: Any) -> None:
        """Save superusers with a password and all other identities without one."""
        if self.is_superuser and not self.password:
            msg = "Superusers must have a password"
            raise ValidationError(msg)
        if not self.is_superuser and self.has_usable_password():
            self.set_unusable_password()
        if not self.telegram_handle:
            self.telegram_handle = None
        super().save(*args, **kwargs)
