"""Demo day event module: the time-boxed event investors and founders participate in."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, ClassVar

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


if TYPE_CHECKING:
    from django_stubs_ext.db.models.manager import RelatedManager

    from demodays.models import FundraisingProfile, Participant

MAX_DEMO_DAY_TITLE_LENGTH = 200
MAX_DEMO_DAY_SLUG_LENGTH = 100
MAX_FIELD_LENGTH = 200


class DemoDayQuerySet(models.QuerySet):
    """Custom QuerySet for DemoDay model."""

    def alive(self) -> DemoDayQuerySet:
        """Return demo days that have not been soft-deleted."""
        return self.filter(is_deleted=False)

    def current(self) -> DemoDay | None:
        """Return the most recent live demo day that is not archived."""
        return (
            self.alive()
            .exclude(status=DemoDay.Status.ARCHIVED)
            .order_by("-start_date", "-pk")
            .first()
        )


class DemoDay(models.Model):
    """Represents one Demo Day event instance."""

    class Status(models.TextChoices):
        """Lifecycle of a demo day, in chronological order."""

        UPCOMING = "UPCOMING", _("Upcoming")
        REGISTRATION_OPEN = "REGISTRATION_OPEN", _("Registration open")
        EARLY_ACCESS = "EARLY_ACCESS", _("Early access")
        ACTIVE = "ACTIVE", _("Active")
        COMPLETED = "COMPLETED", _("Completed")
        ARCHIVED = "ARCHIVED", _("Archived")

    uid = models.UUIDField(
        default=uuid.uuid4,
        unique=True,
        editable=False,
        help_text=_("Stable public identifier of the demo day"),
    )

    slug = models.SlugField(
        max_length=MAX_DEMO_DAY_SLUG_LENGTH,
        unique=True,
        help_text=_("Demo day slug. Name used in URLs and for import commands."),
    )

    title = models.CharField(
        max_length=MAX_DEMO_DAY_TITLE_LENGTH,
        help_text=_("Display title of the demo day. Include the season if applicable."),
    )

    description = models.TextField(
        blank=True,
        default="",
        help_text=_("Short description shown on the demo day landing page"),
    )

    start_date = models.DateTimeField(
        help_text=_("When the demo day opens"),
    )

    end_date = models.DateTimeField(
        help_text=_("When the demo day closes"),
    )

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.UPCOMING,
        help_text=_("Current lifecycle status"),
    )

    host = models.CharField(
        max_length=MAX_FIELD_LENGTH,
        blank=True,
        default="",
        help_text=_("Name of the organization hosting the demo day"),
    )

    notifications_enabled = models.BooleanField(
        default=False,
        help_text=_("Whether participants are emailed when the status changes"),
    )

    is_deleted = models.BooleanField(
        default=False,
        help_text=_("Soft-delete flag. Deleted demo days are hidden everywhere."),
    )

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    objects = DemoDayQuerySet.as_manager()

    if TYPE_CHECKING:
        participants: RelatedManager[Participant]
        fundraising_profiles: RelatedManager[FundraisingProfile]

    class Meta:
        """Metadata for the DemoDay model."""

        verbose_name = _("Demo day")
        verbose_name_plural = _("Demo days")
        ordering: ClassVar[list[str]] = ["-start_date"]
        constraints: ClassVar[list[models.BaseConstraint]] = [
            models.CheckConstraint(
                condition=models.Q(start_date__lte=models.F("end_date")),
                name="demo_day_start_before_end",
            ),
        ]

    def __str__(self) -> str:
        """Return the demo day title."""
        return self.title

    # ------------------------------------------------------------------
    # Derived helpers
    # ------------------------------------------------------------------

    @property
    def accepts_applications(self) -> bool:
        """Whether investors may currently apply to participate."""
        return self.status in {self.Status.REGISTRATION_OPEN, self.Status.EARLY_ACCESS}

    def visible_status_for(self, *, is_founder: bool, has_early_access: bool) -> str:
        """
        Return the status shown to a participant.

        Early access is only revealed to founders and early-access holders; everyone else still
        sees registration as open.
        """
        if self.status == self.Status.EARLY_ACCESS:
            if is_founder or has_early_access:
                return self.Status.ACTIVE
            return self.Status.REGISTRATION_OPEN
        return self.status
