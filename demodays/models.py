"""
Demo day participation and fundraising material models.

This module provides:
- Upload: reference to a file stored by the external upload service
- Participant: an identity's registration for one demo day
- FundraisingProfile: a team's per-demo-day pitch materials with a derived publication status
"""

from __future__ import annotations

import uuid
from typing import ClassVar

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from demodays.types import FounderSeat, InvestorSeat, ParticipantType, Seat
from events.models import DemoDay
from teams.models import Team


MAX_FILENAME_LENGTH = 255


class Upload(models.Model):
    """A file reference handed out by the upload service."""

    class Kind(models.TextChoices):
        """Content kind reported by the upload service."""

        IMAGE = "IMAGE", _("Image")
        SLIDE = "SLIDE", _("Slide deck")
        VIDEO = "VIDEO", _("Video")
        OTHER = "OTHER", _("Other")

    uid = models.UUIDField(
        default=uuid.uuid4,
        unique=True,
        editable=False,
        help_text=_("Identifier issued by the upload service"),
    )

    kind = models.CharField(
        max_length=10,
        choices=Kind.choices,
        help_text=_("Content kind of the uploaded file"),
    )

    url = models.URLField(
        max_length=500,
        help_text=_("Public URL of the stored file"),
    )

    filename = models.CharField(
        max_length=MAX_FILENAME_LENGTH,
        blank=True,
        default="",
        help_text=_("Original filename"),
    )

    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        """Metadata for the Upload model."""

        verbose_name = _("Upload")
        verbose_name_plural = _("Uploads")
        ordering: ClassVar[list[str]] = ["-created_at"]

    def __str__(self) -> str:
        """Return a string representation of the upload."""
        return self.filename or str(self.uid)


class ParticipantQuerySet(models.QuerySet):
    """Custom QuerySet for Participant model."""

    def alive(self) -> ParticipantQuerySet:
        """Return participants that have not been soft-deleted."""
        return self.filter(is_deleted=False)

    def enabled(self) -> ParticipantQuerySet:
        """Return live participants with ENABLED status."""
        return self.alive().filter(status=Participant.Status.ENABLED)

    def enabled_founders(self, team: Team, demo_day: DemoDay) -> ParticipantQuerySet:
        """Return the enabled founders pitching for *team* at *demo_day*."""
        return self.enabled().filter(
            demo_day=demo_day,
            team=team,
            type=Participant.Type.FOUNDER,
        )


class Participant(models.Model):
    """An identity's registration record for one demo day."""

    class Type(models.TextChoices):
        """Participant seat kind."""

        INVESTOR = ParticipantType.INVESTOR.value, _("Investor")
        FOUNDER = ParticipantType.FOUNDER.value, _("Founder")

    class Status(models.TextChoices):
        """Access state of the participant."""

        PENDING = "PENDING", _("Pending review")
        INVITED = "INVITED", _("Invited")
        ENABLED = "ENABLED", _("Enabled")
        DISABLED = "DISABLED", _("Disabled")

    class TeamLeadRequestStatus(models.TextChoices):
        """Founder self-service request to become team lead."""

        REQUESTED = "REQUESTED", _("Requested")
        APPROVED = "APPROVED", _("Approved")
        REJECTED = "REJECTED", _("Rejected")

    uid = models.UUIDField(
        default=uuid.uuid4,
        unique=True,
        editable=False,
        help_text=_("Stable public identifier of the participant"),
    )

    demo_day = models.ForeignKey(
        DemoDay,
        on_delete=models.CASCADE,
        related_name="participants",
        help_text=_("Demo day the identity is registered for"),
    )

    identity = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="demo_day_participations",
        help_text=_("Registered identity"),
    )

    type = models.CharField(
        max_length=10,
        choices=Type.choices,
        help_text=_("Whether the identity joins as investor or founder"),
    )

    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.PENDING,
        help_text=_("Access state of the participant"),
    )

    team = models.ForeignKey(
        Team,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="demo_day_participants",
        help_text=_("Team the founder pitches for. Founders only."),
    )

    is_demo_day_admin = models.BooleanField(
        default=False,
        help_text=_("Whether the participant may see draft profiles"),
    )

    has_early_access = models.BooleanField(
        default=False,
        help_text=_("Whether the participant sees the demo day during early access"),
    )

    confidentiality_accepted = models.BooleanField(
        default=False,
        help_text=_("Whether the participant accepted the confidentiality terms"),
    )

    team_lead_request_status = models.CharField(
        max_length=10,
        choices=TeamLeadRequestStatus.choices,
        null=True,
        blank=True,
        help_text=_("State of the founder's team-lead request, if any"),
    )

    status_updated_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text=_("When the status last changed"),
    )

    is_deleted = models.BooleanField(
        default=False,
        help_text=_("Soft-delete flag. Rows are never physically removed."),
    )

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ParticipantQuerySet.as_manager()

    class Meta:
        """Metadata for the Participant model."""

        verbose_name = _("Participant")
        verbose_name_plural = _("Participants")
        ordering: ClassVar[list[str]] = ["-created_at"]
        indexes: ClassVar[list[models.Index]] = [
            models.Index(fields=["demo_day", "status"], name="participant_demoday_status_idx"),
            models.Index(fields=["demo_day", "team"], name="participant_demoday_team_idx"),
        ]
        constraints: ClassVar[list[models.BaseConstraint]] = [
            models.UniqueConstraint(
                fields=["demo_day", "identity"],
                name="participant_demo_day_identity_unique",
            ),
            models.CheckConstraint(
                condition=Q(type="FOUNDER") | Q(team__isnull=True),
                name="participant_team_only_for_founders",
            ),
        ]

    def __str__(self) -> str:
        """Return a string representation of the participant."""
        return f"{self.identity} ({self.get_type_display()}) at {self.demo_day}"

    # ------------------------------------------------------------------
    # Seat variant
    # ------------------------------------------------------------------

    @property
    def seat(self) -> Seat:
        """Return the participant's seat as a tagged variant."""
        if self.type == self.Type.FOUNDER:
            return FounderSeat(team=self.team)
        return InvestorSeat()

    def apply_seat(self, seat: Seat) -> None:
        """Set type and team together from *seat* (not saved)."""
        self.type = seat.type.value
        self.team = seat.team

    @property
    def is_founder(self) -> bool:
        """Whether the participant holds a founder seat."""
        return self.type == self.Type.FOUNDER

    def set_status(self, status: str) -> bool:
        """
        Move to *status*, stamping the change time.

        Returns:
            bool: True if the status actually changed (not saved)

        """
        if self.status == status:
            return False
        self.status = status
        self.status_updated_at = timezone.now()
        return True


class FundraisingProfile(models.Model):
    """A team's pitch materials for one demo day."""

    class Status(models.TextChoices):
        """Publication status. Always derived from the materials, never set by hand."""

        DRAFT = "DRAFT", _("Draft")
        PUBLISHED = "PUBLISHED", _("Published")

    uid = models.UUIDField(
        default=uuid.uuid4,
        unique=True,
        editable=False,
        help_text=_("Stable public identifier of the profile"),
    )

    team = models.ForeignKey(
        Team,
        on_delete=models.CASCADE,
        related_name="fundraising_profiles",
        help_text=_("Team the materials belong to"),
    )

    demo_day = models.ForeignKey(
        DemoDay,
        on_delete=models.CASCADE,
        related_name="fundraising_profiles",
        help_text=_("Demo day the materials are presented at"),
    )

    one_pager_upload = models.ForeignKey(
        Upload,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        help_text=_("One-pager image or slide"),
    )

    video_upload = models.ForeignKey(
        Upload,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        help_text=_("Pitch video"),
    )

    description = models.TextField(
        blank=True,
        default="",
        help_text=_("Free-text pitch description"),
    )

    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.DRAFT,
        editable=False,
        help_text=_("Derived publication status"),
    )

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Metadata for the FundraisingProfile model."""

        verbose_name = _("Fundraising profile")
        verbose_name_plural = _("Fundraising profiles")
        ordering: ClassVar[list[str]] = ["team__name"]
        constraints: ClassVar[list[models.BaseConstraint]] = [
            models.UniqueConstraint(
                fields=["team", "demo_day"],
                name="fundraising_profile_team_demo_day_unique",
            ),
        ]

    def __str__(self) -> str:
        """Return a string representation of the profile."""
        return f"{self.team} at {self.demo_day} ({self.get_status_display()})"

    def derived_status(self) -> str:
        """Return the publication status implied by the current materials."""
        has_name = bool(self.team.name and self.team.name.strip())
        if has_name and self.one_pager_upload_id and self.video_upload_id:
            return self.Status.PUBLISHED
        return self.Status.DRAFT
