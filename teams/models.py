"""
Team store for the community platform.

This module provides:
- Team: an organization (startup or fund)
- TeamMemberRole: the join record granting an identity standing within a team
- InvestorProfile: investment preferences attached to an identity or a team
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, ClassVar

from django.conf import settings
from django.db import models
from django.db.models import Q, QuerySet
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


if TYPE_CHECKING:
    from collections.abc import Iterable

    from users.models import CustomUser


MAX_TEAM_NAME_LENGTH = 200
MAX_ROLE_LENGTH = 200
MAX_FIELD_LENGTH = 200


class TeamQuerySet(models.QuerySet):
    """Custom QuerySet for Team lookups."""

    def find_by_name(self, name: str) -> Team | None:
        """Return the oldest team whose name matches *name* case-insensitively."""
        name = (name or "").strip()
        if not name:
            return None
        return self.filter(name__iexact=name).order_by("pk").first()


class Team(models.Model):
    """Represents an organization: a startup pitching at demo day or an investing fund."""

    uid = models.UUIDField(
        default=uuid.uuid4,
        unique=True,
        editable=False,
        help_text=_("Stable public identifier of the team"),
    )

    name = models.CharField(
        max_length=MAX_TEAM_NAME_LENGTH,
        help_text=_("Display name of the organization"),
    )

    short_description = models.TextField(
        blank=True,
        default="",
        help_text=_("One or two sentences describing the organization"),
    )

    website = models.URLField(
        blank=True,
        default="",
        help_text=_("Public website of the organization"),
    )

    industry = models.CharField(
        max_length=MAX_FIELD_LENGTH,
        blank=True,
        default="",
        help_text=_("Industry the team operates in"),
    )

    stage = models.CharField(
        max_length=MAX_FIELD_LENGTH,
        blank=True,
        default="",
        help_text=_("Funding stage of the team (e.g., 'Pre-seed', 'Seed')"),
    )

    is_fund = models.BooleanField(
        default=False,
        help_text=_("Whether the organization is an investment fund"),
    )

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TeamQuerySet.as_manager()

    class Meta:
        """Metadata for the Team model."""

        verbose_name = _("Team")
        verbose_name_plural = _("Teams")
        ordering: ClassVar[list[str]] = ["name"]

    def __str__(self) -> str:
        """Return the team name."""
        return self.name

    def current_leads(self) -> QuerySet[TeamMemberRole]:
        """Return the membership roles currently flagged as team lead."""
        return self.member_roles.filter(team_lead=True)


class TeamMemberRoleQuerySet(models.QuerySet):
    """Custom QuerySet for membership role lookups."""

    def for_pair(self, identity: CustomUser, team: Team) -> TeamMemberRole | None:
        """Return the role joining *identity* and *team*, if any."""
        return self.filter(identity=identity, team=team).first()

    def primary_for(self, identity: CustomUser) -> TeamMemberRole | None:
        """Return the identity's main-team role, falling back to its oldest role."""
        roles = self.filter(identity=identity).select_related("team")
        return roles.filter(main_team=True).order_by("pk").first() or roles.order_by("pk").first()

    def remove_members(self, team: Team, identities: Iterable[CustomUser]) -> int:
        """Delete the roles of *identities* in *team* and return how many were removed."""
        deleted, _details = self.filter(team=team, identity__in=list(identities)).delete()
        return deleted


class TeamMemberRole(models.Model):
    """Membership of an identity within a team."""

    identity = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="team_roles",
        help_text=_("Identity holding the membership"),
    )

    team = models.ForeignKey(
        Team,
        on_delete=models.CASCADE,
        related_name="member_roles",
        help_text=_("Team the identity belongs to"),
    )

    team_lead = models.BooleanField(
        default=False,
        help_text=_("Whether the identity leads the team"),
    )

    main_team = models.BooleanField(
        default=False,
        help_text=_("Whether this is the identity's primary team"),
    )

    investment_team = models.BooleanField(
        default=False,
        help_text=_("Whether the identity is part of the team's investment committee"),
    )

    role = models.CharField(
        max_length=MAX_ROLE_LENGTH,
        blank=True,
        default="",
        help_text=_("Free-text job title within the team"),
    )

    tags = models.JSONField(
        default=list,
        blank=True,
        help_text=_("Free-text tags attached to the membership"),
    )

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TeamMemberRoleQuerySet.as_manager()

    class Meta:
        """Metadata for the TeamMemberRole model."""

        verbose_name = _("Team member role")
        verbose_name_plural = _("Team member roles")
        ordering: ClassVar[list[str]] = ["team", "pk"]
        constraints: ClassVar[list[models.BaseConstraint]] = [
            models.UniqueConstraint(
                fields=["identity", "team"],
                name="team_member_role_identity_team_unique",
            ),
        ]

    def __str__(self) -> str:
        """Return a string representation of the membership."""
        suffix = " (lead)" if self.team_lead else ""
        return f"{self.identity} @ {self.team}{suffix}"


class InvestorProfile(models.Model):
    """Investment preferences of an individual investor or of a fund."""

    class InvestmentType(models.TextChoices):
        """How the investor deploys capital."""

        ANGEL = "ANGEL", _("Angel")
        FUND = "FUND", _("Fund")
        ANGEL_AND_FUND = "ANGEL_AND_FUND", _("Angel and fund")

    identity = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="investor_profile",
        help_text=_("Individual investor owning the profile"),
    )

    team = models.OneToOneField(
        Team,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="investor_profile",
        help_text=_("Fund owning the profile"),
    )

    investment_type = models.CharField(
        max_length=20,
        choices=InvestmentType.choices,
        blank=True,
        default="",
        help_text=_("Type of investor"),
    )

    typical_check_size = models.PositiveBigIntegerField(
        null=True,
        blank=True,
        help_text=_("Typical check size in USD"),
    )

    invest_in_startup_stages = models.JSONField(
        default=list,
        blank=True,
        help_text=_("Startup stages the investor invests in"),
    )

    sec_rules_accepted = models.BooleanField(
        default=False,
        help_text=_("Whether the investor accepted the SEC accredited investor rules"),
    )

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Metadata for the InvestorProfile model."""

        verbose_name = _("Investor profile")
        verbose_name_plural = _("Investor profiles")
        constraints: ClassVar[list[models.BaseConstraint]] = [
            models.CheckConstraint(
                condition=(
                    Q(identity__isnull=False, team__isnull=True)
                    | Q(identity__isnull=True, team__isnull=False)
                ),
                name="investor_profile_single_owner",
            ),
        ]

    def __str__(self) -> str:
        """Return a string representation of the profile."""
        owner = self.team or self.identity
        return f"Investor profile of {owner}"

    @property
    def is_fund_level(self) -> bool:
        """Whether the profile represents a fund rather than an individual."""
        return self.investment_type in {
            self.InvestmentType.FUND,
            self.InvestmentType.ANGEL_AND_FUND,
        }
