"""Investor profile upserts and the access-tier rule shared by applications and bulk imports."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from teams.models import InvestorProfile
from users.models import AccessLevel


if TYPE_CHECKING:
    from teams.models import Team
    from users.models import CustomUser


#: Tiers raised to the investor tier once investment preferences are known.
TIER_UPGRADES: dict[str, str] = {
    AccessLevel.L2: AccessLevel.L6,
    AccessLevel.L3: AccessLevel.L6,
    AccessLevel.L4: AccessLevel.L6,
}

PROFILE_FIELDS = (
    "investment_type",
    "typical_check_size",
    "invest_in_startup_stages",
    "sec_rules_accepted",
)


def upgraded_access_level(current: str, investment_type: str | None) -> str:
    """Return the tier an identity should hold after declaring *investment_type*."""
    if not investment_type:
        return current
    return TIER_UPGRADES.get(current, current)


def _apply(profile: InvestorProfile, preferences: dict[str, Any]) -> list[str]:
    changed = []
    for name in PROFILE_FIELDS:
        value = preferences.get(name)
        if value is None or value == getattr(profile, name):
            continue
        setattr(profile, name, value)
        changed.append(name)
    return changed


def upsert_identity_investor_profile(identity: CustomUser, **preferences: Any) -> InvestorProfile:
    """
    Create or refresh the individual investor profile of *identity*.

    Only preferences that are not ``None`` overwrite stored values. The identity's access tier is
    raised under :data:`TIER_UPGRADES` when an investment type is given.
    """
    profile = InvestorProfile.objects.filter(identity=identity).first()
    if profile is None:
        profile = InvestorProfile(identity=identity)
        _apply(profile, preferences)
        profile.save()
    elif changed := _apply(profile, preferences):
        profile.save(update_fields=[*changed, "updated_at"])

    new_level = upgraded_access_level(identity.access_level, preferences.get("investment_type"))
    if new_level != identity.access_level:
        identity.access_level = new_level
        identity.save(update_fields=["access_level", "updated_at"])
    return profile


def upsert_team_investor_profile(team: Team, **preferences: Any) -> InvestorProfile:
    """Create or refresh the fund-level investor profile of *team* and flag it as a fund."""
    if not team.is_fund:
        team.is_fund = True
        team.save(update_fields=["is_fund", "updated_at"])

    profile = InvestorProfile.objects.filter(team=team).first()
    if profile is None:
        profile = InvestorProfile(team=team)
        _apply(profile, preferences)
        profile.save()
    elif changed := _apply(profile, preferences):
        profile.save(update_fields=[*changed, "updated_at"])
    return profile
