"""Organization handling for imported records: team resolution and membership upserts."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from demodays.importer.types import MembershipRole, VerbosityLevel
from teams.models import Team, TeamMemberRole


if TYPE_CHECKING:
    from demodays.importer.context import ImportContext
    from demodays.importer.records import InvestorRecord
    from users.models import CustomUser


#: Role titles that never make someone the lead of their organization by default.
NON_LEAD_ROLE = re.compile(
    r"\b(analyst|associate|intern|assistant|scout|junior|trainee)\b",
    re.IGNORECASE,
)


def resolve_team(ctx: ImportContext, organization: str) -> tuple[Team, bool]:
    """
    Return ``(team, created)`` for *organization*.

    Names match case-insensitively. The batch cache on *ctx* avoids both duplicate creation and
    repeated lookups for the same organization within one import.
    """
    name = organization.strip()
    key = name.lower()
    cached = ctx.cached_team(key)
    if cached is not None:
        return cached, False

    team = Team.objects.find_by_name(name)
    created = team is None
    if created:
        team = Team.objects.create(name=name)
        ctx.counters["created_teams"] += 1
        ctx.log(f"Created team {name}", VerbosityLevel.DETAILED, "SUCCESS")

    ctx.team_cache[key] = team
    return team, created


def infer_team_lead(record: InvestorRecord, team: Team, identity: CustomUser) -> bool:
    """
    Decide whether the identity should lead *team*.

    An explicit ``make_team_lead`` wins. Otherwise the first contact from an organization without
    a lead becomes its lead, unless the role text names a junior position.
    """
    if record.make_team_lead is not None:
        return record.make_team_lead
    if record.role and NON_LEAD_ROLE.search(record.role):
        return False
    return not team.current_leads().exclude(identity=identity).exists()


def upsert_membership(
    ctx: ImportContext,
    identity: CustomUser,
    team: Team,
    *,
    will_be_lead: bool,
    role_title: str | None,
) -> MembershipRole:
    """
    Create or refresh the identity's membership in *team*.

    An existing membership is only ever promoted to lead, never demoted.
    """
    role = TeamMemberRole.objects.for_pair(identity, team)

    if role is None:
        TeamMemberRole.objects.create(
            identity=identity,
            team=team,
            team_lead=will_be_lead,
            investment_team=team.is_fund,
            role=role_title or "",
        )
        ctx.counters["updated_memberships"] += 1
        if will_be_lead:
            ctx.counters["promoted_to_lead"] += 1
        return MembershipRole.LEAD if will_be_lead else MembershipRole.MEMBER

    changed: list[str] = []
    if will_be_lead and not role.team_lead:
        role.team_lead = True
        changed.append("team_lead")
        ctx.counters["promoted_to_lead"] += 1
    if role_title and not role.role:
        role.role = role_title
        changed.append("role")
    if changed:
        role.save(update_fields=[*changed, "updated_at"])
    return MembershipRole.LEAD if role.team_lead else MembershipRole.MEMBER
