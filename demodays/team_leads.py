"""
Team-lead request workflow.

Founders ask to become lead of the team they pitch for; admins approve or reject. Request states
only move none -> REQUESTED -> APPROVED | REJECTED. Approval writes the membership flag and the
request status in one transaction.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from django.core.paginator import Paginator
from django.db import transaction
from django.db.models import Q

from demodays.exceptions import NotFoundError, ValidationError
from demodays.models import Participant
from demodays.participants import ParticipantPage, get_participant
from demodays.types import ReviewAction
from teams.models import TeamMemberRole


if TYPE_CHECKING:
    from events.models import DemoDay
    from users.models import CustomUser


logger = structlog.get_logger(__name__)

RequestStatus = Participant.TeamLeadRequestStatus


def request_team_lead(identity: CustomUser, demo_day: DemoDay) -> Participant:
    """
    File a team-lead request for the founder *identity*.

    Raises:
        NotFoundError: If the identity does not participate
        ValidationError: If the participant is not a founder, has no team, already leads the
            team, or has a request under review

    """
    with transaction.atomic():
        participant = (
            Participant.objects.alive()
            .select_for_update()
            .filter(demo_day=demo_day, identity=identity)
            .first()
        )
        if participant is None:
            msg = f"{identity.email} does not participate in {demo_day}"
            raise NotFoundError(msg)
        if not participant.is_founder:
            msg = "Only founders can request to become team lead"
            raise ValidationError(msg)
        if participant.team_id is None:
            msg = "A team must be assigned before requesting to become team lead"
            raise ValidationError(msg)

        role = TeamMemberRole.objects.filter(identity=identity, team_id=participant.team_id).first()
        if role is not None and role.team_lead:
            msg = "You are already the lead of this team"
            raise ValidationError(msg)
        if participant.team_lead_request_status == RequestStatus.REQUESTED:
            msg = "A team-lead request is already under review"
            raise ValidationError(msg)

        participant.team_lead_request_status = RequestStatus.REQUESTED
        participant.save(update_fields=["team_lead_request_status", "updated_at"])

    logger.info(
        "team_lead_requested",
        demo_day=demo_day.slug,
        participant=str(participant.uid),
        team=participant.team_id,
    )
    return participant


def review_team_lead_request(
    demo_day: DemoDay,
    participant_uid: Any,
    action: ReviewAction | str,
    *,
    actor: CustomUser | None = None,
) -> Participant:
    """
    Approve or reject a pending team-lead request.

    Approval flips the membership's ``team_lead`` flag (creating the membership if the founder
    has none) and records the decision atomically; either both writes land or neither does.

    Raises:
        NotFoundError: If the participant does not exist
        ValidationError: If there is no request under review or the participant has no team

    """
    action = ReviewAction(action)
    with transaction.atomic():
        participant = get_participant(demo_day, participant_uid)
        if participant.team_lead_request_status != RequestStatus.REQUESTED:
            msg = "There is no team-lead request under review"
            raise ValidationError(msg)
        if participant.team_id is None:
            msg = "The participant has no team"
            raise ValidationError(msg)

        if action == ReviewAction.APPROVE:
            role, _created = TeamMemberRole.objects.get_or_create(
                identity=participant.identity,
                team_id=participant.team_id,
            )
            role.team_lead = True
            role.save(update_fields=["team_lead", "updated_at"])
            participant.team_lead_request_status = RequestStatus.APPROVED
        else:
            participant.team_lead_request_status = RequestStatus.REJECTED
        participant.save(update_fields=["team_lead_request_status", "updated_at"])

    logger.info(
        "team_lead_request_reviewed",
        demo_day=demo_day.slug,
        participant=str(participant.uid),
        decision=participant.team_lead_request_status,
        actor=str(actor.uid) if actor else None,
    )
    return participant


def get_team_lead_requests(
    demo_day: DemoDay,
    *,
    page: int = 1,
    limit: int = 20,
    status: str | None = None,
    search: str | None = None,
) -> ParticipantPage:
    """
    Return a page of participants that ever filed a team-lead request, newest first.

    ``status`` narrows the page to one request state; ``search`` matches the member's name or
    email or the team name, ignoring case.
    """
    requests = Participant.objects.alive().filter(
        demo_day=demo_day,
        team_lead_request_status__isnull=False,
    )
    if status:
        requests = requests.filter(team_lead_request_status=status)
    if search:
        term = search.strip()
        requests = requests.filter(
            Q(identity__name__icontains=term)
            | Q(identity__email__icontains=term)
            | Q(team__name__icontains=term),
        )
    requests = requests.select_related("identity", "team").order_by("-updated_at", "pk")

    paginator = Paginator(requests, max(1, limit))
    page_obj = paginator.get_page(page)
    return ParticipantPage(
        participants=list(page_obj.object_list),
        total=paginator.count,
        page=page_obj.number,
        limit=paginator.per_page,
        total_pages=paginator.num_pages if paginator.count else 0,
    )
