"""
Participant registry and access state machine.

States are PENDING, INVITED, ENABLED and DISABLED; soft deletion is an orthogonal flag. Status
changes are edge-triggered: an analytics event is recorded only when the status really changes,
and every write that can change a founder's standing is wrapped in a listing transition so the
fundraising listing stays consistent.
"""

from __future__ import annotations

import contextlib
import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Final

import structlog
from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.paginator import Paginator
from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from demodays.analytics import track_event
from demodays.exceptions import (
    AccessDeniedError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from demodays.fundraising import listing_transition
from demodays.investor_profiles import upsert_identity_investor_profile
from demodays.models import Participant
from demodays.types import ParticipantType, seat_for
from teams.models import TeamMemberRole
from users.models import AccessLevel, CustomUser, InvalidEmailError
from utils.email_utils import hash_email


if TYPE_CHECKING:
    from events.models import DemoDay
    from teams.models import Team


logger = structlog.get_logger(__name__)

PARTICIPANT_ADDED_EVENT = "demo-day-participant-added"
STATUS_CHANGED_EVENT = "demo-day-participant-status-changed"
APPLICATION_SUBMITTED_EVENT = "demo-day-investor-application-submitted"

SORT_FIELDS = frozenset({"created_at", "updated_at", "status_updated_at", "type", "status"})


class _Unset(enum.Enum):
    TOKEN = enum.auto()


#: Marks an omitted optional argument whose ``None`` value is meaningful.
UNSET: Final = _Unset.TOKEN


class Access(enum.StrEnum):
    """What an identity may see at a demo day."""

    NONE = "NONE"
    INVESTOR = "INVESTOR"
    FOUNDER = "FOUNDER"


@dataclass(frozen=True)
class DemoDayAccess:
    """Access summary returned to an authenticated identity."""

    access: Access
    demo_day_status: str
    is_pending: bool = False
    is_admin: bool = False
    confidentiality_accepted: bool = False
    participant_status: str | None = None


@dataclass(frozen=True)
class ParticipantPage:
    """One page of participants plus paging metadata."""

    participants: list[Participant]
    total: int
    page: int
    limit: int
    total_pages: int


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _email_for_log(email: str) -> str:
    return hash_email(email) if settings.LOG_EMAIL_HASH else email


def snapshot(participant: Participant) -> dict[str, Any]:
    """Return the analytics view of *participant*."""
    return {
        "participantUid": str(participant.uid),
        "type": participant.type,
        "status": participant.status,
        "teamUid": str(participant.team.uid) if participant.team else None,
        "hasEarlyAccess": participant.has_early_access,
    }


def get_participant(demo_day: DemoDay, participant_uid: Any) -> Participant:
    """
    Return the live participant *participant_uid* of *demo_day*.

    Raises:
        NotFoundError: If no such participant exists

    """
    try:
        participant = (
            Participant.objects.alive()
            .select_related("identity", "team")
            .filter(demo_day=demo_day, uid=participant_uid)
            .first()
        )
    except DjangoValidationError:
        participant = None
    if participant is None:
        msg = f"Participant '{participant_uid}' not found"
        raise NotFoundError(msg)
    return participant


def _participant_for(identity: CustomUser, demo_day: DemoDay) -> Participant | None:
    return (
        Participant.objects.alive()
        .select_related("team")
        .filter(demo_day=demo_day, identity=identity)
        .first()
    )


def _resolve_identity(
    *,
    identity_uid: Any,
    email: str | None,
    name: str | None,
) -> tuple[CustomUser, bool]:
    """Return ``(identity, created)`` for a reference or an email."""
    if identity_uid:
        try:
            identity = CustomUser.objects.filter(uid=identity_uid).first()
        except DjangoValidationError:
            identity = None
        if identity is None:
            msg = f"Identity '{identity_uid}' not found"
            raise NotFoundError(msg)
        if identity.access_level in AccessLevel.restricted():
            msg = f"Identity with access level {identity.access_level} cannot be added directly"
            raise ValidationError(msg)
        return identity, False

    if not email:
        msg = "Either an identity reference or an email is required"
        raise ValidationError(msg)

    identity = CustomUser.objects.find_by_email(email)
    if identity is not None:
        return identity, False

    try:
        identity = CustomUser.objects.create_user(
            email=email,
            name=(name or "").strip() or email.strip().lower(),
            access_level=AccessLevel.L0,
        )
    except InvalidEmailError as exc:
        raise ValidationError(str(exc)) from exc
    except DjangoValidationError as exc:
        raise ValidationError.from_django(exc) from exc
    return identity, True


def _promote_primary_team(identity: CustomUser) -> Team | None:
    """Flag the identity's primary membership as team lead and return its team."""
    role = TeamMemberRole.objects.primary_for(identity)
    if role is None:
        return None
    if not role.team_lead:
        role.team_lead = True
        role.save(update_fields=["team_lead", "updated_at"])
    return role.team


def _track_status_change(participant: Participant, old_status: str) -> None:
    track_event(
        STATUS_CHANGED_EVENT,
        str(participant.identity.uid),
        {
            "participantUid": str(participant.uid),
            "demoDayUid": str(participant.demo_day.uid),
            "fromStatus": old_status,
            "toStatus": participant.status,
        },
    )


# ------------------------------------------------------------------
# Commands
# ------------------------------------------------------------------


@transaction.atomic
def add_participant(
    demo_day: DemoDay,
    participant_type: str,
    *,
    identity_uid: Any = None,
    email: str | None = None,
    name: str | None = None,
    actor: CustomUser | None = None,
) -> Participant:
    """
    Register an identity for *demo_day*.

    The identity is resolved by reference (it must exist and sit above the restricted tiers) or
    by email (reused, or created at the lowest tier). Newly created identities start INVITED,
    known ones ENABLED. Founders are attached to their primary team, whose membership is promoted
    to team lead.

    Args:
        demo_day: The demo day to register for
        participant_type: INVESTOR or FOUNDER
        identity_uid: Reference to an existing identity
        email: Email used when no reference is given
        name: Name for a newly created identity
        actor: Admin performing the operation, for the audit log

    Returns:
        Participant: The new participant

    Raises:
        ValidationError: If the reference points at a restricted identity or nothing identifies one
        NotFoundError: If the reference is unknown
        ConflictError: If the identity already participates

    """
    if participant_type not in Participant.Type.values:
        msg = f"Unknown participant type '{participant_type}'"
        raise ValidationError(msg)

    identity, created = _resolve_identity(identity_uid=identity_uid, email=email, name=name)

    if Participant.objects.filter(demo_day=demo_day, identity=identity).exists():
        msg = f"{identity.email} already participates in {demo_day}"
        raise ConflictError(msg)

    team = _promote_primary_team(identity) if participant_type == ParticipantType.FOUNDER else None

    participant = Participant(
        demo_day=demo_day,
        identity=identity,
        status=Participant.Status.INVITED if created else Participant.Status.ENABLED,
        status_updated_at=timezone.now(),
    )
    participant.apply_seat(seat_for(participant_type, team))

    with listing_transition(team, demo_day):
        try:
            with transaction.atomic():
                participant.save()
        except IntegrityError as exc:
            msg = f"{identity.email} already participates in {demo_day}"
            raise ConflictError(msg) from exc

    track_event(
        PARTICIPANT_ADDED_EVENT,
        str(identity.uid),
        {
            "demoDayUid": str(demo_day.uid),
            "identityCreated": created,
            "before": None,
            "after": snapshot(participant),
        },
    )
    logger.info(
        "participant_added",
        demo_day=demo_day.slug,
        participant=str(participant.uid),
        email=_email_for_log(identity.email),
        type=participant.type,
        status=participant.status,
        actor=str(actor.uid) if actor else None,
    )
    return participant


def update_participant(
    demo_day: DemoDay,
    participant_uid: Any,
    *,
    status: str | None = None,
    team: Team | None | _Unset = UNSET,
    participant_type: str | None = None,
    has_early_access: bool | None = None,
    actor: CustomUser | None = None,
) -> Participant:
    """
    Apply an admin edit to a participant.

    A team can only be assigned to a founder. Moving a founder to another type drops the team.
    The status timestamp and the status-changed event only follow a real status change.

    Raises:
        NotFoundError: If the participant does not exist
        ValidationError: On an unknown status or type, or a team for a non-founder

    """
    if status is not None and status not in Participant.Status.values:
        msg = f"Unknown participant status '{status}'"
        raise ValidationError(msg)
    if participant_type is not None and participant_type not in Participant.Type.values:
        msg = f"Unknown participant type '{participant_type}'"
        raise ValidationError(msg)

    with transaction.atomic():
        participant = get_participant(demo_day, participant_uid)
        new_type = participant_type or participant.type
        if team is not UNSET and team is not None and new_type != ParticipantType.FOUNDER:
            msg = "Only founders can be assigned to a team"
            raise ValidationError(msg)

        new_team = participant.team if team is UNSET else team
        if new_type != ParticipantType.FOUNDER:
            new_team = None
        seat = seat_for(new_type, new_team)

        old_status = participant.status
        affected = {t.pk: t for t in (participant.team, seat.team) if t is not None}

        with contextlib.ExitStack() as stack:
            for affected_team in affected.values():
                stack.enter_context(listing_transition(affected_team, demo_day))
            participant.apply_seat(seat)
            status_changed = participant.set_status(status) if status else False
            if has_early_access is not None:
                participant.has_early_access = has_early_access
            participant.save()

        if status_changed:
            _track_status_change(participant, old_status)

    logger.info(
        "participant_updated",
        demo_day=demo_day.slug,
        participant=str(participant.uid),
        from_status=old_status,
        to_status=participant.status,
        team=str(participant.team.uid) if participant.team else None,
        actor=str(actor.uid) if actor else None,
    )
    return participant


def ensure_activated(identity: CustomUser, demo_day: DemoDay) -> str | None:
    """
    Promote an INVITED participant to ENABLED on first authenticated access.

    This is a command, not a query: it may write. Other statuses are left alone.

    Returns:
        str | None: The resulting status, or None when *identity* does not participate

    """
    with transaction.atomic():
        participant = _participant_for(identity, demo_day)
        if participant is None:
            return None
        if participant.status != Participant.Status.INVITED:
            return participant.status

        with listing_transition(participant.team, demo_day):
            participant.set_status(Participant.Status.ENABLED)
            participant.save(update_fields=["status", "status_updated_at", "updated_at"])
        _track_status_change(participant, Participant.Status.INVITED)

    logger.info("participant_activated", demo_day=demo_day.slug, participant=str(participant.uid))
    return participant.status


def get_demo_day_access(identity: CustomUser, demo_day: DemoDay) -> DemoDayAccess:
    """Activate the identity if invited, then describe what it may access."""
    status = ensure_activated(identity, demo_day)
    participant = _participant_for(identity, demo_day)
    is_admin = identity.is_staff or bool(participant and participant.is_demo_day_admin)

    if participant is None or status != Participant.Status.ENABLED:
        return DemoDayAccess(
            access=Access.NONE,
            demo_day_status=demo_day.visible_status_for(is_founder=False, has_early_access=False),
            is_pending=status == Participant.Status.PENDING,
            is_admin=is_admin,
            participant_status=status,
        )

    return DemoDayAccess(
        access=Access.FOUNDER if participant.is_founder else Access.INVESTOR,
        demo_day_status=demo_day.visible_status_for(
            is_founder=participant.is_founder,
            has_early_access=participant.has_early_access,
        ),
        is_admin=is_admin,
        confidentiality_accepted=participant.confidentiality_accepted,
        participant_status=status,
    )


def check_demo_day_access(identity: CustomUser, demo_day: DemoDay) -> Participant | None:
    """
    Ensure *identity* may enter *demo_day*.

    Returns:
        Participant | None: The enabled participant, or None for staff without one

    Raises:
        AccessDeniedError: If the identity is neither staff nor an enabled participant

    """
    participant = _participant_for(identity, demo_day)
    if participant is not None and participant.status == Participant.Status.ENABLED:
        return participant
    if identity.is_staff:
        return None
    msg = "You do not have access to this demo day"
    raise AccessDeniedError(msg)


@transaction.atomic
def submit_investor_application(
    demo_day: DemoDay,
    *,
    email: str,
    name: str | None = None,
    investment_type: str | None = None,
    typical_check_size: int | None = None,
    invest_in_startup_stages: list[str] | None = None,
    sec_rules_accepted: bool | None = None,
) -> Participant:
    """
    Register a self-service investor application as a PENDING participant.

    Raises:
        ValidationError: If the demo day is not accepting applications
        ConflictError: If the applicant already participates

    """
    if not demo_day.accepts_applications:
        msg = f"{demo_day} is not accepting applications"
        raise ValidationError(msg)

    identity, created = _resolve_identity(identity_uid=None, email=email, name=name)
    upsert_identity_investor_profile(
        identity,
        investment_type=investment_type,
        typical_check_size=typical_check_size,
        invest_in_startup_stages=invest_in_startup_stages,
        sec_rules_accepted=sec_rules_accepted,
    )

    if Participant.objects.filter(demo_day=demo_day, identity=identity).exists():
        msg = f"{identity.email} already applied to {demo_day}"
        raise ConflictError(msg)

    participant = Participant(
        demo_day=demo_day,
        identity=identity,
        status=Participant.Status.PENDING,
        status_updated_at=timezone.now(),
    )
    participant.apply_seat(seat_for(ParticipantType.INVESTOR))
    try:
        with transaction.atomic():
            participant.save()
    except IntegrityError as exc:
        msg = f"{identity.email} already applied to {demo_day}"
        raise ConflictError(msg) from exc

    track_event(
        APPLICATION_SUBMITTED_EVENT,
        str(identity.uid),
        {
            "demoDayUid": str(demo_day.uid),
            "participantUid": str(participant.uid),
            "identityCreated": created,
            "investmentType": investment_type,
        },
    )
    logger.info(
        "investor_application_submitted",
        demo_day=demo_day.slug,
        email=_email_for_log(identity.email),
    )
    return participant


def accept_confidentiality(identity: CustomUser, demo_day: DemoDay) -> Participant:
    """
    Record that *identity* accepted the confidentiality terms.

    Raises:
        NotFoundError: If the identity does not participate

    """
    participant = _participant_for(identity, demo_day)
    if participant is None:
        msg = f"{identity.email} does not participate in {demo_day}"
        raise NotFoundError(msg)
    if not participant.confidentiality_accepted:
        participant.confidentiality_accepted = True
        participant.save(update_fields=["confidentiality_accepted", "updated_at"])
    return participant


def soft_delete_participant(demo_day: DemoDay, participant_uid: Any) -> Participant:
    """Hide a participant without removing the row."""
    with transaction.atomic():
        participant = get_participant(demo_day, participant_uid)
        with listing_transition(participant.team, demo_day):
            participant.is_deleted = True
            participant.save(update_fields=["is_deleted", "updated_at"])
    logger.info("participant_deleted", demo_day=demo_day.slug, participant=str(participant.uid))
    return participant


# ------------------------------------------------------------------
# Queries
# ------------------------------------------------------------------


def get_participants(
    demo_day: DemoDay,
    *,
    page: int = 1,
    limit: int | None = None,
    status: str | None = None,
    participant_type: str | None = None,
    search: str | None = None,
    sort_by: str = "-created_at",
) -> ParticipantPage:
    """
    Return a filtered, sorted page of live participants.

    Raises:
        ValidationError: On an unknown sort field

    """
    if sort_by.removeprefix("-") not in SORT_FIELDS:
        msg = f"Cannot sort participants by '{sort_by}'"
        raise ValidationError(msg)

    limit = limit or settings.DEMO_DAY_PARTICIPANTS_PAGE_SIZE
    limit = max(1, min(limit, settings.DEMO_DAY_MAX_PAGE_SIZE))

    participants = Participant.objects.alive().filter(demo_day=demo_day)
    if status:
        participants = participants.filter(status=status)
    if participant_type:
        participants = participants.filter(type=participant_type)
    if search:
        term = search.strip()
        participants = participants.filter(
            Q(identity__name__icontains=term)
            | Q(identity__email__icontains=term)
            | Q(team__name__icontains=term),
        )
    participants = participants.select_related("identity", "team").order_by(sort_by, "pk")

    paginator = Paginator(participants, limit)
    page_obj = paginator.get_page(page)
    return ParticipantPage(
        participants=list(page_obj.object_list),
        total=paginator.count,
        page=page_obj.number,
        limit=limit,
        total_pages=paginator.num_pages if paginator.count else 0,
    )
