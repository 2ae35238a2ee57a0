"""
Fundraising profile manager.

A profile's publication status is a pure function of its materials: PUBLISHED iff the team has
a name and both a one-pager and a video are attached. The status is recomputed after every write
that could affect it.

On top of that sits *listing eligibility* (published and pitched by at least one enabled founder).
Every mutation is wrapped in :func:`listing_transition`, which compares eligibility before and
after the write and reports exactly one event per boolean edge.
"""

from __future__ import annotations

import contextlib
from typing import TYPE_CHECKING, Any

import structlog
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.db.models import Exists, OuterRef, Q

from demodays.analytics import track_event
from demodays.exceptions import ConflictError, NotFoundError, ValidationError
from demodays.models import FundraisingProfile, Participant, Upload
from demodays.ordering import personalized_order
from demodays.types import UploadSlot


if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from events.models import DemoDay
    from teams.models import Team
    from users.models import CustomUser


logger = structlog.get_logger(__name__)

PROFILE_ADDED_EVENT = "demo-day-team-profile-added"
PROFILE_REMOVED_EVENT = "demo-day-team-profile-removed"

#: Upload kinds accepted per material slot.
SLOT_KINDS: dict[UploadSlot, frozenset[str]] = {
    UploadSlot.ONE_PAGER: frozenset({Upload.Kind.IMAGE, Upload.Kind.SLIDE}),
    UploadSlot.VIDEO: frozenset({Upload.Kind.VIDEO}),
}

SLOT_FIELDS: dict[UploadSlot, str] = {
    UploadSlot.ONE_PAGER: "one_pager_upload",
    UploadSlot.VIDEO: "video_upload",
}

EDITABLE_TEAM_FIELDS = frozenset({"name", "short_description", "website", "industry", "stage"})


# ------------------------------------------------------------------
# Listing eligibility
# ------------------------------------------------------------------


def _profile_for(team: Team, demo_day: DemoDay) -> FundraisingProfile | None:
    return (
        FundraisingProfile.objects.select_related("team")
        .filter(team=team, demo_day=demo_day)
        .first()
    )


def is_listing_eligible(team: Team, demo_day: DemoDay) -> bool:
    """Return True if *team* is published and pitched by an enabled founder at *demo_day*."""
    profile = _profile_for(team, demo_day)
    if profile is None or profile.status != FundraisingProfile.Status.PUBLISHED:
        return False
    return Participant.objects.enabled_founders(team, demo_day).exists()


def _listing_event_properties(team: Team, demo_day: DemoDay) -> dict[str, Any]:
    profile = _profile_for(team, demo_day)
    return {
        "teamUid": str(team.uid),
        "demoDayUid": str(demo_day.uid),
        "profileUid": str(profile.uid) if profile else None,
        "status": profile.status if profile else None,
        "foundersCount": Participant.objects.enabled_founders(team, demo_day).count(),
        "hasOnePager": bool(profile and profile.one_pager_upload_id),
        "hasVideo": bool(profile and profile.video_upload_id),
    }


@contextlib.contextmanager
def listing_transition(team: Team | None, demo_day: DemoDay) -> Iterator[None]:
    """
    Report a listing change if the wrapped write flips *team*'s eligibility.

    Eligibility is evaluated before and after the block; nothing is emitted when it is unchanged,
    so repeated or no-op writes never produce duplicate events.
    """
    if team is None:
        yield
        return

    before = is_listing_eligible(team, demo_day)
    yield
    after = is_listing_eligible(team, demo_day)
    if before == after:
        return

    event_name = PROFILE_ADDED_EVENT if after else PROFILE_REMOVED_EVENT
    logger.info(
        "listing_changed",
        team=str(team.uid),
        demo_day=demo_day.slug,
        listed=after,
    )
    track_event(event_name, str(team.uid), _listing_event_properties(team, demo_day))


# ------------------------------------------------------------------
# Status recompute
# ------------------------------------------------------------------


def _refresh_status(profile: FundraisingProfile) -> bool:
    """Persist the derived status if it differs from the stored one."""
    status = profile.derived_status()
    if status == profile.status:
        return False
    profile.status = status
    profile.save(update_fields=["status", "updated_at"])
    return True


def get_or_create_profile(team: Team, demo_day: DemoDay) -> FundraisingProfile:
    """
    Return the profile for (*team*, *demo_day*), creating a draft if missing.

    Raises:
        ConflictError: If a concurrent writer created the same profile first

    """
    profile = _profile_for(team, demo_day)
    if profile is not None:
        return profile
    try:
        with transaction.atomic():
            return FundraisingProfile.objects.create(team=team, demo_day=demo_day)
    except IntegrityError as exc:
        msg = f"A fundraising profile for team '{team}' already exists"
        raise ConflictError(msg) from exc


def recompute_fundraising_profile_status(team: Team, demo_day: DemoDay) -> FundraisingProfile:
    """
    Recompute and persist the publication status of (*team*, *demo_day*).

    Idempotent: a second call with no intervening change writes and emits nothing.

    Raises:
        NotFoundError: If the team has no profile for the demo day

    """
    with transaction.atomic(), listing_transition(team, demo_day):
        profile = _profile_for(team, demo_day)
        if profile is None:
            msg = f"No fundraising profile for team '{team}'"
            raise NotFoundError(msg)
        _refresh_status(profile)
    return profile


# ------------------------------------------------------------------
# Material edits
# ------------------------------------------------------------------


def validate_upload_reference(upload_uid: Any, slot: UploadSlot) -> Upload:
    """
    Confirm that *upload_uid* exists and its kind fits *slot*.

    Raises:
        NotFoundError: If no such upload exists
        ValidationError: If the upload kind is not accepted for the slot

    """
    try:
        upload = Upload.objects.filter(uid=upload_uid).first()
    except DjangoValidationError:
        upload = None
    if upload is None:
        msg = f"Upload '{upload_uid}' not found"
        raise NotFoundError(msg)
    if upload.kind not in SLOT_KINDS[slot]:
        msg = f"Upload of kind {upload.kind} cannot be used as {slot}"
        raise ValidationError(msg)
    return upload


def attach_upload(
    team: Team,
    demo_day: DemoDay,
    slot: UploadSlot | str,
    upload_uid: Any,
) -> FundraisingProfile:
    """Attach an upload to a material slot of the team's profile."""
    slot = UploadSlot(slot)
    upload = validate_upload_reference(upload_uid, slot)
    with transaction.atomic(), listing_transition(team, demo_day):
        profile = get_or_create_profile(team, demo_day)
        setattr(profile, SLOT_FIELDS[slot], upload)
        profile.save(update_fields=[SLOT_FIELDS[slot], "updated_at"])
        _refresh_status(profile)
    logger.info("upload_attached", team=str(team.uid), demo_day=demo_day.slug, slot=str(slot))
    return profile


def detach_upload(team: Team, demo_day: DemoDay, slot: UploadSlot | str) -> FundraisingProfile:
    """Clear a material slot of the team's profile."""
    slot = UploadSlot(slot)
    with transaction.atomic(), listing_transition(team, demo_day):
        profile = _profile_for(team, demo_day)
        if profile is None:
            msg = f"No fundraising profile for team '{team}'"
            raise NotFoundError(msg)
        setattr(profile, SLOT_FIELDS[slot], None)
        profile.save(update_fields=[SLOT_FIELDS[slot], "updated_at"])
        _refresh_status(profile)
    logger.info("upload_detached", team=str(team.uid), demo_day=demo_day.slug, slot=str(slot))
    return profile


def update_description(team: Team, demo_day: DemoDay, description: str) -> FundraisingProfile:
    """Replace the free-text pitch description."""
    with transaction.atomic(), listing_transition(team, demo_day):
        profile = get_or_create_profile(team, demo_day)
        profile.description = description
        profile.save(update_fields=["description", "updated_at"])
        _refresh_status(profile)
    return profile


def update_team_details(team: Team, demo_day: DemoDay, **fields: Any) -> FundraisingProfile:
    """
    Edit the team fields shown on the profile.

    A team is shared by every demo day it pitches at, so the status of all its profiles is
    recomputed, each inside its own listing transition.

    Raises:
        ValidationError: If a field is not editable or the name is blank

    """
    unknown = set(fields) - EDITABLE_TEAM_FIELDS
    if unknown:
        msg = f"Cannot edit team fields: {', '.join(sorted(unknown))}"
        raise ValidationError(msg)
    if "name" in fields and not (fields["name"] or "").strip():
        msg = "Team name cannot be blank"
        raise ValidationError(msg)

    demo_days = {demo_day.pk: demo_day}
    for existing in team.fundraising_profiles.select_related("demo_day"):
        demo_days.setdefault(existing.demo_day_id, existing.demo_day)

    with transaction.atomic(), contextlib.ExitStack() as stack:
        for affected in demo_days.values():
            stack.enter_context(listing_transition(team, affected))
        for name, value in fields.items():
            setattr(team, name, value)
        team.save(update_fields=[*fields, "updated_at"])
        get_or_create_profile(team, demo_day)
        for profile in team.fundraising_profiles.select_related("team"):
            _refresh_status(profile)

    return _profile_for(team, demo_day)


# ------------------------------------------------------------------
# Listing
# ------------------------------------------------------------------


def _is_admin_viewer(viewer: CustomUser, participant: Participant | None) -> bool:
    if viewer.is_staff or viewer.is_superuser:
        return True
    return participant is not None and participant.is_demo_day_admin


def _matches_any(field: str, values: str | Sequence[str]) -> Q:
    if isinstance(values, str):
        values = [values]
    query = Q()
    for value in values:
        query |= Q(**{f"{field}__iexact": value.strip()})
    return query


def get_profiles_for_viewer(
    viewer: CustomUser,
    demo_day: DemoDay,
    *,
    search: str | None = None,
    industry: str | Sequence[str] | None = None,
    stage: str | Sequence[str] | None = None,
    show_draft: bool = False,
) -> list[FundraisingProfile]:
    """
    Return the fundraising profiles *viewer* may browse, in the viewer's personal order.

    Only teams with at least one enabled founder are listed. Drafts are included only when an
    admin viewer asks for them. ``industry`` and ``stage`` accept one value or a list of values.

    Raises:
        AccessDeniedError: If the viewer is neither staff nor an enabled participant

    """
    # participants imports this module for listing_transition
    from demodays.participants import check_demo_day_access  # noqa: PLC0415

    participant = check_demo_day_access(viewer, demo_day)

    has_enabled_founder = Exists(
        Participant.objects.enabled().filter(
            demo_day=OuterRef("demo_day"),
            team=OuterRef("team"),
            type=Participant.Type.FOUNDER,
        ),
    )
    profiles = (
        FundraisingProfile.objects.filter(demo_day=demo_day)
        .filter(has_enabled_founder)
        .select_related("team", "one_pager_upload", "video_upload")
    )

    if not (show_draft and _is_admin_viewer(viewer, participant)):
        profiles = profiles.filter(
            status=FundraisingProfile.Status.PUBLISHED,
            one_pager_upload__isnull=False,
            video_upload__isnull=False,
        )
    if search:
        profiles = profiles.filter(team__name__icontains=search.strip())
    if industry:
        profiles = profiles.filter(_matches_any("team__industry", industry))
    if stage:
        profiles = profiles.filter(_matches_any("team__stage", stage))

    return personalized_order(profiles, str(viewer.uid), lambda p: str(p.team.uid))
