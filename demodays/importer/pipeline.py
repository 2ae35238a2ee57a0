"""
Per-record import steps and the batch driver.

The batch runs in one transaction. Every record gets a savepoint: business-rule failures
(:class:`~demodays.exceptions.DemoDayError`, invalid records) roll back that record only and
become error rows. Anything else propagates and aborts the whole batch.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from django.db import transaction
from django.utils import timezone
from pydantic import ValidationError as PydanticValidationError

from demodays.analytics import AnalyticsEvent, track_events
from demodays.exceptions import DemoDayError, ImportRowError
from demodays.fundraising import listing_transition
from demodays.importer.context import ImportContext, structlog_log_fn
from demodays.importer.identities import resolve_identity
from demodays.importer.organizations import infer_team_lead, resolve_team, upsert_membership
from demodays.importer.records import BulkImportResult, ImportSummary, InvestorRecord, RowOutcome
from demodays.importer.types import LogFn, MembershipRole, VerbosityLevel
from demodays.investor_profiles import (
    upsert_identity_investor_profile,
    upsert_team_investor_profile,
)
from demodays.models import Participant
from demodays.participants import PARTICIPANT_ADDED_EVENT, snapshot
from demodays.types import InvestorSeat


if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from events.models import DemoDay
    from users.models import CustomUser


logger = structlog.get_logger(__name__)


def _ensure_not_participating(ctx: ImportContext, record: InvestorRecord) -> None:
    exists = (
        Participant.objects.alive()
        .filter(demo_day=ctx.demo_day, identity__email__iexact=record.email)
        .exists()
    )
    if exists:
        raise ImportRowError(record.email, "Participant already exists for this demo day")


def _upsert_participant(ctx: ImportContext, identity: CustomUser, *, created: bool) -> Participant:
    """Create the INVESTOR participant, reviving a soft-deleted row if there is one."""
    participant = (
        Participant.objects.select_related("team")
        .filter(demo_day=ctx.demo_day, identity=identity)
        .first()
    )
    if participant is None:
        participant = Participant(
            demo_day=ctx.demo_day,
            identity=identity,
            status=Participant.Status.INVITED if created else Participant.Status.ENABLED,
            status_updated_at=timezone.now(),
        )
    else:
        participant.is_deleted = False
        participant.set_status(Participant.Status.ENABLED)

    # A revived founder row loses its team, which may unlist that team.
    with listing_transition(participant.team, ctx.demo_day):
        participant.apply_seat(InvestorSeat())
        participant.save()
    return participant


def import_record(ctx: ImportContext, index: int, record: InvestorRecord) -> RowOutcome:
    """
    Apply one record. Must run inside a savepoint.

    Raises:
        DemoDayError: On a business-rule failure for this record

    """
    _ensure_not_participating(ctx, record)

    identity, created = resolve_identity(ctx, record)
    outcome = RowOutcome(
        index=index,
        email=record.email,
        name=record.name,
        organization=record.organization,
        twitter_handle=record.twitter_handle,
        linkedin_handle=record.linkedin_handle,
        make_team_lead=record.make_team_lead,
        identity_uid=str(identity.uid),
    )

    if record.organization:
        team, _team_created = resolve_team(ctx, record.organization)
        if record.is_fund_level:
            upsert_team_investor_profile(team, **record.investor_preferences())
        will_be_lead = infer_team_lead(record, team, identity)
        membership = upsert_membership(
            ctx,
            identity,
            team,
            will_be_lead=will_be_lead,
            role_title=record.role,
        )
        outcome = outcome.model_copy(
            update={
                "team_uid": str(team.uid),
                "will_be_team_lead": will_be_lead,
                "membership_role": membership,
            },
        )
    else:
        outcome = outcome.model_copy(update={"membership_role": MembershipRole.NONE})

    if record.investment_type and not record.is_fund_level:
        upsert_identity_investor_profile(identity, **record.investor_preferences())

    participant = _upsert_participant(ctx, identity, created=created)
    ctx.pending_events.append(
        AnalyticsEvent(
            name=PARTICIPANT_ADDED_EVENT,
            distinct_id=str(identity.uid),
            properties={
                "demoDayUid": str(ctx.demo_day.uid),
                "identityCreated": created,
                "source": "bulk-import",
                "before": None,
                "after": snapshot(participant),
            },
        ),
    )
    return outcome.model_copy(update={"participant_uid": str(participant.uid)})


def _process(ctx: ImportContext, index: int, raw: InvestorRecord | Mapping[str, Any]) -> RowOutcome:
    try:
        record = raw if isinstance(raw, InvestorRecord) else InvestorRecord.model_validate(raw)
    except PydanticValidationError as exc:
        message = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        ctx.counters["errors"] += 1
        ctx.log(f"Row {index}: invalid record ({message})", VerbosityLevel.NORMAL, "WARNING")
        return RowOutcome.error(index, raw, message)

    row_ctx = ctx.row_scope()
    try:
        with transaction.atomic():
            outcome = import_record(row_ctx, index, record)
    except DemoDayError as exc:
        ctx.counters["errors"] += 1
        ctx.log(f"Row {index}: {record.email}: {exc.message}", VerbosityLevel.NORMAL, "WARNING")
        logger.warning(
            "import_row_rejected",
            demo_day=ctx.demo_day.slug,
            row=index,
            reason=exc.message,
        )
        return RowOutcome.error(index, record, exc.message)

    ctx.commit_row(row_ctx)
    ctx.log(f"Row {index}: imported {record.email}", VerbosityLevel.DETAILED, "SUCCESS")
    return outcome


def add_investor_participants_bulk(
    demo_day: DemoDay,
    records: Iterable[InvestorRecord | Mapping[str, Any]],
    *,
    actor: CustomUser | None = None,
    verbosity: VerbosityLevel = VerbosityLevel.NORMAL,
    log_fn: LogFn = structlog_log_fn,
) -> BulkImportResult:
    """
    Import a batch of investor records into *demo_day*.

    Args:
        demo_day: Target demo day
        records: Validated records or raw mappings (validated here)
        actor: Admin running the import, for the audit log
        verbosity: How chatty :attr:`ImportContext.log` is
        log_fn: Output callback, e.g. a management command's writer

    Returns:
        BulkImportResult: ``{summary, rows}`` with one row per input record

    Raises:
        Exception: Any unclassified failure, after rolling back the whole batch

    """
    batch = list(records)
    ctx = ImportContext(demo_day=demo_day, verbosity=verbosity, log_fn=log_fn, actor=actor)
    ctx.log(f"Importing {len(batch)} investor records into {demo_day}", VerbosityLevel.NORMAL)

    try:
        with transaction.atomic():
            rows = [_process(ctx, index, raw) for index, raw in enumerate(batch)]
            track_events(ctx.pending_events)
    except Exception:
        logger.exception("investor_import_aborted", demo_day=demo_day.slug, records=len(batch))
        raise

    summary = ImportSummary(
        total=len(batch),
        created_users=ctx.counters["created_users"],
        updated_users=ctx.counters["updated_users"],
        created_teams=ctx.counters["created_teams"],
        updated_memberships=ctx.counters["updated_memberships"],
        promoted_to_lead=ctx.counters["promoted_to_lead"],
        errors=ctx.counters["errors"],
    )
    logger.info(
        "investor_import_finished",
        demo_day=demo_day.slug,
        actor=str(actor.uid) if actor else None,
        **summary.model_dump(),
    )
    return BulkImportResult(summary=summary, rows=rows)
