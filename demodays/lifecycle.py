"""Demo day lifecycle: creation, detail edits and status transitions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from django.db import IntegrityError, transaction

from demodays.analytics import track_event
from demodays.exceptions import ConflictError, NotFoundError, ValidationError
from demodays.models import Participant
from demodays.notifications import NotificationRequest, send_notification
from events.models import DemoDay


if TYPE_CHECKING:
    from datetime import datetime

    from users.models import CustomUser


logger = structlog.get_logger(__name__)

DETAIL_FIELDS = frozenset(
    {"title", "description", "start_date", "end_date", "host", "notifications_enabled"},
)


def get_demo_day(slug: str) -> DemoDay:
    """
    Return the live demo day with *slug*.

    Raises:
        NotFoundError: If it does not exist or was soft-deleted

    """
    demo_day = DemoDay.objects.alive().filter(slug=slug).first()
    if demo_day is None:
        msg = f"Demo day '{slug}' not found"
        raise NotFoundError(msg)
    return demo_day


def get_current_demo_day() -> DemoDay | None:
    """Return the most recent live demo day that is not archived."""
    return DemoDay.objects.current()


def _check_window(start_date: datetime, end_date: datetime) -> None:
    if end_date < start_date:
        msg = "A demo day cannot end before it starts"
        raise ValidationError(msg)


def _actor_id(actor: CustomUser | None) -> str:
    return str(actor.uid) if actor else "system"


def create_demo_day(
    *,
    slug: str,
    title: str,
    start_date: datetime,
    end_date: datetime,
    status: str = DemoDay.Status.UPCOMING,
    actor: CustomUser | None = None,
    **details: Any,
) -> DemoDay:
    """
    Create a demo day.

    Raises:
        ValidationError: If the time window is inverted or a field is unknown
        ConflictError: If the slug is taken

    """
    _check_window(start_date, end_date)
    unknown = set(details) - DETAIL_FIELDS
    if unknown:
        msg = f"Unknown demo day fields: {', '.join(sorted(unknown))}"
        raise ValidationError(msg)

    with transaction.atomic():
        if DemoDay.objects.filter(slug=slug).exists():
            msg = f"A demo day with slug '{slug}' already exists"
            raise ConflictError(msg)
        try:
            with transaction.atomic():
                demo_day = DemoDay.objects.create(
                    slug=slug,
                    title=title,
                    start_date=start_date,
                    end_date=end_date,
                    status=status,
                    **details,
                )
        except IntegrityError as exc:
            msg = f"A demo day with slug '{slug}' already exists"
            raise ConflictError(msg) from exc

        track_event(
            "demo-day-created",
            _actor_id(actor),
            {"demoDayUid": str(demo_day.uid), "slug": slug, "status": status},
        )

    logger.info("demo_day_created", demo_day=slug, status=status)
    return demo_day


def _notify_status_change(demo_day: DemoDay) -> None:
    recipients = list(
        Participant.objects.enabled()
        .filter(demo_day=demo_day)
        .values_list("identity__email", flat=True),
    )
    send_notification(
        NotificationRequest(
            template_id="demo-day-status-updated",
            recipients=recipients,
            payload={
                "title": demo_day.title,
                "status": demo_day.get_status_display(),
                "slug": demo_day.slug,
            },
        ),
    )


def update_demo_day(
    demo_day: DemoDay,
    *,
    actor: CustomUser | None = None,
    status: str | None = None,
    **changes: Any,
) -> DemoDay:
    """
    Apply a partial update to *demo_day*.

    Detail edits and status transitions are reported separately, each only when something
    actually changed. Participants are e-mailed about a status change once the transaction
    commits, when notifications are enabled.

    Raises:
        ValidationError: On unknown fields, an unknown status or an inverted time window

    """
    unknown = set(changes) - DETAIL_FIELDS
    if unknown:
        msg = f"Unknown demo day fields: {', '.join(sorted(unknown))}"
        raise ValidationError(msg)
    if status is not None and status not in DemoDay.Status.values:
        msg = f"Unknown demo day status '{status}'"
        raise ValidationError(msg)

    changed_details = sorted(
        name for name, value in changes.items() if getattr(demo_day, name) != value
    )
    old_status = demo_day.status
    status_changed = status is not None and status != old_status

    _check_window(
        changes.get("start_date", demo_day.start_date),
        changes.get("end_date", demo_day.end_date),
    )

    with transaction.atomic():
        for name in changed_details:
            setattr(demo_day, name, changes[name])
        if status_changed:
            demo_day.status = status
        if changed_details or status_changed:
            demo_day.save()

        if changed_details:
            track_event(
                "demo-day-details-updated",
                _actor_id(actor),
                {"demoDayUid": str(demo_day.uid), "fields": changed_details},
            )
        if status_changed:
            track_event(
                "demo-day-status-updated",
                _actor_id(actor),
                {
                    "demoDayUid": str(demo_day.uid),
                    "fromStatus": old_status,
                    "toStatus": demo_day.status,
                },
            )
            if demo_day.notifications_enabled:
                transaction.on_commit(lambda: _notify_status_change(demo_day), robust=True)

    logger.info(
        "demo_day_updated",
        demo_day=demo_day.slug,
        fields=changed_details,
        from_status=old_status,
        to_status=demo_day.status,
    )
    return demo_day


def soft_delete_demo_day(demo_day: DemoDay) -> DemoDay:
    """Hide *demo_day* from every lookup without removing it."""
    demo_day.is_deleted = True
    demo_day.save(update_fields=["is_deleted", "updated_at"])
    logger.info("demo_day_deleted", demo_day=demo_day.slug)
    return demo_day
