"""Notification sender used by demo day engagement flows."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import structlog
from django.conf import settings
from django.core.mail import send_mass_mail

from utils.email_utils import hash_email


logger = structlog.get_logger(__name__)

#: Subject lines per template id. Message bodies are rendered from the payload.
SUBJECTS: dict[str, str] = {
    "demo-day-status-updated": "{title} is now {status}",
    "demo-day-invitation": "You are invited to {title}",
}


@dataclass(frozen=True)
class NotificationRequest:
    """A structured send request: template id, recipients and template payload."""

    template_id: str
    recipients: list[str]
    payload: dict[str, Any] = field(default_factory=dict)


def _render(request: NotificationRequest) -> tuple[str, str]:
    subject = SUBJECTS.get(request.template_id, request.template_id).format(**request.payload)
    body = "\n".join(f"{key}: {value}" for key, value in sorted(request.payload.items()))
    return subject, body


def send_notification(request: NotificationRequest) -> int:
    """
    Send *request* to each recipient individually.

    Args:
        request: What to send and to whom

    Returns:
        int: Number of messages handed to the mail backend

    """
    if not request.recipients:
        return 0

    subject, body = _render(request)
    messages = [
        (subject, body, settings.DEFAULT_FROM_EMAIL, [recipient])
        for recipient in request.recipients
    ]
    sent = send_mass_mail(messages, fail_silently=False)
    logger.info(
        "notification_sent",
        template_id=request.template_id,
        recipients=[
            hash_email(r) if settings.LOG_EMAIL_HASH else r for r in request.recipients
        ],
        sent=sent,
    )
    return sent
