"""Login hook: first authenticated access turns an invitation into an enabled participation."""

from __future__ import annotations

from typing import Any

import structlog
from django.conf import settings
from django.contrib.auth.signals import user_logged_in
from django.dispatch import receiver

from demodays.lifecycle import get_current_demo_day
from demodays.participants import ensure_activated
from utils.email_utils import hash_email


logger = structlog.get_logger("auth")


def _hash_or_plain(value: str | None) -> str | None:
    """Hash sensitive values if LOG_EMAIL_HASH is enabled, otherwise return as-is."""
    if not value:
        return value
    if getattr(settings, "LOG_EMAIL_HASH", True):
        return hash_email(value)
    return value


@receiver(user_logged_in)
def activate_on_login(
    sender: type[Any],
    request: Any,
    user: Any,
    **_kwargs: Any,
) -> None:
    """Enable the identity's invited participation in the current demo day, if any."""
    del sender, request, _kwargs
    demo_day = get_current_demo_day()
    status = ensure_activated(user, demo_day) if demo_day else None
    logger.info(
        "login",
        user_id=getattr(user, "pk", None),
        user_email=_hash_or_plain(getattr(user, "email", None)),
        demo_day=demo_day.slug if demo_day else None,
        participant_status=status,
    )
