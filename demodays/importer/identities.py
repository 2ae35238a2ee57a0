"""Identity resolution for imported records: merge into an existing identity or create one."""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.core.exceptions import ValidationError as DjangoValidationError

from demodays.exceptions import ValidationError
from demodays.importer.types import VerbosityLevel
from demodays.investor_profiles import upgraded_access_level
from users.models import AccessLevel, CustomUser, InvalidEmailError


if TYPE_CHECKING:
    from demodays.importer.context import ImportContext
    from demodays.importer.records import InvestorRecord


def claimable_telegram(ctx: ImportContext, handle: str | None, identity_pk: int | None) -> bool:
    """
    Return True if *handle* may be stored on the identity *identity_pk*.

    A telegram handle has at most one owner. Owners are looked up once per batch and cached on
    the context; a handle owned by a different identity is not claimable.
    """
    if not handle:
        return False
    key = handle.lower()
    if key not in ctx.telegram_owners:
        ctx.telegram_owners[key] = (
            CustomUser.objects.filter(telegram_handle__iexact=handle)
            .values_list("pk", flat=True)
            .first()
        )
    owner = ctx.telegram_owners[key]
    return owner is None or owner == identity_pk


def _claim_telegram(ctx: ImportContext, handle: str, identity_pk: int) -> None:
    ctx.telegram_owners[handle.lower()] = identity_pk


def merge_identity(ctx: ImportContext, identity: CustomUser, record: InvestorRecord) -> CustomUser:
    """
    Merge *record* into an existing identity.

    Provided handles overwrite stored ones, a missing name is filled in, and the access tier is
    raised under the fixed upgrade table. A telegram handle owned by someone else is skipped.
    """
    changed: list[str] = []

    if record.name and not identity.name:
        identity.name = record.name
        changed.append("name")
    if record.twitter_handle and record.twitter_handle != identity.twitter_handle:
        identity.twitter_handle = record.twitter_handle
        changed.append("twitter_handle")
    if record.linkedin_handle and record.linkedin_handle != identity.linkedin_handle:
        identity.linkedin_handle = record.linkedin_handle
        changed.append("linkedin_handle")
    if record.telegram_handle and record.telegram_handle != identity.telegram_handle:
        if claimable_telegram(ctx, record.telegram_handle, identity.pk):
            identity.telegram_handle = record.telegram_handle
            changed.append("telegram_handle")
            _claim_telegram(ctx, record.telegram_handle, identity.pk)
        else:
            ctx.log(
                f"Telegram handle '{record.telegram_handle}' already taken; "
                f"left unset for {identity.email}",
                VerbosityLevel.DETAILED,
                "WARNING",
            )

    new_level = upgraded_access_level(identity.access_level, record.investment_type)
    if new_level != identity.access_level:
        identity.access_level = new_level
        changed.append("access_level")

    if changed:
        identity.save(update_fields=[*changed, "updated_at"])
    ctx.counters["updated_users"] += 1
    return identity


def create_identity(ctx: ImportContext, record: InvestorRecord) -> CustomUser:
    """Create a lowest-tier identity for *record*."""
    telegram = record.telegram_handle
    if not claimable_telegram(ctx, telegram, None):
        telegram = None
    try:
        identity = CustomUser.objects.create_user(
            email=record.email,
            name=record.name or record.email,
            access_level=AccessLevel.L0,
            twitter_handle=record.twitter_handle or "",
            linkedin_handle=record.linkedin_handle or "",
            telegram_handle=telegram,
        )
    except InvalidEmailError as exc:
        raise ValidationError(str(exc)) from exc
    except DjangoValidationError as exc:
        raise ValidationError.from_django(exc) from exc

    if telegram:
        _claim_telegram(ctx, telegram, identity.pk)
    ctx.counters["created_users"] += 1
    ctx.log(f"Created identity {identity.email}", VerbosityLevel.DETAILED, "SUCCESS")
    return identity


def resolve_identity(ctx: ImportContext, record: InvestorRecord) -> tuple[CustomUser, bool]:
    """Return ``(identity, created)`` for *record*."""
    existing = CustomUser.objects.find_by_email(record.email)
    if existing is not None:
        return merge_identity(ctx, existing, record), False
    return create_identity(ctx, record), True
