"""Pydantic models for importer input records and per-row / aggregate results."""

from __future__ import annotations

from typing import Any, Literal

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email
from pydantic import BaseModel, ConfigDict, Field, field_validator

from demodays.importer.handles import normalize_linkedin, normalize_telegram, normalize_twitter
from demodays.importer.types import MembershipRole, RowStatus
from teams.models import MAX_ROLE_LENGTH, MAX_TEAM_NAME_LENGTH
from users.models import MAX_HANDLE_LENGTH, MAX_NAME_LENGTH


type InvestmentType = Literal["ANGEL", "FUND", "ANGEL_AND_FUND"]

FUND_LEVEL_TYPES = frozenset({"FUND", "ANGEL_AND_FUND"})


def _text(value: Any) -> str | None:
    if value is None:
        return None
    return str(value).strip() or None


def _fits_handle(handle: str | None) -> str | None:
    if handle is not None and len(handle) > MAX_HANDLE_LENGTH:
        msg = f"Handle is longer than {MAX_HANDLE_LENGTH} characters"
        raise ValueError(msg)
    return handle


class InvestorRecord(BaseModel):
    """One investor row of a bulk import."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore", frozen=True)

    email: str
    name: str | None = Field(default=None, max_length=MAX_NAME_LENGTH)
    organization: str | None = Field(default=None, max_length=MAX_TEAM_NAME_LENGTH)
    organization_email: str | None = None
    twitter_handle: str | None = None
    linkedin_handle: str | None = None
    telegram_handle: str | None = None
    role: str | None = Field(default=None, max_length=MAX_ROLE_LENGTH)
    investment_type: InvestmentType | None = None
    typical_check_size: int | None = Field(default=None, ge=0)
    invest_in_startup_stages: list[str] | None = None
    sec_rules_accepted: bool | None = None
    make_team_lead: bool | None = None

    @field_validator(
        "name",
        "organization",
        "organization_email",
        "twitter_handle",
        "linkedin_handle",
        "telegram_handle",
        "role",
        "investment_type",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        value = value.lower()
        try:
            validate_email(value)
        except DjangoValidationError as exc:
            msg = f"Invalid email address: {value}"
            raise ValueError(msg) from exc
        return value

    @field_validator("investment_type", mode="before")
    @classmethod
    def _upper_investment_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper().replace(" ", "_").replace("&", "AND")
        return value

    @field_validator("invest_in_startup_stages", mode="before")
    @classmethod
    def _split_stages(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [stage.strip() for stage in value.split(",") if stage.strip()] or None
        return value

    @field_validator("twitter_handle")
    @classmethod
    def _twitter(cls, value: str | None) -> str | None:
        return _fits_handle(normalize_twitter(value))

    @field_validator("linkedin_handle")
    @classmethod
    def _linkedin(cls, value: str | None) -> str | None:
        return _fits_handle(normalize_linkedin(value))

    @field_validator("telegram_handle")
    @classmethod
    def _telegram(cls, value: str | None) -> str | None:
        return _fits_handle(normalize_telegram(value))

    @property
    def is_fund_level(self) -> bool:
        """Whether the record describes a fund rather than an individual investor."""
        return self.investment_type in FUND_LEVEL_TYPES

    def investor_preferences(self) -> dict[str, Any]:
        """Return the investor profile fields carried by the record."""
        return {
            "investment_type": self.investment_type,
            "typical_check_size": self.typical_check_size,
            "invest_in_startup_stages": self.invest_in_startup_stages,
            "sec_rules_accepted": self.sec_rules_accepted,
        }


class RowOutcome(BaseModel):
    """Result of importing one record. Echoes the input and reports resolved ids."""

    index: int
    email: str
    name: str | None = None
    organization: str | None = None
    twitter_handle: str | None = None
    linkedin_handle: str | None = None
    make_team_lead: bool | None = None
    will_be_team_lead: bool = False
    status: RowStatus = "success"
    message: str | None = None
    identity_uid: str | None = None
    team_uid: str | None = None
    participant_uid: str | None = None
    membership_role: MembershipRole = MembershipRole.NONE

    @classmethod
    def error(cls, index: int, raw: Any, message: str) -> RowOutcome:
        """Build an error row from a record or a raw mapping."""
        data = raw.model_dump() if isinstance(raw, BaseModel) else dict(raw or {})
        make_team_lead = data.get("make_team_lead")
        return cls(
            index=index,
            email=_text(data.get("email")) or "",
            name=_text(data.get("name")),
            organization=_text(data.get("organization")),
            twitter_handle=_text(data.get("twitter_handle")),
            linkedin_handle=_text(data.get("linkedin_handle")),
            make_team_lead=make_team_lead if isinstance(make_team_lead, bool) else None,
            status="error",
            message=message,
        )


class ImportSummary(BaseModel):
    """Aggregate counters over a batch."""

    total: int = 0
    created_users: int = 0
    updated_users: int = 0
    created_teams: int = 0
    updated_memberships: int = 0
    promoted_to_lead: int = 0
    errors: int = 0


class BulkImportResult(BaseModel):
    """Batch response: the summary plus one outcome per input record, in input order."""

    summary: ImportSummary
    rows: list[RowOutcome]
