"""
Error taxonomy of the demo day subsystem.

Every business-rule failure raised by the participant registry, the fundraising profile manager,
the team-lead workflow and the bulk importer derives from :class:`DemoDayError`, so callers can
tell rule violations apart from infrastructure failures.
"""

from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from django.core.exceptions import ValidationError as DjangoValidationError


class DemoDayError(Exception):
    """Base class for demo day business-rule failures."""

    def __init__(self, message: str) -> None:
        """
        Initialize the error.

        Args:
            message: Human readable description, safe to show to admins

        """
        self.message = message
        super().__init__(message)


class ValidationError(DemoDayError):
    """Input is structurally valid but violates a business rule."""

    @classmethod
    def from_django(cls, exc: DjangoValidationError) -> ValidationError:
        """Build an error naming every field Django's model validation rejected."""
        if not hasattr(exc, "error_dict"):
            return cls("; ".join(exc.messages))
        return cls(
            "; ".join(
                f"{field}: {' '.join(messages)}" for field, messages in exc.message_dict.items()
            ),
        )


class ConflictError(DemoDayError):
    """The operation would duplicate an existing record."""


class NotFoundError(DemoDayError):
    """A referenced demo day, participant, team or upload does not exist."""


class AccessDeniedError(DemoDayError):
    """The caller does not meet the prerequisites for the operation."""


class ImportRowError(DemoDayError):
    """A single bulk-import record was rejected. Never aborts the batch."""

    def __init__(self, email: str, message: str) -> None:
        """Initialize the row error for the record identified by *email*."""
        self.email = email
        super().__init__(message)
