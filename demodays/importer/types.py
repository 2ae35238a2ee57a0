"""Shared enums and callback protocols for the investor importer."""

from enum import Enum, StrEnum
from typing import Literal, Protocol


class VerbosityLevel(Enum):
    """Django management-command verbosity levels (mirrors the built-in ``--verbosity`` flag)."""

    MINIMAL = 0
    NORMAL = 1
    DETAILED = 2
    DEBUG = 3


class MembershipRole(StrEnum):
    """Standing of the imported identity within its organization after the import."""

    LEAD = "LEAD"
    MEMBER = "MEMBER"
    NONE = "NONE"


#: Outcome of a single record.
type RowStatus = Literal["success", "error"]


class LogFn(Protocol):
    """
    Callback signature accepted by :meth:`ImportContext.log`.

    Matches :meth:`demodays.management.commands.import_investors.Command._log`.
    """

    def __call__(
        self,
        message: str,
        verbosity: VerbosityLevel,
        min_level: VerbosityLevel,
        style: str | None = None,
    ) -> None: ...
