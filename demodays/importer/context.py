"""Typed import context - Parameter Object for the investor importer."""

from __future__ import annotations

import copy
import dataclasses
from collections import ChainMap, Counter
from collections.abc import MutableMapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import structlog

from demodays.importer.types import LogFn, VerbosityLevel


if TYPE_CHECKING:
    from demodays.analytics import AnalyticsEvent
    from events.models import DemoDay
    from teams.models import Team
    from users.models import CustomUser


logger = structlog.get_logger("demodays.importer")


def structlog_log_fn(
    message: str,
    verbosity: VerbosityLevel,
    min_level: VerbosityLevel,
    style: str | None = None,
) -> None:
    """Default :class:`LogFn` for imports that do not run from a management command."""
    if verbosity.value < min_level.value:
        return
    if style == "ERROR":
        logger.error(message)
    elif style == "WARNING":
        logger.warning(message)
    else:
        logger.info(message)


@dataclass(frozen=True)
class ImportContext:
    """
    Immutable, typed context shared across one import call.

    The batch-scoped caches live here and nowhere else, so concurrent imports never share state:

    * :attr:`team_cache` -- lower-cased organization name to :class:`~teams.models.Team`.
    * :attr:`telegram_owners` -- lower-cased telegram handle to the owning identity pk
      (``None`` when nobody owns it).

    Each record works on a :meth:`row_scope` whose writes are folded back with
    :meth:`commit_row` only when the record succeeds, so a rolled-back record never leaves a
    cached team or handle owner behind.
    """

    demo_day: DemoDay
    verbosity: VerbosityLevel = VerbosityLevel.NORMAL
    log_fn: LogFn = structlog_log_fn
    actor: CustomUser | None = None
    team_cache: MutableMapping[str, Team] = field(default_factory=dict)
    telegram_owners: MutableMapping[str, int | None] = field(default_factory=dict)
    counters: Counter[str] = field(default_factory=Counter)
    pending_events: list[AnalyticsEvent] = field(default_factory=list)

    # ------------------------------------------------------------------
    # Convenience helpers
    # ------------------------------------------------------------------

    def log(
        self,
        message: str,
        min_level: VerbosityLevel,
        style: str | None = None,
    ) -> None:
        """Emit *message* when ``self.verbosity >= min_level``."""
        self.log_fn(message, self.verbosity, min_level, style)

    def evolve(self, **changes: Any) -> ImportContext:
        """Return a shallow copy with *changes* applied (frozen-dataclass update)."""
        return dataclasses.replace(self, **changes)

    # ------------------------------------------------------------------
    # Row scoping
    # ------------------------------------------------------------------

    def row_scope(self) -> ImportContext:
        """Return a child context whose cache writes and counters stay local to one record."""
        return self.evolve(
            team_cache=ChainMap({}, self.team_cache),
            telegram_owners=ChainMap({}, self.telegram_owners),
            counters=Counter(),
            pending_events=[],
        )

    def cached_team(self, key: str) -> Team | None:
        """
        Return the cached team for *key*.

        Inside a row scope a team inherited from the batch is copied into the row's own map
        first, so in-memory changes made while handling the record are dropped with it.
        """
        team = self.team_cache.get(key)
        if team is None or not isinstance(self.team_cache, ChainMap):
            return team
        if key not in self.team_cache.maps[0]:
            team = copy.copy(team)
            self.team_cache[key] = team
        return team

    def commit_row(self, row: ImportContext) -> None:
        """Fold the local state of a successful *row* scope into this context."""
        if isinstance(row.team_cache, ChainMap):
            self.team_cache.update(row.team_cache.maps[0])
        if isinstance(row.telegram_owners, ChainMap):
            self.telegram_owners.update(row.telegram_owners.maps[0])
        self.counters.update(row.counters)
        self.pending_events.extend(row.pending_events)
