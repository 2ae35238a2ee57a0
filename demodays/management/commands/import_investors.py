"""Management command for bulk-importing investors from a CSV file into a demo day."""

import traceback
from pathlib import Path
from typing import Any

import pandas as pd
from django.core.management.base import BaseCommand, CommandError, CommandParser
from django.db import transaction

from demodays.exceptions import NotFoundError
from demodays.importer import add_investor_participants_bulk
from demodays.importer.types import VerbosityLevel
from demodays.lifecycle import get_demo_day
from users.models import CustomUser


#: Header spellings accepted besides the record field names themselves.
COLUMN_ALIASES = {
    "full_name": "name",
    "company": "organization",
    "fund": "organization",
    "twitter": "twitter_handle",
    "x": "twitter_handle",
    "linkedin": "linkedin_handle",
    "telegram": "telegram_handle",
    "title": "role",
    "check_size": "typical_check_size",
    "stages": "invest_in_startup_stages",
    "team_lead": "make_team_lead",
}

TRUTHY = frozenset({"1", "true", "yes", "y", "x"})
FALSY = frozenset({"0", "false", "no", "n"})
BOOLEAN_COLUMNS = ("sec_rules_accepted", "make_team_lead")


def normalize_column(column: str) -> str:
    """Map a CSV header to an :class:`~demodays.importer.InvestorRecord` field name."""
    key = column.strip().lower().replace("-", "_").replace(" ", "_")
    return COLUMN_ALIASES.get(key, key)


def _boolean(value: str) -> bool | str:
    lowered = value.strip().lower()
    if lowered in TRUTHY:
        return True
    if lowered in FALSY:
        return False
    return value


def read_records(path: Path) -> list[dict[str, Any]]:
    """Read *path* into raw record mappings. Empty cells are left out."""
    frame = pd.read_csv(path, dtype=str, keep_default_na=False)
    frame = frame.rename(columns=normalize_column)
    records = []
    for row in frame.to_dict(orient="records"):
        record = {key: value for key, value in row.items() if value.strip()}
        for column in BOOLEAN_COLUMNS:
            if column in record:
                record[column] = _boolean(record[column])
        records.append(record)
    return records


class Command(BaseCommand):
    """Import investors from a CSV file and add them to a demo day."""

    help = "Import investors from a CSV file into a demo day"

    def add_arguments(self, parser: CommandParser) -> None:
        """Add command line arguments."""
        parser.add_argument("csv_path", type=Path, help="Path to the CSV file")
        parser.add_argument(
            "--demo-day",
            type=str,
            required=True,
            help="Slug of the target demo day",
        )
        parser.add_argument(
            "--actor",
            type=str,
            default=None,
            help="Email of the admin running the import (recorded in the logs)",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Run the import and report the outcome, then roll everything back",
        )

    def handle(self, *args: Any, **options: Any) -> None:  # noqa: ARG002
        """Execute the command to import investors."""
        verbosity = VerbosityLevel(min(options["verbosity"], VerbosityLevel.DEBUG.value))
        csv_path: Path = options["csv_path"]
        dry_run = options["dry_run"]

        if not csv_path.is_file():
            msg = f"CSV file not found: {csv_path}"
            raise CommandError(msg)

        try:
            demo_day = get_demo_day(options["demo_day"])
        except NotFoundError as exc:
            raise CommandError(exc.message) from exc

        actor = None
        if options["actor"]:
            actor = CustomUser.objects.find_by_email(options["actor"])
            if actor is None:
                msg = f"Unknown actor: {options['actor']}"
                raise CommandError(msg)

        records = read_records(csv_path)
        self._log(f"Read {len(records)} rows from {csv_path}", verbosity, VerbosityLevel.NORMAL)
        if dry_run:
            self._log(
                "DRY RUN: No database changes will be kept",
                verbosity,
                VerbosityLevel.MINIMAL,
                style="WARNING",
            )

        try:
            with transaction.atomic():
                result = add_investor_participants_bulk(
                    demo_day,
                    records,
                    actor=actor,
                    verbosity=verbosity,
                    log_fn=self._log,
                )
                if dry_run:
                    transaction.set_rollback(True)
        except Exception as exc:
            self.stderr.write(self.style.ERROR(f"Import failed: {exc!s}"))
            if verbosity.value >= VerbosityLevel.DEBUG.value:
                self.stderr.write(traceback.format_exc())
            raise CommandError(str(exc)) from exc

        for row in result.rows:
            if row.status == "error":
                self._log(
                    f"Row {row.index} ({row.email or '?'}): {row.message}",
                    verbosity,
                    VerbosityLevel.MINIMAL,
                    style="ERROR",
                )

        summary = result.summary
        self._log(
            f"{'Dry run' if dry_run else 'Import'} finished: {summary.total} rows, "
            f"{summary.created_users} new identities, {summary.updated_users} updated, "
            f"{summary.created_teams} new teams, {summary.updated_memberships} memberships, "
            f"{summary.promoted_to_lead} leads, {summary.errors} errors",
            verbosity,
            VerbosityLevel.MINIMAL,
            style="WARNING" if summary.errors else "SUCCESS",
        )

    def _log(
        self,
        message: str,
        verbosity: VerbosityLevel,
        min_level: VerbosityLevel,
        style: str | None = None,
    ) -> None:
        """Log a message if verbosity level is sufficient."""
        if verbosity.value >= min_level.value:
            if style == "SUCCESS":
                self.stdout.write(self.style.SUCCESS(message))
            elif style == "WARNING":
                self.stdout.write(self.style.WARNING(message))
            elif style == "ERROR":
                self.stderr.write(self.style.ERROR(message))
            else:
                self.stdout.write(message)
