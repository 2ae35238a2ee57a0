"""
Bulk investor importer.

Merges a batch of external investor records into identities, teams, memberships and demo day
participants inside a single transaction. Each record runs in its own savepoint: a rejected
record becomes an error row while the rest of the batch is applied.
"""

from demodays.importer.pipeline import add_investor_participants_bulk
from demodays.importer.records import BulkImportResult, ImportSummary, InvestorRecord, RowOutcome


__all__ = [
    "BulkImportResult",
    "ImportSummary",
    "InvestorRecord",
    "RowOutcome",
    "add_investor_participants_bulk",
]
