"""Timesheet Ledger - A personal time-tracking and invoicing ledger.

This package records work sessions, derives worked hours and earnings from them,
and exports/imports the collection as backups or spreadsheet tables.
"""

__version__ = "0.1.0"

from .entries.hours import compute_hours
from .entries.store import EntryStore
from .interchange.backup import export_backup, import_backup
from .interchange.table import export_table
from .reports.aggregator import get_daily_summaries, get_stats


__all__ = [
    "EntryStore",
    "compute_hours",
    "export_backup",
    "export_table",
    "get_daily_summaries",
    "get_stats",
    "import_backup",
]
