# timesheet_ledger/entries/models.py
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import NotRequired, TypedDict


DEFAULT_HOURLY_RATE = 50

ENTRIES_KEY = "timesheet_entries"
SETTINGS_KEY = "timesheet_settings"


class TimeEntry(TypedDict):
    """A recorded work session, stored and exported with these exact keys"""

    id: str
    date: str
    startTime: str
    endTime: str
    description: str
    isPaid: bool
    hourlyRate: NotRequired[float | None]
    createdAt: str
    updatedAt: str


class EntryDraft(TypedDict):
    """Fields supplied by the caller when creating an entry"""

    date: str
    startTime: str
    endTime: str
    description: str
    isPaid: NotRequired[bool]
    hourlyRate: NotRequired[float | None]


class Settings(TypedDict):
    defaultHourlyRate: float


def default_settings() -> Settings:
    return {"defaultHourlyRate": DEFAULT_HOURLY_RATE}


class PaymentStatus(Enum):
    """Payment filter used by entry queries"""

    ALL = "all"
    PAID = "paid"
    UNPAID = "unpaid"


@dataclass(frozen=True)
class DailySummary:
    """Totals for all entries sharing one calendar date"""

    date: str
    total_hours: float
    total_earnings: float
    entries_count: int
    is_paid: bool

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class TimesheetStats:
    """Totals across the whole entry collection"""

    total_hours: float = 0.0
    total_earnings: float = 0.0
    paid_hours: float = 0.0
    unpaid_hours: float = 0.0
    paid_earnings: float = 0.0
    unpaid_earnings: float = 0.0
    average_hours_per_day: float = 0.0
    days_worked: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class EntryTotals:
    """Totals for a filtered view of entries"""

    total_hours: float = 0.0
    total_earnings: float = 0.0
    paid_earnings: float = 0.0
    unpaid_earnings: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


def iso_timestamp(moment: datetime) -> str:
    """UTC timestamp with milliseconds and a Z suffix, e.g. 2024-01-01T12:00:00.000Z"""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
