from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from timesheet_ledger.api.dependencies import get_store
from timesheet_ledger.entries.store import EntryStore
from timesheet_ledger.reports.aggregator import get_daily_summaries, get_stats


router = APIRouter(tags=["reports"])


class DailySummaryOut(BaseModel):
    date: str
    total_hours: float
    total_earnings: float
    entries_count: int
    is_paid: bool


class StatsOut(BaseModel):
    total_hours: float
    total_earnings: float
    paid_hours: float
    unpaid_hours: float
    paid_earnings: float
    unpaid_earnings: float
    average_hours_per_day: float
    days_worked: int


@router.get("/summaries")
async def daily_summaries(
    limit: int | None = Query(default=None, ge=1), store: EntryStore = Depends(get_store)
) -> list[DailySummaryOut]:
    """Return per-day totals, most recent first."""
    return [summary.to_dict() for summary in get_daily_summaries(store.entries, limit=limit)]


@router.get("/stats")
async def stats(store: EntryStore = Depends(get_store)) -> StatsOut:
    """Return totals across all entries."""
    return get_stats(store.entries).to_dict()
