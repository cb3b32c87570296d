from collections.abc import Iterable, Mapping

from timesheet_ledger.entries.hours import entry_hours, entry_rate, round_half_up
from timesheet_ledger.entries.models import DailySummary, TimesheetStats


def get_daily_summaries(entries: Iterable[Mapping], limit: int | None = None) -> list[DailySummary]:
    """Group entries by date, most recent date first.

    A day is paid only when every entry on it is paid. Totals are rounded once,
    after summing.
    """
    days: dict[str, dict] = {}
    for entry in entries:
        hours = entry_hours(entry)
        day = days.setdefault(
            entry.get("date"), {"hours": 0.0, "earnings": 0.0, "count": 0, "is_paid": True}
        )
        day["hours"] += hours
        day["earnings"] += hours * entry_rate(entry)
        day["count"] += 1
        day["is_paid"] = day["is_paid"] and bool(entry.get("isPaid"))

    summaries = [
        DailySummary(
            date=date,
            total_hours=round_half_up(day["hours"]),
            total_earnings=round_half_up(day["earnings"]),
            entries_count=day["count"],
            is_paid=day["is_paid"],
        )
        for date, day in days.items()
    ]
    # ISO dates sort chronologically as strings
    summaries.sort(key=lambda summary: str(summary.date), reverse=True)
    return summaries[:limit] if limit is not None else summaries


def get_stats(entries: Iterable[Mapping]) -> TimesheetStats:
    """Global totals, rounding each figure once at the end"""
    total_hours = total_earnings = 0.0
    paid_hours = unpaid_hours = 0.0
    paid_earnings = unpaid_earnings = 0.0
    dates = set()

    for entry in entries:
        hours = entry_hours(entry)
        earnings = hours * entry_rate(entry)
        total_hours += hours
        total_earnings += earnings
        if entry.get("isPaid"):
            paid_hours += hours
            paid_earnings += earnings
        else:
            unpaid_hours += hours
            unpaid_earnings += earnings
        dates.add(entry.get("date"))

    days_worked = len(dates)
    average = total_hours / days_worked if days_worked else 0.0

    return TimesheetStats(
        total_hours=round_half_up(total_hours),
        total_earnings=round_half_up(total_earnings),
        paid_hours=round_half_up(paid_hours),
        unpaid_hours=round_half_up(unpaid_hours),
        paid_earnings=round_half_up(paid_earnings),
        unpaid_earnings=round_half_up(unpaid_earnings),
        average_hours_per_day=round_half_up(average),
        days_worked=days_worked,
    )
