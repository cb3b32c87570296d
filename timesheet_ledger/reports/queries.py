from collections.abc import Iterable, Mapping

from timesheet_ledger.entries.hours import entry_earnings, entry_hours, round_half_up
from timesheet_ledger.entries.models import EntryTotals, PaymentStatus


SORT_KEYS = {
    "date": lambda entry: str(entry.get("date") or ""),
    "hours": entry_hours,
    "earnings": entry_earnings,
}


def filter_entries(
    entries: Iterable[Mapping], search: str = "", status: PaymentStatus | str = PaymentStatus.ALL
) -> list[Mapping]:
    """Entries whose description contains ``search`` (any case) or whose date contains it"""
    status = PaymentStatus(status)
    term = search.lower()

    def matches(entry: Mapping) -> bool:
        description = str(entry.get("description") or "").lower()
        if term not in description and search not in str(entry.get("date") or ""):
            return False
        if status is PaymentStatus.PAID:
            return bool(entry.get("isPaid"))
        if status is PaymentStatus.UNPAID:
            return not entry.get("isPaid")
        return True

    return [entry for entry in entries if matches(entry)]


def sort_entries(entries: Iterable[Mapping], by: str = "date") -> list[Mapping]:
    """Sort descending by date, hours or earnings"""
    if by not in SORT_KEYS:
        raise ValueError(f"Cannot sort entries by {by!r}")
    return sorted(entries, key=SORT_KEYS[by], reverse=True)


def get_totals(entries: Iterable[Mapping]) -> EntryTotals:
    total_hours = total_earnings = paid_earnings = unpaid_earnings = 0.0
    for entry in entries:
        earnings = entry_earnings(entry)
        total_hours += entry_hours(entry)
        total_earnings += earnings
        if entry.get("isPaid"):
            paid_earnings += earnings
        else:
            unpaid_earnings += earnings

    return EntryTotals(
        total_hours=round_half_up(total_hours),
        total_earnings=round_half_up(total_earnings),
        paid_earnings=round_half_up(paid_earnings),
        unpaid_earnings=round_half_up(unpaid_earnings),
    )
