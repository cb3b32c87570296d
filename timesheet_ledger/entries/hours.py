import logging
from collections.abc import Mapping
from decimal import ROUND_HALF_UP, Decimal


logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60
CENTS = Decimal("0.01")


def round_half_up(value: float) -> float:
    """Round to two decimals, halves away from zero"""
    return float(Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP))


def parse_time_of_day(value: str) -> float | None:
    """Parse HH:MM (or HH:MM:SS) into minutes since midnight. Return None if invalid."""
    if not isinstance(value, str):
        return None
    parts = value.strip().split(":")
    if len(parts) not in (2, 3):
        return None
    try:
        hours, minutes = int(parts[0]), int(parts[1])
        seconds = int(parts[2]) if len(parts) == 3 else 0
    except ValueError:
        return None
    if not (0 <= hours < 24 and 0 <= minutes < 60 and 0 <= seconds < 60):
        return None
    return hours * 60 + minutes + seconds / 60


def compute_hours(start: str, end: str) -> float:
    """Worked hours between two times of day.

    An end at or before the start falls on the following day, so
    ``compute_hours("22:00", "02:00") == 4.0`` and equal times give 24 hours.
    Unparseable input yields 0.0.
    """
    start_minutes = parse_time_of_day(start)
    end_minutes = parse_time_of_day(end)
    if start_minutes is None or end_minutes is None:
        logger.debug(f"Cannot compute hours for {start=} {end=}")
        return 0.0

    if end_minutes <= start_minutes:
        end_minutes += MINUTES_PER_DAY

    return round_half_up((end_minutes - start_minutes) / 60)


def entry_hours(entry: Mapping) -> float:
    return compute_hours(entry.get("startTime"), entry.get("endTime"))


def entry_rate(entry: Mapping) -> float:
    rate = entry.get("hourlyRate")
    return float(rate) if isinstance(rate, int | float) and not isinstance(rate, bool) else 0.0


def entry_earnings(entry: Mapping) -> float:
    """Unrounded earnings for one entry; callers round the final total"""
    return entry_hours(entry) * entry_rate(entry)
