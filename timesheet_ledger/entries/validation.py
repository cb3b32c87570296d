from collections.abc import Mapping
from datetime import date
from typing import Any

from .hours import parse_time_of_day


def _is_positive_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool) and value > 0


def validate_draft(draft: Mapping[str, Any]) -> list[str]:
    """Return the problems that should stop an entry from reaching the store"""
    problems = []

    try:
        date.fromisoformat(str(draft.get("date") or ""))
    except ValueError:
        problems.append("date is required in YYYY-MM-DD format")

    start = parse_time_of_day(draft.get("startTime"))
    end = parse_time_of_day(draft.get("endTime"))
    if start is None:
        problems.append("startTime is required in HH:MM format")
    if end is None:
        problems.append("endTime is required in HH:MM format")
    # equal times would be read as a full 24 hour shift
    if start is not None and start == end:
        problems.append("endTime must differ from startTime")

    description = draft.get("description")
    if not isinstance(description, str) or not description.strip():
        problems.append("description is required")

    rate = draft.get("hourlyRate")
    if rate is not None and not _is_positive_number(rate):
        problems.append("hourlyRate must be greater than zero")

    if "isPaid" in draft and not isinstance(draft["isPaid"], bool):
        problems.append("isPaid must be true or false")

    return problems


def validate_settings(settings: Mapping[str, Any]) -> list[str]:
    if not _is_positive_number(settings.get("defaultHourlyRate")):
        return ["defaultHourlyRate must be greater than zero"]
    return []


def validate_changes(changes: Mapping[str, Any]) -> list[str]:
    """Problems with a partial update before it is merged into an entry"""
    return [f"{key} cannot be null" for key, value in changes.items() if value is None]
