"""
Test Hour Arithmetic Module

Covers same-day spans, overnight wraparound, rounding and malformed input.
"""

import pytest

from timesheet_ledger.entries.hours import (
    compute_hours,
    entry_earnings,
    entry_rate,
    parse_time_of_day,
    round_half_up,
)


@pytest.mark.parametrize(
    "start,end,expected",
    [
        ("09:00", "17:00", 8.0),
        ("09:00", "12:30", 3.5),
        ("08:15", "08:45", 0.5),
        ("00:00", "23:59", 23.98),
    ],
)
def test_same_day_span(start, end, expected):
    assert compute_hours(start, end) == expected


@pytest.mark.parametrize(
    "start,end,expected",
    [
        ("22:00", "02:00", 4.0),
        ("23:00", "01:00", 2.0),
        ("18:30", "00:00", 5.5),
        ("23:59", "00:01", 0.03),
    ],
)
def test_overnight_span_wraps_to_next_day(start, end, expected):
    assert compute_hours(start, end) == expected


def test_equal_times_are_a_full_day():
    assert compute_hours("08:00", "08:00") == 24.0


def test_rounds_to_hundredths():
    assert compute_hours("09:00", "09:20") == 0.33
    assert compute_hours("09:00", "09:10") == 0.17
    assert compute_hours("09:00", "09:03") == 0.05


def test_round_half_up_rounds_halves_away_from_zero():
    assert round_half_up(0.125) == 0.13
    assert round_half_up(2.675) == 2.68
    assert round_half_up(-0.125) == -0.13
    assert round_half_up(1.0) == 1.0


def test_seconds_are_accepted():
    assert compute_hours("09:00:00", "10:30:00") == 1.5


@pytest.mark.parametrize("value", ["", "9", "25:00", "12:60", "ab:cd", None, 900])
def test_malformed_times_do_not_parse(value):
    assert parse_time_of_day(value) is None


def test_malformed_input_yields_zero_hours():
    assert compute_hours("nope", "17:00") == 0.0
    assert compute_hours("09:00", None) == 0.0


def test_entry_rate_ignores_missing_and_non_numeric_rates():
    assert entry_rate({"hourlyRate": 40}) == 40.0
    assert entry_rate({}) == 0.0
    assert entry_rate({"hourlyRate": None}) == 0.0
    assert entry_rate({"hourlyRate": "40"}) == 0.0
    assert entry_rate({"hourlyRate": True}) == 0.0


def test_entry_earnings():
    entry = {"startTime": "22:00", "endTime": "02:00", "hourlyRate": 30}
    assert entry_earnings(entry) == 120.0
