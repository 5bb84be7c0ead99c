from __future__ import annotations

import pytest

from masks.core.clock import (
    advance_clock,
    advance_time,
    can_complete_action,
    display_time,
    format_time,
    is_class_time,
    is_new_day,
    is_night,
    minutes_until_next_period,
    parse_time,
    period_label,
    period_of,
)


def test_advance_wraps_at_day_boundary() -> None:
    assert advance_time("23:50", 20) == "00:10"
    assert advance_time("23:59", 1) == "00:00"


def test_zero_duration_round_trips() -> None:
    assert advance_time("08:00", 0) == "08:00"
    assert advance_time("00:00", 0) == "00:00"


@pytest.mark.parametrize(
    ("start", "a", "b"),
    [("08:00", 30, 45), ("23:00", 90, 0), ("12:34", 1439, 1441), ("00:00", 0, 2880)],
)
def test_advance_composes(start: str, a: int, b: int) -> None:
    assert advance_time(advance_time(start, a), b) == advance_time(start, a + b)


def test_negative_advance_rejected() -> None:
    with pytest.raises(ValueError):
        advance_time("08:00", -5)


def test_advance_clock_reports_wrapped_days() -> None:
    assert advance_clock("20:00", 60).wrapped_days == 0
    adv = advance_clock("20:00", 300)
    assert adv.time == "01:00"
    assert adv.wrapped_days == 1
    assert advance_clock("00:00", 1440 * 2).wrapped_days == 2


def test_format_time_normalizes_negative_minutes() -> None:
    assert format_time(-10) == "23:50"
    assert format_time(1440 + 65) == "01:05"


@pytest.mark.parametrize("bad", ["8", "24:00", "12:60", "ab:cd", ""])
def test_parse_time_rejects_malformed(bad: str) -> None:
    with pytest.raises(ValueError):
        parse_time(bad)


@pytest.mark.parametrize(
    ("time", "period"),
    [
        ("06:00", "morning"),
        ("07:59", "morning"),
        ("08:00", "class"),
        ("12:30", "lunch"),
        ("15:59", "afternoon"),
        ("16:00", "afterschool"),
        ("20:59", "evening"),
        ("21:00", "night"),
        ("23:59", "night"),
        ("00:00", "night"),
        ("05:59", "night"),
    ],
)
def test_period_classification(time: str, period: str) -> None:
    assert period_of(time) == period


def test_is_new_day() -> None:
    assert is_new_day("23:50", "00:10")
    assert not is_new_day("08:00", "09:00")


def test_minutes_until_next_period() -> None:
    assert minutes_until_next_period("08:00") == 240
    assert minutes_until_next_period("11:59") == 1
    # Night wraps: 23:00 -> 06:00 is seven hours.
    assert minutes_until_next_period("23:00") == 420
    assert minutes_until_next_period("02:00") == 240


def test_can_complete_action() -> None:
    assert can_complete_action("12:00", 60)
    assert not can_complete_action("12:30", 45)


def test_display_and_labels() -> None:
    assert display_time("08:05") == "8:05 AM"
    assert display_time("00:30") == "12:30 AM"
    assert display_time("13:00") == "1:00 PM"
    assert period_label("12:15") == "Lunch Break"
    assert is_class_time("14:00")
    assert not is_class_time("12:00")


@pytest.mark.parametrize(("time", "night"), [("21:00", True), ("02:30", True), ("05:59", True), ("06:00", False), ("20:59", False)])
def test_night_wraps_past_midnight(time: str, night: bool) -> None:
    assert is_night(time) is night
