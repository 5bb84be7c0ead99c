"""Time-of-day model.

Times are "HH:MM" strings on a 24 hour clock. Advancing past 23:59 silently
wraps to 00:00; use `advance_clock` (or `is_new_day`) when the caller needs to
know that a day boundary was crossed.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

MINUTES_PER_DAY = 1440
DAY_START = "08:00"

PeriodName = Literal["morning", "class", "lunch", "afternoon", "afterschool", "evening", "night"]

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


@dataclass(frozen=True, slots=True)
class TimeSlot:
    start: str
    end: str
    period: PeriodName

    @property
    def start_minutes(self) -> int:
        return parse_time(self.start)

    @property
    def end_minutes(self) -> int:
        return parse_time(self.end)

    @property
    def wraps_midnight(self) -> bool:
        return self.end_minutes < self.start_minutes

    def contains(self, minutes: int) -> bool:
        if self.wraps_midnight:
            return minutes >= self.start_minutes or minutes <= self.end_minutes
        return self.start_minutes <= minutes <= self.end_minutes


SCHEDULE: tuple[TimeSlot, ...] = (
    TimeSlot("06:00", "07:59", "morning"),
    TimeSlot("08:00", "11:59", "class"),
    TimeSlot("12:00", "12:59", "lunch"),
    TimeSlot("13:00", "15:59", "afternoon"),
    TimeSlot("16:00", "17:59", "afterschool"),
    TimeSlot("18:00", "20:59", "evening"),
    TimeSlot("21:00", "05:59", "night"),
)

PERIOD_LABELS: dict[str, str] = {
    "morning": "Early Morning",
    "class": "Class Time",
    "lunch": "Lunch Break",
    "afternoon": "Afternoon Classes",
    "afterschool": "After School",
    "evening": "Evening",
    "night": "Night",
}


@dataclass(frozen=True, slots=True)
class ClockAdvance:
    time: str
    wrapped_days: int


def parse_time(time: str) -> int:
    """Minutes since midnight for an "HH:MM" string."""

    m = _TIME_RE.match(time.strip())
    if m is None:
        raise ValueError(f"Invalid time: {time!r}")
    hours, minutes = int(m.group(1)), int(m.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError(f"Invalid time: {time!r}")
    return hours * 60 + minutes


def format_time(total_minutes: int) -> str:
    normalized = ((total_minutes % MINUTES_PER_DAY) + MINUTES_PER_DAY) % MINUTES_PER_DAY
    return f"{normalized // 60:02d}:{normalized % 60:02d}"


def advance_clock(current: str, minutes: int) -> ClockAdvance:
    if minutes < 0:
        raise ValueError("Time can only move forward")
    total = parse_time(current) + minutes
    return ClockAdvance(time=format_time(total), wrapped_days=total // MINUTES_PER_DAY)


def advance_time(current: str, minutes: int) -> str:
    return advance_clock(current, minutes).time


def is_new_day(previous: str, current: str) -> bool:
    return parse_time(current) < parse_time(previous)


def time_slot(time: str) -> TimeSlot | None:
    minutes = parse_time(time)
    for slot in SCHEDULE:
        if slot.contains(minutes):
            return slot
    return None


def period_of(time: str) -> PeriodName | None:
    slot = time_slot(time)
    return slot.period if slot is not None else None


def is_class_time(time: str) -> bool:
    return period_of(time) in {"class", "afternoon"}


def is_night(time: str) -> bool:
    return period_of(time) == "night"


def minutes_until_next_period(time: str) -> int:
    slot = time_slot(time)
    if slot is None:
        return 0

    current = parse_time(time)
    if slot.wraps_midnight and current > slot.end_minutes:
        return (MINUTES_PER_DAY - current) + slot.end_minutes + 1
    return slot.end_minutes - current + 1


def can_complete_action(time: str, duration: int) -> bool:
    return minutes_until_next_period(time) >= duration


def display_time(time: str) -> str:
    """12 hour clock rendering, e.g. "8:05 AM"."""

    minutes = parse_time(time)
    hours = minutes // 60
    suffix = "PM" if hours >= 12 else "AM"
    return f"{hours % 12 or 12}:{minutes % 60:02d} {suffix}"


def period_label(time: str) -> str:
    return PERIOD_LABELS.get(period_of(time) or "morning", "Unknown")
