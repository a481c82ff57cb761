"""Time-of-day parsing and ISO week helpers."""

from __future__ import annotations

import re
from datetime import date, time, timedelta
from typing import Dict, List

from shiftplanner.domain.types import TimeSlot, Weekday

TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
RANGE_RE = re.compile(r"^(\d{2}:\d{2})-(\d{2}:\d{2})$")


def parse_time_string(value: str) -> time:
    """Parse 'HH:MM' into a time; '24:00' is not accepted."""
    match = TIME_RE.match(value.strip())
    if not match:
        raise ValueError(f"Invalid time (expected HH:MM): {value!r}")
    return time(int(match.group(1)), int(match.group(2)))


def time_to_minutes(value: str) -> int:
    t = parse_time_string(value)
    return t.hour * 60 + t.minute


def parse_time_range(value: str) -> TimeSlot:
    """
    Parse 'HH:MM-HH:MM' into a TimeSlot.

    Raises:
        ValueError: If the format is wrong or start is not strictly before end
    """
    match = RANGE_RE.match(value.strip())
    if not match:
        raise ValueError(f"Invalid time range (expected HH:MM-HH:MM): {value!r}")
    start = time_to_minutes(match.group(1))
    end = time_to_minutes(match.group(2))
    if start >= end:
        raise ValueError(f"Time range start must be before end: {value!r}")
    return TimeSlot(start, end)


def calculate_shift_hours(start_hm: str, end_hm: str) -> float:
    """Duration in hours between two 'HH:MM' strings."""
    start = parse_time_string(start_hm)
    end = parse_time_string(end_hm)
    return (end.hour + end.minute / 60) - (start.hour + start.minute / 60)


def round_hours(hours: float) -> float:
    return round(hours, 2)


def iso_week_dates(year: int, week_number: int) -> Dict[Weekday, date]:
    """
    Dates of the ISO week (Monday first).

    Raises:
        ValueError: If the year has no such ISO week (e.g. week 53 of a 52-week year)
    """
    monday = date.fromisocalendar(year, week_number, 1)
    return {day: monday + timedelta(days=day.position) for day in Weekday.ordered()}


def week_contains(year: int, week_number: int, day: date) -> bool:
    iso = day.isocalendar()
    return iso[0] == year and iso[1] == week_number


def merge_ranges(ranges: List[TimeSlot]) -> List[TimeSlot]:
    """Sort and merge overlapping or touching ranges."""
    merged: List[TimeSlot] = []
    for slot in sorted(ranges):
        if merged and slot.start <= merged[-1].end:
            last = merged[-1]
            merged[-1] = TimeSlot(last.start, max(last.end, slot.end))
        else:
            merged.append(slot)
    return merged


def subtract_ranges(window: TimeSlot, taken: List[TimeSlot], gap: int = 0) -> List[TimeSlot]:
    """Free parts of `window` once `taken` ranges (padded by `gap` minutes) are removed."""
    free = [window]
    for block in taken:
        padded = TimeSlot(block.start - gap, block.end + gap)
        next_free: List[TimeSlot] = []
        for part in free:
            if not part.overlaps(padded):
                next_free.append(part)
                continue
            if part.start < padded.start:
                next_free.append(TimeSlot(part.start, padded.start))
            if padded.end < part.end:
                next_free.append(TimeSlot(padded.end, part.end))
        free = next_free
    return free


def floor_to_step(minutes: float, step: int) -> int:
    return int(minutes // step) * step
