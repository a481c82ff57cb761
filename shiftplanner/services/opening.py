"""Company-wide opening windows per weekday."""

from __future__ import annotations

from typing import Dict, List, Optional

from shiftplanner.config import PlannerConfig
from shiftplanner.domain.types import CompanyConstraints, TimeSlot, Weekday

from .timeplan import merge_ranges, parse_time_range


def build_opening_windows(
    constraints: Optional[CompanyConstraints],
    cfg: PlannerConfig,
) -> Dict[Weekday, List[TimeSlot]]:
    """
    Build the assignable time windows for every weekday.

    A weekday missing from openDays has no window. Several openHours entries
    give separate windows (e.g. a closure over lunch); overlapping entries are
    merged so the result stays sorted and disjoint.

    Args:
        constraints: Company constraints from the request (may be None)
        cfg: PlannerConfig supplying default opening hours

    Returns:
        Dict of weekday -> sorted, disjoint windows (empty list when closed)
    """
    open_days = None
    hours: List[TimeSlot] = []
    if constraints is not None:
        open_days = constraints.open_days
        hours = list(constraints.open_hours or [])

    if not hours:
        hours = [parse_time_range(cfg.daily_defaults.open_hours)]
    windows = merge_ranges(hours)

    result: Dict[Weekday, List[TimeSlot]] = {}
    for day in Weekday.ordered():
        if open_days is not None and day not in open_days:
            result[day] = []
        else:
            result[day] = list(windows)
    return result


def open_weekdays(windows: Dict[Weekday, List[TimeSlot]]) -> List[Weekday]:
    return [day for day in Weekday.ordered() if windows.get(day)]
