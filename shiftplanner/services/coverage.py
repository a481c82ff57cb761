"""Staffing coverage: running ledger for the engine and the post-generation check."""

from __future__ import annotations

from typing import Dict, List

from shiftplanner.domain.types import GeneratedPlanning, PlanningWarning, TimeSlot, Weekday

from .constraints import MINUTES_PER_DAY


class CoverageLedger:
    """
    Per-weekday head count at `step`-minute resolution.

    Filled as employees are placed so later placements can favour the ticks
    that still need staff.
    """

    def __init__(self, step: int = 15):
        self.step = step
        self._counts: Dict[Weekday, List[int]] = {
            day: [0] * (MINUTES_PER_DAY // step) for day in Weekday.ordered()
        }

    def _ticks(self, slot: TimeSlot) -> range:
        return range(slot.start // self.step, -(-slot.end // self.step))

    def add(self, day: Weekday, slot: TimeSlot) -> None:
        counts = self._counts[day]
        for tick in self._ticks(slot):
            counts[tick] += 1

    def need(self, day: Weekday, slot: TimeSlot, floor: int) -> int:
        """Sum over the slot's ticks of staff still missing to reach `floor`."""
        if floor <= 0:
            return 0
        counts = self._counts[day]
        return sum(max(0, floor - counts[tick]) for tick in self._ticks(slot))

    def gaps(self, day: Weekday, window: TimeSlot, floor: int) -> List[TimeSlot]:
        """Sub-ranges of `window` where fewer than `floor` people are on shift."""
        result: List[TimeSlot] = []
        counts = self._counts[day]
        start = None
        for tick in self._ticks(window):
            short = counts[tick] < floor
            minute = tick * self.step
            if short and start is None:
                start = max(minute, window.start)
            elif not short and start is not None:
                result.append(TimeSlot(start, minute))
                start = None
        if start is not None:
            result.append(TimeSlot(start, window.end))
        return result


def ledger_from_planning(planning: GeneratedPlanning, step: int) -> CoverageLedger:
    ledger = CoverageLedger(step)
    for schedule in planning.values():
        for day, slots in schedule.items():
            for slot in slots:
                ledger.add(day, slot)
    return ledger


def check_coverage(
    planning: GeneratedPlanning,
    windows: Dict[Weekday, List[TimeSlot]],
    min_employees_per_slot: int,
    step: int = 15,
) -> List[PlanningWarning]:
    """
    Compare staffing against the floor for every opening window.

    An employee counts toward a window when any of their slots that day
    overlaps it. Under-coverage is reported, never raised.

    Args:
        planning: Generated planning
        windows: Opening windows per weekday
        min_employees_per_slot: Staffing floor (0 disables the check)
        step: Resolution used to report the under-staffed sub-ranges

    Returns:
        List of 'under_coverage' warnings
    """
    if min_employees_per_slot <= 0:
        return []

    ledger = ledger_from_planning(planning, step)
    warnings: List[PlanningWarning] = []
    for day in Weekday.ordered():
        for window in windows.get(day, []):
            assigned = sum(
                1
                for schedule in planning.values()
                if any(slot.overlaps(window) for slot in schedule.get(day, []))
            )
            if assigned >= min_employees_per_slot:
                continue
            gaps = ledger.gaps(day, window, min_employees_per_slot)
            warnings.append(
                PlanningWarning(
                    code="under_coverage",
                    message=(
                        f"{day.value} {window.to_range_string()}: {assigned} employee(s) assigned, "
                        f"{min_employees_per_slot} required"
                    ),
                    day=day,
                    details={
                        "window": window.to_range_string(),
                        "assigned": assigned,
                        "required": min_employees_per_slot,
                        "gaps": [g.to_range_string() for g in gaps],
                    },
                )
            )
    return warnings
