"""Post-generation checks and text summaries for a generated planning."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List

import pandas as pd

from shiftplanner.domain.types import GeneratedPlanning, TimeSlot, Weekday
from shiftplanner.errors import PlanningIntegrityError
from shiftplanner.services.stats import hours_by_day, planning_to_frame
from shiftplanner.services.timeplan import TIME_RE, time_to_minutes


def check_generated_planning(planning: GeneratedPlanning, employee_ids: Iterable[str] | None = None) -> List[str]:
    """
    Collect output invariant violations.

    Args:
        planning: Generated planning
        employee_ids: Ids that must all be present (None skips the check)

    Returns:
        List of human-readable problems (empty when the planning is valid)
    """
    problems: List[str] = []
    if employee_ids is not None:
        missing = [emp_id for emp_id in employee_ids if emp_id not in planning]
        if missing:
            problems.append(f"Missing employees in planning: {', '.join(missing)}")

    for emp_id, schedule in planning.items():
        for day in Weekday.ordered():
            if day not in schedule:
                problems.append(f"Employee {emp_id} has no entry for {day.value}")
                continue
            slots = schedule[day]
            for slot in slots:
                if not 0 <= slot.start < slot.end <= 24 * 60:
                    problems.append(f"Employee {emp_id} {day.value}: invalid slot {slot!r}")
            ordered = sorted(slots)
            for prev, nxt in zip(ordered, ordered[1:]):
                if prev.overlaps(nxt):
                    problems.append(
                        f"Employee {emp_id} {day.value}: overlapping slots "
                        f"{prev.to_range_string()} and {nxt.to_range_string()}"
                    )
    return problems


def validate_generated_planning(planning: GeneratedPlanning, employee_ids: Iterable[str] | None = None) -> bool:
    return not check_generated_planning(planning, employee_ids)


def assert_planning_integrity(planning: GeneratedPlanning, employee_ids: Iterable[str] | None = None) -> None:
    """
    Raises:
        PlanningIntegrityError: If any output invariant is violated
    """
    problems = check_generated_planning(planning, employee_ids)
    if problems:
        print(f"[ERROR] Generated planning failed {len(problems)} integrity check(s)")
        raise PlanningIntegrityError(problems)


def _slot_from_dict(raw: Dict[str, Any], where: str) -> TimeSlot:
    start, end = raw.get("start"), raw.get("end")
    for value in (start, end):
        if not isinstance(value, str) or not TIME_RE.match(value):
            raise ValueError(f"{where}: invalid time {value!r}")
    slot_start, slot_end = time_to_minutes(start), time_to_minutes(end)
    if slot_start >= slot_end:
        raise ValueError(f"{where}: start {start} is not before end {end}")
    return TimeSlot(slot_start, slot_end)


def planning_from_dict(raw: Dict[str, Any]) -> GeneratedPlanning:
    """
    Parse the `planning` object of a response back into a GeneratedPlanning.

    Missing weekdays are filled with empty lists; unknown weekday keys and
    malformed slots raise ValueError.
    """
    if not isinstance(raw, dict):
        raise ValueError("planning must be an object keyed by employee id")
    planning: GeneratedPlanning = {}
    for emp_id, days in raw.items():
        schedule = {day: [] for day in Weekday.ordered()}
        for day_key, slots in (days or {}).items():
            day = Weekday.parse(day_key)
            schedule[day] = [
                _slot_from_dict(slot, f"{emp_id}.{day.value}.{idx}") for idx, slot in enumerate(slots or [])
            ]
        planning[str(emp_id)] = schedule
    return planning


def summarize_planning(planning: GeneratedPlanning) -> str:
    """Text report: hours per employee per weekday, then head count per weekday."""
    df = planning_to_frame(planning)
    if df.empty:
        return "No slots planned."

    table = hours_by_day(planning)
    table["total"] = table.sum(axis=1).round(2)

    staff = df.groupby("day")["employee_id"].nunique()
    staff = staff.reindex([d.value for d in Weekday.ordered()], fill_value=0)

    first_last = df.groupby("day").agg(first_start=("start", "min"), last_end=("end", "max"))
    first_last = first_last.reindex([d.value for d in Weekday.ordered()]).dropna()

    lines = ["Hours per employee per day:"]
    lines.append(table.to_string())
    lines.append("")
    lines.append("Employees on shift per day:")
    lines.append(staff.to_string())
    lines.append("")
    lines.append("Earliest start / latest end per day:")
    lines.append(first_last.to_string())
    lines.append("")
    lines.append(f"Total hours: {pd.to_numeric(df['hours']).sum():.2f}")
    return "\n".join(lines)
