"""Hard constraint rules and checks for weekly planning."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from shiftplanner.config import PlannerConfig
from shiftplanner.domain.types import (
    Availability,
    CompanyConstraints,
    DaySchedule,
    GeneratedPlanning,
    TimeSlot,
    Weekday,
)

MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class DailyRules:
    """Company constraints resolved against configured defaults, in minutes."""

    max_minutes: int
    min_minutes: int
    min_employees_per_slot: int
    lunch_enabled: bool
    lunch_minutes: int
    lunch_threshold_minutes: int
    granularity: int
    split_gap_minutes: int
    min_rest_minutes: int
    reduced_factor: float

    def cap_for(self, availability: Availability) -> int:
        """Maximum worked minutes on a day with the given availability."""
        if availability is Availability.BLOCKED:
            return 0
        if availability is Availability.REDUCED:
            return int(self.max_minutes * self.reduced_factor) // self.granularity * self.granularity
        return self.max_minutes


def resolve_daily_rules(constraints: Optional[CompanyConstraints], cfg: PlannerConfig) -> DailyRules:
    """
    Merge request constraints with configured defaults.

    Args:
        constraints: Company constraints from the request (may be None)
        cfg: PlannerConfig

    Returns:
        DailyRules with every bound filled in
    """
    c = constraints or CompanyConstraints()
    defaults = cfg.daily_defaults
    step = cfg.engine.granularity_minutes

    max_hours = c.max_hours_per_day if c.max_hours_per_day is not None else defaults.max_hours_per_day
    min_hours = c.min_hours_per_day if c.min_hours_per_day is not None else defaults.min_hours_per_day
    min_staff = c.min_employees_per_slot if c.min_employees_per_slot is not None else defaults.min_employees_per_slot
    lunch_minutes = c.lunch_break_duration if c.lunch_break_duration is not None else cfg.lunch.default_duration_minutes

    max_minutes = int(round(max_hours * 60)) // step * step
    return DailyRules(
        max_minutes=max_minutes,
        min_minutes=min(int(round(min_hours * 60)), max_minutes),
        min_employees_per_slot=int(min_staff),
        lunch_enabled=bool(c.mandatory_lunch_break),
        lunch_minutes=int(lunch_minutes),
        lunch_threshold_minutes=int(round(cfg.lunch.threshold_hours * 60)),
        granularity=step,
        split_gap_minutes=cfg.engine.split_shift_gap_minutes,
        min_rest_minutes=int(round(cfg.engine.min_daily_rest_hours * 60)),
        reduced_factor=cfg.engine.reduced_day_factor,
    )


def rest_allows(prev_day_end: Optional[int], next_day_start: Optional[int], min_rest_minutes: int) -> bool:
    """True when the overnight gap between two consecutive working days is long enough."""
    if prev_day_end is None or next_day_start is None:
        return True
    return (MINUTES_PER_DAY - prev_day_end) + next_day_start >= min_rest_minutes


def longest_run(days: List[Weekday]) -> int:
    """Longest run of consecutive weekdays (within the week) in `days`."""
    positions = sorted({d.position for d in days})
    best = run = 0
    prev = None
    for pos in positions:
        run = run + 1 if prev is not None and pos == prev + 1 else 1
        best = max(best, run)
        prev = pos
    return best


def day_minutes(slots: List[TimeSlot]) -> int:
    return sum(s.duration_minutes for s in slots)


def validate_planning_constraints(
    planning: GeneratedPlanning,
    availability: Dict[str, Dict[Weekday, Availability]],
    windows: Dict[Weekday, List[TimeSlot]],
    rules: DailyRules,
) -> None:
    """
    Validate a generated planning against the hard scheduling constraints.

    Checks blocked days, opening windows, the daily cap and the overnight
    rest between consecutive working days.

    Args:
        planning: Planning produced by the engine
        availability: Employee id -> weekday -> Availability
        windows: Opening windows per weekday
        rules: Resolved daily rules

    Raises:
        ValueError: If any constraint is violated
    """
    for emp_id, schedule in planning.items():
        emp_avail = availability.get(emp_id, {})
        for day, slots in schedule.items():
            if not slots:
                continue
            status = emp_avail.get(day, Availability.OPEN)
            if status is Availability.BLOCKED:
                raise ValueError(f"Employee {emp_id} is scheduled on blocked day {day.value}")

            # 1. Inside an opening window
            for slot in slots:
                if not any(w.contains(slot) for w in windows.get(day, [])):
                    raise ValueError(
                        f"Employee {emp_id} slot {slot.to_range_string()} on {day.value} "
                        f"is outside the opening hours"
                    )

            # 2. Daily cap (halved on reduced days)
            worked = day_minutes(slots)
            cap = rules.cap_for(status)
            if worked > cap:
                raise ValueError(
                    f"Employee {emp_id} works {worked / 60:.2f}h on {day.value}, "
                    f"above the {cap / 60:.2f}h daily cap"
                )

        # 3. Overnight rest between consecutive days
        days = Weekday.ordered()
        for prev_day, next_day in zip(days, days[1:]):
            prev_slots, next_slots = schedule.get(prev_day), schedule.get(next_day)
            if not prev_slots or not next_slots:
                continue
            prev_end = max(s.end for s in prev_slots)
            next_start = min(s.start for s in next_slots)
            if not rest_allows(prev_end, next_start, rules.min_rest_minutes):
                raise ValueError(
                    f"Employee {emp_id} rests less than {rules.min_rest_minutes / 60:.0f}h "
                    f"between {prev_day.value} and {next_day.value}"
                )


def schedule_days(schedule: DaySchedule) -> List[Weekday]:
    return [day for day in Weekday.ordered() if schedule.get(day)]
