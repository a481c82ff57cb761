"""Per-employee, per-weekday availability classification."""

from __future__ import annotations

from datetime import date
from typing import Dict

from shiftplanner.domain.types import Availability, Employee, Weekday


def resolve_availability(employee: Employee, week_dates: Dict[Weekday, date]) -> Dict[Weekday, Availability]:
    """
    Classify each day of the target week for one employee.

    BLOCKED: the employee's rest day, or a vacation/sick/unavailable/training
    exception on that date. REDUCED: a 'reduced' exception on that date.
    OPEN otherwise. BLOCKED wins when both apply.

    Args:
        employee: Employee to classify
        week_dates: Weekday -> calendar date of the target ISO week

    Returns:
        Dict of weekday -> Availability, one entry per weekday
    """
    by_date: Dict[date, Availability] = {}
    for exc in employee.exceptions:
        status = Availability.BLOCKED if exc.type.is_blocking else Availability.REDUCED
        if by_date.get(exc.date) is not Availability.BLOCKED:
            by_date[exc.date] = status

    result: Dict[Weekday, Availability] = {}
    for day in Weekday.ordered():
        if employee.rest_day is day:
            result[day] = Availability.BLOCKED
        else:
            result[day] = by_date.get(week_dates[day], Availability.OPEN)
    return result


def resolve_team_availability(employees, week_dates: Dict[Weekday, date]) -> Dict[str, Dict[Weekday, Availability]]:
    return {emp.id: resolve_availability(emp, week_dates) for emp in employees}
