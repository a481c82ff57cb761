"""Aggregate statistics over a generated planning."""

from __future__ import annotations

from typing import Dict, List

import pandas as pd

from shiftplanner.domain.types import Employee, GeneratedPlanning, PlanningStats, PlanningWarning, Weekday

from .timeplan import round_hours

FRAME_COLUMNS = ["employee_id", "day", "day_index", "start", "end", "hours"]


def planning_to_frame(planning: GeneratedPlanning) -> pd.DataFrame:
    """One row per slot: employee_id, day, day_index, start, end, hours."""
    rows = []
    for emp_id, schedule in planning.items():
        for day, slots in schedule.items():
            for slot in slots:
                times = slot.to_dict()
                rows.append(
                    {
                        "employee_id": emp_id,
                        "day": day.value,
                        "day_index": day.position,
                        "start": times["start"],
                        "end": times["end"],
                        "hours": slot.hours,
                    }
                )
    return pd.DataFrame(rows, columns=FRAME_COLUMNS)


def calculate_total_hours(planning: GeneratedPlanning) -> float:
    """Sum of every slot duration, rounded to two decimals."""
    df = planning_to_frame(planning)
    if df.empty:
        return 0.0
    return round_hours(float(df["hours"].sum()))


def calculate_employee_hours(planning: GeneratedPlanning) -> Dict[str, float]:
    df = planning_to_frame(planning)
    totals = df.groupby("employee_id")["hours"].sum() if not df.empty else pd.Series(dtype=float)
    return {emp_id: round_hours(float(totals.get(emp_id, 0.0))) for emp_id in planning}


def calculate_planning_stats(
    planning: GeneratedPlanning,
    employees: List[Employee],
    tolerance_hours: float = 0.5,
) -> PlanningStats:
    """
    Compute planning statistics.

    Args:
        planning: Generated planning
        employees: Requested employees (for contract hours)
        tolerance_hours: Band around contract hours counted as fully scheduled

    Returns:
        PlanningStats with totals, average, fully-scheduled count and active days
    """
    df = planning_to_frame(planning)
    employee_hours = calculate_employee_hours(planning)
    total = round_hours(float(df["hours"].sum())) if not df.empty else 0.0
    average = round_hours(total / len(employees)) if employees else 0.0

    full = 0
    for emp in employees:
        planned = employee_hours.get(emp.id, 0.0)
        if abs(planned - emp.contract_hours_per_week) <= tolerance_hours + 1e-9:
            full += 1

    active_days = int(df["day"].nunique()) if not df.empty else 0
    return PlanningStats(
        total_hours_planned=total,
        average_hours_per_employee=average,
        employees_with_full_schedule=full,
        days_with_activity=active_days,
        employee_hours=employee_hours,
    )


def undershoot_warnings(
    planning: GeneratedPlanning,
    employees: List[Employee],
    tolerance_hours: float = 0.5,
) -> List[PlanningWarning]:
    """One 'contract_undershoot' warning per employee planned below contract minus tolerance."""
    employee_hours = calculate_employee_hours(planning)
    warnings: List[PlanningWarning] = []
    for emp in employees:
        planned = employee_hours.get(emp.id, 0.0)
        missing = round_hours(emp.contract_hours_per_week - planned)
        if missing > tolerance_hours:
            warnings.append(
                PlanningWarning(
                    code="contract_undershoot",
                    message=(
                        f"Employee {emp.id}: {planned}h planned for a "
                        f"{emp.contract_hours_per_week}h contract"
                    ),
                    employee_id=emp.id,
                    details={"planned": planned, "contract": emp.contract_hours_per_week, "missing": missing},
                )
            )
    return warnings


def hours_by_day(planning: GeneratedPlanning) -> pd.DataFrame:
    """Employee x weekday table of planned hours (all weekdays as columns)."""
    df = planning_to_frame(planning)
    columns = [d.value for d in Weekday.ordered()]
    if df.empty:
        return pd.DataFrame(0.0, index=pd.Index(list(planning), name="employee_id"), columns=columns)
    table = df.pivot_table(index="employee_id", columns="day", values="hours", aggfunc="sum", fill_value=0.0)
    return table.reindex(index=list(planning), columns=columns, fill_value=0.0).round(2)
