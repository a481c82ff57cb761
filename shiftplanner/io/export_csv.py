"""CSV export of a generated planning."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Dict

import pandas as pd

from shiftplanner.domain.types import GeneratedPlanning, Weekday
from shiftplanner.services.stats import FRAME_COLUMNS, planning_to_frame


def export_planning_csv(
    planning: GeneratedPlanning,
    csv_path: str | Path,
    week_dates: Dict[Weekday, date] | None = None,
) -> int:
    """
    Export one row per slot to CSV.

    Args:
        planning: Generated planning
        csv_path: Output path
        week_dates: Optional weekday -> calendar date, adds a `date` column

    Returns:
        Number of rows exported
    """
    df = planning_to_frame(planning)
    columns = list(FRAME_COLUMNS)
    if week_dates is not None:
        by_name = {day.value: d.isoformat() for day, d in week_dates.items()}
        df["date"] = df["day"].map(by_name)
        columns.insert(columns.index("day"), "date")

    df = df.sort_values(["day_index", "employee_id", "start"], kind="stable")
    df[columns].to_csv(csv_path, index=False)

    print(f"[INFO] Exported {len(df)} slots to {csv_path}")
    return len(df)


def read_planning_csv(csv_path: str | Path) -> pd.DataFrame:
    """Read an exported planning CSV back as a DataFrame (employee ids as strings)."""
    df = pd.read_csv(csv_path, dtype={"employee_id": str})
    df.columns = df.columns.str.lower().str.strip()
    return df
