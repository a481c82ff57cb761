"""Repository for stored planning runs."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from shiftplanner.validator import planning_from_dict

from .models import EmployeePlanning, PlanningRun
from .types import GeneratedPlanning, GenerationResult, Weekday, planning_to_dict


class PlanningRunRepository:
    """Repository for planning run data access."""

    @staticmethod
    def save_result(session: Session, result: GenerationResult) -> PlanningRun:
        """
        Persist a generation result as a new run.

        Args:
            session: Database session
            result: GenerationResult from the orchestrator

        Returns:
            The committed PlanningRun (with employees loaded)
        """
        meta = result.metadata
        run = PlanningRun(
            week_id=meta.week_id,
            week_number=meta.week_number,
            year=meta.year,
            week_start=meta.week_start,
            ordering=meta.ordering,
            employee_count=meta.employee_count,
            total_hours=meta.stats.total_hours_planned,
            stats=meta.stats.to_dict(),
            warnings=[w.to_dict() for w in meta.warnings],
            generated_at=meta.generated_at,
        )
        as_dict = planning_to_dict(result.planning)
        for position, emp_id in enumerate(result.planning):
            run.employees.append(
                EmployeePlanning(
                    employee_id=emp_id,
                    position=position,
                    planned_hours=meta.stats.employee_hours.get(emp_id, 0.0),
                    schedule=as_dict[emp_id],
                )
            )
        session.add(run)
        session.commit()
        session.refresh(run)
        print(f"[INFO] Stored planning run {run.id} for {run.week_id} ({len(run.employees)} employees)")
        return run

    @staticmethod
    def get_by_id(session: Session, run_id: int) -> Optional[PlanningRun]:
        """Get run by ID."""
        return session.get(PlanningRun, run_id)

    @staticmethod
    def get_latest_for_week(session: Session, week_id: str) -> Optional[PlanningRun]:
        """Most recently stored run for an ISO week."""
        stmt = (
            select(PlanningRun)
            .where(PlanningRun.week_id == week_id)
            .order_by(PlanningRun.created_at.desc(), PlanningRun.id.desc())
            .limit(1)
        )
        return session.scalars(stmt).first()

    @staticmethod
    def list_weeks(session: Session) -> List[str]:
        """Distinct ISO weeks with at least one stored run, oldest first."""
        stmt = select(PlanningRun.week_id).distinct().order_by(PlanningRun.week_id)
        return list(session.scalars(stmt))

    @staticmethod
    def delete_by_week(session: Session, week_id: str) -> int:
        """Delete every run for a week. Returns the number of runs removed."""
        run_ids = list(session.scalars(select(PlanningRun.id).where(PlanningRun.week_id == week_id)))
        if not run_ids:
            return 0
        session.execute(delete(EmployeePlanning).where(EmployeePlanning.run_id.in_(run_ids)))
        session.execute(delete(PlanningRun).where(PlanningRun.id.in_(run_ids)))
        session.commit()
        return len(run_ids)

    @staticmethod
    def to_planning_dict(run: PlanningRun) -> dict:
        """Stored run as the response-shaped `planning` object (employee id -> weekday -> slots)."""
        return {
            row.employee_id: {day.value: list(row.schedule.get(day.value, [])) for day in Weekday.ordered()}
            for row in run.employees
        }


def stored_planning(run: PlanningRun) -> GeneratedPlanning:
    """Rebuild a GeneratedPlanning from a stored run."""
    return planning_from_dict(PlanningRunRepository.to_planning_dict(run))
