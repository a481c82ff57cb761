"""SQLAlchemy models for stored planning runs (caller-side persistence)."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, Date, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import DeclarativeBase, relationship


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class PlanningRun(Base):
    """One generated planning for an ISO week, with its statistics and warnings."""

    __tablename__ = "planning_runs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    week_id = Column(String(10), nullable=False, index=True)  # ISO week format: 2025-W36
    week_number = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    week_start = Column(Date, nullable=False)
    ordering = Column(String(50), nullable=False, default="input_order")
    employee_count = Column(Integer, nullable=False)
    total_hours = Column(Float, nullable=False, default=0.0)
    stats = Column(JSON, nullable=False, default=dict)
    warnings = Column(JSON, nullable=False, default=list)
    generated_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, nullable=False, default=_utcnow)

    # Relationships
    employees = relationship(
        "EmployeePlanning",
        back_populates="run",
        cascade="all, delete-orphan",
        order_by="EmployeePlanning.position",
    )

    def __repr__(self) -> str:
        return f"<PlanningRun(id={self.id}, week={self.week_id}, employees={self.employee_count}, hours={self.total_hours})>"


class EmployeePlanning(Base):
    """One employee's weekly schedule inside a run (weekday -> [{start, end}])."""

    __tablename__ = "employee_plannings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    run_id = Column(Integer, ForeignKey("planning_runs.id", ondelete="CASCADE"), nullable=False)
    employee_id = Column(String(64), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    planned_hours = Column(Float, nullable=False, default=0.0)
    schedule = Column(JSON, nullable=False, default=dict)

    # Relationships
    run = relationship("PlanningRun", back_populates="employees")

    def __repr__(self) -> str:
        return f"<EmployeePlanning(run={self.run_id}, emp={self.employee_id}, hours={self.planned_hours})>"
