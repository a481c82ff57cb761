"""Orchestrator - runs the planning pipeline for one request and assembles the result."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List

from shiftplanner.config import PlannerConfig
from shiftplanner.domain.types import (
    GeneratedPlanning,
    GenerationResult,
    PlanningMetadata,
    PlanningRequest,
    PlanningWarning,
    Weekday,
    empty_day_schedule,
)
from shiftplanner.errors import PlanningIntegrityError
from shiftplanner.services.availability import resolve_team_availability
from shiftplanner.services.constraints import resolve_daily_rules, validate_planning_constraints
from shiftplanner.services.coverage import CoverageLedger, check_coverage
from shiftplanner.services.opening import build_opening_windows, open_weekdays
from shiftplanner.services.stats import calculate_planning_stats, undershoot_warnings
from shiftplanner.services.timeplan import iso_week_dates
from shiftplanner.validator import assert_planning_integrity

from .base import AllocationContext, BaseAllocator
from .greedy import GreedyAllocator
from .ordering import OrderingKey, get_ordering, order_employees


class Orchestrator:
    """
    Orchestrator drives availability, opening windows, allocation, coverage
    and statistics for one planning request.

    Employees are placed one at a time in the configured order, all sharing a
    single coverage ledger; the merged planning is then validated against the
    hard constraints before statistics and warnings are attached.
    """

    def __init__(self, cfg: PlannerConfig, ordering: str | OrderingKey | None = None, allocator: BaseAllocator | None = None):
        """
        Initialize orchestrator.

        Args:
            cfg: PlannerConfig
            ordering: Strategy name or key function (default: cfg.employee_ordering)
            allocator: Per-employee allocator (default: GreedyAllocator)
        """
        self.cfg = cfg
        self.ordering_key = get_ordering(ordering or cfg.employee_ordering)
        self.ordering = getattr(self.ordering_key, "__name__", "custom")
        self.allocator = allocator or GreedyAllocator()

    def build_planning(self, request: PlanningRequest, now: datetime | None = None) -> GenerationResult:
        """
        Build the weekly planning for a validated request.

        Args:
            request: Validated PlanningRequest
            now: Generation timestamp (default: current UTC time)

        Returns:
            GenerationResult with planning, statistics and warnings

        Raises:
            PlanningIntegrityError: If the generated planning breaks a hard constraint
        """
        cfg = self.cfg
        print(f"[INFO] Orchestrator: Building planning for {request.week_id}")
        print(f"[INFO] Employees: {len(request.employees)}, ordering: {self.ordering}, allocator: {self.allocator.get_name()}")

        week_dates = iso_week_dates(request.year, request.week_number)
        windows = build_opening_windows(request.company_constraints, cfg)
        rules = resolve_daily_rules(request.company_constraints, cfg)
        availability = resolve_team_availability(request.employees, week_dates)
        print(f"[INFO] Open days: {', '.join(d.value for d in open_weekdays(windows)) or 'none'}")

        ctx = AllocationContext(
            week_dates=week_dates,
            windows=windows,
            rules=rules,
            cfg=cfg,
            ledger=CoverageLedger(rules.granularity),
        )

        warnings: List[PlanningWarning] = []
        planning: GeneratedPlanning = {emp.id: empty_day_schedule() for emp in request.employees}

        for emp in order_employees(request.employees, availability, windows, self.ordering_key):
            emp_avail = availability[emp.id]
            usable = [day for day in Weekday.ordered() if windows.get(day) and rules.cap_for(emp_avail[day]) > 0]
            if not usable:
                print(f"[WARN] Employee {emp.id} has no available day this week")
                warnings.append(
                    PlanningWarning(
                        code="no_available_days",
                        message=f"Employee {emp.id} has no day where both they and the company are available",
                        employee_id=emp.id,
                    )
                )
                continue

            schedule = self.allocator.allocate(emp, emp_avail, ctx)
            planning[emp.id] = {day: list(schedule.get(day, [])) for day in Weekday.ordered()}
            hours = sum(slot.hours for slots in planning[emp.id].values() for slot in slots)
            print(f"[OK] Employee {emp.id}: {hours:.2f}h / {emp.contract_hours_per_week}h")

        print(f"\n[INFO] Validating complete planning...")
        try:
            validate_planning_constraints(planning, availability, windows, rules)
        except ValueError as exc:
            print(f"[ERROR] Planning violates a hard constraint: {exc}")
            raise PlanningIntegrityError([str(exc)]) from exc
        assert_planning_integrity(planning, [emp.id for emp in request.employees])

        warnings.extend(check_coverage(planning, windows, rules.min_employees_per_slot, rules.granularity))
        warnings.extend(undershoot_warnings(planning, request.employees, cfg.full_schedule_tolerance_hours))

        for emp in request.employees:
            if not any(planning[emp.id].values()):
                warnings.append(
                    PlanningWarning(
                        code="empty_schedule",
                        message=f"No hours could be planned for employee {emp.id} this week",
                        employee_id=emp.id,
                    )
                )

        stats = calculate_planning_stats(planning, request.employees, cfg.full_schedule_tolerance_hours)
        for warning in warnings:
            print(f"[WARN] {warning.code}: {warning.message}")

        metadata = PlanningMetadata(
            week_number=request.week_number,
            year=request.year,
            employee_count=len(request.employees),
            generated_at=now or datetime.now(timezone.utc),
            week_start=week_dates[Weekday.MONDAY],
            stats=stats,
            ordering=self.ordering,
            warnings=warnings,
        )
        print(f"[OK] Orchestrator: {stats.total_hours_planned}h planned, {len(warnings)} warning(s)")
        return GenerationResult(planning=planning, metadata=metadata)


def build_week_planning(
    request: PlanningRequest,
    cfg: PlannerConfig | None = None,
    ordering: str | OrderingKey | None = None,
    allocator: BaseAllocator | None = None,
    now: datetime | None = None,
) -> GenerationResult:
    """
    Convenience function to build a week planning using the orchestrator.

    Args:
        request: Validated PlanningRequest
        cfg: PlannerConfig (default: built-in defaults)
        ordering: Optional strategy name or key function
        allocator: Optional allocator instance
        now: Optional generation timestamp

    Returns:
        GenerationResult
    """
    orchestrator = Orchestrator(cfg or PlannerConfig(), ordering=ordering, allocator=allocator)
    return orchestrator.build_planning(request, now=now)

