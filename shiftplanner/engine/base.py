"""Base allocator interface that every assignment strategy must implement."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Dict, List

from shiftplanner.config import PlannerConfig
from shiftplanner.domain.types import Availability, DaySchedule, Employee, TimeSlot, Weekday
from shiftplanner.services.constraints import DailyRules
from shiftplanner.services.coverage import CoverageLedger


@dataclass
class AllocationContext:
    """Everything an allocator may read while placing one employee."""

    week_dates: Dict[Weekday, date]
    windows: Dict[Weekday, List[TimeSlot]]
    rules: DailyRules
    cfg: PlannerConfig
    ledger: CoverageLedger


class BaseAllocator(ABC):
    """
    Abstract base class for per-employee allocators.

    An allocator places one employee at a time; the orchestrator calls it in
    the configured employee order and shares one CoverageLedger between calls.
    """

    name: str | None = None  # Override in subclasses

    @abstractmethod
    def allocate(
        self,
        employee: Employee,
        availability: Dict[Weekday, Availability],
        ctx: AllocationContext,
    ) -> DaySchedule:
        """
        Build the week's slots for one employee.

        Args:
            employee: Employee to place
            availability: Weekday -> Availability for this employee
            ctx: Shared allocation context (windows, rules, ledger)

        Returns:
            DaySchedule with every weekday key, slots sorted and non-overlapping.
            The allocator records its placements in ctx.ledger.
        """
        pass

    def get_name(self) -> str:
        return self.name or type(self).__name__
