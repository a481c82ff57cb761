"""In-memory planning entities built from a request and discarded after the response."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional


_DAY_ALIASES = {
    "mon": "monday", "tue": "tuesday", "wed": "wednesday", "thu": "thursday",
    "fri": "friday", "sat": "saturday", "sun": "sunday",
    # French day names sent by the planning wizard
    "lundi": "monday", "mardi": "tuesday", "mercredi": "wednesday", "jeudi": "thursday",
    "vendredi": "friday", "samedi": "saturday", "dimanche": "sunday",
}


class Weekday(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @property
    def position(self) -> int:
        """0 for Monday through 6 for Sunday (matches date.weekday())."""
        return _WEEKDAY_ORDER.index(self)

    @classmethod
    def ordered(cls) -> List["Weekday"]:
        return list(_WEEKDAY_ORDER)

    @classmethod
    def from_index(cls, index: int) -> "Weekday":
        return _WEEKDAY_ORDER[index]

    @classmethod
    def parse(cls, value: str) -> "Weekday":
        """Parse an English name, a three-letter abbreviation or a French day name."""
        key = str(value).strip().lower()
        key = _DAY_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown weekday: {value!r}") from None


_WEEKDAY_ORDER = [
    Weekday.MONDAY, Weekday.TUESDAY, Weekday.WEDNESDAY, Weekday.THURSDAY,
    Weekday.FRIDAY, Weekday.SATURDAY, Weekday.SUNDAY,
]


class ExceptionType(str, Enum):
    VACATION = "vacation"
    SICK = "sick"
    UNAVAILABLE = "unavailable"
    TRAINING = "training"
    REDUCED = "reduced"

    @property
    def is_blocking(self) -> bool:
        return self is not ExceptionType.REDUCED


class Availability(str, Enum):
    OPEN = "open"
    REDUCED = "reduced"
    BLOCKED = "blocked"


def format_minutes(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


@dataclass(frozen=True, order=True)
class TimeSlot:
    """Half-open time range [start, end) in minutes since midnight."""

    start: int
    end: int

    @property
    def duration_minutes(self) -> int:
        return self.end - self.start

    @property
    def hours(self) -> float:
        return self.duration_minutes / 60.0

    def overlaps(self, other: "TimeSlot") -> bool:
        return self.start < other.end and other.start < self.end

    def contains(self, other: "TimeSlot") -> bool:
        return self.start <= other.start and other.end <= self.end

    def intersection(self, other: "TimeSlot") -> Optional["TimeSlot"]:
        start, end = max(self.start, other.start), min(self.end, other.end)
        if start >= end:
            return None
        return TimeSlot(start, end)

    def to_range_string(self) -> str:
        return f"{format_minutes(self.start)}-{format_minutes(self.end)}"

    def to_dict(self) -> Dict[str, str]:
        return {"start": format_minutes(self.start), "end": format_minutes(self.end)}

    def __repr__(self) -> str:
        return f"<TimeSlot {self.to_range_string()}>"


@dataclass(frozen=True)
class EmployeeException:
    date: date
    type: ExceptionType


@dataclass
class Preference:
    """Soft scheduling hints. None on a field means the hint was not given."""

    preferred_days: Optional[List[Weekday]] = None
    preferred_hours: Optional[List[TimeSlot]] = None
    allow_split_shifts: Optional[bool] = None
    max_consecutive_days: Optional[int] = None

    @property
    def has_day_preference(self) -> bool:
        return bool(self.preferred_days)

    @property
    def has_hour_preference(self) -> bool:
        return bool(self.preferred_hours)


@dataclass
class Employee:
    id: str
    contract_hours_per_week: float
    exceptions: List[EmployeeException] = field(default_factory=list)
    preference: Optional[Preference] = None
    rest_day: Optional[Weekday] = None

    def __repr__(self) -> str:
        return f"<Employee(id={self.id!r}, contract={self.contract_hours_per_week}h)>"


@dataclass
class CompanyConstraints:
    open_days: Optional[List[Weekday]] = None
    open_hours: Optional[List[TimeSlot]] = None
    min_employees_per_slot: Optional[int] = None
    max_hours_per_day: Optional[float] = None
    min_hours_per_day: Optional[float] = None
    mandatory_lunch_break: Optional[bool] = None
    lunch_break_duration: Optional[int] = None


@dataclass
class PlanningRequest:
    week_number: int
    year: int
    employees: List[Employee]
    company_constraints: Optional[CompanyConstraints] = None

    @property
    def week_id(self) -> str:
        return f"{self.year}-W{self.week_number:02d}"


@dataclass
class ValidationIssue:
    field: str
    message: str
    code: str

    def to_dict(self) -> Dict[str, str]:
        return {"field": self.field, "message": self.message, "code": self.code}


@dataclass
class PlanningWarning:
    code: str
    message: str
    employee_id: Optional[str] = None
    day: Optional[Weekday] = None
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.employee_id is not None:
            data["employeeId"] = self.employee_id
        if self.day is not None:
            data["day"] = self.day.value
        if self.details:
            data["details"] = self.details
        return data


# employee id -> weekday -> ordered, non-overlapping slots
DaySchedule = Dict[Weekday, List[TimeSlot]]
GeneratedPlanning = Dict[str, DaySchedule]


def empty_day_schedule() -> DaySchedule:
    return {day: [] for day in Weekday.ordered()}


def planning_to_dict(planning: GeneratedPlanning) -> Dict[str, Dict[str, List[Dict[str, str]]]]:
    return {
        emp_id: {day.value: [slot.to_dict() for slot in schedule.get(day, [])] for day in Weekday.ordered()}
        for emp_id, schedule in planning.items()
    }


@dataclass
class PlanningStats:
    total_hours_planned: float
    average_hours_per_employee: float
    employees_with_full_schedule: int
    days_with_activity: int
    employee_hours: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalHoursPlanned": self.total_hours_planned,
            "averageHoursPerEmployee": self.average_hours_per_employee,
            "employeesWithFullSchedule": self.employees_with_full_schedule,
            "daysWithActivity": self.days_with_activity,
            "employeeHours": dict(self.employee_hours),
        }


@dataclass
class PlanningMetadata:
    week_number: int
    year: int
    employee_count: int
    generated_at: datetime
    week_start: date
    stats: PlanningStats
    ordering: str = "input_order"
    warnings: List[PlanningWarning] = field(default_factory=list)

    @property
    def week_id(self) -> str:
        return f"{self.year}-W{self.week_number:02d}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "weekNumber": self.week_number,
            "year": self.year,
            "weekId": self.week_id,
            "weekStart": self.week_start.isoformat(),
            "employeeCount": self.employee_count,
            "generatedAt": self.generated_at.isoformat(),
            "ordering": self.ordering,
            "stats": self.stats.to_dict(),
            "warnings": [w.to_dict() for w in self.warnings],
        }


@dataclass
class GenerationResult:
    planning: GeneratedPlanning
    metadata: PlanningMetadata

    @property
    def stats(self) -> PlanningStats:
        return self.metadata.stats

    @property
    def warnings(self) -> List[PlanningWarning]:
        return self.metadata.warnings

    def to_response(self, message: str = "Planning generated successfully") -> Dict[str, Any]:
        return {
            "success": True,
            "message": message,
            "planning": planning_to_dict(self.planning),
            "metadata": self.metadata.to_dict(),
            "stats": self.stats.to_dict(),
        }
