"""Planning types. Persistence lives in the models, db and repositories submodules."""

from .types import (
    Availability,
    CompanyConstraints,
    Employee,
    EmployeeException,
    ExceptionType,
    GeneratedPlanning,
    GenerationResult,
    PlanningMetadata,
    PlanningRequest,
    PlanningStats,
    PlanningWarning,
    Preference,
    TimeSlot,
    ValidationIssue,
    Weekday,
)

__all__ = [
    "Availability",
    "CompanyConstraints",
    "Employee",
    "EmployeeException",
    "ExceptionType",
    "GeneratedPlanning",
    "GenerationResult",
    "PlanningMetadata",
    "PlanningRequest",
    "PlanningStats",
    "PlanningWarning",
    "Preference",
    "TimeSlot",
    "ValidationIssue",
    "Weekday",
]
