"""Exception hierarchy for planning generation."""

from __future__ import annotations

from typing import List

from shiftplanner.domain.types import ValidationIssue


class PlanningError(Exception):
    """Base class for every error raised by the planner."""


class PlanningValidationError(PlanningError):
    """The request payload was rejected; carries every collected issue."""

    def __init__(self, issues: List[ValidationIssue], message: str = "Invalid planning generation parameters"):
        super().__init__(message)
        self.message = message
        self.issues = list(issues)

    def __str__(self) -> str:
        details = "; ".join(f"{i.field}: {i.message}" for i in self.issues)
        return f"{self.message} ({details})" if details else self.message


class PlanningIntegrityError(PlanningError):
    """The engine produced a planning that breaks its own output invariants."""

    def __init__(self, problems: List[str]):
        super().__init__("Generated planning failed integrity checks: " + "; ".join(problems))
        self.problems = list(problems)
