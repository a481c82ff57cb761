"""Input validation: structural checks via pydantic, then cross-field checks."""

from __future__ import annotations

from datetime import date
from typing import Any, List, Optional, Tuple

from pydantic import ValidationError

from shiftplanner.config import PlannerConfig
from shiftplanner.domain.types import (
    CompanyConstraints,
    Employee,
    EmployeeException,
    ExceptionType,
    PlanningRequest,
    Preference,
    ValidationIssue,
    Weekday,
)
from shiftplanner.errors import PlanningValidationError
from shiftplanner.schemas import CompanyConstraintsPayload, EmployeePayload, PlanningRequestPayload

from .timeplan import iso_week_dates, parse_time_range, week_contains


def _field_path(loc) -> str:
    return ".".join(str(part) for part in loc) or "body"


def issues_from_validation_error(exc: ValidationError) -> List[ValidationIssue]:
    return [
        ValidationIssue(field=_field_path(err["loc"]), message=err["msg"], code=err["type"])
        for err in exc.errors()
    ]


def _week_issue(year: int, week: int) -> Optional[ValidationIssue]:
    try:
        iso_week_dates(year, week)
    except ValueError:
        return ValidationIssue(
            field="weekNumber",
            message=f"Year {year} has no ISO week {week}",
            code="invalid_iso_week",
        )
    return None


def _employee_issues(
    year: Optional[int],
    week: Optional[int],
    employees: List[Tuple[int, Optional[str], List[Tuple[int, date]]]],
) -> List[ValidationIssue]:
    """Duplicate ids and out-of-week exception dates; week checks are skipped when week is None."""
    issues: List[ValidationIssue] = []
    seen = {}
    for idx, key, exceptions in employees:
        if key is not None:
            if key in seen:
                issues.append(
                    ValidationIssue(
                        field=f"employees.{idx}.id",
                        message=f"Duplicate employee id '{key}' (first seen at employees.{seen[key]})",
                        code="duplicate_employee",
                    )
                )
            else:
                seen[key] = idx

        if week is None:
            continue
        for exc_idx, exc_date in exceptions:
            if not week_contains(year, week, exc_date):
                issues.append(
                    ValidationIssue(
                        field=f"employees.{idx}.exceptions.{exc_idx}.date",
                        message=(
                            f"Exception date {exc_date.isoformat()} is outside ISO week "
                            f"{year}-W{week:02d}"
                        ),
                        code="date_outside_week",
                    )
                )
    return issues


def _daily_hours_issue(min_hours, max_hours) -> Optional[ValidationIssue]:
    if min_hours is not None and max_hours is not None and min_hours > max_hours:
        return ValidationIssue(
            field="companyConstraints.minHoursPerDay",
            message="minHoursPerDay must not exceed maxHoursPerDay",
            code="min_above_max",
        )
    return None


def cross_field_issues(payload: PlanningRequestPayload) -> List[ValidationIssue]:
    """
    Checks that need more than one field: ISO week existence, exception dates
    inside the target week, duplicate employee ids, min/max daily hours.
    """
    issues: List[ValidationIssue] = []
    week_issue = _week_issue(payload.year, payload.weekNumber)
    if week_issue is not None:
        issues.append(week_issue)

    employees = [
        (idx, str(emp.id), [(exc_idx, exc.date) for exc_idx, exc in enumerate(emp.exceptions)])
        for idx, emp in enumerate(payload.employees)
    ]
    issues.extend(
        _employee_issues(payload.year, None if week_issue else payload.weekNumber, employees)
    )

    cc = payload.companyConstraints
    if cc is not None:
        hours_issue = _daily_hours_issue(cc.minHoursPerDay, cc.maxHoursPerDay)
        if hours_issue is not None:
            issues.append(hours_issue)
    return issues


def _raw_int(value) -> Optional[int]:
    return value if isinstance(value, int) and not isinstance(value, bool) else None


def _raw_number(value):
    return value if isinstance(value, (int, float)) and not isinstance(value, bool) else None


def _raw_date(value) -> Optional[date]:
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError:
            return None
    return None


def partial_cross_field_issues(raw: Any, flagged: List[str]) -> List[ValidationIssue]:
    """
    Cross-field checks over a payload that failed the structural pass.

    Only the parts that can be read as-is are checked, and fields already
    reported by the structural pass are left out.

    Args:
        raw: Decoded JSON body
        flagged: Field paths reported by the structural pass

    Returns:
        List of cross-field ValidationIssue
    """
    if not isinstance(raw, dict):
        return []

    def is_flagged(field: str) -> bool:
        return any(field == f or field.startswith(f + ".") for f in flagged)

    issues: List[ValidationIssue] = []
    year, week = _raw_int(raw.get("year")), _raw_int(raw.get("weekNumber"))
    if is_flagged("year") or is_flagged("weekNumber") or year is None or week is None or not 1 <= week <= 53:
        week = None
    else:
        week_issue = _week_issue(year, week)
        if week_issue is not None:
            issues.append(week_issue)
            week = None

    employees = []
    raw_employees = raw.get("employees")
    for idx, emp in enumerate(raw_employees if isinstance(raw_employees, list) else []):
        if not isinstance(emp, dict):
            continue
        emp_id = emp.get("id", emp.get("_id"))
        key = None
        if not is_flagged(f"employees.{idx}.id") and not is_flagged(f"employees.{idx}._id"):
            if _raw_int(emp_id) is not None or (isinstance(emp_id, str) and emp_id.strip()):
                key = str(emp_id)
        exceptions = []
        raw_exceptions = emp.get("exceptions")
        for exc_idx, exc in enumerate(raw_exceptions if isinstance(raw_exceptions, list) else []):
            if not isinstance(exc, dict) or is_flagged(f"employees.{idx}.exceptions.{exc_idx}.date"):
                continue
            exc_date = _raw_date(exc.get("date"))
            if exc_date is not None:
                exceptions.append((exc_idx, exc_date))
        employees.append((idx, key, exceptions))
    issues.extend(_employee_issues(year, week, employees))

    cc = raw.get("companyConstraints")
    if isinstance(cc, dict) and not is_flagged("companyConstraints.minHoursPerDay") and not is_flagged(
        "companyConstraints.maxHoursPerDay"
    ):
        hours_issue = _daily_hours_issue(_raw_number(cc.get("minHoursPerDay")), _raw_number(cc.get("maxHoursPerDay")))
        if hours_issue is not None:
            issues.append(hours_issue)
    return issues


def _to_employee(payload: EmployeePayload) -> Employee:
    preference = None
    if payload.preferences is not None:
        p = payload.preferences
        preference = Preference(
            preferred_days=[Weekday.parse(d) for d in p.preferredDays] if p.preferredDays is not None else None,
            preferred_hours=[parse_time_range(h) for h in p.preferredHours] if p.preferredHours is not None else None,
            allow_split_shifts=p.allowSplitShifts,
            max_consecutive_days=p.maxConsecutiveDays,
        )
    return Employee(
        id=str(payload.id),
        contract_hours_per_week=float(payload.contractHoursPerWeek),
        exceptions=[EmployeeException(date=e.date, type=ExceptionType(e.type)) for e in payload.exceptions],
        preference=preference,
        rest_day=Weekday.parse(payload.restDay) if payload.restDay is not None else None,
    )


def _to_constraints(payload: Optional[CompanyConstraintsPayload]) -> Optional[CompanyConstraints]:
    if payload is None:
        return None
    return CompanyConstraints(
        open_days=[Weekday.parse(d) for d in payload.openDays] if payload.openDays is not None else None,
        open_hours=[parse_time_range(h) for h in payload.openHours] if payload.openHours is not None else None,
        min_employees_per_slot=payload.minEmployeesPerSlot,
        max_hours_per_day=payload.maxHoursPerDay,
        min_hours_per_day=payload.minHoursPerDay,
        mandatory_lunch_break=payload.mandatoryLunchBreak,
        lunch_break_duration=payload.lunchBreakDuration,
    )


def to_planning_request(payload: PlanningRequestPayload) -> PlanningRequest:
    return PlanningRequest(
        week_number=payload.weekNumber,
        year=payload.year,
        employees=[_to_employee(e) for e in payload.employees],
        company_constraints=_to_constraints(payload.companyConstraints),
    )


def check_payload(raw: Any, cfg: PlannerConfig) -> Tuple[Optional[PlanningRequest], List[ValidationIssue]]:
    """
    Validate a raw request body.

    Args:
        raw: Decoded JSON body
        cfg: PlannerConfig (year bounds, contract ceiling, range rules)

    Returns:
        (PlanningRequest, []) when valid, (None, issues) otherwise. Structural
        and cross-field issues are returned together; when the structural pass
        fails, the cross-field checks run over the readable parts of `raw`.
    """
    try:
        payload = PlanningRequestPayload.model_validate(raw, context={"config": cfg})
    except ValidationError as exc:
        issues = issues_from_validation_error(exc)
        issues.extend(partial_cross_field_issues(raw, [issue.field for issue in issues]))
        return None, issues

    issues = cross_field_issues(payload)
    if issues:
        return None, issues
    return to_planning_request(payload), []


def parse_planning_request(raw: Any, cfg: PlannerConfig) -> PlanningRequest:
    """
    Validate a raw request body and build the PlanningRequest.

    Raises:
        PlanningValidationError: With every collected issue
    """
    request, issues = check_payload(raw, cfg)
    if issues:
        raise PlanningValidationError(issues)
    return request
