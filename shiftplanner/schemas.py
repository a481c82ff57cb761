"""Pydantic request models for planning generation.

Field names follow the JSON payload (camelCase). Bounds that depend on the
planner configuration read it from the validation context, so every issue in
a payload is collected in one pass.
"""

from __future__ import annotations

import datetime as dt
from typing import List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictInt, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

from shiftplanner.config import PlannerConfig
from shiftplanner.domain.types import Weekday
from shiftplanner.services.timeplan import parse_time_range

ExceptionKind = Literal["vacation", "sick", "unavailable", "training", "reduced"]


def _config(info: ValidationInfo) -> PlannerConfig:
    ctx = info.context or {}
    return ctx.get("config") or PlannerConfig()


def _check_weekday(value: str) -> str:
    try:
        Weekday.parse(value)
    except ValueError:
        raise PydanticCustomError("invalid_weekday", "Unknown weekday '{value}'", {"value": value})
    return value


def _check_time_range(value: str) -> str:
    try:
        parse_time_range(value)
    except ValueError as exc:
        raise PydanticCustomError("invalid_time_range", "{reason}", {"reason": str(exc)})
    return value


def _check_range(value, bounds, code: str, label: str):
    low, high = bounds
    if value is not None and not low <= value <= high:
        raise PydanticCustomError(code, "{label} must be between {low} and {high}", {"label": label, "low": low, "high": high})
    return value


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore")


class ExceptionPayload(_Payload):
    date: dt.date
    type: ExceptionKind


class PreferencePayload(_Payload):
    preferredDays: Optional[List[str]] = None
    preferredHours: Optional[List[str]] = None
    allowSplitShifts: Optional[bool] = None
    maxConsecutiveDays: Optional[int] = Field(default=None, ge=1, le=7)

    @field_validator("preferredDays")
    @classmethod
    def _days(cls, value):
        if value is not None:
            for day in value:
                _check_weekday(day)
        return value

    @field_validator("preferredHours")
    @classmethod
    def _hours(cls, value):
        if value is not None:
            for item in value:
                _check_time_range(item)
        return value


class EmployeePayload(_Payload):
    id: Union[StrictInt, str] = Field(validation_alias=AliasChoices("id", "_id"))
    contractHoursPerWeek: float = Field(gt=0)
    exceptions: List[ExceptionPayload] = Field(default_factory=list)
    preferences: Optional[PreferencePayload] = None
    restDay: Optional[str] = None

    @field_validator("id")
    @classmethod
    def _id(cls, value):
        if isinstance(value, str) and not value.strip():
            raise PydanticCustomError("empty_id", "Employee id must not be empty")
        return value

    @field_validator("contractHoursPerWeek")
    @classmethod
    def _contract(cls, value: float, info: ValidationInfo):
        ceiling = _config(info).validation.max_contract_hours
        if value > ceiling:
            raise PydanticCustomError(
                "contract_hours_too_high",
                "Contract hours must not exceed {ceiling}",
                {"ceiling": ceiling},
            )
        return value

    @field_validator("restDay")
    @classmethod
    def _rest_day(cls, value):
        return _check_weekday(value) if value is not None else value


class CompanyConstraintsPayload(_Payload):
    openDays: Optional[List[str]] = None
    openHours: Optional[List[str]] = None
    minEmployeesPerSlot: Optional[int] = Field(default=None, ge=0)
    maxHoursPerDay: Optional[float] = None
    minHoursPerDay: Optional[float] = None
    mandatoryLunchBreak: Optional[bool] = None
    lunchBreakDuration: Optional[int] = None

    @field_validator("openDays")
    @classmethod
    def _days(cls, value):
        if value is not None:
            for day in value:
                _check_weekday(day)
        return value

    @field_validator("openHours")
    @classmethod
    def _hours(cls, value):
        if value is not None:
            for item in value:
                _check_time_range(item)
        return value

    @field_validator("maxHoursPerDay")
    @classmethod
    def _max_hours(cls, value, info: ValidationInfo):
        limits = _config(info).validation
        return _check_range(value, limits.max_hours_per_day_range, "max_hours_out_of_range", "maxHoursPerDay")

    @field_validator("minHoursPerDay")
    @classmethod
    def _min_hours(cls, value, info: ValidationInfo):
        limits = _config(info).validation
        return _check_range(value, limits.min_hours_per_day_range, "min_hours_out_of_range", "minHoursPerDay")

    @field_validator("lunchBreakDuration")
    @classmethod
    def _lunch(cls, value, info: ValidationInfo):
        limits = _config(info).validation
        return _check_range(value, limits.lunch_duration_range, "lunch_duration_out_of_range", "lunchBreakDuration")


class PlanningRequestPayload(_Payload):
    weekNumber: int = Field(ge=1, le=53)
    year: int
    employees: List[EmployeePayload] = Field(min_length=1)
    companyConstraints: Optional[CompanyConstraintsPayload] = None

    @field_validator("year")
    @classmethod
    def _year(cls, value: int, info: ValidationInfo):
        limits = _config(info).validation
        return _check_range(value, (limits.min_year, limits.max_year), "year_out_of_range", "year")
