"""Planner configuration: documented defaults and JSON/YAML loading."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Any, Dict

import yaml


@dataclass
class DailyDefaults:
    """Company constraints applied when the request leaves them out."""

    open_hours: str = "09:00-17:00"
    max_hours_per_day: float = 8.0
    min_hours_per_day: float = 2.0
    min_employees_per_slot: int = 0


@dataclass
class LunchPolicy:
    default_duration_minutes: int = 60
    threshold_hours: float = 6.0  # blocks strictly longer than this get a break


@dataclass
class ValidationLimits:
    min_year: int = 2023
    max_year: int = 2030
    max_contract_hours: float = 60.0
    max_hours_per_day_range: tuple = (4.0, 12.0)
    min_hours_per_day_range: tuple = (1.0, 12.0)
    lunch_duration_range: tuple = (30, 120)


@dataclass
class EngineLimits:
    granularity_minutes: int = 15
    split_shift_gap_minutes: int = 30
    max_candidates_per_employee: int = 64
    min_daily_rest_hours: float = 11.0
    default_max_consecutive_days: int = 6
    reduced_day_factor: float = 0.5


@dataclass
class PlannerConfig:
    daily_defaults: DailyDefaults = field(default_factory=DailyDefaults)
    lunch: LunchPolicy = field(default_factory=LunchPolicy)
    validation: ValidationLimits = field(default_factory=ValidationLimits)
    engine: EngineLimits = field(default_factory=EngineLimits)
    employee_ordering: str = "input_order"
    full_schedule_tolerance_hours: float = 0.5
    default_allow_split_shifts: bool = False
    debug: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _build(cls, raw: Dict[str, Any], path: str):
    if not isinstance(raw, dict):
        raise ValueError(f"Config section '{path or 'root'}' must be a mapping")
    known = {f.name: f for f in fields(cls)}
    unknown = sorted(set(raw) - set(known))
    if unknown:
        raise ValueError(f"Unknown config keys in '{path or 'root'}': {', '.join(unknown)}")

    kwargs: Dict[str, Any] = {}
    defaults = cls()
    for name, value in raw.items():
        current = getattr(defaults, name)
        if is_dataclass(current):
            kwargs[name] = _build(type(current), value, f"{path}.{name}" if path else name)
        elif isinstance(current, tuple):
            if not isinstance(value, (list, tuple)) or len(value) != 2:
                raise ValueError(f"Config key '{name}' must be a [low, high] pair")
            kwargs[name] = (value[0], value[1])
        else:
            kwargs[name] = value
    return cls(**kwargs)


def load_config(path: str | Path | None = None) -> PlannerConfig:
    """
    Load planner configuration from a JSON or YAML file.

    Missing keys keep their defaults; unknown keys raise ValueError so typos
    do not silently fall back to a default.

    Args:
        path: Path to a .json, .yaml or .yml file. None returns the defaults.

    Returns:
        PlannerConfig instance
    """
    if path is None:
        return PlannerConfig()

    path = Path(path)
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in {".yaml", ".yml"}:
        raw = yaml.safe_load(text) or {}
    elif path.suffix.lower() == ".json":
        raw = json.loads(text) if text.strip() else {}
    else:
        raise ValueError(f"Unsupported config format: {path.suffix or path.name}")

    cfg = _build(PlannerConfig, raw, "")
    _check_config(cfg)
    return cfg


def _check_config(cfg: PlannerConfig) -> None:
    eng = cfg.engine
    if eng.granularity_minutes <= 0 or 60 % eng.granularity_minutes != 0:
        raise ValueError("engine.granularity_minutes must divide 60")
    if not 0 < eng.reduced_day_factor <= 1:
        raise ValueError("engine.reduced_day_factor must be in (0, 1]")
    if eng.max_candidates_per_employee < 1:
        raise ValueError("engine.max_candidates_per_employee must be positive")
    if cfg.validation.min_year > cfg.validation.max_year:
        raise ValueError("validation.min_year must not exceed validation.max_year")
    if cfg.full_schedule_tolerance_hours < 0:
        raise ValueError("full_schedule_tolerance_hours must be >= 0")
