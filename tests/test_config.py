"""Tests for configuration loading."""

import json

import pytest

from shiftplanner.config import PlannerConfig, load_config


def test_defaults():
    cfg = load_config(None)
    assert cfg == PlannerConfig()
    assert cfg.daily_defaults.open_hours == "09:00-17:00"
    assert cfg.lunch.default_duration_minutes == 60
    assert cfg.engine.granularity_minutes == 15
    assert cfg.full_schedule_tolerance_hours == 0.5


def test_load_yaml_overrides(tmp_path):
    path = tmp_path / "planner.yaml"
    path.write_text(
        "employee_ordering: most_constrained_first\n"
        "daily_defaults:\n"
        "  min_employees_per_slot: 1\n"
        "validation:\n"
        "  max_hours_per_day_range: [4, 10]\n",
        encoding="utf-8",
    )
    cfg = load_config(path)
    assert cfg.employee_ordering == "most_constrained_first"
    assert cfg.daily_defaults.min_employees_per_slot == 1
    assert cfg.daily_defaults.max_hours_per_day == 8.0
    assert cfg.validation.max_hours_per_day_range == (4, 10)


def test_load_json(tmp_path):
    path = tmp_path / "planner.json"
    path.write_text(json.dumps({"engine": {"granularity_minutes": 30}, "debug": True}), encoding="utf-8")
    cfg = load_config(path)
    assert cfg.engine.granularity_minutes == 30
    assert cfg.debug is True


@pytest.mark.parametrize(
    "name, text",
    [
        ("bad.yaml", "lunch:\n  duration: 45\n"),
        ("bad.yaml", "engine:\n  granularity_minutes: 7\n"),
        ("bad.yaml", "validation:\n  min_year: 2031\n"),
        ("bad.toml", "debug = true\n"),
    ],
)
def test_invalid_config_rejected(tmp_path, name, text):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)
