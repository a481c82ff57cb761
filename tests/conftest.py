"""Pytest configuration and shared fixtures."""

import copy

import pytest

from shiftplanner.config import PlannerConfig
from shiftplanner.engine.orchestrator import build_week_planning
from shiftplanner.services.validation import parse_planning_request

WEEKDAYS_MON_FRI = ["monday", "tuesday", "wednesday", "thursday", "friday"]


def pytest_configure(config):
    """Configure pytest."""
    # Add custom markers
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (deselect with '-m \"not integration\"')"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


@pytest.fixture
def cfg():
    """Default planner configuration."""
    return PlannerConfig()


@pytest.fixture
def base_payload():
    """One 40h employee, Monday-Friday 08:00-18:00, ISO week 2025-W10 (Mon 2025-03-03)."""
    return {
        "weekNumber": 10,
        "year": 2025,
        "employees": [{"id": 1, "contractHoursPerWeek": 40}],
        "companyConstraints": {
            "openDays": list(WEEKDAYS_MON_FRI),
            "openHours": ["08:00-18:00"],
            "maxHoursPerDay": 8,
        },
    }


@pytest.fixture
def generate(cfg):
    """Validate a payload and run the planner on it."""

    def _generate(payload, config=None, **kwargs):
        config = config or cfg
        request = parse_planning_request(copy.deepcopy(payload), config)
        return build_week_planning(request, config, **kwargs)

    return _generate
