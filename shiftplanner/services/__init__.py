"""Services for planning logic."""

from .availability import resolve_availability, resolve_team_availability
from .constraints import DailyRules, resolve_daily_rules, validate_planning_constraints
from .coverage import CoverageLedger, check_coverage
from .lunch import inject_lunch_breaks
from .opening import build_opening_windows
from .scoring import rank_candidates
from .stats import calculate_planning_stats, calculate_total_hours, planning_to_frame
from .timeplan import calculate_shift_hours, iso_week_dates, parse_time_range

__all__ = [
    "resolve_availability",
    "resolve_team_availability",
    "DailyRules",
    "resolve_daily_rules",
    "validate_planning_constraints",
    "CoverageLedger",
    "check_coverage",
    "inject_lunch_breaks",
    "build_opening_windows",
    "rank_candidates",
    "calculate_planning_stats",
    "calculate_total_hours",
    "planning_to_frame",
    "calculate_shift_hours",
    "iso_week_dates",
    "parse_time_range",
]
