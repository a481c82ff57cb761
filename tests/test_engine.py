"""Tests for the planning engine (greedy allocator + orchestrator)."""

from datetime import datetime, timezone

import pytest

from shiftplanner.domain.types import Availability, Employee, TimeSlot, Weekday
from shiftplanner.engine.greedy import GreedyAllocator, water_fill
from shiftplanner.engine.orchestrator import Orchestrator
from shiftplanner.engine.ordering import get_ordering, most_constrained_first, order_employees
from shiftplanner.services.constraints import longest_run, schedule_days
from shiftplanner.services.stats import calculate_total_hours
from shiftplanner.services.validation import parse_planning_request
from shiftplanner.validator import validate_generated_planning

WEEKDAYS_MON_FRI = ["monday", "tuesday", "wednesday", "thursday", "friday"]


def _ranges(slots):
    return [s.to_range_string() for s in slots]


def _hours(schedule):
    return round(sum(s.hours for slots in schedule.values() for s in slots), 2)


def _warning_codes(result):
    return [w.code for w in result.warnings]


# ------------------------------------------------------------------ properties


def test_every_employee_and_weekday_present(base_payload, generate):
    base_payload["employees"].append({"id": "b", "contractHoursPerWeek": 10})
    result = generate(base_payload)
    assert list(result.planning) == ["1", "b"]
    for schedule in result.planning.values():
        assert list(schedule) == Weekday.ordered()
    response = result.to_response()
    assert list(response["planning"]["b"]) == [d.value for d in Weekday.ordered()]


def test_slots_are_ordered_non_overlapping_and_valid(base_payload, generate):
    base_payload["employees"] = [
        {"id": i, "contractHoursPerWeek": hours} for i, hours in enumerate([40, 35, 24, 12, 6], start=1)
    ]
    base_payload["companyConstraints"].update(minEmployeesPerSlot=2, mandatoryLunchBreak=True)
    result = generate(base_payload)
    for schedule in result.planning.values():
        for slots in schedule.values():
            assert slots == sorted(slots)
            for slot in slots:
                assert slot.start < slot.end
            for prev, nxt in zip(slots, slots[1:]):
                assert prev.end <= nxt.start
    assert validate_generated_planning(result.planning)


def test_total_hours_identity(base_payload, generate):
    base_payload["employees"].append({"id": 2, "contractHoursPerWeek": 17.5})
    result = generate(base_payload)
    expected = round(sum(_hours(s) for s in result.planning.values()), 2)
    assert result.stats.total_hours_planned == expected == calculate_total_hours(result.planning)
    assert result.stats.employee_hours == {"1": 40.0, "2": 17.5}


def test_generation_is_deterministic(base_payload, generate):
    base_payload["employees"] = [{"id": i, "contractHoursPerWeek": 30} for i in range(4)]
    base_payload["companyConstraints"]["minEmployeesPerSlot"] = 1
    now = datetime(2025, 3, 1, tzinfo=timezone.utc)
    first = generate(base_payload, now=now).to_response()
    second = generate(base_payload, now=now).to_response()
    assert first == second


def test_metadata(base_payload, generate):
    now = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)
    meta = generate(base_payload, now=now).metadata.to_dict()
    assert meta["weekNumber"] == 10
    assert meta["year"] == 2025
    assert meta["weekId"] == "2025-W10"
    assert meta["weekStart"] == "2025-03-03"
    assert meta["employeeCount"] == 1
    assert meta["generatedAt"] == now.isoformat()
    assert meta["ordering"] == "input_order"
    assert meta["warnings"] == []


# ------------------------------------------------------------------- scenarios


def test_full_time_over_five_open_days(base_payload, generate):
    result = generate(base_payload)
    schedule = result.planning["1"]
    for day in WEEKDAYS_MON_FRI:
        assert _ranges(schedule[Weekday(day)]) == ["08:00-16:00"]
    assert schedule[Weekday.SATURDAY] == [] and schedule[Weekday.SUNDAY] == []
    assert result.stats.total_hours_planned == 40.0
    assert result.stats.employees_with_full_schedule == 1
    assert result.stats.days_with_activity == 5
    assert result.warnings == []


def test_vacation_day_is_empty(base_payload, generate):
    base_payload["employees"][0]["exceptions"] = [{"date": "2025-03-05", "type": "vacation"}]
    result = generate(base_payload)
    schedule = result.planning["1"]
    assert schedule[Weekday.WEDNESDAY] == []
    assert _hours(schedule) == 32.0
    assert result.stats.employees_with_full_schedule == 0
    assert _warning_codes(result) == ["contract_undershoot"]
    assert result.warnings[0].details["missing"] == 8.0


def test_staffing_floor_above_headcount_warns_per_window(base_payload, generate):
    base_payload["companyConstraints"]["minEmployeesPerSlot"] = 2
    result = generate(base_payload)
    under = [w for w in result.warnings if w.code == "under_coverage"]
    assert [w.day.value for w in under] == WEEKDAYS_MON_FRI
    assert all(w.details == {"window": "08:00-18:00", "assigned": 1, "required": 2, "gaps": ["08:00-18:00"]}
               for w in under)
    assert result.stats.total_hours_planned == 40.0


def test_lunch_break_splits_eight_hour_block(base_payload, generate):
    base_payload["employees"][0]["contractHoursPerWeek"] = 7
    base_payload["companyConstraints"] = {
        "openDays": ["monday"],
        "openHours": ["09:00-17:00"],
        "maxHoursPerDay": 8,
        "mandatoryLunchBreak": True,
        "lunchBreakDuration": 60,
    }
    result = generate(base_payload)
    assert _ranges(result.planning["1"][Weekday.MONDAY]) == ["09:00-12:30", "13:30-17:00"]
    assert result.stats.total_hours_planned == 7.0


def test_lunch_break_reduces_capped_day_to_seven_hours(base_payload, generate):
    base_payload["companyConstraints"].update(openHours=["09:00-17:00"], mandatoryLunchBreak=True)
    result = generate(base_payload)
    for day in WEEKDAYS_MON_FRI:
        assert _ranges(result.planning["1"][Weekday(day)]) == ["09:00-12:30", "13:30-17:00"]
    assert result.stats.total_hours_planned == 35.0
    assert _warning_codes(result) == ["contract_undershoot"]


def test_lunch_break_placed_inside_longer_window(base_payload, generate):
    base_payload["companyConstraints"]["mandatoryLunchBreak"] = True
    result = generate(base_payload)
    # 8h of work plus the break fit in the 10h window
    assert _ranges(result.planning["1"][Weekday.MONDAY]) == ["08:00-12:00", "13:00-17:00"]
    assert result.stats.total_hours_planned == 40.0


# --------------------------------------------------------------- availability


def test_reduced_day_is_capped_at_half(base_payload, generate):
    base_payload["employees"][0]["exceptions"] = [{"date": "2025-03-04", "type": "reduced"}]
    result = generate(base_payload)
    schedule = result.planning["1"]
    assert _hours({Weekday.TUESDAY: schedule[Weekday.TUESDAY]}) == 4.0
    assert _hours(schedule) == 36.0


def test_rest_day_never_scheduled(base_payload, generate):
    base_payload["companyConstraints"].pop("openDays")
    base_payload["employees"][0]["restDay"] = "monday"
    result = generate(base_payload)
    assert result.planning["1"][Weekday.MONDAY] == []
    assert _hours(result.planning["1"]) == 40.0


def test_employee_without_available_day(base_payload, generate):
    base_payload["employees"][0]["exceptions"] = [
        {"date": f"2025-03-0{d}", "type": "training"} for d in range(3, 8)
    ]
    result = generate(base_payload)
    assert all(slots == [] for slots in result.planning["1"].values())
    assert _warning_codes(result) == ["no_available_days", "contract_undershoot", "empty_schedule"]


def test_empty_schedule_warning_names_the_employee(base_payload, generate):
    base_payload["employees"].append(
        {
            "id": 2,
            "contractHoursPerWeek": 20,
            "exceptions": [{"date": f"2025-03-0{d}", "type": "vacation"} for d in range(3, 8)],
        }
    )
    result = generate(base_payload)
    empty = [w for w in result.warnings if w.code == "empty_schedule"]
    assert [w.employee_id for w in empty] == ["2"]
    assert _hours(result.planning["1"]) == 40.0


def test_company_closed_all_week(base_payload, generate):
    base_payload["companyConstraints"]["openDays"] = []
    result = generate(base_payload)
    assert result.stats.total_hours_planned == 0.0
    assert "empty_schedule" in _warning_codes(result)


# ----------------------------------------------------------------- preferences


def test_preferred_days_come_first(base_payload, generate):
    base_payload["employees"][0].update(contractHoursPerWeek=16, preferences={"preferredDays": ["thursday", "friday"]})
    result = generate(base_payload)
    assert schedule_days(result.planning["1"]) == [Weekday.THURSDAY, Weekday.FRIDAY]


def test_preferred_hours_used_when_they_hold_the_share(base_payload, generate):
    base_payload["employees"][0].update(contractHoursPerWeek=15, preferences={"preferredHours": ["13:00-18:00"]})
    base_payload["companyConstraints"]["maxHoursPerDay"] = 5
    result = generate(base_payload)
    schedule = result.planning["1"]
    for day in (Weekday.MONDAY, Weekday.TUESDAY, Weekday.WEDNESDAY):
        assert _ranges(schedule[day]) == ["13:00-18:00"]
    assert schedule_days(schedule) == [Weekday.MONDAY, Weekday.TUESDAY, Weekday.WEDNESDAY]


def test_longer_share_leans_toward_preferred_hours(base_payload, generate):
    base_payload["employees"][0].update(contractHoursPerWeek=24, preferences={"preferredHours": ["13:00-18:00"]})
    result = generate(base_payload)
    assert _ranges(result.planning["1"][Weekday.MONDAY]) == ["10:00-18:00"]


def test_split_shift_follows_two_preferred_ranges(base_payload, generate):
    base_payload["employees"][0].update(
        contractHoursPerWeek=6,
        preferences={"preferredHours": ["08:00-11:00", "15:00-18:00"], "allowSplitShifts": True},
    )
    base_payload["companyConstraints"]["openDays"] = ["monday"]
    result = generate(base_payload)
    assert _ranges(result.planning["1"][Weekday.MONDAY]) == ["08:00-11:00", "15:00-18:00"]


def test_no_split_shift_means_one_block_per_day(base_payload, generate):
    base_payload["employees"][0].update(
        contractHoursPerWeek=6,
        preferences={"preferredHours": ["08:00-11:00", "15:00-18:00"], "allowSplitShifts": False},
    )
    base_payload["companyConstraints"]["openDays"] = ["monday"]
    result = generate(base_payload)
    assert len(result.planning["1"][Weekday.MONDAY]) == 1
    assert _hours(result.planning["1"]) == 6.0


def test_max_consecutive_days_preference(base_payload, generate):
    base_payload["companyConstraints"].pop("openDays")
    base_payload["employees"][0]["preferences"] = {"maxConsecutiveDays": 3}
    result = generate(base_payload)
    days = schedule_days(result.planning["1"])
    assert longest_run(days) <= 3
    assert days == [Weekday.MONDAY, Weekday.TUESDAY, Weekday.WEDNESDAY, Weekday.FRIDAY, Weekday.SATURDAY]
    assert _hours(result.planning["1"]) == 40.0


def test_default_max_consecutive_days(base_payload, generate):
    base_payload["companyConstraints"].pop("openDays")
    base_payload["employees"][0]["contractHoursPerWeek"] = 56
    result = generate(base_payload)
    assert result.planning["1"][Weekday.SUNDAY] == []
    assert _hours(result.planning["1"]) == 48.0


def test_short_contract_below_min_hours_still_planned(base_payload, generate):
    base_payload["employees"][0]["contractHoursPerWeek"] = 1
    result = generate(base_payload)
    assert _ranges(result.planning["1"][Weekday.MONDAY]) == ["08:00-09:00"]
    assert _hours(result.planning["1"]) == 1.0


def test_uneven_contract_is_spread_on_the_grid(base_payload, generate):
    base_payload["employees"][0]["contractHoursPerWeek"] = 38
    result = generate(base_payload)
    per_day = [_hours({d: s}) for d, s in result.planning["1"].items() if s]
    assert per_day == [7.75, 7.75, 7.5, 7.5, 7.5]


# -------------------------------------------------------------------- coverage


def test_second_employee_fills_uncovered_hours(base_payload, generate):
    base_payload["employees"] = [
        {"id": "a", "contractHoursPerWeek": 5},
        {"id": "b", "contractHoursPerWeek": 5},
    ]
    base_payload["companyConstraints"].update(openDays=["monday"], minEmployeesPerSlot=1)
    result = generate(base_payload)
    assert _ranges(result.planning["a"][Weekday.MONDAY]) == ["08:00-13:00"]
    assert _ranges(result.planning["b"][Weekday.MONDAY]) == ["13:00-18:00"]
    assert result.warnings == []


def test_days_spread_toward_understaffed_days(base_payload, generate):
    base_payload["employees"] = [
        {"id": "a", "contractHoursPerWeek": 16},
        {"id": "b", "contractHoursPerWeek": 16},
    ]
    base_payload["companyConstraints"].update(openDays=["monday", "tuesday", "wednesday", "thursday"],
                                              minEmployeesPerSlot=1)
    result = generate(base_payload)
    assert schedule_days(result.planning["a"]) == [Weekday.MONDAY, Weekday.TUESDAY]
    assert schedule_days(result.planning["b"]) == [Weekday.WEDNESDAY, Weekday.THURSDAY]


# -------------------------------------------------------------------- ordering


def test_ordering_strategies():
    with pytest.raises(ValueError):
        get_ordering("alphabetical")

    free = Employee(id="free", contract_hours_per_week=20)
    busy = Employee(id="busy", contract_hours_per_week=20)
    windows = {day: [TimeSlot(540, 1020)] for day in Weekday.ordered()}
    availability = {
        "free": {day: Availability.OPEN for day in Weekday.ordered()},
        "busy": {day: Availability.BLOCKED if day.position < 5 else Availability.OPEN for day in Weekday.ordered()},
    }
    assert order_employees([free, busy], availability, windows, get_ordering("input_order")) == [free, busy]
    assert order_employees([free, busy], availability, windows, most_constrained_first) == [busy, free]


def test_orchestrator_reports_ordering(base_payload, generate):
    result = generate(base_payload, ordering="most_constrained_first")
    assert result.metadata.ordering == "most_constrained_first"


def test_orchestrator_accepts_custom_ordering_key(base_payload, generate):
    def latest_first(position, employee, availability, windows):
        return (-position,)

    base_payload["employees"] = [
        {"id": "a", "contractHoursPerWeek": 5},
        {"id": "b", "contractHoursPerWeek": 5},
    ]
    base_payload["companyConstraints"].update(openDays=["monday"], minEmployeesPerSlot=1)
    result = generate(base_payload, ordering=latest_first)
    assert _ranges(result.planning["b"][Weekday.MONDAY]) == ["08:00-13:00"]
    assert _ranges(result.planning["a"][Weekday.MONDAY]) == ["13:00-18:00"]
    assert result.metadata.ordering == "latest_first"
    assert list(result.planning) == ["a", "b"]


def test_orchestrator_accepts_custom_allocator(base_payload, cfg):
    class NothingAllocator(GreedyAllocator):
        name = "nothing"

        def allocate(self, employee, availability, ctx):
            return {day: [] for day in Weekday.ordered()}

    request = parse_planning_request(base_payload, cfg)
    result = Orchestrator(cfg, allocator=NothingAllocator()).build_planning(request)
    assert result.stats.total_hours_planned == 0.0
    assert "empty_schedule" in _warning_codes(result)


def test_water_fill():
    mon, tue, wed = Weekday.MONDAY, Weekday.TUESDAY, Weekday.WEDNESDAY
    assert water_fill(600, [(mon, 480), (tue, 480)], 15) == {mon: 300, tue: 300}
    assert water_fill(900, [(mon, 240), (tue, 480), (wed, 480)], 15) == {mon: 240, tue: 330, wed: 330}
    assert water_fill(2000, [(mon, 480)], 15) == {mon: 480}
