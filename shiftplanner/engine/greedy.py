"""Greedy allocator: preference-ranked, contract-driven placement per employee."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from shiftplanner.config import PlannerConfig
from shiftplanner.domain.types import Availability, DaySchedule, Employee, Preference, TimeSlot, Weekday
from shiftplanner.services.constraints import MINUTES_PER_DAY, longest_run
from shiftplanner.services.lunch import best_span, inject_lunch_breaks, work_minutes_for_span
from shiftplanner.services.scoring import Candidate, best_tier_by_day, rank_candidates
from shiftplanner.services.timeplan import floor_to_step, subtract_ranges

from .base import AllocationContext, BaseAllocator


def water_fill(total: int, caps: List[Tuple[Weekday, int]], step: int) -> Dict[Weekday, int]:
    """
    Spread `total` minutes as evenly as possible over days, respecting caps.

    Shares are multiples of `step`; leftovers go to the earliest days in `caps`
    order that still have room.

    Args:
        total: Minutes to distribute
        caps: (day, cap) pairs in priority order
        step: Quantum in minutes

    Returns:
        Dict of day -> minutes (sum <= total)
    """
    limit = dict(caps)
    shares = {day: 0 for day, _ in caps}
    remaining = total
    active = [day for day, cap in caps if cap >= step]
    while remaining >= step and active:
        per = max(step, floor_to_step(remaining / len(active), step))
        still_open = []
        progressed = False
        for day in active:
            give = floor_to_step(min(per, limit[day] - shares[day], remaining), step)
            if give > 0:
                shares[day] += give
                remaining -= give
                progressed = True
            if limit[day] - shares[day] >= step:
                still_open.append(day)
            if remaining < step:
                break
        if not progressed:
            break
        active = still_open
    return shares



def _overlap_minutes(slot: TimeSlot, ranges: List[TimeSlot]) -> int:
    total = 0
    for other in ranges:
        common = slot.intersection(other)
        if common is not None:
            total += common.duration_minutes
    return total


@dataclass
class _EmployeeState:
    employee: Employee
    ctx: AllocationContext
    split: bool
    max_consecutive: int
    caps: Dict[Weekday, int]
    by_day: Dict[Weekday, List[Candidate]]
    spans: Dict[Weekday, List[TimeSlot]] = field(default_factory=dict)
    worked: Dict[Weekday, int] = field(default_factory=dict)

    @property
    def preferred_hours(self) -> List[TimeSlot]:
        pref = self.employee.preference
        return list(pref.preferred_hours or []) if pref is not None else []

    def used_days(self) -> List[Weekday]:
        return [day for day in Weekday.ordered() if self.spans.get(day)]


class GreedyAllocator(BaseAllocator):
    """
    Place one employee's week greedily.

    Days are picked best preference tier first (staffing need, then weekday
    order, break ties) until their capacity covers the contract. The contract
    is water-filled over the picked days and each day's share is placed in
    the best-ranked window that can hold it. A top-up pass extends days while
    hours remain. Under-shoot is left to the stats/warnings layer.
    """

    name = "greedy"

    def allocate(
        self,
        employee: Employee,
        availability: Dict[Weekday, Availability],
        ctx: AllocationContext,
    ) -> DaySchedule:
        rules = ctx.rules
        step = rules.granularity
        state = self._init_state(employee, availability, ctx)
        usable = [day for day in state.by_day if state.caps[day] > 0]

        contract = floor_to_step(employee.contract_hours_per_week * 60, step)
        if usable and contract > 0:
            ordered = self._order_days(usable, state)
            selected = self._select_days(ordered, contract, state)
            shares = water_fill(contract, [(day, self._day_capacity(day, state)) for day in selected], step)

            for day in selected:
                if shares[day] > 0:
                    self._apply_day(day, shares[day], contract - sum(state.worked.values()), state)

            if contract - sum(state.worked.values()) >= step:
                self._top_up(ordered, selected, contract, state)

        schedule: DaySchedule = {}
        for day in Weekday.ordered():
            slots = inject_lunch_breaks(state.spans.get(day, []), rules)
            for slot in slots:
                ctx.ledger.add(day, slot)
            schedule[day] = slots
        return schedule

    # ------------------------------------------------------------------ setup

    def _init_state(
        self,
        employee: Employee,
        availability: Dict[Weekday, Availability],
        ctx: AllocationContext,
    ) -> _EmployeeState:
        pref: Optional[Preference] = employee.preference
        cfg: PlannerConfig = ctx.cfg

        split = cfg.default_allow_split_shifts
        if pref is not None and pref.allow_split_shifts is not None:
            split = pref.allow_split_shifts
        max_consecutive = cfg.engine.default_max_consecutive_days
        if pref is not None and pref.max_consecutive_days:
            max_consecutive = pref.max_consecutive_days

        candidates = rank_candidates(availability, ctx.windows, pref, limit=cfg.engine.max_candidates_per_employee)
        by_day: Dict[Weekday, List[Candidate]] = {}
        for cand in candidates:
            by_day.setdefault(cand.day, []).append(cand)

        caps = {day: ctx.rules.cap_for(availability.get(day, Availability.OPEN)) for day in by_day}
        return _EmployeeState(
            employee=employee,
            ctx=ctx,
            split=split,
            max_consecutive=max_consecutive,
            caps=caps,
            by_day=by_day,
        )

    def _order_days(self, days: List[Weekday], state: _EmployeeState) -> List[Weekday]:
        tiers = best_tier_by_day([c for d in days for c in state.by_day[d]])
        floor = state.ctx.rules.min_employees_per_slot
        ledger = state.ctx.ledger

        def key(day: Weekday):
            need = sum(ledger.need(day, w, floor) for w in state.ctx.windows.get(day, []))
            return (tiers[day], -need, day.position)

        return sorted(days, key=key)

    def _day_capacity(self, day: Weekday, state: _EmployeeState) -> int:
        """Worked minutes the day can hold: cap limited by what its windows can deliver."""
        rules = state.ctx.rules
        cap = state.caps[day]
        windows = state.ctx.windows.get(day, [])
        if state.split:
            deliverable = sum(work_minutes_for_span(w.duration_minutes, rules) for w in windows)
        else:
            deliverable = max(
                (work_minutes_for_span(best_span(cap, w.duration_minutes, rules), rules) for w in windows),
                default=0,
            )
        return floor_to_step(min(cap, deliverable), rules.granularity)

    def _select_days(self, ordered: List[Weekday], contract: int, state: _EmployeeState) -> List[Weekday]:
        selected: List[Weekday] = []
        capacity = 0
        for day in ordered:
            if capacity >= contract:
                break
            if longest_run(selected + [day]) > state.max_consecutive:
                continue
            day_cap = self._day_capacity(day, state)
            if day_cap <= 0:
                continue
            selected.append(day)
            capacity += day_cap
        return selected

    # -------------------------------------------------------------- placement

    def _apply_day(self, day: Weekday, target: int, remaining: int, state: _EmployeeState) -> bool:
        """Re-plan `day` for `target` worked minutes; keep the result only if it improves the day."""
        rules = state.ctx.rules
        current = state.worked.get(day, 0)
        previous = state.spans.get(day, [])
        state.spans[day] = []

        spans, work = self._plan_day(day, target, state)
        extra = work - current
        finishes = extra >= remaining
        if work <= current or (work < rules.min_minutes and not finishes):
            state.spans[day] = previous
            return False
        state.spans[day] = spans
        state.worked[day] = work
        return True

    def _plan_day(self, day: Weekday, target: int, state: _EmployeeState) -> Tuple[List[TimeSlot], int]:
        rules = state.ctx.rules
        candidates = state.by_day.get(day, [])

        if not state.split:
            best: Optional[Tuple[int, TimeSlot]] = None
            for cand in candidates:
                span = self._position(day, cand.window, target, state)
                if span is None:
                    continue
                work = work_minutes_for_span(span.duration_minutes, rules)
                if best is None or work > best[0]:
                    best = (work, span)
                if work >= target:
                    break
            return ([best[1]], best[0]) if best else ([], 0)

        spans: List[TimeSlot] = []
        work = 0
        for cand in candidates:
            for part in subtract_ranges(cand.window, spans, gap=rules.split_gap_minutes):
                need = target - work
                if need <= 0:
                    break
                span = self._position(day, part, need, state, taken=spans)
                if span is None:
                    continue
                gained = work_minutes_for_span(span.duration_minutes, rules)
                if gained < min(rules.min_minutes, need):
                    continue
                spans.append(span)
                work += gained
            if work >= target:
                break
        return sorted(spans), work

    def _position(
        self,
        day: Weekday,
        part: TimeSlot,
        need: int,
        state: _EmployeeState,
        taken: Optional[List[TimeSlot]] = None,
    ) -> Optional[TimeSlot]:
        """
        Best block inside `part` delivering at most `need` worked minutes.

        The block must leave the minimum overnight rest against the previous
        and next working day; among valid starts the one covering the most
        missing staff wins, then the one most inside preferred hours, then
        the earliest.
        """
        rules = state.ctx.rules
        ledger = state.ctx.ledger
        lo, hi = part.start, part.end

        if day.position > 0:
            prev_spans = state.spans.get(Weekday.from_index(day.position - 1))
            if prev_spans:
                lo = max(lo, prev_spans[-1].end + rules.min_rest_minutes - MINUTES_PER_DAY)
        if day.position < 6:
            next_spans = state.spans.get(Weekday.from_index(day.position + 1))
            if next_spans:
                hi = min(hi, next_spans[0].start + MINUTES_PER_DAY - rules.min_rest_minutes)
        if hi <= lo:
            return None

        span = best_span(need, hi - lo, rules)
        if span <= 0:
            return None

        floor = rules.min_employees_per_slot
        preferred = state.preferred_hours
        if floor <= 0 and not preferred:
            return TimeSlot(lo, lo + span)

        best: Optional[TimeSlot] = None
        best_score = None
        for start in range(lo, hi - span + 1, rules.granularity):
            slot = TimeSlot(start, start + span)
            if taken and any(slot.overlaps(t) for t in taken):
                continue
            score = (ledger.need(day, slot, floor), _overlap_minutes(slot, preferred))
            if best_score is None or score > best_score:
                best, best_score = slot, score
        return best

    def _top_up(self, ordered: List[Weekday], selected: List[Weekday], contract: int, state: _EmployeeState) -> None:
        step = state.ctx.rules.granularity
        queue = list(selected) + [day for day in ordered if day not in selected]
        for day in queue:
            remaining = contract - sum(state.worked.values())
            if remaining < step:
                break
            if not state.spans.get(day) and longest_run(state.used_days() + [day]) > state.max_consecutive:
                continue
            current = state.worked.get(day, 0)
            target = min(state.caps[day], current + remaining)
            if target <= current:
                continue
            self._apply_day(day, target, remaining, state)
