"""Mandatory lunch-break handling for long contiguous blocks."""

from __future__ import annotations

from typing import List

from shiftplanner.domain.types import TimeSlot

from .constraints import DailyRules
from .timeplan import floor_to_step


def needs_lunch_break(span_minutes: int, rules: DailyRules) -> bool:
    return rules.lunch_enabled and span_minutes > rules.lunch_threshold_minutes


def work_minutes_for_span(span_minutes: int, rules: DailyRules) -> int:
    """Worked minutes left in a block once its lunch break is carved out."""
    if needs_lunch_break(span_minutes, rules):
        return span_minutes - rules.lunch_minutes
    return span_minutes


def span_for_work(work_minutes: int, rules: DailyRules) -> int:
    """Clock span needed to deliver `work_minutes` in one contiguous block."""
    if rules.lunch_enabled and work_minutes > rules.lunch_threshold_minutes:
        return work_minutes + rules.lunch_minutes
    return work_minutes


def best_span(desired_work: int, max_span: int, rules: DailyRules) -> int:
    """
    Longest useful span no longer than `max_span` delivering at most `desired_work`.

    Work is not monotonic in span around the lunch threshold (a block just over
    the threshold loses a whole break), so both the requested span and a
    break-free block at the threshold are considered.
    """
    options = {min(max_span, span_for_work(desired_work, rules))}
    if rules.lunch_enabled:
        options.add(min(max_span, rules.lunch_threshold_minutes))

    best = 0
    best_work = 0
    for span in sorted(options):
        work = work_minutes_for_span(span, rules)
        if 0 < work <= desired_work and work > best_work:
            best, best_work = span, work
    return best


def split_block(block: TimeSlot, rules: DailyRules) -> List[TimeSlot]:
    """Split one block around a break centred on its midpoint."""
    if not needs_lunch_break(block.duration_minutes, rules):
        return [block]

    midpoint = (block.start + block.end) / 2
    break_start = floor_to_step(midpoint - rules.lunch_minutes / 2, rules.granularity)
    break_start = max(break_start, block.start + rules.granularity)
    break_end = break_start + rules.lunch_minutes
    if break_end >= block.end:
        # Break does not fit inside the block; keep it whole.
        return [block]
    return [TimeSlot(block.start, break_start), TimeSlot(break_end, block.end)]


def inject_lunch_breaks(blocks: List[TimeSlot], rules: DailyRules) -> List[TimeSlot]:
    """
    Post-pass over one employee-day: replace every block longer than the
    threshold by two slots around a lunch break.

    Args:
        blocks: Contiguous blocks placed by the engine, non-overlapping
        rules: Resolved daily rules (lunch flag, duration, threshold)

    Returns:
        Sorted list of slots
    """
    if not rules.lunch_enabled:
        return sorted(blocks)
    slots: List[TimeSlot] = []
    for block in sorted(blocks):
        slots.extend(split_block(block, rules))
    return slots
