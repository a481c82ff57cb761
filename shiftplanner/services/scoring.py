"""Preference ranking of candidate (weekday, window) placements."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from shiftplanner.domain.types import Availability, Preference, TimeSlot, Weekday

# Hour-match levels within a day tier
HOURS_FULL = 0     # preferred range lies fully inside the window (or no hour preference)
HOURS_PARTIAL = 1  # preferred range only partly overlaps the window
HOURS_NONE = 2     # whole window, outside preferred hours

TIERS_PER_DAY_RANK = 3


@dataclass(frozen=True)
class Candidate:
    day: Weekday
    window: TimeSlot
    tier: int

    @property
    def preferred_day(self) -> bool:
        return self.tier < TIERS_PER_DAY_RANK

    @property
    def hour_match(self) -> int:
        return self.tier % TIERS_PER_DAY_RANK

    def sort_key(self):
        return (self.tier, self.day.position, self.window.start, self.window.end)


def day_rank(day: Weekday, preference: Optional[Preference]) -> int:
    """0 for a preferred day (or when no day preference is given), 1 otherwise."""
    if preference is None or not preference.has_day_preference:
        return 0
    return 0 if day in preference.preferred_days else 1


def window_candidates(window: TimeSlot, preference: Optional[Preference]) -> List[tuple]:
    """
    (sub-window, hour-match level) pairs for one opening window.

    A preferred range fully inside the window (or covering all of it) is a
    full match; a range that only partly overlaps yields its intersection
    at the lower partial level. The whole window is always offered, at
    HOURS_NONE when hour preferences exist.
    """
    if preference is None or not preference.has_hour_preference:
        return [(window, HOURS_FULL)]

    result = []
    for preferred in preference.preferred_hours:
        overlap = window.intersection(preferred)
        if overlap is None:
            continue
        full = window.contains(preferred) or preferred.contains(window)
        level = HOURS_FULL if full else HOURS_PARTIAL
        result.append((overlap, level))
    result.append((window, HOURS_NONE))
    return result


def rank_candidates(
    availability: Dict[Weekday, Availability],
    windows: Dict[Weekday, List[TimeSlot]],
    preference: Optional[Preference],
    limit: Optional[int] = None,
) -> List[Candidate]:
    """
    Rank every assignable (weekday, window) pair for one employee, best first.

    Tiers: preferred day with preferred hours, preferred day with partially
    matching hours, preferred day any hours, then the same three for the
    remaining open days. Blocked days never appear. Ties break on weekday
    order then window start, so the ranking is deterministic.

    Args:
        availability: Weekday -> Availability for the employee
        windows: Opening windows per weekday
        preference: Employee preference (None when not given)
        limit: Optional cap on the number of candidates returned

    Returns:
        Sorted list of Candidate
    """
    candidates: List[Candidate] = []
    seen = set()
    for day in Weekday.ordered():
        if availability.get(day, Availability.OPEN) is Availability.BLOCKED:
            continue
        base = day_rank(day, preference) * TIERS_PER_DAY_RANK
        for window in windows.get(day, []):
            for sub_window, level in window_candidates(window, preference):
                key = (day, sub_window)
                if key in seen:
                    continue
                seen.add(key)
                candidates.append(Candidate(day=day, window=sub_window, tier=base + level))

    candidates.sort(key=Candidate.sort_key)
    if limit is not None:
        candidates = candidates[:limit]
    return candidates


def best_tier_by_day(candidates: List[Candidate]) -> Dict[Weekday, int]:
    best: Dict[Weekday, int] = {}
    for cand in candidates:
        if cand.day not in best or cand.tier < best[cand.day]:
            best[cand.day] = cand.tier
    return best

