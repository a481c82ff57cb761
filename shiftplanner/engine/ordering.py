"""Employee processing order.

Earlier employees get first pick of scarce preferred slots, so the order is
an explicit, swappable policy. A strategy is a sort key over
(input position, employee, availability).
"""

from __future__ import annotations

from typing import Callable, Dict, List, Tuple

from shiftplanner.domain.types import Availability, Employee, TimeSlot, Weekday

OrderingKey = Callable[[int, Employee, Dict[Weekday, Availability], Dict[Weekday, List[TimeSlot]]], Tuple]


def input_order(position, employee, availability, windows) -> Tuple:
    return (position,)


def most_constrained_first(position, employee, availability, windows) -> Tuple:
    """Fewest assignable days first; input order breaks ties."""
    usable = sum(
        1
        for day in Weekday.ordered()
        if windows.get(day) and availability.get(day) is not Availability.BLOCKED
    )
    return (usable, position)


ORDERINGS: Dict[str, OrderingKey] = {
    "input_order": input_order,
    "most_constrained_first": most_constrained_first,
}


def get_ordering(name: str | OrderingKey) -> OrderingKey:
    """Resolve a strategy by name; a key function is returned as-is."""
    if callable(name):
        return name
    try:
        return ORDERINGS[name]
    except KeyError:
        raise ValueError(f"Unknown employee ordering '{name}' (known: {', '.join(sorted(ORDERINGS))})") from None


def order_employees(
    employees: List[Employee],
    availability: Dict[str, Dict[Weekday, Availability]],
    windows: Dict[Weekday, List[TimeSlot]],
    key: OrderingKey,
) -> List[Employee]:
    """Return employees sorted by `key`; sorting is stable."""
    indexed = list(enumerate(employees))
    indexed.sort(key=lambda item: key(item[0], item[1], availability[item[1].id], windows))
    return [emp for _, emp in indexed]
