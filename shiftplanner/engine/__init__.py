"""Planning engine: employee ordering, allocators and the orchestrator."""

from .base import AllocationContext, BaseAllocator
from .greedy import GreedyAllocator
from .orchestrator import Orchestrator, build_week_planning
from .ordering import ORDERINGS, get_ordering

__all__ = [
    "AllocationContext",
    "BaseAllocator",
    "GreedyAllocator",
    "Orchestrator",
    "build_week_planning",
    "ORDERINGS",
    "get_ordering",
]
