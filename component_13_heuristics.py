"""
Component 13: Planning Heuristics

Heuristic functions that estimate the remaining distance from a candidate
predecessor state to the start state during backward search:
- BinaryMismatchHeuristic: 0 if the candidate equals the start, else 1
- FactDifferenceHeuristic: number of facts unique to one side or disagreeing

The binary signal is cheap but only separates "done" from "not done", so
the search degrades towards uniform-cost expansion. The difference scan
guides the search better but counts facts the start test ignores, so it
can overestimate when the start state mentions facts the goal never
touches.
"""

from typing import Dict, Type

from component_11_world_state import WorldState
from goap_exceptions import InvalidConfigError


class Heuristic:
    """Base class for planning heuristics."""

    name = "base"

    def estimate(self, state: WorldState, start: WorldState) -> float:
        """Estimate the remaining cost from state back to start."""
        raise NotImplementedError


class BinaryMismatchHeuristic(Heuristic):
    """0 for an exact match with the start state, 1 otherwise."""

    name = "binary"

    def estimate(self, state: WorldState, start: WorldState) -> float:
        return float(WorldState.comp(state, start))


class FactDifferenceHeuristic(Heuristic):
    """
    Symmetric-difference count between state and start.

    Each fact present in only one of the states costs 1, and so does each
    shared fact with a different value.
    """

    name = "difference"

    def estimate(self, state: WorldState, start: WorldState) -> float:
        return float(WorldState.difference(state, start))


_HEURISTICS: Dict[str, Type[Heuristic]] = {
    BinaryMismatchHeuristic.name: BinaryMismatchHeuristic,
    FactDifferenceHeuristic.name: FactDifferenceHeuristic,
}


def get_heuristic(name: str) -> Heuristic:
    """Create a heuristic by its configuration name."""
    try:
        return _HEURISTICS[name]()
    except KeyError:
        raise InvalidConfigError(
            f"Unknown heuristic '{name}'", context={"valid": sorted(_HEURISTICS)}
        ) from None
