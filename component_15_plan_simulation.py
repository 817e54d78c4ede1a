"""
Component 15: Plan Simulation

Forward execution helpers for plans produced by the backward planner:
- simulate_plan: state trajectory obtained by applying each entry forward
- validate_plan: does the plan run from start and end in the goal?
- diagnose_failure: root-cause analysis of a failing plan

The search itself only applies actions in reverse; these helpers are
what a host uses to check a plan before executing it.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

from component_10_logging_config import get_logger
from component_11_world_state import (
    ConditionType,
    Fact,
    Operation,
    WorldState,
    bound_clauses,
    consistent_with_condition,
)
from component_14_planner_core import PlanEntry
from goap_exceptions import PlanExecutionError

logger = get_logger(__name__)


def _unmet_clauses(state: WorldState, entry: PlanEntry) -> List[Tuple[Fact, Operation]]:
    unmet: List[Tuple[Fact, Operation]] = []
    for fact, op in bound_clauses(entry.action, entry.params):
        if not op.has_condition:
            continue
        if state.has(fact):
            if not consistent_with_condition(state.get(fact), op.condition, op.condition_value):
                unmet.append((fact, op))
        elif op.condition is not ConditionType.IS_UNSET:
            unmet.append((fact, op))
    return unmet


def simulate_plan(start: WorldState, plan: Sequence[PlanEntry]) -> List[WorldState]:
    """
    Execute plan forward and return the state trajectory.

    Args:
        start: Initial state (not modified)
        plan: Plan entries in execution order

    Returns:
        List of states, starting with a copy of start

    Raises:
        PlanExecutionError: an entry's preconditions do not hold
    """
    states = [start.copy()]
    state = start.copy()

    for i, entry in enumerate(plan):
        if not state.pre_match(entry.action, entry.params):
            raise PlanExecutionError(
                f"Action {i} ({entry.describe()}) not applicable in state",
                step_index=i,
                action_name=entry.describe(),
            )
        state.apply_forward(entry.action, entry.params)
        states.append(state.copy())

    return states


def validate_plan(
    start: WorldState, goal: WorldState, plan: Sequence[PlanEntry]
) -> Tuple[bool, Optional[str]]:
    """
    Check that plan runs from start and ends in a state satisfying goal.

    Returns:
        (success, error_message)
    """
    try:
        states = simulate_plan(start, plan)
    except PlanExecutionError as e:
        return False, e.message

    if not states[-1].satisfies(goal):
        return False, "Final state does not satisfy goal"

    return True, None


def diagnose_failure(
    start: WorldState, goal: WorldState, plan: Sequence[PlanEntry]
) -> Dict[str, Any]:
    """
    Analyze why a plan fails (root-cause analysis).

    Returns:
        Diagnostic information:
        - failed_at: Entry index where the plan fails (len(plan) if the
          goal is missed at the end)
        - failed_action: Display form of the failing entry
        - unmet: Clauses (or goal facts) not satisfied
        - state_before: State before the failing entry
        - error: Summary, None if the plan works
    """
    state = start.copy()

    for i, entry in enumerate(plan):
        if not entry.action.check_special_conditions(entry.params):
            return {
                "failed_at": i,
                "failed_action": entry.describe(),
                "unmet": [],
                "state_before": state,
                "error": f"Action {entry.describe()} rejects its binding",
            }

        unmet = _unmet_clauses(state, entry)
        if unmet:
            logger.debug(
                f"Plan fails at step {i}",
                extra={"action": entry.describe(), "unmet": len(unmet)},
            )
            return {
                "failed_at": i,
                "failed_action": entry.describe(),
                "unmet": unmet,
                "state_before": state,
                "error": (
                    f"Action {entry.describe()} requires "
                    f"{[str(fact) for fact, _ in unmet]} but state is {state.to_string()}"
                ),
            }

        state.apply_forward(entry.action, entry.params)

    if not state.satisfies(goal):
        missing = [
            (fact, value)
            for fact, value in goal.items()
            if not state.has(fact) or state.get(fact) != value
        ]
        return {
            "failed_at": len(plan),
            "failed_action": None,
            "unmet": missing,
            "state_before": state,
            "error": f"Goal not achieved. Missing: {[str(fact) for fact, _ in missing]}",
        }

    return {"error": None}
