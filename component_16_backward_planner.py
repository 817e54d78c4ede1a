"""
Component 16: Backward Planner (facade)

Single import point for the GOAP backward planner:
- component_11_world_state: facts, operations, WorldState
- component_12_action_model: Action, ActionSet, bindings
- component_13_heuristics: search heuristics
- component_14_planner_core: sliced A* planner
- component_15_plan_simulation: forward plan checks

Run as a script for a small commute example.
"""

from component_11_world_state import (
    ConditionType,
    EffectType,
    Fact,
    MatchPolicy,
    Operation,
    Param,
    WorldState,
    consistent_with_condition,
    consistent_with_effect,
)
from component_12_action_model import (
    Action,
    ActionSet,
    clear_binding_cache,
    generate_bindings,
)
from component_13_heuristics import (
    BinaryMismatchHeuristic,
    FactDifferenceHeuristic,
    Heuristic,
    get_heuristic,
)
from component_14_planner_core import (
    IntermediateState,
    LoggingContext,
    Plan,
    PlanEntry,
    Planner,
    PlannerPhase,
)
from component_15_plan_simulation import (
    diagnose_failure,
    simulate_plan,
    validate_plan,
)

__all__ = [
    # World-state model
    "ConditionType",
    "EffectType",
    "Fact",
    "MatchPolicy",
    "Operation",
    "Param",
    "WorldState",
    "consistent_with_condition",
    "consistent_with_effect",
    # Action model
    "Action",
    "ActionSet",
    "clear_binding_cache",
    "generate_bindings",
    # Heuristics
    "Heuristic",
    "BinaryMismatchHeuristic",
    "FactDifferenceHeuristic",
    "get_heuristic",
    # Planner
    "IntermediateState",
    "LoggingContext",
    "Plan",
    "PlanEntry",
    "Planner",
    "PlannerPhase",
    # Simulation
    "diagnose_failure",
    "simulate_plan",
    "validate_plan",
]


def build_commute_example():
    """
    Two people, three places. Driving goes home -> work, walking goes
    work -> office; taxis also go home -> work but cost more.

    Returns:
        (start, goal, actions, objects)
    """
    at = Fact("at", (Param(0),))

    drive = Action("drive", cost=1.0, num_params=1)
    drive.requires(at, ConditionType.EQUALS, "home")
    drive.effects(at, EffectType.SET, "work")

    taxi = Action("taxi", cost=3.0, num_params=1)
    taxi.requires(at, ConditionType.EQUALS, "home")
    taxi.effects(at, EffectType.SET, "work")

    walk = Action("walk", cost=1.0, num_params=1)
    walk.requires(at, ConditionType.EQUALS, "work")
    walk.effects(at, EffectType.SET, "office")

    actions = ActionSet().add(taxi).add(drive).add(walk)

    start = WorldState({Fact("at", ("alice",)): "home", Fact("at", ("bob",)): "work"})
    goal = WorldState({Fact("at", ("alice",)): "office", Fact("at", ("bob",)): "work"})
    return start, goal, actions, ["alice", "bob"]


def main():
    """Example usage: plan alice's commute and verify it forward."""
    start, goal, actions, objects = build_commute_example()

    planner = Planner(start=start, goal=goal, actions=actions, objects=objects)
    if not planner.plan(LoggingContext()):
        print("No plan found")
        return

    plan = planner.get_plan()
    print(f"Plan with {len(plan)} steps:")
    for entry in plan:
        print(f"  {entry}")

    is_valid, error = validate_plan(start, goal, plan)
    print(f"Valid: {is_valid}" + (f" ({error})" if error else ""))


if __name__ == "__main__":
    main()
