"""
Component 14: Backward Planner Core

Sliced A* search over world states, from the goal backwards to the start:
- PlannerPhase: explicit IDLE -> SEARCHING -> SUCCEEDED/FAILED state machine
- IntermediateState: search node (state snapshot, scores, action, binding)
- PlanEntry/Plan: ordered (action, binding) result in execution order
- LoggingContext: diagnostic sink writing planner events to the log
- Planner: init/update/finalize slices plus the plan() convenience wrapper

Node store:
    Nodes live in an arena indexed by their ID. The frontier is a heap of
    (F, H, ID) keys with lazy invalidation: when a cheaper path to a
    frontier state is found the node is updated in place and re-pushed,
    and the outdated heap key is skipped when popped. Frontier and explored
    membership are dictionaries keyed by WorldState (hashed by digest).

Ordering:
    Lower F first, then lower H, then lower ID (earlier generated). This
    makes repeated searches over identical inputs return identical plans.

Usage:
    planner = Planner(start=start, goal=goal, actions=actions, objects=["a", "b"])
    if planner.plan(LoggingContext()):
        for entry in planner.get_plan():
            print(entry)

    # sliced: one expansion per host tick
    planner.init(ctx)
    while planner.update(ctx):
        yield_to_host()
    planner.finalize(ctx)
"""

import heapq
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from component_10_logging_config import (
    PerformanceLogger,
    StructuredLogger,
    get_logger,
)
from component_11_world_state import MatchPolicy, WorldState
from component_12_action_model import Binding, generate_bindings
from component_13_heuristics import Heuristic, get_heuristic
from goap_config import PlannerSettings, get_config
from goap_exceptions import PlannerPhaseError
from infrastructure.interfaces import BaseAction, BaseActionSet, DiagnosticSink

logger = get_logger(__name__)


class PlannerPhase(Enum):
    """Phase of the sliced search."""

    IDLE = "idle"
    SEARCHING = "searching"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class IntermediateState:
    """
    Node in the backward search.

    Attributes:
        state: World state snapshot owned by this node
        id: Arena index, assigned in generation order
        g: Accumulated cost from the goal
        h: Heuristic estimate of the distance to the start
        f: g + h
        action: Action that leads from this state to its predecessor
        params: Binding used with action
        prev: Index of the predecessor node in the explored set
    """

    state: WorldState
    id: int
    g: float = 0.0
    h: float = 0.0
    f: float = 0.0
    action: Optional[BaseAction] = None
    params: Binding = ()
    prev: Optional[int] = None

    def sort_key(self) -> Tuple[float, float, int]:
        return (self.f, self.h, self.id)


@dataclass(frozen=True)
class PlanEntry:
    """One plan step: an action and the binding to execute it with."""

    action: BaseAction
    params: Binding = ()

    def describe(self) -> str:
        return self.action.describe(self.params)

    def __str__(self) -> str:
        return self.describe()


Plan = Tuple[PlanEntry, ...]


class LoggingContext(DiagnosticSink):
    """Diagnostic sink that forwards planner events to a structured logger."""

    def __init__(
        self, target: Optional[StructuredLogger] = None, level: int = logging.DEBUG
    ):
        self.logger = target or get_logger("goap.planner.events")
        self.level = level

    def log_event(self, fmt: str, *args: Any) -> None:
        self.logger.log(self.level, fmt % args if args else fmt)


class Planner:
    """
    Backward-chaining A* planner.

    Searches from the goal state towards the start state for an ordered
    sequence of (action, binding) pairs. The start, goal and constants
    states and the action set are borrowed: the planner never mutates them
    and only reads them while a search runs.

    Phases:
        init()     IDLE/SUCCEEDED/FAILED -> SEARCHING (False on missing inputs)
        update()   SEARCHING -> SEARCHING | SUCCEEDED | FAILED
        finalize() SUCCEEDED/FAILED -> IDLE, builds the plan
        reset()    any -> IDLE, drops search data and plan

    Misuse of the phases raises PlannerPhaseError. Planning outcomes
    (missing inputs, exhausted frontier, spent budget) are reported via
    return values and the diagnostic sink.
    """

    def __init__(
        self,
        start: Optional[WorldState] = None,
        goal: Optional[WorldState] = None,
        constants: Optional[WorldState] = None,
        actions: Optional[BaseActionSet] = None,
        objects: Sequence[Any] = (),
        heuristic: Union[Heuristic, str, None] = None,
        match_policy: Union[MatchPolicy, str, None] = None,
        max_expansions: Optional[int] = None,
        settings: Optional[PlannerSettings] = None,
    ):
        """
        Initialize planner.

        Args:
            start: State the plan must start from
            goal: State the plan must reach
            constants: Facts no action may change (optional)
            actions: Action set to draw actions and preferences from
            objects: Object pool for parameter bindings
            heuristic: Heuristic instance or name (default from settings)
            match_policy: postMatch policy or its name (default from settings)
            max_expansions: Expansion budget (None falls back to settings)
            settings: PlannerSettings (default: goap_config.get_config())
        """
        self.settings = settings or get_config()

        if heuristic is None:
            heuristic = self.settings.heuristic
        if isinstance(heuristic, str):
            heuristic = get_heuristic(heuristic)
        self.heuristic: Heuristic = heuristic

        if match_policy is None:
            match_policy = self.settings.match_policy
        self.match_policy = MatchPolicy(match_policy)

        self.max_expansions = (
            max_expansions if max_expansions is not None else self.settings.max_expansions
        )

        self._start = start
        self._goal = goal
        self._constants = constants
        self._actions = actions
        self._objects: Tuple[Any, ...] = tuple(objects)

        self._phase = PlannerPhase.IDLE
        self._success = False
        self._plan: Plan = ()

        self._nodes: List[IntermediateState] = []
        self._open_heap: List[Tuple[float, float, int]] = []
        self._open_index: Dict[WorldState, int] = {}
        self._closed: List[int] = []
        self._closed_index: Dict[WorldState, int] = {}

        self.stats = self._fresh_stats()

    # ========================================================================
    # Inputs
    # ========================================================================

    @property
    def start(self) -> Optional[WorldState]:
        return self._start

    @start.setter
    def start(self, value: Optional[WorldState]) -> None:
        self._ensure_not_searching("set start")
        self._start = value

    @property
    def goal(self) -> Optional[WorldState]:
        return self._goal

    @goal.setter
    def goal(self, value: Optional[WorldState]) -> None:
        self._ensure_not_searching("set goal")
        self._goal = value

    @property
    def constants(self) -> Optional[WorldState]:
        return self._constants

    @constants.setter
    def constants(self, value: Optional[WorldState]) -> None:
        self._ensure_not_searching("set constants")
        self._constants = value

    @property
    def actions(self) -> Optional[BaseActionSet]:
        return self._actions

    @actions.setter
    def actions(self, value: Optional[BaseActionSet]) -> None:
        self._ensure_not_searching("set actions")
        self._actions = value

    @property
    def objects(self) -> Tuple[Any, ...]:
        return self._objects

    @objects.setter
    def objects(self, value: Sequence[Any]) -> None:
        self._ensure_not_searching("set objects")
        self._objects = tuple(value)

    # ========================================================================
    # Results
    # ========================================================================

    @property
    def phase(self) -> PlannerPhase:
        return self._phase

    @property
    def success(self) -> bool:
        """Outcome of the last search (kept after finalize)."""
        return self._success

    def get_plan(self) -> Plan:
        """Plan built by the last finalize(); empty on failure."""
        return self._plan

    def frontier_nodes(self) -> Tuple[IntermediateState, ...]:
        """Nodes waiting in the frontier, best first."""
        nodes = [self._nodes[node_id] for node_id in self._open_index.values()]
        return tuple(sorted(nodes, key=IntermediateState.sort_key))

    def explored_nodes(self) -> Tuple[IntermediateState, ...]:
        """Nodes in the explored set, in expansion order."""
        return tuple(self._nodes[node_id] for node_id in self._closed)

    # ========================================================================
    # Planning
    # ========================================================================

    def plan(self, ctx: Optional[DiagnosticSink] = None) -> bool:
        """Run init, update until done, and finalize. Returns success."""
        if not self.init(ctx):
            return False

        with PerformanceLogger(
            logger.logger, "Backward search", objects=len(self._objects)
        ):
            while self.update(ctx):
                pass

        self.finalize(ctx)
        return self._success

    def init(self, ctx: Optional[DiagnosticSink] = None) -> bool:
        """
        Start a new search seeded with the goal state.

        Returns:
            False if start, goal or action set is missing; the phase stays
            unchanged and the previous plan is dropped
        """
        if self._phase is PlannerPhase.SEARCHING:
            raise PlannerPhaseError(
                "A search is already running; call reset() first",
                phase=self._phase,
                operation="init",
            )

        if self._start is None or self._goal is None or self._actions is None:
            self._event(ctx, "Planning failed due to unset start, goal or action set!")
            logger.warning(
                "Planning failed due to unset start, goal or action set",
                extra={
                    "start": self._start is not None,
                    "goal": self._goal is not None,
                    "actions": self._actions is not None,
                },
            )
            self._success = False
            self._plan = ()
            self.stats = self._fresh_stats()
            return False

        self._event(ctx, "Starting new plan.")

        self._clear_search()
        self._success = False
        self._plan = ()
        self.stats = self._fresh_stats()

        root = IntermediateState(state=self._goal.copy(), id=0)
        self._nodes.append(root)
        self._push(root)
        self._phase = PlannerPhase.SEARCHING

        logger.info(
            f"Backward search started from goal with {len(self._goal)} facts",
            extra={
                "start_facts": len(self._start),
                "objects": len(self._objects),
                "heuristic": self.heuristic.name,
                "match_policy": self.match_policy.value,
            },
        )
        return True

    def update(self, ctx: Optional[DiagnosticSink] = None) -> bool:
        """
        Expand one node.

        Returns:
            True if more work remains, False once the search stopped
            (check phase/success for the outcome)
        """
        if self._phase is not PlannerPhase.SEARCHING:
            raise PlannerPhaseError(
                "update() requires a running search",
                phase=self._phase,
                operation="update",
            )

        node = self._pop_open()
        if node is None:
            self._event(ctx, "Open list empty; no plan exists.")
            logger.info(
                f"No plan found after {self.stats['expansions']} expansions",
                extra={"reason": "search_exhausted"},
            )
            self._phase = PlannerPhase.FAILED
            return False

        self._event(ctx, "Moving state %d from open to closed.", node.id)
        self._closed_index[node.state] = len(self._closed)
        self._closed.append(node.id)

        if WorldState.comp_start(node.state, self._start) == 0:
            logger.info(
                f"Start state reached! Expansions: {self.stats['expansions']}",
                extra={"node": node.id, "g": node.g},
            )
            self._phase = PlannerPhase.SUCCEEDED
            self._success = True
            return False

        if self.max_expansions is not None and self.stats["expansions"] >= self.max_expansions:
            self._event(ctx, "Expansion budget of %d spent.", self.max_expansions)
            logger.warning(
                f"No plan found within {self.max_expansions} expansions",
                extra={"reason": "budget_exhausted"},
            )
            self._phase = PlannerPhase.FAILED
            return False

        self.stats["expansions"] += 1

        for action, preference in self._actions:
            if action is None:
                continue
            for params in generate_bindings(self._objects, action.num_params):
                self._attempt_intermediate(ctx, node, action, preference, params)

        return True

    def finalize(self, ctx: Optional[DiagnosticSink] = None) -> None:
        """Build the plan from the explored set and drop all search data."""
        if self._phase not in (PlannerPhase.SUCCEEDED, PlannerPhase.FAILED):
            raise PlannerPhaseError(
                "finalize() requires a stopped search",
                phase=self._phase,
                operation="finalize",
            )

        self._event(ctx, "Finalising plan!")

        # The last explored node is the start-side end of the chain;
        # following predecessors walks towards the goal in execution order.
        plan: List[PlanEntry] = []
        if self._phase is PlannerPhase.SUCCEEDED:
            i = len(self._closed) - 1
            while i:
                node = self._nodes[self._closed[i]]
                plan.append(PlanEntry(node.action, node.params))
                i = node.prev

        self._plan = tuple(plan)
        self.stats["plan_length"] = len(plan)

        if self._success:
            logger.info(
                f"Plan found! Length: {len(plan)}",
                extra={
                    "plan": [entry.describe() for entry in plan],
                    "expansions": self.stats["expansions"],
                    "generated": self.stats["generated"],
                },
            )

        self._clear_search()
        self._phase = PlannerPhase.IDLE

    def reset(self) -> None:
        """Abandon any search and forget the last plan."""
        self._clear_search()
        self._success = False
        self._plan = ()
        self._phase = PlannerPhase.IDLE

    # ========================================================================
    # Expansion
    # ========================================================================

    def _attempt_intermediate(
        self,
        ctx: Optional[DiagnosticSink],
        node: IntermediateState,
        action: BaseAction,
        preference: float,
        params: Binding,
    ) -> None:
        if not node.state.post_match(action, params, self.match_policy):
            return

        candidate = node.state.copy()
        candidate.apply_reverse(action, params)

        if candidate in self._closed_index:
            self.stats["pruned"] += 1
            return

        # constants cannot be changed by any action
        if self._constants is not None and WorldState.comp_start(candidate, self._constants):
            self.stats["pruned"] += 1
            return

        h = self.heuristic.estimate(candidate, self._start)
        g = node.g + action.cost * preference
        f = g + h
        prev = len(self._closed) - 1
        params = tuple(params)

        existing_id = self._open_index.get(candidate)
        if existing_id is not None:
            existing = self._nodes[existing_id]
            if f < existing.f:
                existing.g, existing.h, existing.f = g, h, f
                existing.action, existing.params, existing.prev = action, params, prev
                heapq.heappush(self._open_heap, existing.sort_key())
                self.stats["updated"] += 1
                self._event(ctx, "Updating state %d to F=%f", existing.id, f)
            return

        successor = IntermediateState(
            state=candidate,
            id=len(self._nodes),
            g=g,
            h=h,
            f=f,
            action=action,
            params=params,
            prev=prev,
        )
        self._nodes.append(successor)
        self._push(successor)
        self.stats["generated"] += 1

        self._event(
            ctx,
            "Pushing new state %d %s via action %s onto open list with score F=%.3f.",
            successor.id,
            candidate.to_string(),
            action.describe(params),
            f,
        )

    # ========================================================================
    # Frontier
    # ========================================================================

    def _push(self, node: IntermediateState) -> None:
        self._open_index[node.state] = node.id
        heapq.heappush(self._open_heap, node.sort_key())

    def _pop_open(self) -> Optional[IntermediateState]:
        while self._open_heap:
            f, h, node_id = heapq.heappop(self._open_heap)
            node = self._nodes[node_id]
            # skip keys outdated by a cheaper path
            if self._open_index.get(node.state) != node_id or (node.f, node.h) != (f, h):
                continue
            del self._open_index[node.state]
            return node
        return None

    # ========================================================================
    # Helpers
    # ========================================================================

    def _event(self, ctx: Optional[DiagnosticSink], fmt: str, *args: Any) -> None:
        if ctx is None or not self.settings.log_events:
            return
        ctx.log_event(fmt, *args)

    def _ensure_not_searching(self, operation: str) -> None:
        if self._phase is PlannerPhase.SEARCHING:
            raise PlannerPhaseError(
                "Planner inputs cannot change during a search",
                phase=self._phase,
                operation=operation,
            )

    def _clear_search(self) -> None:
        self._nodes = []
        self._open_heap = []
        self._open_index = {}
        self._closed = []
        self._closed_index = {}

    @staticmethod
    def _fresh_stats() -> Dict[str, int]:
        return {"expansions": 0, "generated": 0, "updated": 0, "pruned": 0, "plan_length": 0}
