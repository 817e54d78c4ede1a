"""
Component 12: Action Model

Concrete implementations of the action capability interfaces:
- Action: ordered (Fact, Operation) clauses, parameter count, cost,
  special-condition predicate and display form
- ActionSet: (Action, preference weight) pairs
- generate_bindings: cross product of the object pool over parameter slots

Actions are built with small builder methods:

    drive = Action("drive", num_params=1)
    drive.requires(Fact("at", (Param(0),)), ConditionType.EQUALS, "home")
    drive.effects(Fact("at", (Param(0),)), EffectType.SET, "work")

Any other class implementing infrastructure.interfaces.BaseAction works
with the planner as well.
"""

from dataclasses import replace
from itertools import product
from typing import (
    Any,
    Callable,
    Dict,
    Iterator,
    List,
    Optional,
    Sequence,
    Tuple,
)

from cachetools import LRUCache, cached

from common.constants import (
    BINDING_CACHE_MAXSIZE,
    DEFAULT_ACTION_COST,
    DEFAULT_PREFERENCE,
)
from component_11_world_state import (
    ConditionType,
    EffectType,
    Fact,
    Operation,
    Param,
    PVal,
)
from goap_exceptions import InvalidActionError
from infrastructure.interfaces import BaseAction, BaseActionSet

Binding = Tuple[Any, ...]

_binding_cache: LRUCache = LRUCache(maxsize=BINDING_CACHE_MAXSIZE)


@cached(_binding_cache)
def _cached_bindings(objects: Tuple[Any, ...], count: int) -> Tuple[Binding, ...]:
    return tuple(product(objects, repeat=count))


def generate_bindings(objects: Sequence[Any], count: int) -> Tuple[Binding, ...]:
    """
    All parameter bindings for an action with count slots.

    The result has len(objects) ** count entries in odometer order (last
    slot varies fastest). An action without parameters, or an empty object
    pool, yields a single empty binding.
    """
    if count <= 0 or not objects:
        return ((),)
    return _cached_bindings(tuple(objects), count)


def clear_binding_cache() -> None:
    _binding_cache.clear()


class Action(BaseAction):
    """
    Parametrized action made of one Operation per Fact.

    Attributes:
        name: Action identifier (used in the display form)
        cost: Base cost, multiplied by the preference of its ActionSet entry
        num_params: Number of parameter slots filled from the object pool
        special_conditions: Optional predicate over a parameter binding
    """

    def __init__(
        self,
        name: str,
        cost: float = DEFAULT_ACTION_COST,
        num_params: int = 0,
        special_conditions: Optional[Callable[[Sequence[Any]], bool]] = None,
    ):
        if cost < 0:
            raise InvalidActionError(
                "Action cost must be >= 0", action_name=name, context={"cost": cost}
            )
        if num_params < 0:
            raise InvalidActionError(
                "Parameter count must be >= 0",
                action_name=name,
                context={"num_params": num_params},
            )
        self.name = name
        self._cost = float(cost)
        self._num_params = num_params
        self.special_conditions = special_conditions
        self._clauses: Dict[Fact, Operation] = {}

    @property
    def num_params(self) -> int:
        return self._num_params

    @property
    def cost(self) -> float:
        return self._cost

    def check_special_conditions(self, params: Sequence[Any]) -> bool:
        if self.special_conditions is None:
            return True
        return bool(self.special_conditions(params))

    def __iter__(self) -> Iterator[Tuple[Fact, Operation]]:
        return iter(list(self._clauses.items()))

    def __len__(self) -> int:
        return len(self._clauses)

    # ------------------------------------------------------------------
    # Builder
    # ------------------------------------------------------------------

    def add(self, fact: Fact, operation: Operation) -> "Action":
        """Set the clause for fact, replacing any previous one."""
        self._check_indices(fact, operation)
        self._check_values(fact, operation)
        self._clauses[fact] = operation
        return self

    def requires(
        self,
        fact: Fact,
        condition: ConditionType,
        value: PVal = None,
        param: Optional[int] = None,
    ) -> "Action":
        """Add or replace the condition part of the clause for fact."""
        current = self._clauses.get(fact, Operation())
        return self.add(
            fact,
            replace(current, condition=condition, condition_value=value, condition_param=param),
        )

    def effects(
        self,
        fact: Fact,
        effect: EffectType,
        value: PVal = None,
        param: Optional[int] = None,
    ) -> "Action":
        """Add or replace the effect part of the clause for fact."""
        current = self._clauses.get(fact, Operation())
        return self.add(
            fact,
            replace(current, effect=effect, effect_value=value, effect_param=param),
        )

    def _check_values(self, fact: Fact, operation: Operation) -> None:
        # increment/decrement need the expected prior value for absent facts
        if (
            operation.effect in (EffectType.INCREMENT, EffectType.DECREMENT)
            and operation.effect_value is None
            and operation.effect_param is None
        ):
            raise InvalidActionError(
                f"{operation.effect.name} effect on {fact} needs a value or a parameter",
                action_name=self.name,
                context={"fact": str(fact)},
            )

    def _check_indices(self, fact: Fact, operation: Operation) -> None:
        indices: List[int] = [arg.index for arg in fact.args if isinstance(arg, Param)]
        if operation.condition_param is not None:
            indices.append(operation.condition_param)
        if operation.effect_param is not None:
            indices.append(operation.effect_param)
        for index in indices:
            if index < 0 or index >= self._num_params:
                raise InvalidActionError(
                    f"Clause on {fact} uses parameter {index} but the action "
                    f"declares {self._num_params}",
                    action_name=self.name,
                    context={"index": index},
                )

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def describe(self, params: Sequence[Any] = ()) -> str:
        return f"{self.name}({', '.join(str(p) for p in params)})"

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return (
            f"Action(name={self.name!r}, cost={self._cost}, "
            f"num_params={self._num_params}, clauses={len(self._clauses)})"
        )


class ActionSet(BaseActionSet):
    """Ordered collection of (action, preference weight) pairs."""

    def __init__(self, entries: Optional[Sequence[Tuple[BaseAction, float]]] = None):
        self._entries: List[Tuple[BaseAction, float]] = []
        for action, preference in entries or ():
            self.add(action, preference)

    def add(self, action: BaseAction, preference: float = DEFAULT_PREFERENCE) -> "ActionSet":
        if preference <= 0:
            raise InvalidActionError(
                "Preference weight must be > 0",
                action_name=getattr(action, "name", None),
                context={"preference": preference},
            )
        self._entries.append((action, float(preference)))
        return self

    def __iter__(self) -> Iterator[Tuple[BaseAction, float]]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)
