"""
Component 11: World-State Model

Fact/value state representation used by the backward planner:
- Facts (predicate instances with optional parameter placeholders)
- Operations (condition + effect clauses of an action)
- Consistency tests for conditions and effects
- WorldState: ordered fact -> value mapping with a cached digest
- Forward/backward matching and application of actions

A fact that is absent from a WorldState is "unknown/unset", which is
different from being present with any value.

The planner searches from the goal towards the start, so the interesting
direction is backwards: post_match() decides whether an action could have
produced the current state and apply_reverse() derives the predecessor.
"""

import operator
from dataclasses import dataclass, replace
from enum import Enum
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Dict,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
)

from common.constants import DIGEST_MASK, DIGEST_MULTIPLIER, SENTINEL_VALUE
from goap_exceptions import InvalidFactError, UnboundParameterError

if TYPE_CHECKING:
    from infrastructure.interfaces import BaseAction


# Values are opaque to the model; comparisons need a total order and
# increment/decrement need numbers.
PVal = Any


def _resolve(params: Sequence[Any], index: int) -> Any:
    if index < 0 or index >= len(params):
        raise UnboundParameterError(
            f"Parameter index {index} outside binding of size {len(params)}",
            index=index,
            binding_size=len(params),
        )
    return params[index]


def _order_key(value: Any) -> Tuple[str, Any]:
    # values of different types never compare directly
    return (type(value).__name__, value)


# ============================================================================
# Facts
# ============================================================================


@dataclass(frozen=True, order=True)
class Param:
    """Placeholder argument: index into an action's parameter binding."""

    index: int

    def __str__(self) -> str:
        return f"?{self.index}"


@dataclass(frozen=True)
class Fact:
    """
    Identity of a predicate instance.

    Arguments are concrete values or Param placeholders. Example:
        Fact("at", ("alice",))   -> at(alice)
        Fact("at", (Param(0),))  -> at(?0), bound per parameter binding
    """

    name: str
    args: Tuple[Any, ...] = ()

    def __post_init__(self):
        if not self.name:
            raise InvalidFactError("Fact needs a predicate name", fact=self.args)
        if not isinstance(self.args, tuple):
            object.__setattr__(self, "args", tuple(self.args))

    @property
    def is_bound(self) -> bool:
        return not any(isinstance(arg, Param) for arg in self.args)

    def bind(self, params: Sequence[Any]) -> "Fact":
        """Substitute every Param placeholder with its value from params."""
        if self.is_bound:
            return self
        return Fact(
            self.name,
            tuple(
                _resolve(params, arg.index) if isinstance(arg, Param) else arg
                for arg in self.args
            ),
        )

    def sort_key(self) -> Tuple[str, Tuple[Tuple[str, Any], ...]]:
        return (self.name, tuple(_order_key(arg) for arg in self.args))

    def __lt__(self, other: "Fact") -> bool:
        if not isinstance(other, Fact):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def __str__(self) -> str:
        if not self.args:
            return self.name
        return f"{self.name}({', '.join(str(arg) for arg in self.args)})"


# ============================================================================
# Operations
# ============================================================================


class ConditionType(Enum):
    """Requirement an action places on a fact before it runs."""

    NONE = "none"
    IS_SET = "is_set"
    IS_UNSET = "is_unset"
    EQUALS = "equals"
    NOT_EQUAL = "not_equal"
    LESS = "less"
    GREATER = "greater"
    LESS_EQUAL = "less_equal"
    GREATER_EQUAL = "greater_equal"


class EffectType(Enum):
    """Change an action makes to a fact."""

    NONE = "none"
    SET = "set"
    UNSET = "unset"
    INCREMENT = "increment"
    DECREMENT = "decrement"


@dataclass(frozen=True)
class Operation:
    """
    One clause of an action: a condition and an effect on the same fact.

    condition_param/effect_param, when given, take the comparison/effect
    value from the parameter binding instead of the literal value.
    For INCREMENT/DECREMENT the effect value is the value expected before
    the action when the fact is unknown.
    """

    condition: ConditionType = ConditionType.NONE
    condition_value: PVal = None
    condition_param: Optional[int] = None
    effect: EffectType = EffectType.NONE
    effect_value: PVal = None
    effect_param: Optional[int] = None

    @property
    def has_condition(self) -> bool:
        return self.condition is not ConditionType.NONE

    @property
    def has_effect(self) -> bool:
        return self.effect is not EffectType.NONE

    @property
    def is_parametrized(self) -> bool:
        return self.condition_param is not None or self.effect_param is not None

    def bind(self, params: Sequence[Any]) -> "Operation":
        """Fill parameter-bound values from params."""
        if not self.is_parametrized:
            return self
        changes: Dict[str, Any] = {}
        if self.condition_param is not None:
            changes["condition_value"] = _resolve(params, self.condition_param)
        if self.effect_param is not None:
            changes["effect_value"] = _resolve(params, self.effect_param)
        return replace(self, **changes)


_COMPARATORS: Dict[ConditionType, Callable[[Any, Any], bool]] = {
    ConditionType.EQUALS: operator.eq,
    ConditionType.NOT_EQUAL: operator.ne,
    ConditionType.LESS: operator.lt,
    ConditionType.GREATER: operator.gt,
    ConditionType.LESS_EQUAL: operator.le,
    ConditionType.GREATER_EQUAL: operator.ge,
}


def consistent_with_condition(value: PVal, condition: ConditionType, target: PVal) -> bool:
    """Is a present value consistent with a condition on target?"""
    if condition is ConditionType.IS_UNSET:
        # there is a value and there should not be
        return False
    if condition in (ConditionType.NONE, ConditionType.IS_SET):
        return True
    return bool(_COMPARATORS[condition](value, target))


def consistent_with_effect(value: PVal, effect: EffectType, target: PVal) -> bool:
    """Could a present value be the result of the effect with target?"""
    if effect is EffectType.SET:
        return value == target
    if effect is EffectType.UNSET:
        # an unset fact has no value
        return False
    if effect is EffectType.INCREMENT:
        return value == target + 1
    if effect is EffectType.DECREMENT:
        return value == target - 1
    return True


def bound_clauses(
    action: "BaseAction", params: Sequence[Any]
) -> Iterator[Tuple[Fact, Operation]]:
    """
    Yield the action's clauses with facts and values filled from params.

    With an empty binding placeholders stay in place; such facts never
    match a stored fact.
    """
    for fact, op in action:
        if params:
            yield fact.bind(params), op.bind(params)
        else:
            yield fact, op


def _grounded(fact: Fact, op: Operation, params: Sequence[Any]) -> bool:
    # a clause is only comparable once its fact and values are concrete
    return fact.is_bound and (bool(params) or not op.is_parametrized)


class MatchPolicy(Enum):
    """
    How post_match decides that an action could explain a state.

    LENIENT_ANY: no present fact contradicts a clause and at least one
        clause is positively consistent. Facts absent from the state are
        ignored, so an action may be accepted while explaining only part
        of what it does.
    STRICT_ALL: every effect clause must be explained by the state (UNSET
        effects need the fact absent, all others need it present and
        consistent) and every present condition-only fact must satisfy
        its condition.
    """

    LENIENT_ANY = "lenient_any"
    STRICT_ALL = "strict_all"


# ============================================================================
# World State
# ============================================================================


class WorldState:
    """
    Ordered mapping Fact -> PVal with a cached digest.

    Iteration follows the facts' natural order, not insertion order. The
    digest is recomputed on every mutation and used as hash and as a fast
    reject before full structural comparison. Do not mutate a state while
    it is used as a dictionary key.
    """

    def __init__(self, facts: Optional[Mapping[Fact, PVal]] = None):
        self._state: Dict[Fact, PVal] = {}
        self._digest: int = 0
        if facts:
            for fact, value in facts.items():
                self._set(fact, value)
        self._update_digest()

    # ------------------------------------------------------------------
    # Mapping access
    # ------------------------------------------------------------------

    def set(self, fact: Fact, value: PVal) -> None:
        self._set(fact, value)
        self._update_digest()

    def unset(self, fact: Fact) -> None:
        """Remove the fact entirely (no sentinel is stored)."""
        self._unset(fact)
        self._update_digest()

    def get(self, fact: Fact, default: PVal = None) -> PVal:
        return self._state.get(fact, default)

    def has(self, fact: Fact) -> bool:
        return fact in self._state

    def _set(self, fact: Fact, value: PVal) -> None:
        if not fact.is_bound:
            raise InvalidFactError(
                "Cannot store a fact with unbound parameters", fact=fact
            )
        self._state[fact] = value

    def _unset(self, fact: Fact) -> None:
        self._state.pop(fact, None)

    def items(self) -> List[Tuple[Fact, PVal]]:
        return sorted(self._state.items(), key=lambda item: item[0].sort_key())

    def facts(self) -> List[Fact]:
        return [fact for fact, _ in self.items()]

    def copy(self) -> "WorldState":
        clone = WorldState()
        clone._state = dict(self._state)
        clone._digest = self._digest
        return clone

    def __contains__(self, fact: object) -> bool:
        return fact in self._state

    def __iter__(self) -> Iterator[Fact]:
        return iter(self.facts())

    def __len__(self) -> int:
        return len(self._state)

    # ------------------------------------------------------------------
    # Digest and equality
    # ------------------------------------------------------------------

    @property
    def digest(self) -> int:
        return self._digest

    def _update_digest(self) -> None:
        digest = 0
        for fact, value in self.items():
            digest = (DIGEST_MULTIPLIER * digest + hash((fact.name, fact.args, value))) & DIGEST_MASK
        self._digest = digest

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WorldState):
            return NotImplemented
        if self._digest != other._digest:
            return False
        return self._state == other._state

    def __hash__(self) -> int:
        return self._digest

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------

    def pre_match(self, action: "BaseAction", params: Sequence[Any] = ()) -> bool:
        """
        Forward applicability: every clause with a condition holds here.

        A missing fact only satisfies an IS_UNSET condition. The action's
        special conditions must also accept the binding.
        """
        if not action.check_special_conditions(params):
            return False
        for fact, op in bound_clauses(action, params):
            if not op.has_condition:
                continue
            if not _grounded(fact, op, params):
                return False
            if fact in self._state:
                if not consistent_with_condition(
                    self._state[fact], op.condition, op.condition_value
                ):
                    return False
            elif op.condition is not ConditionType.IS_UNSET:
                return False
        return True

    def post_match(
        self,
        action: "BaseAction",
        params: Sequence[Any] = (),
        policy: MatchPolicy = MatchPolicy.LENIENT_ANY,
    ) -> bool:
        """
        Could the action (with params) have produced this state?

        Clauses with an effect are checked against the effect, clauses
        without one against their condition. See MatchPolicy for how
        absent facts are treated.
        """
        if not action.check_special_conditions(params):
            return False
        strict = policy is MatchPolicy.STRICT_ALL
        consistencies = 0
        for fact, op in bound_clauses(action, params):
            if not op.has_effect and not op.has_condition:
                continue
            if not _grounded(fact, op, params):
                return False
            present = fact in self._state
            if op.has_effect:
                if present:
                    if not consistent_with_effect(
                        self._state[fact], op.effect, op.effect_value
                    ):
                        return False
                    consistencies += 1
                elif strict:
                    if op.effect is not EffectType.UNSET:
                        return False
                    consistencies += 1
            else:
                if present:
                    if not consistent_with_condition(
                        self._state[fact], op.condition, op.condition_value
                    ):
                        return False
                    consistencies += 1
                elif strict and op.condition is ConditionType.IS_UNSET:
                    consistencies += 1
        return consistencies > 0

    # ------------------------------------------------------------------
    # Application
    # ------------------------------------------------------------------

    def apply_forward(self, action: "BaseAction", params: Sequence[Any] = ()) -> None:
        """Apply the action's effects; condition-only clauses are untouched."""
        for fact, op in bound_clauses(action, params):
            if op.effect is EffectType.SET:
                self._set(fact, op.effect_value)
            elif op.effect is EffectType.UNSET:
                self._unset(fact)
            elif op.effect is EffectType.INCREMENT:
                current = self._state.get(fact, op.effect_value)
                self._set(fact, current + 1)
            elif op.effect is EffectType.DECREMENT:
                current = self._state.get(fact, op.effect_value)
                self._set(fact, current - 1)
        self._update_digest()

    def apply_reverse(self, action: "BaseAction", params: Sequence[Any] = ()) -> None:
        """
        Turn this state into a predecessor from which the action leads here.

        Per clause:
        - EQUALS forces the required value, IS_UNSET removes the fact;
          any effect of the clause is not undone.
        - Any other condition (NONE, IS_SET, NOT_EQUAL, LESS, GREATER,
          LESS_EQUAL, GREATER_EQUAL) leaves the value to the effect, which is
          undone: SET unsets, UNSET sets the effect value, INCREMENT and
          DECREMENT step the current value back (or write the effect value
          when the fact is absent). These comparisons are not enforced on
          the predecessor.
        - IS_SET keeps a value that is present after the undo and only writes
          SENTINEL_VALUE when the fact is absent.

        Forward application of the same action to the result reproduces
        this state for effect-only clauses accepted by a STRICT_ALL
        post_match, not for EQUALS/IS_UNSET clauses, which overwrite.
        """
        for fact, op in bound_clauses(action, params):
            if op.condition is ConditionType.EQUALS:
                self._set(fact, op.condition_value)
                continue
            if op.condition is ConditionType.IS_UNSET:
                self._unset(fact)
                continue
            if op.has_effect:
                self._undo_effect(fact, op)
            if op.condition is ConditionType.IS_SET and fact not in self._state:
                self._set(fact, SENTINEL_VALUE)
        self._update_digest()

    def _undo_effect(self, fact: Fact, op: Operation) -> None:
        if op.effect is EffectType.SET:
            self._unset(fact)
        elif op.effect is EffectType.UNSET:
            self._set(fact, op.effect_value)
        elif op.effect is EffectType.INCREMENT:
            if fact in self._state:
                self._set(fact, self._state[fact] - 1)
            else:
                self._set(fact, op.effect_value)
        elif op.effect is EffectType.DECREMENT:
            if fact in self._state:
                self._set(fact, self._state[fact] + 1)
            else:
                self._set(fact, op.effect_value)

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    def satisfies(self, other: "WorldState") -> bool:
        """True if every fact of other is present here with an equal value."""
        return all(
            fact in self._state and self._state[fact] == value
            for fact, value in other._state.items()
        )

    @staticmethod
    def comp_start(ws1: "WorldState", ws2: "WorldState") -> int:
        """
        Number of facts present in both states with different values.

        Facts unique to either side never count. Zero is the planner's
        "start reached" test.
        """
        small, large = (ws1, ws2) if len(ws1) <= len(ws2) else (ws2, ws1)
        return sum(
            1
            for fact, value in small._state.items()
            if fact in large._state and large._state[fact] != value
        )

    @staticmethod
    def comp(ws1: "WorldState", ws2: "WorldState") -> int:
        """0 if both mappings are exactly equal, 1 otherwise."""
        return 0 if ws1 == ws2 else 1

    @staticmethod
    def difference(ws1: "WorldState", ws2: "WorldState") -> int:
        """
        Full symmetric-difference score: one per fact present in only one
        state plus one per shared fact with different values.
        """
        keys1 = ws1._state.keys()
        keys2 = ws2._state.keys()
        unique = len(keys1 - keys2) + len(keys2 - keys1)
        shared = sum(1 for fact in keys1 & keys2 if ws1._state[fact] != ws2._state[fact])
        return unique + shared

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def to_string(self) -> str:
        """Human-readable state description."""
        if not self._state:
            return "{}"
        lines = [f"    {fact} -> {value}" for fact, value in self.items()]
        return "{\n" + "\n".join(lines) + "\n}"

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        body = ", ".join(f"{fact}: {value!r}" for fact, value in self.items())
        return f"WorldState({{{body}}})"
