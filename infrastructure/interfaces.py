"""
infrastructure/interfaces.py

Capability interfaces consumed by the world-state model and the planner.

The planner never depends on a concrete action representation. Anything with
ordered (Fact, Operation) clauses, a cost, a parameter count and a
special-condition check can be adapted to BaseAction; anything that yields
(action, preference) pairs is a BaseActionSet; anything with a log_event
method is a DiagnosticSink.

Interface Contract:
    BaseAction
        num_params        -> number of parameter slots
        cost              -> base cost (multiplied by the set's preference)
        check_special_conditions(params) -> bool
        __iter__          -> ordered (Fact, Operation) clauses
        describe(params)  -> display form for diagnostics
    BaseActionSet
        __iter__          -> (BaseAction, preference) pairs
    DiagnosticSink
        log_event(fmt, *args) -> None, printf-style; must not raise

Usage:
    from infrastructure.interfaces import BaseAction

    class DoorAction(BaseAction):
        ...
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Iterator, Sequence, Tuple

if TYPE_CHECKING:
    from component_11_world_state import Fact, Operation


class BaseAction(ABC):
    """
    Abstract action: a parametrized set of clauses with a cost.

    Implementations are owned by the caller; the planner keeps non-owning
    references for the duration of a plan call and never mutates them.
    """

    @property
    @abstractmethod
    def num_params(self) -> int:
        """Number of parameter slots filled from the object pool."""

    @property
    @abstractmethod
    def cost(self) -> float:
        """Base cost of executing the action once."""

    @abstractmethod
    def check_special_conditions(self, params: Sequence[Any]) -> bool:
        """Accept or reject a candidate parameter binding."""

    @abstractmethod
    def __iter__(self) -> Iterator[Tuple["Fact", "Operation"]]:
        """Iterate the (Fact, Operation) clauses in definition order."""

    def describe(self, params: Sequence[Any] = ()) -> str:
        """Display form used in diagnostics."""
        name = getattr(self, "name", type(self).__name__)
        return f"{name}({', '.join(str(p) for p in params)})"


class BaseActionSet(ABC):
    """Abstract collection of (action, preference weight) pairs."""

    @abstractmethod
    def __iter__(self) -> Iterator[Tuple[BaseAction, float]]:
        """Iterate (action, preference) pairs in a stable order."""


class DiagnosticSink(ABC):
    """
    Receiver of planner events.

    log_event is called synchronously from inside the search; it must not
    raise and must not touch planner state.
    """

    @abstractmethod
    def log_event(self, fmt: str, *args: Any) -> None:
        """Record one printf-style formatted event."""
