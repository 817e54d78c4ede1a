"""
goap_exceptions.py

Central exception hierarchy for the GOAP planner.

Planning outcomes (missing inputs, exhausted search space) are reported as
boolean results and through the diagnostic sink. The exceptions below are
reserved for programming errors: malformed facts, broken bindings, invalid
actions, misuse of the sliced planner phases and bad configuration.

Exception hierarchy:
    GOAPException (base)
    ├── WorldStateException
    │   ├── InvalidFactError
    │   └── UnboundParameterError
    ├── ActionException
    │   └── InvalidActionError
    ├── PlanningException
    │   ├── PlannerPhaseError
    │   └── PlanExecutionError
    └── ConfigurationException
        └── InvalidConfigError

Usage:
    from goap_exceptions import PlannerPhaseError

    try:
        planner.update(ctx)
    except PlannerPhaseError as e:
        logger.error(f"Planner misuse: {e}")
        logger.error(f"Context: {e.context}")
"""

from typing import Any, Dict, Optional


class GOAPException(Exception):
    """
    Base exception for all planner-specific errors.

    Every GOAPException carries:
    - a human-readable message
    - contextual information (dict)
    - an optional original exception (chaining via 'from' also works)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception

    def __str__(self) -> str:
        base_msg = self.message

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, context={self.context!r})"


# ============================================================================
# WORLD STATE EXCEPTIONS
# ============================================================================


class WorldStateException(GOAPException):
    """Base exception for errors in the world-state model."""


class InvalidFactError(WorldStateException):
    """
    A fact cannot be stored in a WorldState.

    Causes:
    - Fact still contains unbound parameter placeholders
    - Empty predicate name
    """

    def __init__(self, message: str, fact: Optional[Any] = None, **kwargs):
        context = kwargs.get("context", {})
        context["fact"] = str(fact) if fact is not None else None
        kwargs["context"] = context
        super().__init__(message, **kwargs)


class UnboundParameterError(WorldStateException):
    """
    A parameter index refers outside the binding it is filled from.

    Causes:
    - Action declares fewer parameters than its clauses use
    - Binding built for a different action
    """

    def __init__(
        self,
        message: str,
        index: Optional[int] = None,
        binding_size: Optional[int] = None,
        **kwargs,
    ):
        context = kwargs.get("context", {})
        context["index"] = index
        context["binding_size"] = binding_size
        kwargs["context"] = context
        super().__init__(message, **kwargs)


# ============================================================================
# ACTION EXCEPTIONS
# ============================================================================


class ActionException(GOAPException):
    """Base exception for errors in action definitions."""


class InvalidActionError(ActionException):
    """
    An action or action-set entry is malformed.

    Causes:
    - Negative cost or parameter count
    - Non-positive preference weight
    - Clause referring to a parameter slot the action does not declare
    """

    def __init__(self, message: str, action_name: Optional[str] = None, **kwargs):
        context = kwargs.get("context", {})
        context["action_name"] = action_name
        kwargs["context"] = context
        super().__init__(message, **kwargs)


# ============================================================================
# PLANNING EXCEPTIONS
# ============================================================================


class PlanningException(GOAPException):
    """Base exception for planner errors."""


class PlannerPhaseError(PlanningException):
    """
    A sliced-planner operation was called in the wrong phase.

    Causes:
    - init() while a search is running (call reset() first)
    - update() before init() or after the search stopped
    - finalize() before the search stopped
    - Changing start/goal/actions while searching
    """

    def __init__(
        self,
        message: str,
        phase: Optional[Any] = None,
        operation: Optional[str] = None,
        **kwargs,
    ):
        context = kwargs.get("context", {})
        context["phase"] = getattr(phase, "name", phase)
        context["operation"] = operation
        kwargs["context"] = context
        super().__init__(message, **kwargs)


class PlanExecutionError(PlanningException):
    """
    A plan entry cannot be executed forward.

    Causes:
    - Preconditions of the action not met in the simulated state
    - Special conditions reject the binding
    """

    def __init__(
        self,
        message: str,
        step_index: Optional[int] = None,
        action_name: Optional[str] = None,
        **kwargs,
    ):
        context = kwargs.get("context", {})
        context["step_index"] = step_index
        context["action_name"] = action_name
        kwargs["context"] = context
        super().__init__(message, **kwargs)


# ============================================================================
# CONFIGURATION EXCEPTIONS
# ============================================================================


class ConfigurationException(GOAPException):
    """Base exception for configuration errors."""


class InvalidConfigError(ConfigurationException):
    """
    Invalid planner configuration.

    Causes:
    - Unknown heuristic or match policy name
    - Negative expansion budget
    - Malformed YAML document
    """


# ============================================================================
# UTILITY FUNCTIONS
# ============================================================================


def wrap_exception(
    original: Exception,
    exception_class: type,
    message: str,
    **context: Any,
) -> GOAPException:
    """
    Wrap an arbitrary exception in a GOAPException subclass.

    Args:
        original: The original exception
        exception_class: GOAPException subclass to create
        message: Description of the failure
        **context: Additional context

    Returns:
        Instance of exception_class with the original attached

    Example:
        try:
            settings = yaml.safe_load(stream)
        except yaml.YAMLError as e:
            raise wrap_exception(e, InvalidConfigError, "Cannot parse settings", path=path)
    """
    return exception_class(message, context=context, original_exception=original)


def get_user_friendly_message(exc: Exception, include_details: bool = False) -> str:
    """
    Translate an exception into a short message for a host application.

    Args:
        exc: The exception to translate
        include_details: Append the technical message and context

    Returns:
        Human-readable message
    """
    friendly_messages = {
        InvalidFactError: "[ERROR] A fact could not be stored in the world state.",
        UnboundParameterError: "[ERROR] An action refers to a parameter that was not bound.",
        InvalidActionError: "[ERROR] An action definition is invalid.",
        PlannerPhaseError: "[ERROR] The planner was used out of order.",
        PlanExecutionError: "[ERROR] A plan step could not be executed.",
        InvalidConfigError: "[ERROR] Invalid planner configuration. Please check the settings.",
    }

    default_message = "[ERROR] An unexpected error occurred."

    user_message = friendly_messages.get(type(exc), default_message)

    if isinstance(exc, PlanExecutionError) and exc.context.get("step_index") is not None:
        user_message = (
            f"[ERROR] Plan step {exc.context['step_index']} "
            f"({exc.context.get('action_name', '?')}) could not be executed."
        )

    elif isinstance(exc, PlannerPhaseError) and exc.context.get("operation"):
        user_message = (
            f"[ERROR] '{exc.context['operation']}' is not allowed while the planner "
            f"is {exc.context.get('phase', '?')}."
        )

    if include_details and isinstance(exc, GOAPException):
        user_message += f"\n\nTechnical details: {exc.message}"
        if exc.context:
            user_message += f"\n   Context: {exc.context}"

    return user_message
