"""
Centralized constants for the GOAP backward planner.

This module provides a single source of truth for the defaults used by the
world-state model, the action model and the sliced planner. Components may
override most of these via PlannerSettings (goap_config.py) or constructor
parameters.

Organization:
    - World-State Model: sentinel values and digest configuration
    - Action Model: preference weights and binding cache sizing
    - Planner: search limits and heuristic/match-policy defaults
    - Logging: log directory and file names

Usage:
    from common.constants import SENTINEL_VALUE, DEFAULT_PREFERENCE
"""

# =============================================================================
# World-State Model
# =============================================================================

SENTINEL_VALUE: int = 0
"""
Value written by reverse application for an IS_SET precondition whose fact
is not present in the successor state.

Any value satisfies IS_SET, so the concrete number only matters for
display and digest purposes.
"""

DIGEST_MULTIPLIER: int = 31
"""Multiplier of the running fold in WorldState.digest."""

DIGEST_MASK: int = (1 << 64) - 1
"""
Width of the state digest (64 bit).

Python integers are unbounded, so the fold is masked after each step to
keep digests cheap to compare.
"""

# =============================================================================
# Action Model
# =============================================================================

DEFAULT_ACTION_COST: float = 1.0
"""Base cost of an Action when none is given."""

DEFAULT_PREFERENCE: float = 1.0
"""Preference weight of an Action inside an ActionSet when none is given."""

BINDING_CACHE_MAXSIZE: int = 256
"""
Number of (object pool, parameter count) cross products kept in the
binding LRU cache.

Every expansion enumerates the bindings of every action, so the same few
products are requested over and over during one search.
"""

# =============================================================================
# Planner
# =============================================================================

DEFAULT_MAX_EXPANSIONS = None
"""
Expansion budget of a single search. None means unbounded: the search only
stops on success or when the frontier is exhausted.
"""

DEFAULT_HEURISTIC: str = "binary"
"""
Name of the default heuristic (see component_13_heuristics.get_heuristic).

- "binary": 0 if the candidate equals the start state, 1 otherwise
- "difference": number of facts unique to one side or disagreeing
"""

DEFAULT_MATCH_POLICY: str = "lenient_any"
"""
Default postMatch policy (see component_11_world_state.MatchPolicy).

- "lenient_any": no contradiction and at least one explaining clause
- "strict_all": every effect clause must be explained by the state
"""

# =============================================================================
# Logging
# =============================================================================

LOG_DIR_NAME: str = "logs"
DEFAULT_LOG_FILE_NAME: str = "goap.log"
ERROR_LOG_FILE_NAME: str = "goap_errors.log"
PERFORMANCE_LOG_FILE_NAME: str = "goap_performance.log"
PERFORMANCE_LOGGER_NAME: str = "goap.performance"
