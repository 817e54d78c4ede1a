"""
Common constants for the GOAP planner project.

This package provides centralized default values shared by the world-state
model, the action model, the planner and the logging configuration.
"""

from common.constants import *

__all__ = [
    # World-State Model
    "SENTINEL_VALUE",
    "DIGEST_MULTIPLIER",
    "DIGEST_MASK",
    # Action Model
    "DEFAULT_ACTION_COST",
    "DEFAULT_PREFERENCE",
    "BINDING_CACHE_MAXSIZE",
    # Planner
    "DEFAULT_MAX_EXPANSIONS",
    "DEFAULT_HEURISTIC",
    "DEFAULT_MATCH_POLICY",
    # Logging
    "LOG_DIR_NAME",
    "DEFAULT_LOG_FILE_NAME",
    "ERROR_LOG_FILE_NAME",
    "PERFORMANCE_LOG_FILE_NAME",
    "PERFORMANCE_LOGGER_NAME",
]
