"""
goap_config.py

Planner configuration.

Settings are plain values on a PlannerSettings dataclass. They can be loaded
from the 'planner' section of a YAML file and are shared process-wide via
get_config()/set_config(). Constructor arguments of Planner override them.

YAML layout:
    planner:
      heuristic: binary          # binary | difference
      match_policy: lenient_any  # lenient_any | strict_all
      max_expansions: 5000       # omit or null for unbounded
      log_events: true

Usage:
    from goap_config import get_config, load_settings

    settings = load_settings("config/planner.yaml")
    planner = Planner(settings=settings)
"""

import threading
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from common.constants import (
    DEFAULT_HEURISTIC,
    DEFAULT_MATCH_POLICY,
    DEFAULT_MAX_EXPANSIONS,
)
from component_10_logging_config import get_logger
from goap_exceptions import InvalidConfigError, wrap_exception

logger = get_logger(__name__)

VALID_HEURISTICS = ("binary", "difference")
VALID_MATCH_POLICIES = ("lenient_any", "strict_all")


@dataclass
class PlannerSettings:
    """
    Tunable planner behavior.

    Attributes:
        heuristic: Name of the heuristic used to score candidate states
        match_policy: postMatch policy used during backward expansion
        max_expansions: Expansion budget per search (None = unbounded)
        log_events: Forward planner events to the diagnostic sink
    """

    heuristic: str = DEFAULT_HEURISTIC
    match_policy: str = DEFAULT_MATCH_POLICY
    max_expansions: Optional[int] = DEFAULT_MAX_EXPANSIONS
    log_events: bool = True

    def __post_init__(self):
        if self.heuristic not in VALID_HEURISTICS:
            raise InvalidConfigError(
                f"Unknown heuristic '{self.heuristic}'",
                context={"valid": list(VALID_HEURISTICS)},
            )
        if self.match_policy not in VALID_MATCH_POLICIES:
            raise InvalidConfigError(
                f"Unknown match policy '{self.match_policy}'",
                context={"valid": list(VALID_MATCH_POLICIES)},
            )
        if self.max_expansions is None:
            return
        if isinstance(self.max_expansions, bool) or not isinstance(self.max_expansions, int):
            raise InvalidConfigError(
                "max_expansions must be an integer or null",
                context={"max_expansions": self.max_expansions},
            )
        if self.max_expansions < 0:
            raise InvalidConfigError(
                "max_expansions must be >= 0",
                context={"max_expansions": self.max_expansions},
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlannerSettings":
        """Build settings from a mapping, rejecting unknown keys."""
        known = set(cls.__dataclass_fields__)
        unknown = set(data) - known
        if unknown:
            raise InvalidConfigError(
                "Unknown planner settings",
                context={"unknown": sorted(unknown)},
            )
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_settings(config_path: Union[str, Path]) -> PlannerSettings:
    """
    Load PlannerSettings from the 'planner' section of a YAML file.

    A missing file yields the defaults (with a warning); a file that cannot
    be parsed or contains invalid values raises InvalidConfigError.
    """
    config_file = Path(config_path)
    if not config_file.exists():
        logger.warning(
            f"Config file not found: {config_path}, using defaults",
            extra={"path": str(config_file)},
        )
        return PlannerSettings()

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise wrap_exception(
            e, InvalidConfigError, "Cannot parse planner config", path=str(config_file)
        )

    if not isinstance(config, dict):
        raise InvalidConfigError(
            "Planner config must be a mapping", context={"path": str(config_file)}
        )

    section = config.get("planner", {}) or {}
    if not isinstance(section, dict):
        raise InvalidConfigError(
            "'planner' section must be a mapping", context={"path": str(config_file)}
        )

    settings = PlannerSettings.from_dict(section)
    logger.info("Planner config loaded", extra={"path": str(config_file), **settings.to_dict()})
    return settings


_config: Optional[PlannerSettings] = None
_config_lock = threading.Lock()


def get_config() -> PlannerSettings:
    """Return the process-wide settings (defaults until set_config is called)."""
    global _config
    with _config_lock:
        if _config is None:
            _config = PlannerSettings()
        return _config


def set_config(settings: Optional[PlannerSettings]) -> None:
    """Replace the process-wide settings; None restores the defaults."""
    global _config
    with _config_lock:
        _config = settings
