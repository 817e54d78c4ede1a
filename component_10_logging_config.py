"""
component_10_logging_config.py

Central logging system for the GOAP planner.
Provides structured logging with log levels, rotating log files and
performance tracking for search runs.

Features:
- Console and file based logging
- Separate error-only and performance log files
- Structured formatting with timestamps and component names
- Performance tracking for planning calls (PerformanceLogger)
- Contextual key=value information via 'extra'

Usage:
    from component_10_logging_config import get_logger

    logger = get_logger(__name__)
    logger.info("Plan found", extra={"plan_length": 3, "expansions": 12})
    logger.warning("Search exhausted", extra={"expansions": 400})
"""

import logging
import logging.handlers
import sys
from datetime import datetime
from pathlib import Path
from types import TracebackType
from typing import Any, Dict, Literal, MutableMapping, Optional, Tuple, Type

from common.constants import (
    DEFAULT_LOG_FILE_NAME,
    ERROR_LOG_FILE_NAME,
    LOG_DIR_NAME,
    PERFORMANCE_LOG_FILE_NAME,
    PERFORMANCE_LOGGER_NAME,
)

LOG_DIR: Path = Path(LOG_DIR_NAME)

DEFAULT_LOG_FILE: Path = LOG_DIR / DEFAULT_LOG_FILE_NAME
ERROR_LOG_FILE: Path = LOG_DIR / ERROR_LOG_FILE_NAME
PERFORMANCE_LOG_FILE: Path = LOG_DIR / PERFORMANCE_LOG_FILE_NAME

DEFAULT_LOG_LEVEL: int = logging.INFO
CONSOLE_LOG_LEVEL: int = logging.WARNING
FILE_LOG_LEVEL: int = logging.DEBUG


class GOAPLogFormatter(logging.Formatter):
    """
    Formatter for structured log output.
    Optionally colors console output by level.
    """

    COLORS: Dict[str, str] = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",
    }

    def __init__(self, use_colors: bool = False, include_extra: bool = True) -> None:
        self.use_colors: bool = use_colors
        self.include_extra: bool = include_extra

        # [TIMESTAMP] [LEVEL] [COMPONENT] MESSAGE
        fmt = "[%(asctime)s] [%(levelname)-8s] [%(name)s] %(message)s"
        super().__init__(fmt=fmt, datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        log_message = super().format(record)

        if self.include_extra and hasattr(record, "extra_info"):
            extra_str = " | ".join(f"{k}={v}" for k, v in record.extra_info.items())
            log_message += f" | {extra_str}"

        if self.use_colors:
            color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
            reset = self.COLORS["RESET"]
            log_message = f"{color}{log_message}{reset}"

        return log_message


class PerformanceLogger:
    """
    Context manager that times a planning operation.

    Usage:
        with PerformanceLogger(logger.logger, "Backward search", actions=4):
            planner.plan(ctx)
    """

    def __init__(
        self, logger: logging.Logger, operation_name: str, **context: Any
    ) -> None:
        self.logger: logging.Logger = logger
        self.operation_name: str = operation_name
        self.context: Dict[str, Any] = context
        self.start_time: Optional[datetime] = None

    def __enter__(self) -> "PerformanceLogger":
        self.start_time = datetime.now()
        self.logger.debug(
            f"START: {self.operation_name}", extra={"extra_info": self.context}
        )
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> Literal[False]:
        assert (
            self.start_time is not None
        ), "PerformanceLogger used outside of a with-block"
        duration_ms = (datetime.now() - self.start_time).total_seconds() * 1000

        if exc_type is None:
            self.logger.debug(
                f"END: {self.operation_name} (duration: {duration_ms:.2f}ms)",
                extra={"extra_info": {**self.context, "duration_ms": duration_ms}},
            )

            perf_logger = logging.getLogger(PERFORMANCE_LOGGER_NAME)
            perf_logger.info(
                f"{self.operation_name}: {duration_ms:.2f}ms",
                extra={"extra_info": {**self.context, "duration_ms": duration_ms}},
            )
        else:
            self.logger.error(
                f"FAILED: {self.operation_name} (duration: {duration_ms:.2f}ms)",
                extra={
                    "extra_info": {
                        **self.context,
                        "duration_ms": duration_ms,
                        "error": str(exc_val),
                    }
                },
            )

        return False


class StructuredLogger(logging.LoggerAdapter):
    """
    Logger adapter that stores the 'extra' dict as 'extra_info' on the record,
    where GOAPLogFormatter renders it as key=value pairs.
    """

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> Tuple[str, MutableMapping[str, Any]]:
        extra = kwargs.get("extra", {})
        if extra:
            kwargs["extra"] = {"extra_info": extra}
        return msg, kwargs


def setup_logging(
    console_level: int = CONSOLE_LOG_LEVEL,
    file_level: int = FILE_LOG_LEVEL,
    log_file: Optional[Path] = None,
    enable_performance_logging: bool = True,
) -> None:
    """
    Configure the global logging system.

    Args:
        console_level: Level of the console handler
        file_level: Level of the main log file
        log_file: Path of the main log file (default: logs/goap.log)
        enable_performance_logging: Write planning timings to a separate file
    """
    file_path = log_file or DEFAULT_LOG_FILE
    file_path.parent.mkdir(parents=True, exist_ok=True)
    LOG_DIR.mkdir(exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # filtering happens per handler

    # avoid duplicate handlers on repeated setup
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(GOAPLogFormatter(use_colors=True, include_extra=True))
    root_logger.addHandler(console_handler)

    file_handler = logging.handlers.RotatingFileHandler(
        file_path, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8"  # 10 MB
    )
    file_handler.setLevel(file_level)
    file_handler.setFormatter(GOAPLogFormatter(use_colors=False, include_extra=True))
    root_logger.addHandler(file_handler)

    error_handler = logging.handlers.RotatingFileHandler(
        ERROR_LOG_FILE,
        maxBytes=5 * 1024 * 1024,  # 5 MB
        backupCount=3,
        encoding="utf-8",
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(GOAPLogFormatter(use_colors=False, include_extra=True))
    root_logger.addHandler(error_handler)

    if enable_performance_logging:
        perf_logger = logging.getLogger(PERFORMANCE_LOGGER_NAME)
        perf_logger.setLevel(logging.INFO)
        perf_logger.propagate = False
        perf_logger.handlers.clear()

        perf_handler = logging.handlers.RotatingFileHandler(
            PERFORMANCE_LOG_FILE,
            maxBytes=5 * 1024 * 1024,  # 5 MB
            backupCount=3,
            encoding="utf-8",
        )
        perf_handler.setFormatter(GOAPLogFormatter(use_colors=False, include_extra=True))
        perf_logger.addHandler(perf_handler)

    logger = logging.getLogger("goap.logging_config")
    logger.info(
        "Logging initialized",
        extra={
            "extra_info": {
                "console_level": logging.getLevelName(console_level),
                "file_level": logging.getLevelName(file_level),
                "log_file": str(file_path),
                "performance_logging": enable_performance_logging,
            }
        },
    )


def get_logger(name: str) -> StructuredLogger:
    """
    Create a structured logger for a component.

    Args:
        name: Component name (usually __name__)

    Returns:
        StructuredLogger instance

    Example:
        logger = get_logger(__name__)
        logger.info("Search started", extra={"actions": 5})
    """
    base_logger = logging.getLogger(name)
    return StructuredLogger(base_logger, {})


# Automatic initialization on import; an explicit setup_logging() call
# replaces it.
if not logging.getLogger().handlers:
    setup_logging()
