"""Loguru helpers for consistent logging in CLI commands."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

STDERR_FORMAT = "<dim>{time:HH:mm:ss.SSS}</dim> | <level>{level: <8}</level> | <level>{message}</level>"

_SINK_IDS: dict[str, int] = {}


def not_debug_trace(record) -> bool:
    """Keep raw protocol trace records out of general-purpose sinks."""
    return "debug_channel" not in record["extra"]


def configure_console_logging(*, verbose: bool = False, debug: bool = False) -> None:
    """Library logs are silent unless --verbose or --debug is given."""
    logger.remove()
    if debug or verbose:
        logger.add(sys.stderr, level="DEBUG" if debug else "INFO", format=STDERR_FORMAT, filter=not_debug_trace)
        logger.enable("sonarscan")
    else:
        logger.disable("sonarscan")


def ensure_rotating_log_file(name: str, level: str = "INFO") -> Path:
    """Ensure a rotating log sink for the given command name."""
    log_dir = Path.home() / ".sonarscan" / "logs"
    log_path = log_dir / f"{name}.log"
    if name in _SINK_IDS:
        return log_path
    log_dir.mkdir(parents=True, exist_ok=True)
    sink_id = logger.add(
        str(log_path),
        level=level,
        rotation="10 MB",
        retention="14 days",
        enqueue=True,
        encoding="utf-8",
        backtrace=False,
        diagnose=False,
        filter=not_debug_trace,
    )
    _SINK_IDS[name] = sink_id
    return log_path
