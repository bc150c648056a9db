"""Centralized logging helpers.

All modules log through ``logging.getLogger(__name__)``; this module owns the
root configuration and the structured ``extra`` payloads attached to DEBUG
traces.
"""
from __future__ import annotations

import logging
import os
import time
from typing import Any, Dict, Iterable, Optional

from constants import Constants

# Keys carried in ``extra`` by extra_context(); rendered by ContextFormatter.
CONTEXT_KEYS = (
    "event",
    "component",
    "action",
    "outcome",
    "package",
    "target",
    "count",
    "duration_ms",
    "kind",
)


class ContextFormatter(logging.Formatter):
    """Formatter that appends structured context fields when present."""

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        fields = []
        for key in CONTEXT_KEYS:
            value = getattr(record, key, None)
            if value is not None:
                fields.append(f"{key}={value}")
        if fields:
            return f"{base} [{' '.join(fields)}]"
        return base


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """Configure the root logger once.

    The level comes from *level*, then the ``MODGATE_LOG_LEVEL`` environment
    variable, then INFO.
    """
    level_name = (level or os.environ.get(Constants.LOG_LEVEL_ENV) or "INFO").upper()
    level_value = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler: logging.Handler
    if log_file:
        handler = logging.FileHandler(log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(ContextFormatter(Constants.LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(level_value)


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when *logger* would emit DEBUG records."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**kwargs: Any) -> Dict[str, Any]:
    """Build an ``extra`` mapping for structured log records, dropping Nones."""
    return {k: v for k, v in kwargs.items() if v is not None}


def log_discovered_entries(logger: logging.Logger, root: str, entries: Iterable[str]) -> None:
    """DEBUG-log the storage entries found under a mods directory."""
    names = list(entries)
    logger.debug(
        "Discovered %d storage entries under %s: %s",
        len(names),
        root,
        ", ".join(names),
        extra=extra_context(event="discovery", component="discovery", count=len(names)),
    )


class Timer:
    """Context manager measuring wall-clock duration."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> int:
        """Elapsed milliseconds, measured up to now while still running."""
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)
