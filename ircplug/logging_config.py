"""Console logging setup and per-category failure accounting.

``setup_logging`` installs a colorlog handler on the root logger. Plugin,
network and configuration failures go through :func:`log_structured_error`,
which logs one line with context and counts the failure by category so the
process can report what went wrong when it exits.
"""

from __future__ import annotations

import atexit
import logging
import os
import sys
import threading
from typing import Any

import colorlog

_LOG = logging.getLogger("ircplug")

_FORMAT = (
    "%(asctime)s %(log_color)s%(levelname)-8s%(reset)s "
    "%(name)s %(message_log_color)s%(message)s"
)


class FailureCounter:
    """Counts failures per category (``plugin``, ``network``, ``config`` ...).

    Plugin hooks run on worker threads, so every method takes the lock.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counts: dict[str, int] = {}
        self._last: dict[str, dict[str, Any]] = {}

    def record(
        self, category: str, message: str, context: dict[str, Any] | None = None
    ) -> int:
        """Count one failure and return the new total for ``category``."""
        with self._lock:
            total = self._counts.get(category, 0) + 1
            self._counts[category] = total
            self._last[category] = {"message": message, "context": dict(context or {})}
            return total

    def count(self, category: str) -> int:
        with self._lock:
            return self._counts.get(category, 0)

    def counts(self) -> dict[str, int]:
        with self._lock:
            return dict(self._counts)

    def last(self, category: str) -> dict[str, Any] | None:
        with self._lock:
            return self._last.get(category)

    def clear(self) -> None:
        with self._lock:
            self._counts.clear()
            self._last.clear()


failure_counter = FailureCounter()


def log_structured_error(
    error_type: str,
    message: str,
    exception: BaseException | None = None,
    context: dict[str, Any] | None = None,
    level: int = logging.ERROR,
) -> None:
    """Log a failure with its context and count it under ``error_type``.

    The first failure of a category and every tenth after it also log the
    running total, so a plugin failing on every line stays visible without
    hiding the individual errors.
    """
    parts = [f"[{error_type.upper()}] {message}"]
    if exception is not None:
        parts.append(f"Exception: {type(exception).__name__}: {exception}")
    if context:
        parts.append("Context: " + " | ".join(f"{k}={v}" for k, v in context.items()))
    _LOG.log(level, " | ".join(parts))

    total = failure_counter.record(error_type, message, context)
    if total == 1 or total % 10 == 0:
        _LOG.log(level, f"{error_type} failures so far: {total}")


def _log_failure_summary() -> None:
    counts = failure_counter.counts()
    if not counts:
        return
    summary = ", ".join(f"{k}={v}" for k, v in sorted(counts.items()))
    _LOG.warning(f"📊 Failures this session: {summary}")


def _debug_enabled() -> bool:
    return os.environ.get("DEBUG", "").lower() in ("true", "1", "yes")


def setup_logging(debug: bool | None = None) -> None:
    """Send all logging to stderr through a colorlog formatter.

    ``debug`` defaults to the ``DEBUG`` environment variable. The asyncio
    logger stays at WARNING.
    """
    if debug is None:
        debug = _debug_enabled()
    level = logging.DEBUG if debug else logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        colorlog.ColoredFormatter(
            _FORMAT,
            datefmt="%H:%M:%S",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "bold_red",
            },
            secondary_log_colors={"message": {"ERROR": "red", "CRITICAL": "bold_red"}},
        )
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    atexit.unregister(_log_failure_summary)
    atexit.register(_log_failure_summary)
