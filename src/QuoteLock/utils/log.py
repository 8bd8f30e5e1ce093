"""QuoteLock logging utilities.

Every line carries the active quote provider and the worker that emitted it,
since refreshes, triggered refreshes and display passes run on separate
threads::

    05-14 09:30:01 [INFO] wikiquote/refresh Quote updated: ...
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Final


_LEVEL_ABBREV: Final[dict[int, str]] = {
    logging.DEBUG: "DEBG",
    logging.INFO: "INFO",
    logging.WARNING: "WARN",
    logging.ERROR: "ERRO",
    logging.CRITICAL: "ERRO",
}

_THREAD_PREFIX: Final[str] = "quotelock-"


class _QuoteLockFormatter(logging.Formatter):
    def __init__(self, *, provider: str | None = None) -> None:
        super().__init__(
            fmt="%(asctime)s [%(levelabbr)s] %(origin)s %(message)s",
            datefmt="%m-%d %H:%M:%S",
        )
        self.provider = provider or "-"

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003 - record is stdlib name
        """Format one log record with an abbreviated level and its origin."""
        record.levelabbr = _LEVEL_ABBREV.get(record.levelno, record.levelname[:4])
        record.origin = f"{self.provider}/{worker_name(record.threadName)}"
        return super().format(record)


def worker_name(thread_name: str | None) -> str:
    """Shorten a thread name for log lines.

    ``MainThread`` becomes ``main`` and QuoteLock workers drop their
    ``quotelock-`` prefix (``quotelock-trigger_0`` becomes ``trigger_0``).
    """
    if not thread_name or thread_name == "MainThread":
        return "main"
    if thread_name.startswith(_THREAD_PREFIX):
        return thread_name[len(_THREAD_PREFIX):]
    return thread_name


log = logging.getLogger("QuoteLock")


def configure_logging(
    *,
    level: str = "INFO",
    action: str | None = None,
    provider: str | None = None,
    log_to_file: bool = False,
    log_dir: str = "log",
) -> None:
    """Configure the QuoteLock logger.

    Uses format: mm-dd HH:MM:SS [<LVL>] <provider>/<worker> <message>
    where LVL is one of: DEBG/INFO/WARN/ERRO.

    The console handler follows ``level``; the optional file handler always
    records DEBUG so background refresh attempts can be traced afterwards.

    Args:
        level: Logging level (e.g., INFO, DEBUG).
        action: CLI action name used to create the log file path.
        provider: Active quote provider name shown on every line.
        log_to_file: Whether to mirror logs to a file.
        log_dir: Base directory for log files.
    """
    resolved_level = getattr(logging, (level or "INFO").upper(), logging.INFO)
    formatter = _QuoteLockFormatter(provider=provider)

    handlers: list[logging.Handler] = []

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(resolved_level)
    stream_handler.setFormatter(formatter)
    handlers.append(stream_handler)

    if log_to_file and action:
        timestamp = datetime.now().strftime("%m%d%H%M%S")
        file_stem = f"{action}_{provider}" if provider else action
        action_dir = Path(log_dir or "log") / action
        action_dir.mkdir(parents=True, exist_ok=True)
        log_path = action_dir / f"{file_stem}_{timestamp}.log"
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    for handler in log.handlers:
        handler.close()
    log.handlers.clear()
    for handler in handlers:
        log.addHandler(handler)
    log.setLevel(min(logging.DEBUG, resolved_level))
    log.propagate = False
