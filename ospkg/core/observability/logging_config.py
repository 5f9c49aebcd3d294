"""
Logging configuration — one call at CLI start, before any probing.

Modules only do ``logger = logging.getLogger(__name__)``; handlers and
formats are decided here.  Packager output is not captured during
installs, so the console format stays short enough to read between
apt/dnf progress lines:

    WARNING and up   ospkg: message
    INFO             12:01:07 [ospkg.core.services.installer] message
    DEBUG            12:01:07 DEBUG ospkg.drivers.rpm:52 message

A log file (OSPKG_LOG_FILE or ``log_file:`` in ospkg.yml) gets the full
format with dates, at its own level if one is given.
"""

from __future__ import annotations

import logging
import sys

_FILE_FORMAT = ("%(asctime)s %(levelname)-7s %(name)s:%(lineno)d %(message)s", "%Y-%m-%d %H:%M:%S")


def _console_format(numeric_level: int) -> tuple[str, str | None]:
    if numeric_level <= logging.DEBUG:
        return "%(asctime)s %(levelname)-7s %(name)s:%(lineno)d %(message)s", "%H:%M:%S"
    if numeric_level <= logging.INFO:
        return "%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"
    return "ospkg: %(message)s", None


def parse_level(level: str | None) -> int:
    """Level name → numeric level; unknown or empty names mean WARNING."""
    if not level:
        return logging.WARNING
    numeric = logging.getLevelName(level.upper())
    return numeric if isinstance(numeric, int) else logging.WARNING


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Replace the root logger's handlers with ospkg's console (and file) output.

    Args:
        level: Console level name.
        log_file: Also append records to this file.
        log_file_level: Level for the file; defaults to ``level``.
    """
    console_level = parse_level(level)
    fmt, datefmt = _console_format(console_level)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    root_level = console_level

    if log_file:
        file_level = parse_level(log_file_level) if log_file_level else console_level
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setLevel(file_level)
        handler.setFormatter(logging.Formatter(*_FILE_FORMAT))
        root.addHandler(handler)
        root_level = min(root_level, file_level)

    root.setLevel(root_level)
    # a closed stderr (piped into head) must not turn into tracebacks
    logging.raiseExceptions = False
