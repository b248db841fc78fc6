from __future__ import annotations

"""
Logging Configuration Models.

Settings of the command line tool's own diagnostics. These records are
kept apart from the intercepted error stream, whose lines carry no level.
"""

import logging
from dataclasses import dataclass
from typing import Dict

# Accepted level names for --debug and programmatic callers
_LEVEL_MAP: Dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


@dataclass(frozen=True)
class LoggingConfig:
    """
    Diagnostics settings applied by configure_logging().

    Attributes:
        level: Lowest severity forwarded to the console.
        console: Whether diagnostics are written to stderr at all.
        console_fmt: Format of each diagnostics line.
    """
    level: str = "INFO"
    console: bool = True
    console_fmt: str = "%(levelname)s | %(message)s"
