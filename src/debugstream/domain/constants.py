from __future__ import annotations

"""
Domain Constants.

Centralizes the file naming markers, timestamp formats, rotation defaults
and scheduling intervals shared by the annotation, persistence and
retention layers.
"""

from typing import Tuple

APP_NAME = "debugstream"

# -----------------------------------------------------------------------------
# LOG FILE NAMING
# -----------------------------------------------------------------------------
# A persisted file is only ever purged when its name carries all three markers.
APP_PREFIX = "uilog"
ERROR_MARKER = "error"
LOG_EXTENSION = ".txt"

CURRENT_GENERATION = 0
DEFAULT_INSTANCE = 0

# -----------------------------------------------------------------------------
# ANNOTATION FORMATS
# -----------------------------------------------------------------------------
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
FILE_ID_FORMAT = "%Y-%m-%d %H-%M-%S"
UNKNOWN_LOCATION = "(unknown) : "

# Frames from these files are intermediaries; resolution moves past them.
DEFAULT_WRAPPER_MARKERS: Tuple[str, ...] = (
    "traceback.py",
    "logging/__init__.py",
    "warnings.py",
    "_py_warnings.py",
)

# -----------------------------------------------------------------------------
# PERSISTENCE DEFAULTS
# -----------------------------------------------------------------------------
DEFAULT_MAX_FILE_COUNT = 5
DEFAULT_MAX_FILE_SIZE_MB = 1
DEFAULT_RETENTION_DAYS = 30
BYTES_PER_MB = 1024 * 1024

SYSERR_LOGGER_NAME = "debugstream.syserr"

# -----------------------------------------------------------------------------
# RETENTION SCHEDULING
# -----------------------------------------------------------------------------
PURGE_INTERVAL_SECONDS = 60 * 60
SECONDS_PER_DAY = 24 * 60 * 60
