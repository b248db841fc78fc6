from __future__ import annotations

"""
Persistence Configuration Domain.

Normalizes the five activation parameters (file identifier, file count,
file size, retention age and directory) into an immutable configuration
object. Nothing else is configurable: there are no configuration files and
no environment variables.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from debugstream.domain.constants import (
    BYTES_PER_MB,
    DEFAULT_MAX_FILE_COUNT,
    DEFAULT_MAX_FILE_SIZE_MB,
    DEFAULT_RETENTION_DAYS,
    FILE_ID_FORMAT,
)
from debugstream.infra.fs import get_default_log_dir, normalize_path

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# CONFIGURATION MODEL
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class PersistenceConfig:
    """
    Immutable, validated persistence settings of one activation.

    Attributes:
        file_identifier: Disambiguates log sets across activations.
        max_file_count: Maximum number of coexisting files in the set (>= 1).
        max_file_size_mb: Size bound per file in MB; 0 disables rotation.
        retention_days: Age in days after which files are purged.
        directory: Absolute directory holding the log file set.
    """
    file_identifier: str
    max_file_count: int
    max_file_size_mb: int
    retention_days: int
    directory: str

    def __post_init__(self) -> None:
        if not self.file_identifier:
            raise ValueError("file_identifier must not be empty.")
        if self.max_file_count < 1:
            raise ValueError(f"max_file_count must be >= 1, received {self.max_file_count}.")
        if self.max_file_size_mb < 0:
            raise ValueError(f"max_file_size_mb must be >= 0, received {self.max_file_size_mb}.")
        if self.retention_days < 0:
            raise ValueError(f"retention_days must be >= 0, received {self.retention_days}.")

    @property
    def max_bytes(self) -> int:
        return self.max_file_size_mb * BYTES_PER_MB


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def generate_file_identifier(clock: Callable[[], datetime] = datetime.now) -> str:
    """
    Derive a file identifier from the current time, to the millisecond.

    Args:
        clock: Source of the current time.

    Returns:
        str: Identifier formatted as "yyyy-MM-dd HH-mm-ss.SSS".
    """
    now = clock()
    return f"{now.strftime(FILE_ID_FORMAT)}.{now.microsecond // 1000:03d}"


def resolve_persistence_config(
        file_identifier: Optional[str] = None,
        max_file_count: Optional[int] = None,
        max_file_size_mb: Optional[int] = None,
        retention_days: Optional[int] = None,
        path: Optional[str] = None,
) -> PersistenceConfig:
    """
    Fill defaults and normalize raw activation parameters.

    An empty identifier is replaced by a time-derived one and an empty path
    by the platform log directory.

    Args:
        file_identifier: Raw identifier, may be empty.
        max_file_count: Maximum number of files, default when None.
        max_file_size_mb: Per-file size bound in MB, default when None.
        retention_days: Retention age in days, default when None.
        path: Raw directory path, may be empty.

    Returns:
        PersistenceConfig: The validated configuration.

    Raises:
        ValueError: If a numeric parameter is out of range or not an integer.
    """
    identifier = (file_identifier or "").strip() or generate_file_identifier()
    directory = normalize_path(path, get_default_log_dir())

    config = PersistenceConfig(
        file_identifier=identifier,
        max_file_count=_as_int(max_file_count, DEFAULT_MAX_FILE_COUNT, "max_file_count"),
        max_file_size_mb=_as_int(max_file_size_mb, DEFAULT_MAX_FILE_SIZE_MB, "max_file_size_mb"),
        retention_days=_as_int(retention_days, DEFAULT_RETENTION_DAYS, "retention_days"),
        directory=directory,
    )
    logger.debug(f"Persistence configuration resolved: {config}")
    return config


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _as_int(value: Any, default: int, field_name: str) -> int:
    """Coerce an integer-like parameter, rejecting booleans and fractions."""
    if value is None:
        return default
    if isinstance(value, bool):
        raise ValueError(f"{field_name} must be an integer, received bool.")
    if isinstance(value, int):
        return value
    try:
        as_float = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{field_name} must be an integer, received {value!r}.") from None
    if not as_float.is_integer():
        raise ValueError(f"{field_name} must be a whole number, received {value!r}.")
    return int(as_float)
