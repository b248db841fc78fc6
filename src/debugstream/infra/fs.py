from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Resolves the platform log directory, creates target directories and owns
the naming convention of the rotating log file set. The retention purger
relies on the same markers to recognise files it may delete.
"""

import os
from typing import Optional

import platformdirs

from debugstream.domain.constants import (
    APP_NAME,
    APP_PREFIX,
    CURRENT_GENERATION,
    DEFAULT_INSTANCE,
    ERROR_MARKER,
    LOG_EXTENSION,
)

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def get_default_log_dir() -> str:
    """
    Resolve the OS-specific directory used when no log path is configured.

    Standards (via platformdirs):
    - Linux: ~/.local/state/debugstream/log
    - macOS: ~/Library/Logs/debugstream
    - Windows: %LOCALAPPDATA%/debugstream/Logs

    Returns:
        str: Absolute path to the default log directory (not created here).
    """
    return os.path.abspath(platformdirs.user_log_dir(appname=APP_NAME, appauthor=False))


def normalize_path(path: Optional[str], fallback: str) -> str:
    """
    Normalize a directory path string into an absolute filesystem path.

    Handles environment variable expansion ($VAR/%VAR%) and user home
    shortcuts (~/). Reverts to fallback if the input is empty.

    Args:
        path: Raw input path string.
        fallback: Default path to use if the input is empty.

    Returns:
        str: Normalized absolute path.
    """
    p = (path or "").strip()
    if not p:
        p = fallback
    p = os.path.expandvars(os.path.expanduser(p))
    return os.path.abspath(p)


def ensure_directory(path: str) -> None:
    """
    Create a directory hierarchy if it does not exist.

    Args:
        path: Target directory.

    Raises:
        OSError: If the hierarchy cannot be created (permissions, a file
            already occupying the path, read-only media).
    """
    if not os.path.isdir(path):
        os.makedirs(path, exist_ok=True)

# -----------------------------------------------------------------------------
# LOG FILE NAMING
# -----------------------------------------------------------------------------

def log_file_name(
        file_identifier: str,
        generation: int = CURRENT_GENERATION,
        instance: int = DEFAULT_INSTANCE,
) -> str:
    """
    Build the file name of one member of a rotating log file set.

    Args:
        file_identifier: Identifier separating log sets of different activations.
        generation: Rotation index, 0 being the file currently written.
        instance: Instance discriminator.

    Returns:
        str: "<prefix>-error.<id>.<generation>.<instance>.txt".
    """
    return f"{APP_PREFIX}-{ERROR_MARKER}.{file_identifier}.{generation}.{instance}{LOG_EXTENSION}"


def log_file_path(
        directory: str,
        file_identifier: str,
        generation: int = CURRENT_GENERATION,
        instance: int = DEFAULT_INSTANCE,
) -> str:
    """Absolute path of one member of a rotating log file set."""
    return os.path.abspath(
        os.path.join(directory, log_file_name(file_identifier, generation, instance))
    )


def is_managed_log_name(name: str) -> bool:
    """
    Check whether a file name belongs to this system's error log family.

    All three markers (system prefix, error-stream marker, extension) must
    be present; unrelated files sharing the directory are never matched.

    Args:
        name: Base name of a directory entry.

    Returns:
        bool: True if the entry may be handled by the retention purger.
    """
    return APP_PREFIX in name and ERROR_MARKER in name and LOG_EXTENSION in name
