from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. Shared fixtures for an isolated activation context writing to an
   in-memory console, so tests never touch the real stderr or the
   process-wide default context.
3. A logging-tree snapshot for tests that reconfigure logging at runtime.
"""

import io
import logging
import os
import sys
import uuid
from datetime import datetime
from typing import Generator

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from debugstream.core.context import DebugStreamContext  # noqa: E402

# Pattern of an annotated line, as produced on the console and in files
ANNOTATED_LINE = (
    r"\[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\] "
    r"(\(unknown\) : |\([^():]+:\d+\) : )"
)

FIXED_TIME = datetime(2024, 3, 9, 14, 5, 7, 123456)


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def console() -> io.StringIO:
    """In-memory stand-in for the real error console."""
    return io.StringIO()


@pytest.fixture
def context(console: io.StringIO) -> Generator[DebugStreamContext, None, None]:
    """
    Provide an isolated activation context.

    Uses a unique persistence logger name so contexts never share handlers,
    and always restores sys.stderr on teardown.

    Yields:
        DebugStreamContext: Context bound to the in-memory console.
    """
    ctx = DebugStreamContext(
        console=console,
        logger_name=f"debugstream.test.{uuid.uuid4().hex}",
    )
    saved = sys.stderr
    try:
        yield ctx
    finally:
        ctx.shutdown()
        sys.stderr = saved


@pytest.fixture
def preserved_logging() -> Generator[None, None, None]:
    """
    Snapshot the logging tree and restore it after tests that reconfigure it.

    Restores the root level and handlers plus the 'disabled' flag of every
    logger known before the test (dictConfig disables existing loggers).
    """
    root = logging.getLogger()
    saved_level = root.level
    saved_handlers = list(root.handlers)
    saved_disabled = {
        name: lg.disabled
        for name, lg in logging.Logger.manager.loggerDict.items()
        if isinstance(lg, logging.Logger)
    }
    try:
        yield
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
        for h in saved_handlers:
            root.addHandler(h)
        root.setLevel(saved_level)
        for name, lg in logging.Logger.manager.loggerDict.items():
            if isinstance(lg, logging.Logger):
                lg.disabled = saved_disabled.get(name, False)
