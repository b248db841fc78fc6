from __future__ import annotations

"""
Annotated Line Domain Models.

Value objects produced on every intercepted write. Only the rendered text
of a LogLine ever leaves the process (console and log files); the
structured form is discarded once rendered.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from debugstream.domain.constants import TIMESTAMP_FORMAT, UNKNOWN_LOCATION


@dataclass(frozen=True)
class CallSite:
    """
    Source location that produced a diagnostic message.

    Attributes:
        filename: Base name of the source file.
        lineno: Line number inside the source file.
    """
    filename: str
    lineno: int

    def render(self) -> str:
        return f"({self.filename}:{self.lineno:d}) : "


@dataclass(frozen=True)
class LogLine:
    """
    Immutable annotated diagnostic line.

    Attributes:
        timestamp: Wall-clock time at which the line was written.
        location: Resolved call site, or None when it could not be determined.
        message: Raw message text as submitted by the caller.
    """
    timestamp: datetime
    location: Optional[CallSite]
    message: str

    @property
    def location_text(self) -> str:
        if self.location is None:
            return UNKNOWN_LOCATION
        return self.location.render()

    def render(self) -> str:
        """
        Build the annotated text without a line terminator.

        Returns:
            str: "[<timestamp>] <location><message>".
        """
        stamp = self.timestamp.strftime(TIMESTAMP_FORMAT)
        return f"[{stamp}] {self.location_text}{self.message}"
