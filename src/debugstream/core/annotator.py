from __future__ import annotations

"""
Line Annotation Service.

Turns a raw diagnostic message into a LogLine carrying the current time
and the call site that produced it. The call site is found by walking the
invoking thread's stack past the stream machinery (debugstream.core), an
optional number of extra frames, and any frame belonging to a known
intermediary (traceback printing, logging handlers, warning display).
The CLI and entry point modules are ordinary callers.
"""

import inspect
import os
from datetime import datetime
from types import FrameType
from typing import Callable, Iterable, Optional, Tuple

from debugstream.domain.constants import DEFAULT_WRAPPER_MARKERS
from debugstream.domain.log_line import CallSite, LogLine

# Directory of the stream machinery; frames below it are never call sites.
_STREAM_PACKAGE_DIR: str = os.path.normcase(os.path.dirname(os.path.abspath(__file__)))


class CallSiteResolver:
    """
    Locate the immediate caller of the logging entry point.

    Attributes:
        skip_frames: Extra frames to skip once the stream machinery is behind.
        wrapper_markers: Trailing path components of intermediary frames to move past.
    """

    def __init__(
            self,
            skip_frames: int = 0,
            wrapper_markers: Iterable[str] = DEFAULT_WRAPPER_MARKERS,
    ) -> None:
        if skip_frames < 0:
            raise ValueError(f"skip_frames must be >= 0, received {skip_frames}.")
        self.skip_frames = skip_frames
        self.wrapper_markers: Tuple[str, ...] = tuple(
            m.replace("\\", "/") for m in wrapper_markers
        )

    def resolve(self) -> Optional[CallSite]:
        """
        Resolve the call site of the current write.

        Never raises: an exhausted stack, missing frame support, an empty
        file name or a missing line number all yield None.

        Returns:
            Optional[CallSite]: The caller location, or None if unknown.
        """
        frame = inspect.currentframe()
        target = None
        try:
            target = self._select_frame(frame)
            if target is None:
                return None
            filename = target.f_code.co_filename
            lineno = target.f_lineno
        except AttributeError:
            return None
        finally:
            del frame, target

        if not filename or lineno is None:
            return None
        return CallSite(os.path.basename(filename), lineno)

    def add_wrapper_marker(self, marker: str) -> None:
        """Register another intermediary filename fragment to skip."""
        self.wrapper_markers = self.wrapper_markers + (marker.replace("\\", "/"),)

    # -------------------------------------------------------------------------
    # Frame walking
    # -------------------------------------------------------------------------

    def _select_frame(self, frame: Optional[FrameType]) -> Optional[FrameType]:
        while frame is not None and _is_internal(frame):
            frame = frame.f_back

        for _ in range(self.skip_frames):
            if frame is None:
                return None
            frame = frame.f_back

        # An intermediary may call back into the package (a logging handler
        # writing to this stream), so both kinds are skipped here.
        while frame is not None and (self._is_wrapper(frame) or _is_internal(frame)):
            frame = frame.f_back
        return frame

    def _is_wrapper(self, frame: FrameType) -> bool:
        # Whole path components only: "mywarnings.py" is not "warnings.py"
        filename = "/" + frame.f_code.co_filename.replace("\\", "/")
        return any(filename.endswith("/" + marker) for marker in self.wrapper_markers)


class Annotator:
    """Prefix messages with a timestamp and their resolved call site."""

    def __init__(
            self,
            resolver: Optional[CallSiteResolver] = None,
            clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.resolver = resolver or CallSiteResolver()
        self._clock = clock

    def annotate(self, message: object) -> LogLine:
        """
        Build the annotated line for one message.

        Args:
            message: Any printable value; strings are used as-is.

        Returns:
            LogLine: Timestamped, located line.
        """
        text = message if isinstance(message, str) else str(message)
        return LogLine(
            timestamp=self._clock(),
            location=self.resolver.resolve(),
            message=text,
        )


def _is_internal(frame: FrameType) -> bool:
    filename = frame.f_code.co_filename
    if not filename or filename.startswith("<"):
        return False
    path = os.path.normcase(os.path.abspath(filename))
    return path.startswith(_STREAM_PACKAGE_DIR + os.sep)
