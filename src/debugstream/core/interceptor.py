from __future__ import annotations

"""
Error Stream Interceptor.

DebugErrStream stands in for sys.stderr. Text written to it is split into
lines; each complete line is annotated with a timestamp and its call site,
written to the real console and, when persistence is live, appended to
the rotating log file set.

A thread already inside the annotation path (for instance the logging
module reporting a handler failure to sys.stderr) gets its output passed
to the real console untouched. A failing sink can therefore never recurse
into itself.
"""

import io
import threading
from typing import TYPE_CHECKING, Optional, TextIO

from debugstream.core.annotator import Annotator

if TYPE_CHECKING:
    from debugstream.core.context import StreamState


class DebugErrStream(io.TextIOBase):
    """
    Annotating text stream wrapping the real error console.

    Attributes:
        console: The original, non-intercepted error stream.
        annotator: Produces the annotated form of every line.
    """

    def __init__(
            self,
            console: TextIO,
            state: StreamState,
            annotator: Optional[Annotator] = None,
    ) -> None:
        super().__init__()
        self.console = console
        self.annotator = annotator or Annotator()
        self._state = state
        self._lock = threading.RLock()
        self._local = threading.local()

    # -------------------------------------------------------------------------
    # Text stream protocol
    # -------------------------------------------------------------------------

    def write(self, s: str) -> int:
        if not isinstance(s, str):
            raise TypeError(f"write() argument must be str, not {type(s).__name__}")
        if self._in_emit():
            self._write_raw(s)
            return len(s)

        *lines, rest = (self._pending() + s).split("\n")
        self._local.pending = rest
        for line in lines:
            self._emit(line)
        return len(s)

    def flush(self) -> None:
        """Emit any pending partial line as a full line, then flush the console."""
        if not self._in_emit():
            pending = self._pending()
            if pending:
                self._local.pending = ""
                self._emit(pending)
        with self._lock:
            self.console.flush()

    def println(self, value: object = "") -> None:
        """
        Annotate and emit one message, whatever its embedded line breaks.

        Args:
            value: Any object; non-strings go through str().
        """
        if self._in_emit():
            self._write_raw(f"{value}\n")
            return
        self._emit(value)

    def writable(self) -> bool:
        return True

    def isatty(self) -> bool:
        return self.console.isatty()

    def fileno(self) -> int:
        return self.console.fileno()

    @property
    def encoding(self) -> str:  # type: ignore[override]
        return getattr(self.console, "encoding", None) or "utf-8"

    @property
    def errors(self) -> Optional[str]:  # type: ignore[override]
        return getattr(self.console, "errors", None)

    def close(self) -> None:
        """Drain the calling thread's pending text; the console stays open."""
        if not self.closed:
            self.flush()
        super().close()

    # -------------------------------------------------------------------------
    # Annotation path
    # -------------------------------------------------------------------------

    def _emit(self, message: object) -> None:
        line = self.annotator.annotate(message)
        rendered = line.render()

        with self._lock:
            self._local.emitting = True
            try:
                self.console.write(rendered + "\n")
                self.console.flush()
                persister = self._state.persister if self._state.persistence_enabled else None
                if persister is not None:
                    persister.append(rendered)
            finally:
                self._local.emitting = False

    def _write_raw(self, s: str) -> None:
        self.console.write(s)

    def _pending(self) -> str:
        return getattr(self._local, "pending", "")

    def _in_emit(self) -> bool:
        return getattr(self._local, "emitting", False)

    @property
    def lock(self) -> threading.RLock:
        """Lock serializing console output and file appends."""
        return self._lock
