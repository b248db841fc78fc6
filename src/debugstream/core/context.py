from __future__ import annotations

"""
Error Stream Activation Context.

A DebugStreamContext owns one StreamState and the DebugErrStream built on
it. The process uses a single default context behind the module-level
activate()/delete_old_logs() functions; tests and embedding code may build
independent contexts.

Setup failure policy: when the log directory cannot be created or the log
file cannot be opened, the failure is written to the original console and
the activation degrades to console-only annotation. No purger is started
and any persistence that was already live stays untouched.
"""

import sys
import threading
from dataclasses import dataclass
from typing import Optional, TextIO

from debugstream.core.annotator import Annotator
from debugstream.core.interceptor import DebugErrStream
from debugstream.core.persister import RotatingPersister
from debugstream.core.purger import RetentionPurger, delete_old_logs as _delete_old_logs
from debugstream.domain.config import PersistenceConfig, resolve_persistence_config
from debugstream.domain.constants import PURGE_INTERVAL_SECONDS, SYSERR_LOGGER_NAME
from debugstream.infra.fs import ensure_directory, get_default_log_dir
from debugstream.infra.logging import get_logger

logger = get_logger(__name__)


@dataclass
class StreamState:
    """
    Mutable state shared by the write path and the activation calls.

    Attributes:
        persistence_enabled: Whether annotated lines are appended to files.
        persister: The single live rotation handle, if any.
        purger: The retention task of the live configuration, if any.
        config: The live persistence configuration, if any.
        directory: Directory scanned by on-demand purges.
    """
    persistence_enabled: bool = False
    persister: Optional[RotatingPersister] = None
    purger: Optional[RetentionPurger] = None
    config: Optional[PersistenceConfig] = None
    directory: str = ""


class DebugStreamContext:
    """Activation lifecycle of one intercepted error stream."""

    def __init__(
            self,
            console: Optional[TextIO] = None,
            annotator: Optional[Annotator] = None,
            logger_name: str = SYSERR_LOGGER_NAME,
            purge_interval: float = PURGE_INTERVAL_SECONDS,
    ) -> None:
        """
        Args:
            console: Real error console; defaults to sys.stderr at first install.
            annotator: Line annotator; a default one is built when omitted.
            logger_name: Dedicated logger used by the persister.
            purge_interval: Seconds between scheduled retention purges.
        """
        self.state = StreamState(directory=get_default_log_dir())
        self.logger_name = logger_name
        self.purge_interval = purge_interval
        self._console = console
        self._annotator = annotator
        self._stream: Optional[DebugErrStream] = None
        self._previous_stderr: Optional[TextIO] = None
        self._lock = threading.RLock()

    # -------------------------------------------------------------------------
    # PUBLIC API
    # -------------------------------------------------------------------------

    @property
    def stream(self) -> DebugErrStream:
        """The annotating stream, created on first access."""
        with self._lock:
            if self._stream is None:
                self._stream = DebugErrStream(
                    self._resolve_console(), self.state, self._annotator
                )
            return self._stream

    @property
    def console(self) -> TextIO:
        return self.stream.console

    @property
    def installed(self) -> bool:
        return self._stream is not None and sys.stderr is self._stream

    def install(self) -> DebugErrStream:
        """
        Route sys.stderr through the annotating stream.

        Reinstalling is harmless: the stream is never wrapped twice and the
        live configuration is kept.

        Returns:
            DebugErrStream: The installed stream.
        """
        with self._lock:
            stream = self.stream
            if sys.stderr is not stream:
                self._previous_stderr = sys.stderr
                sys.stderr = stream
            return stream

    def activate(
            self,
            file_identifier: Optional[str] = None,
            max_file_count: Optional[int] = None,
            max_file_size_mb: Optional[int] = None,
            retention_days: Optional[int] = None,
            path: Optional[str] = None,
    ) -> bool:
        """
        Install interception and, when any parameter is given, persistence.

        Called without arguments only (re)installs console annotation. With
        any parameter, the missing ones take their defaults, an empty
        identifier is generated from the current time and an empty path
        falls back to the platform log directory.

        Args:
            file_identifier: Identifier embedded in the log file names.
            max_file_count: Maximum number of coexisting log files.
            max_file_size_mb: Size bound of each file in MB.
            retention_days: Age in days after which log files are purged.
            path: Directory for the log files.

        Returns:
            bool: True if persistence is live after the call.

        Raises:
            ValueError: If a parameter is out of range.
        """
        requested = (file_identifier, max_file_count, max_file_size_mb, retention_days, path)
        if all(value is None for value in requested):
            self.install()
            return self.state.persistence_enabled

        config = resolve_persistence_config(*requested)
        with self._lock:
            enabled = self._enable_persistence(config)
            self.install()
        return enabled

    def delete_old_logs(self, days_back: float) -> int:
        """
        Purge the configured directory on demand.

        Args:
            days_back: Retention age in days.

        Returns:
            int: Number of files deleted.
        """
        return _delete_old_logs(days_back, self.state.directory)

    def shutdown(self) -> None:
        """
        Undo the activation: stop the purger, close the log files and give
        sys.stderr back. Used for clean exits and between tests.
        """
        with self._lock:
            self._stop_purger()
            stream = self._stream
            if stream is not None:
                if sys.stderr is stream:
                    sys.stderr = self._previous_stderr or stream.console
                if not stream.closed:
                    stream.close()
                with stream.lock:
                    self._close_persister()
            else:
                self._close_persister()
            self._stream = None
            self._previous_stderr = None

    # -------------------------------------------------------------------------
    # PRIVATE HELPERS
    # -------------------------------------------------------------------------

    def _resolve_console(self) -> TextIO:
        if self._console is not None:
            return self._console
        current = sys.stderr
        if isinstance(current, DebugErrStream):
            return current.console
        return current

    def _enable_persistence(self, config: PersistenceConfig) -> bool:
        stream = self.stream
        try:
            ensure_directory(config.directory)
            with stream.lock:
                persister = RotatingPersister(config, logger_name=self.logger_name)
                previous = self.state.persister
                self.state.persister = persister
                self.state.config = config
                self.state.directory = config.directory
                self.state.persistence_enabled = True
        except OSError as e:
            self._report_setup_failure(config.directory, e)
            return False

        if previous is not None and previous is not persister:
            previous.close()

        self._stop_purger()
        logger.info("Starting error log file deletion scheduler.")
        purger = RetentionPurger(
            config.directory, config.retention_days, interval_seconds=self.purge_interval
        )
        self.state.purger = purger
        purger.start()
        return True

    def _report_setup_failure(self, directory: str, error: OSError) -> None:
        console = self.stream.console
        console.write(f"ERROR: debugstream persistence setup failed at '{directory}': {error}\n")
        console.flush()

    def _stop_purger(self) -> None:
        purger, self.state.purger = self.state.purger, None
        if purger is not None:
            purger.stop()

    def _close_persister(self) -> None:
        persister, self.state.persister = self.state.persister, None
        self.state.persistence_enabled = False
        if persister is not None:
            persister.close()


# -----------------------------------------------------------------------------
# PROCESS-WIDE CONTEXT
# -----------------------------------------------------------------------------

_DEFAULT_CONTEXT: Optional[DebugStreamContext] = None
_DEFAULT_LOCK = threading.Lock()


def get_default_context() -> DebugStreamContext:
    """Return the process-wide context, creating it on first use."""
    global _DEFAULT_CONTEXT
    with _DEFAULT_LOCK:
        if _DEFAULT_CONTEXT is None:
            _DEFAULT_CONTEXT = DebugStreamContext()
        return _DEFAULT_CONTEXT


def activate(
        file_identifier: Optional[str] = None,
        max_file_count: Optional[int] = None,
        max_file_size_mb: Optional[int] = None,
        retention_days: Optional[int] = None,
        path: Optional[str] = None,
) -> bool:
    """Activate the process-wide error stream. See DebugStreamContext.activate."""
    return get_default_context().activate(
        file_identifier, max_file_count, max_file_size_mb, retention_days, path
    )


def delete_old_logs(days_back: float) -> int:
    """Purge the process-wide log directory of files older than days_back."""
    return get_default_context().delete_old_logs(days_back)


def shutdown() -> None:
    """Restore sys.stderr and release the process-wide log files."""
    get_default_context().shutdown()
