from __future__ import annotations

"""
Retention Purge Service.

Deletes persisted error logs older than a retention age. Runs on a
background daemon thread at a fixed interval, and is also callable on
demand for external schedulers.

Failure policy: a file that cannot be deleted (locked, permission denied,
vanished) is skipped without raising and without logging. The purger sits
next to an intercepted error stream; reporting its own failures through
that stream would feed the files it is trying to bound.
"""

import logging
import os
import threading
import time
from typing import Callable, Optional

from debugstream.domain.constants import PURGE_INTERVAL_SECONDS, SECONDS_PER_DAY
from debugstream.infra.fs import is_managed_log_name

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# ON-DEMAND PURGE
# -----------------------------------------------------------------------------

def delete_old_logs(
        days_back: float,
        directory: str,
        now: Optional[float] = None,
) -> int:
    """
    Delete managed log files whose last modification predates the cutoff.

    Only regular files directly inside the directory are considered, and
    only those carrying the system prefix, the error marker and the log
    extension in their name.

    Args:
        days_back: Retention age in days.
        directory: Directory holding the log file set.
        now: Reference epoch time; defaults to the current time.

    Returns:
        int: Number of files deleted.
    """
    reference = time.time() if now is None else now
    cutoff = reference - days_back * SECONDS_PER_DAY

    try:
        entries = list(os.scandir(directory))
    except OSError:
        return 0

    deleted = 0
    for entry in entries:
        if not is_managed_log_name(entry.name):
            continue
        try:
            if not entry.is_file() or entry.stat().st_mtime >= cutoff:
                continue
        except OSError:
            continue
        if _try_delete(entry.path):
            deleted += 1
    return deleted


def _try_delete(path: str) -> bool:
    """Remove a file, tolerating any OS-level refusal silently."""
    try:
        os.remove(path)
        return True
    except OSError:
        return False


# -----------------------------------------------------------------------------
# SCHEDULED PURGE
# -----------------------------------------------------------------------------

class RetentionPurger:
    """
    Background task running delete_old_logs at a fixed interval.

    The first run happens as soon as the task starts.
    """

    def __init__(
            self,
            directory: str,
            retention_days: float,
            interval_seconds: float = PURGE_INTERVAL_SECONDS,
            purge: Callable[[float, str], int] = delete_old_logs,
    ) -> None:
        self.directory = directory
        self.retention_days = retention_days
        self.interval_seconds = interval_seconds
        self._purge = purge
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.runs = 0

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run_loop,
            name="debugstream-purger",
            daemon=True,
        )
        self._thread.start()

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        """Signal the loop to end and wait for the thread to exit."""
        self._stop_event.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def run_once(self) -> int:
        deleted = self._purge(self.retention_days, self.directory)
        self.runs += 1
        return deleted

    def _run_loop(self) -> None:
        while True:
            try:
                deleted = self.run_once()
                logger.debug(f"Retention purge removed {deleted} file(s) from {self.directory}")
            except Exception:
                logger.debug("Retention purge run failed", exc_info=True)
            if self._stop_event.wait(self.interval_seconds):
                return
