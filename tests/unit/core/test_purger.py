from __future__ import annotations

"""
Unit tests for the Retention Purge Service.

Verifies:
1. Only old files carrying all three name markers are deleted.
2. Directories, unrelated files and recent files are left alone.
3. Deletion failures and missing directories are tolerated silently.
4. The scheduled task runs immediately, repeats and can be stopped.
"""

import os
import threading
import time
from pathlib import Path
from typing import List, Tuple
from unittest.mock import patch

from debugstream.core.purger import RetentionPurger, delete_old_logs

DAY = 24 * 60 * 60


def _touch(path: Path, age_days: float, now: float) -> Path:
    path.write_text("x\n", encoding="utf-8")
    stamp = now - age_days * DAY
    os.utime(path, (stamp, stamp))
    return path


def test_deletes_only_files_with_all_markers(tmp_path: Path) -> None:
    """Scenario: uilog-error.old vs other-error.old, both 40 days old."""
    now = time.time()
    ours = _touch(tmp_path / "uilog-error.old.0.0.txt", 40, now)
    other = _touch(tmp_path / "other-error.old.0.0.txt", 40, now)

    deleted = delete_old_logs(30, str(tmp_path))

    assert deleted == 1
    assert not ours.exists()
    assert other.exists()


def test_each_marker_is_required(tmp_path: Path) -> None:
    now = time.time()
    survivors = [
        _touch(tmp_path / "uilog-info.old.0.0.txt", 90, now),
        _touch(tmp_path / "uilog-error.old.0.0.log", 90, now),
        _touch(tmp_path / "notes-error.txt", 90, now),
    ]
    assert delete_old_logs(30, str(tmp_path)) == 0
    assert all(p.exists() for p in survivors)


def test_recent_files_are_kept(tmp_path: Path) -> None:
    now = time.time()
    fresh = _touch(tmp_path / "uilog-error.new.0.0.txt", 1, now)
    old = _touch(tmp_path / "uilog-error.new.1.0.txt", 31, now)

    assert delete_old_logs(30, str(tmp_path), now=now) == 1
    assert fresh.exists()
    assert not old.exists()


def test_cutoff_uses_reference_time(tmp_path: Path) -> None:
    now = time.time()
    target = _touch(tmp_path / "uilog-error.ref.0.0.txt", 5, now)

    assert delete_old_logs(10, str(tmp_path), now=now) == 0
    assert delete_old_logs(10, str(tmp_path), now=now + 6 * DAY) == 1
    assert not target.exists()


def test_zero_days_purges_everything_older_than_now(tmp_path: Path) -> None:
    now = time.time()
    _touch(tmp_path / "uilog-error.z.0.0.txt", 0.5, now)
    assert delete_old_logs(0, str(tmp_path), now=now) == 1


def test_directories_and_nested_files_are_ignored(tmp_path: Path) -> None:
    now = time.time()
    nested_dir = tmp_path / "uilog-error.dir.txt"
    nested_dir.mkdir()
    nested = _touch(nested_dir / "uilog-error.deep.0.0.txt", 90, now)
    stamp = now - 90 * DAY
    os.utime(nested_dir, (stamp, stamp))

    assert delete_old_logs(30, str(tmp_path), now=now) == 0
    assert nested_dir.is_dir()
    assert nested.exists()


def test_missing_directory_is_tolerated(tmp_path: Path) -> None:
    assert delete_old_logs(30, str(tmp_path / "absent")) == 0


def test_delete_failure_is_skipped_silently(tmp_path: Path) -> None:
    now = time.time()
    locked = _touch(tmp_path / "uilog-error.a.0.0.txt", 40, now)
    free = _touch(tmp_path / "uilog-error.b.0.0.txt", 40, now)
    real_remove = os.remove

    def _remove(path: str) -> None:
        if os.path.basename(path) == locked.name:
            raise PermissionError("file in use")
        real_remove(path)

    with patch("debugstream.core.purger.os.remove", side_effect=_remove):
        deleted = delete_old_logs(30, str(tmp_path), now=now)

    assert deleted == 1
    assert locked.exists()
    assert not free.exists()


def test_scheduled_purger_runs_immediately_and_repeats(tmp_path: Path) -> None:
    calls: List[Tuple[float, str]] = []
    second_run = threading.Event()

    def _purge(days: float, directory: str) -> int:
        calls.append((days, directory))
        if len(calls) >= 2:
            second_run.set()
        return 0

    purger = RetentionPurger(str(tmp_path), 7, interval_seconds=0.05, purge=_purge)
    purger.start()
    try:
        assert second_run.wait(5.0)
        assert purger.running
    finally:
        purger.stop()

    assert calls[0] == (7, str(tmp_path))
    assert not purger.running


def test_scheduled_purger_deletes_old_files(tmp_path: Path) -> None:
    old = _touch(tmp_path / "uilog-error.sched.0.0.txt", 40, time.time())

    purger = RetentionPurger(str(tmp_path), 30, interval_seconds=3600)
    purger.start()
    try:
        deadline = time.time() + 5.0
        while old.exists() and time.time() < deadline:
            time.sleep(0.01)
    finally:
        purger.stop()

    assert not old.exists()
    assert purger.runs == 1


def test_failing_run_does_not_end_schedule(tmp_path: Path) -> None:
    attempts: List[int] = []
    recovered = threading.Event()

    def _purge(days: float, directory: str) -> int:
        attempts.append(1)
        if len(attempts) == 1:
            raise RuntimeError("unexpected")
        recovered.set()
        return 0

    purger = RetentionPurger(str(tmp_path), 1, interval_seconds=0.01, purge=_purge)
    purger.start()
    try:
        assert recovered.wait(5.0)
    finally:
        purger.stop()


def test_stop_before_start_is_harmless(tmp_path: Path) -> None:
    purger = RetentionPurger(str(tmp_path), 1)
    purger.stop()
    assert not purger.running
