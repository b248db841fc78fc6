from __future__ import annotations

"""
Logging Core Orchestrator.

Owns the command line tool's diagnostics pipeline. The root logger gets a
single QueueHandler; a QueueListener thread drains it into the console
handler, so a thread holding the error stream lock never waits on terminal
output. Handlers are tagged, which lets a re-configuration remove exactly
what an earlier call installed.
"""

import atexit
import logging
import os
import queue
import sys
from logging.handlers import QueueHandler, QueueListener
from typing import Optional

from debugstream.infra.logging.config import _LEVEL_MAP, LoggingConfig
from debugstream.infra.logging.handlers import _is_our_handler, _tag_handler

# Attributes stored on the root logger to track our installation
_CONFIGURED_FLAG_ATTR: str = "_debugstream_configured"
_QUEUE_LISTENER_ATTR: str = "_debugstream_queue_listener"


# ==============================================================================
# PUBLIC API
# ==============================================================================

def configure_logging(cfg: LoggingConfig, *, force: bool = False) -> logging.Logger:
    """
    Attach the diagnostics pipeline to the root logger, once per process.

    Args:
        cfg: Diagnostics settings.
        force: Tear down and rebuild an existing installation.

    Returns:
        logging.Logger: The root logger.
    """
    root = logging.getLogger()
    if getattr(root, _CONFIGURED_FLAG_ATTR, False) and not force:
        return root

    try:
        return _install_queue_pipeline(root, cfg)
    except Exception:
        return _install_emergency_console(root)


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a module; usually called with __name__."""
    return logging.getLogger(name)


# ==============================================================================
# INSTALLATION STEPS
# ==============================================================================

def _install_queue_pipeline(root: logging.Logger, cfg: LoggingConfig) -> logging.Logger:
    level_int = _parse_level(cfg.level)
    root.setLevel(level_int)
    _remove_our_handlers(root)
    _stop_existing_listener(root)

    if not cfg.console:
        return root

    # Bound now, so diagnostics keep going to the real console once
    # sys.stderr is replaced by the annotating stream.
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level_int)
    console.setFormatter(logging.Formatter(cfg.console_fmt))
    _tag_handler(console)

    log_queue: queue.Queue[logging.LogRecord] = queue.Queue(-1)
    queue_handler = QueueHandler(log_queue)
    _tag_handler(queue_handler)

    listener = QueueListener(log_queue, console, respect_handler_level=True)
    listener.start()
    root.addHandler(queue_handler)

    setattr(root, _QUEUE_LISTENER_ATTR, listener)
    setattr(root, _CONFIGURED_FLAG_ATTR, True)
    atexit.register(_safe_stop_listener, listener)
    return root


def _install_emergency_console(root: logging.Logger) -> logging.Logger:
    """Synchronous console handler used when the queue pipeline cannot start."""
    try:
        root.setLevel(logging.INFO)
        _remove_our_handlers(root)
        _stop_existing_listener(root)

        sh = logging.StreamHandler(sys.stderr)
        sh.setFormatter(logging.Formatter("CRITICAL FALLBACK | %(levelname)s | %(message)s"))
        _tag_handler(sh)
        root.addHandler(sh)
        root.warning("Diagnostics pipeline failed to start. Using a direct console handler.")
    except Exception:
        pass
    return root


def get_recent_lines(log_path: str, n_lines: int = 100) -> str:
    """
    Extract the terminal tail of a persisted log file.

    Args:
        log_path: File to read.
        n_lines: Maximum number of lines to retrieve from the file end.

    Returns:
        str: Consolidated log tail content.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    if not os.path.exists(log_path):
        raise FileNotFoundError(log_path)

    # errors='replace' tolerates a line cut mid-character by an abrupt exit
    with open(log_path, "r", encoding="utf-8", errors="replace") as f:
        lines = f.readlines()
    if n_lines <= 0:
        return ""
    return "".join(lines[-n_lines:])


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _parse_level(level: str) -> int:
    """Convert a string-based logging level to its numeric constant."""
    if not level:
        return logging.INFO
    return _LEVEL_MAP.get(str(level).strip().upper(), logging.INFO)


def _remove_our_handlers(target: logging.Logger) -> None:
    """Identify and detach all internally-managed handlers from a logger."""
    for h in list(target.handlers):
        if _is_our_handler(h):
            target.removeHandler(h)
            try:
                h.close()
            except Exception:
                pass


def _stop_existing_listener(root: logging.Logger) -> None:
    """Terminate and release the existing QueueListener to reset state."""
    listener = getattr(root, _QUEUE_LISTENER_ATTR, None)
    if listener:
        _safe_stop_listener(listener)
        setattr(root, _QUEUE_LISTENER_ATTR, None)


def _safe_stop_listener(listener: Optional[QueueListener]) -> None:
    """
    Safely stop a QueueListener preventing crashes on double-stop calls.

    Handles cases where the internal thread has already been joined or
    set to None (atexit after a test reset).
    """
    if not listener:
        return

    try:
        if getattr(listener, "_thread", None) is not None:
            listener.stop()
    except Exception:
        pass
