from __future__ import annotations

"""
debugstream: timestamped, call-site annotated stderr with rotating persistence.

    import debugstream

    debugstream.activate()                                 # console only
    debugstream.activate("t1", 2, 1, 30, "/tmp/logs/")     # console + files
    debugstream.delete_old_logs(30)                        # on-demand purge
"""

from debugstream.core.annotator import Annotator, CallSiteResolver
from debugstream.core.context import (
    DebugStreamContext,
    StreamState,
    activate,
    delete_old_logs,
    get_default_context,
    shutdown,
)
from debugstream.core.interceptor import DebugErrStream
from debugstream.domain.config import PersistenceConfig
from debugstream.domain.log_line import CallSite, LogLine

__version__ = "1.0.0"

__all__ = [
    "Annotator",
    "CallSite",
    "CallSiteResolver",
    "DebugErrStream",
    "DebugStreamContext",
    "LogLine",
    "PersistenceConfig",
    "StreamState",
    "activate",
    "delete_old_logs",
    "get_default_context",
    "shutdown",
]
