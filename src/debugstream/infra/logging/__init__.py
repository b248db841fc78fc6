from __future__ import annotations

from .config import LoggingConfig
from .core import (
    _CONFIGURED_FLAG_ATTR,
    _QUEUE_LISTENER_ATTR,
    configure_logging,
    get_logger,
    get_recent_lines,
)
from .handlers import (
    _HANDLER_TAG_ATTR,
    GenerationFileHandler,
    _create_generation_file_handler,
    _is_our_handler,
)

__all__ = [
    "LoggingConfig",
    "GenerationFileHandler",
    "configure_logging",
    "get_logger",
    "get_recent_lines",
]
