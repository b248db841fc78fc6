from __future__ import annotations

"""
Rotating Persistence Service.

Appends annotated lines to a size- and count-bounded set of log files.
Lines are handed straight to the rotation handler, which is parked on a
dedicated non-propagating logger so the root logger and any application
handlers never see them. Every append is flushed before returning.
"""

import logging
from typing import Optional

from debugstream.domain.config import PersistenceConfig
from debugstream.domain.constants import SYSERR_LOGGER_NAME
from debugstream.infra.fs import log_file_path
from debugstream.infra.logging import (
    GenerationFileHandler,
    _create_generation_file_handler,
    _is_our_handler,
)


class RotatingPersister:
    """
    Owns the rotation handle of one activation.

    Attributes:
        config: The persistence configuration the handle was opened with.
        logger_name: Name of the dedicated, non-propagating logger.
    """

    def __init__(
            self,
            config: PersistenceConfig,
            logger_name: str = SYSERR_LOGGER_NAME,
            max_bytes: Optional[int] = None,
    ) -> None:
        """
        Open generation 0 of the log file set in append mode.

        Args:
            config: Validated persistence configuration.
            logger_name: Logger carrying the persisted records.
            max_bytes: Explicit rollover threshold; defaults to the config's MB bound.

        Raises:
            OSError: If the file cannot be opened (permissions, I/O fault).
        """
        self.config = config
        self.logger_name = logger_name
        self._handler: Optional[GenerationFileHandler] = _create_generation_file_handler(
            config.directory,
            config.file_identifier,
            config.max_file_count,
            config.max_bytes if max_bytes is None else max_bytes,
        )

        self._logger = logging.getLogger(logger_name)
        self._logger.propagate = False
        self._logger.setLevel(logging.INFO)
        _detach_handlers(self._logger)
        self._logger.addHandler(self._handler)

    @property
    def current_path(self) -> str:
        """Path of generation 0, where the newest lines always land."""
        return log_file_path(self.config.directory, self.config.file_identifier)

    @property
    def is_open(self) -> bool:
        return self._handler is not None

    def append(self, text: str) -> None:
        """
        Persist one annotated line and flush it to disk.

        Args:
            text: Rendered line without terminator.
        """
        if self._handler is None:
            return

        record = self._logger.makeRecord(
            self.logger_name, logging.INFO, "", 0, text, None, None
        )
        # Straight to the handler: dictConfig and fileConfig may disable the
        # logger itself after activation.
        self._handler.handle(record)
        self._handler.flush()

    def close(self) -> None:
        """Detach and close the rotation handle. Safe to call twice."""
        handler, self._handler = self._handler, None
        if handler is None:
            return
        self._logger.removeHandler(handler)
        handler.close()


def _detach_handlers(target: logging.Logger) -> None:
    """Release any rotation handle left on the logger by an earlier persister."""
    for h in list(target.handlers):
        if _is_our_handler(h):
            target.removeHandler(h)
            h.close()
