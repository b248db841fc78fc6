from __future__ import annotations

"""
Logging Handlers and Low-Level Utilities.

Provides the generation-numbered rotating file handler used to persist
annotated lines, plus the tagging mechanism that lets the library tell
its own handlers apart from external or application-installed ones.
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from debugstream.infra.fs import log_file_path

# Internal attribute used to tag and identify our own handlers
_HANDLER_TAG_ATTR: str = "_debugstream_handler"


# ==============================================================================
# INTERNAL LOGGING UTILITIES
# ==============================================================================

def _tag_handler(handler: logging.Handler) -> None:
    """
    Mark a handler as an internally-managed handler.

    Args:
        handler: The logging handler instance to tag.
    """
    setattr(handler, _HANDLER_TAG_ATTR, True)


def _is_our_handler(handler: logging.Handler) -> bool:
    """
    Verify if a handler was initialized by this library.

    Args:
        handler: The handler to inspect.

    Returns:
        bool: True if the handler carries our internal tag.
    """
    return bool(getattr(handler, _HANDLER_TAG_ATTR, False))


# ==============================================================================
# GENERATION ROTATING HANDLER
# ==============================================================================

class GenerationFileHandler(RotatingFileHandler):
    """
    RotatingFileHandler that names backups by generation.

    The file being written is always generation 0
    ("uilog-error.<id>.0.0.txt"); the stock ".N" backup suffixes are
    mapped onto "uilog-error.<id>.N.0.txt" through the handler namer.
    """

    def __init__(
            self,
            directory: str,
            file_identifier: str,
            max_file_count: int,
            max_bytes: int,
            encoding: str = "utf-8",
    ) -> None:
        self.directory = os.path.abspath(directory)
        self.file_identifier = file_identifier
        super().__init__(
            log_file_path(self.directory, file_identifier),
            mode="a",
            maxBytes=int(max_bytes),
            backupCount=int(max_file_count) - 1,
            encoding=encoding,
        )
        self.namer = self._generation_name

    def _generation_name(self, default_name: str) -> str:
        suffix = default_name[len(self.baseFilename) + 1:]
        if not default_name.startswith(self.baseFilename + ".") or not suffix.isdigit():
            return default_name
        return log_file_path(self.directory, self.file_identifier, generation=int(suffix))

    def shouldRollover(self, record: logging.LogRecord) -> bool:
        """
        Decide whether appending the record would push generation 0 past maxBytes.

        The stock check adds a character count to a byte offset; here the
        record is measured in the handler's encoding so multibyte text
        cannot overshoot the bound. An empty file never rolls over.

        Args:
            record: The record about to be emitted.

        Returns:
            bool: True if a rollover must happen first.
        """
        if self.maxBytes <= 0:
            return False
        if os.path.exists(self.baseFilename) and not os.path.isfile(self.baseFilename):
            return False
        if self.stream is None:
            self.stream = self._open()

        data = (self.format(record) + self.terminator).encode(
            self.encoding or "utf-8", errors=self.errors or "strict"
        )
        self.stream.seek(0, 2)
        position = self.stream.tell()
        return position > 0 and position + len(data) > self.maxBytes

    def doRollover(self) -> None:
        """
        Shift generations up by one and restart generation 0.

        With no backups allowed the single file is truncated instead, so a
        one-file set stays bounded.
        """
        if self.backupCount > 0:
            super().doRollover()
            return

        if self.stream:
            self.stream.close()
            self.stream = None  # type: ignore[assignment]
        if os.path.exists(self.baseFilename):
            os.remove(self.baseFilename)
        if not self.delay:
            self.stream = self._open()


def _create_generation_file_handler(
        directory: str,
        file_identifier: str,
        max_file_count: int,
        max_bytes: int,
) -> GenerationFileHandler:
    """
    Initialize a message-only GenerationFileHandler.

    Args:
        directory: Target directory of the log file set.
        file_identifier: Identifier embedded in every file name.
        max_file_count: Maximum number of coexisting files.
        max_bytes: Rollover threshold in bytes (0 disables rotation).

    Returns:
        GenerationFileHandler: Configured and tagged handler.

    Raises:
        OSError: If generation 0 cannot be opened for appending.
    """
    fh = GenerationFileHandler(directory, file_identifier, max_file_count, max_bytes)
    fh.setLevel(logging.NOTSET)
    fh.setFormatter(logging.Formatter("%(message)s"))
    _tag_handler(fh)
    return fh
