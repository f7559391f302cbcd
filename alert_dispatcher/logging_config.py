"""
Logging setup for the dispatcher.

All modules log through ``logging.getLogger(__name__)``; records propagate to
the package logger configured here, which owns two sinks:

- the console, with a colored level tag when attached to a terminal
- the dispatcher's log file, rotated only at cycle boundaries

Both sinks write ``[LEVEL] YYYY-MM-DD HH:MM:SS - message``.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import IO, Optional, Union

PACKAGE_LOGGER = "alert_dispatcher"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
ROTATED_SUFFIX = ".old"

_LEVEL_TAGS = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "ERROR",
}

_LEVEL_COLORS = {
    logging.DEBUG: "\033[0;34m",
    logging.INFO: "\033[0;32m",
    logging.WARNING: "\033[1;33m",
    logging.ERROR: "\033[0;31m",
    logging.CRITICAL: "\033[0;31m",
}
_RESET = "\033[0m"


def level_tag(levelno: int) -> str:
    """Short level name used in log lines (``WARNING`` is written ``WARN``)."""
    return _LEVEL_TAGS.get(levelno, logging.getLevelName(levelno))


class LevelTagFormatter(logging.Formatter):
    """
    Formatter producing ``[LEVEL] YYYY-MM-DD HH:MM:SS - message``.

    Parameters
    ----------
    color
        Wrap the ``[LEVEL]`` tag in ANSI color codes (console only).
    """

    def __init__(self, color: bool = False):
        super().__init__(datefmt=DATE_FORMAT)
        self._color = color

    def format(self, record: logging.LogRecord) -> str:
        tag = f"[{level_tag(record.levelno)}]"
        if self._color:
            tag = f"{_LEVEL_COLORS.get(record.levelno, '')}{tag}{_RESET}"

        line = f"{tag} {self.formatTime(record, self.datefmt)} - {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


class CycleRotatingFileHandler(logging.FileHandler):
    """
    Append-only file sink that rotates on request, never on emit.

    The dispatcher calls :meth:`rotate_if_needed` once at the start of each
    cycle, before anything else is written, so no cycle straddles a rotation.

    Parameters
    ----------
    filename
        Active log file path. Created if missing.
    max_bytes
        Rotate when the file grows strictly larger than this.
    """

    def __init__(self, filename: Union[str, Path], max_bytes: int):
        super().__init__(str(filename), mode="a", encoding="utf-8")
        self.max_bytes = max_bytes

    @property
    def rotated_filename(self) -> str:
        return self.baseFilename + ROTATED_SUFFIX

    def needs_rotation(self) -> bool:
        try:
            return os.path.getsize(self.baseFilename) > self.max_bytes
        except OSError:
            return False

    def rotate_if_needed(self) -> bool:
        """
        Move the active file to ``<name>.old`` and reopen a fresh one.

        A previous ``.old`` copy is replaced. Nothing is ever deleted
        beyond that. The handler always ends up with an open stream, on the
        fresh file after a rotation or on the old one if the move failed.

        Returns
        -------
        bool
            True if a rotation happened.

        Raises
        ------
        OSError
            If the file could not be moved aside.
        """
        self.acquire()
        try:
            try:
                if self.stream is not None:
                    self.stream.flush()
                if not self.needs_rotation():
                    return False

                if self.stream is not None:
                    self.stream.close()
                    self.stream = None
                os.replace(self.baseFilename, self.rotated_filename)
                return True
            finally:
                if self.stream is None:
                    self.stream = self._open()
        finally:
            self.release()


def setup_logging(
    log_file: Union[str, Path],
    max_log_bytes: int,
    verbose: bool = False,
    stream: Optional[IO[str]] = None,
) -> CycleRotatingFileHandler:
    """
    Configure the package logger with console and file sinks.

    Calling this again replaces the previous handlers.

    Parameters
    ----------
    log_file
        Path of the dispatcher's log file.
    max_log_bytes
        Size threshold used by :meth:`CycleRotatingFileHandler.rotate_if_needed`.
    verbose
        Emit DEBUG records to both sinks.
    stream
        Console stream (defaults to stdout).

    Returns
    -------
    CycleRotatingFileHandler
        The file sink, so the reporter can drive rotation.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()

    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False

    console_stream = stream if stream is not None else sys.stdout
    console = logging.StreamHandler(console_stream)
    isatty = getattr(console_stream, "isatty", None)
    console.setFormatter(LevelTagFormatter(color=bool(isatty and isatty())))
    logger.addHandler(console)

    Path(log_file).parent.mkdir(parents=True, exist_ok=True)
    file_handler = CycleRotatingFileHandler(log_file, max_bytes=max_log_bytes)
    file_handler.setFormatter(LevelTagFormatter(color=False))
    logger.addHandler(file_handler)

    return file_handler
