"""Console and log-file output of projvar runs."""

from __future__ import annotations

import logging
from enum import IntEnum
from pathlib import Path

_ROOT_LOGGER = "projvar"
_SILENT = logging.CRITICAL + 10


class Verbosity(IntEnum):
    """How much one log destination shows; higher members show more."""

    NONE = 0
    ERRORS = 1
    WARNINGS = 2
    INFO = 3
    DEBUG = 4

    @classmethod
    def from_flags(cls, *, verbose: bool = False, quiet: bool = False) -> "Verbosity":
        if quiet:
            return cls.ERRORS
        return cls.DEBUG if verbose else cls.INFO

    def raised(self, steps: int) -> "Verbosity":
        """This verbosity increased by ``steps``, capped at :attr:`DEBUG`."""
        return Verbosity(min(self + steps, Verbosity.DEBUG))

    @property
    def level(self) -> int:
        return _LEVELS[self]


_LEVELS: dict[Verbosity, int] = {
    Verbosity.NONE: _SILENT,
    Verbosity.ERRORS: logging.ERROR,
    Verbosity.WARNINGS: logging.WARNING,
    Verbosity.INFO: logging.INFO,
    Verbosity.DEBUG: logging.DEBUG,
}


def get_logger(name: str | None = None) -> logging.Logger:
    """Logger for one part of projvar, e.g. ``get_logger("sources.git")``."""
    return logging.getLogger(f"{_ROOT_LOGGER}.{name}" if name else _ROOT_LOGGER)


def configure_logging(
    verbosity: Verbosity = Verbosity.INFO,
    *,
    log_file: Path | None = None,
    file_verbosity: Verbosity = Verbosity.DEBUG,
) -> logging.Logger:
    """Route projvar records to stderr and, if ``log_file`` is given, to that file.

    The file is truncated first, so it only ever holds the trace of the
    latest run. Calling this again replaces the previous handlers.
    """
    logger = logging.getLogger(_ROOT_LOGGER)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(verbosity.level)
    console.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(console)

    threshold = verbosity.level
    if log_file is not None:
        trace = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        trace.setLevel(file_verbosity.level)
        trace.setFormatter(logging.Formatter("%(asctime)s %(levelname)-8s %(name)s: %(message)s"))
        logger.addHandler(trace)
        threshold = min(threshold, file_verbosity.level)
    logger.setLevel(threshold)

    if log_file is not None:
        logger.info("Logging to file '%s'", log_file)
    return logger


__all__ = ["Verbosity", "configure_logging", "get_logger"]
