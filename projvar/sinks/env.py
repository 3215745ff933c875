"""Sink exporting resolved values as environment variables."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, MutableMapping, Sequence

from ..logging import get_logger
from .base import ResolvedValue, Sink

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from ..context import RunContext

_LOGGER = get_logger("sinks.env")


class EnvSink(Sink):
    """Sets ``PROJECT_*`` variables (and, on request, their alternative names)."""

    def __init__(self, environ: MutableMapping[str, str] | None = None) -> None:
        self._environ = environ if environ is not None else os.environ

    def store(self, ctx: "RunContext", values: Sequence[ResolvedValue]) -> None:
        settings = ctx.settings
        for _key, variable, value in values:
            name = variable.key(settings.key_prefix)
            if settings.overwrite.main() or name not in self._environ:
                self._environ[name] = value
            else:
                _LOGGER.debug("Keeping pre-set %s", name)
            if not settings.set_all:
                continue
            for alt_name in variable.alt_names:
                if settings.overwrite.alt() or alt_name not in self._environ:
                    self._environ[alt_name] = value


__all__ = ["EnvSink"]
