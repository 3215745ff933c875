"""Base classes for output sinks."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Dict, Mapping, Sequence, Tuple

from ..keys import Key, Variable
from ..settings import Overwrite

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from ..context import RunContext

ResolvedValue = Tuple[Key, Variable, str]


class SinkError(RuntimeError):
    """Raised when a sink fails to write its output; stops further dispatch."""

    def __init__(self, message: str, *, sink: str) -> None:
        super().__init__(message)
        self.sink = sink


class Sink(ABC):
    """Contract for consumers of the resolved values."""

    def is_usable(self, ctx: "RunContext") -> bool:
        return True

    @abstractmethod
    def store(self, ctx: "RunContext", values: Sequence[ResolvedValue]) -> None:
        """Write ``values`` (sorted by key); raise :class:`SinkError` on failure."""

    def display(self) -> str:
        return type(self).__name__


def merge_values(
    previous: Mapping[str, str],
    values: Sequence[ResolvedValue],
    *,
    prefix: str,
    overwrite: Overwrite,
) -> Dict[str, str]:
    """Combine previously written variables with new ones under the overwrite policy."""
    merged = dict(previous)
    for _key, variable, value in values:
        name = variable.key(prefix)
        if overwrite.main() or name not in merged:
            merged[name] = value
    return merged


__all__ = ["ResolvedValue", "Sink", "SinkError", "merge_values"]
