"""Sink writing ``KEY="VALUE"`` lines, sourceable from BASH."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Dict, Sequence

from ..context import load_vars_file
from .base import ResolvedValue, Sink, SinkError, merge_values

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from ..context import RunContext


class BashFileSink(Sink):
    def __init__(self, path: Path) -> None:
        self._path = path

    def display(self) -> str:
        return f"{type(self).__name__}({self._path})"

    def store(self, ctx: "RunContext", values: Sequence[ResolvedValue]) -> None:
        try:
            previous: Dict[str, str] = load_vars_file(self._path) if self._path.exists() else {}
        except (OSError, ValueError) as exc:
            raise SinkError(f"Failed to read {self._path}: {exc}", sink=self.display()) from exc
        merged = merge_values(
            previous,
            values,
            prefix=ctx.settings.key_prefix,
            overwrite=ctx.settings.overwrite,
        )
        lines = [f'{name}="{_escape(value)}"\n' for name, value in sorted(merged.items())]
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text("".join(lines), encoding="utf-8")
        except OSError as exc:
            raise SinkError(f"Failed to write {self._path}: {exc}", sink=self.display()) from exc


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


__all__ = ["BashFileSink"]
