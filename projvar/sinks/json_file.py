"""Sink writing a flat JSON object of variable names to values."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Sequence

from .base import ResolvedValue, Sink, SinkError, merge_values

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from ..context import RunContext


class JsonFileSink(Sink):
    def __init__(self, path: Path) -> None:
        self._path = path

    def display(self) -> str:
        return f"{type(self).__name__}({self._path})"

    def store(self, ctx: "RunContext", values: Sequence[ResolvedValue]) -> None:
        previous = self._load()
        merged = merge_values(
            previous,
            values,
            prefix=ctx.settings.key_prefix,
            overwrite=ctx.settings.overwrite,
        )
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(merged, indent=2, sort_keys=True), encoding="utf-8")
        except OSError as exc:
            raise SinkError(f"Failed to write {self._path}: {exc}", sink=self.display()) from exc

    # ------------------------------------------------------------------
    # Internals

    def _load(self) -> Dict[str, str]:
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as exc:
            raise SinkError(f"Failed to read {self._path}: {exc}", sink=self.display()) from exc
        if not isinstance(data, dict):
            raise SinkError(f"{self._path} does not hold a JSON object", sink=self.display())
        return {str(name): str(value) for name, value in data.items()}


__all__ = ["JsonFileSink"]
