"""Append-only store of candidate values gathered during one run."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Tuple

from jinja2 import Environment, FileSystemLoader

from .constants import DEFAULT_KEY_PREFIX
from .keys import ALL_KEYS, Key, Variable, describe
from .models import Candidate, Confidence

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from .sources.base import Source

_TEMPLATES_DIR = Path(__file__).with_name("templates")


class CandidateStore:
    """Complete provenance log of every value any source produced, plus resolutions."""

    def __init__(self) -> None:
        self._candidates: Dict[Key, List[Candidate]] = {}
        self._resolved: Dict[Key, str] = {}

    def record(self, key: Key, rank: int, confidence: Confidence, value: str) -> Candidate:
        """Append a candidate; earlier entries are never replaced or deduplicated."""
        candidate = Candidate(origin_rank=rank, confidence=Confidence(confidence), value=value)
        self._candidates.setdefault(key, []).append(candidate)
        return candidate

    def candidates_of(self, key: Key) -> Tuple[Candidate, ...]:
        return tuple(self._candidates.get(key, ()))

    def resolved(self, key: Key) -> Optional[str]:
        return self._resolved.get(key)

    def set_resolved(self, key: Key, value: str) -> None:
        self._resolved[key] = value

    def primary(self, key: Key) -> Optional[Candidate]:
        """The value currently standing for ``key``.

        After arbitration this is the resolved value; before it, the most
        recently recorded candidate, i.e. the one from the latest source in
        collection order.
        """
        candidates = self._candidates.get(key)
        resolved = self._resolved.get(key)
        if resolved is not None:
            for candidate in reversed(candidates or []):
                if candidate.value == resolved:
                    return candidate
            return Candidate(origin_rank=-1, confidence=Confidence.LOW, value=resolved)
        if candidates:
            return candidates[-1]
        return None

    def keys_with_candidates(self) -> List[Key]:
        return [key for key in ALL_KEYS if self._candidates.get(key)]

    def resolved_items(self) -> List[Tuple[Key, Variable, str]]:
        """Resolved values with their metadata, in canonical key order."""
        return [
            (key, describe(key), self._resolved[key]) for key in ALL_KEYS if key in self._resolved
        ]

    # ------------------------------------------------------------------
    # Diagnostics

    def to_table(self, sources: Sequence["Source"], prefix: str | None = DEFAULT_KEY_PREFIX) -> str:
        """Markdown table of keys (rows) by sources (columns), ending with the resolved value."""
        rows = []
        for key in self.keys_with_candidates():
            by_rank: Dict[int, str] = {}
            for candidate in self._candidates[key]:
                by_rank[candidate.origin_rank] = candidate.value
            rows.append(
                {
                    "key": key.value,
                    "name": describe(key).key(prefix),
                    "cells": [by_rank.get(rank, "") for rank in range(len(sources))],
                    "resolved": self._resolved.get(key, ""),
                }
            )
        template = _environment().get_template("retrieved_table.md.j2")
        return template.render(sources=[source.display() for source in sources], rows=rows)

    def to_list(self, prefix: str | None = DEFAULT_KEY_PREFIX) -> str:
        """Markdown list of the resolved values."""
        entries = [
            {"key": key.value, "name": variable.key(prefix), "value": value}
            for key, variable, value in self.resolved_items()
        ]
        template = _environment().get_template("retrieved_list.md.j2")
        return template.render(entries=entries)


def _environment() -> Environment:
    loader = FileSystemLoader(str(_TEMPLATES_DIR))
    return Environment(loader=loader, autoescape=False, trim_blocks=True, lstrip_blocks=True)


__all__ = ["CandidateStore"]
