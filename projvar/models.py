"""Core data models shared across projvar components."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class Confidence(IntEnum):
    """How much a source generally trusts the kind of value it produced."""

    LOW = 50
    MIDDLE = 100
    HIGH = 200


@dataclass(frozen=True)
class Candidate:
    """One observed value for a property, as produced by one source."""

    origin_rank: int
    confidence: Confidence
    value: str


__all__ = ["Candidate", "Confidence"]
