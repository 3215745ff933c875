"""Picks the single best candidate per key."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Sequence, Tuple

from ..keys import Key
from ..logging import get_logger
from ..models import Candidate
from ..validation import validate, validity_score
from .base import Source, Tier

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from ..context import RunContext

_LOGGER = get_logger("sources.arbitrator")


def select(ctx: "RunContext", key: Key, candidates: Sequence[Candidate]) -> Optional[Candidate]:
    """Return the candidate with the greatest ``(validity score, confidence, origin rank)``.

    Validity dominates, so a confident but invalid value loses against a
    valid one. Among equally valid and confident values the one collected
    later wins.
    """
    best: Optional[Candidate] = None
    best_rank: Optional[Tuple[int, int, int]] = None
    for candidate in candidates:
        outcome = validate(ctx, key, candidate.value)
        rank = (validity_score(outcome), int(candidate.confidence), candidate.origin_rank)
        _LOGGER.debug(
            "%s candidate '%s' from source #%d: %s",
            key.value,
            candidate.value,
            candidate.origin_rank,
            outcome.describe(),
        )
        if best_rank is None or rank >= best_rank:
            best, best_rank = candidate, rank
    return best


class Arbitrator(Source):
    """Runs last; its output becomes the resolved value of each key."""

    def is_usable(self, ctx: "RunContext") -> bool:
        return True

    def hierarchy_rank(self) -> Tier:
        return Tier.ARBITRATION

    def retrieve(self, ctx: "RunContext", key: Key) -> Optional[str]:
        chosen = select(ctx, key, ctx.store.candidates_of(key))
        return chosen.value if chosen is not None else None


__all__ = ["Arbitrator", "select"]
