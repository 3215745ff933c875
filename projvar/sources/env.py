"""Values set explicitly through (prefixed) input variables."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Tuple

from ..keys import Key, describe
from .base import Source, Tier

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from ..context import RunContext


class EnvSource(Source):
    """Reads ``<prefix><OUTPUT_NAME>`` (e.g. ``PROJECT_VERSION``) from the input variables."""

    def __init__(self, prefix: str | None = None) -> None:
        self._prefix = prefix

    def is_usable(self, ctx: "RunContext") -> bool:
        return True

    def hierarchy_rank(self) -> Tier:
        return Tier.ENV_OVERRIDE

    def properties(self) -> Tuple[str, ...]:
        return (self._prefix,) if self._prefix is not None else ()

    def retrieve(self, ctx: "RunContext", key: Key) -> Optional[str]:
        prefix = self._prefix if self._prefix is not None else ctx.settings.key_prefix
        return ctx.var(describe(key).key(prefix))


__all__ = ["EnvSource"]
