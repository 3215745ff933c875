"""Base classes and shared helpers for value sources."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import IntEnum
from typing import TYPE_CHECKING, Iterable, List, Mapping, Optional, Tuple

from ..conversions import clean_version
from ..keys import ALL_KEYS, Key, ensure_exhaustive
from ..models import Confidence
from ..validation import validate

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from ..context import RunContext


class Tier(IntEnum):
    """Collection order of sources; later tiers see what earlier ones recorded."""

    FILESYSTEM = 0
    VCS = 1
    CI = 2
    ENV_OVERRIDE = 3
    DERIVATION = 4
    ARBITRATION = 5


class SourceError(RuntimeError):
    """Raised when a source fails for real (I/O, malformed upstream data); aborts the run."""

    def __init__(self, message: str, *, source: str | None = None, key: Key | None = None) -> None:
        super().__init__(message)
        self.source = source
        self.key = key


class BadLowLevelValueError(SourceError):
    """Raised when a raw upstream value (e.g. a git ref) is malformed."""

    def __init__(
        self,
        message: str,
        *,
        low_level_value: str,
        source: str | None = None,
        key: Key | None = None,
    ) -> None:
        super().__init__(
            f"The value '{low_level_value}' fetched from the underlying source was bad: {message}",
            source=source,
            key=key,
        )
        self.low_level_value = low_level_value


class DerivationError(SourceError):
    """Raised when a value conversion rejects its input."""


class Source(ABC):
    """Contract for providers of candidate values."""

    default_confidence: Confidence = Confidence.HIGH
    confidences: Mapping[Key, Confidence] = {}

    @abstractmethod
    def is_usable(self, ctx: "RunContext") -> bool:
        """Return True when this source can contribute to the run; must be cheap."""

    @abstractmethod
    def hierarchy_rank(self) -> Tier:
        """Tier deciding when this source is collected."""

    @abstractmethod
    def retrieve(self, ctx: "RunContext", key: Key) -> Optional[str]:
        """Return a value for ``key``, or ``None`` if this source does not know it."""

    def confidence(self, key: Key) -> Confidence:
        return self.confidences.get(key, self.default_confidence)

    def key_order(self) -> Tuple[Key, ...]:
        """Order in which keys are requested from this source."""
        return ALL_KEYS

    def type_name(self) -> str:
        cls = type(self)
        return f"{cls.__module__}.{cls.__qualname__}"

    def properties(self) -> Tuple[str, ...]:
        return ()

    def display(self) -> str:
        props = self.properties()
        name = type(self).__name__
        return f"{name}({', '.join(props)})" if props else name

    def _error(self, message: str, key: Key | None = None) -> SourceError:
        return SourceError(message, source=self.display(), key=key)


def sort_sources(sources: Iterable[Source]) -> List[Source]:
    """Order sources by tier, then type name, then properties."""
    return sorted(
        sources,
        key=lambda source: (source.hierarchy_rank(), source.type_name(), source.properties()),
    )


class CiSource(Source):
    """A source reading the variables one CI platform exports into its jobs.

    Subclasses declare a marker variable and a total table mapping each key to
    the variable carrying it (``None`` where the platform offers nothing), and
    override :meth:`retrieve` for keys that need more than a lookup.
    """

    marker_var: str = ""
    var_names: Mapping[Key, Optional[str]] = {}

    def __init_subclass__(cls, **kwargs: object) -> None:
        super().__init_subclass__(**kwargs)
        if cls.var_names:
            ensure_exhaustive(cls.var_names, f"{cls.__name__}.var_names")

    def is_usable(self, ctx: "RunContext") -> bool:
        return self.marker_var in ctx.vars

    def hierarchy_rank(self) -> Tier:
        return Tier.CI

    def retrieve(self, ctx: "RunContext", key: Key) -> Optional[str]:
        name = self.var_names[key]
        return ctx.var(name) if name else None

    def version_from_build_tag(self, ctx: "RunContext") -> Optional[str]:
        """The cleaned build tag, if it is a proper version."""
        tag = self.retrieve(ctx, Key.BuildTag)
        if tag is None:
            return None
        version = clean_version(tag)
        if validate(ctx, Key.Version, version).is_optimal:
            return version
        return None


def ref_extract_branch(ref: str) -> Optional[str]:
    """Branch name of a ref like ``refs/heads/main``; ``None`` for other ref types."""
    return _ref_extract_name(ref, "heads")


def ref_extract_tag(ref: str) -> Optional[str]:
    """Tag name of a ref like ``refs/tags/v1.2.3``; ``None`` for other ref types."""
    return _ref_extract_name(ref, "tags")


# ----------------------------------------------------------------------
# Internals


def _ref_extract_name(ref: str, ref_type: str) -> Optional[str]:
    parts = ref.split("/", 2)
    if len(parts) < 3 or not parts[1] or not parts[2]:
        raise BadLowLevelValueError(
            "Invalid git reference, should be 'refs/<TYPE>/<NAME>'", low_level_value=ref
        )
    if parts[1] != ref_type:
        return None
    return parts[2]


__all__ = [
    "BadLowLevelValueError",
    "CiSource",
    "DerivationError",
    "Source",
    "SourceError",
    "Tier",
    "ref_extract_branch",
    "ref_extract_tag",
    "sort_sources",
]
