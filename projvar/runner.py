"""Resolution pipeline: collect, derive, arbitrate, validate, dispatch."""

from __future__ import annotations

from enum import Enum
from typing import Iterable, List, Optional, Sequence

from .context import RunContext
from .keys import ALL_KEYS, Key, describe
from .logging import get_logger
from .settings import FailOn, RetrievedMode
from .sinks.base import ResolvedValue, Sink
from .sources.base import Source, Tier, sort_sources
from .validation import ValidationOutcome, validate


class RunState(Enum):
    IDLE = "idle"
    COLLECTING = "collecting"
    DERIVING = "deriving"
    ARBITRATING = "arbitrating"
    VALIDATING = "validating"
    DISPATCHING = "dispatching"
    DONE = "done"


_STATE_ORDER = {state: position for position, state in enumerate(RunState)}

_TIER_STATES = {
    Tier.FILESYSTEM: RunState.COLLECTING,
    Tier.VCS: RunState.COLLECTING,
    Tier.CI: RunState.COLLECTING,
    Tier.ENV_OVERRIDE: RunState.COLLECTING,
    Tier.DERIVATION: RunState.DERIVING,
    Tier.ARBITRATION: RunState.ARBITRATING,
}


class ResolutionError(RuntimeError):
    """Base class for failures of a resolution run as a whole."""


class MissingValueError(ResolutionError):
    """Raised when a required key ends up without a value and missing values are fatal."""

    def __init__(self, key: Key) -> None:
        super().__init__(f"Missing value for required key '{key.value}'")
        self.key = key


class InvalidValueError(ResolutionError):
    """Raised when the resolved value of a required key is invalid."""

    def __init__(self, key: Key, value: str, outcome: ValidationOutcome) -> None:
        super().__init__(f"Invalid value for required key '{key.value}': '{value}' ({outcome.describe()})")
        self.key = key
        self.value = value
        self.outcome = outcome


class ResolutionRunner:
    """Runs every source once, in tier order, then validates and hands results to the sinks."""

    def __init__(
        self,
        ctx: RunContext,
        sources: Iterable[Source],
        sinks: Iterable[Sink] = (),
    ) -> None:
        self.ctx = ctx
        self.sources: List[Source] = sort_sources(sources)
        self.sinks: List[Sink] = list(sinks)
        self.state = RunState.IDLE
        self.logger = get_logger("runner")

    def run(self) -> List[ResolvedValue]:
        """Resolve all keys and dispatch them; returns what was handed to the sinks."""
        self._collect()
        self._report_retrieved()
        values = self._validate()
        self._dispatch(values)
        self._advance(RunState.DONE)
        return values

    # ------------------------------------------------------------------
    # Internals

    def _advance(self, state: RunState) -> None:
        if state is self.state:
            return
        if _STATE_ORDER[state] < _STATE_ORDER[self.state]:
            raise RuntimeError(f"Run state can not go back from {self.state.value} to {state.value}")
        self.logger.debug("Run state: %s -> %s", self.state.value, state.value)
        self.state = state

    def _collect(self) -> None:
        store = self.ctx.store
        for rank, source in enumerate(self.sources):
            tier = source.hierarchy_rank()
            self._advance(_TIER_STATES[tier])
            if not source.is_usable(self.ctx):
                self.logger.debug("Skipping unusable source %s", source.display())
                continue
            self.logger.debug("Fetching from source %s ...", source.display())
            for key in source.key_order():
                value = source.retrieve(self.ctx, key)
                if value is None:
                    continue
                self.logger.debug("\tFetched %s='%s'", key.value, value)
                if tier is Tier.ARBITRATION:
                    store.set_resolved(key, value)
                else:
                    store.record(key, rank, source.confidence(key), value)

    def _report_retrieved(self) -> None:
        show = self.ctx.settings.show_retrieved
        prefix = self.ctx.settings.key_prefix
        if show.mode is RetrievedMode.NONE:
            return
        if show.mode is RetrievedMode.PRIMARY:
            content = self.ctx.store.to_list(prefix)
        else:
            content = self.ctx.store.to_table(self.sources, prefix)
        if show.target is None:
            self.logger.info("Raw, retrieved values from sources:\n\n%s", content)
            return
        try:
            show.target.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise ResolutionError(f"Failed to write retrieved values to {show.target}: {exc}") from exc

    def _validate(self) -> List[ResolvedValue]:
        self._advance(RunState.VALIDATING)
        settings = self.ctx.settings
        values: List[ResolvedValue] = []
        for key in ALL_KEYS:
            required = settings.is_required(key)
            value = self.ctx.store.resolved(key)
            if value is None:
                self._key_missing(key, required)
                continue
            outcome = validate(self.ctx, key, value)
            self.logger.debug("Validation result for %s: %s", key.value, outcome.describe())
            if outcome.means_missing:
                self._key_missing(key, required, discarded=value)
                continue
            if outcome.is_invalid:
                if not required:
                    self.logger.warning(
                        "Discarded %s='%s', because it is invalid: %s", key.value, value, outcome.describe()
                    )
                    continue
                if settings.fail_on is FailOn.ANY_MISSING_VALUE:
                    raise InvalidValueError(key, value, outcome)
                self.logger.error(
                    "Omitting invalid value for required key %s='%s': %s",
                    key.value,
                    value,
                    outcome.describe(),
                )
                continue
            values.append((key, describe(key), value))
        if settings.only_required:
            values = [entry for entry in values if settings.is_required(entry[0])]
        return values

    def _key_missing(self, key: Key, required: bool, *, discarded: Optional[str] = None) -> None:
        if required:
            self.logger.warning("Missing value for required key '%s'", key.value)
            if self.ctx.settings.fail_on is FailOn.ANY_MISSING_VALUE:
                raise MissingValueError(key)
            return
        self.logger.debug("Missing value for optional key '%s'", key.value)
        if discarded is not None:
            self.logger.warning(
                "\tDiscarded %s='%s', because it was evaluated as a 'missing' value",
                key.value,
                discarded,
            )

    def _dispatch(self, values: Sequence[ResolvedValue]) -> None:
        self._advance(RunState.DISPATCHING)
        for sink in self.sinks:
            if not sink.is_usable(self.ctx):
                self.logger.debug("Skipping unusable sink %s", sink.display())
                continue
            self.logger.debug("Storing %d values to sink %s ...", len(values), sink.display())
            sink.store(self.ctx, values)


__all__ = [
    "InvalidValueError",
    "MissingValueError",
    "ResolutionError",
    "ResolutionRunner",
    "RunState",
]
