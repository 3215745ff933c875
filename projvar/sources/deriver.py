"""Fills gaps by converting values other sources already provided."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, List, Optional, Sequence, Tuple
from urllib.parse import urlsplit

from .. import conversions
from ..conversions import ConversionError
from ..keys import ALL_KEYS, Key
from ..logging import get_logger
from ..models import Confidence
from ..settings import Settings
from ..tools.hosting import TransferProtocol
from .arbitrator import select
from .base import DerivationError, Source, Tier

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from ..context import RunContext

_LOGGER = get_logger("sources.deriver")

Transform = Callable[[Settings, str], Optional[str]]
ProtocolTransform = Callable[[Settings, str, TransferProtocol], Optional[str]]


@dataclass(frozen=True)
class Derivation:
    """Produce ``target`` by applying ``transform`` to the best value of ``source``."""

    target: Key
    source: Key
    transform: Transform


def _with_protocol(convert: ProtocolTransform, protocol: TransferProtocol) -> Transform:
    return lambda settings, value: convert(settings, value, protocol)


def _clone_url(convert: ProtocolTransform, protocol: TransferProtocol) -> Transform:
    """Like :func:`_with_protocol`, but drops URLs the host does not serve ``protocol`` on."""

    def _transform(settings: Settings, value: str) -> Optional[str]:
        url = convert(settings, value, protocol)
        if url is None:
            return None
        if not settings.hosting_type_for(urlsplit(url).hostname).supports_clone_url(protocol):
            _LOGGER.debug("Dropping %s; the host offers no %s clones", url, protocol.value)
            return None
        return url

    return _transform


_GIT = TransferProtocol.GIT
_HTTPS = TransferProtocol.HTTPS
_SSH = TransferProtocol.SSH

# Evaluated once, top to bottom; a value derived here is visible to later rules only.
RULES: Tuple[Derivation, ...] = (
    Derivation(Key.RepoWebUrl, Key.RepoCloneUrl, conversions.clone_url_to_web_url),
    Derivation(Key.RepoWebUrl, Key.RepoCloneUrlSsh, conversions.clone_url_to_web_url),
    Derivation(
        Key.RepoCloneUrl, Key.RepoWebUrl, _with_protocol(conversions.web_url_to_clone_url, _HTTPS)
    ),
    Derivation(
        Key.RepoCloneUrlGit, Key.RepoWebUrl, _clone_url(conversions.web_url_to_clone_url, _GIT)
    ),
    Derivation(
        Key.RepoCloneUrlGit, Key.RepoCloneUrl, _clone_url(conversions.clone_url_conversion, _GIT)
    ),
    Derivation(
        Key.RepoCloneUrlHttp, Key.RepoWebUrl, _clone_url(conversions.web_url_to_clone_url, _HTTPS)
    ),
    Derivation(
        Key.RepoCloneUrlHttp,
        Key.RepoCloneUrl,
        _clone_url(conversions.clone_url_conversion, _HTTPS),
    ),
    Derivation(
        Key.RepoCloneUrlSsh, Key.RepoWebUrl, _clone_url(conversions.web_url_to_clone_url, _SSH)
    ),
    Derivation(
        Key.RepoCloneUrlSsh, Key.RepoCloneUrl, _clone_url(conversions.clone_url_conversion, _SSH)
    ),
    Derivation(Key.RepoIssuesUrl, Key.RepoWebUrl, conversions.web_url_to_issues_url),
    Derivation(Key.RepoCommitPrefixUrl, Key.RepoWebUrl, conversions.web_url_to_commit_prefix_url),
    Derivation(
        Key.RepoRawVersionedPrefixUrl, Key.RepoWebUrl, conversions.web_url_to_raw_prefix_url
    ),
    Derivation(
        Key.RepoVersionedDirPrefixUrl,
        Key.RepoWebUrl,
        conversions.web_url_to_versioned_dir_prefix_url,
    ),
    Derivation(
        Key.RepoVersionedFilePrefixUrl,
        Key.RepoWebUrl,
        conversions.web_url_to_versioned_file_prefix_url,
    ),
    Derivation(Key.BuildHostingUrl, Key.RepoWebUrl, conversions.web_url_to_build_hosting_url),
    Derivation(
        Key.NameMachineReadable,
        Key.Name,
        lambda settings, value: conversions.name_to_machine_readable(value),
    ),
    Derivation(
        Key.NameMachineReadable,
        Key.RepoWebUrl,
        lambda settings, value: conversions.web_url_to_machine_readable_name(value),
    ),
    Derivation(Key.Name, Key.NameMachineReadable, lambda settings, value: value),
)


class Deriver(Source):
    """Runs after all direct sources; never overrides a key that already has a value."""

    default_confidence = Confidence.MIDDLE

    def __init__(self, rules: Sequence[Derivation] = RULES) -> None:
        self._rules = tuple(rules)

    def is_usable(self, ctx: "RunContext") -> bool:
        return True

    def hierarchy_rank(self) -> Tier:
        return Tier.DERIVATION

    def key_order(self) -> Tuple[Key, ...]:
        targets: List[Key] = []
        for rule in self._rules:
            if rule.target not in targets:
                targets.append(rule.target)
        return tuple(targets) + tuple(key for key in ALL_KEYS if key not in targets)

    def retrieve(self, ctx: "RunContext", key: Key) -> Optional[str]:
        if ctx.store.primary(key) is not None:
            return None
        for rule in self._rules:
            if rule.target is not key:
                continue
            chosen = select(ctx, rule.source, ctx.store.candidates_of(rule.source))
            if chosen is None:
                continue
            try:
                value = rule.transform(ctx.settings, chosen.value)
            except ConversionError as exc:
                raise DerivationError(
                    f"Failed to derive {key.value} from {rule.source.value}: {exc}",
                    source=self.display(),
                    key=key,
                ) from exc
            if value is not None:
                _LOGGER.debug("Derived %s from %s: %s", key.value, rule.source.value, value)
                return value
        return None


__all__ = ["Derivation", "Deriver", "RULES"]
