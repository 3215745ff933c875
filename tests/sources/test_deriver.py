"""Tests for projvar.sources.deriver."""

from __future__ import annotations

import pytest

from projvar.context import RunContext
from projvar.keys import ALL_KEYS, Key
from projvar.models import Confidence
from projvar.sources.base import DerivationError
from projvar.sources.deriver import RULES, Deriver

DERIVER_RANK = 7


def _derive_all(ctx: RunContext, deriver: Deriver | None = None) -> dict[Key, str]:
    """Run the deriver the way the runner does, recording every value it produces."""
    deriver = deriver or Deriver()
    derived: dict[Key, str] = {}
    for key in deriver.key_order():
        value = deriver.retrieve(ctx, key)
        if value is None:
            continue
        ctx.store.record(key, DERIVER_RANK, deriver.confidence(key), value)
        derived[key] = value
    return derived


def test_derives_urls_from_scp_clone_url(ctx: RunContext) -> None:
    ctx.store.record(Key.RepoCloneUrl, 0, Confidence.MIDDLE, "git@github.com:acme/widget.git")

    derived = _derive_all(ctx)

    assert derived[Key.RepoWebUrl] == "https://github.com/acme/widget"
    assert derived[Key.RepoIssuesUrl] == "https://github.com/acme/widget/issues"
    assert derived[Key.RepoCloneUrlHttp] == "https://github.com/acme/widget.git"
    assert derived[Key.RepoCloneUrlSsh] == "ssh://git@github.com/acme/widget.git"
    assert derived[Key.RepoCommitPrefixUrl] == "https://github.com/acme/widget/commit"
    assert derived[Key.RepoRawVersionedPrefixUrl] == "https://raw.githubusercontent.com/acme/widget"
    assert derived[Key.BuildHostingUrl] == "https://acme.github.io/widget"
    assert derived[Key.NameMachineReadable] == "widget"
    assert derived[Key.Name] == "widget"
    assert Key.RepoCloneUrl not in derived
    # GitHub serves no git:// clones
    assert Key.RepoCloneUrlGit not in derived


def test_never_overrides_existing_values(ctx: RunContext) -> None:
    ctx.store.record(Key.RepoCloneUrl, 0, Confidence.HIGH, "https://github.com/acme/widget.git")
    ctx.store.record(Key.RepoWebUrl, 1, Confidence.HIGH, "https://github.com/acme/other")

    derived = _derive_all(ctx)

    assert Key.RepoWebUrl not in derived
    assert derived[Key.RepoIssuesUrl] == "https://github.com/acme/other/issues"


def test_is_idempotent(ctx: RunContext) -> None:
    ctx.store.record(Key.RepoCloneUrl, 0, Confidence.MIDDLE, "git@github.com:acme/widget.git")
    _derive_all(ctx)

    assert _derive_all(ctx) == {}


def test_machine_readable_name_prefers_name(ctx: RunContext) -> None:
    ctx.store.record(Key.Name, 0, Confidence.HIGH, "My Widget")
    ctx.store.record(Key.RepoWebUrl, 0, Confidence.HIGH, "https://github.com/acme/widget")

    assert _derive_all(ctx)[Key.NameMachineReadable] == "My_Widget"


def test_unknown_hosts_derive_nothing_url_related(ctx: RunContext) -> None:
    ctx.store.record(Key.RepoCloneUrl, 0, Confidence.HIGH, "https://git.example.org/team/widget.git")

    derived = _derive_all(ctx)

    assert Key.RepoWebUrl not in derived
    assert Key.RepoIssuesUrl not in derived
    assert derived[Key.RepoCloneUrlHttp] == "https://git.example.org/team/widget.git"


def test_conversion_failure_is_reported(ctx: RunContext) -> None:
    ctx.store.record(Key.Name, 0, Confidence.HIGH, "")

    with pytest.raises(DerivationError) as excinfo:
        Deriver().retrieve(ctx, Key.NameMachineReadable)
    assert excinfo.value.key is Key.NameMachineReadable


def test_key_order_starts_with_rule_targets() -> None:
    order = Deriver().key_order()

    assert order[0] is Key.RepoWebUrl
    assert sorted(order, key=lambda key: key.index) == list(ALL_KEYS)
    targets = list(dict.fromkeys(rule.target for rule in RULES))
    assert list(order[: len(targets)]) == targets


def test_derived_values_have_middle_confidence() -> None:
    assert Deriver().confidence(Key.RepoWebUrl) is Confidence.MIDDLE


def test_git_protocol_clone_url_for_hosts_serving_it(ctx: RunContext) -> None:
    ctx.store.record(Key.RepoCloneUrl, 0, Confidence.HIGH, "https://repo.or.cz/widget.git")

    derived = _derive_all(ctx)

    assert derived[Key.RepoCloneUrlGit] == "git://repo.or.cz/widget.git"
    assert derived[Key.RepoCloneUrlHttp] == "https://repo.or.cz/widget.git"


def test_reads_the_best_candidate_not_the_latest(ctx: RunContext) -> None:
    ctx.store.record(Key.RepoCloneUrl, 0, Confidence.HIGH, "https://github.com/acme/widget.git")
    ctx.store.record(Key.RepoCloneUrl, 3, Confidence.LOW, "not a url")

    assert Deriver().retrieve(ctx, Key.RepoWebUrl) == "https://github.com/acme/widget"


def test_keys_without_rules_are_never_derived(ctx: RunContext) -> None:
    targets = {rule.target for rule in RULES}
    ctx.store.record(Key.RepoCloneUrl, 0, Confidence.HIGH, "https://github.com/acme/widget.git")

    derived = _derive_all(ctx)

    assert isinstance(RULES, tuple)
    assert Key.Version not in targets
    assert set(derived) <= targets
