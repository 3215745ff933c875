"""Tests for projvar.runner."""

from __future__ import annotations

from pathlib import Path
from typing import List

import pytest

from projvar.context import RunContext
from projvar.keys import ALL_KEYS, Key
from projvar.models import Confidence
from projvar.runner import (
    InvalidValueError,
    MissingValueError,
    ResolutionRunner,
    RunState,
)
from projvar.settings import FailOn, RetrievedMode, Settings, ShowRetrieved
from projvar.sinks import SinkError
from projvar.sources.arbitrator import Arbitrator
from projvar.sources.base import Source, Tier
from projvar.sources.deriver import Deriver
from tests._fixtures.doubles import RecordingSink, StaticSource
from tests._fixtures.repo_builder import no_git

NOTHING_REQUIRED: frozenset[Key] = frozenset()


def _ctx(tmp_path: Path, **settings: object) -> RunContext:
    return RunContext(Settings(repo_path=tmp_path, **settings), {}, git_runner=no_git)  # type: ignore[arg-type]


def _pipeline(*sources: Source) -> List[Source]:
    return [*sources, Deriver(), Arbitrator()]


def test_clone_url_is_expanded_into_web_urls(tmp_path: Path) -> None:
    ctx = _ctx(tmp_path, required_keys=NOTHING_REQUIRED)
    source = StaticSource(
        {Key.RepoCloneUrl: "git@github.com:acme/widget.git"}, confidence=Confidence.MIDDLE
    )
    sink = RecordingSink()

    ResolutionRunner(ctx, _pipeline(source), [sink]).run()

    stored = sink.stored_names()
    assert stored["PROJECT_REPO_WEB_URL"] == "https://github.com/acme/widget"
    assert stored["PROJECT_REPO_ISSUES_URL"] == "https://github.com/acme/widget/issues"
    assert stored["PROJECT_NAME"] == "widget"
    # scp-like clone URLs are no URLs; the optional key is dropped
    assert "PROJECT_REPO_CLONE_URL" not in stored
    assert stored["PROJECT_REPO_CLONE_URL_SSH"] == "ssh://git@github.com/acme/widget.git"


def test_valid_value_beats_more_confident_sources(tmp_path: Path) -> None:
    ctx = _ctx(tmp_path, required_keys=NOTHING_REQUIRED)
    sources = _pipeline(
        StaticSource({Key.Version: "abcdef1"}, label="sha", confidence=Confidence.LOW),
        StaticSource({Key.Version: "1.2.3"}, label="tag", confidence=Confidence.HIGH),
    )

    values = ResolutionRunner(ctx, sources).run()

    assert ctx.store.resolved(Key.Version) == "1.2.3"
    assert [value for key, _variable, value in values if key is Key.Version] == ["1.2.3"]


def test_missing_required_value_is_fatal_in_strict_mode(tmp_path: Path) -> None:
    ctx = _ctx(
        tmp_path,
        required_keys=frozenset({Key.Version}),
        fail_on=FailOn.ANY_MISSING_VALUE,
    )
    sink = RecordingSink()
    runner = ResolutionRunner(ctx, _pipeline(StaticSource({Key.Name: "widget"})), [sink])

    with pytest.raises(MissingValueError) as excinfo:
        runner.run()
    assert excinfo.value.key is Key.Version
    assert sink.stored == []
    assert runner.state is RunState.VALIDATING


def test_missing_required_value_is_skipped_in_lenient_mode(tmp_path: Path) -> None:
    ctx = _ctx(tmp_path, required_keys=frozenset({Key.Version}))
    sink = RecordingSink()

    ResolutionRunner(ctx, _pipeline(StaticSource({Key.Name: "widget"})), [sink]).run()

    assert sink.stored_names() == {
        "PROJECT_NAME": "widget",
        "PROJECT_NAME_MACHINE_READABLE": "widget",
    }


def test_placeholder_version_counts_as_missing(tmp_path: Path) -> None:
    ctx = _ctx(
        tmp_path,
        required_keys=frozenset({Key.Version}),
        fail_on=FailOn.ANY_MISSING_VALUE,
    )
    runner = ResolutionRunner(ctx, _pipeline(StaticSource({Key.Version: "# none yet"})))

    with pytest.raises(MissingValueError):
        runner.run()


def test_invalid_required_value(tmp_path: Path) -> None:
    sources = _pipeline(StaticSource({Key.Version: "not a version!"}))
    strict = _ctx(tmp_path, required_keys=frozenset({Key.Version}), fail_on=FailOn.ANY_MISSING_VALUE)
    with pytest.raises(InvalidValueError) as excinfo:
        ResolutionRunner(strict, sources).run()
    assert excinfo.value.value == "not a version!"

    lenient = _ctx(tmp_path, required_keys=frozenset({Key.Version}))
    sources = _pipeline(StaticSource({Key.Version: "not a version!"}))
    assert ResolutionRunner(lenient, sources).run() == []


def test_invalid_optional_value_is_discarded(tmp_path: Path) -> None:
    ctx = _ctx(tmp_path, required_keys=NOTHING_REQUIRED, fail_on=FailOn.ANY_MISSING_VALUE)
    sources = _pipeline(StaticSource({Key.BuildArch: "sparc", Key.BuildOsFamily: "unix"}))

    values = ResolutionRunner(ctx, sources).run()

    assert [key for key, _variable, _value in values] == [Key.BuildOsFamily]


def test_only_required_filters_output(tmp_path: Path) -> None:
    ctx = _ctx(tmp_path, required_keys=frozenset({Key.Version}), only_required=True)
    sources = _pipeline(StaticSource({Key.Version: "1.2.3", Key.Name: "widget"}))

    values = ResolutionRunner(ctx, sources).run()

    assert [(key, value) for key, _variable, value in values] == [(Key.Version, "1.2.3")]


def test_output_follows_canonical_key_order(tmp_path: Path) -> None:
    ctx = _ctx(tmp_path, required_keys=NOTHING_REQUIRED)
    sources = _pipeline(
        StaticSource({Key.Version: "1.2.3", Key.BuildArch: "x86_64", Key.Name: "widget"})
    )

    keys = [key for key, _variable, _value in ResolutionRunner(ctx, sources).run()]

    assert keys == sorted(keys, key=lambda key: ALL_KEYS.index(key))


def test_results_do_not_depend_on_source_order(tmp_path: Path) -> None:
    def build() -> List[Source]:
        return _pipeline(
            StaticSource({Key.Version: "1.2.3"}, label="a"),
            StaticSource({Key.Version: "1.2.4"}, label="b"),
            StaticSource({Key.Name: "widget"}, label="c", tier=Tier.VCS),
        )

    first = ResolutionRunner(_ctx(tmp_path), build()).run()
    second = ResolutionRunner(_ctx(tmp_path), list(reversed(build()))).run()

    assert first == second
    assert dict((key, value) for key, _variable, value in first)[Key.Version] == "1.2.4"


def test_unusable_sources_are_not_asked(tmp_path: Path) -> None:
    ctx = _ctx(tmp_path, required_keys=NOTHING_REQUIRED)
    idle = StaticSource({Key.Version: "9.9.9"}, usable=False)

    ResolutionRunner(ctx, _pipeline(idle)).run()

    assert idle.requested == []
    assert ctx.store.resolved(Key.Version) is None


def test_sink_failure_stops_dispatch(tmp_path: Path) -> None:
    ctx = _ctx(tmp_path, required_keys=NOTHING_REQUIRED)
    broken = RecordingSink(fail=True)
    later = RecordingSink()
    skipped = RecordingSink(usable=False)
    sources = _pipeline(StaticSource({Key.Version: "1.2.3"}))

    with pytest.raises(SinkError):
        ResolutionRunner(ctx, sources, [skipped, broken, later]).run()
    assert skipped.stored == []
    assert later.stored == []


def test_run_state_only_moves_forward(tmp_path: Path) -> None:
    ctx = _ctx(tmp_path, required_keys=NOTHING_REQUIRED)
    runner = ResolutionRunner(ctx, _pipeline(StaticSource({Key.Version: "1.2.3"})))
    assert runner.state is RunState.IDLE

    runner.run()

    assert runner.state is RunState.DONE
    with pytest.raises(RuntimeError):
        runner._advance(RunState.COLLECTING)


def test_all_retrieved_values_are_written_to_file(tmp_path: Path) -> None:
    target = tmp_path / "retrieved.md"
    ctx = _ctx(
        tmp_path,
        required_keys=NOTHING_REQUIRED,
        show_retrieved=ShowRetrieved(mode=RetrievedMode.ALL, target=target),
    )
    sources = _pipeline(
        StaticSource({Key.Version: "1.2.3"}, label="a"),
        StaticSource({Key.Version: "1.2.4"}, label="b"),
    )

    ResolutionRunner(ctx, sources).run()

    table = target.read_text(encoding="utf-8")
    assert "StaticSource(a) | StaticSource(b) | Deriver | Arbitrator" in table
    assert "| Version | `PROJECT_VERSION` | 1.2.3 | 1.2.4 |  |  | **1.2.4** |" in table


def test_primary_values_are_written_to_file(tmp_path: Path) -> None:
    target = tmp_path / "retrieved.md"
    ctx = _ctx(
        tmp_path,
        required_keys=NOTHING_REQUIRED,
        show_retrieved=ShowRetrieved(mode=RetrievedMode.PRIMARY, target=target),
    )

    ResolutionRunner(ctx, _pipeline(StaticSource({Key.Version: "1.2.3"}))).run()

    assert "* Version - `PROJECT_VERSION` - 1.2.3" in target.read_text(encoding="utf-8")


def test_derived_urls_follow_the_best_clone_url(tmp_path: Path) -> None:
    ctx = _ctx(tmp_path, required_keys=NOTHING_REQUIRED)
    sources = _pipeline(
        StaticSource(
            {Key.RepoCloneUrl: "https://github.com/acme/widget.git"},
            label="vcs",
            tier=Tier.VCS,
            confidence=Confidence.HIGH,
        ),
        StaticSource(
            {Key.RepoCloneUrl: "http://github.com/acme/old.git"},
            label="env",
            tier=Tier.ENV_OVERRIDE,
            confidence=Confidence.LOW,
        ),
    )
    sink = RecordingSink()

    ResolutionRunner(ctx, sources, [sink]).run()

    stored = sink.stored_names()
    assert stored["PROJECT_REPO_CLONE_URL"] == "https://github.com/acme/widget.git"
    assert stored["PROJECT_REPO_WEB_URL"] == "https://github.com/acme/widget"
    assert stored["PROJECT_REPO_ISSUES_URL"] == "https://github.com/acme/widget/issues"


def test_losing_garbage_clone_url_does_not_abort_derivation(tmp_path: Path) -> None:
    ctx = _ctx(tmp_path, required_keys=NOTHING_REQUIRED, fail_on=FailOn.ANY_MISSING_VALUE)
    sources = _pipeline(
        StaticSource(
            {Key.RepoCloneUrl: "https://github.com/acme/widget.git"},
            label="vcs",
            tier=Tier.VCS,
            confidence=Confidence.LOW,
        ),
        StaticSource(
            {Key.RepoCloneUrl: "not a url"},
            label="env",
            tier=Tier.ENV_OVERRIDE,
            confidence=Confidence.HIGH,
        ),
    )

    values = dict((key, value) for key, _variable, value in ResolutionRunner(ctx, sources).run())

    assert values[Key.RepoCloneUrl] == "https://github.com/acme/widget.git"
    assert values[Key.RepoWebUrl] == "https://github.com/acme/widget"
