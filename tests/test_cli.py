"""CLI behaviour tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from projvar.cli import _build_parser, _build_settings, _build_sinks, main
from projvar.keys import ALL_KEYS, Key
from projvar.settings import FailOn, RetrievedMode
from projvar.sinks import BashFileSink, EnvSink, JsonFileSink


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "run"])
    assert args.verbose is True
    assert args.command == "run"


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["run", "--verbose"])
    assert args.verbose is True


def test_cli_accepts_quiet() -> None:
    parser = _build_parser()
    args = parser.parse_args(["run", "-q"])
    assert args.quiet is True
    assert args.verbose is False


def test_cli_collects_repeated_inputs() -> None:
    parser = _build_parser()
    args = parser.parse_args(
        ["run", "-D", "A=1", "-D", "B=2", "-I", "vars.env", "-R", "Name", "--no-env", "-f"]
    )
    assert args.variable == ["A=1", "B=2"]
    assert args.variables_file == [Path("vars.env")]
    assert args.require == ["Name"]
    assert args.no_env is True
    assert args.fail is True


def test_show_retrieved_defaults_to_log(tmp_path: Path) -> None:
    parser = _build_parser()
    args = parser.parse_args(["run", str(tmp_path), "-s"])

    settings = _build_settings(args)

    assert settings.show_retrieved.mode is RetrievedMode.PRIMARY
    assert settings.show_retrieved.target is None


def test_show_all_retrieved_to_file(tmp_path: Path) -> None:
    parser = _build_parser()
    args = parser.parse_args(["run", str(tmp_path), "-A", "table.md"])

    settings = _build_settings(args)

    assert settings.show_retrieved.mode is RetrievedMode.ALL
    assert settings.show_retrieved.target == Path("table.md")


def test_show_options_are_exclusive() -> None:
    parser = _build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["run", "-s", "-A"])


def test_required_keys_from_flags(tmp_path: Path) -> None:
    parser = _build_parser()

    settings = _build_settings(parser.parse_args(["run", str(tmp_path), "--require-none", "-R", "BUILD_ARCH"]))
    assert settings.required_keys == frozenset({Key.BuildArch})

    settings = _build_settings(parser.parse_args(["run", str(tmp_path), "--require-all", "-f"]))
    assert settings.required_keys == frozenset(ALL_KEYS)
    assert settings.fail_on is FailOn.ANY_MISSING_VALUE


def test_sinks_default_to_environment(tmp_path: Path) -> None:
    parser = _build_parser()

    sinks = _build_sinks(parser.parse_args(["run"]))
    assert [type(sink) for sink in sinks] == [EnvSink]

    sinks = _build_sinks(parser.parse_args(["run", "-o", "out.env", "-j", "out.json"]))
    assert [type(sink) for sink in sinks] == [BashFileSink, JsonFileSink]

    sinks = _build_sinks(parser.parse_args(["run", "-e", "-o", "out.env"]))
    assert [type(sink) for sink in sinks] == [EnvSink, BashFileSink]

    assert _build_sinks(parser.parse_args(["run", "--dry", "-o", "out.env"])) == []


def test_list_marks_required_keys(capsys: pytest.CaptureFixture[str]) -> None:
    main(["list"])

    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == len(ALL_KEYS)
    assert any(line.startswith("* PROJECT_VERSION") for line in lines)


def test_dry_run_prints_resolved_values(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    main(
        [
            "run",
            str(tmp_path),
            "--dry",
            "--no-env",
            "-D",
            "PROJECT_VERSION=1.2.3",
            "-D",
            "PROJECT_REPO_CLONE_URL=https://github.com/acme/widget.git",
        ]
    )

    out = capsys.readouterr().out
    assert 'PROJECT_VERSION="1.2.3"' in out
    assert 'PROJECT_REPO_WEB_URL="https://github.com/acme/widget"' in out
    assert 'PROJECT_REPO_ISSUES_URL="https://github.com/acme/widget/issues"' in out


def test_run_writes_json_output(tmp_path: Path) -> None:
    out_file = tmp_path / "project.json"

    main(
        [
            "run",
            str(tmp_path),
            "--no-env",
            "-D",
            "PROJECT_VERSION=1.2.3",
            "-j",
            str(out_file),
        ]
    )

    assert json.loads(out_file.read_text(encoding="utf-8"))["PROJECT_VERSION"] == "1.2.3"


def test_strict_run_reports_missing_values(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["run", str(tmp_path), "--dry", "--no-env", "-f", "--require-all"])

    assert excinfo.value.code == 1
    assert "projvar failed:" in capsys.readouterr().err


def test_bad_variable_reports_failure(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["run", str(tmp_path), "--dry", "--no-env", "-D", "no-separator"])

    assert excinfo.value.code == 1
    assert "Expected KEY=VALUE" in capsys.readouterr().err
