"""CLI entrypoints for projvar commands."""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from .config import ConfigError, load_config
from .context import RunContext, collect_vars
from .keys import ALL_KEYS, Key, list_keys
from .logging import Verbosity, configure_logging
from .runner import ResolutionError, ResolutionRunner
from .settings import FailOn, Overwrite, RetrievedMode, Settings, ShowRetrieved
from .sinks import BashFileSink, EnvSink, JsonFileSink, Sink, SinkError
from .sources import SourceError, default_sources
from .tools.hosting import HostingType

DEFAULT_LOG_FILE = "projvar.log.txt"

# Marks "show retrieved values in the log" as opposed to writing them to a file.
_TO_LOG = "-"


def _add_verbosity_options(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    default: object = argparse.SUPPRESS if suppress_default else False
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=default,
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        default=default,
        help="Only log errors on the console.",
    )


def _add_run_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )
    inputs = parser.add_argument_group("inputs")
    inputs.add_argument(
        "-D",
        "--variable",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Set an input variable; may be given multiple times.",
    )
    inputs.add_argument(
        "-I",
        "--variables-file",
        action="append",
        default=[],
        type=Path,
        metavar="FILE",
        help="Read input variables from a file of KEY=VALUE lines; may be given multiple times.",
    )
    inputs.add_argument(
        "--no-env",
        action="store_true",
        help="Do not read input variables from the process environment.",
    )

    outputs = parser.add_argument_group("outputs")
    outputs.add_argument(
        "-o",
        "--file-out",
        type=Path,
        metavar="FILE",
        help="Write the resolved values to a BASH-sourceable file.",
    )
    outputs.add_argument(
        "-j",
        "--json-out",
        type=Path,
        metavar="FILE",
        help="Write the resolved values to a JSON file.",
    )
    outputs.add_argument(
        "-e",
        "--env-out",
        action="store_true",
        help="Export the resolved values as environment variables (default without file outputs).",
    )
    outputs.add_argument(
        "--dry",
        action="store_true",
        help="Resolve and print the values, but do not write any output.",
    )
    outputs.add_argument(
        "--overwrite",
        choices=[mode.value for mode in Overwrite],
        help="Which pre-existing output values may be replaced.",
    )
    outputs.add_argument(
        "-a",
        "--set-all",
        action="store_true",
        default=None,
        help="Also set the well-known alternative variable names.",
    )
    outputs.add_argument(
        "--key-prefix",
        help="Prefix of the output variable names (default: PROJECT_).",
    )

    policy = parser.add_argument_group("policy")
    policy.add_argument(
        "-f",
        "--fail",
        action="store_true",
        help="Fail if a required value is missing or invalid.",
    )
    policy.add_argument(
        "-R",
        "--require",
        action="append",
        default=[],
        metavar="KEY",
        help="Mark a key as required; may be given multiple times.",
    )
    required_mode = policy.add_mutually_exclusive_group()
    required_mode.add_argument(
        "--require-all",
        action="store_true",
        help="Mark all keys as required.",
    )
    required_mode.add_argument(
        "--require-none",
        action="store_true",
        help="Mark no key as required (apart from those given with --require).",
    )
    policy.add_argument(
        "--only-required",
        action="store_true",
        default=None,
        help="Only output the required keys.",
    )
    policy.add_argument(
        "-F",
        "--date-format",
        help="strftime format for generated dates.",
    )
    policy.add_argument(
        "-t",
        "--hosting-type",
        type=HostingType.parse,
        help="Hosting software of the repository, when it can not be told from the URL.",
    )

    diagnostics = parser.add_argument_group("diagnostics")
    shown = diagnostics.add_mutually_exclusive_group()
    shown.add_argument(
        "-s",
        "--show-retrieved",
        nargs="?",
        const=_TO_LOG,
        metavar="FILE",
        help="Show the resolved values, in the log or written to FILE.",
    )
    shown.add_argument(
        "-A",
        "--show-all-retrieved",
        nargs="?",
        const=_TO_LOG,
        metavar="FILE",
        help="Show every value every source retrieved, in the log or written to FILE.",
    )
    diagnostics.add_argument(
        "-L",
        "--log-file",
        nargs="?",
        const=Path(DEFAULT_LOG_FILE),
        type=Path,
        metavar="FILE",
        help=f"Write a detailed log to FILE (default: {DEFAULT_LOG_FILE}).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="projvar",
        description="Resolve project properties (version, repository URLs, ...) from many sources.",
    )
    _add_verbosity_options(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser(
        "run",
        help="Resolve the project properties and write them to the selected outputs.",
    )
    _add_verbosity_options(run_parser, suppress_default=True)
    _add_run_options(run_parser)

    list_parser = subparsers.add_parser(
        "list",
        help="List the known properties; required ones are marked with '*'.",
    )
    _add_verbosity_options(list_parser, suppress_default=True)
    list_parser.add_argument(
        "-a",
        "--alt-names",
        action="store_true",
        help="Also list the alternative variable names of each property.",
    )

    return parser


def _verbosity(args: argparse.Namespace) -> Verbosity:
    return Verbosity.from_flags(verbose=bool(args.verbose), quiet=bool(args.quiet))


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for projvar commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command == "list":
        configure_logging(_verbosity(args))
        for line in list_keys(alt_names=bool(args.alt_names)):
            print(line)
        return

    verbosity = _verbosity(args)
    configure_logging(verbosity, log_file=args.log_file, file_verbosity=verbosity.raised(2))
    try:
        settings = _build_settings(args)
        variables = collect_vars(
            include_env=not args.no_env,
            files=args.variables_file,
            pairs=args.variable,
        )
        ctx = RunContext(settings, variables)
        runner = ResolutionRunner(ctx, default_sources(), _build_sinks(args))
        values = runner.run()
    except (ConfigError, ResolutionError, SourceError, SinkError, OSError, ValueError) as exc:
        parser.exit(1, f"projvar failed: {exc}\nRun with --verbose for more details.\n")

    if args.dry:
        for _key, variable, value in values:
            print(f'{variable.key(settings.key_prefix)}="{value}"')


def _build_settings(args: argparse.Namespace) -> Settings:
    repo_path = Path(args.path).expanduser().resolve()
    config = load_config(repo_path)
    settings = Settings.from_config(
        config,
        repo_path=repo_path,
        key_prefix=args.key_prefix,
        date_format=args.date_format,
        hosting_type=args.hosting_type,
        overwrite=Overwrite(args.overwrite) if args.overwrite else None,
        fail_on=FailOn.ANY_MISSING_VALUE if args.fail else None,
        only_required=args.only_required,
        set_all=args.set_all,
        show_retrieved=_show_retrieved(args),
    )
    required = set(settings.required_keys)
    if args.require_all:
        required = set(ALL_KEYS)
    elif args.require_none:
        required = set()
    required.update(Key.parse(name, prefix=settings.key_prefix) for name in args.require)
    return replace(settings, required_keys=frozenset(required))


def _show_retrieved(args: argparse.Namespace) -> Optional[ShowRetrieved]:
    if args.show_all_retrieved is not None:
        mode, target = RetrievedMode.ALL, args.show_all_retrieved
    elif args.show_retrieved is not None:
        mode, target = RetrievedMode.PRIMARY, args.show_retrieved
    else:
        return None
    return ShowRetrieved(mode=mode, target=None if target == _TO_LOG else Path(target))


def _build_sinks(args: argparse.Namespace) -> List[Sink]:
    if args.dry:
        return []
    sinks: List[Sink] = []
    if args.env_out or (args.file_out is None and args.json_out is None):
        sinks.append(EnvSink())
    if args.file_out is not None:
        sinks.append(BashFileSink(args.file_out))
    if args.json_out is not None:
        sinks.append(JsonFileSink(args.json_out))
    return sinks


if __name__ == "__main__":
    main(sys.argv[1:])
