"""Per-run context handed to sources, validators and sinks."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Callable, Dict, Iterable, Mapping, Optional

from .logging import get_logger
from .settings import Settings
from .store import CandidateStore
from .tools.git import GitError, GitRepo

_LOGGER = get_logger("context")

_UNSET = object()
_R_ESCAPED = re.compile(r'\\(["\\])')


class RunContext:
    """Input variables, settings, candidate store and the lazily opened repository of one run."""

    def __init__(
        self,
        settings: Settings | None = None,
        vars: Mapping[str, str] | None = None,
        *,
        git_runner: Callable[..., str] | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.vars: Mapping[str, str] = dict(vars or {})
        self.store = CandidateStore()
        self._git_runner = git_runner
        self._repo: object = _UNSET

    @property
    def repo(self) -> Optional[GitRepo]:
        """The repository at ``settings.repo_path``, opened on first access."""
        if self._repo is _UNSET:
            try:
                self._repo = GitRepo.open(self.settings.repo_path, self._git_runner)
            except GitError as exc:
                _LOGGER.debug("No git repository at %s: %s", self.settings.repo_path, exc)
                self._repo = None
        return self._repo  # type: ignore[return-value]

    def var(self, name: str) -> Optional[str]:
        """Return an input variable, treating empty values as absent."""
        value = self.vars.get(name)
        return value if value else None


def parse_key_value(text: str) -> tuple[str, str]:
    """Split ``KEY=VALUE``; raise ``ValueError`` when there is no key."""
    key, sep, value = text.partition("=")
    key = key.strip()
    if not sep or not key:
        raise ValueError(f"Expected KEY=VALUE, got '{text}'")
    return key, _unquote(value.strip())


def load_vars_file(path: Path) -> Dict[str, str]:
    """Read ``KEY=VALUE`` lines (BASH style, ``#`` comments allowed)."""
    variables: Dict[str, str] = {}
    for number, raw in enumerate(path.read_text(encoding="utf-8").splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :]
        try:
            key, value = parse_key_value(line)
        except ValueError as exc:
            raise ValueError(f"{path}:{number}: {exc}") from exc
        variables[key] = value
    return variables


def collect_vars(
    *,
    include_env: bool = True,
    files: Iterable[Path] = (),
    pairs: Iterable[str] = (),
) -> Dict[str, str]:
    """Merge input variables; later layers win (environment, files, then explicit pairs)."""
    variables: Dict[str, str] = dict(os.environ) if include_env else {}
    for path in files:
        variables.update(load_vars_file(path))
    for pair in pairs:
        key, value = parse_key_value(pair)
        variables[key] = value
    return variables


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] == "'":
        return value[1:-1]
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return _R_ESCAPED.sub(r"\1", value[1:-1])
    return value


__all__ = ["RunContext", "collect_vars", "load_vars_file", "parse_key_value"]
