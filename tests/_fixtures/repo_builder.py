"""Helper utilities for constructing temporary projects in tests."""

from __future__ import annotations

import subprocess
import textwrap
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple

from projvar.context import RunContext
from projvar.settings import Settings


class FakeGit:
    """Stands in for the git CLI; answers a fixed set of commands."""

    def __init__(self, root: Path, responses: Mapping[Tuple[str, ...], str]) -> None:
        self.root = root
        self.responses: Dict[Tuple[str, ...], str] = dict(responses)
        self.calls: List[Tuple[str, ...]] = []

    @classmethod
    def for_repo(
        cls,
        root: Path,
        *,
        version: Optional[str] = None,
        sha: Optional[str] = "0123456789abcdef0123456789abcdef01234567",
        branch: Optional[str] = "main",
        tag: Optional[str] = None,
        remote_url: Optional[str] = None,
        timestamp: int = 1_600_000_000,
    ) -> "FakeGit":
        responses: Dict[Tuple[str, ...], str] = {
            ("git", "log", "-1", "--format=%ct", "HEAD"): f"{timestamp}\n",
        }
        if sha is not None:
            responses[("git", "rev-parse", "--verify", "--quiet", "HEAD")] = sha + "\n"
        if version is not None:
            responses[("git", "describe", "--tags", "--dirty", "--broken", "--always")] = version + "\n"
        if branch is not None:
            responses[("git", "symbolic-ref", "--quiet", "--short", "HEAD")] = branch + "\n"
        if tag is not None:
            responses[("git", "tag", "--points-at", "HEAD")] = tag + "\n"
        if remote_url is not None:
            responses[("git", "remote")] = "origin\n"
            responses[("git", "remote", "get-url", "origin")] = remote_url + "\n"
        return cls(root, responses)

    def __call__(self, args, cwd, capture_output=False):  # type: ignore[no-untyped-def]
        key = tuple(args)
        self.calls.append(key)
        if key == ("git", "rev-parse", "--show-toplevel"):
            return f"{self.root}\n"
        if key in self.responses:
            return self.responses[key]
        raise subprocess.CalledProcessError(1, list(args))


def no_git(args, cwd, capture_output=False):  # type: ignore[no-untyped-def]
    """Runner behaving like a directory outside any git repository."""
    raise subprocess.CalledProcessError(128, list(args))


class RepoBuilder:
    """Utility for writing files into a throwaway project and building run contexts for it."""

    def __init__(self, tmp_path: Path, name: str = "widget") -> None:
        self.root = tmp_path / name
        self.root.mkdir()

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries into the project."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")

    def context(
        self,
        variables: Mapping[str, str] | None = None,
        *,
        git: FakeGit | None = None,
        **settings: object,
    ) -> RunContext:
        """Return a run context for the project; without ``git`` it is no repository."""
        run_settings = Settings(repo_path=self.root, **settings)  # type: ignore[arg-type]
        return RunContext(run_settings, variables or {}, git_runner=git or no_git)

    def path(self) -> Path:
        """Return the project root path."""
        return self.root


__all__ = ["FakeGit", "RepoBuilder", "no_git"]
