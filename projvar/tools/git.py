"""Read-only access to a local git repository through the git CLI."""

from __future__ import annotations

import re
import subprocess
from datetime import UTC, datetime
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from ..logging import get_logger

_R_DIRTY_VERSION = re.compile(r"^[^-].+(-broken)?-dirty(-.+)?$")

_LOGGER = get_logger("git")


class GitError(RuntimeError):
    """Raised when a git command fails or the repository cannot be read."""

    def __init__(self, message: str, *, args: Iterable[str] | None = None) -> None:
        super().__init__(message)
        self.command = list(args) if args is not None else []


def is_git_dirty_version(version: str) -> bool:
    """Whether a ``git describe`` style version marks uncommitted changes."""
    return bool(_R_DIRTY_VERSION.match(version))


class GitRepo:
    """Thin wrapper over the git CLI, rooted at one working tree."""

    def __init__(self, root: Path, runner: Callable[..., str] | None = None) -> None:
        self._root = root
        self._runner = runner or self._default_runner

    @classmethod
    def open(cls, path: Path, runner: Callable[..., str] | None = None) -> "GitRepo":
        """Open the repository containing ``path``; raise ``GitError`` if there is none."""
        if not path.is_dir():
            raise GitError(f"{path} is not a directory")
        candidate = cls(path, runner)
        toplevel = candidate._run(["git", "rev-parse", "--show-toplevel"])
        if not toplevel:
            raise GitError(f"{path} is not inside a git repository")
        return cls(Path(toplevel), runner)

    @property
    def local_path(self) -> Path:
        return self._root

    def sha(self) -> Optional[str]:
        """SHA of the checked out commit, if there is one."""
        return self._run(["git", "rev-parse", "--verify", "--quiet", "HEAD"], allow_failure=True)

    def branch(self) -> Optional[str]:
        """Local name of the checked out branch; ``None`` on a detached HEAD."""
        return self._run(["git", "symbolic-ref", "--quiet", "--short", "HEAD"], allow_failure=True)

    def tag(self) -> Optional[str]:
        """Name of a tag pointing at HEAD, if any."""
        output = self._run(["git", "tag", "--points-at", "HEAD"], allow_failure=True)
        if not output:
            return None
        tags = sorted(line.strip() for line in output.splitlines() if line.strip())
        return tags[0] if tags else None

    def remote_name(self) -> Optional[str]:
        """Name of the main remote: the tracking remote, else ``origin``, else the only one."""
        branch = self.branch()
        if branch:
            tracking = self._run(
                ["git", "config", "--get", f"branch.{branch}.remote"], allow_failure=True
            )
            if tracking:
                return tracking
        remotes = self._remotes()
        if "origin" in remotes:
            return "origin"
        if len(remotes) == 1:
            return remotes[0]
        return None

    def remote_clone_url(self) -> Optional[str]:
        """Clone URL of the main remote, if there is one."""
        remote = self.remote_name()
        if remote is None:
            return None
        return self._run(["git", "remote", "get-url", remote], allow_failure=True)

    def version(self) -> str:
        """Version of the current state, as given by ``git describe``."""
        version = self._run(["git", "describe", "--tags", "--dirty", "--broken", "--always"])
        if not version:
            raise GitError("git describe produced no output")
        return version

    def commit_date(self, date_format: str) -> str:
        """Committer date of HEAD, formatted in UTC."""
        timestamp = self._run(["git", "log", "-1", "--format=%ct", "HEAD"])
        try:
            seconds = int(timestamp or "")
        except ValueError as exc:
            raise GitError(f"Unexpected commit timestamp '{timestamp}'") from exc
        return datetime.fromtimestamp(seconds, UTC).strftime(date_format)

    # ------------------------------------------------------------------
    # Internals

    def _remotes(self) -> List[str]:
        output = self._run(["git", "remote"], allow_failure=True) or ""
        return [line.strip() for line in output.splitlines() if line.strip()]

    def _run(self, args: List[str], *, allow_failure: bool = False) -> Optional[str]:
        try:
            output = self._runner(args, cwd=self._root, capture_output=True)
        except subprocess.CalledProcessError as exc:
            if allow_failure:
                _LOGGER.debug("git command failed (ignored): %s", " ".join(args))
                return None
            raise GitError(f"git command failed: {' '.join(args)}", args=args) from exc
        except FileNotFoundError as exc:
            raise GitError("git executable not found", args=args) from exc
        stripped = output.strip()
        return stripped or None

    @staticmethod
    def _default_runner(
        args: Iterable[str],
        *,
        cwd: Path,
        capture_output: bool = False,
    ) -> str:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            check=True,
            text=True,
            capture_output=capture_output,
        )
        return completed.stdout if capture_output else ""


__all__ = ["GitError", "GitRepo", "is_git_dirty_version"]
