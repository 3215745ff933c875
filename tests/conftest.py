from __future__ import annotations

from pathlib import Path

import pytest

from projvar.context import RunContext
from projvar.settings import Settings
from tests._fixtures.repo_builder import RepoBuilder, no_git


@pytest.fixture
def repo_builder(tmp_path: Path) -> RepoBuilder:
    """Provide a reusable project builder rooted at the pytest tmp_path."""
    return RepoBuilder(tmp_path)


@pytest.fixture
def ctx(tmp_path: Path) -> RunContext:
    """A context without input variables and without a git repository."""
    return RunContext(Settings(repo_path=tmp_path), {}, git_runner=no_git)
