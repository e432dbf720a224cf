"""Shared fixtures: throwaway git repositories built with GitPython."""

from pathlib import Path

import git
import pytest


class RepoBuilder:
    """Build a small git history step by step.

    Example:
        builder.commit().tag("v1.4.0").commit(3)
        builder.branch("develop").commit(7)
    """

    def __init__(self, path: Path, branch: str = "master"):
        path.mkdir(parents=True, exist_ok=True)
        self.path = path
        self.repo = git.Repo.init(path)
        with self.repo.config_writer() as config:
            config.set_value("user", "name", "Test User")
            config.set_value("user", "email", "test@example.com")
            config.set_value("commit", "gpgsign", "false")
            config.set_value("tag", "gpgsign", "false")
        self.repo.git.symbolic_ref("HEAD", f"refs/heads/{branch}")
        self._counter = 0

    def commit(self, count: int = 1) -> "RepoBuilder":
        for _ in range(count):
            self._counter += 1
            (self.path / "file.txt").write_text(f"change {self._counter}\n")
            self.repo.git.add("file.txt")
            self.repo.git.commit("-m", f"Change {self._counter}")
        return self

    def tag(self, name: str) -> "RepoBuilder":
        self.repo.git.tag(name)
        return self

    def branch(self, name: str) -> "RepoBuilder":
        self.repo.git.checkout("-b", name)
        return self

    def detach(self) -> "RepoBuilder":
        self.repo.git.checkout("--detach")
        return self

    def make_dirty(self) -> "RepoBuilder":
        (self.path / "file.txt").write_text("local modification\n")
        return self

    @property
    def head_sha(self) -> str:
        return self.repo.head.commit.hexsha


@pytest.fixture
def repo_builder(tmp_path):
    """Factory for RepoBuilder instances in the test's temporary directory."""

    def _make(name: str = "repo", branch: str = "master") -> RepoBuilder:
        return RepoBuilder(tmp_path / name, branch=branch)

    return _make


@pytest.fixture
def export_dir(tmp_path) -> Path:
    """A directory that is not inside any git repository."""
    path = tmp_path / "export"
    path.mkdir()
    return path
