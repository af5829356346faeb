"""Shared test fixtures."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import textwrap
from collections.abc import Mapping
from pathlib import Path

import pytest

from capidoc.schema import Function


class GitRepo:
    """A throwaway git repository for checkout and pipeline tests."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.root.mkdir()
        self.git("init", "-q")
        self.git("config", "user.name", "capidoc tests")
        self.git("config", "user.email", "tests@example.com")
        self.git("config", "commit.gpgsign", "false")
        self.git("config", "tag.gpgsign", "false")

    def git(self, *args: str) -> str:
        env = {k: v for k, v in os.environ.items() if not k.startswith("GIT_")}
        result = subprocess.run(
            ["git", *args],
            cwd=str(self.root),
            env=env,
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout.strip()

    def write(self, files: Mapping[str, str]) -> None:
        """Write ``path -> contents`` entries into the work tree."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")

    def remove(self, relative: str) -> None:
        (self.root / relative).unlink()

    def commit(self, message: str = "update") -> str:
        self.git("add", "-A")
        self.git("commit", "-q", "--allow-empty", "-m", message)
        return self.git("rev-parse", "HEAD")

    def tag(self, name: str) -> None:
        self.git("tag", name)


@pytest.fixture(autouse=True)
def _reset_logging():
    """Drop handlers the CLI installs so they do not outlive CliRunner streams."""
    yield
    root = logging.getLogger("capidoc")
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(logging.NOTSET)


@pytest.fixture
def git_repo(tmp_path: Path) -> GitRepo:
    """Provide an empty git repository under tmp_path."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    return GitRepo(tmp_path / "repo")


@pytest.fixture
def make_function():
    """Build Function entries with sensible defaults."""

    def _make(name: str, **fields: object) -> Function:
        fields.setdefault("file", "lib.h")
        return Function(name=name, **fields)  # type: ignore[arg-type]

    return _make

