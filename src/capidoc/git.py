"""Git plumbing for versioned checkouts and publishing.

All git subprocess calls live here. Nothing else touches git.

Every call takes an explicit :class:`GitContext` that names the repository,
work tree and index to use. The context is turned into a per-call
environment, so the process environment is never modified and calls with
different contexts cannot leak state into each other.
"""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

COMMIT_MESSAGE = "generated docs"


class GitError(RuntimeError):
    """Raised when a git command exits with a non-zero status."""

    def __init__(self, args: list[str], returncode: int, stderr: str) -> None:
        first_line = stderr.strip().split("\n")[0] if stderr.strip() else "unknown error"
        super().__init__(f"git {' '.join(args)} failed ({returncode}): {first_line}")
        self.git_args = args
        self.returncode = returncode
        self.stderr = stderr


@dataclass(frozen=True)
class GitContext:
    """Repository, work tree and index location for one git invocation."""

    git_dir: Path
    work_tree: Path | None = None
    index_file: Path | None = None

    def env(self) -> dict[str, str]:
        """Build the subprocess environment for this context."""
        env = os.environ.copy()
        for key in ("GIT_DIR", "GIT_WORK_TREE", "GIT_INDEX_FILE"):
            env.pop(key, None)
        env["GIT_DIR"] = str(self.git_dir)
        if self.work_tree is not None:
            env["GIT_WORK_TREE"] = str(self.work_tree)
        if self.index_file is not None:
            env["GIT_INDEX_FILE"] = str(self.index_file)
        return env

    def scoped(self, work_tree: Path | None, index_file: Path | None) -> GitContext:
        """Return a context on the same repository with another work tree/index."""
        return GitContext(git_dir=self.git_dir, work_tree=work_tree, index_file=index_file)


def _run(
    ctx: GitContext,
    args: list[str],
    *,
    input_text: str | None = None,
) -> subprocess.CompletedProcess[str]:
    cwd = ctx.work_tree if ctx.work_tree is not None else ctx.git_dir
    logger.debug("git %s", " ".join(args))
    return subprocess.run(
        ["git", *args],
        capture_output=True,
        text=True,
        cwd=str(cwd),
        env=ctx.env(),
        input=input_text,
        check=False,
    )


def run_git(ctx: GitContext, args: list[str], *, input_text: str | None = None) -> str:
    """Run a git command and return its stripped stdout.

    Raises:
        GitError: if git exits with a non-zero status.
    """
    result = _run(ctx, args, input_text=input_text)
    if result.returncode != 0:
        err = GitError(args, result.returncode, result.stderr)
        logger.error("%s", err)
        raise err
    return result.stdout.strip()


def find_git_dir(project_dir: str | Path) -> Path:
    """Resolve the git directory of the repository containing *project_dir*."""
    result = subprocess.run(
        ["git", "rev-parse", "--absolute-git-dir"],
        capture_output=True,
        text=True,
        cwd=str(project_dir),
        check=False,
    )
    if result.returncode != 0:
        stderr = result.stderr.strip()
        first_line = stderr.split("\n")[0] if stderr else "unknown error"
        if "not a git repository" in stderr.lower():
            msg = f"Not a git repository: {project_dir}"
        else:
            msg = f"git rev-parse failed: {first_line}"
        logger.error(msg)
        raise RuntimeError(msg)
    return Path(result.stdout.strip())


def list_tags(ctx: GitContext) -> list[str]:
    """List every tag in the repository, unsorted."""
    out = run_git(ctx, ["tag"])
    return [t for t in out.split("\n") if t.strip()]


def revision_exists(ctx: GitContext, revision: str, path: str = "") -> bool:
    """Check whether ``revision:path`` names an object. Never raises."""
    result = _run(ctx, ["rev-parse", "--verify", "--quiet", f"{revision}:{path}"])
    return result.returncode == 0


def read_tree(ctx: GitContext, treeish: str) -> None:
    """Populate the context's index from *treeish*."""
    run_git(ctx, ["read-tree", treeish])


def checkout_index(ctx: GitContext) -> None:
    """Materialize every index entry into the context's work tree."""
    run_git(ctx, ["checkout-index", "-a", "-f"])


def add_all(ctx: GitContext) -> None:
    """Stage the whole work tree into the context's index."""
    run_git(ctx, ["add", "-A", "."])


def write_tree(ctx: GitContext) -> str:
    """Write the index as a tree object and return its sha."""
    return run_git(ctx, ["write-tree"])


def commit_tree(
    ctx: GitContext,
    tree: str,
    parent: str | None = None,
    message: str = COMMIT_MESSAGE,
) -> str:
    """Create a commit object for *tree* and return its sha."""
    args = ["commit-tree", tree]
    if parent:
        args += ["-p", parent]
    return run_git(ctx, args, input_text=message + "\n")


def update_ref(ctx: GitContext, ref: str, sha: str, message: str = COMMIT_MESSAGE) -> None:
    """Point *ref* at *sha*."""
    run_git(ctx, ["update-ref", "-m", message, ref, sha])


def resolve_ref(ctx: GitContext, ref: str) -> str | None:
    """Return the commit *ref* points at, or None when it does not exist."""
    result = _run(ctx, ["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"])
    if result.returncode != 0:
        return None
    return result.stdout.strip() or None
