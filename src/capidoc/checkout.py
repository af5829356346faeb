"""Isolated per-revision checkout of a repository subtree."""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from capidoc.git import GitContext, checkout_index, read_tree, revision_exists

logger = logging.getLogger(__name__)


def materialize(ctx: GitContext, revision: str, subpath: str, workdir: Path) -> bool:
    """Check out ``revision:subpath`` into *workdir* using a throwaway index.

    An empty *subpath* selects the repository root. Returns False, leaving
    *workdir* untouched, when the subtree does not exist at that revision.
    """
    subpath = subpath.strip("/")
    if not revision_exists(ctx, revision, subpath):
        logger.debug("%s:%s does not exist", revision, subpath)
        return False

    with tempfile.TemporaryDirectory(prefix="capidoc-index-") as index_dir:
        scoped = ctx.scoped(work_tree=workdir, index_file=Path(index_dir) / "index")
        read_tree(scoped, f"{revision}:{subpath}")
        checkout_index(scoped)
    return True


def find_files(root: Path, suffix: str) -> list[str]:
    """List files under *root* ending in *suffix*, as sorted POSIX paths relative to *root*."""
    return sorted(p.relative_to(root).as_posix() for p in root.rglob(f"*{suffix}") if p.is_file())
