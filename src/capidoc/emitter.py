"""Output: per-revision artifacts, the project manifest and publishing."""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path

from capidoc.config import ProjectConfig
from capidoc.git import (
    COMMIT_MESSAGE,
    GitContext,
    add_all,
    commit_tree,
    resolve_ref,
    update_ref,
    write_tree,
)
from capidoc.schema import ProjectManifest, Snapshot

logger = logging.getLogger(__name__)

MANIFEST_NAME = "project.json"


def snapshot_path(outdir: Path, revision: str) -> Path:
    return outdir / f"{revision}.json"


def write_snapshot(outdir: Path, revision: str, snapshot: Snapshot) -> Path:
    """Serialize one revision's snapshot to ``<revision>.json``."""
    path = snapshot_path(outdir, revision)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(snapshot.model_dump_json(), encoding="utf-8")
    return path


def write_manifest(outdir: Path, manifest: ProjectManifest) -> Path:
    """Serialize the cross-revision manifest to ``project.json``."""
    path = outdir / MANIFEST_NAME
    path.write_text(manifest.model_dump_json(), encoding="utf-8")
    return path


def publish_to_branch(ctx: GitContext, outdir: Path, branch: str) -> str:
    """Commit *outdir* as the new tip of *branch* and return the commit sha.

    The previous tip, when the branch exists, becomes the parent.
    """
    ref = f"refs/heads/{branch}"
    logger.info("* writing to branch %s", branch)
    with tempfile.TemporaryDirectory(prefix="capidoc-index-") as index_dir:
        scoped = ctx.scoped(work_tree=outdir, index_file=Path(index_dir) / "index")
        parent = resolve_ref(scoped, ref)
        add_all(scoped)
        tree = write_tree(scoped)
        logger.info("\twrote tree   %s", tree)
        commit = commit_tree(scoped, tree, parent, COMMIT_MESSAGE)
        logger.info("\twrote commit %s", commit)
        update_ref(scoped, ref, commit, COMMIT_MESSAGE)
        logger.info("\tupdated %s", branch)
    return commit


def copy_output(outdir: Path, final_dir: Path) -> Path:
    """Copy the generated tree into *final_dir*, merging with what is there."""
    logger.info("* output html in %s", final_dir)
    final_dir.mkdir(parents=True, exist_ok=True)
    shutil.copytree(outdir, final_dir, dirs_exist_ok=True)
    return final_dir


def publish(ctx: GitContext, outdir: Path, config: ProjectConfig) -> str | Path:
    """Publish to the configured branch, or copy to the output directory."""
    if config.branch:
        return publish_to_branch(ctx, outdir, config.branch)
    return copy_output(outdir, config.output_dir)
