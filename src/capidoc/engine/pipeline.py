"""End-to-end pipeline: tagged revisions → per-revision snapshots → manifest."""

from __future__ import annotations

import logging
import tempfile
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from capidoc.checkout import find_files, materialize
from capidoc.config import ProjectConfig
from capidoc.emitter import publish, write_manifest, write_snapshot
from capidoc.engine._types import Record
from capidoc.engine.aggregator import ApiAggregator
from capidoc.engine.audit import audit_snapshot, log_audit
from capidoc.engine.examples import link_examples
from capidoc.engine.groups import assign_groups
from capidoc.engine.history import SignatureChange, SignatureHistory
from capidoc.engine.parser import parse_header
from capidoc.engine.usage import resolve_type_usage
from capidoc.git import GitContext, find_git_dir
from capidoc.schema import ApiAudit, ProjectManifest, Snapshot
from capidoc.versions import CURRENT_REVISION, list_revisions

logger = logging.getLogger(__name__)

HeaderParser = Callable[[str, str], list[Record]]
"""(path, text) -> records."""

HEADER_SUFFIX = ".h"


@dataclass
class ProjectState:
    """Cross-revision state, folded once per processed revision."""

    signatures: SignatureHistory = field(default_factory=SignatureHistory)
    groups: dict[str, str] = field(default_factory=dict)
    revisions: list[str] = field(default_factory=list)
    audit: ApiAudit | None = None

    def manifest(self, config: ProjectConfig) -> ProjectManifest:
        return ProjectManifest(
            versions=list(reversed(self.revisions)),
            name=config.name,
            github=config.github,
            signatures=self.signatures.records,
            groups=dict(sorted(self.groups.items())),
        )


def build_snapshot(
    header_root: Path,
    prefix: str,
    parse: HeaderParser = parse_header,
) -> Snapshot:
    """Parse and aggregate every header under *header_root*."""
    aggregator = ApiAggregator(prefix=prefix)
    for header in find_files(header_root, HEADER_SUFFIX):
        text = (header_root / header).read_text(encoding="utf-8", errors="replace")
        aggregator.add_file(header, parse(header, text))
    return aggregator.finish()


def analyze_snapshot(
    snapshot: Snapshot,
    revision: str,
    name_prefix: str | None,
    state: ProjectState,
) -> list[SignatureChange]:
    """Group, resolve type usage and fold *snapshot* into *state*."""
    assign_groups(snapshot, name_prefix, state.groups)
    resolve_type_usage(snapshot)
    changes = state.signatures.tally(revision, snapshot.functions)
    state.revisions.append(revision)
    return changes


def process_revision(
    ctx: GitContext,
    revision: str,
    config: ProjectConfig,
    state: ProjectState,
    outdir: Path,
    parse: HeaderParser = parse_header,
) -> Snapshot:
    """Extract, analyze, link and write out one revision."""
    logger.info("  - processing version %s", revision)
    header_prefix = config.option_for(revision, "input", "") or ""
    name_prefix = config.option_for(revision, "prefix")

    with tempfile.TemporaryDirectory(prefix="capidoc-") as workdir:
        root = Path(workdir)
        materialize(ctx, revision, header_prefix, root)
        snapshot = build_snapshot(root, header_prefix, parse)

    changes = analyze_snapshot(snapshot, revision, name_prefix, state)

    examples = config.option_for(revision, "examples")
    if examples:
        with tempfile.TemporaryDirectory(prefix="capidoc-ex-") as exdir:
            root = Path(exdir)
            if materialize(ctx, revision, examples, root):
                logger.info("  - processing examples for %s", revision)
                link_examples(snapshot, revision, root, outdir)

    if revision == CURRENT_REVISION:
        state.audit = audit_snapshot(revision, snapshot, changes)
        log_audit(state.audit)

    write_snapshot(outdir, revision, snapshot)
    return snapshot


def generate_docs(
    config: ProjectConfig,
    parse: HeaderParser = parse_header,
) -> ProjectState:
    """Process every revision in order, write the manifest and publish."""
    logger.info("* generating docs")
    ctx = GitContext(git_dir=find_git_dir(config.project_dir))
    state = ProjectState()

    with tempfile.TemporaryDirectory(prefix="capidoc-out-") as out:
        outdir = Path(out)
        for revision in list_revisions(ctx):
            process_revision(ctx, revision, config, state, outdir, parse)
        write_manifest(outdir, state.manifest(config))
        publish(ctx, outdir, config)

    return state
