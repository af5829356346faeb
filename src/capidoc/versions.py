"""Revision enumeration and version-aware ordering."""

from __future__ import annotations

import re
from collections.abc import Iterable

from capidoc.git import GitContext, list_tags

CURRENT_REVISION = "HEAD"
"""Synthetic marker for the current, untagged state. Always processed last."""

_RUN_RE = re.compile(r"[0-9]+|[^0-9]+")


def version_key(tag: str) -> tuple[tuple[int, int, str], ...]:
    """Sort key comparing digit runs numerically and other runs lexically.

    A numeric run sorts before a non-numeric run at the same position.
    """
    key: list[tuple[int, int, str]] = []
    for run in _RUN_RE.findall(tag):
        if run.isdigit():
            key.append((0, int(run), ""))
        else:
            key.append((1, 0, run))
    return tuple(key)


def sort_versions(tags: Iterable[str]) -> list[str]:
    """Order tags ascending by version. Ties keep their input order."""
    return sorted(tags, key=version_key)


def list_revisions(ctx: GitContext) -> list[str]:
    """Return every tag in version order followed by the current marker."""
    revisions = sort_versions(list_tags(ctx))
    revisions.append(CURRENT_REVISION)
    return revisions
