"""Group assignment: buckets functions by naming convention."""

from __future__ import annotations

import re

from capidoc.schema import Snapshot

_HEADER_EXT_RE = re.compile(r"\.h$")


def group_for(name: str, file: str, prefix: str | None) -> str | None:
    """Resolve the group of one function, or None when it is ungrouped.

    ``lib_repo_open`` with prefix ``lib_`` lands in ``repo``; a name without
    an underscore after the prefix is grouped by its header path instead.
    """
    key = name[len(prefix) :] if prefix and name.startswith(prefix) else name
    group, sep, _rest = key.partition("_")
    if not group:
        return None
    if not sep:
        group = _HEADER_EXT_RE.sub("", file).replace("/", "_")
    return group


def assign_groups(
    snapshot: Snapshot,
    prefix: str | None,
    registry: dict[str, str],
) -> dict[str, list[str]]:
    """Assign a group to every function and return the sorted group map.

    The group is stored on each Function, written into *registry*
    (overwriting earlier revisions' entries) and the resulting
    ``group -> members`` map is kept on the snapshot.
    """
    groups: dict[str, list[str]] = {}
    for name, func in snapshot.functions.items():
        group = group_for(name, func.file, prefix)
        if group is None:
            continue
        func.group = group
        registry[name] = group
        groups.setdefault(group, []).append(name)

    snapshot.groups = {g: sorted(members) for g, members in sorted(groups.items())}
    return snapshot.groups
