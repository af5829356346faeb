"""Record aggregation: folds parser records into a per-revision Snapshot."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from typing import Any

from capidoc.engine._types import Record
from capidoc.schema import (
    Argument,
    FileMeta,
    Function,
    Global,
    ReturnValue,
    Snapshot,
    Type,
)

logger = logging.getLogger(__name__)

# Record fields copied into each kind of entry; anything else is dropped.
FUNCTION_FIELDS = (
    "sig",
    "args",
    "argline",
    "returns",
    "file",
    "line",
    "lineto",
    "description",
    "comments",
)
TYPE_FIELDS = ("value", "file", "line", "lineto", "block", "tdef", "comments")
GLOBAL_FIELDS = ("value", "file", "line", "lineto", "comments")
META_FIELDS = ("brief", "defgroup", "ingroup", "comments")

FNPTR_LABEL = "function pointer"


def _wanted(record: Record, fields: tuple[str, ...]) -> dict[str, Any]:
    """Allow-listed fields the record actually carries."""
    out: dict[str, Any] = {}
    for name in fields:
        value = getattr(record, name)
        if value is None:
            continue
        if name == "args":
            value = [Argument(name=a.name, type=a.type, comment=a.comment) for a in value]
        elif name == "returns":
            value = ReturnValue(type=value.type, comment=value.comment)
        out[name] = value
    return out


def _upsert(entries: dict[str, Any], key: str, model: type[Any], values: dict[str, Any]) -> None:
    """Create *key* if missing, then overwrite the given fields."""
    entry = entries.get(key)
    if entry is None:
        entries[key] = model(name=key, **values)
        return
    for name, value in values.items():
        setattr(entry, name, value)


def enum_member_position(body: str, member: str) -> tuple[int, str]:
    """Line offset and assigned value of *member* inside an enum body.

    The offset counts the newlines before the member's first textual
    occurrence; the value is the ``= expr`` following it, up to the next
    comma or closing brace, or "" when it has none.
    """
    match = re.search(re.escape(member), body)
    if match is None:
        return 0, ""
    offset = body.count("\n", 0, match.start())
    value_match = re.match(r"\s*=\s*([^,}]+)", body[match.end() :])
    value = value_match.group(1).strip() if value_match else ""
    return offset, value


class ApiAggregator:
    """Builds one Snapshot from the records of every header in a revision."""

    def __init__(self, prefix: str = "") -> None:
        self.snapshot = Snapshot(prefix=prefix)

    def add_file(self, path: str, records: Iterable[Record]) -> FileMeta:
        """Fold the records of one header. Always appends exactly one FileMeta."""
        meta = FileMeta(file=path)
        for record in records:
            if record.lineto > meta.lines:
                meta.lines = record.lineto
            self._add_record(record, meta)
        self.snapshot.files.append(meta)
        logger.debug("%s: %d functions", path, len(meta.functions))
        return meta

    def _add_record(self, r: Record, meta: FileMeta) -> None:
        snap = self.snapshot

        if r.kind == "function":
            if not r.name:
                return
            _upsert(snap.functions, r.name, Function, _wanted(r, FUNCTION_FIELDS))
            meta.functions.append(r.name)

        elif r.kind in ("define", "macro"):
            key = r.decl if isinstance(r.decl, str) else r.name
            if not key:
                return
            _upsert(snap.globals, key, Global, _wanted(r, GLOBAL_FIELDS))

        elif r.kind == "file":
            for name, value in _wanted(r, META_FIELDS).items():
                setattr(meta.meta, name, value)

        elif r.kind == "enum":
            if r.name:
                values = _wanted(r, TYPE_FIELDS)
                _upsert(snap.types, r.name, Type, {"kind": "enum", **values})
            else:
                self._explode_enum(r)

        elif r.kind in ("struct", "fnptr"):
            if not r.name:
                return
            values = _wanted(r, TYPE_FIELDS)
            values.setdefault("value", r.name)
            kind = FNPTR_LABEL if r.kind == "fnptr" else "struct"
            _upsert(snap.types, r.name, Type, {"kind": kind, **values})

    def _explode_enum(self, r: Record) -> None:
        """Turn each member of an unnamed enum into a global."""
        members = r.decl if isinstance(r.decl, tuple) else ()
        body = r.body or ""
        for member in members:
            if member in self.snapshot.globals:
                continue
            offset, value = enum_member_position(body, member)
            self.snapshot.globals[member] = Global(
                name=member,
                value=value,
                file=r.file,
                line=r.line + offset,
                lineto=r.line + offset,
                comments=r.comments or "",
            )

    def finish(self) -> Snapshot:
        """Sort types by name and return the snapshot."""
        self.snapshot.types = dict(sorted(self.snapshot.types.items()))
        return self.snapshot
