"""Shared types for the capidoc engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

RecordKind = Literal["function", "define", "macro", "file", "enum", "struct", "fnptr"]


@dataclass(frozen=True)
class Argument:
    """A single function parameter."""

    name: str
    type: str
    comment: str = ""


@dataclass(frozen=True)
class ReturnValue:
    """Return type of a function and its documentation."""

    type: str
    comment: str = ""


@dataclass(frozen=True)
class Record:
    """A single fact emitted by the header parser.

    Only the fields relevant to ``kind`` are populated; the rest stay None.
    For enum records ``decl`` is the tuple of enumerator identifiers, for
    define/macro records it is the macro name.
    """

    kind: RecordKind
    file: str
    line: int = 0
    lineto: int = 0
    name: str | None = None
    decl: str | tuple[str, ...] | None = None
    value: str | None = None
    args: tuple[Argument, ...] | None = None
    argline: str | None = None
    sig: str | None = None
    returns: ReturnValue | None = None
    description: str | None = None
    comments: str | None = None
    block: str | None = None
    tdef: str | None = None
    body: str | None = None
    brief: str | None = None
    defgroup: str | None = None
    ingroup: str | None = None


@dataclass
class DocComment:
    """Parsed doxygen-style comment block."""

    description: str = ""
    comments: str = ""
    params: dict[str, str] = field(default_factory=dict)
    returns: str = ""
    brief: str | None = None
    defgroup: str | None = None
    ingroup: str | None = None
    is_file: bool = False
