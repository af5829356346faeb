"""capidoc output schema: Pydantic v2 models."""

from __future__ import annotations

import json
from typing import Literal

from pydantic import BaseModel, Field


class Argument(BaseModel):
    """A documented function parameter."""

    name: str
    type: str
    comment: str = ""


class ReturnValue(BaseModel):
    """A function's return type and its documentation."""

    type: str = ""
    comment: str = ""


class Function(BaseModel):
    """A public function declaration."""

    name: str
    sig: str | None = None
    args: list[Argument] = []
    argline: str = ""
    returns: ReturnValue = ReturnValue()
    file: str = ""
    line: int = 0
    lineto: int = 0
    description: str = ""
    comments: str = ""
    group: str | None = None
    examples: dict[str, list[str]] = {}


class TypeUsage(BaseModel):
    """Functions that return or take a type."""

    returns: list[str] = []
    needs: list[str] = []


class Type(BaseModel):
    """An enum, struct or function pointer type."""

    name: str
    kind: Literal["enum", "struct", "function pointer"]
    value: str | None = None
    file: str = ""
    line: int = 0
    lineto: int = 0
    block: str = ""
    tdef: str | None = None
    comments: str = ""
    used: TypeUsage = TypeUsage()


class Global(BaseModel):
    """A macro, define or enumerator constant."""

    name: str
    value: str = ""
    file: str = ""
    line: int = 0
    lineto: int = 0
    comments: str = ""


class FileInfo(BaseModel):
    """File-level documentation tags."""

    brief: str | None = None
    defgroup: str | None = None
    ingroup: str | None = None
    comments: str | None = None


class FileMeta(BaseModel):
    """A processed header file."""

    file: str
    functions: list[str] = []
    meta: FileInfo = FileInfo()
    lines: int = 0


class Snapshot(BaseModel):
    """The complete API model for one revision."""

    prefix: str = ""
    files: list[FileMeta] = []
    functions: dict[str, Function] = {}
    globals: dict[str, Global] = {}
    types: dict[str, Type] = {}
    groups: dict[str, list[str]] = {}
    examples: list[tuple[str, str]] | None = None


class SignatureRecord(BaseModel):
    """Where a function exists and where its signature changed.

    ``changes`` is a set keyed by revision; it serializes as ``{rev: true}``.
    """

    exists: list[str] = []
    changes: dict[str, bool] = {}


class ProjectManifest(BaseModel):
    """Cross-revision project index."""

    versions: list[str]
    name: str | None = None
    github: str | None = None
    signatures: dict[str, SignatureRecord] = {}
    groups: dict[str, str] = {}


class SignatureFinding(BaseModel):
    """A signature change detected at the audited revision."""

    name: str
    category: str
    before: str | None = None
    after: str | None = None


class ApiAudit(BaseModel):
    """Consistency findings for the current revision."""

    revision: str
    unmatched_params: list[str] = Field(default_factory=list)
    signature_changes: list[SignatureFinding] = Field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not self.unmatched_params and not self.signature_changes


def export_json_schema(model: type[BaseModel] = ProjectManifest) -> str:
    """Export the JSON schema of an artifact model as a string."""
    return json.dumps(model.model_json_schema(), indent=2)
