"""Literate rendering of example sources.

Splits a source file into sections, each made of the comment text that
introduces it and the code that follows, and lays them out side by side.
"""

from __future__ import annotations

import functools
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import PurePosixPath

from jinja2 import Environment, PackageLoader, select_autoescape

from capidoc.engine.comments import strip_comment_markers

TEMPLATE_NAME = "example.html.j2"


@dataclass
class Section:
    """Comment text and the code it documents."""

    docs: str = ""
    code: str = ""

    @property
    def paragraphs(self) -> list[str]:
        return [p.strip() for p in self.docs.split("\n\n") if p.strip()]


@dataclass
class _Builder:
    sections: list[Section] = field(default_factory=list)
    docs: list[str] = field(default_factory=list)
    code: list[str] = field(default_factory=list)

    def flush(self) -> None:
        docs = strip_comment_markers("\n".join(self.docs))
        code = "\n".join(self.code).strip("\n")
        if not docs and not code.strip():
            self.docs = []
            self.code = []
            return
        self.sections.append(Section(docs=docs, code=code))
        self.docs = []
        self.code = []

    def add_comment(self, line: str) -> None:
        if self.code:
            self.flush()
        self.docs.append(line)


def split_sections(source: str) -> list[Section]:
    """Split C source into sections at each comment following code.

    Whole-line ``//`` comments and ``/* */`` blocks become section text;
    comments sharing a line with code stay in the code.
    """
    builder = _Builder()
    in_block = False

    for line in source.split("\n"):
        stripped = line.strip()
        if in_block:
            builder.docs.append(stripped)
            if "*/" in stripped:
                in_block = False
            continue
        if stripped.startswith("//"):
            builder.add_comment(stripped)
            continue
        if stripped.startswith("/*"):
            end = stripped.find("*/", 2)
            if end == -1:
                builder.add_comment(stripped)
                in_block = True
                continue
            if not stripped[end + 2 :].strip():
                builder.add_comment(stripped)
                continue
        builder.code.append(line)

    builder.flush()
    return builder.sections


@functools.cache
def _environment() -> Environment:
    return Environment(
        loader=PackageLoader("capidoc", "templates"),
        autoescape=select_autoescape(["html", "j2"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )


def example_page_name(path: str) -> str:
    """Rendered file name for an example source: ``dir/general.c`` -> ``general.html``."""
    return PurePosixPath(path).stem + ".html"


def render_literate(
    path: str,
    source: str,
    siblings: Sequence[str],
    language: str = "c",
    revision: str = "",
) -> str:
    """Render one example source as an annotated HTML page."""
    template = _environment().get_template(TEMPLATE_NAME)
    return template.render(
        title=PurePosixPath(path).name,
        sources=[{"name": s, "href": example_page_name(s)} for s in siblings],
        sections=split_sections(source),
        language=language,
        revision=revision,
    )
