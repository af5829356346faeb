"""Doxygen-style comment parsing.

Standalone module: no tree-sitter, just string analysis.
"""

from __future__ import annotations

import re

from capidoc.engine._types import DocComment

_PARAM_RE = re.compile(r"^[@\\]param(?:\[[^\]]*\])?\s+(\w+)\s*(.*)$")
_RETURN_RE = re.compile(r"^[@\\]returns?\b\s*(.*)$")
_TAG_RE = re.compile(r"^[@\\](brief|file|defgroup|ingroup)\b\s*(.*)$")


def strip_comment_markers(text: str) -> str:
    """Remove ``/* */``, ``//`` and leading ``*`` decoration from comment text."""
    lines: list[str] = []
    for raw in text.split("\n"):
        line = raw.strip()
        if line.startswith("/*"):
            line = line.lstrip("/").lstrip("*").lstrip("!")
        elif line.startswith("//"):
            line = line.lstrip("/").lstrip("!")
        if line.endswith("*/"):
            line = line[:-2].rstrip("*")
        line = line.strip()
        if line.startswith("*"):
            line = line[1:]
        lines.append(line.strip())

    while lines and not lines[0]:
        lines.pop(0)
    while lines and not lines[-1]:
        lines.pop()
    return "\n".join(lines)


def parse_doc_comment(text: str, arg_names: set[str] | None = None) -> DocComment:
    """Split a comment into description, remaining prose and tags.

    ``@param`` lines naming one of *arg_names* are moved into ``params``;
    others stay in ``comments`` so callers can report them.
    """
    doc = DocComment()
    known = arg_names or set()
    paragraphs: list[list[str]] = [[]]
    current_tag: str | None = None

    for line in strip_comment_markers(text).split("\n"):
        if not line:
            current_tag = None
            if paragraphs[-1]:
                paragraphs.append([])
            continue

        param = _PARAM_RE.match(line)
        if param:
            name, desc = param.group(1), param.group(2).strip()
            if name in known:
                doc.params[name] = desc
                current_tag = f"param:{name}"
                continue
            current_tag = None
            paragraphs[-1].append(line)
            continue

        ret = _RETURN_RE.match(line)
        if ret:
            doc.returns = ret.group(1).strip()
            current_tag = "return"
            continue

        tag_match = _TAG_RE.match(line)
        if tag_match:
            tag, rest = tag_match.group(1), tag_match.group(2).strip()
            if tag == "file":
                doc.is_file = True
            elif tag == "brief":
                doc.brief = rest
            elif tag == "defgroup":
                doc.defgroup = rest
            else:
                doc.ingroup = rest
            current_tag = None
            continue

        # Continuation of a multi-line tag
        if current_tag == "return":
            doc.returns = f"{doc.returns} {line}".strip()
            continue
        if current_tag and current_tag.startswith("param:"):
            name = current_tag.split(":", 1)[1]
            doc.params[name] = f"{doc.params[name]} {line}".strip()
            continue

        paragraphs[-1].append(line)

    blocks = ["\n".join(p) for p in paragraphs if p]
    if blocks:
        doc.description = blocks[0]
        doc.comments = "\n\n".join(blocks[1:])
    if doc.brief and not doc.description:
        doc.description = doc.brief
    return doc
