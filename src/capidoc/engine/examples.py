"""Example linking: renders example sources and links the API calls in them."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from pathlib import Path

from capidoc.checkout import find_files
from capidoc.engine.literate import example_page_name, render_literate
from capidoc.schema import Function, Snapshot

logger = logging.getLogger(__name__)

EXAMPLE_SUFFIX = ".c"


def function_href(revision: str, func: Function) -> str:
    """Link from a rendered example back to the function's documentation."""
    if func.group:
        return f"../../#{revision}/group/{func.group}/{func.name}"
    return f"../../#{revision}/function/{func.name}"


def link_function_names(
    rendered: str,
    functions: Mapping[str, Function],
    revision: str,
    file: str,
    rel_path: str,
) -> str:
    """Wrap every known function name in *rendered* with an anchor.

    An occurrence must not be preceded by an identifier character and must
    be followed by a non-identifier character. Anchors are numbered per
    file in text order, and each one is recorded in the function's
    ``examples[file]`` list as ``rel_path#name-N``.
    """
    if not functions:
        return rendered
    names = sorted(functions, key=len, reverse=True)
    pattern = re.compile(r"(?<!\w)(" + "|".join(re.escape(n) for n in names) + r")(?=[^\w])")
    counter = 0

    def _anchor(match: re.Match[str]) -> str:
        nonlocal counter
        counter += 1
        name = match.group(1)
        anchor = f"{name}-{counter}"
        func = functions[name]
        func.examples.setdefault(file, []).append(f"{rel_path}#{anchor}")
        return f'<a name="{anchor}" class="fnlink" href="{function_href(revision, func)}">{name}</a>'

    return pattern.sub(_anchor, rendered)


def link_examples(
    snapshot: Snapshot,
    revision: str,
    examples_root: Path,
    outdir: Path,
) -> list[tuple[str, str]]:
    """Render every example under *examples_root* into ``outdir/ex/<revision>/``.

    Returns the ``(source file, rendered path)`` pairs, which are also
    appended to ``snapshot.examples``.
    """
    files = find_files(examples_root, EXAMPLE_SUFFIX)
    written: list[tuple[str, str]] = []
    if snapshot.examples is None:
        snapshot.examples = []

    for file in files:
        logger.debug("    # %s", file)
        source = (examples_root / file).read_text(encoding="utf-8", errors="replace")
        rendered = render_literate(file, source, files, language="c", revision=revision)

        rel_path = f"ex/{revision}/{example_page_name(file)}"
        linked = link_function_names(rendered, snapshot.functions, revision, file, rel_path)

        dest = outdir / rel_path
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_text(linked, encoding="utf-8")
        snapshot.examples.append((file, rel_path))
        written.append((file, rel_path))

    return written
