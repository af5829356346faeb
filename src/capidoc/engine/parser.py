"""Tree-sitter parsing of header files into records."""

from __future__ import annotations

import logging

import tree_sitter

from capidoc.engine._types import Record
from capidoc.languages import detect_language, get_language_module, get_parser

logger = logging.getLogger(__name__)

__all__ = ["Record", "parse_header"]


def parse_header(path: str, source: str, language: str | None = None) -> list[Record]:
    """Parse header text and return its records in source order.

    Args:
        path: Header path relative to the checked-out subtree; copied into
            every record's ``file`` field.
        source: The header text.
        language: Language identifier. Detected from *path* when omitted.

    Returns:
        Records for the functions, macros, types and file docs the header
        declares. Syntax errors are logged; whatever parsed is still returned.

    Raises:
        ValueError: if the language is unsupported or cannot be detected.
    """
    if language is None:
        language = detect_language(path)
        if language is None:
            msg = f"Cannot detect the language of {path}"
            raise ValueError(msg)

    lang_module = get_language_module(language)
    parser = get_parser(language)
    text = lang_module.prepare_source(source)
    tree: tree_sitter.Tree = parser.parse(text.encode("utf-8"))
    if tree.root_node.has_error:
        logger.debug("Parse errors detected in %s", path)

    return lang_module.extract_records(tree, path)
