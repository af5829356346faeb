"""Shared utilities for language modules."""

from __future__ import annotations

import tree_sitter


def node_text(node: tree_sitter.Node) -> str:
    """Safely get the text of a tree-sitter node."""
    text = node.text
    if text is None:
        return ""
    return text.decode("utf-8")


def squash(text: str) -> str:
    """Collapse runs of whitespace into single spaces."""
    return " ".join(text.split())


def start_line(node: tree_sitter.Node) -> int:
    """1-based line a node starts on."""
    return node.start_point.row + 1


def end_line(node: tree_sitter.Node) -> int:
    """1-based last line a node covers (a trailing newline does not count)."""
    row, column = node.end_point.row, node.end_point.column
    if column == 0 and row > node.start_point.row:
        return row
    return row + 1
