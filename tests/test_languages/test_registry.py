"""Tests for language detection and the parser registry."""

from __future__ import annotations

import pytest

from capidoc.engine.parser import parse_header
from capidoc.languages import detect_language, get_language_module, get_parser


def test_detect_c() -> None:
    assert detect_language("include/git2/repository.h") == "c"
    assert detect_language("examples/general.c") == "c"


def test_detect_unknown() -> None:
    assert detect_language("file.rs") is None
    assert detect_language("README.md") is None


def test_unsupported_language_module() -> None:
    with pytest.raises(ValueError, match="Unsupported language"):
        get_language_module("cobol")


def test_parser_is_cached() -> None:
    assert get_parser("c") is get_parser("c")


def test_parse_header_detects_language() -> None:
    records = parse_header("include/lib.h", "int lib_init(void);\n")
    assert [r.name for r in records] == ["lib_init"]


def test_parse_header_rejects_unknown_extension() -> None:
    with pytest.raises(ValueError, match="Cannot detect the language"):
        parse_header("notes.txt", "int lib_init(void);\n")
