"""Per-language tree-sitter configurations."""

from __future__ import annotations

import importlib
import os
from types import ModuleType

import tree_sitter

_EXTENSION_MAP: dict[str, str] = {
    ".h": "c",
    ".c": "c",
}

_LANG_TO_MODULE: dict[str, str] = {
    "c": "capidoc.languages.c",
}

_PARSERS: dict[str, tree_sitter.Parser] = {}


def detect_language(filename: str) -> str | None:
    """Detect language from file extension."""
    _, ext = os.path.splitext(filename)
    return _EXTENSION_MAP.get(ext)


def get_language_module(language: str) -> ModuleType:
    """Get the language module for a given language."""
    module_path = _LANG_TO_MODULE.get(language)
    if module_path is None:
        msg = f"Unsupported language: {language}"
        raise ValueError(msg)
    return importlib.import_module(module_path)


def get_parser(language: str) -> tree_sitter.Parser:
    """Get the (cached) tree-sitter parser for a language."""
    parser = _PARSERS.get(language)
    if parser is None:
        mod = get_language_module(language)
        parser = tree_sitter.Parser(mod.get_language())
        _PARSERS[language] = parser
    return parser
