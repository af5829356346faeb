"""C header support.

Walks a tree-sitter-c syntax tree and emits :class:`Record` objects for the
declarations a public header exposes: function prototypes, macros, enums,
structs/unions, function pointer typedefs and file-level doc blocks.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

import tree_sitter
import tree_sitter_c

from capidoc.engine._types import Argument, DocComment, Record, ReturnValue
from capidoc.engine.comments import parse_doc_comment
from capidoc.languages._utils import end_line, node_text, squash, start_line

_CONTAINERS = {
    "preproc_ifdef",
    "preproc_if",
    "preproc_else",
    "preproc_elif",
    "declaration_list",
}
_RECORD_SPECIFIERS = {"struct_specifier", "union_specifier"}
_IDENTIFIERS = {"identifier", "type_identifier", "field_identifier"}
_FILE_TAG_RE = re.compile(r"[@\\](file|defgroup|ingroup)\b")

# GIT_EXTERN(int) -> int
_EXPORT_MACRO_RE = re.compile(r"\b[A-Z_][A-Z0-9_]*\s*\(([^()]*)\)")
_STORAGE_RE = re.compile(r"\b(extern|static|inline|__inline__|__inline)\b")

# GIT_BEGIN_DECL on a line of its own
_BARE_MACRO_RE = re.compile(r"^\s*[A-Z_][A-Z0-9_]*\s*$")
# GIT_EXTERN(int) git_libgit2_init(void); -> int git_libgit2_init(void);
_LEADING_EXPORT_RE = re.compile(
    r"^(\s*(?:(?:extern|static|inline)\s+)*)[A-Z_][A-Z0-9_]*\s*\(([^()]*)\)(?=\s*[A-Za-z_]|\s*$)"
)
_LINKAGE_RE = re.compile(r'\bextern\s+"C"')
_STRING_RE = re.compile(r'"(?:[^"\\]|\\.)*"' + r"|'(?:[^'\\]|\\.)*'")


def get_language() -> tree_sitter.Language:
    """Return the tree-sitter Language object for C."""
    return tree_sitter.Language(tree_sitter_c.language())


def prepare_source(source: str) -> str:
    """Rewrite the declaration macros tree-sitter-c cannot parse.

    Bare macro lines at file scope (``GIT_BEGIN_DECL``) are blanked and a
    leading export wrapper (``GIT_EXTERN(int)``) is replaced by the type it
    wraps. Line breaks are kept, so record line numbers do not move.
    Braces opened by ``extern "C"`` do not count as nesting.
    """
    lines = source.split("\n")
    depth = 0
    in_comment = False
    continued = False
    for i, line in enumerate(lines):
        clean_start = not in_comment and not continued
        continued = line.rstrip().endswith("\\")
        code, in_comment = _code_part(line, in_comment)
        if not clean_start or line.lstrip().startswith("#"):
            continue
        if depth == 0 and _BARE_MACRO_RE.match(line):
            lines[i] = ""
            continue
        lines[i] = _LEADING_EXPORT_RE.sub(r"\1\2", line)
        if not _LINKAGE_RE.search(line):
            depth = max(0, depth + code.count("{") - code.count("}"))
    return "\n".join(lines)


def _code_part(line: str, in_comment: bool) -> tuple[str, bool]:
    """Text of *line* outside comments and string literals."""
    code: list[str] = []
    rest = line
    while rest:
        if in_comment:
            end = rest.find("*/")
            if end == -1:
                return "".join(code), True
            rest = rest[end + 2 :]
            in_comment = False
            continue
        rest = _STRING_RE.sub('""', rest)
        line_comment = rest.find("//")
        block = rest.find("/*")
        if block != -1 and (line_comment == -1 or block < line_comment):
            code.append(rest[:block])
            rest = rest[block + 2 :]
            in_comment = True
            continue
        code.append(rest if line_comment == -1 else rest[:line_comment])
        break
    return "".join(code), in_comment


@dataclass
class _Walk:
    path: str
    records: list[Record] = field(default_factory=list)


def extract_records(tree: tree_sitter.Tree, path: str) -> list[Record]:
    """Extract records from a parsed C header, in source order."""
    walk = _Walk(path=path)
    _walk_container(tree.root_node, walk, guard=None)
    return walk.records


def _walk_container(
    container: tree_sitter.Node,
    walk: _Walk,
    guard: str | None,
) -> None:
    """Visit the items of a container, pairing each with its leading comment."""
    pending: list[tree_sitter.Node] = []
    prev_end = -1

    for child in container.children:
        if child.type == "comment":
            if child.start_point.row == prev_end:
                continue  # trailing comment of the previous item
            if pending and pending[-1].end_point.row < child.start_point.row - 1:
                _flush_file_comment(pending, walk)
                pending = []
            pending.append(child)
            continue

        doc_nodes: list[tree_sitter.Node] = []
        if pending and pending[-1].end_point.row >= child.start_point.row - 1:
            doc_nodes = pending
        else:
            _flush_file_comment(pending, walk)
        pending = []

        if _flush_file_comment(doc_nodes, walk):
            doc_nodes = []
        _visit(child, doc_nodes, walk, guard)
        prev_end = end_line(child) - 1

    _flush_file_comment(pending, walk)


def _flush_file_comment(nodes: list[tree_sitter.Node], walk: _Walk) -> bool:
    """Emit a file record if *nodes* form a file-level doc block."""
    if not nodes:
        return False
    text = "\n".join(node_text(n) for n in nodes)
    if not _FILE_TAG_RE.search(text):
        return False
    doc = parse_doc_comment(text)
    comments = "\n\n".join(p for p in (doc.description, doc.comments) if p and p != doc.brief)
    walk.records.append(
        Record(
            kind="file",
            file=walk.path,
            line=start_line(nodes[0]),
            lineto=end_line(nodes[-1]),
            brief=doc.brief,
            defgroup=doc.defgroup,
            ingroup=doc.ingroup,
            comments=comments or None,
        )
    )
    return True


def _visit(
    node: tree_sitter.Node,
    doc_nodes: list[tree_sitter.Node],
    walk: _Walk,
    guard: str | None,
) -> None:
    doc_text = "\n".join(node_text(n) for n in doc_nodes)

    if node.type in ("declaration", "function_definition"):
        _extract_declaration(node, doc_text, walk)
    elif node.type == "type_definition":
        _extract_typedef(node, doc_text, walk)
    elif node.type in _RECORD_SPECIFIERS or node.type == "enum_specifier":
        _extract_specifier(node, node, None, doc_text, walk)
    elif node.type == "preproc_def":
        _extract_define(node, doc_text, walk, guard)
    elif node.type == "preproc_function_def":
        _extract_macro(node, doc_text, walk)
    elif node.type == "linkage_specification":
        body = node.child_by_field_name("body")
        if body is not None:
            _walk_container(body, walk, guard)
    elif node.type in _CONTAINERS:
        inner_guard = guard
        if node.type == "preproc_ifdef" and node_text(node).startswith("#ifndef"):
            name = node.child_by_field_name("name")
            inner_guard = node_text(name) if name is not None else guard
        _walk_container(node, walk, inner_guard)


# ---------------------------------------------------------------------------
# Functions
# ---------------------------------------------------------------------------


def _extract_declaration(node: tree_sitter.Node, doc_text: str, walk: _Walk) -> None:
    found = False
    for declarator in node.children_by_field_name("declarator"):
        fd = _function_declarator(declarator)
        if fd is None:
            continue
        inner = fd.child_by_field_name("declarator")
        if inner is None or inner.type != "identifier":
            continue  # function pointer variable, not a prototype
        walk.records.append(_function_record(node, fd, node_text(inner), doc_text, walk.path))
        found = True

    if not found:
        type_node = node.child_by_field_name("type")
        if type_node is not None and type_node.child_by_field_name("body") is not None:
            _extract_specifier(type_node, node, None, doc_text, walk)


def _function_declarator(node: tree_sitter.Node) -> tree_sitter.Node | None:
    """Descend through pointer/attribute wrappers to a function_declarator."""
    current: tree_sitter.Node | None = node
    while current is not None:
        if current.type == "function_declarator":
            return current
        if current.type not in ("pointer_declarator", "attributed_declarator"):
            return None
        current = _inner_declarator(current)
    return None


def _inner_declarator(node: tree_sitter.Node) -> tree_sitter.Node | None:
    inner = node.child_by_field_name("declarator")
    if inner is not None:
        return inner
    for child in node.named_children:
        if child.type.endswith("declarator") or child.type in _IDENTIFIERS:
            return child
    return None


def _declarator_identifier(node: tree_sitter.Node | None) -> tree_sitter.Node | None:
    """Find the identifier a (possibly nested) declarator declares."""
    current = node
    while current is not None:
        if current.type in _IDENTIFIERS:
            return current
        current = _inner_declarator(current)
    return None


def _return_type(item: tree_sitter.Node, fd: tree_sitter.Node) -> str:
    """Text between the start of the declaration and its function declarator."""
    source = item.text or b""
    prefix = source[: fd.start_byte - item.start_byte].decode("utf-8")
    prefix = _EXPORT_MACRO_RE.sub(r"\1", prefix)
    prefix = _STORAGE_RE.sub("", prefix)
    return squash(prefix)


def _extract_params(params: tree_sitter.Node | None) -> tuple[list[Argument], str]:
    if params is None:
        return [], ""
    argline = squash(node_text(params))
    if argline.startswith("(") and argline.endswith(")"):
        argline = argline[1:-1].strip()

    args: list[Argument] = []
    for child in params.named_children:
        if child.type == "variadic_parameter":
            args.append(Argument(name="...", type="..."))
            continue
        if child.type != "parameter_declaration":
            continue
        ident = _declarator_identifier(child.child_by_field_name("declarator"))
        full = child.text or b""
        if ident is None:
            type_text = squash(full.decode("utf-8"))
            if type_text == "void" and len(params.named_children) == 1:
                break
            args.append(Argument(name="", type=type_text))
            continue
        offset = child.start_byte
        before = full[: ident.start_byte - offset].decode("utf-8")
        after = full[ident.end_byte - offset :].decode("utf-8")
        args.append(Argument(name=node_text(ident), type=squash(f"{before} {after}")))
    return args, argline


def _function_record(
    item: tree_sitter.Node,
    fd: tree_sitter.Node,
    name: str,
    doc_text: str,
    path: str,
) -> Record:
    args, argline = _extract_params(fd.child_by_field_name("parameters"))
    ret = _return_type(item, fd)
    doc = parse_doc_comment(doc_text, {a.name for a in args if a.name})
    documented = tuple(
        Argument(name=a.name, type=a.type, comment=doc.params.get(a.name, "")) for a in args
    )
    sig = f"{ret}({', '.join(a.type for a in args)})"
    return Record(
        kind="function",
        file=path,
        line=start_line(item),
        lineto=end_line(item),
        name=name,
        args=documented,
        argline=argline,
        sig=sig,
        returns=ReturnValue(type=ret, comment=doc.returns),
        description=doc.description,
        comments=doc.comments,
    )


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------


def _doc_prose(doc: DocComment) -> str:
    return "\n\n".join(p for p in (doc.description, doc.comments) if p)


def _extract_typedef(node: tree_sitter.Node, doc_text: str, walk: _Walk) -> None:
    declarators = node.children_by_field_name("declarator")
    if not declarators:
        return
    declarator = declarators[0]
    ident = _declarator_identifier(declarator)
    if ident is None:
        return
    name = node_text(ident)

    if _function_declarator(declarator) is not None or _is_parenthesized_fnptr(declarator):
        text = node_text(node)
        walk.records.append(
            Record(
                kind="fnptr",
                file=walk.path,
                line=start_line(node),
                lineto=end_line(node),
                name=name,
                value=squash(text.rstrip().rstrip(";")),
                block=text,
                tdef="typedef",
                comments=_doc_prose(parse_doc_comment(doc_text)),
            )
        )
        return

    type_node = node.child_by_field_name("type")
    if type_node is None:
        return
    if type_node.type in _RECORD_SPECIFIERS or type_node.type == "enum_specifier":
        _extract_specifier(type_node, node, name, doc_text, walk, tdef="typedef")


def _is_parenthesized_fnptr(declarator: tree_sitter.Node) -> bool:
    current: tree_sitter.Node | None = declarator
    while current is not None and current.type in ("parenthesized_declarator", "pointer_declarator"):
        current = _inner_declarator(current)
    return current is not None and current.type == "function_declarator"


def _extract_specifier(
    spec: tree_sitter.Node,
    item: tree_sitter.Node,
    name: str | None,
    doc_text: str,
    walk: _Walk,
    tdef: str | None = None,
) -> None:
    """Emit a struct or enum record for *spec*, declared by *item*."""
    body = spec.child_by_field_name("body")
    if name is None:
        tag = spec.child_by_field_name("name")
        name = node_text(tag) if tag is not None else None
    comments = _doc_prose(parse_doc_comment(doc_text))

    if spec.type == "enum_specifier":
        if body is None:
            return
        enumerators = tuple(
            node_text(e.child_by_field_name("name"))
            for e in body.named_children
            if e.type == "enumerator" and e.child_by_field_name("name") is not None
        )
        walk.records.append(
            Record(
                kind="enum",
                file=walk.path,
                line=start_line(item),
                lineto=end_line(item),
                name=name,
                decl=enumerators,
                body=node_text(item),
                block=node_text(body),
                tdef=tdef,
                comments=comments,
            )
        )
        return

    if name is None:
        return
    walk.records.append(
        Record(
            kind="struct",
            file=walk.path,
            line=start_line(item),
            lineto=end_line(item),
            name=name,
            block=node_text(body) if body is not None else "",
            tdef=tdef,
            comments=comments,
        )
    )


# ---------------------------------------------------------------------------
# Preprocessor
# ---------------------------------------------------------------------------


def _extract_define(
    node: tree_sitter.Node,
    doc_text: str,
    walk: _Walk,
    guard: str | None,
) -> None:
    name_node = node.child_by_field_name("name")
    if name_node is None:
        return
    name = node_text(name_node)
    value_node = node.child_by_field_name("value")
    if name == guard and value_node is None:
        return  # include guard
    walk.records.append(
        Record(
            kind="define",
            file=walk.path,
            line=start_line(node),
            lineto=end_line(node),
            name=name,
            decl=name,
            value=node_text(value_node).strip() if value_node is not None else "",
            comments=_doc_prose(parse_doc_comment(doc_text)),
        )
    )


def _extract_macro(node: tree_sitter.Node, doc_text: str, walk: _Walk) -> None:
    name_node = node.child_by_field_name("name")
    if name_node is None:
        return
    name = node_text(name_node)
    params = node.child_by_field_name("parameters")
    value_node = node.child_by_field_name("value")
    value = node_text(value_node).strip() if value_node is not None else ""
    walk.records.append(
        Record(
            kind="macro",
            file=walk.path,
            line=start_line(node),
            lineto=end_line(node),
            name=name,
            decl=name,
            argline=node_text(params) if params is not None else "",
            value=value,
            comments=_doc_prose(parse_doc_comment(doc_text)),
        )
    )
