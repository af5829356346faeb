"""Tests for C header record extraction."""

from __future__ import annotations

from capidoc.engine.parser import parse_header
from capidoc.languages.c import prepare_source

HEADER = """\
#ifndef INCLUDE_lib_repo_h__
#define INCLUDE_lib_repo_h__

/**
 * @file lib/repo.h
 * @brief Repository handling
 * @defgroup lib_repo Repository
 * @ingroup Lib
 */

/** Longest path the library handles. */
#define LIB_PATH_MAX 4096

/**
 * Open a repository.
 *
 * Looks in the given directory only.
 *
 * @param out pointer to the repo
 * @param path where to look
 * @return 0 or an error code
 */
extern int lib_repo_open(lib_repository **out, const char *path);

char *lib_repo_path(lib_repository *repo);

void lib_repo_free(lib_repository *repo);

int lib_version(void);

typedef struct lib_repository lib_repository;

/** Options for opening. */
typedef struct {
	unsigned int version;
	int flags;
} lib_open_options;

typedef enum {
	LIB_OK = 0,
	LIB_ERROR = -1,
	LIB_ENOTFOUND = -3,
} lib_error_code;

enum {
	LIB_FLAG_A = 1,
	LIB_FLAG_B,
};

typedef int (*lib_cb)(const char *name, void *payload);

#define LIB_MAX(a, b) ((a) > (b) ? (a) : (b))

#endif
"""


def _line_of(text: str) -> int:
    return HEADER.split("\n").index(text) + 1


def _by_name(kind: str) -> dict[str, object]:
    return {r.name: r for r in parse_header("lib/repo.h", HEADER) if r.kind == kind}


def test_every_record_carries_the_path() -> None:
    records = parse_header("lib/repo.h", HEADER)
    assert records
    assert {r.file for r in records} == {"lib/repo.h"}


def test_function_prototype() -> None:
    func = _by_name("function")["lib_repo_open"]
    assert func.returns.type == "int"
    assert func.argline == "lib_repository **out, const char *path"
    assert [a.name for a in func.args] == ["out", "path"]
    assert [a.type for a in func.args] == ["lib_repository **", "const char *"]
    assert func.sig == "int(lib_repository **, const char *)"
    assert func.line == _line_of("extern int lib_repo_open(lib_repository **out, const char *path);")


def test_function_doc_comment() -> None:
    func = _by_name("function")["lib_repo_open"]
    assert func.description == "Open a repository."
    assert func.comments == "Looks in the given directory only."
    assert func.args[0].comment == "pointer to the repo"
    assert func.args[1].comment == "where to look"
    assert func.returns.comment == "0 or an error code"


def test_pointer_return_type() -> None:
    func = _by_name("function")["lib_repo_path"]
    assert func.returns.type == "char *"
    assert func.sig == "char *(lib_repository *)"


def test_void_parameter_list() -> None:
    func = _by_name("function")["lib_version"]
    assert func.args == ()
    assert func.argline == "void"
    assert func.sig == "int()"


def test_file_record() -> None:
    files = [r for r in parse_header("lib/repo.h", HEADER) if r.kind == "file"]
    assert len(files) == 1
    meta = files[0]
    assert meta.brief == "Repository handling"
    assert meta.defgroup == "lib_repo Repository"
    assert meta.ingroup == "Lib"


def test_defines_skip_include_guard() -> None:
    defines = _by_name("define")
    assert "INCLUDE_lib_repo_h__" not in defines
    limit = defines["LIB_PATH_MAX"]
    assert limit.decl == "LIB_PATH_MAX"
    assert limit.value == "4096"
    assert limit.comments == "Longest path the library handles."


def test_function_like_macro() -> None:
    macro = _by_name("macro")["LIB_MAX"]
    assert macro.decl == "LIB_MAX"
    assert "(a) > (b)" in macro.value


def test_structs() -> None:
    structs = _by_name("struct")
    assert structs["lib_repository"].tdef == "typedef"
    assert structs["lib_repository"].block == ""
    options = structs["lib_open_options"]
    assert "unsigned int version;" in options.block
    assert options.comments == "Options for opening."


def test_named_enum() -> None:
    enums = [r for r in parse_header("lib/repo.h", HEADER) if r.kind == "enum"]
    named = [e for e in enums if e.name == "lib_error_code"]
    assert len(named) == 1
    assert named[0].decl == ("LIB_OK", "LIB_ERROR", "LIB_ENOTFOUND")


def test_anonymous_enum() -> None:
    enums = [r for r in parse_header("lib/repo.h", HEADER) if r.kind == "enum"]
    anonymous = [e for e in enums if e.name is None]
    assert len(anonymous) == 1
    anon = anonymous[0]
    assert anon.decl == ("LIB_FLAG_A", "LIB_FLAG_B")
    assert anon.line == _line_of("enum {")
    assert anon.body.startswith("enum {")


def test_function_pointer_typedef() -> None:
    cb = _by_name("fnptr")["lib_cb"]
    assert cb.tdef == "typedef"
    assert cb.value == "typedef int (*lib_cb)(const char *name, void *payload)"


def test_records_in_source_order() -> None:
    kinds = [r.kind for r in parse_header("lib/repo.h", HEADER)]
    assert kinds[0] == "file"
    assert kinds.index("function") < kinds.index("struct") < kinds.index("fnptr")


def test_empty_header() -> None:
    assert parse_header("empty.h", "") == []


WRAPPED = """\
#ifndef INCLUDE_git_repository_h__
#define INCLUDE_git_repository_h__

#include "common.h"

GIT_BEGIN_DECL

typedef struct git_repository git_repository;

/**
 * Open a git repository.
 *
 * @param out pointer to the repo which will be opened
 * @param path the path to the repository
 * @return 0 or an error code
 */
GIT_EXTERN(int) git_repository_open(git_repository **out, const char *path);

GIT_EXTERN(void) git_repository_free(git_repository *repo);

GIT_EXTERN(const char *) git_repository_path(const git_repository *repo);

GIT_END_DECL
#endif
"""

UNGUARDED = """\
GIT_BEGIN_DECL

/**
 * Init the global state.
 */
GIT_EXTERN(int) git_libgit2_init(void);

GIT_END_DECL
"""


def _wrapped_line(text: str) -> int:
    return WRAPPED.split("\n").index(text) + 1


class TestDeclarationMacros:
    def test_first_declaration_after_begin_decl(self) -> None:
        records = parse_header("repository.h", WRAPPED)
        assert [(r.kind, r.name) for r in records] == [
            ("struct", "git_repository"),
            ("function", "git_repository_open"),
            ("function", "git_repository_free"),
            ("function", "git_repository_path"),
        ]

    def test_export_macro_return_types(self) -> None:
        funcs = {r.name: r for r in parse_header("repository.h", WRAPPED) if r.kind == "function"}
        assert funcs["git_repository_open"].returns.type == "int"
        assert funcs["git_repository_open"].sig == "int(git_repository **, const char *)"
        assert funcs["git_repository_free"].sig == "void(git_repository *)"
        assert funcs["git_repository_path"].returns.type == "const char *"
        assert funcs["git_repository_path"].sig == "const char *(const git_repository *)"

    def test_doc_comment_and_lines_survive(self) -> None:
        funcs = {r.name: r for r in parse_header("repository.h", WRAPPED) if r.kind == "function"}
        open_ = funcs["git_repository_open"]
        assert open_.description == "Open a git repository."
        assert open_.args[1].comment == "the path to the repository"
        assert open_.line == _wrapped_line(
            "GIT_EXTERN(int) git_repository_open(git_repository **out, const char *path);"
        )

    def test_unguarded_header(self) -> None:
        records = parse_header("global.h", UNGUARDED)
        assert len(records) == 1
        init = records[0]
        assert init.name == "git_libgit2_init"
        assert init.sig == "int()"
        assert init.description == "Init the global state."
        assert init.line == 6

    def test_static_inline_export(self) -> None:
        source = "static LIB_INLINE(size_t) lib_len(const char *s);\n"
        func = parse_header("inline.h", source)[0]
        assert func.returns.type == "size_t"


class TestPrepareSource:
    def test_line_count_is_kept(self) -> None:
        prepared = prepare_source(WRAPPED)
        assert prepared.count("\n") == WRAPPED.count("\n")
        assert "GIT_BEGIN_DECL" not in prepared
        assert "GIT_END_DECL" not in prepared

    def test_last_enumerator_is_kept(self) -> None:
        source = "enum {\nLIB_A,\nLIB_B\n};\n"
        assert prepare_source(source) == source

    def test_macro_continuation_is_kept(self) -> None:
        source = "#define LIB_ALL \\\nLIB_SOME\n"
        assert prepare_source(source) == source

    def test_comment_lines_are_kept(self) -> None:
        source = "/*\nNOTE\n*/\nint lib_a(void);\n"
        assert prepare_source(source) == source

    def test_extern_c_block_does_not_nest(self) -> None:
        source = 'extern "C" {\nLIB_DECL\nint lib_a(void);\n}\n'
        assert prepare_source(source).split("\n")[1] == ""


def test_brief_only_file_comment() -> None:
    source = "/**\n * @file lib.h\n * @brief Just the brief\n */\n\nint lib_a(void);\n"
    meta = [r for r in parse_header("lib.h", source) if r.kind == "file"][0]
    assert meta.brief == "Just the brief"
    assert meta.comments is None
