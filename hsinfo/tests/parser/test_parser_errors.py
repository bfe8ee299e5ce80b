# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from pathlib import Path

import pytest

from hsinfo.core.diagnostics import SourceError
from hsinfo.parser import INTERACTIVE, parse_module_file, parse_module_text, parse_name_query
from hsinfo.parser.ast import Con, Var


def test_unbalanced_paren_is_a_parser_diagnostic() -> None:
	with pytest.raises(SourceError) as excinfo:
		parse_module_text("f = (1\n", "M.hs")
	diag = excinfo.value.diagnostics[0]
	assert diag.phase == "parser"
	assert diag.span.file == "M.hs"
	assert "parse error" in diag.message


def test_unexpected_character() -> None:
	with pytest.raises(SourceError) as excinfo:
		parse_module_text("f = 1 ` 2\n", "M.hs")
	diag = excinfo.value.diagnostics[0]
	assert diag.message.startswith("lexical error")
	assert diag.span.line == 1


def test_header_after_declarations() -> None:
	with pytest.raises(SourceError) as excinfo:
		parse_module_text("x = 1\nmodule Foo\n", "M.hs")
	assert "`module` header must be the first declaration" in str(excinfo.value)


def test_only_constructor_operators_in_patterns() -> None:
	with pytest.raises(SourceError) as excinfo:
		parse_module_text("f (x + y) = x\n", "M.hs")
	assert "only `:` may appear in patterns" in str(excinfo.value)


def test_unreadable_file(tmp_path: Path) -> None:
	missing = tmp_path / "Missing.hs"
	with pytest.raises(SourceError) as excinfo:
		parse_module_file(missing)
	assert "can't read file" in str(excinfo.value)
	assert excinfo.value.diagnostics[0].span.file == str(missing)


def test_file_that_is_not_utf8(tmp_path: Path) -> None:
	path = tmp_path / "Bad.hs"
	path.write_bytes(b'x = "\xff\xfe"\n')
	with pytest.raises(SourceError) as excinfo:
		parse_module_file(path)
	diag = excinfo.value.diagnostics[0]
	assert diag.phase == "parser"
	assert diag.span.file == str(path)
	assert "can't decode file as UTF-8" in diag.message


@pytest.mark.parametrize(
	"text, kind, name",
	[
		("f", Var, "f"),
		("  map ", Var, "map"),
		("Just", Con, "Just"),
		("(+)", Var, "+"),
		("++", Var, "++"),
		("(:)", Con, ":"),
		("[]", Con, "[]"),
	],
)
def test_name_queries(text: str, kind: type, name: str) -> None:
	query = parse_name_query(text)
	assert isinstance(query, kind)
	assert query.name == name  # type: ignore[attr-defined]


def test_malformed_name_query() -> None:
	with pytest.raises(SourceError) as excinfo:
		parse_name_query("f x")
	assert excinfo.value.diagnostics[0].span.file == INTERACTIVE
