# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from pathlib import Path

import pytest

import hsinfo
from hsinfo.core.diagnostics import SourceError
from hsinfo.parser import parse_module_file, parse_module_text
from hsinfo.parser.ast import ClassDecl, FunBind, InstanceDecl, Lit, OpSeq, PatBind, TypeSig


def test_module_header_and_imports() -> None:
	mod = parse_module_text("module Foo\nimport Bar\nimport Baz\n\nx = 1\n", "Foo.hs")
	assert mod.name == "Foo"
	assert [imp.module for imp in mod.imports] == ["Bar", "Baz"]
	assert mod.header_loc.four_ints() == (1, 1, 1, 11)
	assert len(mod.decls) == 1


@pytest.mark.parametrize(
	"source",
	[
		"module M\n\ndata T = A\n",
		"module M\n\nf x = x\n",
		"module M\nimport N\n",
		"module M\n\nclass C a where\n  m :: a -> a\n",
	],
)
def test_keyword_after_module_header(source: str) -> None:
	assert parse_module_text(source).name == "M"


def test_bundled_prelude_parses() -> None:
	mod = parse_module_file(Path(hsinfo.__file__).parent / "prelude" / "Prelude.hs")
	assert mod.name == "Prelude"
	assert mod.decls


def test_module_without_header_is_main() -> None:
	mod = parse_module_text("x = 1\n")
	assert mod.name == "Main"
	assert mod.imports == []


def test_adjacent_equations_form_one_binding() -> None:
	mod = parse_module_text("flip' True = False\nflip' False = True\n")
	assert len(mod.decls) == 1
	bind = mod.decls[0]
	assert isinstance(bind, FunBind)
	assert bind.name == "flip'"
	assert len(bind.matches) == 2


def test_equation_spans(tmp_path) -> None:
	path = str(tmp_path / "M.hs")
	mod = parse_module_text("f x = x + 1\n", path)
	bind = mod.decls[0]
	assert isinstance(bind, FunBind)
	assert bind.loc.four_ints() == (1, 1, 1, 12)
	assert bind.loc.file == path
	assert bind.name_loc.four_ints() == (1, 1, 1, 2)
	rhs = bind.matches[0].rhs
	assert isinstance(rhs, OpSeq)
	assert rhs.loc.four_ints() == (1, 7, 1, 12)
	assert [getattr(item, "name", None) for item in rhs.items[1::2]] == ["+"]


def test_continuation_lines_belong_to_the_declaration() -> None:
	mod = parse_module_text("f x =\n  x\n\ng = 2\n")
	assert [d.name for d in mod.decls] == ["f", "g"]  # type: ignore[attr-defined]


def test_class_where_block() -> None:
	src = "class Pretty a where\n  pretty :: a -> String\n  prettyList :: [a] -> String\n\nx = 1\n"
	mod = parse_module_text(src)
	cls = mod.decls[0]
	assert isinstance(cls, ClassDecl)
	assert cls.name == "Pretty"
	assert cls.tyvar == "a"
	assert [sig.names for sig in cls.sigs] == [["pretty"], ["prettyList"]]
	assert isinstance(mod.decls[1], FunBind)


def test_instance_where_block_with_continuation() -> None:
	src = "instance Show Int where\n  show n =\n    primShowInt n\n  showList = undefined\n"
	mod = parse_module_text(src)
	inst = mod.decls[0]
	assert isinstance(inst, InstanceDecl)
	assert inst.cls == "Show"
	assert [b.name for b in inst.binds] == ["show", "showList"]


def test_empty_where_block() -> None:
	mod = parse_module_text("class Marker a where\nx = 1\n")
	cls = mod.decls[0]
	assert isinstance(cls, ClassDecl)
	assert cls.sigs == []
	assert isinstance(mod.decls[1], FunBind)


def test_newlines_inside_brackets_are_ignored() -> None:
	mod = parse_module_text("xs = [ 1\n, 2\n, 3\n]\n")
	assert len(mod.decls) == 1


def test_signature_with_several_names() -> None:
	mod = parse_module_text("f, g :: Int\nf = 1\ng = 2\n")
	sig = mod.decls[0]
	assert isinstance(sig, TypeSig)
	assert sig.names == ["f", "g"]
	assert [loc.four_ints() for loc in sig.name_locs] == [(1, 1, 1, 2), (1, 4, 1, 5)]


def test_pattern_binding() -> None:
	mod = parse_module_text("Just z = Just 1\n")
	bind = mod.decls[0]
	assert isinstance(bind, PatBind)
	assert bind.pat.loc.four_ints() == (1, 1, 1, 7)


def test_comments_are_ignored() -> None:
	mod = parse_module_text("-- leading comment\nf = 1 -- trailing\n")
	bind = mod.decls[0]
	assert isinstance(bind, FunBind)
	assert isinstance(bind.matches[0].rhs, Lit)
	assert bind.loc.four_ints() == (2, 1, 2, 6)


def test_tab_width_decides_block_columns() -> None:
	src = "class C a where\n\tm :: a -> a\n        n :: a -> a\n"
	cls = parse_module_text(src, tab_width=8).decls[0]
	assert isinstance(cls, ClassDecl)
	assert len(cls.sigs) == 2
	with pytest.raises(SourceError):
		parse_module_text(src, tab_width=4)
