# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import io

import pytest

from hsinfo.core.diagnostics import SourceError
from hsinfo.core.names import DEFAULT_FIXITY, PRELUDE_MODULE, Assoc, ClassThing, IdThing, Namespace
from hsinfo.session import Session, SessionConfig, SuccessFlag, Target


def _loaded(write_module, source: str, **extra: str) -> Session:
	path = write_module("A.hs", source)
	for name, text in extra.items():
		write_module(f"{name}.hs", text)
	session = Session(SessionConfig(error_stream=io.StringIO()))
	session.set_targets([Target(path=path)])
	assert session.load() is SuccessFlag.SUCCEEDED
	return session


def test_variables_are_values(write_module) -> None:
	session = _loaded(write_module, "module A\nimport B\nfoo = bar\n", B="module B\nbar = 2\n")
	[name] = session.parse_name("bar")
	assert (name.module, name.namespace) == ("B", Namespace.VALUE)
	[op] = session.parse_name("(+)")
	assert op.module == PRELUDE_MODULE


def test_constructors_look_up_types_first(write_module) -> None:
	session = _loaded(write_module, "module A\nx = 1\n")
	names = session.parse_name("[]")
	assert [n.namespace for n in names] == [Namespace.TYPE, Namespace.VALUE]
	[just] = session.parse_name("Just")
	assert just.namespace is Namespace.VALUE
	[maybe] = session.parse_name("Maybe")
	assert maybe.namespace is Namespace.TYPE


def test_local_names_shadow_the_prelude(write_module) -> None:
	session = _loaded(write_module, "module A\nlength xs = 0\n")
	[name] = session.parse_name("length")
	assert name.module == "A"


def test_clashing_imports_yield_every_name(write_module) -> None:
	session = _loaded(
		write_module,
		"module A\nimport B\nimport C\nx = 1\n",
		B="module B\nhelper = 1\n",
		C="module C\nhelper = 2\n",
	)
	assert sorted(n.module for n in session.parse_name("helper")) == ["B", "C"]


def test_unknown_name(write_module) -> None:
	session = _loaded(write_module, "module A\nx = 1\n")
	with pytest.raises(SourceError) as excinfo:
		session.parse_name("nope")
	diag = excinfo.value.diagnostics[0]
	assert diag.message == "Not in scope: 'nope'"
	assert diag.phase == "interactive"


def test_set_context_requires_a_loaded_module(write_module) -> None:
	session = _loaded(write_module, "module A\nx = 1\n")
	with pytest.raises(SourceError):
		session.set_context("Elsewhere")
	session.set_context("A")


def test_info_for_operator_has_fixity(write_module) -> None:
	session = _loaded(write_module, "module A\nx = 1\n")
	[plus] = session.parse_name("+")
	info = session.get_info(plus)
	assert info is not None
	thing, fixity, instances = info
	assert isinstance(thing, IdThing)
	assert (fixity.assoc, fixity.precedence) == (Assoc.INFIXL, 6)
	assert instances == []


def test_info_for_class_lists_visible_instances(write_module) -> None:
	src = "module A\ndata Color = Red\ninstance Show Color where\n  show c = \"Red\"\n"
	session = _loaded(write_module, src)
	[show] = session.parse_name("Show")
	thing, fixity, instances = session.get_info(show)  # type: ignore[misc]
	assert isinstance(thing, ClassThing)
	assert fixity == DEFAULT_FIXITY
	assert [inst.head.occ for inst in instances] == ["Int", "String", "Bool", "[]", "Maybe", "Color"]


def test_info_for_home_binding(write_module) -> None:
	session = _loaded(write_module, "module A\nimport B\nfoo = bar\n", B="module B\nbar = 2\n")
	[bar] = session.parse_name("bar")
	thing, fixity, instances = session.get_info(bar)  # type: ignore[misc]
	assert thing.name == bar
	assert fixity == DEFAULT_FIXITY
	assert instances == []
