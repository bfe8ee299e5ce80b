# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from hsinfo.core.builtins import CONS_DATACON, LIST_TYCON, NIL_DATACON
from hsinfo.core.names import (
	DEFAULT_FIXITY,
	PRELUDE_MODULE,
	Assoc,
	ClassThing,
	DataConThing,
	Fixity,
	IdThing,
	Name,
	Namespace,
	TyConThing,
	thing_parent,
)
from hsinfo.core.span import Span
from hsinfo.core.types_core import Scheme, TyVar


def test_name_equality_ignores_location() -> None:
	a = Name("f", "Main", loc=Span(file="M.hs", line=1, column=1, end_line=1, end_column=2))
	b = Name("f", "Main")
	assert a == b
	assert hash(a) == hash(b)
	assert a != Name("f", "Main", Namespace.TYPE)
	assert a != Name("f", "Other")


def test_operator_names() -> None:
	assert Name("+", "Main").is_operator()
	assert CONS_DATACON.is_operator()
	assert not NIL_DATACON.is_operator()
	assert not LIST_TYCON.is_operator()
	assert not Name("map", "Main").is_operator()


def test_external_and_qualified() -> None:
	assert Name("map", PRELUDE_MODULE).is_external()
	assert not Name("map", "Main").is_external()
	assert Name("map", PRELUDE_MODULE).qualified() == "Prelude.map"


def test_default_fixity() -> None:
	assert DEFAULT_FIXITY == Fixity(Assoc.INFIXL, 9)
	assert str(Fixity(Assoc.INFIXR, 5)) == "infixr 5"


def test_thing_parent() -> None:
	maybe = Name("Maybe", "Main", Namespace.TYPE)
	just = DataConThing(Name("Just", "Main"), maybe, Scheme.mono(TyVar("a")))
	cls = Name("Pretty", "Main", Namespace.TYPE)
	method = IdThing(Name("pretty", "Main"), Scheme.mono(TyVar("a")), parent=cls)
	assert thing_parent(just) == maybe
	assert thing_parent(method) == cls
	assert thing_parent(IdThing(Name("f", "Main"), Scheme.mono(TyVar("a")))) is None
	assert thing_parent(TyConThing(maybe, ["a"])) is None
	assert thing_parent(ClassThing(cls, "a")) is None
