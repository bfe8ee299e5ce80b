# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from hsinfo.core.builtins import LIST_TYCON, NIL_DATACON
from hsinfo.core.names import DEFAULT_FIXITY, PRELUDE_MODULE, Assoc, Fixity, Name, Namespace
from hsinfo.info import filter_out_children, render_info
from hsinfo.ppr import NEVER_QUALIFY


def test_children_of_present_parents_are_dropped(prelude_result) -> None:
	env = prelude_result.env
	tycon = (env.type_env[LIST_TYCON], DEFAULT_FIXITY, [])
	nil = (env.type_env[NIL_DATACON], DEFAULT_FIXITY, [])
	assert filter_out_children([tycon, nil]) == [tycon]
	assert filter_out_children([nil]) == [nil]


def test_method_without_its_class_is_kept(prelude_result) -> None:
	env = prelude_result.env
	show = (env.type_env[Name("show", PRELUDE_MODULE, Namespace.VALUE)], DEFAULT_FIXITY, [])
	assert filter_out_children([show]) == [show]


def test_render_with_fixity(prelude_result) -> None:
	plus = prelude_result.env.type_env[Name("+", PRELUDE_MODULE, Namespace.VALUE)]
	text = render_info(plus, Fixity(Assoc.INFIXL, 6), [], NEVER_QUALIFY)
	assert text == "(+) :: Int -> Int -> Int\t-- Defined in 'Prelude'\ninfixl 6 +"


def test_render_default_fixity_is_omitted(prelude_result) -> None:
	just = prelude_result.env.type_env[Name("Just", PRELUDE_MODULE, Namespace.VALUE)]
	assert render_info(just, DEFAULT_FIXITY, [], NEVER_QUALIFY) == "Just :: a -> Maybe a\t-- Defined in 'Prelude'"
