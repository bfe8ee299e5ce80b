# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from hsinfo.checker import TcResult
from hsinfo.checker.tc_nodes import TAbsBinds, TFunBind
from hsinfo.core.builtins import FALSE_DATACON, TRUE_DATACON
from hsinfo.desugar import Desugarer, desugar_expr, expr_type
from hsinfo.desugar.core_nodes import CCase, CTyLam, DataAlt
from hsinfo.ppr import render_type


def _rhs(result: TcResult):
	top = result.binds[0]
	assert isinstance(top, TAbsBinds)
	inner = top.binds[0]
	assert isinstance(inner, TFunBind)
	return inner.matches.matches[0].rhs


def _lower(result: TcResult, expr):
	env = result.env
	return desugar_expr(None, env.module, env.rdr_env, env.type_env, expr)


def _core_type(check_source, source: str) -> str:
	result = check_source(source)
	messages, core = _lower(result, _rhs(result))
	assert messages == []
	assert core is not None
	return render_type(expr_type(core))


def test_arithmetic(check_source) -> None:
	assert _core_type(check_source, "f x = x + 1\n") == "Int"


def test_class_method_takes_a_dictionary(check_source) -> None:
	assert _core_type(check_source, "s = show 1\n") == "String"


def test_nested_instance_dictionary(check_source) -> None:
	assert _core_type(check_source, "s = show [Just 1]\n") == "String"


def test_list_literal(check_source) -> None:
	assert _core_type(check_source, "xs = [1, 2]\n") == "[Int]"


def test_lambda(check_source) -> None:
	assert _core_type(check_source, "k = \\x -> x + 1\n") == "Int -> Int"


def test_case_on_constructor(check_source) -> None:
	src = "m = case Just 1 of { Just n -> n; Nothing -> 0 }\n"
	assert _core_type(check_source, src) == "Int"


def test_let_with_local_polymorphism(check_source) -> None:
	src = "h = let i x = x in i 1 + length (i [True])\n"
	assert _core_type(check_source, src) == "Int"


def test_if_becomes_case_on_bool(check_source) -> None:
	result = check_source("c = if True then 1 else 2\n")
	_, core = _lower(result, _rhs(result))
	assert isinstance(core, CCase)
	assert [alt.con for alt in core.alts] == [DataAlt(FALSE_DATACON), DataAlt(TRUE_DATACON)]
	assert render_type(core.type) == "Int"


def test_unsolved_constraint_gives_no_result(check_source) -> None:
	result = check_source("g = show undefined\n")
	messages, core = _lower(result, _rhs(result))
	assert core is None
	assert len(messages) == 1
	assert messages[0].phase == "desugar"
	assert messages[0].severity == "warning"
	assert messages[0].message.startswith("unsolved constraint (Show")
	assert messages[0].span.four_ints() == (1, 5, 1, 19)


def test_generalised_binding_matches_its_type(check_source) -> None:
	result = check_source("ident x = x\n")
	env = result.env
	ds = Desugarer(None, env.module, env.rdr_env, env.type_env)
	[cbind] = ds.bind(result.binds[0])
	[(binder, rhs)] = cbind.pairs
	assert isinstance(rhs, CTyLam)
	assert rhs.tvs == ["a"]
	assert expr_type(rhs) == binder.type
	assert render_type(binder.type) == "a -> a"


def test_pattern_binding_lowers_each_binder(check_source) -> None:
	result = check_source("Just z = Just 1\n")
	env = result.env
	ds = Desugarer(None, env.module, env.rdr_env, env.type_env)
	binds = ds.bind(result.binds[0])
	names = [binder.name.occ for cbind in binds for binder, _ in cbind.pairs]
	assert names[-1] == "z"
	for cbind in binds:
		for binder, rhs in cbind.pairs:
			assert render_type(expr_type(rhs)) == render_type(binder.type)


def test_failed_lowering_does_not_leak_into_next_call(check_source) -> None:
	bad = check_source("g = show undefined\n")
	first, _ = _lower(bad, _rhs(bad))
	good = check_source("f x = x + 1\n")
	messages, core = _lower(good, _rhs(good))
	assert len(first) == 1
	assert messages == []
	assert core is not None
