# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Types of the fragments found at a point.

Bindings and patterns carry their type in the typechecked tree. Expressions
do not: an expression is lowered to core and its type read off the core
term. An expression that cannot be lowered has no type and is left out.
"""

from __future__ import annotations

from typing import Optional

from hsinfo.checker.tc_nodes import TBind, TExpr, TFunBind, TPat, hs_pat_type
from hsinfo.desugar import desugar_expr, expr_type

from .ordering import FragmentKind, TypedFragment


def binding_type(bind: TBind) -> Optional[TypedFragment]:
	"""Function bindings have the type of their equations; other bindings have none."""
	if isinstance(bind, TFunBind):
		return TypedFragment(bind.loc, bind.matches.type, FragmentKind.BINDING)
	return None


def pattern_type(pat: TPat) -> TypedFragment:
	return TypedFragment(pat.loc, hs_pat_type(pat), FragmentKind.PATTERN)


def expression_type(session, typechecked, expr: TExpr) -> Optional[TypedFragment]:
	env = typechecked.internals
	module = typechecked.parsed_module.summary.module
	_messages, core = desugar_expr(session, module, env.rdr_env, env.type_env, expr)
	if core is None:
		return None
	return TypedFragment(expr.loc, expr_type(core), FragmentKind.EXPRESSION)


__all__ = ["binding_type", "pattern_type", "expression_type"]
