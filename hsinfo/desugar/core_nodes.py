# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Typed core terms.

Pipeline placement:
  AST (parser/ast.py) -> typechecked tree (checker/tc_nodes.py) -> core (this file)

Core is a small explicitly typed lambda calculus: type abstraction and
application are explicit, class constraints are ordinary dictionary
arguments and pattern matching is reduced to single-level `CCase`s. Every
term's type can be read off without inference (`expr_type`).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple, Union

from hsinfo.core.builtins import fun_type, split_fun_type
from hsinfo.core.names import Name
from hsinfo.core.types_core import TyForAll, Type, instantiate_forall


class CoreExpr:
	"""Base class for all core terms."""
	pass


@dataclass
class CBinder:
	name: Name
	type: Type


@dataclass
class CVar(CoreExpr):
	name: Name
	type: Type


@dataclass
class CLit(CoreExpr):
	value: Union[int, str]
	type: Type


@dataclass
class CApp(CoreExpr):
	fn: CoreExpr
	arg: CoreExpr


@dataclass
class CTyApp(CoreExpr):
	expr: CoreExpr
	types: List[Type]


@dataclass
class CLam(CoreExpr):
	binder: CBinder
	body: CoreExpr


@dataclass
class CTyLam(CoreExpr):
	tvs: List[str]
	body: CoreExpr


@dataclass
class CBind:
	"""`let` bindings: one non-recursive pair or a recursive group."""
	pairs: List[Tuple[CBinder, CoreExpr]]
	recursive: bool = False


@dataclass
class CLet(CoreExpr):
	bind: CBind
	body: CoreExpr


# Case alternatives: a data constructor, a literal or the default.

@dataclass
class DataAlt:
	con: Name


@dataclass
class LitAlt:
	value: Union[int, str]


@dataclass
class DefaultAlt:
	pass


AltCon = Union[DataAlt, LitAlt, DefaultAlt]


@dataclass
class CAlt:
	con: AltCon
	binders: List[CBinder]
	rhs: CoreExpr


@dataclass
class CCase(CoreExpr):
	scrutinee: CoreExpr
	binder: CBinder
	type: Type  # type of every alternative's right-hand side
	alts: List[CAlt] = field(default_factory=list)


class CoreTypeError(TypeError):
	"""Raised when a core term is not well formed enough to have a type."""


def expr_type(expr: CoreExpr) -> Type:
	"""The type of a core term."""
	if isinstance(expr, (CVar, CLit, CCase)):
		return expr.type
	if isinstance(expr, CApp):
		parts = split_fun_type(expr_type(expr.fn))
		if parts is None:
			raise CoreTypeError("application of a term that is not a function")
		return parts[1]
	if isinstance(expr, CTyApp):
		try:
			return instantiate_forall(expr_type(expr.expr), expr.types)
		except TypeError as err:
			raise CoreTypeError(str(err)) from err
	if isinstance(expr, CLam):
		return fun_type(expr.binder.type, expr_type(expr.body))
	if isinstance(expr, CTyLam):
		if not expr.tvs:
			return expr_type(expr.body)
		return TyForAll(tuple(expr.tvs), expr_type(expr.body))
	if isinstance(expr, CLet):
		return expr_type(expr.body)
	raise CoreTypeError(f"unknown core term {type(expr).__name__}")


__all__ = [
	"CoreExpr",
	"CBinder",
	"CVar",
	"CLit",
	"CApp",
	"CTyApp",
	"CLam",
	"CTyLam",
	"CBind",
	"CLet",
	"DataAlt",
	"LitAlt",
	"DefaultAlt",
	"AltCon",
	"CAlt",
	"CCase",
	"CoreTypeError",
	"expr_type",
]
