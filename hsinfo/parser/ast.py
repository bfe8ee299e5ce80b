# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Surface syntax tree produced by the parser.

Every node carries a `loc` Span. Operator applications are left as flat
`OpSeq`s; the checker re-associates them once fixities are known.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union

from hsinfo.core.span import Span


# Types

class TypeExpr:
	loc: Span


@dataclass
class TyVarExpr(TypeExpr):
	name: str
	loc: Span = field(default_factory=Span)


@dataclass
class TyConExpr(TypeExpr):
	name: str  # "[]" for list types
	args: List[TypeExpr] = field(default_factory=list)
	loc: Span = field(default_factory=Span)


@dataclass
class FunTypeExpr(TypeExpr):
	arg: TypeExpr
	res: TypeExpr
	loc: Span = field(default_factory=Span)


@dataclass
class PredExpr:
	cls: str
	tyvar: str
	loc: Span = field(default_factory=Span)


@dataclass
class QualTypeExpr:
	context: List[PredExpr]
	body: TypeExpr
	loc: Span = field(default_factory=Span)


# Patterns

class Pat:
	loc: Span


@dataclass
class VarPat(Pat):
	name: str
	loc: Span = field(default_factory=Span)


@dataclass
class WildPat(Pat):
	loc: Span = field(default_factory=Span)


@dataclass
class LitPat(Pat):
	value: Union[int, str]
	loc: Span = field(default_factory=Span)


@dataclass
class ConPat(Pat):
	con: str
	args: List[Pat] = field(default_factory=list)
	loc: Span = field(default_factory=Span)


@dataclass
class ParPat(Pat):
	pat: Pat
	loc: Span = field(default_factory=Span)


# Expressions

class Expr:
	loc: Span


@dataclass
class Var(Expr):
	name: str
	loc: Span = field(default_factory=Span)


@dataclass
class Con(Expr):
	name: str
	loc: Span = field(default_factory=Span)


@dataclass
class Lit(Expr):
	value: Union[int, str]
	loc: Span = field(default_factory=Span)


@dataclass
class App(Expr):
	fn: Expr
	arg: Expr
	loc: Span = field(default_factory=Span)


@dataclass
class OpRef:
	"""An operator occurrence inside an `OpSeq`."""

	name: str
	loc: Span = field(default_factory=Span)

	def is_con(self) -> bool:
		return self.name.startswith(":")


@dataclass
class OpSeq(Expr):
	"""`e1 op1 e2 op2 e3 ...` before fixity resolution (operands at even indices)."""

	items: List[Union[Expr, OpRef]]
	loc: Span = field(default_factory=Span)


@dataclass
class OpApp(Expr):
	left: Expr
	op: OpRef
	right: Expr
	loc: Span = field(default_factory=Span)


@dataclass
class Lambda(Expr):
	pats: List[Pat]
	body: Expr
	loc: Span = field(default_factory=Span)


@dataclass
class Let(Expr):
	binds: List["Binding"]
	body: Expr
	loc: Span = field(default_factory=Span)


@dataclass
class If(Expr):
	cond: Expr
	then_expr: Expr
	else_expr: Expr
	loc: Span = field(default_factory=Span)


@dataclass
class Alt:
	pat: Pat
	body: Expr
	loc: Span = field(default_factory=Span)


@dataclass
class Case(Expr):
	scrutinee: Expr
	alts: List[Alt]
	loc: Span = field(default_factory=Span)


@dataclass
class ListLit(Expr):
	elems: List[Expr]
	loc: Span = field(default_factory=Span)


@dataclass
class Par(Expr):
	expr: Expr
	loc: Span = field(default_factory=Span)


# Bindings

@dataclass
class Match:
	"""One equation of a function binding: `f p1 .. pn = rhs`."""

	pats: List[Pat]
	rhs: Expr
	loc: Span = field(default_factory=Span)


@dataclass
class FunBind:
	name: str
	name_loc: Span
	matches: List[Match]
	loc: Span = field(default_factory=Span)


@dataclass
class PatBind:
	pat: Pat
	rhs: Expr
	loc: Span = field(default_factory=Span)


Binding = Union[FunBind, PatBind]


# Declarations

@dataclass
class ModuleHeader:
	name: str
	loc: Span = field(default_factory=Span)


@dataclass
class ImportDecl:
	module: str
	loc: Span = field(default_factory=Span)


@dataclass
class ConDecl:
	name: str
	args: List[TypeExpr]
	loc: Span = field(default_factory=Span)


@dataclass
class DataDecl:
	name: str
	tyvars: List[str]
	cons: List[ConDecl]
	loc: Span = field(default_factory=Span)
	name_loc: Span = field(default_factory=Span)


@dataclass
class TypeSig:
	names: List[str]
	type: QualTypeExpr
	loc: Span = field(default_factory=Span)
	name_locs: List[Span] = field(default_factory=list)


@dataclass
class PrimDecl:
	"""`primitive name :: type` (prelude only): an identifier with no equations."""

	sig: TypeSig
	loc: Span = field(default_factory=Span)


@dataclass
class FixityDecl:
	assoc: str
	precedence: int
	ops: List[str]
	loc: Span = field(default_factory=Span)


@dataclass
class ClassDecl:
	name: str
	tyvar: str
	sigs: List[TypeSig]
	loc: Span = field(default_factory=Span)
	name_loc: Span = field(default_factory=Span)


@dataclass
class InstanceDecl:
	context: List[PredExpr]
	cls: str
	head: TypeExpr
	binds: List[FunBind]
	loc: Span = field(default_factory=Span)


Decl = Union[DataDecl, TypeSig, PrimDecl, FixityDecl, ClassDecl, InstanceDecl, FunBind, PatBind]


@dataclass
class Module:
	name: str
	imports: List[ImportDecl]
	decls: List[Decl]
	loc: Span = field(default_factory=Span)
	path: Optional[str] = None
	header_loc: Span = field(default_factory=Span)


__all__ = [
	"TypeExpr", "TyVarExpr", "TyConExpr", "FunTypeExpr", "PredExpr", "QualTypeExpr",
	"Pat", "VarPat", "WildPat", "LitPat", "ConPat", "ParPat",
	"Expr", "Var", "Con", "Lit", "App", "OpRef", "OpSeq", "OpApp", "Lambda", "Let", "If",
	"Alt", "Case", "ListLit", "Par",
	"Match", "FunBind", "PatBind", "Binding",
	"ModuleHeader", "ImportDecl", "ConDecl", "DataDecl", "TypeSig", "PrimDecl", "FixityDecl",
	"ClassDecl", "InstanceDecl", "Decl", "Module",
]
