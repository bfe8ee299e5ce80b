# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Typechecked syntax tree.

The checker mirrors the surface tree with typed nodes:

- bindings (`TAbsBinds`, `TFunBind`, `TPatBind`)
- expressions (`TVar`, `TApp`, ..., plus the synthetic `TWrap`)
- patterns (`TVarPat`, `TConPat`, ...)

Each node class carries a static `kind` tag so traversals can fold hits into
binding/expression/pattern buckets without inspecting concrete classes.
`TWrap` records the type and dictionary arguments of an instantiated
polymorphic occurrence. It carries the occurrence's span; the wrapped
`TVar`/`TCon` has none, so a point query sees the instantiated type only.

Class-constraint evidence (`DictInst`, `DictParam`, `DictHole`) hangs off the
tree and is filled in by the constraint solver; a `DictHole` whose solution
stays `None` is an unsolved constraint.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum, auto
from typing import ClassVar, Iterator, List, Optional, Union

from hsinfo.core.builtins import fun_types
from hsinfo.core.names import Instance, Name
from hsinfo.core.span import Span
from hsinfo.core.types_core import Scheme, TyPred, Type


class NodeKind(Enum):
	BINDING = auto()
	EXPRESSION = auto()
	PATTERN = auto()
	OTHER = auto()


class TNode:
	"""Base class for all typechecked nodes."""
	kind: ClassVar[NodeKind] = NodeKind.OTHER
	loc: Span


class TBind(TNode):
	kind = NodeKind.BINDING


class TExpr(TNode):
	kind = NodeKind.EXPRESSION


class TPat(TNode):
	kind = NodeKind.PATTERN


# Identifiers and evidence

@dataclass(eq=False)
class Id:
	"""A typed identifier occurrence target (global or locally bound)."""
	name: Name
	scheme: Scheme


@dataclass(eq=False)
class DictVar:
	"""A dictionary parameter bound by an abstraction (`C a` evidence)."""
	name: Name
	pred: TyPred


class Evidence:
	"""How a class constraint is satisfied."""
	pass


@dataclass(eq=False)
class DictInst(Evidence):
	"""Evidence built from an instance applied to its context's evidence."""
	instance: Instance
	type_args: List[Type] = field(default_factory=list)
	args: List[Evidence] = field(default_factory=list)


@dataclass(eq=False)
class DictParam(Evidence):
	"""Evidence passed in as a dictionary parameter."""
	var: DictVar


@dataclass(eq=False)
class DictHole(Evidence):
	"""A constraint waiting for the solver; `solution` stays None if unsolved."""
	pred: TyPred
	solution: Optional[Evidence] = None


# Match groups

@dataclass(eq=False)
class TMatch(TNode):
	pats: List[TPat]
	rhs: TExpr
	loc: Span = field(default_factory=Span)


@dataclass(eq=False)
class TMatchGroup(TNode):
	"""Equations of a function, lambda or case, with their shared type."""
	matches: List[TMatch]
	arg_types: List[Type]
	res_type: Type
	loc: Span = field(default_factory=Span)

	@property
	def type(self) -> Type:
		return fun_types(self.arg_types, self.res_type)


# Bindings

@dataclass(eq=False)
class TFunBind(TBind):
	id: Id
	matches: TMatchGroup
	loc: Span = field(default_factory=Span)


@dataclass(eq=False)
class TPatBind(TBind):
	pat: TPat
	rhs: TExpr
	binders: List[Id] = field(default_factory=list)
	loc: Span = field(default_factory=Span)


@dataclass(eq=False)
class AbsExport:
	poly: Id
	mono: Id


@dataclass(eq=False)
class TAbsBinds(TBind):
	"""
	A generalised binding group: the inner `binds` use monomorphic ids; each
	export pairs one of them with its polymorphic counterpart, abstracted over
	`tvs` and `dict_vars`.
	"""
	tvs: List[str]
	dict_vars: List[DictVar]
	exports: List[AbsExport]
	binds: List[TBind]
	loc: Span = field(default_factory=Span)


# Expressions

@dataclass(eq=False)
class TVar(TExpr):
	id: Id
	loc: Span = field(default_factory=Span)


@dataclass(eq=False)
class TCon(TExpr):
	con: Name
	scheme: Scheme
	loc: Span = field(default_factory=Span)


@dataclass(eq=False)
class TLit(TExpr):
	value: Union[int, str]
	type: Type
	loc: Span = field(default_factory=Span)


@dataclass(eq=False)
class TApp(TExpr):
	fn: TExpr
	arg: TExpr
	loc: Span = field(default_factory=Span)


@dataclass(eq=False)
class TOpApp(TExpr):
	left: TExpr
	op: TExpr
	right: TExpr
	loc: Span = field(default_factory=Span)


@dataclass(eq=False)
class TLam(TExpr):
	matches: TMatchGroup
	loc: Span = field(default_factory=Span)


@dataclass(eq=False)
class TLet(TExpr):
	binds: List[TBind]
	body: TExpr
	loc: Span = field(default_factory=Span)


@dataclass(eq=False)
class TIf(TExpr):
	cond: TExpr
	then_expr: TExpr
	else_expr: TExpr
	loc: Span = field(default_factory=Span)


@dataclass(eq=False)
class TCase(TExpr):
	scrutinee: TExpr
	matches: TMatchGroup
	loc: Span = field(default_factory=Span)


@dataclass(eq=False)
class TList(TExpr):
	elems: List[TExpr]
	elem_type: Type
	loc: Span = field(default_factory=Span)


@dataclass(eq=False)
class TPar(TExpr):
	expr: TExpr
	loc: Span = field(default_factory=Span)


@dataclass(eq=False)
class TWrap(TExpr):
	"""Instantiation of a polymorphic occurrence; `expr` itself has no span."""
	expr: TExpr
	type_args: List[Type] = field(default_factory=list)
	dicts: List[Evidence] = field(default_factory=list)
	loc: Span = field(default_factory=Span)


# Patterns

@dataclass(eq=False)
class TVarPat(TPat):
	id: Id
	loc: Span = field(default_factory=Span)


@dataclass(eq=False)
class TWildPat(TPat):
	type: Type
	loc: Span = field(default_factory=Span)


@dataclass(eq=False)
class TLitPat(TPat):
	value: Union[int, str]
	type: Type
	loc: Span = field(default_factory=Span)


@dataclass(eq=False)
class TConPat(TPat):
	con: Name
	type_args: List[Type]
	args: List[TPat]
	type: Type
	loc: Span = field(default_factory=Span)


@dataclass(eq=False)
class TParPat(TPat):
	pat: TPat
	loc: Span = field(default_factory=Span)


def hs_pat_type(pat: TPat) -> Type:
	"""The type a pattern matches against."""
	if isinstance(pat, TVarPat):
		return pat.id.scheme.body
	if isinstance(pat, TParPat):
		return hs_pat_type(pat.pat)
	if isinstance(pat, (TWildPat, TLitPat, TConPat)):
		return pat.type
	raise TypeError(f"unknown pattern node {type(pat).__name__}")


_TREE_MODULES = {__name__}


def _should_descend(obj: object) -> bool:
	return is_dataclass(obj) and obj.__class__.__module__ in _TREE_MODULES


def child_nodes(node: object) -> Iterator[TNode]:
	"""Direct `TNode` children of a tree object, in field order."""
	if not _should_descend(node):
		return
	for f in fields(node):  # type: ignore[arg-type]
		yield from _nodes_in(getattr(node, f.name))


def _nodes_in(val: object) -> Iterator[TNode]:
	if isinstance(val, TNode):
		yield val
	elif isinstance(val, (list, tuple)):
		for item in val:
			yield from _nodes_in(item)


def map_types(root: object, fn) -> None:
	"""
	Rewrite every `Type`/`Scheme` stored in the tree reachable from `root`
	(nodes, ids, dictionary evidence) with `fn`, in place.
	"""
	seen: set[int] = set()

	def walk(obj: object) -> None:
		if id(obj) in seen:
			return
		seen.add(id(obj))
		if not _should_descend(obj):
			return
		for f in fields(obj):  # type: ignore[arg-type]
			setattr(obj, f.name, rewrite(getattr(obj, f.name)))

	def rewrite(val: object) -> object:
		if isinstance(val, Type):
			return fn(val)
		if isinstance(val, Scheme):
			return Scheme(val.tvs, tuple(fn(p) for p in val.preds), fn(val.body))
		if isinstance(val, list):
			return [rewrite(item) for item in val]
		walk(val)
		return val

	if isinstance(root, list):
		for item in root:
			walk(item)
	else:
		walk(root)


__all__ = [
	"NodeKind",
	"TNode", "TBind", "TExpr", "TPat",
	"Id", "DictVar", "Evidence", "DictInst", "DictParam", "DictHole",
	"TMatch", "TMatchGroup",
	"TFunBind", "TPatBind", "AbsExport", "TAbsBinds",
	"TVar", "TCon", "TLit", "TApp", "TOpApp", "TLam", "TLet", "TIf", "TCase", "TList", "TPar", "TWrap",
	"TVarPat", "TWildPat", "TLitPat", "TConPat", "TParPat",
	"hs_pat_type", "child_nodes", "map_types",
]
