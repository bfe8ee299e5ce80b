# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Pretty-printing of types, declared things, fixities and instances.

Output is single-line per item and uses Haskell surface syntax:
`Show a => a -> String`, `data Maybe a = Nothing | Just a`,
`instance Show a => Show [a]`. Quantifiers are never shown.

Whether a name is printed module-qualified is decided by a qualification
policy: `NeverQualify` for types shown to the user, `QualifyIfNotInScope`
for identifier info (qualify only names that are not unambiguously in scope).
"""

from __future__ import annotations

from typing import List, Protocol, Sequence, Tuple

from hsinfo.core.builtins import FUN_TYCON, LIST_TYCON, split_fun_type
from hsinfo.core.names import (
	DataConThing,
	ClassThing,
	Fixity,
	IdThing,
	Instance,
	Name,
	TyConThing,
	TyThing,
)
from hsinfo.core.types_core import Scheme, TyCon, TyForAll, TyMeta, TyPred, TyVar, Type


class QualificationPolicy(Protocol):
	def qualify(self, name: Name) -> bool: ...


class NeverQualify:
	def qualify(self, name: Name) -> bool:
		return False


class QualifyIfNotInScope:
	"""Qualify names whose occurrence does not uniquely refer to them."""

	def __init__(self, rdr_env) -> None:
		self.rdr_env = rdr_env

	def qualify(self, name: Name) -> bool:
		if name == FUN_TYCON or name.unique != 0:
			return False
		return not self.rdr_env.is_unqualified_in_scope(name)


NEVER_QUALIFY = NeverQualify()

# Precedence contexts for type printing.
_TOP = 0
_FUN_ARG = 1
_TYCON_ARG = 2


def ppr_name(name: Name, policy: QualificationPolicy = NEVER_QUALIFY) -> str:
	if policy.qualify(name):
		return name.qualified()
	return name.occ


def ppr_prefix(name: Name, policy: QualificationPolicy = NEVER_QUALIFY) -> str:
	"""A name in prefix position: operators are parenthesised."""
	text = ppr_name(name, policy)
	if name.is_operator():
		return f"({text})"
	return text


def ppr_infix(name: Name, policy: QualificationPolicy = NEVER_QUALIFY) -> str:
	"""A name in infix position: identifiers go in backticks."""
	text = ppr_name(name, policy)
	if name.is_operator():
		return text
	return f"`{text}`"


def _split_context(ty: Type) -> Tuple[List[TyPred], Type]:
	preds: List[TyPred] = []
	while True:
		parts = split_fun_type(ty)
		if parts is None or not isinstance(parts[0], TyPred):
			return preds, ty
		preds.append(parts[0])
		ty = parts[1]


def _ppr_context(preds: Sequence[TyPred], policy: QualificationPolicy) -> str:
	if not preds:
		return ""
	items = [_ppr(p, _TOP, policy) for p in preds]
	if len(items) == 1:
		return f"{items[0]} => "
	return f"({', '.join(items)}) => "


def _ppr(ty: Type, prec: int, policy: QualificationPolicy) -> str:
	if isinstance(ty, TyVar):
		return ty.name
	if isinstance(ty, TyMeta):
		return f"t{ty.uid}"
	if isinstance(ty, TyForAll):
		return _ppr(ty.body, prec, policy)
	if isinstance(ty, TyPred):
		text = f"{ppr_name(ty.cls, policy)} {_ppr(ty.arg, _TYCON_ARG, policy)}"
		return f"({text})" if prec >= _TYCON_ARG else text
	if isinstance(ty, TyCon):
		if ty.con == FUN_TYCON and len(ty.args) == 2:
			preds, body = _split_context(ty)
			if preds:
				text = _ppr_context(preds, policy) + _ppr(body, _TOP, policy)
			else:
				arg, res = ty.args
				text = f"{_ppr(arg, _FUN_ARG, policy)} -> {_ppr(res, _TOP, policy)}"
			return f"({text})" if prec >= _FUN_ARG else text
		if ty.con == LIST_TYCON and len(ty.args) == 1:
			return f"[{_ppr(ty.args[0], _TOP, policy)}]"
		head = ppr_prefix(ty.con, policy) if ty.con.is_operator() else ppr_name(ty.con, policy)
		if not ty.args:
			return head
		text = " ".join([head] + [_ppr(a, _TYCON_ARG, policy) for a in ty.args])
		return f"({text})" if prec >= _TYCON_ARG else text
	raise TypeError(f"cannot print {ty!r}")


def render_type(ty: Type, policy: QualificationPolicy = NEVER_QUALIFY) -> str:
	"""One-line rendering of a type; quantifiers hidden, contexts as `C a =>`."""
	return _ppr(ty, _TOP, policy)


def render_scheme(scheme: Scheme, policy: QualificationPolicy = NEVER_QUALIFY) -> str:
	return _ppr_context(scheme.preds, policy) + _ppr(scheme.body, _TOP, policy)


def _render_data_con(con: DataConThing, policy: QualificationPolicy) -> str:
	if con.name.is_operator() and len(con.arg_types) == 2:
		left, right = (_ppr(t, _TYCON_ARG, policy) for t in con.arg_types)
		return f"{left} {ppr_infix(con.name, policy)} {right}"
	parts = [ppr_prefix(con.name, policy)] + [_ppr(t, _TYCON_ARG, policy) for t in con.arg_types]
	return " ".join(parts)


def render_thing(thing: TyThing, policy: QualificationPolicy = NEVER_QUALIFY) -> str:
	if isinstance(thing, TyConThing):
		head = " ".join(["data", ppr_prefix(thing.name, policy)] + list(thing.tyvars))
		if not thing.data_cons:
			return head
		return f"{head} = " + " | ".join(_render_data_con(c, policy) for c in thing.data_cons)
	if isinstance(thing, ClassThing):
		head = f"class {ppr_name(thing.name, policy)} {thing.tyvar}"
		if not thing.methods:
			return head
		lines = [f"{head} where"]
		for method in thing.methods:
			lines.append(f"  {ppr_prefix(method.name, policy)} :: {render_type(method.scheme.body, policy)}")
		return "\n".join(lines)
	if isinstance(thing, (IdThing, DataConThing)):
		return f"{ppr_prefix(thing.name, policy)} :: {render_scheme(thing.scheme, policy)}"
	raise TypeError(f"cannot print {thing!r}")


def render_defined(name: Name) -> str:
	"""`-- Defined at file:line:col` for home names, `-- Defined in 'M'` otherwise."""
	if not name.is_external() and name.loc.is_good():
		return f"-- Defined at {name.loc.file}:{name.loc.line}:{name.loc.column}"
	return f"-- Defined in '{name.module}'"


def render_thing_in_context_loc(thing: TyThing, policy: QualificationPolicy = NEVER_QUALIFY) -> str:
	return f"{render_thing(thing, policy)}\t{render_defined(thing.name)}"


def render_fixity(fixity: Fixity, name: Name, policy: QualificationPolicy = NEVER_QUALIFY) -> str:
	return f"{fixity.assoc.value} {fixity.precedence} {ppr_infix(name, policy)}"


def render_instance(inst: Instance, policy: QualificationPolicy = NEVER_QUALIFY) -> str:
	head = f"{ppr_name(inst.cls, policy)} {_ppr(inst.head_type(), _TYCON_ARG, policy)}"
	return f"instance {_ppr_context(inst.context, policy)}{head}\t{render_defined(inst.name)}"


__all__ = [
	"QualificationPolicy",
	"NeverQualify",
	"QualifyIfNotInScope",
	"NEVER_QUALIFY",
	"ppr_name",
	"ppr_prefix",
	"ppr_infix",
	"render_type",
	"render_scheme",
	"render_thing",
	"render_defined",
	"render_thing_in_context_loc",
	"render_fixity",
	"render_instance",
]
