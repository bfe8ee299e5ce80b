# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Type representation shared by the checker, the desugarer and the printer.

Types are immutable values:

- `TyVar`    rigid/quantified type variable (`a`, `b`, ...)
- `TyMeta`   unification variable, only alive while a binding group is checked
- `TyCon`    type constructor application; functions use the `->` constructor
- `TyPred`   a class constraint; in core terms it is the type of a dictionary
- `TyForAll` quantification, produced for polymorphic identifiers in core

A `Scheme` is the checker's view of a polymorphic type: quantified variables,
class context and body.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Mapping, Tuple

if TYPE_CHECKING:
	from .names import Name


class Type:
	"""Base class for all types."""

	__slots__ = ()


@dataclass(frozen=True)
class TyVar(Type):
	name: str


@dataclass(frozen=True)
class TyMeta(Type):
	uid: int


@dataclass(frozen=True)
class TyCon(Type):
	con: "Name"
	args: Tuple[Type, ...] = ()


@dataclass(frozen=True)
class TyPred(Type):
	cls: "Name"
	arg: Type


@dataclass(frozen=True)
class TyForAll(Type):
	tvs: Tuple[str, ...]
	body: Type


@dataclass(frozen=True)
class Scheme:
	"""`forall tvs. preds => body`."""

	tvs: Tuple[str, ...]
	preds: Tuple[TyPred, ...]
	body: Type

	@classmethod
	def mono(cls, ty: Type) -> "Scheme":
		return cls((), (), ty)

	def is_mono(self) -> bool:
		return not self.tvs and not self.preds

	def to_type(self) -> Type:
		"""
		The core type of an identifier with this scheme: class constraints
		become dictionary arguments under the quantifier.
		"""
		from .builtins import fun_type

		body = self.body
		for pred in reversed(self.preds):
			body = fun_type(pred, body)
		if self.tvs:
			return TyForAll(self.tvs, body)
		return body


def subst_type(ty: Type, mapping: Mapping[str, Type]) -> Type:
	"""Replace rigid type variables according to `mapping`."""
	if not mapping:
		return ty
	if isinstance(ty, TyVar):
		return mapping.get(ty.name, ty)
	if isinstance(ty, TyCon):
		if not ty.args:
			return ty
		return TyCon(ty.con, tuple(subst_type(a, mapping) for a in ty.args))
	if isinstance(ty, TyPred):
		return TyPred(ty.cls, subst_type(ty.arg, mapping))
	if isinstance(ty, TyForAll):
		inner = {k: v for k, v in mapping.items() if k not in ty.tvs}
		return TyForAll(ty.tvs, subst_type(ty.body, inner))
	return ty


def subst_metas(ty: Type, mapping: Mapping[int, Type]) -> Type:
	"""Replace unification variables according to `mapping` (one level)."""
	if not mapping:
		return ty
	if isinstance(ty, TyMeta):
		return mapping.get(ty.uid, ty)
	if isinstance(ty, TyCon):
		if not ty.args:
			return ty
		return TyCon(ty.con, tuple(subst_metas(a, mapping) for a in ty.args))
	if isinstance(ty, TyPred):
		return TyPred(ty.cls, subst_metas(ty.arg, mapping))
	if isinstance(ty, TyForAll):
		return TyForAll(ty.tvs, subst_metas(ty.body, mapping))
	return ty


def free_tyvars(ty: Type) -> List[str]:
	"""Free rigid type variables in left-to-right order, without duplicates."""
	out: List[str] = []

	def go(t: Type, bound: Tuple[str, ...]) -> None:
		if isinstance(t, TyVar):
			if t.name not in bound and t.name not in out:
				out.append(t.name)
		elif isinstance(t, TyCon):
			for a in t.args:
				go(a, bound)
		elif isinstance(t, TyPred):
			go(t.arg, bound)
		elif isinstance(t, TyForAll):
			go(t.body, bound + t.tvs)

	go(ty, ())
	return out


def meta_uids(ty: Type) -> List[int]:
	"""Unification variables in left-to-right order, without duplicates."""
	out: List[int] = []

	def go(t: Type) -> None:
		if isinstance(t, TyMeta):
			if t.uid not in out:
				out.append(t.uid)
		elif isinstance(t, TyCon):
			for a in t.args:
				go(a)
		elif isinstance(t, TyPred):
			go(t.arg)
		elif isinstance(t, TyForAll):
			go(t.body)

	go(ty)
	return out


def instantiate_forall(ty: Type, args: List[Type]) -> Type:
	"""Apply a `TyForAll` to type arguments (core type application)."""
	if not isinstance(ty, TyForAll):
		raise TypeError(f"type application to non-polymorphic type {ty!r}")
	if len(args) > len(ty.tvs):
		raise TypeError(f"too many type arguments for {ty!r}")
	mapping: Dict[str, Type] = dict(zip(ty.tvs, args))
	rest = ty.tvs[len(args):]
	if rest:
		return TyForAll(rest, subst_type(ty.body, mapping))
	return subst_type(ty.body, mapping)


__all__ = [
	"Type",
	"TyVar",
	"TyMeta",
	"TyCon",
	"TyPred",
	"TyForAll",
	"Scheme",
	"subst_type",
	"subst_metas",
	"free_tyvars",
	"meta_uids",
	"instantiate_forall",
]
