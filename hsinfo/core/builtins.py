# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Names the checker and desugarer know about without looking them up.

All of them live in the Prelude. `->` is wired in (it has no declaration);
the list type and its constructors are declared by the prelude loader; the
rest (`Int`, `String`, `Bool`, ...) come from `prelude/Prelude.hs`.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from .names import PRELUDE_MODULE, Name, Namespace
from .types_core import TyCon, Type

FUN_TYCON = Name("->", PRELUDE_MODULE, Namespace.TYPE)
LIST_TYCON = Name("[]", PRELUDE_MODULE, Namespace.TYPE)
NIL_DATACON = Name("[]", PRELUDE_MODULE, Namespace.VALUE)
CONS_DATACON = Name(":", PRELUDE_MODULE, Namespace.VALUE)
INT_TYCON = Name("Int", PRELUDE_MODULE, Namespace.TYPE)
STRING_TYCON = Name("String", PRELUDE_MODULE, Namespace.TYPE)
BOOL_TYCON = Name("Bool", PRELUDE_MODULE, Namespace.TYPE)
TRUE_DATACON = Name("True", PRELUDE_MODULE, Namespace.VALUE)
FALSE_DATACON = Name("False", PRELUDE_MODULE, Namespace.VALUE)
PAT_ERROR_ID = Name("patError", PRELUDE_MODULE, Namespace.VALUE)

INT_TYPE = TyCon(INT_TYCON)
STRING_TYPE = TyCon(STRING_TYCON)
BOOL_TYPE = TyCon(BOOL_TYCON)


def fun_type(arg: Type, res: Type) -> Type:
	return TyCon(FUN_TYCON, (arg, res))


def fun_types(args: Sequence[Type], res: Type) -> Type:
	for arg in reversed(args):
		res = fun_type(arg, res)
	return res


def split_fun_type(ty: Type) -> Optional[Tuple[Type, Type]]:
	if isinstance(ty, TyCon) and ty.con == FUN_TYCON and len(ty.args) == 2:
		return ty.args[0], ty.args[1]
	return None


def split_fun_types(ty: Type, arity: int) -> Tuple[List[Type], Type]:
	"""Peel up to `arity` argument types off a function type."""
	args: List[Type] = []
	while len(args) < arity:
		parts = split_fun_type(ty)
		if parts is None:
			break
		args.append(parts[0])
		ty = parts[1]
	return args, ty


def list_type(elem: Type) -> Type:
	return TyCon(LIST_TYCON, (elem,))


def literal_type(value: object) -> Type:
	if isinstance(value, bool):
		raise TypeError("boolean literals are constructors, not literals")
	if isinstance(value, int):
		return INT_TYPE
	return STRING_TYPE


__all__ = [
	"FUN_TYCON",
	"LIST_TYCON",
	"NIL_DATACON",
	"CONS_DATACON",
	"INT_TYCON",
	"STRING_TYCON",
	"BOOL_TYCON",
	"TRUE_DATACON",
	"FALSE_DATACON",
	"PAT_ERROR_ID",
	"INT_TYPE",
	"STRING_TYPE",
	"BOOL_TYPE",
	"fun_type",
	"fun_types",
	"split_fun_type",
	"split_fun_types",
	"list_type",
	"literal_type",
]
