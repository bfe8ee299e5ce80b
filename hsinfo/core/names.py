# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Names of declared entities and the things they denote.

A `Name` identifies a declaration: its occurrence text, defining module and
namespace. Two names are equal when those agree (plus a unique for locally
bound names); the definition span rides along but does not take part in
comparisons.

A `TyThing` is what a name denotes in the type environment: a type
constructor, a data constructor, a class or an identifier (variables,
primitives and class methods).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional, Tuple, Union

from .span import Span
from .types_core import Scheme, TyCon, TyPred, TyVar, Type

PRELUDE_MODULE = "Prelude"


class Namespace(Enum):
	VALUE = auto()  # variables, data constructors
	TYPE = auto()   # type constructors, classes


@dataclass(frozen=True)
class Name:
	"""A declared (or locally bound) name."""

	occ: str
	module: str
	namespace: Namespace = Namespace.VALUE
	unique: int = 0  # 0 for top-level names; locals get a fresh unique
	loc: Span = field(default_factory=Span, compare=False, hash=False)

	def is_operator(self) -> bool:
		"""Symbolic names print in parentheses when used prefix."""
		return not (self.occ[0].isalpha() or self.occ[0] == "_" or self.occ in ("[]", "()"))

	def is_external(self) -> bool:
		return self.module == PRELUDE_MODULE

	def qualified(self) -> str:
		return f"{self.module}.{self.occ}"

	def __str__(self) -> str:
		return self.occ


class Assoc(Enum):
	INFIXL = "infixl"
	INFIXR = "infixr"
	INFIX = "infix"


@dataclass(frozen=True)
class Fixity:
	"""Operator associativity and precedence (0-9)."""

	assoc: Assoc
	precedence: int

	def __str__(self) -> str:
		return f"{self.assoc.value} {self.precedence}"


DEFAULT_FIXITY = Fixity(Assoc.INFIXL, 9)


@dataclass
class TyConThing:
	"""A `data` type constructor; primitive types have no constructors."""

	name: Name
	tyvars: List[str]
	data_cons: List["DataConThing"] = field(default_factory=list)


@dataclass
class DataConThing:
	"""A data constructor of `parent`, with its full (polymorphic) type."""

	name: Name
	parent: Name
	scheme: Scheme
	arg_types: List[Type] = field(default_factory=list)  # in terms of the parent's tyvars
	tag: int = 0


@dataclass
class ClassThing:
	"""A single-parameter type class and its method names."""

	name: Name
	tyvar: str
	methods: List["IdThing"] = field(default_factory=list)


@dataclass
class IdThing:
	"""
	A value-level identifier.

	`parent` is set for class methods (the class name). `primitive` marks
	identifiers declared with `primitive` and implemented by the runtime.
	"""

	name: Name
	scheme: Scheme
	parent: Optional[Name] = None
	primitive: bool = False


TyThing = Union[TyConThing, DataConThing, ClassThing, IdThing]


def thing_parent(thing: TyThing) -> Optional[Name]:
	"""Parent declaration of a thing: a constructor's type, a method's class."""
	if isinstance(thing, DataConThing):
		return thing.parent
	if isinstance(thing, IdThing):
		return thing.parent
	return None


@dataclass(frozen=True)
class Instance:
	"""
	A class instance `context => cls (head tyvars...)`.

	`name` is the instance's own (dictionary) name; it carries the module and
	the location of the instance declaration.
	"""

	name: Name
	cls: Name
	head: Name
	tyvars: Tuple[str, ...] = ()
	context: Tuple[TyPred, ...] = ()

	def head_type(self) -> Type:
		return TyCon(self.head, tuple(TyVar(v) for v in self.tyvars))


__all__ = [
	"PRELUDE_MODULE",
	"Namespace",
	"Name",
	"Assoc",
	"Fixity",
	"DEFAULT_FIXITY",
	"TyConThing",
	"DataConThing",
	"ClassThing",
	"IdThing",
	"TyThing",
	"thing_parent",
	"Instance",
]
