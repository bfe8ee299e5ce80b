# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Global environments produced by typechecking a module.

- `GlobalRdrEnv` maps unqualified occurrence names to the declared names in
  scope (imports plus the module's own top-level declarations).
- `ModDetails` is what a module exports to its importers.
- `TcGblEnv` is the full post-typecheck environment of one module.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Tuple

from hsinfo.core.names import DEFAULT_FIXITY, Fixity, Instance, Name, Namespace, TyThing


class GlobalRdrEnv:
	"""
	Names in scope, keyed by namespace and occurrence text.

	A name defined in the module itself shadows imported names with the same
	occurrence; two imported names with the same occurrence stay side by side
	and make the occurrence ambiguous.
	"""

	def __init__(self, module: str) -> None:
		self.module = module
		self._scope: Dict[Tuple[Namespace, str], List[Name]] = {}

	def add(self, name: Name) -> None:
		key = (name.namespace, name.occ)
		current = self._scope.setdefault(key, [])
		if name in current:
			return
		if name.module == self.module:
			current[:] = [n for n in current if n.module == self.module]
		elif any(n.module == self.module for n in current):
			return
		current.append(name)

	def lookup(self, namespace: Namespace, occ: str) -> List[Name]:
		return list(self._scope.get((namespace, occ), ()))

	def names(self) -> Iterator[Name]:
		for names in self._scope.values():
			yield from names

	def is_unqualified_in_scope(self, name: Name) -> bool:
		"""True if `name` is the only thing its occurrence text refers to."""
		return self._scope.get((name.namespace, name.occ), []) == [name]


@dataclass
class ModDetails:
	"""The declarations a module makes visible to its importers."""

	module: str
	things: Dict[Name, TyThing] = field(default_factory=dict)
	fixities: Dict[Name, Fixity] = field(default_factory=dict)
	instances: List[Instance] = field(default_factory=list)


@dataclass
class TcGblEnv:
	"""Everything known about a module after typechecking it."""

	module: str
	rdr_env: GlobalRdrEnv
	type_env: Dict[Name, TyThing] = field(default_factory=dict)
	fixities: Dict[Name, Fixity] = field(default_factory=dict)
	instances: List[Instance] = field(default_factory=list)
	details: ModDetails | None = None

	def lookup_thing(self, name: Name) -> TyThing | None:
		return self.type_env.get(name)

	def fixity_of(self, name: Name) -> Fixity:
		return self.fixities.get(name, DEFAULT_FIXITY)

	def instances_of_class(self, cls: Name) -> List[Instance]:
		return [inst for inst in self.instances if inst.cls == cls]

	def instances_of_tycon(self, tycon: Name) -> List[Instance]:
		return [inst for inst in self.instances if inst.head == tycon]

	def import_details(self, details: ModDetails) -> None:
		"""Bring an imported module's exports into scope."""
		for name, thing in details.things.items():
			self.type_env[name] = thing
			self.rdr_env.add(name)
		self.fixities.update(details.fixities)
		for inst in details.instances:
			if inst not in self.instances:
				self.instances.append(inst)


__all__ = ["GlobalRdrEnv", "ModDetails", "TcGblEnv"]
