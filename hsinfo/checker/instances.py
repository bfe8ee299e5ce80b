# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Instance environment: which class instances exist and how a constraint on a
concrete type is reduced through one of them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from hsinfo.core.names import Instance, Name
from hsinfo.core.types_core import TyCon, TyPred, Type, subst_type


@dataclass
class InstanceMatch:
	"""An instance selected for a constraint, with its context instantiated."""

	instance: Instance
	type_args: List[Type]
	context: List[TyPred]


class InstEnv:
	"""Instances indexed by (class, head type constructor)."""

	def __init__(self, instances: Iterable[Instance] = ()) -> None:
		self._by_key: Dict[Tuple[Name, Name], Instance] = {}
		for inst in instances:
			self.add(inst)

	def add(self, inst: Instance) -> Optional[Instance]:
		"""Register `inst`; returns the already registered instance on overlap."""
		key = (inst.cls, inst.head)
		existing = self._by_key.get(key)
		if existing is not None:
			return existing
		self._by_key[key] = inst
		return None

	def lookup(self, cls: Name, head: Name) -> Optional[Instance]:
		return self._by_key.get((cls, head))

	def match(self, pred: TyPred) -> Optional[InstanceMatch]:
		"""Reduce `pred` (whose argument must be a constructor application)."""
		arg = pred.arg
		if not isinstance(arg, TyCon):
			return None
		inst = self.lookup(pred.cls, arg.con)
		if inst is None:
			return None
		mapping = dict(zip(inst.tyvars, arg.args))
		context = [TyPred(p.cls, subst_type(p.arg, mapping)) for p in inst.context]
		return InstanceMatch(instance=inst, type_args=list(arg.args), context=context)

	def __iter__(self):
		return iter(self._by_key.values())

	def __len__(self) -> int:
		return len(self._by_key)


__all__ = ["InstEnv", "InstanceMatch"]
