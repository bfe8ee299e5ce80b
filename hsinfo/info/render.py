# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""User-facing text for types and identifier info."""

from __future__ import annotations

from typing import List, Sequence, Tuple

from hsinfo.core.names import DEFAULT_FIXITY, Fixity, Instance, TyThing
from hsinfo.core.types_core import Type
from hsinfo.ppr import (
	NEVER_QUALIFY,
	QualificationPolicy,
	render_fixity,
	render_instance,
	render_thing_in_context_loc,
	render_type,
)

InfoTriple = Tuple[TyThing, Fixity, List[Instance]]


def render_type_for_user(ty: Type) -> str:
	"""One line, no module qualifiers, no explicit foralls."""
	return render_type(ty, NEVER_QUALIFY)


def render_info(thing: TyThing, fixity: Fixity, instances: Sequence[Instance], policy: QualificationPolicy) -> str:
	lines = [render_thing_in_context_loc(thing, policy)]
	if fixity != DEFAULT_FIXITY:
		lines.append(render_fixity(fixity, thing.name, policy))
	lines.extend(render_instance(inst, policy) for inst in instances)
	return "\n".join(lines)


def render_infos(infos: Sequence[InfoTriple], policy: QualificationPolicy) -> str:
	"""Info blocks separated by a blank line."""
	return "\n\n".join(render_info(thing, fixity, insts, policy) for thing, fixity, insts in infos)


__all__ = ["InfoTriple", "render_type_for_user", "render_info", "render_infos"]
