# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Identifier descriptions.

An identifier can name several things at once: `[]` is both the list type
and its empty-list constructor. A thing whose parent is also among the
results is dropped, so `[]` is described once, by its type.
"""

from __future__ import annotations

from typing import List, Sequence

from hsinfo.core.names import thing_parent

from .render import InfoTriple, render_infos


def filter_out_children(infos: Sequence[InfoTriple]) -> List[InfoTriple]:
	"""Drop infos whose thing's parent is also present; order is kept."""
	names = {thing.name for thing, _fixity, _insts in infos}
	return [info for info in infos if thing_parent(info[0]) not in names]


def info_thing(session, identifier: str) -> str:
	"""
	Describe everything `identifier` refers to in the session's context.

	Raises `SourceError` when the identifier is malformed or not in scope.
	"""
	names = session.parse_name(identifier)
	infos = [info for info in (session.get_info(name) for name in names) if info is not None]
	return render_infos(filter_out_children(infos), session.get_print_unqual())


__all__ = ["filter_out_children", "info_thing"]
