# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Collaborator surfaces the query functions are written against.

`hsinfo.session.Session` implements all of them. Anything else that provides
the same operations (a long-lived editor session, a test double) can drive
`get_identifier_info` and `get_type` too.
"""

from __future__ import annotations

from typing import Callable, List, Optional, Protocol, Sequence, Tuple, TypeVar

from hsinfo.core.diagnostics import SourceError
from hsinfo.core.names import Fixity, Instance, Name, TyThing
from hsinfo.ppr import QualificationPolicy
from hsinfo.session import LoadHowMuch, ModSummary, ParsedModule, SuccessFlag, Target, TypecheckedModule

T = TypeVar("T")


class ModuleLoader(Protocol):
	"""Maps a file to a loaded module."""

	def guess_target(self, target: str) -> Target: ...

	def set_targets(self, targets: Sequence[Target]) -> None: ...

	def load(self, how: LoadHowMuch) -> SuccessFlag: ...

	def get_module_graph(self) -> List[ModSummary]: ...


class ModuleChecker(Protocol):
	"""Re-parses and re-typechecks one module of the graph."""

	def parse_module(self, summary: ModSummary) -> ParsedModule: ...

	def typecheck_module(self, parsed: ParsedModule) -> TypecheckedModule: ...

	def lookup_global(self, name: Name) -> Optional[TyThing]:
		"""Used by lowering for things defined outside the module being queried."""
		...


class NameResolver(Protocol):
	"""Turns identifier text into declared names and describes them."""

	def set_context(self, module: str) -> None: ...

	def parse_name(self, text: str) -> List[Name]:
		"""Raises `SourceError` for malformed or unknown identifiers."""
		...

	def get_info(self, name: Name) -> Optional[Tuple[TyThing, Fixity, List[Instance]]]: ...

	def get_print_unqual(self) -> QualificationPolicy: ...


class ErrorReporter(Protocol):
	def handle_source_error(self, handler: Callable[[SourceError], T], action: Callable[[], T]) -> T: ...

	def print_exception(self, err: SourceError) -> None: ...


class QuerySession(ModuleLoader, ModuleChecker, NameResolver, ErrorReporter, Protocol):
	"""Everything `get_identifier_info` and `get_type` need."""
	pass


__all__ = ["ModuleLoader", "ModuleChecker", "NameResolver", "ErrorReporter", "QuerySession"]
