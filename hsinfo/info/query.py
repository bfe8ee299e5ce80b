# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Query entry points.

Both queries load the file (with everything it imports) into the session,
find its module in the module graph and answer against that module:

- `get_identifier_info(session, file, identifier)` describes what an
  identifier refers to in the module's scope;
- `get_type(session, file, (line, col))` lists every binding, expression and
  pattern around a point with its type, innermost first.

Failures are returned as `QueryError`, never raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Generic, List, Tuple, TypeVar, Union

from hsinfo.core.diagnostics import SourceError
from hsinfo.core.span import SourcePoint
from hsinfo.session import LoadHowMuch, ModSummary, SuccessFlag, TypecheckedModule

from .identifier import info_thing
from .ordering import FourInts, TypedFragment, order_fragments
from .protocols import QuerySession
from .span_index import search
from .type_recovery import binding_type, expression_type, pattern_type

T = TypeVar("T")

LOAD_ERROR = "Error loading targets"
MODULE_NOT_FOUND = "Module not found in module graph"


@dataclass(frozen=True)
class QueryOk(Generic[T]):
	value: T


@dataclass(frozen=True)
class QueryError:
	message: str


QueryResult = Union[QueryOk[T], QueryError]


def _source_error(err: SourceError) -> QueryError:
	return QueryError(str(err))


def _same_file(a: Union[str, Path], b: Union[str, Path]) -> bool:
	return Path(a).resolve() == Path(b).resolve()


def with_mod_summary(
	session: QuerySession,
	file: Union[str, Path],
	action: Callable[[ModSummary], QueryResult[T]],
) -> QueryResult[T]:
	"""Load `file` as the only target and run `action` on its module summary."""
	session.set_targets([session.guess_target(str(file))])
	if session.load(LoadHowMuch.LOAD_ALL_TARGETS) is not SuccessFlag.SUCCEEDED:
		return QueryError(LOAD_ERROR)
	for summary in session.get_module_graph():
		hs_file = summary.location.hs_file
		if hs_file is not None and _same_file(hs_file, file):
			return action(summary)
	return QueryError(MODULE_NOT_FOUND)


def get_identifier_info(session: QuerySession, file: Union[str, Path], identifier: str) -> QueryResult[str]:
	def describe(summary: ModSummary) -> QueryResult[str]:
		session.set_context(summary.module)
		return QueryOk(info_thing(session, identifier))

	return session.handle_source_error(_source_error, lambda: with_mod_summary(session, file, describe))


def types_at(session: QuerySession, typechecked: TypecheckedModule, point: SourcePoint) -> List[Tuple[FourInts, str]]:
	hits = search(typechecked.typechecked_source, point)
	fragments: List[TypedFragment | None] = []
	fragments.extend(expression_type(session, typechecked, expr) for expr in hits.expressions)
	fragments.extend(binding_type(bind) for bind in hits.bindings)
	fragments.extend(pattern_type(pat) for pat in hits.patterns)
	return order_fragments(frag for frag in fragments if frag is not None)


def get_type(session: QuerySession, file: Union[str, Path], point: SourcePoint) -> QueryResult[List[Tuple[FourInts, str]]]:
	def at_point(summary: ModSummary) -> QueryResult[List[Tuple[FourInts, str]]]:
		typechecked = session.typecheck_module(session.parse_module(summary))
		return QueryOk(types_at(session, typechecked, point))

	return session.handle_source_error(_source_error, lambda: with_mod_summary(session, file, at_point))


__all__ = [
	"LOAD_ERROR",
	"MODULE_NOT_FOUND",
	"QueryOk",
	"QueryError",
	"QueryResult",
	"with_mod_summary",
	"get_identifier_info",
	"types_at",
	"get_type",
]
