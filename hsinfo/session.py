# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Compiler session: targets, module loading and the interactive context.

A `Session` owns everything that outlives one query:

- the targets set with `set_targets` (files or module names);
- the module graph built by `load`: each target plus every home module it
  imports, found next to the importing file or under
  `SessionConfig.import_paths`, in dependency order;
- the typechecked home modules (a cache refreshed by every `load`);
- the `Prelude`, shipped with the package, parsed and checked once per
  session and implicitly imported by every home module;
- the interactive context (`set_context`) that identifier queries are
  resolved in.

Loading problems (unreadable files, missing imports, import cycles, parse and
type errors) are reported as `SourceError`s. `load` prints them through
`print_exception` and returns `SuccessFlag.FAILED`.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, TextIO, Tuple, TypeVar

from hsinfo.checker import TcGblEnv, TcResult, typecheck
from hsinfo.checker.env import ModDetails
from hsinfo.checker.tc_nodes import TBind
from hsinfo.core.diagnostics import Diagnostic, SourceError, has_errors
from hsinfo.core.names import (
	PRELUDE_MODULE,
	ClassThing,
	Fixity,
	Instance,
	Name,
	Namespace,
	TyConThing,
	TyThing,
)
from hsinfo.core.span import Span
from hsinfo.parser import INTERACTIVE, ast, parse_module_file, parse_name_query
from hsinfo.ppr import QualificationPolicy, QualifyIfNotInScope

_PRELUDE_PATH = Path(__file__).parent / "prelude" / "Prelude.hs"

T = TypeVar("T")


class LoadHowMuch(Enum):
	LOAD_ALL_TARGETS = auto()


class SuccessFlag(Enum):
	SUCCEEDED = auto()
	FAILED = auto()


@dataclass(frozen=True)
class Target:
	"""A file to load, or a module to find on the import path."""

	path: Optional[Path] = None
	module: Optional[str] = None

	def __str__(self) -> str:
		return str(self.path) if self.path is not None else str(self.module)


@dataclass
class ModLocation:
	hs_file: Optional[str] = None


@dataclass
class ModSummary:
	"""A home module in the module graph."""

	module: str
	location: ModLocation
	imports: List[str] = field(default_factory=list)


@dataclass
class ParsedModule:
	summary: ModSummary
	source: ast.Module


@dataclass
class TypecheckedModule:
	parsed_module: ParsedModule
	typechecked_source: List[TBind]
	internals: TcGblEnv
	warnings: List[Diagnostic] = field(default_factory=list)


@dataclass
class SessionConfig:
	"""
	Session settings.

	import_paths: directories searched for imported modules after the
	    importing file's own directory
	implicit_prelude: import `Prelude` into every module that does not
	    import it explicitly
	error_stream: where `print_exception` writes (default: sys.stderr)
	tab_width: tab stop used for layout
	"""

	import_paths: List[Path] = field(default_factory=list)
	implicit_prelude: bool = True
	error_stream: Optional[TextIO] = None
	tab_width: int = 8


def _module_file(module: str) -> Path:
	return Path(*module.split(".")).with_suffix(".hs")


def _loader_error(message: str, span: Span, notes: Optional[List[str]] = None) -> Diagnostic:
	return Diagnostic(message=message, phase="loader", span=span, notes=notes or [])


class Session:
	def __init__(self, config: Optional[SessionConfig] = None) -> None:
		self.config = config or SessionConfig()
		self._targets: List[Target] = []
		self._graph: List[ModSummary] = []
		self._home: Dict[str, TcResult] = {}
		self._prelude: Optional[TcResult] = None
		self._context: Optional[str] = None

	# Targets and loading

	def guess_target(self, target: str | Path) -> Target:
		"""A `.hs` path or an existing file is a file target, anything else a module name."""
		text = str(target)
		if text.endswith(".hs") or Path(text).is_file():
			return Target(path=Path(text))
		return Target(module=text)

	def set_targets(self, targets: Sequence[Target]) -> None:
		self._targets = list(targets)

	def load(self, how: LoadHowMuch = LoadHowMuch.LOAD_ALL_TARGETS) -> SuccessFlag:
		"""Build the module graph from the targets and typecheck every module in it."""
		self._graph = []
		self._home = {}
		try:
			graph, sources = self._build_graph()
			for summary in graph:
				result = self._typecheck(sources[summary.module])
				self._home[summary.module] = result
				self._graph.append(summary)
		except SourceError as err:
			self._graph = []
			self._home = {}
			self.print_exception(err)
			return SuccessFlag.FAILED
		if self._context not in self._home:
			self._context = self._graph[-1].module if self._graph else None
		return SuccessFlag.SUCCEEDED

	def get_module_graph(self) -> List[ModSummary]:
		"""Summaries of the loaded home modules, dependencies first."""
		return list(self._graph)

	def _parse(self, path: Path) -> ast.Module:
		return parse_module_file(path, tab_width=self.config.tab_width)

	def _find_module(self, module: str, near: Optional[Path]) -> Optional[Path]:
		dirs: List[Path] = []
		if near is not None:
			dirs.append(near.parent)
		dirs.extend(self.config.import_paths)
		if not dirs:
			dirs.append(Path("."))
		for base in dirs:
			candidate = base / _module_file(module)
			if candidate.is_file():
				return candidate
		return None

	def _build_graph(self) -> Tuple[List[ModSummary], Dict[str, ast.Module]]:
		diagnostics: List[Diagnostic] = []
		sources: Dict[str, ast.Module] = {}
		summaries: Dict[str, ModSummary] = {}
		pending: List[Tuple[Path, Optional[str], Span]] = []

		for target in self._targets:
			if target.path is not None:
				pending.append((target.path, None, Span()))
				continue
			path = self._find_module(str(target.module), None)
			if path is None:
				diagnostics.append(_loader_error(f"Could not find module '{target.module}'", Span()))
			else:
				pending.append((path, target.module, Span()))

		while pending:
			path, expected, import_loc = pending.pop(0)
			if not path.is_file():
				diagnostics.append(_loader_error(f"can't find file: {path}", import_loc))
				continue
			module = self._parse(path)
			if expected is not None and module.name != expected:
				diagnostics.append(
					_loader_error(f"file name does not match module name '{module.name}'", module.header_loc)
				)
				continue
			known = summaries.get(module.name)
			if known is not None:
				if known.location.hs_file is not None and Path(known.location.hs_file).resolve() != path.resolve():
					diagnostics.append(
						_loader_error(
							f"module '{module.name}' is defined in multiple files",
							module.header_loc,
							notes=[f"{known.location.hs_file}", f"{path}"],
						)
					)
				continue
			imports = [imp.module for imp in module.imports if imp.module != PRELUDE_MODULE]
			summaries[module.name] = ModSummary(module=module.name, location=ModLocation(hs_file=str(path)), imports=imports)
			sources[module.name] = module
			for imp in module.imports:
				if imp.module == PRELUDE_MODULE or imp.module in summaries:
					continue
				found = self._find_module(imp.module, path)
				if found is None:
					diagnostics.append(_loader_error(f"Could not find module '{imp.module}'", imp.loc))
				else:
					pending.append((found, imp.module, imp.loc))

		if not has_errors(diagnostics):
			cycle = _find_cycle(summaries)
			if cycle is not None:
				first = sources[cycle[0]]
				loc = next((imp.loc for imp in first.imports if imp.module == cycle[1]), first.header_loc)
				notes = [f"{a} imports {b}" for a, b in zip(cycle, cycle[1:])]
				diagnostics.append(_loader_error(f"import cycle detected: {' -> '.join(cycle)}", loc, notes))

		if has_errors(diagnostics):
			raise SourceError(diagnostics)
		return _topological(summaries), sources

	# Parsing and typechecking

	def _prelude_result(self) -> TcResult:
		if self._prelude is None:
			self._prelude = typecheck(self._parse(_PRELUDE_PATH))
		return self._prelude

	def _imports_of(self, module: ast.Module) -> List[ModDetails]:
		names = [imp.module for imp in module.imports]
		if self.config.implicit_prelude and module.name != PRELUDE_MODULE and PRELUDE_MODULE not in names:
			names.insert(0, PRELUDE_MODULE)
		details: List[ModDetails] = []
		for name in names:
			if name == PRELUDE_MODULE:
				result = self._prelude_result()
			else:
				result = self._home.get(name)
				if result is None:
					raise SourceError.single(f"module '{name}' is not loaded", phase="loader")
			if result.env.details is not None:
				details.append(result.env.details)
		return details

	def _typecheck(self, module: ast.Module) -> TcResult:
		return typecheck(module, self._imports_of(module))

	def parse_module(self, summary: ModSummary) -> ParsedModule:
		"""Re-read and parse a home module's source file."""
		if summary.location.hs_file is None:
			raise SourceError.single(f"module '{summary.module}' has no source file", phase="loader")
		return ParsedModule(summary=summary, source=self._parse(Path(summary.location.hs_file)))

	def typecheck_module(self, parsed: ParsedModule) -> TypecheckedModule:
		result = self._typecheck(parsed.source)
		return TypecheckedModule(
			parsed_module=parsed,
			typechecked_source=result.binds,
			internals=result.env,
			warnings=result.warnings,
		)

	# Interactive context and name queries

	def set_context(self, module: str) -> None:
		"""Resolve identifier queries in the scope of a loaded home module."""
		if module not in self._home:
			raise SourceError.single(f"module '{module}' is not loaded", phase="interactive")
		self._context = module

	def _context_env(self) -> TcGblEnv:
		if self._context is not None and self._context in self._home:
			return self._home[self._context].env
		return self._prelude_result().env

	def parse_name(self, text: str) -> List[Name]:
		"""
		Every name in scope that an identifier refers to.

		Constructor-like identifiers (`Maybe`, `Just`, `[]`) are looked up as
		type names and as data constructors, in that order; variables and
		operators as values only.
		"""
		query = parse_name_query(text)
		env = self._context_env()
		if isinstance(query, ast.Con):
			spaces = (Namespace.TYPE, Namespace.VALUE)
		else:
			spaces = (Namespace.VALUE,)
		names = [name for ns in spaces for name in env.rdr_env.lookup(ns, query.name)]
		if not names:
			loc = Span(file=INTERACTIVE, line=1, column=1, end_line=1, end_column=len(text) + 1)
			raise SourceError.single(f"Not in scope: '{text.strip()}'", span=loc, phase="interactive")
		return names

	def lookup_global(self, name: Name) -> Optional[TyThing]:
		"""The thing a top-level name denotes, looked up in its defining module."""
		if name.module == PRELUDE_MODULE:
			env: Optional[TcGblEnv] = self._prelude_result().env
		else:
			result = self._home.get(name.module)
			env = result.env if result is not None else None
		if env is None:
			return None
		return env.lookup_thing(name)

	def get_info(self, name: Name) -> Optional[Tuple[TyThing, Fixity, List[Instance]]]:
		"""A name's thing, fixity and the instances visible in the interactive context."""
		thing = self.lookup_global(name)
		if thing is None:
			return None
		env = self._context_env()
		if name in env.fixities:
			fixity = env.fixity_of(name)
		else:
			owner = self._prelude_result() if name.module == PRELUDE_MODULE else self._home[name.module]
			fixity = owner.env.fixity_of(name)
		if isinstance(thing, ClassThing):
			instances = env.instances_of_class(name)
		elif isinstance(thing, TyConThing):
			instances = env.instances_of_tycon(name)
		else:
			instances = []
		return thing, fixity, instances

	def get_print_unqual(self) -> QualificationPolicy:
		return QualifyIfNotInScope(self._context_env().rdr_env)

	# Errors

	def handle_source_error(self, handler: Callable[[SourceError], T], action: Callable[[], T]) -> T:
		"""Run `action`; a `SourceError` it raises is passed to `handler` instead."""
		try:
			return action()
		except SourceError as err:
			return handler(err)

	def print_exception(self, err: SourceError) -> None:
		print(str(err), file=self.config.error_stream or sys.stderr)


def _find_cycle(summaries: Dict[str, ModSummary]) -> Optional[List[str]]:
	visited: set[str] = set()
	stack: List[str] = []
	on_stack: set[str] = set()

	def dfs(node: str) -> Optional[List[str]]:
		visited.add(node)
		stack.append(node)
		on_stack.add(node)
		for dep in summaries[node].imports:
			if dep not in summaries:
				continue
			if dep not in visited:
				cycle = dfs(dep)
				if cycle is not None:
					return cycle
			elif dep in on_stack:
				return stack[stack.index(dep):] + [dep]
		stack.pop()
		on_stack.remove(node)
		return None

	for node in summaries:
		if node not in visited:
			cycle = dfs(node)
			if cycle is not None:
				return cycle
	return None


def _topological(summaries: Dict[str, ModSummary]) -> List[ModSummary]:
	"""Dependencies before dependents; otherwise in discovery order. Assumes no cycles."""
	order: List[ModSummary] = []
	done: set[str] = set()

	def visit(node: str) -> None:
		if node in done:
			return
		done.add(node)
		for dep in summaries[node].imports:
			if dep in summaries:
				visit(dep)
		order.append(summaries[node])

	for node in summaries:
		visit(node)
	return order


__all__ = [
	"LoadHowMuch",
	"SuccessFlag",
	"Target",
	"ModLocation",
	"ModSummary",
	"ParsedModule",
	"TypecheckedModule",
	"SessionConfig",
	"Session",
]
