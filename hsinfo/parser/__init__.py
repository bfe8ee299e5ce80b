# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Parser entry points.

Parses `.hs` source into `ast.Module` and identifier queries into a `Var` /
`Con`. Every failure (lark lexing/parsing errors and AST-builder errors) is
reported as a `SourceError` carrying one parser-phase diagnostic, so callers
never see raw lark exceptions.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from lark.exceptions import UnexpectedCharacters, UnexpectedInput, UnexpectedToken

from hsinfo.core.diagnostics import Diagnostic, SourceError
from hsinfo.core.span import Span

from . import ast
from . import parser as _parser
from .parser import LayoutInserter, ParseError

INTERACTIVE = "<interactive>"


def _position(value: object) -> Optional[int]:
	if isinstance(value, int) and value > 0:
		return value
	return None


def _describe(err: UnexpectedInput) -> str:
	if isinstance(err, UnexpectedCharacters):
		return f"lexical error at character {err.char!r}"
	if isinstance(err, UnexpectedToken):
		tok = err.token
		if tok.type == "$END" or not tok.value:
			return "parse error (possibly incorrect indentation or mismatched brackets)"
		return f"parse error on input '{tok.value}'"
	return "parse error"


def _error_from_lark(err: UnexpectedInput, file: Optional[str]) -> SourceError:
	span = Span(
		file=file,
		line=_position(getattr(err, "line", None)),
		column=_position(getattr(err, "column", None)),
		raw=err,
	)
	return SourceError([Diagnostic(message=_describe(err), phase="parser", span=span)])


def parse_module_text(source: str, path: Optional[str] = None, *, tab_width: int = 8) -> ast.Module:
	"""Parse module source text; raises `SourceError` on malformed input."""
	try:
		return _parser.parse_module_source(source, path, tab_width=tab_width)
	except UnexpectedInput as err:
		raise _error_from_lark(err, path) from err
	except ParseError as err:
		raise SourceError([Diagnostic(message=str(err), phase="parser", span=err.loc)]) from err


def parse_module_file(path: Path | str, *, tab_width: int = 8) -> ast.Module:
	"""Read and parse a source file; the span file is `str(path)`."""
	file = str(path)
	try:
		source = Path(path).read_text(encoding="utf-8")
	except UnicodeDecodeError as err:
		raise SourceError.single(f"can't decode file as UTF-8: {err.reason}", span=Span(file=file), phase="parser") from err
	except OSError as err:
		raise SourceError.single(f"can't read file: {err.strerror or err}", span=Span(file=file), phase="parser") from err
	return parse_module_text(source, file, tab_width=tab_width)


def parse_name_query(text: str) -> ast.Expr:
	"""Parse an identifier as typed at an interactive prompt."""
	try:
		return _parser.parse_name_text(text)
	except UnexpectedInput as err:
		raise _error_from_lark(err, INTERACTIVE) from err


__all__ = [
	"ast",
	"INTERACTIVE",
	"LayoutInserter",
	"ParseError",
	"parse_module_text",
	"parse_module_file",
	"parse_name_query",
]
