# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Source spans attached to syntax nodes.

A Span carries the file plus 1-based start/end positions. The end column is
exclusive (the column just past the last character), matching the positions
lark reports for tokens. `Span()` is the unknown span used for compiler
generated nodes; such spans are not "good" and never take part in point
queries.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Tuple

SourcePoint = Tuple[int, int]  # (line, column), both 1-based


@dataclass(frozen=True)
class Span:
	"""Represents a source span (file plus start/end line and column)."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None
	end_line: Optional[int] = None
	end_column: Optional[int] = None
	raw: Any = None

	@classmethod
	def from_loc(cls, loc: Any, file: Optional[str] = None) -> "Span":
		"""
		Construct a Span from a parser location object (lark meta or token).

		If `loc` is already a Span it is returned unchanged. Missing or empty
		lark metadata yields the unknown span.
		"""
		if loc is None:
			return cls(file=file)
		if isinstance(loc, cls):
			return loc
		if getattr(loc, "empty", False):
			return cls(file=file)
		return cls(
			file=file,
			line=getattr(loc, "line", None),
			column=getattr(loc, "column", None),
			end_line=getattr(loc, "end_line", None),
			end_column=getattr(loc, "end_column", None),
		)

	def start(self) -> SourcePoint:
		return (self.line or 0, self.column or 0)

	def end(self) -> SourcePoint:
		return (self.end_line or 0, self.end_column or 0)

	def is_good(self) -> bool:
		"""True for spans that point at real source text."""
		return (
			self.line is not None
			and self.column is not None
			and self.end_line is not None
			and self.end_column is not None
			and self.line > 0
			and self.column > 0
		)

	def contains(self, point: SourcePoint) -> bool:
		"""True if `point` lies within the span, both ends inclusive."""
		if not self.is_good():
			return False
		return self.start() <= tuple(point) <= self.end()

	def is_subspan_of(self, other: "Span") -> bool:
		"""True if this span lies within `other` (equal spans included)."""
		if not (self.is_good() and other.is_good()):
			return False
		if self.file != other.file:
			return False
		return other.start() <= self.start() and self.end() <= other.end()

	def four_ints(self) -> Optional[Tuple[int, int, int, int]]:
		"""
		Return `(line, column, end_line, end_column)`, or None when the span
		has no such representation.
		"""
		if not self.is_good():
			return None
		return (self.line, self.column, self.end_line, self.end_column)  # type: ignore[return-value]

	def with_file(self, file: Optional[str]) -> "Span":
		return Span(
			file=file,
			line=self.line,
			column=self.column,
			end_line=self.end_line,
			end_column=self.end_column,
			raw=self.raw,
		)

	@staticmethod
	def cover(first: "Span", last: "Span") -> "Span":
		"""Smallest span reaching from the start of `first` to the end of `last`."""
		if not first.is_good():
			return last
		if not last.is_good():
			return first
		return Span(
			file=first.file,
			line=first.line,
			column=first.column,
			end_line=last.end_line,
			end_column=last.end_column,
		)

	def __str__(self) -> str:
		if not self.is_good():
			return f"{self.file}" if self.file else "<no location info>"
		prefix = f"{self.file}:" if self.file else ""
		return f"{prefix}{self.line}:{self.column}"


__all__ = ["Span", "SourcePoint"]
