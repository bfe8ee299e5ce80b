# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Common diagnostic structure for the parser, checker and loader.

A diagnostic is a message plus an optional span/phase. Errors that must stop a
pipeline step are raised as a `SourceError`, which bundles every diagnostic
collected so far so callers can print or report them at once.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List

from .span import Span


@dataclass
class Diagnostic:
	"""Represents a compiler diagnostic (error/warning/etc.)."""

	message: str
	code: str | None = None
	# Phase label: "parser", "typecheck", "loader", "desugar" or "interactive".
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)  # Source location (Span() denotes unknown).
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()

	def render(self) -> str:
		"""Render as `file:line:col: severity: message` plus indented notes."""
		head = f"{self.span}: {self.severity}: {self.message}"
		if not self.notes:
			return head
		return "\n".join([head] + [f"    {note}" for note in self.notes])


def has_errors(diagnostics: Iterable[Diagnostic]) -> bool:
	return any(d.severity == "error" for d in diagnostics)


class SourceError(Exception):
	"""
	Raised when source code cannot be parsed, renamed or typechecked.

	Carries the full list of diagnostics; `str(err)` is the user-facing text.
	"""

	def __init__(self, diagnostics: List[Diagnostic]) -> None:
		self.diagnostics = list(diagnostics)
		super().__init__(self.render())

	@classmethod
	def single(cls, message: str, *, span: Span | None = None, phase: str | None = None) -> "SourceError":
		return cls([Diagnostic(message=message, phase=phase, span=span or Span())])

	def render(self) -> str:
		return "\n".join(d.render() for d in self.diagnostics)


__all__ = ["Diagnostic", "SourceError", "has_errors"]
