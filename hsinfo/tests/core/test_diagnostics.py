# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from hsinfo.core.diagnostics import Diagnostic, SourceError, has_errors
from hsinfo.core.span import Span


def test_diagnostic_render_with_notes() -> None:
	diag = Diagnostic(
		message="Multiple declarations of 'f'",
		code="E-DUPLICATE",
		phase="typecheck",
		span=Span(file="M.hs", line=3, column=1, end_line=3, end_column=2),
		notes=["Declared at: M.hs:1:1"],
	)
	assert diag.render() == "M.hs:3:1: error: Multiple declarations of 'f'\n    Declared at: M.hs:1:1"


def test_diagnostic_none_span_becomes_unknown() -> None:
	diag = Diagnostic(message="oops", span=None)  # type: ignore[arg-type]
	assert diag.span == Span()
	assert diag.render() == "<no location info>: error: oops"


def test_has_errors_ignores_warnings() -> None:
	warning = Diagnostic(message="w", severity="warning")
	assert not has_errors([warning])
	assert has_errors([warning, Diagnostic(message="e")])


def test_source_error_str_joins_diagnostics() -> None:
	err = SourceError(
		[
			Diagnostic(message="first", span=Span(file="A.hs", line=1, column=1, end_line=1, end_column=2)),
			Diagnostic(message="second", severity="warning"),
		]
	)
	assert str(err) == "A.hs:1:1: error: first\n<no location info>: warning: second"
	assert len(err.diagnostics) == 2


def test_source_error_single() -> None:
	err = SourceError.single("Not in scope: 'x'", phase="interactive")
	assert err.diagnostics[0].phase == "interactive"
	assert err.diagnostics[0].span == Span()
	assert "Not in scope: 'x'" in str(err)
