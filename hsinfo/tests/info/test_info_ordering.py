# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from hsinfo.core.builtins import BOOL_TYPE, INT_TYPE, STRING_TYPE, fun_type
from hsinfo.core.span import Span
from hsinfo.info import FragmentKind, TypedFragment, compare_spans, order_fragments


def _span(line: int, col: int, end_line: int, end_col: int) -> Span:
	return Span(file="M.hs", line=line, column=col, end_line=end_line, end_column=end_col)


def test_compare_spans() -> None:
	inner = _span(1, 7, 1, 8)
	outer = _span(1, 1, 1, 12)
	other = _span(2, 1, 2, 3)
	assert compare_spans(inner, outer) == -1
	assert compare_spans(outer, inner) == 1
	assert compare_spans(inner, other) == 0


def test_innermost_first() -> None:
	fragments = [
		TypedFragment(_span(1, 1, 1, 12), fun_type(INT_TYPE, INT_TYPE), FragmentKind.BINDING),
		TypedFragment(_span(1, 7, 1, 12), INT_TYPE, FragmentKind.EXPRESSION),
		TypedFragment(_span(1, 7, 1, 8), INT_TYPE, FragmentKind.EXPRESSION),
	]
	assert order_fragments(fragments) == [
		((1, 7, 1, 8), "Int"),
		((1, 7, 1, 12), "Int"),
		((1, 1, 1, 12), "Int -> Int"),
	]


def test_unrelated_fragments_keep_their_order() -> None:
	fragments = [
		TypedFragment(_span(3, 1, 3, 4), STRING_TYPE, FragmentKind.EXPRESSION),
		TypedFragment(_span(1, 1, 1, 4), BOOL_TYPE, FragmentKind.PATTERN),
	]
	assert [ty for _, ty in order_fragments(fragments)] == ["String", "Bool"]


def test_unknown_spans_are_left_out() -> None:
	fragments = [
		TypedFragment(Span(file="M.hs"), INT_TYPE, FragmentKind.EXPRESSION),
		TypedFragment(_span(1, 1, 1, 2), BOOL_TYPE, FragmentKind.EXPRESSION),
	]
	assert order_fragments(fragments) == [((1, 1, 1, 2), "Bool")]
