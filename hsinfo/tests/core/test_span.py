# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from hsinfo.core.span import Span


def _span(line: int, col: int, end_line: int, end_col: int, file: str = "M.hs") -> Span:
	return Span(file=file, line=line, column=col, end_line=end_line, end_column=end_col)


def test_contains_is_inclusive_at_both_ends() -> None:
	span = _span(1, 3, 1, 8)
	assert span.contains((1, 3))
	assert span.contains((1, 8))
	assert span.contains((1, 5))
	assert not span.contains((1, 2))
	assert not span.contains((1, 9))
	assert not span.contains((2, 1))


def test_contains_across_lines() -> None:
	span = _span(2, 10, 4, 3)
	assert span.contains((3, 1))
	assert span.contains((2, 40))
	assert not span.contains((4, 4))
	assert not span.contains((1, 12))


def test_unknown_span_is_not_good() -> None:
	span = Span()
	assert not span.is_good()
	assert not span.contains((1, 1))
	assert span.four_ints() is None
	assert str(span) == "<no location info>"


def test_span_with_only_a_file_has_no_four_ints() -> None:
	span = Span(file="M.hs")
	assert not span.is_good()
	assert span.four_ints() is None
	assert str(span) == "M.hs"


def test_four_ints() -> None:
	assert _span(1, 7, 1, 12).four_ints() == (1, 7, 1, 12)


def test_subspan_relation() -> None:
	outer = _span(1, 1, 1, 12)
	inner = _span(1, 7, 1, 8)
	assert inner.is_subspan_of(outer)
	assert not outer.is_subspan_of(inner)
	# Equal spans are sub-spans of each other.
	assert outer.is_subspan_of(_span(1, 1, 1, 12))


def test_overlapping_spans_are_unrelated() -> None:
	a = _span(1, 1, 1, 6)
	b = _span(1, 4, 1, 10)
	assert not a.is_subspan_of(b)
	assert not b.is_subspan_of(a)


def test_subspan_requires_same_file() -> None:
	assert not _span(1, 2, 1, 3, file="A.hs").is_subspan_of(_span(1, 1, 1, 9, file="B.hs"))


def test_subspan_of_unknown_span() -> None:
	assert not _span(1, 1, 1, 2).is_subspan_of(Span())
	assert not Span().is_subspan_of(_span(1, 1, 1, 2))


def test_cover() -> None:
	first = _span(1, 7, 1, 8)
	last = _span(1, 11, 1, 12)
	assert Span.cover(first, last) == _span(1, 7, 1, 12)
	assert Span.cover(Span(), last) == last
	assert Span.cover(first, Span()) == first


def test_str_is_file_line_column() -> None:
	assert str(_span(3, 5, 3, 9)) == "M.hs:3:5"
	assert str(Span(line=3, column=5, end_line=3, end_column=9)) == "3:5"
