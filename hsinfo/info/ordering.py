# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Innermost-first ordering of typed fragments.

Spans at one point nest or are unrelated. The comparator puts a span before
every span it lies within and treats unrelated spans as equal; the sort is
stable, so unrelated fragments keep the order they were collected in.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from functools import cmp_to_key
from typing import Iterable, List, Tuple

from hsinfo.core.span import Span
from hsinfo.core.types_core import Type

from .render import render_type_for_user

FourInts = Tuple[int, int, int, int]


class FragmentKind(Enum):
	BINDING = auto()
	EXPRESSION = auto()
	PATTERN = auto()


@dataclass(frozen=True)
class TypedFragment:
	span: Span
	type: Type
	kind: FragmentKind


def compare_spans(a: Span, b: Span) -> int:
	if a.is_subspan_of(b):
		return -1
	if b.is_subspan_of(a):
		return 1
	return 0


def sort_fragments(fragments: Iterable[TypedFragment]) -> List[TypedFragment]:
	return sorted(fragments, key=cmp_to_key(lambda a, b: compare_spans(a.span, b.span)))


def order_fragments(fragments: Iterable[TypedFragment]) -> List[Tuple[FourInts, str]]:
	"""
	Sort innermost first and render each fragment as `(four_ints, type)`.

	Fragments whose span has no four-integer form are left out.
	"""
	out: List[Tuple[FourInts, str]] = []
	for frag in sort_fragments(fragments):
		ints = frag.span.four_ints()
		if ints is None:
			continue
		out.append((ints, render_type_for_user(frag.type)))
	return out


__all__ = ["FourInts", "FragmentKind", "TypedFragment", "compare_spans", "sort_fragments", "order_fragments"]
