# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Identifier info and type-at-point queries over a typechecked module.

Pipeline for `get_type`:
  span_index.search -> type_recovery -> ordering.order_fragments

Pipeline for `get_identifier_info`:
  session.parse_name -> session.get_info -> identifier.filter_out_children -> render
"""

from .identifier import filter_out_children, info_thing
from .ordering import FragmentKind, TypedFragment, compare_spans, order_fragments
from .query import (
	LOAD_ERROR,
	MODULE_NOT_FOUND,
	QueryError,
	QueryOk,
	get_identifier_info,
	get_type,
	with_mod_summary,
)
from .render import render_info, render_infos, render_type_for_user
from .span_index import SpanHits, search
from .type_recovery import binding_type, expression_type, pattern_type

__all__ = [
	"filter_out_children",
	"info_thing",
	"FragmentKind",
	"TypedFragment",
	"compare_spans",
	"order_fragments",
	"LOAD_ERROR",
	"MODULE_NOT_FOUND",
	"QueryError",
	"QueryOk",
	"get_identifier_info",
	"get_type",
	"with_mod_summary",
	"render_info",
	"render_infos",
	"render_type_for_user",
	"SpanHits",
	"search",
	"binding_type",
	"expression_type",
	"pattern_type",
]
