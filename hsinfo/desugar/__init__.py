# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Lowering of typechecked expressions to typed core."""

from . import core_nodes
from .core_nodes import CoreExpr, CoreTypeError, expr_type
from .desugar import Desugarer, DsFailure, desugar_expr

__all__ = [
	"core_nodes",
	"CoreExpr",
	"CoreTypeError",
	"expr_type",
	"Desugarer",
	"DsFailure",
	"desugar_expr",
]
