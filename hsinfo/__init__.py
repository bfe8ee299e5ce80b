# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
hsinfo: identifier info and type-at-point queries for a small Haskell dialect.

Stages:
  parser  -> checker -> desugar
  session: module graph, Prelude, interactive context
  info:    the two queries (`get_identifier_info`, `get_type`)
"""

from .info import QueryError, QueryOk, get_identifier_info, get_type
from .session import Session, SessionConfig

__all__ = [
	"QueryError",
	"QueryOk",
	"get_identifier_info",
	"get_type",
	"Session",
	"SessionConfig",
]
