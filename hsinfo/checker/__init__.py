# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Type checker: environments, the typechecked tree and inference.

`typecheck(module, imports)` checks one parsed module against the exports
(`ModDetails`) of the modules it imports and returns a `TcResult`.
"""

from . import tc_nodes
from .env import GlobalRdrEnv, ModDetails, TcGblEnv
from .instances import InstEnv, InstanceMatch
from .type_checker import TcResult, TypeChecker, binding_groups, typecheck

__all__ = [
	"tc_nodes",
	"GlobalRdrEnv",
	"ModDetails",
	"TcGblEnv",
	"InstEnv",
	"InstanceMatch",
	"TcResult",
	"TypeChecker",
	"binding_groups",
	"typecheck",
]
