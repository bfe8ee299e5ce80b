# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Typechecked tree -> core lowering.

Supported:
  - occurrences, with the type and dictionary arguments recorded by the
    checker (`TWrap`) made explicit
  - application, operator sections of `OpApp`, lambda, `let`, `if`, `case`
  - list literals (built from `[]` and `:`)
  - function, pattern and generalised (`TAbsBinds`) bindings
  - patterns, by naive match compilation: each equation is tried in order
    and falls through to the next one, the last one to `patError`

Lowering stops with `DsFailure` when an occurrence's class constraint was
never solved (an ambiguous type variable); `desugar_expr` turns that into
"no result".
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from hsinfo.core.builtins import (
	BOOL_TYPE,
	CONS_DATACON,
	FALSE_DATACON,
	NIL_DATACON,
	PAT_ERROR_ID,
	TRUE_DATACON,
)
from hsinfo.core.diagnostics import Diagnostic
from hsinfo.core.names import DataConThing, IdThing, Name, Namespace, TyThing
from hsinfo.core.types_core import Scheme, TyPred, TyVar, Type, subst_type
from hsinfo.checker.tc_nodes import (
	DictHole,
	DictInst,
	DictParam,
	Evidence,
	TAbsBinds,
	TApp,
	TBind,
	TCase,
	TCon,
	TConPat,
	TExpr,
	TFunBind,
	TIf,
	TLam,
	TLet,
	TList,
	TLit,
	TLitPat,
	TMatchGroup,
	TOpApp,
	TPar,
	TParPat,
	TPat,
	TPatBind,
	TVar,
	TVarPat,
	TWildPat,
	TWrap,
	hs_pat_type,
)
from hsinfo.ppr import QualifyIfNotInScope, render_type

from .core_nodes import (
	CAlt,
	CApp,
	CBind,
	CBinder,
	CCase,
	CLam,
	CLet,
	CLit,
	CoreExpr,
	CoreTypeError,
	CTyApp,
	CTyLam,
	CVar,
	DataAlt,
	DefaultAlt,
	LitAlt,
	expr_type,
)


class DsFailure(Exception):
	"""Lowering cannot produce a well-typed core term."""


class Desugarer:
	"""
	Lowers typechecked expressions and bindings of one module to core.

	Things are looked up in the module's type environment first and in the
	session (the prelude and other home modules) second.
	"""

	def __init__(self, session, module: str, rdr_env, type_env: Dict[Name, TyThing]) -> None:
		self.session = session
		self.module = module
		self.rdr_env = rdr_env
		self.type_env = type_env
		self._next_uid = 0

	# Helpers

	def _thing(self, name: Name) -> Optional[TyThing]:
		thing = self.type_env.get(name)
		if thing is None and self.session is not None:
			thing = self.session.lookup_global(name)
		return thing

	def _data_con(self, name: Name) -> DataConThing:
		thing = self._thing(name)
		if not isinstance(thing, DataConThing):
			raise DsFailure(f"no data constructor '{name.occ}' in scope")
		return thing

	def _fresh_binder(self, ty: Type) -> CBinder:
		self._next_uid += 1
		return CBinder(Name(f"ds{self._next_uid}", self.module, Namespace.VALUE, unique=-self._next_uid), ty)

	def _con_var(self, name: Name, type_args: Sequence[Type]) -> CoreExpr:
		thing = self._data_con(name)
		return CTyApp(CVar(name, thing.scheme.to_type()), list(type_args))

	def _pat_error(self, ty: Type) -> CoreExpr:
		thing = self._thing(PAT_ERROR_ID)
		scheme = thing.scheme if isinstance(thing, IdThing) else Scheme(("a",), (), TyVar("a"))
		return CTyApp(CVar(PAT_ERROR_ID, scheme.to_type()), [ty])

	@staticmethod
	def _ref(binder: CBinder) -> CoreExpr:
		return CVar(binder.name, binder.type)

	# Evidence

	def evidence(self, ev: Evidence) -> CoreExpr:
		if isinstance(ev, DictHole):
			if ev.solution is None:
				pred = render_type(ev.pred, QualifyIfNotInScope(self.rdr_env))
				raise DsFailure(f"unsolved constraint ({pred})")
			return self.evidence(ev.solution)
		if isinstance(ev, DictParam):
			return CVar(ev.var.name, ev.var.pred)
		if isinstance(ev, DictInst):
			inst = ev.instance
			dict_ty = Scheme(inst.tyvars, inst.context, TyPred(inst.cls, inst.head_type())).to_type()
			out: CoreExpr = CVar(inst.name, dict_ty)
			if ev.type_args:
				out = CTyApp(out, list(ev.type_args))
			for arg in ev.args:
				out = CApp(out, self.evidence(arg))
			return out
		raise DsFailure(f"unknown evidence {type(ev).__name__}")

	# Expressions

	def expr(self, e: TExpr) -> CoreExpr:
		if isinstance(e, TWrap):
			out = self.expr(e.expr)
			if e.type_args:
				out = CTyApp(out, list(e.type_args))
			for ev in e.dicts:
				out = CApp(out, self.evidence(ev))
			return out
		if isinstance(e, TVar):
			return CVar(e.id.name, e.id.scheme.to_type())
		if isinstance(e, TCon):
			return CVar(e.con, e.scheme.to_type())
		if isinstance(e, TLit):
			return CLit(e.value, e.type)
		if isinstance(e, TApp):
			return CApp(self.expr(e.fn), self.expr(e.arg))
		if isinstance(e, TOpApp):
			return CApp(CApp(self.expr(e.op), self.expr(e.left)), self.expr(e.right))
		if isinstance(e, TPar):
			return self.expr(e.expr)
		if isinstance(e, TList):
			out = self._con_var(NIL_DATACON, [e.elem_type])
			for elem in reversed(e.elems):
				out = CApp(CApp(self._con_var(CONS_DATACON, [e.elem_type]), self.expr(elem)), out)
			return out
		if isinstance(e, TIf):
			then_expr = self.expr(e.then_expr)
			else_expr = self.expr(e.else_expr)
			return CCase(
				scrutinee=self.expr(e.cond),
				binder=self._fresh_binder(BOOL_TYPE),
				type=expr_type(then_expr),
				alts=[
					CAlt(DataAlt(FALSE_DATACON), [], else_expr),
					CAlt(DataAlt(TRUE_DATACON), [], then_expr),
				],
			)
		if isinstance(e, TLam):
			return self._lambda(e.matches)
		if isinstance(e, TCase):
			scrut = self._fresh_binder(e.matches.arg_types[0])
			body = self.match_group(e.matches, [scrut])
			return CLet(CBind([(scrut, self.expr(e.scrutinee))]), body)
		if isinstance(e, TLet):
			out = self.expr(e.body)
			for bind in reversed(e.binds):
				for cbind in reversed(self.bind(bind)):
					out = CLet(cbind, out)
			return out
		raise DsFailure(f"cannot lower {type(e).__name__}")

	def _lambda(self, group: TMatchGroup) -> CoreExpr:
		binders = [self._fresh_binder(ty) for ty in group.arg_types]
		out = self.match_group(group, binders)
		for binder in reversed(binders):
			out = CLam(binder, out)
		return out

	# Pattern matching

	def match_group(self, group: TMatchGroup, binders: List[CBinder]) -> CoreExpr:
		"""Try each equation in turn; the last one falls through to `patError`."""
		fallthrough = self._pat_error(group.res_type)
		for match in reversed(group.matches):
			out = self.expr(match.rhs)
			for binder, pat in reversed(list(zip(binders, match.pats))):
				out = self.match_pat(binder, pat, out, fallthrough)
			fallthrough = out
		return fallthrough

	def match_pat(self, binder: CBinder, pat: TPat, success: CoreExpr, failure: CoreExpr) -> CoreExpr:
		if isinstance(pat, TWildPat):
			return success
		if isinstance(pat, TParPat):
			return self.match_pat(binder, pat.pat, success, failure)
		if isinstance(pat, TVarPat):
			bound = CBinder(pat.id.name, pat.id.scheme.body)
			return CLet(CBind([(bound, self._ref(binder))]), success)
		if isinstance(pat, TLitPat):
			return CCase(
				scrutinee=self._ref(binder),
				binder=self._fresh_binder(pat.type),
				type=expr_type(success),
				alts=[CAlt(LitAlt(pat.value), [], success), CAlt(DefaultAlt(), [], failure)],
			)
		if isinstance(pat, TConPat):
			con = self._data_con(pat.con)
			mapping = dict(zip(con.scheme.tvs, pat.type_args))
			fields = [self._fresh_binder(subst_type(t, mapping)) for t in con.arg_types]
			inner = success
			for field_binder, arg in reversed(list(zip(fields, pat.args))):
				inner = self.match_pat(field_binder, arg, inner, failure)
			return CCase(
				scrutinee=self._ref(binder),
				binder=self._fresh_binder(pat.type),
				type=expr_type(success),
				alts=[CAlt(DataAlt(pat.con), fields, inner), CAlt(DefaultAlt(), [], failure)],
			)
		raise DsFailure(f"cannot lower pattern {type(pat).__name__}")

	# Bindings

	def bind(self, bind: TBind) -> List[CBind]:
		if isinstance(bind, TFunBind):
			binder = CBinder(bind.id.name, bind.id.scheme.to_type())
			return [CBind([(binder, self._lambda(bind.matches))], recursive=True)]
		if isinstance(bind, TPatBind):
			tmp = self._fresh_binder(hs_pat_type(bind.pat))
			out = [CBind([(tmp, self.expr(bind.rhs))])]
			for ident in bind.binders:
				ty = ident.scheme.body
				select = self.match_pat(tmp, bind.pat, CVar(ident.name, ty), self._pat_error(ty))
				out.append(CBind([(CBinder(ident.name, ident.scheme.to_type()), select)]))
			return out
		if isinstance(bind, TAbsBinds):
			inner = [cbind for b in bind.binds for cbind in self.bind(b)]
			out = []
			for export in bind.exports:
				body: CoreExpr = CVar(export.mono.name, export.mono.scheme.to_type())
				for cbind in reversed(inner):
					body = CLet(cbind, body)
				for dict_var in reversed(bind.dict_vars):
					body = CLam(CBinder(dict_var.name, dict_var.pred), body)
				if bind.tvs:
					body = CTyLam(list(bind.tvs), body)
				out.append(CBind([(CBinder(export.poly.name, export.poly.scheme.to_type()), body)]))
			return out
		raise DsFailure(f"cannot lower binding {type(bind).__name__}")


def desugar_expr(session, module: str, rdr_env, type_env: Dict[Name, TyThing], expr: TExpr) -> Tuple[List[Diagnostic], Optional[CoreExpr]]:
	"""
	Lower one typechecked expression.

	Returns a warning and None when the expression cannot be lowered,
	otherwise no messages and the core term.
	"""
	ds = Desugarer(session, module, rdr_env, type_env)
	try:
		core = ds.expr(expr)
		expr_type(core)
	except (DsFailure, CoreTypeError) as err:
		return [Diagnostic(message=str(err), phase="desugar", severity="warning", span=expr.loc)], None
	return [], core


__all__ = ["Desugarer", "DsFailure", "desugar_expr"]
