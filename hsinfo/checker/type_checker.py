# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Type checker for one module.

Hindley-Milner inference with let-polymorphism over dependency-ordered
binding groups, rigid checking of bindings with type signatures, and
single-parameter type classes. The result is the typechecked tree
(`tc_nodes`) plus the module's global environment.

Checking proceeds in phases:

1. declarations: type constructors, classes and their methods, data
   constructors, primitives, signatures, instances, fixities;
2. top-level value bindings, one strongly connected group at a time;
3. instance method bindings, against the class method types;
4. zonking: every unification variable left in the tree is replaced by its
   final type.

Class constraints raised by an occurrence are recorded as wanted
`DictHole`s. When a group is generalised its wanteds are solved from
instances, from the dictionary parameters in scope, or become the group's
own dictionary parameters. A constraint on a type variable that is neither
generalised nor free in the enclosing scope is ambiguous: it is reported as a
warning and its hole stays unsolved.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, is_dataclass
from typing import Dict, Iterator, List, Optional, Sequence, Set, Tuple

from hsinfo.core.builtins import (
	BOOL_TYPE,
	CONS_DATACON,
	LIST_TYCON,
	NIL_DATACON,
	fun_type,
	fun_types,
	list_type,
	literal_type,
	split_fun_type,
	split_fun_types,
)
from hsinfo.core.diagnostics import Diagnostic, SourceError, has_errors
from hsinfo.core.names import (
	PRELUDE_MODULE,
	Assoc,
	ClassThing,
	DataConThing,
	DEFAULT_FIXITY,
	Fixity,
	IdThing,
	Instance,
	Name,
	Namespace,
	TyConThing,
	TyThing,
)
from hsinfo.core.span import Span
from hsinfo.core.types_core import (
	Scheme,
	TyCon,
	TyForAll,
	TyMeta,
	TyPred,
	TyVar,
	Type,
	free_tyvars,
	meta_uids,
	subst_type,
)
from hsinfo.parser import ast
from hsinfo.ppr import render_type

from .env import GlobalRdrEnv, ModDetails, TcGblEnv
from .instances import InstEnv
from .tc_nodes import (
	AbsExport,
	DictHole,
	DictInst,
	DictParam,
	DictVar,
	Id,
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
	TMatch,
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
	map_types,
)


@dataclass
class TcResult:
	"""Result of typechecking a module."""

	env: TcGblEnv
	binds: List[TBind]
	diagnostics: List[Diagnostic] = field(default_factory=list)

	@property
	def warnings(self) -> List[Diagnostic]:
		return [d for d in self.diagnostics if d.severity != "error"]


@dataclass
class _Wanted:
	"""A class constraint raised by an occurrence, waiting to be solved."""

	pred: TyPred
	hole: DictHole
	loc: Span
	origin: str


class _Mismatch(Exception):
	def __init__(self, message: Optional[str] = None) -> None:
		super().__init__(message or "")
		self.message = message


class _LocalEnv:
	"""Locally bound identifiers (lambda/case/let binders), innermost last."""

	def __init__(self, ids: Optional[Dict[str, Id]] = None, parent: Optional["_LocalEnv"] = None) -> None:
		self._ids = dict(ids or {})
		self._parent = parent

	def extend(self, ids: Dict[str, Id]) -> "_LocalEnv":
		if not ids:
			return self
		return _LocalEnv(ids, self)

	def lookup(self, occ: str) -> Optional[Id]:
		env: Optional[_LocalEnv] = self
		while env is not None:
			found = env._ids.get(occ)
			if found is not None:
				return found
			env = env._parent
		return None

	def ids(self) -> Iterator[Id]:
		env: Optional[_LocalEnv] = self
		while env is not None:
			yield from env._ids.values()
			env = env._parent


def _tyvar_names() -> Iterator[str]:
	letters = "abcdefghijklmnopqrstuvwxyz"
	for letter in letters:
		yield letter
	n = 1
	while True:
		for letter in letters:
			yield f"{letter}{n}"
		n += 1


def _occurrences(node: object) -> Iterator[str]:
	"""
	Variable and operator names mentioned anywhere under an AST node.

	Shadowing is ignored: a spurious dependency only merges binding groups.
	"""
	if isinstance(node, ast.Var):
		yield node.name
		return
	if isinstance(node, ast.OpRef):
		if not node.is_con():
			yield node.name
		return
	if isinstance(node, (list, tuple)):
		for item in node:
			yield from _occurrences(item)
		return
	if is_dataclass(node) and not isinstance(node, (Span, type)):
		for f in fields(node):
			yield from _occurrences(getattr(node, f.name))


def _pat_binders(pat: ast.Pat) -> List[Tuple[str, Span]]:
	if isinstance(pat, ast.VarPat):
		return [(pat.name, pat.loc)]
	if isinstance(pat, ast.ConPat):
		return [b for arg in pat.args for b in _pat_binders(arg)]
	if isinstance(pat, ast.ParPat):
		return _pat_binders(pat.pat)
	return []


def _bind_binders(bind: ast.Binding) -> List[Tuple[str, Span]]:
	if isinstance(bind, ast.FunBind):
		return [(bind.name, bind.name_loc)]
	return _pat_binders(bind.pat)


def binding_groups(binds: Sequence[ast.Binding], *, skip: Set[str] = frozenset()) -> List[List[ast.Binding]]:
	"""
	Split bindings into strongly connected groups, dependencies first.

	References to names in `skip` (bindings with a signature) do not count
	as dependencies: their type is known without checking their body.
	"""
	owner: Dict[str, int] = {}
	for idx, bind in enumerate(binds):
		for occ, _ in _bind_binders(bind):
			owner.setdefault(occ, idx)
	edges: List[List[int]] = []
	for bind in binds:
		body = bind.matches if isinstance(bind, ast.FunBind) else bind.rhs
		deps: List[int] = []
		for occ in _occurrences(body):
			target = owner.get(occ)
			if target is not None and occ not in skip and target not in deps:
				deps.append(target)
		edges.append(deps)

	# Tarjan's algorithm; components come out after everything they reach.
	index: Dict[int, int] = {}
	low: Dict[int, int] = {}
	stack: List[int] = []
	on_stack: Set[int] = set()
	groups: List[List[ast.Binding]] = []
	counter = 0

	def visit(v: int) -> None:
		nonlocal counter
		index[v] = low[v] = counter
		counter += 1
		stack.append(v)
		on_stack.add(v)
		for w in edges[v]:
			if w not in index:
				visit(w)
				low[v] = min(low[v], low[w])
			elif w in on_stack:
				low[v] = min(low[v], index[w])
		if low[v] == index[v]:
			component: List[int] = []
			while True:
				w = stack.pop()
				on_stack.discard(w)
				component.append(w)
				if w == v:
					break
			groups.append([binds[i] for i in sorted(component)])

	for v in range(len(binds)):
		if v not in index:
			visit(v)
	return groups


class TypeChecker:
	"""
	Typechecks one parsed module against the exports of its imports.

	Diagnostics are collected rather than raised; `check()` raises a single
	`SourceError` carrying all of them when any is an error.
	"""

	def __init__(self, module: ast.Module, imports: Sequence[ModDetails] = ()) -> None:
		self.module_ast = module
		self.module = module.name
		self.diagnostics: List[Diagnostic] = []
		self.env = TcGblEnv(module=self.module, rdr_env=GlobalRdrEnv(self.module))
		for details in imports:
			self.env.import_details(details)
		self.details = ModDetails(module=self.module)
		self.env.details = self.details
		self.inst_env = InstEnv(self.env.instances)
		self._subst: Dict[int, Type] = {}
		self._next_meta = 0
		self._next_unique = 0
		self._wanted: List[_Wanted] = []
		self._givens: List[DictVar] = []
		self._rigid: List[str] = []
		self._global_ids: Dict[Name, Id] = {}
		self._locals: Dict[Tuple[Namespace, str], Name] = {}
		self._sigs: Dict[str, Tuple[Scheme, Span]] = {}

	# Diagnostics

	def _error(self, message: str, loc: Span, *, code: Optional[str] = None, notes: Optional[List[str]] = None) -> None:
		self.diagnostics.append(
			Diagnostic(message=message, code=code, phase="typecheck", severity="error", span=loc, notes=notes or [])
		)

	def _warn(self, message: str, loc: Span, *, code: Optional[str] = None) -> None:
		self.diagnostics.append(Diagnostic(message=message, code=code, phase="typecheck", severity="warning", span=loc))

	def _show(self, ty: Type) -> str:
		return render_type(self._zonk(ty))

	# Entry point

	def check(self) -> TcResult:
		if self.module == PRELUDE_MODULE:
			self._wire_in_list()
		instance_decls = self._check_declarations()
		binds = self._check_top_binds()
		for inst, decl in instance_decls:
			binds.extend(self._check_instance_methods(inst, decl))
		map_types(binds, self._zonk)
		if has_errors(self.diagnostics):
			raise SourceError(self.diagnostics)
		return TcResult(env=self.env, binds=binds, diagnostics=list(self.diagnostics))

	# Unification variables and substitution

	def _fresh(self) -> TyMeta:
		self._next_meta += 1
		return TyMeta(self._next_meta)

	def _fresh_unique(self) -> int:
		self._next_unique += 1
		return self._next_unique

	def _local_name(self, occ: str, loc: Span) -> Name:
		return Name(occ, self.module, Namespace.VALUE, unique=self._fresh_unique(), loc=loc)

	def _zonk(self, ty: Type) -> Type:
		if isinstance(ty, TyMeta):
			bound = self._subst.get(ty.uid)
			if bound is None:
				return ty
			zonked = self._zonk(bound)
			self._subst[ty.uid] = zonked
			return zonked
		if isinstance(ty, TyCon):
			if not ty.args:
				return ty
			return TyCon(ty.con, tuple(self._zonk(a) for a in ty.args))
		if isinstance(ty, TyPred):
			return TyPred(ty.cls, self._zonk(ty.arg))
		if isinstance(ty, TyForAll):
			return TyForAll(ty.tvs, self._zonk(ty.body))
		return ty

	def _unify(self, expected: Type, actual: Type, loc: Span) -> None:
		try:
			self._unify_types(expected, actual)
		except _Mismatch as err:
			message = err.message or (
				f"Couldn't match expected type '{self._show(expected)}' with actual type '{self._show(actual)}'"
			)
			self._error(message, loc, code="E-TYPE-MISMATCH")

	def _unify_types(self, a: Type, b: Type) -> None:
		a = self._zonk(a)
		b = self._zonk(b)
		if isinstance(a, TyMeta):
			self._bind_meta(a, b)
			return
		if isinstance(b, TyMeta):
			self._bind_meta(b, a)
			return
		if isinstance(a, TyVar) and isinstance(b, TyVar) and a.name == b.name:
			return
		if isinstance(a, TyCon) and isinstance(b, TyCon) and a.con == b.con and len(a.args) == len(b.args):
			for x, y in zip(a.args, b.args):
				self._unify_types(x, y)
			return
		raise _Mismatch()

	def _bind_meta(self, meta: TyMeta, ty: Type) -> None:
		if isinstance(ty, TyMeta) and ty.uid == meta.uid:
			return
		if meta.uid in meta_uids(ty):
			raise _Mismatch(
				f"Occurs check: cannot construct the infinite type: {render_type(meta)} ~ {render_type(ty)}"
			)
		self._subst[meta.uid] = ty

	def _env_metas(self, env: _LocalEnv) -> Set[int]:
		out: Set[int] = set()
		for ident in env.ids():
			out.update(meta_uids(self._zonk(ident.scheme.body)))
		return out

	# Name resolution

	def _resolve(self, namespace: Namespace, occ: str, loc: Span, what: str, *, report: bool = True) -> Optional[Name]:
		names = self.env.rdr_env.lookup(namespace, occ)
		if not names:
			if report:
				self._error(f"Not in scope: {what} '{occ}'", loc, code="E-NOT-IN-SCOPE")
			return None
		if len(names) > 1:
			if report:
				notes = [f"either '{n.qualified()}', imported from '{n.module}'" for n in names]
				self._error(f"Ambiguous occurrence '{occ}'", loc, code="E-AMBIGUOUS", notes=notes)
			return None
		return names[0]

	def _define(self, namespace: Namespace, occ: str, loc: Span) -> Optional[Name]:
		"""Declare a top-level name of this module; None (and an error) for a duplicate."""
		key = (namespace, occ)
		previous = self._locals.get(key)
		if previous is not None:
			self._error(
				f"Multiple declarations of '{occ}'",
				loc,
				code="E-DUPLICATE",
				notes=[f"Declared at: {previous.loc}"],
			)
			return None
		name = Name(occ, self.module, namespace, loc=loc)
		self._locals[key] = name
		self.env.rdr_env.add(name)
		return name

	def _add_thing(self, thing: TyThing) -> None:
		self.env.type_env[thing.name] = thing
		self.env.rdr_env.add(thing.name)
		self.details.things[thing.name] = thing

	def _global_id(self, name: Name, thing: TyThing) -> Id:
		ident = self._global_ids.get(name)
		if ident is None:
			scheme = thing.scheme if isinstance(thing, (IdThing, DataConThing)) else Scheme.mono(self._fresh())
			ident = Id(name, scheme)
			self._global_ids[name] = ident
		return ident

	# Declarations

	def _wire_in_list(self) -> None:
		a = TyVar("a")
		list_a = list_type(a)
		nil = DataConThing(NIL_DATACON, LIST_TYCON, Scheme(("a",), (), list_a), [], tag=0)
		cons = DataConThing(CONS_DATACON, LIST_TYCON, Scheme(("a",), (), fun_types([a, list_a], list_a)), [a, list_a], tag=1)
		for thing in (TyConThing(LIST_TYCON, ["a"], [nil, cons]), nil, cons):
			self._locals[(thing.name.namespace, thing.name.occ)] = thing.name
			self._add_thing(thing)

	def _check_declarations(self) -> List[Tuple[Instance, ast.InstanceDecl]]:
		decls = self.module_ast.decls

		# Type-level names first: constructor argument types and method types
		# may mention any type declared in the module.
		for decl in decls:
			if isinstance(decl, ast.DataDecl):
				name = self._define(Namespace.TYPE, decl.name, decl.name_loc)
				if name is not None:
					self._add_thing(TyConThing(name, list(decl.tyvars), []))
			elif isinstance(decl, ast.ClassDecl):
				name = self._define(Namespace.TYPE, decl.name, decl.name_loc)
				if name is not None:
					self._add_thing(ClassThing(name, decl.tyvar, []))

		for decl in decls:
			if isinstance(decl, ast.DataDecl):
				self._define_data_cons(decl)
			elif isinstance(decl, ast.ClassDecl):
				self._define_class_methods(decl)
			elif isinstance(decl, ast.PrimDecl):
				self._define_primitive(decl)
			elif isinstance(decl, (ast.FunBind, ast.PatBind)):
				for occ, loc in _bind_binders(decl):
					self._define(Namespace.VALUE, occ, loc)

		for decl in decls:
			if isinstance(decl, ast.TypeSig):
				self._define_signature(decl)

		instances: List[Tuple[Instance, ast.InstanceDecl]] = []
		for decl in decls:
			if isinstance(decl, ast.InstanceDecl):
				inst = self._define_instance(decl)
				if inst is not None:
					instances.append((inst, decl))
			elif isinstance(decl, ast.FixityDecl):
				self._define_fixity(decl)
		return instances

	def _type_from_expr(self, te: ast.TypeExpr, tyvars: Optional[Set[str]] = None) -> Type:
		if isinstance(te, ast.TyVarExpr):
			if tyvars is not None and te.name not in tyvars:
				self._error(f"Not in scope: type variable '{te.name}'", te.loc, code="E-NOT-IN-SCOPE")
			return TyVar(te.name)
		if isinstance(te, ast.FunTypeExpr):
			return fun_type(self._type_from_expr(te.arg, tyvars), self._type_from_expr(te.res, tyvars))
		if isinstance(te, ast.TyConExpr):
			args = tuple(self._type_from_expr(a, tyvars) for a in te.args)
			if te.name == "[]":
				return TyCon(LIST_TYCON, args)
			name = self._resolve(Namespace.TYPE, te.name, te.loc, "type constructor or class")
			if name is None:
				return TyCon(Name(te.name, self.module, Namespace.TYPE), args)
			thing = self.env.type_env.get(name)
			if isinstance(thing, ClassThing):
				self._error(f"Class '{te.name}' used as a type", te.loc, code="E-KIND")
			elif isinstance(thing, TyConThing) and len(thing.tyvars) != len(args):
				missing = len(thing.tyvars) - len(args)
				if missing > 0:
					plural = "s" if missing > 1 else ""
					self._error(f"Expecting {missing} more argument{plural} to '{te.name}'", te.loc, code="E-KIND")
				else:
					self._error(f"'{te.name}' is applied to too many type arguments", te.loc, code="E-KIND")
			return TyCon(name, args)
		raise TypeError(f"unknown type expression {type(te).__name__}")

	def _pred_from_expr(self, pe: ast.PredExpr) -> Optional[TyPred]:
		name = self._resolve(Namespace.TYPE, pe.cls, pe.loc, "type class")
		if name is None:
			return None
		if not isinstance(self.env.type_env.get(name), ClassThing):
			self._error(f"'{pe.cls}' is not a class", pe.loc, code="E-KIND")
			return None
		return TyPred(name, TyVar(pe.tyvar))

	def _scheme_from_sig(self, qual: ast.QualTypeExpr) -> Scheme:
		body = self._type_from_expr(qual.body)
		preds = [p for p in (self._pred_from_expr(pe) for pe in qual.context) if p is not None]
		tvs = free_tyvars(body)
		for pred in preds:
			for tv in free_tyvars(pred):
				if tv not in tvs:
					tvs.append(tv)
		return Scheme(tuple(tvs), tuple(preds), body)

	def _define_data_cons(self, decl: ast.DataDecl) -> None:
		name = self._locals[(Namespace.TYPE, decl.name)]
		tycon = self.env.type_env.get(name)
		if not isinstance(tycon, TyConThing) or tycon.name.loc != decl.name_loc:
			return  # duplicate declaration, already reported
		result = TyCon(name, tuple(TyVar(v) for v in decl.tyvars))
		scope = set(decl.tyvars)
		for tag, con in enumerate(decl.cons):
			args = [self._type_from_expr(a, scope) for a in con.args]
			con_name = self._define(Namespace.VALUE, con.name, con.loc)
			if con_name is None:
				continue
			scheme = Scheme(tuple(decl.tyvars), (), fun_types(args, result))
			thing = DataConThing(con_name, name, scheme, args, tag=tag)
			tycon.data_cons.append(thing)
			self._add_thing(thing)

	def _define_class_methods(self, decl: ast.ClassDecl) -> None:
		name = self._locals[(Namespace.TYPE, decl.name)]
		cls = self.env.type_env.get(name)
		if not isinstance(cls, ClassThing) or cls.name.loc != decl.name_loc:
			return
		for sig in decl.sigs:
			if sig.type.context:
				self._error("Constraints on class method types are not supported", sig.loc, code="E-CLASS")
			body = self._type_from_expr(sig.type.body)
			others = [tv for tv in free_tyvars(body) if tv != decl.tyvar]
			if decl.tyvar not in free_tyvars(body):
				self._error(
					f"The class method '{sig.names[0]}' mentions none of the type variables of the class '{decl.name} {decl.tyvar}'",
					sig.loc,
					code="E-CLASS",
				)
			scheme = Scheme((decl.tyvar,) + tuple(others), (TyPred(name, TyVar(decl.tyvar)),), body)
			for occ, loc in zip(sig.names, sig.name_locs):
				method_name = self._define(Namespace.VALUE, occ, loc)
				if method_name is None:
					continue
				method = IdThing(method_name, scheme, parent=name)
				cls.methods.append(method)
				self._add_thing(method)

	def _define_primitive(self, decl: ast.PrimDecl) -> None:
		scheme = self._scheme_from_sig(decl.sig.type)
		for occ, loc in zip(decl.sig.names, decl.sig.name_locs):
			name = self._define(Namespace.VALUE, occ, loc)
			if name is not None:
				self._add_thing(IdThing(name, scheme, primitive=True))

	def _define_signature(self, sig: ast.TypeSig) -> None:
		scheme = self._scheme_from_sig(sig.type)
		funs = {d.name for d in self.module_ast.decls if isinstance(d, ast.FunBind)}
		pat_vars = {occ for d in self.module_ast.decls if isinstance(d, ast.PatBind) for occ, _ in _pat_binders(d.pat)}
		for occ, loc in zip(sig.names, sig.name_locs):
			if occ in self._sigs:
				self._error(f"Duplicate type signatures for '{occ}'", loc, code="E-DUPLICATE")
				continue
			if occ in pat_vars:
				self._error(f"Type signatures for pattern-bound variables are not supported: '{occ}'", loc, code="E-SIG")
				continue
			if occ not in funs:
				self._error(f"The type signature for '{occ}' lacks an accompanying binding", loc, code="E-SIG")
				continue
			self._sigs[occ] = (scheme, loc)
			name = self._locals[(Namespace.VALUE, occ)]
			thing = IdThing(name, scheme)
			self._add_thing(thing)
			self._global_ids[name] = Id(name, scheme)

	def _define_instance(self, decl: ast.InstanceDecl) -> Optional[Instance]:
		cls_name = self._resolve(Namespace.TYPE, decl.cls, decl.loc, "type class")
		if cls_name is None:
			return None
		if not isinstance(self.env.type_env.get(cls_name), ClassThing):
			self._error(f"'{decl.cls}' is not a class", decl.loc, code="E-KIND")
			return None
		head = decl.head
		tyvars = [a.name for a in head.args if isinstance(a, ast.TyVarExpr)] if isinstance(head, ast.TyConExpr) else []
		if (
			not isinstance(head, ast.TyConExpr)
			or len(tyvars) != len(head.args)
			or len(set(tyvars)) != len(tyvars)
		):
			self._error(
				f"Illegal instance declaration for '{decl.cls}': the instance head must be a type constructor applied to distinct type variables",
				head.loc,
				code="E-INSTANCE",
			)
			return None
		head_ty = self._type_from_expr(head)
		assert isinstance(head_ty, TyCon)
		context: List[TyPred] = []
		for pe in decl.context:
			pred = self._pred_from_expr(pe)
			if pred is None:
				continue
			if pe.tyvar not in tyvars:
				self._error(f"Not in scope: type variable '{pe.tyvar}'", pe.loc, code="E-NOT-IN-SCOPE")
				continue
			context.append(pred)
		head_occ = "List" if head_ty.con == LIST_TYCON else head_ty.con.occ
		inst = Instance(
			name=Name(f"$f{cls_name.occ}{head_occ}", self.module, Namespace.VALUE, loc=decl.loc),
			cls=cls_name,
			head=head_ty.con,
			tyvars=tuple(tyvars),
			context=tuple(context),
		)
		existing = self.inst_env.add(inst)
		if existing is not None:
			self._error(
				f"Duplicate instance declarations: instance {decl.cls} {render_type(head_ty)}",
				decl.loc,
				code="E-INSTANCE",
				notes=[f"Previously declared at: {existing.name.loc}"],
			)
			return None
		self.env.instances.append(inst)
		self.details.instances.append(inst)
		return inst

	def _define_fixity(self, decl: ast.FixityDecl) -> None:
		fixity = Fixity(Assoc(decl.assoc), decl.precedence)
		for op in decl.ops:
			name = self._locals.get((Namespace.VALUE, op))
			if name is None:
				self._error(f"The fixity signature for '{op}' lacks an accompanying binding", decl.loc, code="E-FIXITY")
				continue
			if name in self.details.fixities:
				self._error(f"Multiple fixity declarations for '{op}'", decl.loc, code="E-FIXITY")
				continue
			self.env.fixities[name] = fixity
			self.details.fixities[name] = fixity

	# Constraint solving

	def _instantiate(self, scheme: Scheme, loc: Span, origin: str) -> Tuple[List[Type], List[DictHole], Type]:
		metas: List[Type] = [self._fresh() for _ in scheme.tvs]
		mapping = dict(zip(scheme.tvs, metas))
		holes: List[DictHole] = []
		for pred in scheme.preds:
			wanted = subst_type(pred, mapping)
			assert isinstance(wanted, TyPred)
			hole = DictHole(wanted)
			self._wanted.append(_Wanted(wanted, hole, loc, origin))
			holes.append(hole)
		return metas, holes, subst_type(scheme.body, mapping)

	def _find_given(self, pred: TyPred) -> Optional[DictVar]:
		for given in reversed(self._givens):
			if self._zonk(given.pred) == pred:
				return given
		return None

	def _solve(self, start: int, generalisable: Set[int], outer: Set[int]) -> List[DictVar]:
		"""
		Solve the wanteds raised since `start`.

		Constraints on `generalisable` variables become dictionary parameters
		(returned); those on `outer` variables are left for the enclosing group.
		"""
		work = self._wanted[start:]
		del self._wanted[start:]
		params: Dict[Tuple[Name, int], DictVar] = {}
		deferred: List[_Wanted] = []
		while work:
			wanted = work.pop(0)
			pred = self._zonk(wanted.pred)
			assert isinstance(pred, TyPred)
			arg = pred.arg
			if isinstance(arg, TyCon):
				match = self.inst_env.match(pred)
				if match is None:
					self._error(
						f"No instance for ({render_type(pred)}) arising from a use of '{wanted.origin}'",
						wanted.loc,
						code="E-NO-INSTANCE",
					)
					continue
				sub_holes: List[DictHole] = []
				for ctx in match.context:
					hole = DictHole(ctx)
					sub_holes.append(hole)
					work.append(_Wanted(ctx, hole, wanted.loc, wanted.origin))
				wanted.hole.solution = DictInst(match.instance, match.type_args, sub_holes)
			elif isinstance(arg, TyVar):
				given = self._find_given(pred)
				if given is None:
					self._error(
						f"Could not deduce ({render_type(pred)}) arising from a use of '{wanted.origin}'",
						wanted.loc,
						code="E-NO-INSTANCE",
					)
					continue
				wanted.hole.solution = DictParam(given)
			elif isinstance(arg, TyMeta) and arg.uid in generalisable:
				key = (pred.cls, arg.uid)
				param = params.get(key)
				if param is None:
					param = DictVar(Name(f"$d{pred.cls.occ}", self.module, Namespace.VALUE, unique=self._fresh_unique()), pred)
					params[key] = param
				wanted.hole.solution = DictParam(param)
			elif isinstance(arg, TyMeta) and arg.uid in outer:
				deferred.append(wanted)
			else:
				self._warn(
					f"Ambiguous type variable '{render_type(arg)}' arising from a use of '{wanted.origin}' "
					f"prevents the constraint '({render_type(pred)})' from being solved.",
					wanted.loc,
					code="W-AMBIGUOUS",
				)
		self._wanted.extend(deferred)
		return list(params.values())

	def _skolemise(self, uids: Sequence[int]) -> List[str]:
		"""Turn the group's unification variables into fresh rigid variables."""
		taken = set(self._rigid)
		names = (n for n in _tyvar_names() if n not in taken)
		tvs: List[str] = []
		for uid in uids:
			tv = next(names)
			self._subst[uid] = TyVar(tv)
			tvs.append(tv)
		return tvs

	# Bindings

	def _check_top_binds(self) -> List[TBind]:
		binds = [d for d in self.module_ast.decls if isinstance(d, (ast.FunBind, ast.PatBind))]
		out: List[TBind] = []
		env = _LocalEnv()
		for group in binding_groups(binds, skip=set(self._sigs)):
			first = group[0]
			if len(group) == 1 and isinstance(first, ast.FunBind) and first.name in self._sigs:
				name = self._locals[(Namespace.VALUE, first.name)]
				if first.name_loc != name.loc:
					continue  # duplicate definition, already reported
				out.append(self._check_sig_bind(first, env, self._global_ids[name]))
				continue
			if any(self._locals[(Namespace.VALUE, occ)].loc != loc for b in group for occ, loc in _bind_binders(b)):
				continue
			tbind, polys = self._infer_group(group, env, top_level=True)
			for poly in polys.values():
				self._add_thing(IdThing(poly.name, poly.scheme))
				self._global_ids[poly.name] = poly
			out.append(tbind)
		return out

	def _check_local_binds(self, binds: Sequence[ast.Binding], env: _LocalEnv) -> Tuple[List[TBind], _LocalEnv]:
		seen: Dict[str, Span] = {}
		for bind in binds:
			for occ, loc in _bind_binders(bind):
				if occ in seen:
					self._error(f"Conflicting definitions for '{occ}'", loc, code="E-DUPLICATE")
				seen.setdefault(occ, loc)
		out: List[TBind] = []
		for group in binding_groups(binds):
			tbind, polys = self._infer_group(group, env, top_level=False)
			env = env.extend(polys)
			out.append(tbind)
		return out, env

	def _infer_group(self, group: List[ast.Binding], env: _LocalEnv, *, top_level: bool) -> Tuple[TBind, Dict[str, Id]]:
		start = len(self._wanted)
		outer = self._env_metas(env)
		monos: Dict[str, Id] = {}
		for bind in group:
			for occ, loc in _bind_binders(bind):
				if occ in monos:
					continue
				name = self._locals[(Namespace.VALUE, occ)] if top_level else self._local_name(occ, loc)
				monos[occ] = Id(name, Scheme.mono(self._fresh()))
		inner = env.extend(monos)
		tbinds: List[TBind] = [self._check_bind(bind, inner, monos) for bind in group]

		uids: List[int] = []
		for mono in monos.values():
			for uid in meta_uids(self._zonk(mono.scheme.body)):
				if uid not in outer and uid not in uids:
					uids.append(uid)
		dict_vars = self._solve(start, set(uids), outer)
		tvs = self._skolemise(uids)

		polys: Dict[str, Id] = {}
		exports: List[AbsExport] = []
		for occ, mono in monos.items():
			body = self._zonk(mono.scheme.body)
			here = free_tyvars(body)
			own_tvs = tuple(tv for tv in tvs if tv in here)
			preds = tuple(
				pred
				for pred in (self._zonk(dv.pred) for dv in dict_vars)
				if isinstance(pred, TyPred) and isinstance(pred.arg, TyVar) and pred.arg.name in own_tvs
			)
			poly = Id(mono.name, Scheme(own_tvs, preds, body))
			polys[occ] = poly
			exports.append(AbsExport(poly=poly, mono=mono))
		loc = Span.cover(group[0].loc, group[-1].loc)
		return TAbsBinds(tvs=tvs, dict_vars=dict_vars, exports=exports, binds=tbinds, loc=loc), polys

	def _check_sig_bind(self, bind: ast.FunBind, env: _LocalEnv, poly: Id) -> TBind:
		scheme = poly.scheme
		start = len(self._wanted)
		givens = [
			DictVar(Name(f"$d{p.cls.occ}", self.module, Namespace.VALUE, unique=self._fresh_unique()), p)
			for p in scheme.preds
		]
		mono = Id(poly.name, Scheme.mono(scheme.body))
		self._rigid.extend(scheme.tvs)
		self._givens.extend(givens)
		try:
			matches = self._check_matches(bind.matches, env, scheme.body)
			self._solve(start, set(), self._env_metas(env))
		finally:
			del self._givens[len(self._givens) - len(givens):]
			del self._rigid[len(self._rigid) - len(scheme.tvs):]
		return TAbsBinds(
			tvs=list(scheme.tvs),
			dict_vars=givens,
			exports=[AbsExport(poly=poly, mono=mono)],
			binds=[TFunBind(id=mono, matches=matches, loc=bind.loc)],
			loc=bind.loc,
		)

	def _check_instance_methods(self, inst: Instance, decl: ast.InstanceDecl) -> List[TBind]:
		cls = self.env.type_env[inst.cls]
		assert isinstance(cls, ClassThing)
		methods = {m.name.occ: m for m in cls.methods}
		out: List[TBind] = []
		seen: Set[str] = set()
		for bind in decl.binds:
			method = methods.get(bind.name)
			if method is None:
				self._error(
					f"'{bind.name}' is not a (visible) method of class '{cls.name.occ}'",
					bind.name_loc,
					code="E-INSTANCE",
				)
				continue
			if bind.name in seen:
				self._error(f"Conflicting definitions for '{bind.name}'", bind.name_loc, code="E-DUPLICATE")
				continue
			seen.add(bind.name)

			mapping: Dict[str, Type] = {cls.tyvar: inst.head_type()}
			names = (n for n in _tyvar_names() if n not in inst.tyvars)
			tvs = list(inst.tyvars)
			for tv in method.scheme.tvs[1:]:
				new = tv if tv not in inst.tyvars else next(names)
				mapping[tv] = TyVar(new)
				tvs.append(new)
			expected = subst_type(method.scheme.body, mapping)
			name = self._local_name(bind.name, bind.name_loc)
			poly = Id(name, Scheme(tuple(tvs), inst.context, expected))
			out.append(self._check_sig_bind(bind, _LocalEnv(), poly))
		for occ in methods:
			if occ not in seen:
				self._warn(f"No explicit implementation for '{occ}'", decl.loc, code="W-MISSING-METHOD")
		return out

	def _check_bind(self, bind: ast.Binding, env: _LocalEnv, monos: Dict[str, Id]) -> TBind:
		if isinstance(bind, ast.FunBind):
			mono = monos[bind.name]
			matches = self._check_matches(bind.matches, env, mono.scheme.body)
			return TFunBind(id=mono, matches=matches, loc=bind.loc)
		rhs, rhs_ty = self._infer(bind.rhs, env)
		bound: Dict[str, Id] = {}
		pat = self._check_pat(bind.pat, rhs_ty, bound, binder_ids=monos)
		return TPatBind(pat=pat, rhs=rhs, binders=list(bound.values()), loc=bind.loc)

	def _check_matches(self, matches: Sequence[ast.Match], env: _LocalEnv, expected: Type) -> TMatchGroup:
		arity = len(matches[0].pats)
		arg_types: List[Type] = [self._fresh() for _ in range(arity)]
		res_type: Type = self._fresh()
		self._unify(expected, fun_types(arg_types, res_type), matches[0].loc)
		out: List[TMatch] = []
		for match in matches:
			bound: Dict[str, Id] = {}
			pats = [self._check_pat(p, t, bound) for p, t in zip(match.pats, arg_types)]
			rhs, rhs_ty = self._infer(match.rhs, env.extend(bound))
			self._unify(res_type, rhs_ty, match.rhs.loc)
			out.append(TMatch(pats=pats, rhs=rhs, loc=match.loc))
		return TMatchGroup(matches=out, arg_types=arg_types, res_type=res_type)

	# Patterns

	def _check_pat(
		self,
		pat: ast.Pat,
		expected: Type,
		bound: Dict[str, Id],
		*,
		binder_ids: Optional[Dict[str, Id]] = None,
	) -> TPat:
		if isinstance(pat, ast.VarPat):
			if pat.name in bound:
				self._error(f"Conflicting definitions for '{pat.name}'", pat.loc, code="E-DUPLICATE")
			ident = binder_ids.get(pat.name) if binder_ids else None
			if ident is None:
				ident = Id(self._local_name(pat.name, pat.loc), Scheme.mono(expected))
			else:
				self._unify(ident.scheme.body, expected, pat.loc)
			bound[pat.name] = ident
			return TVarPat(id=ident, loc=pat.loc)
		if isinstance(pat, ast.WildPat):
			return TWildPat(type=expected, loc=pat.loc)
		if isinstance(pat, ast.LitPat):
			lit_ty = literal_type(pat.value)
			self._unify(expected, lit_ty, pat.loc)
			return TLitPat(value=pat.value, type=lit_ty, loc=pat.loc)
		if isinstance(pat, ast.ParPat):
			return TParPat(pat=self._check_pat(pat.pat, expected, bound, binder_ids=binder_ids), loc=pat.loc)
		if isinstance(pat, ast.ConPat):
			return self._check_con_pat(pat, expected, bound, binder_ids)
		raise TypeError(f"unknown pattern {type(pat).__name__}")

	def _check_con_pat(
		self,
		pat: ast.ConPat,
		expected: Type,
		bound: Dict[str, Id],
		binder_ids: Optional[Dict[str, Id]],
	) -> TPat:
		name = self._resolve(Namespace.VALUE, pat.con, pat.loc, "data constructor")
		thing = self.env.type_env.get(name) if name is not None else None
		if name is not None and not isinstance(thing, DataConThing):
			self._error(f"'{pat.con}' is not a data constructor", pat.loc, code="E-PATTERN")
		if not isinstance(thing, DataConThing):
			for arg in pat.args:
				self._check_pat(arg, self._fresh(), bound, binder_ids=binder_ids)
			return TWildPat(type=expected, loc=pat.loc)
		arity = len(thing.arg_types)
		if arity != len(pat.args):
			plural = "" if arity == 1 else "s"
			self._error(
				f"The constructor '{pat.con}' should have {arity} argument{plural}, but has been given {len(pat.args)}",
				pat.loc,
				code="E-PATTERN",
			)
			return TWildPat(type=expected, loc=pat.loc)
		type_args: List[Type] = [self._fresh() for _ in thing.scheme.tvs]
		mapping = dict(zip(thing.scheme.tvs, type_args))
		_, result = split_fun_types(thing.scheme.body, arity)
		result = subst_type(result, mapping)
		self._unify(expected, result, pat.loc)
		args = [
			self._check_pat(arg, subst_type(arg_ty, mapping), bound, binder_ids=binder_ids)
			for arg, arg_ty in zip(pat.args, thing.arg_types)
		]
		return TConPat(con=thing.name, type_args=type_args, args=args, type=result, loc=pat.loc)

	# Expressions

	def _infer(self, expr: ast.Expr, env: _LocalEnv) -> Tuple[TExpr, Type]:
		if isinstance(expr, ast.Var):
			return self._infer_var(expr.name, expr.loc, env)
		if isinstance(expr, ast.Con):
			return self._infer_con(expr.name, expr.loc)
		if isinstance(expr, ast.Lit):
			ty = literal_type(expr.value)
			return TLit(value=expr.value, type=ty, loc=expr.loc), ty
		if isinstance(expr, ast.App):
			return self._infer_app(expr, env)
		if isinstance(expr, ast.OpSeq):
			return self._infer(self._resolve_fixities(expr, env), env)
		if isinstance(expr, ast.OpApp):
			return self._infer_op_app(expr, env)
		if isinstance(expr, ast.Par):
			inner, ty = self._infer(expr.expr, env)
			return TPar(expr=inner, loc=expr.loc), ty
		if isinstance(expr, ast.Lambda):
			matches = self._check_matches([ast.Match(pats=expr.pats, rhs=expr.body, loc=expr.loc)], env, self._fresh())
			return TLam(matches=matches, loc=expr.loc), matches.type
		if isinstance(expr, ast.Let):
			binds, inner_env = self._check_local_binds(expr.binds, env)
			body, ty = self._infer(expr.body, inner_env)
			return TLet(binds=binds, body=body, loc=expr.loc), ty
		if isinstance(expr, ast.If):
			cond, cond_ty = self._infer(expr.cond, env)
			self._unify(BOOL_TYPE, cond_ty, expr.cond.loc)
			then_expr, ty = self._infer(expr.then_expr, env)
			else_expr, else_ty = self._infer(expr.else_expr, env)
			self._unify(ty, else_ty, expr.else_expr.loc)
			return TIf(cond=cond, then_expr=then_expr, else_expr=else_expr, loc=expr.loc), ty
		if isinstance(expr, ast.Case):
			return self._infer_case(expr, env)
		if isinstance(expr, ast.ListLit):
			elem_ty: Type = self._fresh()
			elems: List[TExpr] = []
			for elem in expr.elems:
				texpr, ty = self._infer(elem, env)
				self._unify(elem_ty, ty, elem.loc)
				elems.append(texpr)
			return TList(elems=elems, elem_type=elem_ty, loc=expr.loc), list_type(elem_ty)
		raise TypeError(f"unknown expression {type(expr).__name__}")

	def _occurrence(self, node: TExpr, scheme: Scheme, loc: Span, origin: str) -> Tuple[TExpr, Type]:
		"""Instantiate a polymorphic occurrence; the wrapper takes over its span."""
		if not scheme.tvs and not scheme.preds:
			node.loc = loc
			return node, scheme.body
		type_args, holes, ty = self._instantiate(scheme, loc, origin)
		return TWrap(expr=node, type_args=type_args, dicts=list(holes), loc=loc), ty

	def _infer_var(self, occ: str, loc: Span, env: _LocalEnv) -> Tuple[TExpr, Type]:
		local = env.lookup(occ)
		if local is not None:
			return self._occurrence(TVar(id=local), local.scheme, loc, occ)
		name = self._resolve(Namespace.VALUE, occ, loc, "variable")
		thing = self.env.type_env.get(name) if name is not None else None
		if name is None or thing is None:
			ty = self._fresh()
			return TVar(id=Id(self._local_name(occ, loc), Scheme.mono(ty)), loc=loc), ty
		if isinstance(thing, DataConThing):
			return self._occurrence(TCon(con=name, scheme=thing.scheme), thing.scheme, loc, occ)
		ident = self._global_id(name, thing)
		return self._occurrence(TVar(id=ident), ident.scheme, loc, occ)

	def _infer_con(self, occ: str, loc: Span) -> Tuple[TExpr, Type]:
		name = self._resolve(Namespace.VALUE, occ, loc, "data constructor")
		thing = self.env.type_env.get(name) if name is not None else None
		if not isinstance(thing, DataConThing):
			if name is not None:
				self._error(f"'{occ}' is not a data constructor", loc, code="E-NOT-IN-SCOPE")
			ty = self._fresh()
			return TVar(id=Id(self._local_name(occ, loc), Scheme.mono(ty)), loc=loc), ty
		return self._occurrence(TCon(con=name, scheme=thing.scheme), thing.scheme, loc, occ)

	def _infer_app(self, expr: ast.App, env: _LocalEnv) -> Tuple[TExpr, Type]:
		fn, fn_ty = self._infer(expr.fn, env)
		arg, arg_ty = self._infer(expr.arg, env)
		parts = split_fun_type(self._zonk(fn_ty))
		if parts is not None:
			param, res = parts
			self._unify(param, arg_ty, expr.arg.loc)
		else:
			res = self._fresh()
			self._unify(fun_type(arg_ty, res), fn_ty, expr.fn.loc)
		return TApp(fn=fn, arg=arg, loc=expr.loc), res

	def _infer_op_app(self, expr: ast.OpApp, env: _LocalEnv) -> Tuple[TExpr, Type]:
		left, left_ty = self._infer(expr.left, env)
		if expr.op.is_con():
			op, op_ty = self._infer_con(expr.op.name, expr.op.loc)
		else:
			op, op_ty = self._infer_var(expr.op.name, expr.op.loc, env)
		right, right_ty = self._infer(expr.right, env)
		res: Type = self._fresh()
		parts = split_fun_types(self._zonk(op_ty), 2)
		if len(parts[0]) == 2:
			self._unify(parts[0][0], left_ty, expr.left.loc)
			self._unify(parts[0][1], right_ty, expr.right.loc)
			res = parts[1]
		else:
			self._unify(fun_types([left_ty, right_ty], res), op_ty, expr.op.loc)
		return TOpApp(left=left, op=op, right=right, loc=expr.loc), res

	def _infer_case(self, expr: ast.Case, env: _LocalEnv) -> Tuple[TExpr, Type]:
		scrutinee, scrut_ty = self._infer(expr.scrutinee, env)
		res_type: Type = self._fresh()
		matches: List[TMatch] = []
		for alt in expr.alts:
			bound: Dict[str, Id] = {}
			pat = self._check_pat(alt.pat, scrut_ty, bound)
			body, body_ty = self._infer(alt.body, env.extend(bound))
			self._unify(res_type, body_ty, alt.body.loc)
			matches.append(TMatch(pats=[pat], rhs=body, loc=alt.loc))
		group = TMatchGroup(matches=matches, arg_types=[scrut_ty], res_type=res_type)
		return TCase(scrutinee=scrutinee, matches=group, loc=expr.loc), res_type

	# Fixity resolution

	def _fixity_of(self, op: ast.OpRef, env: _LocalEnv) -> Fixity:
		if not op.is_con() and env.lookup(op.name) is not None:
			return DEFAULT_FIXITY
		name = self._resolve(Namespace.VALUE, op.name, op.loc, "operator", report=False)
		if name is None:
			return DEFAULT_FIXITY
		return self.env.fixity_of(name)

	def _resolve_fixities(self, seq: ast.OpSeq, env: _LocalEnv) -> ast.Expr:
		"""Re-associate a flat operator sequence by precedence (shunting-yard)."""
		operands: List[ast.Expr] = [item for item in seq.items[0::2]]  # type: ignore[misc]
		ops: List[ast.OpRef] = [item for item in seq.items[1::2]]  # type: ignore[misc]
		out: List[ast.Expr] = [operands[0]]
		pending: List[ast.OpRef] = []

		def reduce() -> None:
			right = out.pop()
			left = out.pop()
			op = pending.pop()
			out.append(ast.OpApp(left=left, op=op, right=right, loc=Span.cover(left.loc, right.loc)))

		for op, operand in zip(ops, operands[1:]):
			fixity = self._fixity_of(op, env)
			while pending:
				top = self._fixity_of(pending[-1], env)
				if top.precedence > fixity.precedence:
					reduce()
				elif top.precedence == fixity.precedence and top.assoc == fixity.assoc == Assoc.INFIXL:
					reduce()
				elif top.precedence == fixity.precedence and not (top.assoc == fixity.assoc == Assoc.INFIXR):
					self._error(
						f"Precedence parsing error: cannot mix '{pending[-1].name}' [{top}] and "
						f"'{op.name}' [{fixity}] in the same infix expression",
						op.loc,
						code="E-FIXITY",
					)
					reduce()
				else:
					break
			pending.append(op)
			out.append(operand)
		while pending:
			reduce()
		return out[0]


def typecheck(module: ast.Module, imports: Sequence[ModDetails] = ()) -> TcResult:
	"""Typecheck `module`; raises `SourceError` when it has type errors."""
	return TypeChecker(module, imports).check()


__all__ = ["TcResult", "TypeChecker", "binding_groups", "typecheck"]
