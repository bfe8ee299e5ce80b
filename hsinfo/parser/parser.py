# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
lark-based parser for the Haskell subset.

The grammar (`grammar.lark`) is layout-free; `LayoutInserter` sits between the
lexer and the LALR parser and turns `NEWLINE` tokens into the `_SEP`,
`_BEGIN` and `_END` tokens the grammar expects. The parse tree is then turned
into `ast.py` nodes by `_AstBuilder`.
"""

from __future__ import annotations

import codecs
from functools import lru_cache
from pathlib import Path
from typing import Iterator, List, Optional, Union

from lark import Lark, Token, Tree

from hsinfo.core.span import Span

from .ast import (
	Alt,
	App,
	Case,
	ClassDecl,
	Con,
	ConDecl,
	ConPat,
	DataDecl,
	Decl,
	Expr,
	FixityDecl,
	FunBind,
	FunTypeExpr,
	If,
	ImportDecl,
	InstanceDecl,
	Lambda,
	Let,
	ListLit,
	Lit,
	LitPat,
	Match,
	Module,
	ModuleHeader,
	OpRef,
	OpSeq,
	Par,
	ParPat,
	Pat,
	PatBind,
	PredExpr,
	PrimDecl,
	QualTypeExpr,
	TyConExpr,
	TyVarExpr,
	TypeExpr,
	TypeSig,
	Var,
	VarPat,
	WildPat,
)

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text(encoding="utf-8")

_OPENERS = {"(", "[", "{"}
_CLOSERS = {")", "]", "}"}


class ParseError(ValueError):
	"""
	Parse error raised while building the AST (not by the grammar itself).

	Carries a location so callers can turn it into a pinned diagnostic.
	"""

	def __init__(self, message: str, *, loc: Span) -> None:
		super().__init__(message)
		self.loc = loc


class LayoutInserter:
	"""
	Post-lexer implementing the layout rule for top-level declarations and
	`where` blocks.

	- A newline followed by a token at the current block's indentation emits
	  `_SEP` (a new item starts).
	- A newline followed by a deeper-indented token is a continuation line and
	  emits nothing.
	- A newline followed by a shallower token closes blocks (`_END`) until the
	  indentation matches.
	- The first token after `where` opens a block (`_BEGIN`) at its column; a
	  `where` with nothing indented under it yields an empty block.
	- Newlines inside brackets never matter.

	Synthesised tokens borrow the position of the last real token so they do
	not stretch the spans of the rules around them.
	"""

	always_accept = ("NEWLINE",)

	def __init__(self, tab_width: int = 8) -> None:
		self.tab_width = tab_width

	def process(self, stream: Iterator[Token]) -> Iterator[Token]:
		levels: List[int] = [0]
		depth = 0
		pending: Optional[Token] = None
		expect_block = False
		last: Optional[Token] = None

		for tok in stream:
			if tok.type == "NEWLINE":
				if depth == 0:
					pending = tok
				continue

			if last is None:
				# The first declaration fixes the top-level indentation.
				levels[0] = self._column_of(tok, pending)
				pending = None

			if expect_block:
				expect_block = False
				yield Token.new_borrow_pos("_BEGIN", "", last)
				column = self._column_of(tok, pending)
				if column > levels[-1]:
					levels.append(column)
					pending = None
				else:
					yield Token.new_borrow_pos("_END", "", last)

			if pending is not None:
				indent = self._indent_of(pending)
				pending = None
				while len(levels) > 1 and indent < levels[-1]:
					levels.pop()
					yield Token.new_borrow_pos("_END", "", last)
				if indent == levels[-1]:
					yield Token.new_borrow_pos("_SEP", "", last)

			yield tok
			last = tok
			if tok.type != "STRING":
				if tok.value in _OPENERS:
					depth += 1
				elif tok.value in _CLOSERS and depth:
					depth -= 1
				elif tok.value == "where":
					expect_block = True

		if last is not None:
			if expect_block:
				yield Token.new_borrow_pos("_BEGIN", "", last)
				yield Token.new_borrow_pos("_END", "", last)
			while len(levels) > 1:
				levels.pop()
				yield Token.new_borrow_pos("_END", "", last)

	def _indent_of(self, newline: Token) -> int:
		tail = newline.value.rsplit("\n", 1)[-1]
		return len(tail.expandtabs(self.tab_width))

	def _column_of(self, tok: Token, pending: Optional[Token]) -> int:
		"""Indentation of `tok`: taken from the preceding newline when it starts a line."""
		if pending is not None:
			return self._indent_of(pending)
		return tok.column - 1


@lru_cache(maxsize=None)
def _module_parser(tab_width: int) -> Lark:
	return Lark(
		_GRAMMAR_SRC,
		parser="lalr",
		lexer="basic",
		start="module",
		propagate_positions=True,
		maybe_placeholders=False,
		postlex=LayoutInserter(tab_width),
	)


_NAME_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="basic",
	start="name_query",
	propagate_positions=True,
	maybe_placeholders=False,
)


def parse_module_source(source: str, path: Optional[str] = None, *, tab_width: int = 8) -> Module:
	"""Parse module text; raises lark errors or `ParseError`."""
	tree = _module_parser(tab_width).parse(source)
	module = _AstBuilder(path).build_module(tree)
	module.path = path
	return module


def parse_name_text(text: str) -> Expr:
	"""
	Parse an identifier query into a `Var` or `Con` naming it.

	`(+)` and `+` both name the operator; `[]` names the list type/constructor.
	"""
	tree = _NAME_PARSER.parse(text.strip())
	builder = _AstBuilder("<interactive>")
	kind = _name(tree)
	tok = next(c for c in tree.children if isinstance(c, Token)) if tree.children else None
	loc = builder.loc(tree)
	if kind == "query_nil":
		return Con("[]", loc=loc)
	assert tok is not None
	if kind == "query_con" or (kind == "query_op" and tok.value.startswith(":")):
		return Con(tok.value, loc=loc)
	return Var(tok.value, loc=loc)


def _decode_string_token(tok: Token) -> str:
	"""Decode a STRING token (Haskell escapes are a subset of Python's)."""
	content = tok.value[1:-1]
	unescaped = codecs.decode(content, "unicode_escape")
	return unescaped.encode("latin-1").decode("utf-8")


def _name(node: Union[Tree, Token]) -> str:
	if isinstance(node, Tree):
		data = node.data
		if isinstance(data, Token):
			return data.value
		return data
	if isinstance(node, Token):
		return node.type
	return str(node)


def _trees(node: Tree) -> List[Tree]:
	return [c for c in node.children if isinstance(c, Tree)]


def _tokens(node: Tree, type_: str) -> List[Token]:
	return [c for c in node.children if isinstance(c, Token) and c.type == type_]


class _AstBuilder:
	"""Builds `ast.py` nodes from a lark tree; spans are anchored to `file`."""

	def __init__(self, file: Optional[str]) -> None:
		self.file = file

	def loc(self, node: Union[Tree, Token]) -> Span:
		if isinstance(node, Tree):
			return Span.from_loc(node.meta, self.file)
		return Span.from_loc(node, self.file)

	# Module level

	def build_module(self, tree: Tree) -> Module:
		name = "Main"
		header_loc = Span(file=self.file)
		imports: List[ImportDecl] = []
		decls: List[Decl] = []
		seen_decl = False
		seen_header = False
		for child in _trees(tree):
			kind = _name(child)
			if kind == "module_header":
				if seen_header or seen_decl or imports:
					raise ParseError("`module` header must be the first declaration in the file", loc=self.loc(child))
				seen_header = True
				name = _tokens(child, "CONID")[0].value
				header_loc = self.loc(child)
				continue
			if kind == "import_decl":
				if seen_decl:
					raise ParseError("imports must precede all other declarations", loc=self.loc(child))
				imports.append(ImportDecl(module=_tokens(child, "CONID")[0].value, loc=self.loc(child)))
				continue
			seen_decl = True
			decls.append(self._build_decl(child))
		return Module(
			name=name,
			imports=imports,
			decls=_group_equations(decls),
			loc=self.loc(tree),
			path=self.file,
			header_loc=header_loc,
		)

	def _build_decl(self, tree: Tree) -> Decl:
		kind = _name(tree)
		if kind == "data_decl":
			return self._build_data_decl(tree)
		if kind == "sig_decl":
			return self._build_sig(tree)
		if kind == "prim_decl":
			return PrimDecl(sig=self._build_sig(_trees(tree)[0]), loc=self.loc(tree))
		if kind == "fixity_decl":
			return self._build_fixity(tree)
		if kind == "class_decl":
			return self._build_class(tree)
		if kind == "instance_decl":
			return self._build_instance(tree)
		if kind == "fun_equation":
			return self._build_equation(tree)
		if kind == "pat_equation":
			return self._build_pat_equation(tree)
		raise ParseError(f"unsupported declaration `{kind}`", loc=self.loc(tree))

	def _build_data_decl(self, tree: Tree) -> DataDecl:
		name_tok = _tokens(tree, "CONID")[0]
		name = name_tok.value
		tyvars = [tok.value for tok in _tokens(tree, "VARID")]
		cons: List[ConDecl] = []
		for con in _trees(tree):
			con_name = _tokens(con, "CONID")[0].value
			cons.append(ConDecl(name=con_name, args=[self._build_type(t) for t in _trees(con)], loc=self.loc(con)))
		return DataDecl(name=name, tyvars=tyvars, cons=cons, loc=self.loc(tree), name_loc=self.loc(name_tok))

	def _build_binder(self, tree: Tree) -> str:
		tok = next(c for c in tree.children if isinstance(c, Token))
		return tok.value

	def _build_sig(self, tree: Tree) -> TypeSig:
		binders = [c for c in _trees(tree) if _name(c) == "binder"]
		qual = next(c for c in _trees(tree) if _name(c) == "qual_type")
		return TypeSig(
			names=[self._build_binder(b) for b in binders],
			type=self._build_qual_type(qual),
			loc=self.loc(tree),
			name_locs=[self.loc(b) for b in binders],
		)

	def _build_fixity(self, tree: Tree) -> FixityDecl:
		kw = _trees(tree)[0]
		assoc = next(c for c in kw.children if isinstance(c, Token)).value
		precedence = int(_tokens(tree, "INT")[0].value)
		if precedence > 9:
			raise ParseError(f"precedence {precedence} out of range (0-9)", loc=self.loc(tree))
		return FixityDecl(
			assoc=assoc,
			precedence=precedence,
			ops=[tok.value for tok in _tokens(tree, "OPERATOR")],
			loc=self.loc(tree),
		)

	def _build_class(self, tree: Tree) -> ClassDecl:
		name_tok = _tokens(tree, "CONID")[0]
		return ClassDecl(
			name=name_tok.value,
			tyvar=_tokens(tree, "VARID")[0].value,
			sigs=[self._build_sig(t) for t in _trees(tree)],
			loc=self.loc(tree),
			name_loc=self.loc(name_tok),
		)

	def _build_instance(self, tree: Tree) -> InstanceDecl:
		children = _trees(tree)
		qual = self._build_qual_type(children[0])
		head = qual.body
		if not (isinstance(head, TyConExpr) and len(head.args) == 1):
			raise ParseError("instance head must be a class applied to one type", loc=qual.loc)
		equations = [self._build_equation(t) for t in children[1:]]
		binds = [b for b in _group_equations(equations) if isinstance(b, FunBind)]
		return InstanceDecl(
			context=qual.context,
			cls=head.name,
			head=head.args[0],
			binds=binds,
			loc=self.loc(tree),
		)

	# Bindings

	def _build_equation(self, tree: Tree) -> FunBind:
		children = _trees(tree)
		binder = children[0]
		pats = [self._build_pat(p) for p in children[1:-1]]
		rhs = self._build_expr(children[-1])
		loc = self.loc(tree)
		return FunBind(
			name=self._build_binder(binder),
			name_loc=self.loc(binder),
			matches=[Match(pats=pats, rhs=rhs, loc=loc)],
			loc=loc,
		)

	def _build_pat_equation(self, tree: Tree) -> PatBind:
		lhs, rhs = _trees(tree)
		if _name(lhs) == "paren_lhs":
			pat: Pat = ParPat(pat=self._build_pat(_trees(lhs)[0]), loc=self.loc(lhs))
		else:
			pat = ConPat(
				con=_tokens(lhs, "CONID")[0].value,
				args=[self._build_pat(p) for p in _trees(lhs)],
				loc=self.loc(lhs),
			)
		return PatBind(pat=pat, rhs=self._build_expr(rhs), loc=self.loc(tree))

	# Types

	def _build_qual_type(self, tree: Tree) -> QualTypeExpr:
		parts = list(tree.children)
		if len(parts) == 2:
			context = self._build_context(parts[0])
			body = self._build_type(parts[1])
		else:
			context = []
			body = self._build_type(parts[0])
		return QualTypeExpr(context=context, body=body, loc=self.loc(tree))

	def _build_context(self, node: Union[Tree, Token]) -> List[PredExpr]:
		if isinstance(node, Tree) and _name(node) == "tuple_type":
			items = list(node.children)
		else:
			items = [node]
		preds: List[PredExpr] = []
		for item in items:
			ty = self._build_type(item)
			if not (isinstance(ty, TyConExpr) and len(ty.args) == 1 and isinstance(ty.args[0], TyVarExpr)):
				raise ParseError("class context must be of the form `C a`", loc=ty.loc)
			preds.append(PredExpr(cls=ty.name, tyvar=ty.args[0].name, loc=ty.loc))
		return preds

	def _build_type(self, node: Union[Tree, Token]) -> TypeExpr:
		if not isinstance(node, Tree):
			raise ParseError(f"unexpected token in type: {node!r}", loc=self.loc(node))
		kind = _name(node)
		loc = self.loc(node)
		if kind == "type_con":
			return TyConExpr(name=node.children[0].value, loc=loc)
		if kind == "type_var":
			return TyVarExpr(name=node.children[0].value, loc=loc)
		if kind == "list_type":
			return TyConExpr(name="[]", args=[self._build_type(node.children[0])], loc=loc)
		if kind == "fun_type":
			arg, res = node.children
			return FunTypeExpr(arg=self._build_type(arg), res=self._build_type(res), loc=loc)
		if kind == "type_app":
			fn, arg = node.children
			head = self._build_type(fn)
			if not isinstance(head, TyConExpr):
				raise ParseError("only type constructors can be applied to arguments", loc=loc)
			return TyConExpr(name=head.name, args=head.args + [self._build_type(arg)], loc=loc)
		if kind == "tuple_type":
			raise ParseError("tuple types are only allowed in class contexts", loc=loc)
		raise ParseError(f"unsupported type syntax `{kind}`", loc=loc)

	# Patterns

	def _build_pat(self, node: Union[Tree, Token]) -> Pat:
		if not isinstance(node, Tree):
			raise ParseError(f"unexpected token in pattern: {node!r}", loc=self.loc(node))
		kind = _name(node)
		loc = self.loc(node)
		if kind == "var_pat":
			return VarPat(name=node.children[0].value, loc=loc)
		if kind == "wild_pat":
			return WildPat(loc=loc)
		if kind == "con_pat":
			return ConPat(con=node.children[0].value, loc=loc)
		if kind == "con_app_pat":
			con = node.children[0].value
			return ConPat(con=con, args=[self._build_pat(p) for p in node.children[1:]], loc=loc)
		if kind == "int_pat":
			return LitPat(value=int(node.children[0].value), loc=loc)
		if kind == "str_pat":
			return LitPat(value=_decode_string_token(node.children[0]), loc=loc)
		if kind == "nil_pat":
			return ConPat(con="[]", loc=loc)
		if kind == "paren_pat":
			return ParPat(pat=self._build_pat(node.children[0]), loc=loc)
		if kind == "cons_pat":
			left, op, right = node.children
			if op.value != ":":
				raise ParseError(f"operator `{op.value}` is not a constructor; only `:` may appear in patterns", loc=self.loc(op))
			return ConPat(con=":", args=[self._build_pat(left), self._build_pat(right)], loc=loc)
		raise ParseError(f"unsupported pattern syntax `{kind}`", loc=loc)

	# Expressions

	def _build_expr(self, node: Union[Tree, Token]) -> Expr:
		if not isinstance(node, Tree):
			raise ParseError(f"unexpected token in expression: {node!r}", loc=self.loc(node))
		kind = _name(node)
		loc = self.loc(node)
		if kind == "var":
			return Var(name=node.children[0].value, loc=loc)
		if kind == "con":
			return Con(name=node.children[0].value, loc=loc)
		if kind == "op_var":
			op = node.children[0].value
			if op.startswith(":"):
				return Con(name=op, loc=loc)
			return Var(name=op, loc=loc)
		if kind == "int_lit":
			return Lit(value=int(node.children[0].value), loc=loc)
		if kind == "str_lit":
			return Lit(value=_decode_string_token(node.children[0]), loc=loc)
		if kind == "paren":
			return Par(expr=self._build_expr(node.children[0]), loc=loc)
		if kind == "list_lit":
			return ListLit(elems=[self._build_expr(c) for c in _trees(node)], loc=loc)
		if kind == "app":
			fn, arg = node.children
			return App(fn=self._build_expr(fn), arg=self._build_expr(arg), loc=loc)
		if kind == "infix_expr":
			items: List[Union[Expr, OpRef]] = []
			for child in node.children:
				if isinstance(child, Token):
					items.append(OpRef(name=child.value, loc=self.loc(child)))
				else:
					items.append(self._build_expr(child))
			return OpSeq(items=items, loc=loc)
		if kind == "lambda":
			children = list(node.children)
			pats = [self._build_pat(p) for p in children[:-1]]
			return Lambda(pats=pats, body=self._build_expr(children[-1]), loc=loc)
		if kind == "let_expr":
			binds_node, body = node.children
			binds = []
			for child in _trees(binds_node):
				if _name(child) == "fun_equation":
					binds.append(self._build_equation(child))
				else:
					binds.append(self._build_pat_equation(child))
			return Let(binds=_group_equations(binds), body=self._build_expr(body), loc=loc)
		if kind == "if_expr":
			cond, then_expr, else_expr = node.children
			return If(
				cond=self._build_expr(cond),
				then_expr=self._build_expr(then_expr),
				else_expr=self._build_expr(else_expr),
				loc=loc,
			)
		if kind == "case_expr":
			children = _trees(node)
			alts = []
			for alt in children[1:]:
				pat, body = alt.children
				alts.append(Alt(pat=self._build_pat(pat), body=self._build_expr(body), loc=self.loc(alt)))
			return Case(scrutinee=self._build_expr(children[0]), alts=alts, loc=loc)
		raise ParseError(f"unsupported expression syntax `{kind}`", loc=loc)


def _group_equations(decls: list) -> list:
	"""
	Merge adjacent equations of the same function into one FunBind.

	Non-adjacent equations stay separate; the checker reports them as
	duplicate definitions.
	"""
	out: list = []
	for decl in decls:
		prev = out[-1] if out else None
		if (
			isinstance(decl, FunBind)
			and isinstance(prev, FunBind)
			and prev.name == decl.name
			and prev.matches
			and decl.matches
			and len(prev.matches[0].pats) > 0
			and len(prev.matches[0].pats) == len(decl.matches[0].pats)
		):
			out[-1] = FunBind(
				name=prev.name,
				name_loc=prev.name_loc,
				matches=prev.matches + decl.matches,
				loc=Span.cover(prev.loc, decl.loc),
			)
			continue
		out.append(decl)
	return out


__all__ = ["LayoutInserter", "ParseError", "parse_module_source", "parse_name_text"]
