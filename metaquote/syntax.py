# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Reading fragments out of marked host syntax.

Inline quotations carry their payload as ordinary Python syntax: an
expression slice, a `with` body or a string literal. This module turns those
payloads into Fragments and converts between expression and pattern syntax,
which the two lifting modes need when an escape crosses between them.
"""

from __future__ import annotations

import ast
from typing import Optional

from . import markers
from .core.diagnostics import ExpansionError
from .core.span import Span
from .fragment import Fragment, FragmentKind, parse_fragment


def _pattern_error(node: ast.AST, file: Optional[str], note: str) -> ExpansionError:
	return ExpansionError.at(FragmentKind.PAT.expected, Span.from_loc(node, file), notes=[note])


def _capture(name: str) -> ast.pattern:
	if name == "_":
		return ast.MatchAs(pattern=None, name=None)
	return ast.MatchAs(pattern=None, name=name)


def _is_dotted(node: ast.expr) -> bool:
	while isinstance(node, ast.Attribute):
		node = node.value
	return isinstance(node, ast.Name)


def _is_signed_number(node: ast.expr) -> bool:
	if isinstance(node, ast.UnaryOp) and isinstance(node.op, ast.USub):
		node = node.operand
	return isinstance(node, ast.Constant) and isinstance(node.value, (int, float, complex)) and not isinstance(node.value, bool)


def expr_to_pattern(node: ast.expr, file: Optional[str] = None) -> ast.pattern:
	"""
	Read an expression-shaped pattern.

	Names capture (`_` is the wildcard), dotted names are value patterns, calls
	are class patterns and `a | b` is an or-pattern. `p[x]` becomes the pattern
	escape `p(x)`. Patterns with no expression shape (`x as y`) must be quoted
	from a string instead.
	"""
	if isinstance(node, ast.Name):
		return _capture(node.id)
	if isinstance(node, ast.Attribute) and _is_dotted(node):
		return ast.MatchValue(value=node)
	if isinstance(node, ast.Constant):
		if node.value is None or isinstance(node.value, bool):
			return ast.MatchSingleton(value=node.value)
		if node.value is Ellipsis:
			raise _pattern_error(node, file, "'...' is not a literal pattern")
		return ast.MatchValue(value=node)
	if _is_signed_number(node):
		return ast.MatchValue(value=node)
	if isinstance(node, ast.BinOp) and isinstance(node.op, ast.BitOr):
		alternatives: list[ast.pattern] = []
		for side in (node.left, node.right):
			converted = expr_to_pattern(side, file)
			if isinstance(converted, ast.MatchOr):
				alternatives.extend(converted.patterns)
			else:
				alternatives.append(converted)
		return ast.MatchOr(patterns=alternatives)
	if isinstance(node, ast.BinOp) and isinstance(node.op, (ast.Add, ast.Sub)) and _is_signed_number(node.left):
		return ast.MatchValue(value=node)
	if isinstance(node, (ast.List, ast.Tuple)):
		return ast.MatchSequence(patterns=[expr_to_pattern(elt, file) for elt in node.elts])
	if isinstance(node, ast.Starred):
		if not isinstance(node.value, ast.Name):
			raise _pattern_error(node, file, "a starred pattern binds a plain name")
		name = node.value.id
		return ast.MatchStar(name=None if name == "_" else name)
	if isinstance(node, ast.Dict):
		keys: list[ast.expr] = []
		patterns: list[ast.pattern] = []
		rest: Optional[str] = None
		for key, value in zip(node.keys, node.values):
			if key is None:
				if not isinstance(value, ast.Name):
					raise _pattern_error(value, file, "'**rest' in a mapping pattern binds a plain name")
				rest = value.id
				continue
			keys.append(key)
			patterns.append(expr_to_pattern(value, file))
		return ast.MatchMapping(keys=keys, patterns=patterns, rest=rest)
	if markers.is_escape(node, markers.ESCAPE_PATTERN):
		payload = markers.escape_payload(node, FragmentKind.PAT, file)
		return ast.MatchClass(
			cls=ast.Name(id=markers.ESCAPE_PATTERN, ctx=ast.Load()),
			patterns=[expr_to_pattern(payload, file)],
			kwd_attrs=[],
			kwd_patterns=[],
		)
	if isinstance(node, ast.Call) and _is_dotted(node.func):
		for kw in node.keywords:
			if kw.arg is None:
				raise _pattern_error(kw.value, file, "class patterns take no '**' arguments")
		return ast.MatchClass(
			cls=node.func,
			patterns=[expr_to_pattern(arg, file) for arg in node.args],
			kwd_attrs=[kw.arg for kw in node.keywords],
			kwd_patterns=[expr_to_pattern(kw.value, file) for kw in node.keywords],
		)
	raise _pattern_error(node, file, f"{type(node).__name__} has no pattern form")


def pattern_to_expr(pattern: ast.pattern, file: Optional[str] = None) -> ast.expr:
	"""Read an escape payload written in pattern syntax as an expression."""
	if isinstance(pattern, ast.MatchAs) and pattern.pattern is None and pattern.name is not None:
		return ast.Name(id=pattern.name, ctx=ast.Load())
	if isinstance(pattern, ast.MatchValue):
		return pattern.value
	if isinstance(pattern, ast.MatchSingleton):
		return ast.Constant(value=pattern.value)
	if isinstance(pattern, ast.MatchSequence):
		return ast.List(elts=[pattern_to_expr(p, file) for p in pattern.patterns], ctx=ast.Load())
	if isinstance(pattern, ast.MatchClass):
		return ast.Call(
			func=pattern.cls,
			args=[pattern_to_expr(p, file) for p in pattern.patterns],
			keywords=[
				ast.keyword(arg=name, value=pattern_to_expr(p, file))
				for name, p in zip(pattern.kwd_attrs, pattern.kwd_patterns)
			],
		)
	raise ExpansionError.at(
		FragmentKind.EXPR.expected,
		Span.from_loc(pattern, file),
		notes=["this escape must name the value to splice"],
	)


def _string_payload(node: ast.expr) -> Optional[str]:
	if isinstance(node, ast.Constant) and isinstance(node.value, str):
		return node.value
	return None


def fragment_from_string(kind: FragmentKind, node: ast.Constant, file: Optional[str]) -> Fragment:
	span = Span.from_loc(node, file)
	fragment = parse_fragment(kind, node.value, span)
	if kind.is_signature:
		check_signature(fragment.statements(), kind, file)
	return fragment


def fragment_from_expr(kind: FragmentKind, marker: ast.Subscript, file: Optional[str]) -> Fragment:
	"""Fragment carried by an expression-position quotation `name[...]`."""
	span = Span.from_loc(marker, file)
	payload = markers.single_payload(marker, kind, file)
	text = _string_payload(payload)
	if kind.is_statements:
		if text is None:
			raise ExpansionError.at(
				kind.expected,
				span,
				notes=[f"in expression position '{markers.subscript_name(marker)}[...]' quotes a string; use a 'with' block for inline statements"],
			)
		return fragment_from_string(kind, payload, file)
	if kind is FragmentKind.PAT:
		if text is not None:
			return fragment_from_string(kind, payload, file)
		return Fragment(kind, expr_to_pattern(payload, file), span)
	return Fragment(kind, payload, span)


def fragment_from_body(kind: FragmentKind, stmt: ast.With, file: Optional[str]) -> Fragment:
	"""Fragment carried by a `with stmts as name:` style block."""
	span = Span.from_loc(stmt, file)
	body = list(stmt.body)
	if kind in (FragmentKind.STMT, FragmentKind.SIGI):
		if len(body) != 1:
			raise ExpansionError.at(
				kind.expected,
				span,
				notes=[f"exactly one item is required, found {len(body)}"],
			)
	if kind.is_signature:
		check_signature(body, kind, file)
	return Fragment(kind, body, span)


def _is_stub_body(body: list[ast.stmt]) -> bool:
	for stmt in body:
		if isinstance(stmt, ast.Pass):
			continue
		if isinstance(stmt, ast.Expr) and isinstance(stmt.value, ast.Constant) and (
			stmt.value.value is Ellipsis or isinstance(stmt.value.value, str)
		):
			continue
		return False
	return True


def is_stub(stmt: ast.stmt) -> bool:
	"""True for declarations allowed in a signature (`.pyi`-style stubs)."""
	if isinstance(stmt, (ast.FunctionDef, ast.AsyncFunctionDef)):
		return _is_stub_body(stmt.body)
	if isinstance(stmt, ast.AnnAssign):
		return stmt.value is None
	if isinstance(stmt, ast.ClassDef):
		return all(
			is_stub(item) or _is_stub_body([item]) or markers.is_splice(item)
			for item in stmt.body
		)
	if isinstance(stmt, (ast.Import, ast.ImportFrom)):
		return True
	type_alias = getattr(ast, "TypeAlias", None)
	return type_alias is not None and isinstance(stmt, type_alias)


def check_signature(body: list[ast.stmt], kind: FragmentKind, file: Optional[str]) -> None:
	for stmt in body:
		if markers.is_splice(stmt) or is_stub(stmt):
			continue
		raise ExpansionError.at(
			FragmentKind.SIGI.expected,
			Span.from_loc(stmt, file),
			notes=[f"a quoted {kind.description} holds only stub declarations, found {type(stmt).__name__}"],
		)


__all__ = [
	"check_signature",
	"expr_to_pattern",
	"fragment_from_body",
	"fragment_from_expr",
	"fragment_from_string",
	"is_stub",
	"pattern_to_expr",
]
