# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Parser for arrow-notation function types.

Python annotations have no arrow syntax, so `ty[...]` and `funty[...]` also
accept a string such as `"int -> str -> bool -> None"`. The string is parsed
with lark and rebuilt as the equivalent `Callable[[int, str, bool], None]`
annotation expression.
"""

from __future__ import annotations

import ast
from pathlib import Path
from typing import Optional

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedInput

from .codegen import callable_type, dotted
from .core.diagnostics import ExpansionError
from .core.span import Span

_GRAMMAR_PATH = Path(__file__).with_name("arrow_type.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	start="start",
	propagate_positions=True,
	maybe_placeholders=False,
)


def parse_arrow_type(source: str, callable_path: str, span: Optional[Span] = None) -> ast.expr:
	"""
	Parse `source` and return an annotation expression.

	`callable_path` is the dotted name arrows are rebuilt with (for expanded
	code this is the run-time module's `Callable`).
	"""
	try:
		tree = _PARSER.parse(source)
	except UnexpectedInput as exc:
		line = str(exc).strip().splitlines()[0] if str(exc).strip() else "invalid arrow type"
		raise ExpansionError.at(
			"Type expected.",
			span,
			notes=[f"in arrow type {source!r}: {line}"],
		) from exc
	return _build_type(tree, callable_path)


def _build_type(node: Tree | Token, callable_path: str) -> ast.expr:
	if isinstance(node, Token):
		raise ExpansionError.at("Type expected.", notes=[f"unexpected token {node.value!r}"])
	kind = _name(node)
	children = [child for child in node.children if not (isinstance(child, Token) and child.type == "ARROW")]
	if kind == "arrow":
		operands = [_build_type(child, callable_path) for child in children]
		return callable_type(dotted(callable_path), operands[:-1], operands[-1])
	if kind == "group":
		return _build_type(children[0], callable_path)
	if kind == "params":
		return ast.List(elts=[_build_type(child, callable_path) for child in children], ctx=ast.Load())
	if kind == "ellipsis":
		return ast.Constant(value=Ellipsis)
	if kind == "forward":
		return ast.Constant(value=ast.literal_eval(children[0].value))
	if kind == "named":
		return _build_named(children, callable_path)
	raise ExpansionError.at("Type expected.", notes=[f"unsupported type node {kind!r}"])


def _build_named(children: list, callable_path: str) -> ast.expr:
	path = ".".join(tok.value for tok in children[0].children if isinstance(tok, Token))
	if path == "None":
		base: ast.expr = ast.Constant(value=None)
	else:
		base = dotted(path)
	if len(children) == 1:
		return base
	args = [_build_type(child, callable_path) for child in children[1].children if isinstance(child, Tree)]
	index: ast.expr = args[0] if len(args) == 1 else ast.Tuple(elts=args, ctx=ast.Load())
	return ast.Subscript(value=base, slice=index, ctx=ast.Load())


def _name(node: Tree) -> str:
	data = node.data
	if isinstance(data, Token):
		return data.value
	return data


__all__ = ["parse_arrow_type"]
