# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Harness conveniences built on the lifter.

	ty[T]         -> _mq_rt.Ty.repr(<lifted T>, T)
	printable[e]  -> _mq_rt.printable_fun(_mq_ast.unparse(<lifted e>), e)
	code[e]       -> (<e under the reference namespace>,
	                  <e under the submission namespace>,
	                  <lifted e>)
"""

from __future__ import annotations

import ast
import copy
from typing import TYPE_CHECKING, Optional

from . import markers
from .codegen import call, dotted
from .core.diagnostics import ExpansionError
from .core.span import Span
from .fragment import Fragment, FragmentKind
from .location import LocationContext

if TYPE_CHECKING:
	from .expander import Expander


def ty_of(this: "Expander", type_node: ast.expr, ctx: LocationContext) -> ast.expr:
	"""Run-time type representation: the type's syntax plus its value."""
	span = Span.from_loc(type_node, this.file)
	lifted = this.lift_fragment(Fragment(FragmentKind.TYPE, copy.deepcopy(type_node), span), ctx)
	return call(f"{this.options.runtime_alias}.Ty.repr", [lifted, copy.deepcopy(type_node)])


def _first_escape(node: ast.AST) -> Optional[ast.AST]:
	for child in ast.walk(node):
		if markers.is_escape(child, markers.ESCAPE_EXPR):
			return child
	return None


def printable_of(this: "Expander", node: ast.expr, ctx: LocationContext) -> ast.expr:
	span = Span.from_loc(node, this.file)
	escape = _first_escape(node)
	if escape is not None:
		raise ExpansionError.at(
			FragmentKind.EXPR.expected,
			Span.from_loc(escape, this.file),
			notes=["printable[...] runs its expression as written; it cannot contain 'e[...]' escapes"],
		)
	value = this.expand_expr(copy.deepcopy(node), ctx)
	lifted = this.lift_fragment(Fragment(FragmentKind.EXPR, node, span), ctx)
	text = call(f"{this.options.ast_alias}.unparse", [lifted])
	return call(f"{this.options.runtime_alias}.printable_fun", [text, value])


def code_of(this: "Expander", node: ast.expr, ctx: LocationContext) -> ast.expr:
	span = Span.from_loc(node, this.file)
	options = this.options

	def lifted() -> ast.expr:
		return this.lift_fragment(Fragment(FragmentKind.EXPR, copy.deepcopy(node), span), ctx)

	def under(namespace: str) -> ast.expr:
		return call(
			f"{options.runtime_alias}.eval_under",
			[dotted(namespace), lifted(), call("globals"), call("locals")],
		)

	return ast.Tuple(
		elts=[under(options.reference_namespace), under(options.submission_namespace), lifted()],
		ctx=ast.Load(),
	)


__all__ = ["code_of", "printable_of", "ty_of"]
