# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Function-signature reification: `funty[...]`.

The written function type is peeled layer by layer into a descriptor built
from the run-time `arg_ty` / `last_ty` combinators:

	funty[Callable[[int, str, bool], None]]

becomes

	_mq_rt.fun_ty(
		_mq_rt.arg_ty(<ty int>, _mq_rt.arg_ty(<ty str>, _mq_rt.last_ty(<ty bool>, <ty None>))),
		full=Callable[[int, str, bool], None],
		uncurried=Callable[[int, str, bool], None],
		ret=None,
	)

where `<ty T>` is the `ty[T]` representation. `fun_ty` checks the spine
against the three correlated types once, when the expanded module runs.
"""

from __future__ import annotations

import ast
import copy
from typing import TYPE_CHECKING, Optional

from . import markers
from .codegen import call, callable_type
from .core.diagnostics import ExpansionError, InvalidArrowType
from .core.span import Span
from .fragment import FragmentKind
from .location import LocationContext

if TYPE_CHECKING:
	from .expander import Expander


def _is_callable_ref(node: ast.expr) -> bool:
	if isinstance(node, ast.Name):
		return node.id == "Callable"
	return isinstance(node, ast.Attribute) and node.attr == "Callable"


def arrow_parts(node: ast.expr) -> Optional[tuple[list[ast.expr], ast.expr]]:
	"""Parameters and return type of `Callable[[A, ...], R]`, else None."""
	if not isinstance(node, ast.Subscript) or not _is_callable_ref(node.value):
		return None
	index = node.slice
	if not isinstance(index, ast.Tuple) or len(index.elts) != 2:
		return None
	params, ret = index.elts
	if not isinstance(params, ast.List):
		return None
	return list(params.elts), ret


def reject_type_escapes(node: ast.expr, span: Span) -> None:
	for child in ast.walk(node):
		if markers.is_escape(child, markers.ESCAPE_TYPE):
			raise ExpansionError.at(
				FragmentKind.TYPE.expected,
				span,
				notes=["a reified type is evaluated as written; it cannot contain 't[...]' escapes"],
			)


def fun_ty_of(this: "Expander", marker: ast.Subscript, ctx: LocationContext) -> ast.expr:
	"""Expand `funty[...]` into a checked function-type descriptor."""
	span = Span.from_loc(marker, this.file)
	glob_type = this.type_payload(marker)
	parts = arrow_parts(glob_type)
	if parts is None or not parts[0]:
		notes = ["write the function type as Callable[[A, ...], R] or as an arrow string \"A -> ... -> R\""]
		if parts is not None:
			notes.append("a function type needs at least one parameter")
		raise InvalidArrowType.at("arrow type expected", span, notes=notes)
	params, ret = parts
	callable_base = glob_type.value  # type: ignore[attr-defined]
	rt = this.options.runtime_alias

	def spine_of(arg0: ast.expr, rest: list[ast.expr]) -> tuple[ast.expr, list[ast.expr], ast.expr]:
		# Returns the descriptor, the parameters of the uncurried type and the return type.
		if rest:
			next_descr, unit_params, ret_type = spine_of(rest[0], rest[1:])
			descr = call(f"{rt}.arg_ty", [this.ty_of(arg0, ctx), next_descr])
			return descr, [copy.deepcopy(arg0)] + unit_params, ret_type
		descr = call(f"{rt}.last_ty", [this.ty_of(arg0, ctx), this.ty_of(ret, ctx)])
		return descr, [copy.deepcopy(arg0)], ret

	descr, unit_params, ret_type = spine_of(params[0], params[1:])
	uncurried = callable_type(copy.deepcopy(callable_base), unit_params, ast.Constant(value=None))
	return call(
		f"{rt}.fun_ty",
		[descr],
		keywords=[
			("full", copy.deepcopy(glob_type)),
			("uncurried", uncurried),
			("ret", copy.deepcopy(ret_type)),
		],
	)


__all__ = ["arrow_parts", "fun_ty_of", "reject_type_escapes"]
