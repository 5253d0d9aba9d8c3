# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Small constructors for the code the expander emits.
"""

from __future__ import annotations

import ast
from typing import Iterable, Optional


def dotted(path: str) -> ast.expr:
	"""`a.b.c` as a load expression."""
	head, *rest = path.split(".")
	node: ast.expr = ast.Name(id=head, ctx=ast.Load())
	for part in rest:
		node = ast.Attribute(value=node, attr=part, ctx=ast.Load())
	return node


def call(
	func: ast.expr | str,
	args: Iterable[ast.expr] = (),
	keywords: Iterable[tuple[Optional[str], ast.expr]] = (),
) -> ast.Call:
	if isinstance(func, str):
		func = dotted(func)
	return ast.Call(
		func=func,
		args=list(args),
		keywords=[ast.keyword(arg=name, value=value) for name, value in keywords],
	)


def callable_type(base: ast.expr, params: list[ast.expr], ret: ast.expr) -> ast.Subscript:
	"""`base[[params...], ret]`, the shape of `Callable[[A, B], R]`."""
	return ast.Subscript(
		value=base,
		slice=ast.Tuple(elts=[ast.List(elts=params, ctx=ast.Load()), ret], ctx=ast.Load()),
		ctx=ast.Load(),
	)


__all__ = ["call", "callable_type", "dotted"]
