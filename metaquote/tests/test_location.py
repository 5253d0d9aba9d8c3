# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import ast

from metaquote.runtime import Location, default_loc, loc_attrs


def _position(node: ast.AST) -> tuple:
	return (node.lineno, node.col_offset, node.end_lineno, node.end_col_offset)


def test_metaloc_statement_applies_to_the_rest_of_its_body(run) -> None:
	env = run(
		"""
		def build():
			before = expr[a]
			metaloc[Location(10, 4, 10, 9)]
			first = expr[b]
			second = expr[c]
			return before, first, second

		outside = expr[d]
		""",
		Location=Location,
	)
	before, first, second = env["build"]()
	assert _position(before) == (1, 0, 1, 0)
	assert _position(first) == (10, 4, 10, 9)
	assert _position(second) == (10, 4, 10, 9)
	assert _position(env["outside"]) == (1, 0, 1, 0)


def test_metaloc_block_is_scoped_to_the_block(run) -> None:
	env = run(
		"""
		with metaloc[Location(20, 0, 21, 3)]:
			a = expr[x]
			b = expr[y]
		c = expr[z]
		""",
		Location=Location,
	)
	assert _position(env["a"]) == (20, 0, 21, 3)
	assert _position(env["b"]) == (20, 0, 21, 3)
	assert _position(env["c"]) == (1, 0, 1, 0)


def test_override_in_nested_scope_does_not_leak(run) -> None:
	env = run(
		"""
		metaloc[Location(5, 0)]
		if True:
			metaloc[Location(6, 0)]
			inner = expr[x]
		outer = expr[y]
		""",
		Location=Location,
	)
	assert env["inner"].lineno == 6
	assert env["outer"].lineno == 5


def test_metaloc_accepts_an_ast_node(run) -> None:
	anchor = ast.parse("\n\nvalue = 1").body[0]
	env = run(
		"""
		metaloc[anchor]
		tree = expr[value + 1]
		""",
		anchor=anchor,
	)
	assert _position(env["tree"]) == _position(anchor)
	assert _position(env["tree"].left) == _position(anchor)


def test_ambient_default_is_read_when_the_quotation_runs(run) -> None:
	env = run(
		"""
		def build():
			return expr[x]
		"""
	)
	saved = default_loc.get()
	with default_loc.using(Location(30, 2, 30, 3)):
		inside = env["build"]()
	outside = env["build"]()
	assert _position(inside) == (30, 2, 30, 3)
	assert _position(outside) == (1, 0, 1, 0)
	assert default_loc.get() == saved


def test_loc_attrs_fills_missing_end_position() -> None:
	assert loc_attrs(Location(3, 7)) == {"lineno": 3, "col_offset": 7, "end_lineno": 3, "end_col_offset": 7}
