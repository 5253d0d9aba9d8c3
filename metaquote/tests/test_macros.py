# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import ast
import types

import pytest

from metaquote.core.diagnostics import ExpansionError
from metaquote.expander import expand_source
from metaquote.runtime import PrintableFun, eval_under


def test_printable_keeps_value_and_source(run) -> None:
	double = run("double = printable[lambda x: x * 2]")["double"]
	assert isinstance(double, PrintableFun)
	assert double(21) == 42
	assert str(double) == "lambda x: x * 2"


def test_printable_value_is_expanded(run) -> None:
	env = run("make = printable[lambda: expr[1]]")
	assert isinstance(env["make"](), ast.Constant)
	assert str(env["make"]) == "lambda: expr[1]"


def test_printable_rejects_expression_escapes() -> None:
	with pytest.raises(ExpansionError, match="Expression expected.") as excinfo:
		expand_source("g = printable[f(e[x])]")
	assert "cannot contain 'e[...]' escapes" in excinfo.value.diagnostic.notes[0]
	assert excinfo.value.diagnostic.span.column == 16


def test_printable_rejects_escapes_inside_nested_quotes() -> None:
	with pytest.raises(ExpansionError, match="Expression expected."):
		expand_source("inc = printable[lambda node: expr[e[node] + 1]]")


def test_code_triple_evaluates_under_both_namespaces(run) -> None:
	env = run(
		"""
		class Solution:
			answer = 42

		class Code:
			answer = 41

		expected, actual, tree = code[answer + 1]
		"""
	)
	assert env["expected"] == 43
	assert env["actual"] == 42
	assert ast.unparse(env["tree"]) == "answer + 1"


def test_code_namespace_shadows_caller_names(run) -> None:
	env = run(
		"""
		def check(x):
			return code[helper(x)]
		""",
		Solution=types.SimpleNamespace(helper=lambda v: v + 1),
		Code={"helper": lambda v: v - 1},
		helper=lambda v: v,
	)
	expected, actual, tree = env["check"](10)
	assert (expected, actual) == (11, 9)
	assert ast.unparse(tree) == "helper(x)"


def test_eval_under_reads_caller_scope() -> None:
	tree = ast.parse("a + b", mode="eval").body
	assert eval_under({"a": 1}, tree, {"b": 100}, {"b": 2}) == 3


def test_code_namespace_reaches_lambda_bodies(run) -> None:
	env = run(
		"""
		f_ref, f_sub, tree = code[lambda v: helper(v)]
		""",
		Solution=types.SimpleNamespace(helper=lambda v: v + 1),
		Code={"helper": lambda v: v - 1},
	)
	assert env["f_ref"](10) == 11
	assert env["f_sub"](10) == 9
	assert ast.unparse(env["tree"]) == "lambda v: helper(v)"


def test_code_namespace_reaches_comprehensions(run) -> None:
	env = run(
		"""
		def check(xs):
			return code[[helper(i) for i in xs]]
		""",
		Solution=types.SimpleNamespace(helper=lambda v: v * 2),
		Code={"helper": lambda v: v * 3},
	)
	expected, actual, _ = env["check"]([1, 2])
	assert expected == [2, 4]
	assert actual == [3, 6]


def test_eval_under_namespace_is_visible_in_nested_scopes() -> None:
	tree = ast.parse("[k * a for k in ks]", mode="eval").body
	assert eval_under({"a": 10}, tree, {"a": 0}, {"ks": [1, 2]}) == [10, 20]
