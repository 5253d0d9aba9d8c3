# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import ast

import pytest

from metaquote.core.diagnostics import ExpansionError
from metaquote.expander import expand_source


@pytest.mark.parametrize(
	("source", "message"),
	[
		("x = expr[e[a, b]]", "Expression expected."),
		("x = expr[e[1:2]]", "Expression expected."),
		("x = typ[int, str]", "Type expected."),
		("x = typ[list[t[a, b]]]", "Type expected."),
		("x = pat[f(p[a, b])]", "Pattern expected."),
		("x = pat[a + b]", "Pattern expected."),
		("x = pat[...]", "Pattern expected."),
		("x = stmts[a]", "Statements expected."),
		("x = stmt['a = 1\\nb = 2']", "Statement expected."),
		("x = stmts['a = (']", "Statements expected."),
		("x = sig['x = 1']", "Signature item expected."),
	],
)
def test_malformed_quotation_is_rejected(source: str, message: str) -> None:
	with pytest.raises(ExpansionError) as excinfo:
		expand_source(source)
	assert excinfo.value.diagnostic.message == message


def test_expression_quote_of_string_is_a_constant() -> None:
	tree = expand_source("x = expr['(']")
	assert "_mq_ast.Constant(value='('" in ast.unparse(tree)


def test_sequence_splice_in_single_item_quote() -> None:
	with pytest.raises(ExpansionError, match="cannot stand for exactly one item"):
		expand_source("with stmt as one:\n    s[rest]\n")


def test_block_quote_needs_a_target() -> None:
	with pytest.raises(ExpansionError, match="needs a target"):
		expand_source("with stmts:\n    x = 1\n")


def test_single_item_block_takes_one_statement() -> None:
	with pytest.raises(ExpansionError, match="Statement expected."):
		expand_source("with stmt as one:\n    a = 1\n    b = 2\n")


def test_signature_takes_stub_declarations_only() -> None:
	with pytest.raises(ExpansionError, match="Signature item expected."):
		expand_source("with sig as decls:\n    def f(x: int) -> int:\n        return x\n")


def test_signature_accepts_stubs() -> None:
	expand_source(
		"with sig as decls:\n"
		"    def f(x: int) -> int: ...\n"
		"    size: int\n"
		"    class Shape:\n"
		"        def area(self) -> float: ...\n"
		"    s[extra]\n"
	)


def test_metaloc_block_does_not_bind() -> None:
	with pytest.raises(ExpansionError, match="does not bind a name"):
		expand_source("with metaloc[here] as there:\n    x = expr[1]\n")


def test_diagnostic_reports_file_and_position() -> None:
	with pytest.raises(ExpansionError) as excinfo:
		expand_source("\n\nx = expr[e[a, b]]\n", filename="quoted.py")
	diag = excinfo.value.diagnostic
	assert diag.phase == "expand"
	assert diag.to_dict()["file"] == "quoted.py"
	assert diag.span.line == 3
	assert str(excinfo.value).startswith("quoted.py:3:")
