# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Fragments: parsed snippets under one Python sub-grammar.

The parser is the standard `ast` module. Patterns have no standalone entry
point, so pattern source is parsed inside a throwaway `match` statement.
"""

from __future__ import annotations

import ast
import textwrap
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .core.diagnostics import ExpansionError
from .core.span import Span


class FragmentKind(Enum):
	EXPR = "expr"
	PAT = "pat"
	STMTS = "stmts"
	STMT = "stmt"
	SIG = "sig"
	SIGI = "sigi"
	TYPE = "typ"

	@property
	def is_statements(self) -> bool:
		return self in (FragmentKind.STMTS, FragmentKind.STMT, FragmentKind.SIG, FragmentKind.SIGI)

	@property
	def is_sequence(self) -> bool:
		return self in (FragmentKind.STMTS, FragmentKind.SIG)

	@property
	def is_signature(self) -> bool:
		return self in (FragmentKind.SIG, FragmentKind.SIGI)

	@property
	def description(self) -> str:
		return _DESCRIPTIONS[self]

	@property
	def expected(self) -> str:
		return _EXPECTED[self]


_DESCRIPTIONS = {
	FragmentKind.EXPR: "expression",
	FragmentKind.PAT: "pattern",
	FragmentKind.STMTS: "statement sequence",
	FragmentKind.STMT: "statement",
	FragmentKind.SIG: "signature",
	FragmentKind.SIGI: "signature item",
	FragmentKind.TYPE: "type",
}

_EXPECTED = {
	FragmentKind.EXPR: "Expression expected.",
	FragmentKind.PAT: "Pattern expected.",
	FragmentKind.STMTS: "Statements expected.",
	FragmentKind.STMT: "Statement expected.",
	FragmentKind.SIG: "Signature expected.",
	FragmentKind.SIGI: "Signature item expected.",
	FragmentKind.TYPE: "Type expected.",
}

@dataclass(frozen=True)
class Fragment:
	"""A parsed node (or statement list) tagged with its sub-grammar."""

	kind: FragmentKind
	node: Any
	span: Span = Span()

	def statements(self) -> list[ast.stmt]:
		if not self.kind.is_statements:
			raise TypeError(f"{self.kind.value} fragment has no statements")
		return list(self.node)


_MATCH_PREFIX = "match _:\n case "


def _syntax_error(kind: FragmentKind, exc: SyntaxError, span: Optional[Span]) -> ExpansionError:
	return ExpansionError.at(kind.expected, span, notes=[f"{exc.msg} in quoted {kind.description}"])


def _parse_pattern(source: str, span: Optional[Span]) -> ast.pattern:
	text = source.strip()
	if "\n" in text:
		text = f"({text})"
	try:
		module = ast.parse(f"{_MATCH_PREFIX}{text}:\n  pass\n")
	except SyntaxError as exc:
		raise _syntax_error(FragmentKind.PAT, exc, span) from exc
	match_stmt = module.body[0]
	assert isinstance(match_stmt, ast.Match)
	pattern = match_stmt.cases[0].pattern
	ast.increment_lineno(pattern, -1)
	return pattern


def parse_fragment(kind: FragmentKind, source: str, span: Optional[Span] = None) -> Fragment:
	"""Parse `source` under the sub-grammar `kind`."""
	span = span or Span()
	if kind is FragmentKind.PAT:
		return Fragment(kind, _parse_pattern(source, span), span)
	text = textwrap.dedent(source).strip()
	try:
		if kind in (FragmentKind.EXPR, FragmentKind.TYPE):
			if "\n" in text:
				text = f"(\n{text}\n)"
			node = ast.parse(text, mode="eval").body
		else:
			node = ast.parse(text).body
	except SyntaxError as exc:
		raise _syntax_error(kind, exc, span) from exc
	if kind in (FragmentKind.STMT, FragmentKind.SIGI) and len(node) != 1:
		raise ExpansionError.at(
			kind.expected,
			span,
			notes=[f"exactly one item is required, found {len(node)}"],
		)
	return Fragment(kind, node, span)


__all__ = ["Fragment", "FragmentKind", "parse_fragment"]
