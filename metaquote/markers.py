# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Marker spellings recognised by the expander.

Markers are ordinary Python syntax so that a marked module still parses:
subscripts on reserved names in expression position, `with` blocks for
statement quotations and one-string class patterns in `case` position.
"""

from __future__ import annotations

import ast
from typing import Optional

from .core.diagnostics import ExpansionError
from .core.span import Span
from .fragment import FragmentKind

QUOTES: dict[str, FragmentKind] = {
	"expr": FragmentKind.EXPR,
	"pat": FragmentKind.PAT,
	"typ": FragmentKind.TYPE,
	"stmts": FragmentKind.STMTS,
	"stmt": FragmentKind.STMT,
	"sig": FragmentKind.SIG,
	"sigi": FragmentKind.SIGI,
}

BLOCK_QUOTES = frozenset({"stmts", "stmt", "sig", "sigi"})

TY = "ty"
FUNTY = "funty"
PRINTABLE = "printable"
CODE = "code"
MACROS = frozenset({TY, FUNTY, PRINTABLE, CODE})

ESCAPE_EXPR = "e"
ESCAPE_TYPE = "t"
ESCAPE_PATTERN = "p"
SPLICE = "s"

METALOC = "metaloc"


def subscript_name(node: ast.AST) -> Optional[str]:
	"""Name of a `name[...]` subscript, or None for anything else."""
	if isinstance(node, ast.Subscript) and isinstance(node.value, ast.Name):
		return node.value.id
	return None


def is_escape(node: ast.AST, name: str) -> bool:
	return subscript_name(node) == name


def is_splice(stmt: ast.AST) -> bool:
	return isinstance(stmt, ast.Expr) and is_escape(stmt.value, SPLICE)


def is_pattern_escape(pattern: ast.AST) -> bool:
	return (
		isinstance(pattern, ast.MatchClass)
		and isinstance(pattern.cls, ast.Name)
		and pattern.cls.id == ESCAPE_PATTERN
	)


def single_payload(node: ast.Subscript, kind: FragmentKind, file: Optional[str]) -> ast.expr:
	"""The one expression a `name[...]` marker carries."""
	payload = node.slice
	if isinstance(payload, ast.Slice) or (isinstance(payload, ast.Tuple) and kind is not FragmentKind.EXPR):
		raise ExpansionError.at(
			kind.expected,
			Span.from_loc(node, file),
			notes=[f"'{subscript_name(node)}[...]' takes exactly one {kind.description}"],
		)
	return payload


def escape_payload(node: ast.Subscript, kind: FragmentKind, file: Optional[str]) -> ast.expr:
	"""Payload of an escape; unlike quotations an escape never takes a bare tuple."""
	payload = node.slice
	if isinstance(payload, (ast.Slice, ast.Tuple)):
		raise ExpansionError.at(
			kind.expected,
			Span.from_loc(node, file),
			notes=[f"an escape takes exactly one {kind.description}"],
		)
	return payload


def quote_block(stmt: ast.stmt, file: Optional[str]) -> Optional[tuple[FragmentKind, ast.expr]]:
	"""Recognise `with stmts as name:` (and stmt/sig/sigi) blocks."""
	if not isinstance(stmt, ast.With) or len(stmt.items) != 1:
		return None
	item = stmt.items[0]
	head = item.context_expr
	if not isinstance(head, ast.Name) or head.id not in BLOCK_QUOTES:
		return None
	if item.optional_vars is None:
		raise ExpansionError.at(
			"Quoted block needs a target.",
			Span.from_loc(stmt, file),
			notes=[f"write 'with {head.id} as name:' to bind the quoted statements"],
		)
	return QUOTES[head.id], item.optional_vars


def metaloc_statement(stmt: ast.stmt, file: Optional[str]) -> Optional[ast.expr]:
	"""Payload of a `metaloc[...]` statement overriding the rest of its body."""
	if isinstance(stmt, ast.Expr) and is_escape(stmt.value, METALOC):
		return single_payload(stmt.value, FragmentKind.EXPR, file)
	return None


def metaloc_block(stmt: ast.stmt, file: Optional[str]) -> Optional[ast.expr]:
	"""Payload of a `with metaloc[...]:` block."""
	if not isinstance(stmt, ast.With) or len(stmt.items) != 1:
		return None
	item = stmt.items[0]
	if not is_escape(item.context_expr, METALOC):
		return None
	if item.optional_vars is not None:
		raise ExpansionError.at(
			"'with metaloc[...]' does not bind a name.",
			Span.from_loc(stmt, file),
		)
	return single_payload(item.context_expr, FragmentKind.EXPR, file)


def pattern_quote(pattern: ast.pattern, file: Optional[str]) -> Optional[tuple[FragmentKind, ast.Constant]]:
	"""Recognise `case expr("...")` style quotations in pattern position."""
	if not isinstance(pattern, ast.MatchClass) or not isinstance(pattern.cls, ast.Name):
		return None
	kind = QUOTES.get(pattern.cls.id)
	if kind is None:
		return None
	if (
		len(pattern.patterns) != 1
		or pattern.kwd_patterns
		or not isinstance(pattern.patterns[0], ast.MatchValue)
		or not isinstance(pattern.patterns[0].value, ast.Constant)
		or not isinstance(pattern.patterns[0].value.value, str)
	):
		raise ExpansionError.at(
			kind.expected,
			Span.from_loc(pattern, file),
			notes=[f"in a pattern, '{pattern.cls.id}(...)' takes the quoted source as one string literal"],
		)
	return kind, pattern.patterns[0].value


__all__ = [
	"BLOCK_QUOTES",
	"CODE",
	"ESCAPE_EXPR",
	"ESCAPE_PATTERN",
	"ESCAPE_TYPE",
	"FUNTY",
	"MACROS",
	"METALOC",
	"PRINTABLE",
	"QUOTES",
	"SPLICE",
	"TY",
	"escape_payload",
	"is_escape",
	"is_pattern_escape",
	"is_splice",
	"metaloc_block",
	"metaloc_statement",
	"pattern_quote",
	"quote_block",
	"single_payload",
	"subscript_name",
]
