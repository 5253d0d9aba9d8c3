# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
The expansion pass.

`Expander.expand_module` rewrites every quotation marker of a parsed module
into ordinary Python and returns the rewritten tree. It runs once per module,
stops at the first error (raising `ExpansionError`) and never hands back a
partially expanded tree.

	expr[a + e[b]]           -> code building `ast.BinOp(a, +, <b>)`
	case expr("f(e[x])"):    -> a class pattern matching such a call, binding x
	with stmts as body: ...  -> body = [<lifted statements>]
	metaloc[node]            -> later quotations in the body are stamped at `node`
"""

from __future__ import annotations

import ast
import copy
import logging
from typing import Optional

from . import macros, markers, signature, syntax
from .arrow_type import parse_arrow_type
from .core.span import Span
from .fragment import Fragment, FragmentKind
from .lifter import EXPR_BUILDER, PAT_BUILDER, Builder, LiftContext, lift
from .location import LocationContext
from .node import reflect
from .options import ExpanderOptions

logger = logging.getLogger(__name__)


def _is_docstring(stmt: ast.stmt) -> bool:
	return (
		isinstance(stmt, ast.Expr)
		and isinstance(stmt.value, ast.Constant)
		and isinstance(stmt.value.value, str)
	)


class Expander:
	"""Expands quotation markers in one compilation unit."""

	def __init__(self, options: Optional[ExpanderOptions] = None, *, file: Optional[str] = None) -> None:
		self.options = options or ExpanderOptions()
		self.file = file
		self.expanded = 0

	# Entry point

	def expand_module(self, tree: ast.Module) -> ast.Module:
		"""Return an expanded copy of `tree`; the input is left untouched."""
		tree = copy.deepcopy(tree)
		self.expanded = 0
		body, _ = self.expand_body(tree.body, LocationContext.ambient(self.options.runtime_alias))
		if self.expanded:
			body = self._with_imports(body)
		tree.body = body
		logger.debug("%s: expanded %d quotation(s)", self.file or "<unknown>", self.expanded)
		return ast.fix_missing_locations(tree)

	# Statements

	def expand_body(self, stmts: list[ast.stmt], ctx: LocationContext) -> tuple[list[ast.stmt], LocationContext]:
		"""
		Expand a statement list.

		A `metaloc[...]` statement is removed and changes the location for the
		statements after it. The returned context is the one in force at the end
		of the body; callers expanding a nested scope drop it.
		"""
		out: list[ast.stmt] = []
		for stmt in stmts:
			override = markers.metaloc_statement(stmt, self.file)
			if override is not None:
				ctx = ctx.override(self.expand_expr(override, ctx))
				logger.debug("%s: location override", Span.from_loc(stmt, self.file).describe())
				continue
			out.extend(self.expand_stmt(stmt, ctx))
		return out, ctx

	def expand_stmt(self, stmt: ast.stmt, ctx: LocationContext) -> list[ast.stmt]:
		scoped = markers.metaloc_block(stmt, self.file)
		if scoped is not None:
			body, _ = self.expand_body(stmt.body, ctx.override(self.expand_expr(scoped, ctx)))
			return body
		quoted = markers.quote_block(stmt, self.file)
		if quoted is not None:
			kind, target = quoted
			fragment = syntax.fragment_from_body(kind, stmt, self.file)
			value = self.lift_fragment(fragment, ctx)
			return [ast.copy_location(ast.Assign(targets=[target], value=value), stmt)]
		return [self._expand_fields(stmt, ctx)]

	# Expressions and patterns

	def expand_expr(self, node: ast.expr, ctx: LocationContext) -> ast.expr:
		name = markers.subscript_name(node)
		if name is not None and isinstance(node.ctx, ast.Load):  # type: ignore[attr-defined]
			if name in markers.QUOTES:
				fragment = syntax.fragment_from_expr(markers.QUOTES[name], node, self.file)  # type: ignore[arg-type]
				return self.lift_fragment(fragment, ctx)
			if name in markers.MACROS:
				return self._macro(name, node, ctx)  # type: ignore[arg-type]
		return self._expand_fields(node, ctx)

	def expand_pattern(self, node: ast.pattern, ctx: LocationContext) -> ast.pattern:
		quoted = markers.pattern_quote(node, self.file)
		if quoted is not None:
			kind, literal = quoted
			fragment = syntax.fragment_from_string(kind, literal, self.file)
			return self.lift_fragment(fragment, ctx, PAT_BUILDER)
		return self._expand_fields(node, ctx)

	def _macro(self, name: str, node: ast.Subscript, ctx: LocationContext) -> ast.expr:
		if name == markers.TY:
			return self.ty_of(self.type_payload(node), ctx)
		if name == markers.FUNTY:
			return signature.fun_ty_of(self, node, ctx)
		payload = markers.single_payload(node, FragmentKind.EXPR, self.file)
		if name == markers.PRINTABLE:
			return macros.printable_of(self, payload, ctx)
		return macros.code_of(self, payload, ctx)

	def _expand_any(self, node: ast.AST, ctx: LocationContext) -> ast.AST:
		if isinstance(node, ast.expr):
			return self.expand_expr(node, ctx)
		if isinstance(node, ast.pattern):
			return self.expand_pattern(node, ctx)
		return self._expand_fields(node, ctx)

	def _expand_fields(self, node, ctx: LocationContext):
		for name, value in ast.iter_fields(node):
			if isinstance(value, list):
				if value and isinstance(value[0], ast.stmt):
					body, _ = self.expand_body(value, ctx)
					setattr(node, name, body or [ast.copy_location(ast.Pass(), value[0])])
					continue
				setattr(node, name, [self._expand_any(item, ctx) if isinstance(item, ast.AST) else item for item in value])
			elif isinstance(value, ast.AST):
				setattr(node, name, self._expand_any(value, ctx))
		return node

	# Helpers used by the macros

	def lift_fragment(self, fragment: Fragment, ctx: LocationContext, builder: Builder = EXPR_BUILDER):
		"""Reflect and lift one fragment in `builder`'s mode."""
		self.expanded += 1
		logger.debug(
			"%s: lifting %s quotation (%s mode)",
			fragment.span.describe(),
			fragment.kind.value,
			builder.mode,
		)
		lift_ctx = LiftContext(
			location=ctx,
			runtime_alias=self.options.runtime_alias,
			aliases=self.options.aliases,
			resolve_expr=lambda node: self.expand_expr(node, ctx),
			resolve_pattern=lambda node: self.expand_pattern(node, ctx),
			file=self.file,
		)
		return lift(reflect(fragment, self.file), builder, lift_ctx)

	def type_payload(self, marker: ast.Subscript) -> ast.expr:
		"""The type a `ty[...]` / `funty[...]` marker names; strings are arrow types."""
		span = Span.from_loc(marker, self.file)
		payload = markers.single_payload(marker, FragmentKind.TYPE, self.file)
		if isinstance(payload, ast.Constant) and isinstance(payload.value, str):
			payload = parse_arrow_type(payload.value, f"{self.options.runtime_alias}.Callable", span)
		signature.reject_type_escapes(payload, span)
		return payload

	def ty_of(self, type_node: ast.expr, ctx: LocationContext) -> ast.expr:
		return macros.ty_of(self, type_node, ctx)

	def _with_imports(self, body: list[ast.stmt]) -> list[ast.stmt]:
		# After the docstring and any `from __future__` imports.
		index = 1 if body and _is_docstring(body[0]) else 0
		while index < len(body) and isinstance(body[index], ast.ImportFrom) and body[index].module == "__future__":
			index += 1
		imports: list[ast.stmt] = [
			ast.Import(names=[ast.alias(name="ast", asname=self.options.ast_alias)]),
			ast.Import(names=[ast.alias(name=self.options.runtime_module, asname=self.options.runtime_alias)]),
		]
		return body[:index] + imports + body[index:]


def expander(args: Optional[list[str]] = None) -> Expander:
	"""Default expander. Takes an argument list like every pass; it has no settings."""
	del args
	return Expander()


def expand_source(source: str, filename: str = "<unknown>", options: Optional[ExpanderOptions] = None) -> ast.Module:
	"""Parse `source` and expand it. A SyntaxError propagates unchanged."""
	tree = ast.parse(source, filename=filename)
	return Expander(options, file=filename).expand_module(tree)


__all__ = ["Expander", "expand_source", "expander"]
