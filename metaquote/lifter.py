# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lifting: turn a reflected fragment into code that rebuilds or matches it.

`lift` is one structural recursion over the Node variant. What each node
becomes is decided by a `Builder`, a record of pure functions; there are two
of them, `EXPR_BUILDER` (code constructing an equal `ast` value) and
`PAT_BUILDER` (a `case` pattern matching such a value).

In pattern mode the source position (`LOCATION_FIELDS`) and the metadata
fields in `PATTERN_WILDCARD_FIELDS` are left out of the class pattern: they
describe where and how a node was written, not what it is. An attribute the
pattern does not name matches anything, including a node that lacks it.
"""

from __future__ import annotations

import ast
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Sequence

from .codegen import call, dotted
from .core.diagnostics import ExpansionError
from .core.span import Span
from .fragment import FragmentKind
from .location import LocationContext
from .node import Constructor, Escape, EscapeTag, Leaf, LeafKind, ListNode, Node, Record, TupleNode
from .syntax import expr_to_pattern, pattern_to_expr

LOCATION_FIELDS = ("lineno", "col_offset", "end_lineno", "end_col_offset")
PATTERN_WILDCARD_FIELDS = frozenset({"ctx", "kind", "type_comment"})


@dataclass(frozen=True)
class LiftContext:
	"""Everything a builder needs besides the node itself."""

	location: LocationContext
	runtime_alias: str
	aliases: Mapping[str, str] = field(default_factory=dict)
	resolve_expr: Callable[[ast.expr], ast.expr] = lambda node: node
	resolve_pattern: Callable[[ast.pattern], ast.pattern] = lambda node: node
	file: Optional[str] = None


def qualify(ctx: LiftContext, type_path: str, name: str) -> ast.expr:
	"""Address `name` through the alias of the module declaring `type_path`."""
	module = type_path.rpartition(".")[0]
	alias = ctx.aliases.get(module, module)
	return dotted(f"{alias}.{name}" if alias else name)


@dataclass(frozen=True)
class Builder:
	mode: str
	on_record: Callable[[LiftContext, str, list[tuple[str, Any]], bool], Any]
	on_constructor: Callable[[LiftContext, str, str, list[Any]], Any]
	on_list: Callable[[LiftContext, list[Any]], Any]
	on_tuple: Callable[[LiftContext, list[Any]], Any]
	on_leaf: Callable[[LiftContext, LeafKind, Any], Any]
	on_escape: Callable[[LiftContext, Escape], Any]
	on_splice: Callable[[LiftContext, Escape], Any]
	max_splices: Optional[int] = None


# Expression mode


def _exp_record(ctx: LiftContext, type_path: str, fields: list[tuple[str, Any]], located: bool) -> ast.expr:
	keywords: list[tuple[Optional[str], ast.expr]] = list(fields)
	if located:
		stamp = call(f"{ctx.runtime_alias}.loc_attrs", [ctx.location.expression()])
		keywords.append((None, stamp))
	return call(qualify(ctx, type_path, type_path.rpartition(".")[2]), keywords=keywords)


def _exp_constructor(ctx: LiftContext, type_path: str, tag: str, args: list[ast.expr]) -> ast.expr:
	return call(qualify(ctx, type_path, tag), args)


def _exp_list(ctx: LiftContext, items: list[ast.expr]) -> ast.expr:
	return ast.List(elts=items, ctx=ast.Load())


def _exp_tuple(ctx: LiftContext, items: list[ast.expr]) -> ast.expr:
	return ast.Tuple(elts=items, ctx=ast.Load())


def _exp_leaf(ctx: LiftContext, kind: LeafKind, value: Any) -> ast.expr:
	return ast.Constant(value=value)


def _exp_escape(ctx: LiftContext, escape: Escape) -> ast.expr:
	payload = escape.payload
	if payload.kind is FragmentKind.PAT:
		return ctx.resolve_expr(pattern_to_expr(payload.node, ctx.file))
	return ctx.resolve_expr(payload.node)


def _exp_splice(ctx: LiftContext, escape: Escape) -> ast.expr:
	return ast.Starred(value=ctx.resolve_expr(escape.payload.node), ctx=ast.Load())


EXPR_BUILDER = Builder(
	mode="expr",
	on_record=_exp_record,
	on_constructor=_exp_constructor,
	on_list=_exp_list,
	on_tuple=_exp_tuple,
	on_leaf=_exp_leaf,
	on_escape=_exp_escape,
	on_splice=_exp_splice,
)


# Pattern mode


def _pat_record(ctx: LiftContext, type_path: str, fields: list[tuple[str, Any]], located: bool) -> ast.pattern:
	# Location and metadata attributes stay unnamed.
	kept = [(label, pattern) for label, pattern in fields if label not in PATTERN_WILDCARD_FIELDS]
	names = [label for label, _ in kept]
	patterns = [pattern for _, pattern in kept]
	return ast.MatchClass(
		cls=qualify(ctx, type_path, type_path.rpartition(".")[2]),
		patterns=[],
		kwd_attrs=names,
		kwd_patterns=patterns,
	)


def _pat_constructor(ctx: LiftContext, type_path: str, tag: str, args: list[ast.pattern]) -> ast.pattern:
	return ast.MatchClass(cls=qualify(ctx, type_path, tag), patterns=list(args), kwd_attrs=[], kwd_patterns=[])


def _pat_sequence(ctx: LiftContext, items: list[ast.pattern]) -> ast.pattern:
	return ast.MatchSequence(patterns=items)


def _pat_leaf(ctx: LiftContext, kind: LeafKind, value: Any) -> ast.pattern:
	if kind in (LeafKind.BOOL, LeafKind.NONE):
		return ast.MatchSingleton(value=value)
	if kind is LeafKind.ELLIPSIS:
		return ast.MatchClass(
			cls=dotted(f"{ctx.runtime_alias}.EllipsisType"),
			patterns=[],
			kwd_attrs=[],
			kwd_patterns=[],
		)
	return ast.MatchValue(value=ast.Constant(value=value))


def _pat_escape(ctx: LiftContext, escape: Escape) -> ast.pattern:
	payload = escape.payload
	if payload.kind is FragmentKind.PAT:
		return ctx.resolve_pattern(payload.node)
	return ctx.resolve_pattern(expr_to_pattern(payload.node, ctx.file))


def _pat_splice(ctx: LiftContext, escape: Escape) -> ast.pattern:
	target = escape.payload.node
	if not isinstance(target, ast.Name):
		raise ExpansionError.at(
			FragmentKind.PAT.expected,
			escape.span,
			notes=["in a pattern, a sequence splice binds the remaining items to a plain name"],
		)
	return ast.MatchStar(name=None if target.id == "_" else target.id)


PAT_BUILDER = Builder(
	mode="pattern",
	on_record=_pat_record,
	on_constructor=_pat_constructor,
	on_list=_pat_sequence,
	on_tuple=_pat_sequence,
	on_leaf=_pat_leaf,
	on_escape=_pat_escape,
	on_splice=_pat_splice,
	max_splices=1,
)


def _lift_items(elems: Sequence[Node], builder: Builder, ctx: LiftContext) -> list[Any]:
	items: list[Any] = []
	splices = 0
	for elem in elems:
		if isinstance(elem, Escape) and elem.tag is EscapeTag.SEQUENCE:
			splices += 1
			if builder.max_splices is not None and splices > builder.max_splices:
				raise ExpansionError.at(
					FragmentKind.PAT.expected,
					elem.span,
					notes=[f"a {builder.mode} sequence takes at most {builder.max_splices} splice(s)"],
				)
			items.append(builder.on_splice(ctx, elem))
			continue
		items.append(lift(elem, builder, ctx))
	return items


def lift(node: Node, builder: Builder, ctx: LiftContext) -> Any:
	"""Generate code for `node` in `builder`'s mode."""
	if isinstance(node, Escape):
		if node.tag is EscapeTag.SEQUENCE:
			raise ExpansionError.at("A sequence splice is only allowed in a statement list.", node.span)
		return builder.on_escape(ctx, node)
	if isinstance(node, Record):
		fields = [(label, lift(child, builder, ctx)) for label, child in node.fields]
		return builder.on_record(ctx, node.type_path, fields, node.located)
	if isinstance(node, Constructor):
		return builder.on_constructor(ctx, node.type_path, node.tag, [lift(arg, builder, ctx) for arg in node.args])
	if isinstance(node, ListNode):
		return builder.on_list(ctx, _lift_items(node.elems, builder, ctx))
	if isinstance(node, TupleNode):
		return builder.on_tuple(ctx, _lift_items(node.elems, builder, ctx))
	if isinstance(node, Leaf):
		return builder.on_leaf(ctx, node.kind, node.value)
	raise ExpansionError.at(f"Cannot lift {type(node).__name__}.", Span(file=ctx.file))


__all__ = [
	"Builder",
	"EXPR_BUILDER",
	"LOCATION_FIELDS",
	"LiftContext",
	"PAT_BUILDER",
	"PATTERN_WILDCARD_FIELDS",
	"lift",
	"qualify",
]
