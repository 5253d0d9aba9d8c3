# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Closed node representation of a fragment.

`reflect` walks a Python `ast` fragment and produces the variant below. It is
where escapes are recognised: an escape is only an escape in a slot of its
own sub-grammar (`e[...]` where an expression goes, `t[...]` where a type
goes, `p(...)` where a pattern goes, `s[...]` as an item of a statement
list). Anywhere else the same spelling is lifted as ordinary syntax.
"""

from __future__ import annotations

import ast
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from . import markers
from .core.diagnostics import ExpansionError
from .core.span import Span
from .fragment import Fragment, FragmentKind


class LeafKind(Enum):
	INT = "int"
	FLOAT = "float"
	COMPLEX = "complex"
	STR = "str"
	BYTES = "bytes"
	BOOL = "bool"
	NONE = "none"
	ELLIPSIS = "ellipsis"


class EscapeTag(Enum):
	EXPR = "e"
	PATTERN = "p"
	TYPE = "t"
	SEQUENCE = "s"


@dataclass(frozen=True)
class Record:
	"""An `ast` node with fields; `located` nodes carry a source position."""

	type_path: str
	fields: tuple[tuple[str, "Node"], ...]
	located: bool


@dataclass(frozen=True)
class Constructor:
	"""A field-less `ast` node such as `Load()` or `Add()`."""

	type_path: str
	tag: str
	args: tuple["Node", ...] = ()


@dataclass(frozen=True)
class ListNode:
	elems: tuple["Node", ...]


@dataclass(frozen=True)
class TupleNode:
	elems: tuple["Node", ...]


@dataclass(frozen=True)
class Leaf:
	kind: LeafKind
	value: Any


@dataclass(frozen=True)
class Escape:
	"""A placeholder whose payload is spliced instead of lifted."""

	tag: EscapeTag
	payload: Fragment
	span: Span


Node = Union[Record, Constructor, ListNode, TupleNode, Leaf, Escape]


class Slot(Enum):
	EXPR = "expr"
	TYPE = "type"
	PAT = "pattern"
	STMT = "stmt"
	ITEM = "item"
	OTHER = "other"


# Fields holding annotations: expressions there are types.
ANNOTATION_FIELDS = frozenset(
	{
		("arg", "annotation"),
		("FunctionDef", "returns"),
		("AsyncFunctionDef", "returns"),
		("AnnAssign", "annotation"),
	}
)


def _leaf(value: Any) -> Optional[Leaf]:
	if isinstance(value, bool):
		return Leaf(LeafKind.BOOL, value)
	if isinstance(value, int):
		return Leaf(LeafKind.INT, value)
	if isinstance(value, float):
		return Leaf(LeafKind.FLOAT, value)
	if isinstance(value, complex):
		return Leaf(LeafKind.COMPLEX, value)
	if isinstance(value, str):
		return Leaf(LeafKind.STR, value)
	if isinstance(value, bytes):
		return Leaf(LeafKind.BYTES, value)
	if value is None:
		return Leaf(LeafKind.NONE, None)
	if value is Ellipsis:
		return Leaf(LeafKind.ELLIPSIS, Ellipsis)
	return None


def type_path(node: ast.AST) -> str:
	"""Module-qualified name of the node's declared (abstract) type."""
	cls = type(node)
	declared = cls.__mro__[1] if cls.__mro__[1] is not ast.AST else cls
	return f"{cls.__module__}.{declared.__name__}"


def is_located(node: ast.AST) -> bool:
	return "lineno" in type(node)._attributes


class Reflector:
	"""Converts one fragment into the closed Node variant."""

	def __init__(self, file: Optional[str] = None) -> None:
		self.file = file

	def fragment(self, fragment: Fragment) -> Node:
		kind = fragment.kind
		if kind.is_sequence:
			return ListNode(tuple(self.value(stmt, Slot.STMT) for stmt in fragment.node))
		if kind in (FragmentKind.STMT, FragmentKind.SIGI):
			(item,) = fragment.node
			return self.value(item, Slot.ITEM)
		if kind is FragmentKind.TYPE:
			return self.value(fragment.node, Slot.TYPE)
		if kind is FragmentKind.PAT:
			return self.value(fragment.node, Slot.PAT)
		return self.value(fragment.node, Slot.EXPR)

	def value(self, value: Any, slot: Slot) -> Node:
		if isinstance(value, ast.AST):
			escape = self._escape(value, slot)
			if escape is not None:
				return escape
			return self._ast(value, slot)
		if isinstance(value, list):
			return ListNode(tuple(self.value(elem, self._element_slot(elem, slot)) for elem in value))
		if isinstance(value, tuple):
			return TupleNode(tuple(self.value(elem, self._element_slot(elem, slot)) for elem in value))
		leaf = _leaf(value)
		if leaf is None:
			raise ExpansionError.at(f"Cannot lift a value of type {type(value).__name__}.")
		return leaf

	def _span(self, node: ast.AST) -> Span:
		return Span.from_loc(node, self.file)

	def _escape(self, node: ast.AST, slot: Slot) -> Optional[Escape]:
		if slot is Slot.EXPR and markers.is_escape(node, markers.ESCAPE_EXPR):
			payload = markers.escape_payload(node, FragmentKind.EXPR, self.file)
			return Escape(EscapeTag.EXPR, Fragment(FragmentKind.EXPR, payload, self._span(node)), self._span(node))
		if slot is Slot.TYPE and markers.is_escape(node, markers.ESCAPE_TYPE):
			payload = markers.escape_payload(node, FragmentKind.TYPE, self.file)
			return Escape(EscapeTag.TYPE, Fragment(FragmentKind.TYPE, payload, self._span(node)), self._span(node))
		if slot is Slot.PAT and markers.is_pattern_escape(node):
			if len(node.patterns) != 1 or node.kwd_patterns:
				raise ExpansionError.at(
					FragmentKind.PAT.expected,
					self._span(node),
					notes=["a pattern escape takes exactly one pattern"],
				)
			payload = node.patterns[0]
			return Escape(EscapeTag.PATTERN, Fragment(FragmentKind.PAT, payload, self._span(node)), self._span(node))
		if slot in (Slot.STMT, Slot.ITEM) and markers.is_splice(node):
			if slot is Slot.ITEM:
				raise ExpansionError.at(
					"A sequence splice cannot stand for exactly one item.",
					self._span(node),
				)
			payload = markers.escape_payload(node.value, FragmentKind.EXPR, self.file)
			return Escape(EscapeTag.SEQUENCE, Fragment(FragmentKind.EXPR, payload, self._span(node)), self._span(node))
		return None

	def _element_slot(self, elem: Any, slot: Slot) -> Slot:
		if isinstance(elem, ast.stmt):
			return Slot.STMT
		return self._slot_for(elem, slot)

	def _slot_for(self, value: Any, parent_slot: Slot, owner: Optional[ast.AST] = None, field: str = "") -> Slot:
		if isinstance(value, ast.pattern):
			return Slot.PAT
		if isinstance(value, ast.expr):
			if parent_slot is Slot.TYPE:
				return Slot.TYPE
			if owner is not None and (type(owner).__name__, field) in ANNOTATION_FIELDS:
				return Slot.TYPE
			return Slot.EXPR
		if parent_slot is Slot.TYPE and not isinstance(value, ast.AST):
			return Slot.TYPE
		return Slot.OTHER

	def _ast(self, node: ast.AST, slot: Slot) -> Node:
		cls = type(node)
		if not cls._fields:
			return Constructor(type_path=type_path(node), tag=cls.__name__)
		fields: list[tuple[str, Node]] = []
		for name in cls._fields:
			child = getattr(node, name, None)
			if isinstance(child, list):
				if child and isinstance(child[0], ast.stmt):
					fields.append((name, ListNode(tuple(self.value(stmt, Slot.STMT) for stmt in child))))
					continue
				child_slot = self._list_slot(node, name, child, slot)
				fields.append((name, ListNode(tuple(self.value(elem, child_slot) for elem in child))))
				continue
			fields.append((name, self.value(child, self._slot_for(child, slot, node, name))))
		return Record(type_path=f"{cls.__module__}.{cls.__name__}", fields=tuple(fields), located=is_located(node))

	def _list_slot(self, owner: ast.AST, field: str, items: list, slot: Slot) -> Slot:
		for item in items:
			if isinstance(item, ast.AST):
				return self._slot_for(item, slot, owner, field)
		return Slot.OTHER


def reflect(fragment: Fragment, file: Optional[str] = None) -> Node:
	"""Convert `fragment` into the closed Node variant, recognising escapes."""
	return Reflector(file).fragment(fragment)


__all__ = [
	"Constructor",
	"Escape",
	"EscapeTag",
	"Leaf",
	"LeafKind",
	"ListNode",
	"Node",
	"Record",
	"Reflector",
	"Slot",
	"TupleNode",
	"reflect",
	"type_path",
]
