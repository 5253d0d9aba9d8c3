# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Run-time values referenced by expanded code.

Expanded modules import this module as `_mq_rt`. It provides the ambient
default location, the type representation and function-type descriptor
combinators, the printable-function wrapper and the namespace evaluator used
by `code[...]`. A harness may point `ExpanderOptions.runtime_module` at its
own module exposing the same names.
"""

from __future__ import annotations

import ast
import typing
from collections.abc import Callable
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Generic, Iterator, Mapping, Optional, TypeVar, Union

T = TypeVar("T")
F = TypeVar("F")
U = TypeVar("U")
R = TypeVar("R")

_NONE_TYPE = type(None)
EllipsisType = type(Ellipsis)


@dataclass(frozen=True)
class Location:
	"""A source position in the shape Python `ast` nodes carry it."""

	lineno: int = 1
	col_offset: int = 0
	end_lineno: Optional[int] = None
	end_col_offset: Optional[int] = None

	@classmethod
	def of(cls, node: ast.AST) -> "Location":
		return cls(
			lineno=getattr(node, "lineno", 1),
			col_offset=getattr(node, "col_offset", 0),
			end_lineno=getattr(node, "end_lineno", None),
			end_col_offset=getattr(node, "end_col_offset", None),
		)


def loc_attrs(loc: Union[Location, ast.AST]) -> dict[str, Optional[int]]:
	"""Keyword arguments stamping `loc` onto a freshly built `ast` node."""
	if isinstance(loc, ast.AST):
		loc = Location.of(loc)
	if not isinstance(loc, Location):
		raise TypeError(f"expected a Location or an ast node, got {type(loc).__name__}")
	end_lineno = loc.end_lineno if loc.end_lineno is not None else loc.lineno
	end_col_offset = loc.end_col_offset if loc.end_col_offset is not None else loc.col_offset
	return {
		"lineno": loc.lineno,
		"col_offset": loc.col_offset,
		"end_lineno": end_lineno,
		"end_col_offset": end_col_offset,
	}


class DefaultLocation:
	"""Mutable holder for the location stamped when no `metaloc` is in force."""

	def __init__(self, loc: Optional[Location] = None) -> None:
		self._loc = loc or Location()

	def get(self) -> Location:
		return self._loc

	def set(self, loc: Union[Location, ast.AST]) -> None:
		if isinstance(loc, ast.AST):
			loc = Location.of(loc)
		self._loc = loc

	@contextmanager
	def using(self, loc: Union[Location, ast.AST]) -> Iterator[Location]:
		"""Temporarily replace the default location (restored on exit)."""
		saved = self._loc
		self.set(loc)
		try:
			yield self._loc
		finally:
			self._loc = saved


default_loc = DefaultLocation()


def _same_type(left: Any, right: Any) -> bool:
	if left is None:
		left = _NONE_TYPE
	if right is None:
		right = _NONE_TYPE
	return left == right


@dataclass(frozen=True)
class Ty(Generic[T]):
	"""Run-time representation of a type: its syntax plus its evaluated value."""

	node: ast.expr
	value: Any

	@classmethod
	def repr(cls, node: ast.expr, value: Any) -> "Ty[Any]":
		if not isinstance(node, ast.expr):
			raise TypeError(f"type representation needs an ast.expr, got {type(node).__name__}")
		return cls(node=node, value=value)

	def __str__(self) -> str:
		return ast.unparse(self.node)


@dataclass(frozen=True)
class LastTy:
	"""Final arrow layer: the last argument and the return type."""

	arg: Ty[Any]
	ret: Ty[Any]


@dataclass(frozen=True)
class ArgTy:
	"""Non-final arrow layer: one argument followed by the rest of the spine."""

	arg: Ty[Any]
	rest: Union["ArgTy", LastTy]


Spine = Union[ArgTy, LastTy]


def arg_ty(arg: Ty[Any], rest: Spine) -> ArgTy:
	if not isinstance(rest, (ArgTy, LastTy)):
		raise TypeError(f"arg_ty expects a descriptor as its rest, got {type(rest).__name__}")
	return ArgTy(arg=arg, rest=rest)


def last_ty(arg: Ty[Any], ret: Ty[Any]) -> LastTy:
	return LastTy(arg=arg, ret=ret)


def _spine_layers(spine: Spine) -> tuple[list[Ty[Any]], Ty[Any]]:
	args: list[Ty[Any]] = []
	layer: Spine = spine
	while isinstance(layer, ArgTy):
		args.append(layer.arg)
		layer = layer.rest
	args.append(layer.arg)
	return args, layer.ret


@dataclass(frozen=True)
class FunTy(Generic[F, U, R]):
	"""
	A function-type descriptor correlated with the arrow type it was built from.

	`full` is the original function type, `uncurried` the same parameters
	returning None and `ret` the return type. Construction through `fun_ty`
	checks the spine against all three.
	"""

	spine: Spine
	full: Any
	uncurried: Any
	ret: Any

	@property
	def arg_types(self) -> list[Ty[Any]]:
		return _spine_layers(self.spine)[0]

	@property
	def ret_type(self) -> Ty[Any]:
		return _spine_layers(self.spine)[1]

	@property
	def arity(self) -> int:
		return len(self.arg_types)

	def apply(self, fn: Callable[..., Any], args: Any) -> Any:
		"""Call `fn` with one argument per arrow layer."""
		args = tuple(args)
		if len(args) != self.arity:
			raise TypeError(f"{self} takes {self.arity} argument(s), got {len(args)}")
		return fn(*args)

	def __str__(self) -> str:
		params = ", ".join(str(ty) for ty in self.arg_types)
		return f"Callable[[{params}], {self.ret_type}]"


def _callable_parts(tp: Any) -> tuple[list[Any], Any]:
	parts = typing.get_args(tp)
	if len(parts) != 2 or not isinstance(parts[0], list):
		raise TypeError(f"{tp!r} is not a function type with a parameter list")
	return parts[0], parts[1]


def fun_ty(spine: Spine, *, full: Any, uncurried: Any, ret: Any) -> FunTy[Any, Any, Any]:
	"""Build a FunTy, checking the spine against the types it claims to describe."""
	args, ret_ty = _spine_layers(spine)
	full_params, full_ret = _callable_parts(full)
	unit_params, unit_ret = _callable_parts(uncurried)
	arg_values = [ty.value for ty in args]
	if len(full_params) != len(arg_values) or not all(
		_same_type(a, b) for a, b in zip(full_params, arg_values)
	):
		raise TypeError(f"descriptor arguments {arg_values!r} do not match {full!r}")
	if len(unit_params) != len(arg_values) or not all(
		_same_type(a, b) for a, b in zip(unit_params, arg_values)
	):
		raise TypeError(f"descriptor arguments {arg_values!r} do not match {uncurried!r}")
	if not _same_type(unit_ret, None):
		raise TypeError(f"{uncurried!r} must return None")
	if not (_same_type(full_ret, ret) and _same_type(ret_ty.value, ret)):
		raise TypeError(f"descriptor return type {ret_ty.value!r} does not match {full!r}")
	return FunTy(spine=spine, full=full, uncurried=uncurried, ret=ret)


class PrintableFun(Generic[T]):
	"""A value paired with the source text it was written as."""

	def __init__(self, text: str, fn: T) -> None:
		self.text = text
		self.fn = fn

	def __call__(self, *args: Any, **kwargs: Any) -> Any:
		return self.fn(*args, **kwargs)  # type: ignore[operator]

	def __str__(self) -> str:
		return self.text

	def __repr__(self) -> str:
		return f"PrintableFun({self.text!r})"


def printable_fun(text: str, fn: T) -> PrintableFun[T]:
	return PrintableFun(text, fn)


def _namespace_dict(namespace: Any) -> Mapping[str, Any]:
	if isinstance(namespace, Mapping):
		return namespace
	return vars(namespace)


def eval_under(namespace: Any, tree: ast.expr, globals_: dict[str, Any], locals_: Mapping[str, Any]) -> Any:
	"""
	Evaluate `tree` with `namespace` opened over the caller's scope.

	Names defined by the namespace (a module, class or mapping) shadow the
	caller's locals and globals, like a local module open. All three layers
	go into one globals dict so that lambdas and comprehensions inside `tree`
	see them too.
	"""
	expression = ast.fix_missing_locations(ast.Expression(body=tree))
	code = compile(expression, "<code>", "eval")
	scope = {**globals_, **locals_, **_namespace_dict(namespace)}
	return eval(code, scope)


__all__ = [
	"ArgTy",
	"Callable",
	"DefaultLocation",
	"EllipsisType",
	"FunTy",
	"LastTy",
	"Location",
	"PrintableFun",
	"Ty",
	"arg_ty",
	"default_loc",
	"eval_under",
	"fun_ty",
	"last_ty",
	"loc_attrs",
	"printable_fun",
]
