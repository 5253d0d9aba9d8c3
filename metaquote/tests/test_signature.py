# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import ast
import collections.abc
from typing import Callable

import pytest

from metaquote.core.diagnostics import ExpansionError, InvalidArrowType
from metaquote.expander import expand_source
from metaquote.runtime import ArgTy, FunTy, LastTy, Ty, fun_ty, last_ty


def test_reified_signature_has_one_layer_per_argument(run, expand) -> None:
	source = """
		from typing import Callable
		f = funty[Callable[[int, str, bool], None]]
		"""
	fty = run(source)["f"]
	assert isinstance(fty, FunTy)
	assert isinstance(fty.spine, ArgTy)
	assert isinstance(fty.spine.rest, ArgTy)
	assert isinstance(fty.spine.rest.rest, LastTy)
	assert fty.arity == 3
	assert [ty.value for ty in fty.arg_types] == [int, str, bool]
	assert fty.ret_type.value is None
	assert "Callable[[int, str, bool], None]" in expand(source)


def test_reified_signature_correlates_types(run) -> None:
	fty = run(
		"""
		from typing import Callable
		f = funty[Callable[[int, list[str]], dict[str, int]]]
		"""
	)["f"]
	assert fty.full == Callable[[int, list[str]], dict[str, int]]
	assert fty.uncurried == Callable[[int, list[str]], None]
	assert fty.ret == dict[str, int]
	assert str(fty) == "Callable[[int, list[str]], dict[str, int]]"


def test_arrow_string_signature(run) -> None:
	fty = run('f = funty["int -> str -> bool -> None"]')["f"]
	assert fty.arity == 3
	assert isinstance(fty.spine.rest.rest, LastTy)
	assert [str(ty) for ty in fty.arg_types] == ["int", "str", "bool"]


def test_parenthesised_arrow_is_one_argument(run) -> None:
	fty = run('f = funty["(int -> int) -> int -> int"]')["f"]
	assert fty.arity == 2
	first = fty.arg_types[0]
	assert isinstance(first.node, ast.Subscript)
	assert first.value == collections.abc.Callable[[int], int]


def test_apply_calls_with_one_argument_per_layer(run) -> None:
	fty = run('f = funty["int -> int -> int"]')["f"]
	assert fty.apply(lambda a, b: a * 10 + b, [4, 2]) == 42
	with pytest.raises(TypeError, match="takes 2 argument"):
		fty.apply(lambda a, b: a, [1])


@pytest.mark.parametrize(
	"written",
	["int", "Callable[..., int]", "Callable[[], int]", '"int"', "list[int]"],
)
def test_non_arrow_type_is_rejected(written: str) -> None:
	with pytest.raises(InvalidArrowType, match="arrow type expected"):
		expand_source(f"from typing import Callable\nf = funty[{written}]\n")


def test_invalid_arrow_type_is_a_value_error() -> None:
	with pytest.raises(ValueError):
		expand_source("f = funty[int]")


def test_rejection_carries_marker_location() -> None:
	with pytest.raises(InvalidArrowType) as excinfo:
		expand_source("x = 1\nf = funty[int]\n", filename="case.py")
	span = excinfo.value.diagnostic.span
	assert (span.file, span.line, span.column) == ("case.py", 2, 4)


def test_malformed_arrow_string_is_a_type_error_diagnostic() -> None:
	with pytest.raises(ExpansionError, match="Type expected."):
		expand_source('f = funty["int -> -> int"]')


def test_type_escape_is_not_allowed_in_a_reified_type() -> None:
	with pytest.raises(ExpansionError, match="Type expected."):
		expand_source("f = funty[Callable[[t[x]], int]]")


def test_runtime_check_rejects_mismatched_descriptor() -> None:
	spine = last_ty(Ty.repr(ast.Name(id="int", ctx=ast.Load()), int), Ty.repr(ast.Name(id="str", ctx=ast.Load()), str))
	with pytest.raises(TypeError, match="return type"):
		fun_ty(spine, full=Callable[[int], int], uncurried=Callable[[int], None], ret=int)
	with pytest.raises(TypeError, match="must return None"):
		fun_ty(spine, full=Callable[[int], str], uncurried=Callable[[int], int], ret=str)
	assert fun_ty(spine, full=Callable[[int], str], uncurried=Callable[[int], None], ret=str).arity == 1


def test_ty_macro_pairs_syntax_and_value(run) -> None:
	env = run("t_list = ty[list[int]]\nt_fn = ty['int -> bool']")
	assert env["t_list"].value == list[int]
	assert str(env["t_list"]) == "list[int]"
	assert env["t_fn"].value == collections.abc.Callable[[int], bool]
	assert str(env["t_fn"]) == "_mq_rt.Callable[[int], bool]"
