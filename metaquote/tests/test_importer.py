# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import ast
import importlib
import sys

import pytest

from metaquote.core.diagnostics import InvalidArrowType
from metaquote.importer import MetaquoteFinder, MetaquoteLoader, install, uninstall, wants_expansion


@pytest.fixture
def hook():
	finder = install()
	try:
		yield finder
	finally:
		uninstall()


def _import_fresh(name: str):
	sys.modules.pop(name, None)
	try:
		return importlib.import_module(name)
	finally:
		sys.modules.pop(name, None)


def test_opt_in_comment_is_found_in_the_header() -> None:
	assert wants_expansion("#!/usr/bin/env python\n# metaquote: on\nx = 1\n")
	assert wants_expansion("# -*- coding: utf-8 -*- metaquote: on\n")
	assert not wants_expansion("x = 1\n")
	assert not wants_expansion("\n" * 10 + "# metaquote: on\n")


def test_opted_in_module_is_expanded_on_import(hook, tmp_path, monkeypatch) -> None:
	(tmp_path / "mq_hooked.py").write_text("# metaquote: on\ntree = expr[1 + 2]\n")
	monkeypatch.syspath_prepend(str(tmp_path))
	module = _import_fresh("mq_hooked")
	assert isinstance(module.tree, ast.BinOp)
	assert isinstance(module.__loader__, MetaquoteLoader)


def test_other_modules_load_normally(hook, tmp_path, monkeypatch) -> None:
	(tmp_path / "mq_plain.py").write_text("expr = {1: 'one'}\nvalue = expr[1]\n")
	monkeypatch.syspath_prepend(str(tmp_path))
	module = _import_fresh("mq_plain")
	assert module.value == "one"
	assert not isinstance(module.__loader__, MetaquoteLoader)


def test_expansion_error_surfaces_on_import(hook, tmp_path, monkeypatch) -> None:
	(tmp_path / "mq_broken.py").write_text("# metaquote: on\nf = funty[int]\n")
	monkeypatch.syspath_prepend(str(tmp_path))
	with pytest.raises(InvalidArrowType):
		_import_fresh("mq_broken")


def test_install_is_idempotent() -> None:
	try:
		first = install()
		second = install()
		assert first is second
		assert sum(isinstance(finder, MetaquoteFinder) for finder in sys.meta_path) == 1
	finally:
		uninstall()
	assert not any(isinstance(finder, MetaquoteFinder) for finder in sys.meta_path)
