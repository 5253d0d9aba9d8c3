# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
import ast
import textwrap

import pytest

from metaquote.expander import expand_source


def _expand(source: str) -> ast.Module:
	return expand_source(textwrap.dedent(source), filename="<quoted>")


@pytest.fixture
def expand():
	"""Expanded source text of a snippet."""
	return lambda source: ast.unparse(_expand(source))


@pytest.fixture
def run():
	"""
	Expand a snippet, execute it and return its globals.

	Keyword arguments are pre-bound in the snippet's namespace.
	"""

	def _run(source: str, **env):
		exec(compile(_expand(source), "<quoted>", "exec"), env)
		return env

	return _run
