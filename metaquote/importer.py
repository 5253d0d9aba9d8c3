# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Import hook: expand quotation markers while importing a module.

A module opts in with a comment among its first lines:

	# metaquote: on

After `install()`, importing such a module parses it, runs the expander and
compiles the result. Modules without the comment load through the regular
machinery. Expanded modules bypass the bytecode cache, so a stale cache
written without the hook is never picked up.
"""

from __future__ import annotations

import ast
import importlib.abc
import importlib.util
import logging
import re
import sys
import tokenize
from importlib.machinery import PathFinder, SourceFileLoader
from typing import Optional

from .expander import Expander
from .options import ExpanderOptions

logger = logging.getLogger(__name__)

HEADER_LINES = 5
_MAGIC = re.compile(r"^#.*\bmetaquote:\s*on\b")


def wants_expansion(source: str) -> bool:
	"""True if one of the first lines of `source` carries the opt-in comment."""
	for line in source.splitlines()[:HEADER_LINES]:
		if _MAGIC.match(line.strip()):
			return True
	return False


def _file_wants_expansion(path: str) -> bool:
	try:
		with tokenize.open(path) as handle:
			head = "".join(handle.readline() for _ in range(HEADER_LINES))
	except (OSError, SyntaxError):
		return False
	return wants_expansion(head)


class MetaquoteLoader(SourceFileLoader):
	"""Source loader that expands the module before compiling it."""

	def __init__(self, fullname: str, path: str, options: Optional[ExpanderOptions] = None) -> None:
		super().__init__(fullname, path)
		self.options = options

	def get_code(self, fullname):
		source_path = self.get_filename(fullname)
		return self.source_to_code(self.get_data(source_path), source_path)

	def source_to_code(self, data, path, *, _optimize=-1):
		source = importlib.util.decode_source(data)
		tree = ast.parse(source, filename=path)
		expanded = Expander(self.options, file=path).expand_module(tree)
		logger.debug("expanded %s on import", path)
		return compile(expanded, path, "exec", dont_inherit=True, optimize=_optimize)


class MetaquoteFinder(importlib.abc.MetaPathFinder):
	"""Routes opted-in source modules to `MetaquoteLoader`."""

	def __init__(self, options: Optional[ExpanderOptions] = None) -> None:
		self.options = options

	def find_spec(self, fullname, path=None, target=None):
		spec = PathFinder.find_spec(fullname, path)
		if spec is None or spec.origin is None or not isinstance(spec.loader, SourceFileLoader):
			return None
		if not _file_wants_expansion(spec.origin):
			return None
		spec.loader = MetaquoteLoader(fullname, spec.origin, self.options)
		return spec


def install(options: Optional[ExpanderOptions] = None) -> MetaquoteFinder:
	"""Put a finder at the front of `sys.meta_path` (once) and return it."""
	for finder in sys.meta_path:
		if isinstance(finder, MetaquoteFinder):
			return finder
	finder = MetaquoteFinder(options)
	sys.meta_path.insert(0, finder)
	return finder


def uninstall() -> None:
	sys.meta_path[:] = [finder for finder in sys.meta_path if not isinstance(finder, MetaquoteFinder)]


__all__ = ["MetaquoteFinder", "MetaquoteLoader", "install", "uninstall", "wants_expansion"]
