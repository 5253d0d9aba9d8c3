# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
The location stamped on nodes built by expression-mode quotations.

The context is an immutable value threaded through the traversal. A
`metaloc[...]` statement yields a new context for the rest of its body; a
nested scope starts from its parent's context and hands nothing back, so an
override never leaks into a sibling or parent scope.
"""

from __future__ import annotations

import ast
import copy
from dataclasses import dataclass

from .codegen import call, dotted


@dataclass(frozen=True)
class LocationContext:
	location: ast.expr

	@classmethod
	def ambient(cls, runtime_alias: str) -> "LocationContext":
		"""Read of the run-time default location holder."""
		return cls(location=call(dotted(f"{runtime_alias}.default_loc.get")))

	def override(self, location: ast.expr) -> "LocationContext":
		return LocationContext(location=location)

	def expression(self) -> ast.expr:
		"""A fresh copy of the location expression for one stamp."""
		return copy.deepcopy(self.location)


__all__ = ["LocationContext"]
