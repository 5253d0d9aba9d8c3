# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ExpanderOptions:
	"""
	Names the expanded code refers to.

	`reference_namespace` / `submission_namespace` are the expressions `code[...]`
	opens (the harness's reference solution and the submitted code).
	`runtime_module` supplies `Ty`, `arg_ty`, `last_ty`, `fun_ty`,
	`default_loc` and friends; it is imported as `runtime_alias`.
	"""

	reference_namespace: str = "Solution"
	submission_namespace: str = "Code"
	runtime_module: str = "metaquote.runtime"
	runtime_alias: str = "_mq_rt"
	ast_alias: str = "_mq_ast"

	@property
	def aliases(self) -> dict[str, str]:
		"""Module path -> alias used to qualify lifted node classes."""
		return {"ast": self.ast_alias}


__all__ = ["ExpanderOptions"]
