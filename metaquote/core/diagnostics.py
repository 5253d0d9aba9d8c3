# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Diagnostics and the expansion error that carries them.

Every failure of the expansion pass is fatal to the compilation unit: the
pass stops at the first diagnostic and produces no output. `ExpansionError`
is the catchable form; drivers turn it into exit status 2.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .span import Span

EXIT_EXPANSION_FAILED = 2


@dataclass
class Diagnostic:
	"""Represents a diagnostic produced while expanding quotations."""

	message: str
	code: str | None = None
	phase: str | None = "expand"
	severity: str = "error"
	span: Span = field(default_factory=Span)  # Span() denotes unknown.
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()

	def format_human(self) -> str:
		lines = [f"{self.span.describe()}: {self.severity}: {self.message}"]
		lines.extend(f"  note: {note}" for note in self.notes)
		return "\n".join(lines)

	def to_dict(self, fallback_file: str | None = None) -> dict[str, Any]:
		return {
			"phase": self.phase,
			"code": self.code,
			"message": self.message,
			"severity": self.severity,
			"file": self.span.file or fallback_file,
			"line": self.span.line,
			"column": self.span.column,
			"notes": list(self.notes),
		}


class ExpansionError(Exception):
	"""Raised when a quotation cannot be expanded; carries one diagnostic."""

	def __init__(self, diagnostic: Diagnostic) -> None:
		super().__init__(diagnostic.message)
		self.diagnostic = diagnostic

	@classmethod
	def at(cls, message: str, span: Span | None = None, *, code: str | None = None, notes: list[str] | None = None):
		return cls(Diagnostic(message=message, code=code, span=span or Span(), notes=list(notes or [])))

	def __str__(self) -> str:
		return self.diagnostic.format_human()


class InvalidArrowType(ExpansionError, ValueError):
	"""A function-signature reification was requested on a non-arrow type."""


__all__ = ["Diagnostic", "ExpansionError", "InvalidArrowType", "EXIT_EXPANSION_FAILED"]
