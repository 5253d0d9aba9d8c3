# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Source spans attached to fragments and diagnostics.

A Span wraps whatever location object the front-end provides (a Python `ast`
node or a lark token) while also carrying file/line/column info when known.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	"""Represents a source span (best-effort file/line/column plus raw parser loc)."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None
	end_line: Optional[int] = None
	end_column: Optional[int] = None
	raw: Any = None

	@classmethod
	def from_loc(cls, loc: Any, file: Optional[str] = None) -> "Span":
		"""
		Construct a Span from an `ast` node, a lark token/meta, or another Span.

		Python `ast` nodes use `lineno`/`col_offset`, lark uses `line`/`column`;
		both are accepted. The raw object is kept for richer renderers.
		"""
		if loc is None:
			return cls(file=file)
		if isinstance(loc, cls):
			return loc
		line = getattr(loc, "lineno", None)
		if line is None:
			line = getattr(loc, "line", None)
		column = getattr(loc, "col_offset", None)
		if column is None:
			column = getattr(loc, "column", None)
		end_line = getattr(loc, "end_lineno", None)
		if end_line is None:
			end_line = getattr(loc, "end_line", None)
		end_column = getattr(loc, "end_col_offset", None)
		if end_column is None:
			end_column = getattr(loc, "end_column", None)
		return cls(
			file=file,
			line=line,
			column=column,
			end_line=end_line,
			end_column=end_column,
			raw=loc,
		)

	def describe(self) -> str:
		file = self.file or "<unknown>"
		line = self.line if self.line is not None else "?"
		column = self.column if self.column is not None else "?"
		return f"{file}:{line}:{column}"


__all__ = ["Span"]
