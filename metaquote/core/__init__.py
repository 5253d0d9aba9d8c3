# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Shared plumbing for the expansion pass: spans and diagnostics.
"""

from .diagnostics import Diagnostic, EXIT_EXPANSION_FAILED, ExpansionError, InvalidArrowType
from .span import Span

__all__ = ["Diagnostic", "EXIT_EXPANSION_FAILED", "ExpansionError", "InvalidArrowType", "Span"]
