# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
metaquote: quasi-quotation for Python source.

Quotation markers (`expr[...]`, `with stmts as body:`, `case expr("...")`,
`ty[...]`, `funty[...]`, ...) are rewritten into ordinary code that builds or
matches the quoted `ast` nodes. The pass runs on a parsed module
(`Expander.expand_module`), on import (`metaquote.importer.install`) or from
the command line (`python -m metaquote`).
"""

from .core import Diagnostic, ExpansionError, InvalidArrowType, Span
from .expander import Expander, expand_source, expander
from .options import ExpanderOptions

__all__ = [
	"Diagnostic",
	"ExpanderOptions",
	"Expander",
	"ExpansionError",
	"InvalidArrowType",
	"Span",
	"expand_source",
	"expander",
]
