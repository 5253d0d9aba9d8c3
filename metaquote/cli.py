# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Standalone driver: expand quotation markers in Python source files.

	python -m metaquote module.py            # expanded source on stdout
	python -m metaquote module.py -o out.py  # expanded source written to out.py
	python -m metaquote a.py b.py --json     # structured diagnostics only

Exit status is 0 on success, 1 when a file cannot be read or parsed and 2
when expansion fails. No output file is written for a failing run.
"""

from __future__ import annotations

import argparse
import ast
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from .core.diagnostics import EXIT_EXPANSION_FAILED, Diagnostic, ExpansionError
from .core.span import Span
from .expander import Expander
from .options import ExpanderOptions

logger = logging.getLogger(__name__)


def _diag_to_json(diag: Diagnostic, source: Path) -> dict:
	"""Render a Diagnostic to a structured JSON-friendly dict."""
	return diag.to_dict(fallback_file=str(source))


def _report(diagnostics: list[tuple[Diagnostic, Path]], exit_code: int, as_json: bool) -> None:
	if as_json:
		print(
			json.dumps(
				{
					"exit_code": exit_code,
					"diagnostics": [_diag_to_json(d, source) for d, source in diagnostics],
				}
			)
		)
		return
	for diag, source in diagnostics:
		if diag.span.file is None:
			diag.span = Span(file=str(source), line=diag.span.line, column=diag.span.column, raw=diag.span.raw)
		print(diag.format_human(), file=sys.stderr)


def _syntax_diagnostic(exc: SyntaxError, source: Path) -> Diagnostic:
	return Diagnostic(
		message=exc.msg or "invalid syntax",
		phase="parser",
		span=Span(file=str(source), line=exc.lineno, column=(exc.offset - 1) if exc.offset else None),
	)


def expand_or_exit(tree: ast.Module, options: Optional[ExpanderOptions] = None, *, file: Optional[str] = None) -> ast.Module:
	"""
	Expand `tree`, terminating the process with status 2 on failure.

	For hosts that treat an expansion failure as the end of the compilation
	rather than a catchable condition.
	"""
	try:
		return Expander(options, file=file).expand_module(tree)
	except ExpansionError as exc:
		print(exc.diagnostic.format_human(), file=sys.stderr)
		sys.exit(EXIT_EXPANSION_FAILED)


def _build_parser() -> argparse.ArgumentParser:
	defaults = ExpanderOptions()
	parser = argparse.ArgumentParser(prog="metaquote", description="Expand quotation markers in Python source")
	parser.add_argument("source", type=Path, nargs="+", help="Path(s) to Python source file(s)")
	parser.add_argument(
		"-o",
		"--output",
		type=Path,
		help="Write the expanded source here (only valid with a single input)",
	)
	parser.add_argument(
		"--json",
		action="store_true",
		help="Emit diagnostics as JSON (phase/message/severity/file/line/column)",
	)
	parser.add_argument(
		"--reference-namespace",
		default=defaults.reference_namespace,
		help=f"Namespace code[...] evaluates the reference under (default: {defaults.reference_namespace})",
	)
	parser.add_argument(
		"--submission-namespace",
		default=defaults.submission_namespace,
		help=f"Namespace code[...] evaluates the submission under (default: {defaults.submission_namespace})",
	)
	parser.add_argument(
		"--runtime-module",
		default=defaults.runtime_module,
		help=f"Module the expanded code imports its run-time support from (default: {defaults.runtime_module})",
	)
	parser.add_argument("-v", "--verbose", action="store_true", help="Log expansion progress to stderr")
	return parser


def main(argv: list[str] | None = None) -> int:
	"""
	Expand every source file; print (or write) the results only if all succeed.

	With --json, prints structured diagnostics and an exit_code; otherwise
	prints human-readable messages to stderr.
	"""
	parser = _build_parser()
	args = parser.parse_args(argv)
	if args.output is not None and len(args.source) != 1:
		parser.error("-o/--output takes exactly one source file")
	if args.verbose:
		logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

	options = ExpanderOptions(
		reference_namespace=args.reference_namespace,
		submission_namespace=args.submission_namespace,
		runtime_module=args.runtime_module,
	)

	parsed: list[tuple[Path, ast.Module]] = []
	for source_path in args.source:
		try:
			text = source_path.read_text(encoding="utf-8")
		except OSError as exc:
			diag = Diagnostic(message=f"cannot read source: {exc.strerror}", phase="io", span=Span(file=str(source_path)))
			_report([(diag, source_path)], 1, args.json)
			return 1
		try:
			parsed.append((source_path, ast.parse(text, filename=str(source_path))))
		except SyntaxError as exc:
			_report([(_syntax_diagnostic(exc, source_path), source_path)], 1, args.json)
			return 1

	outputs: list[tuple[Path, str]] = []
	for source_path, tree in parsed:
		try:
			expanded = Expander(options, file=str(source_path)).expand_module(tree)
		except ExpansionError as exc:
			_report([(exc.diagnostic, source_path)], EXIT_EXPANSION_FAILED, args.json)
			return EXIT_EXPANSION_FAILED
		outputs.append((source_path, ast.unparse(expanded)))
		logger.info("expanded %s", source_path)

	if args.output is not None:
		args.output.write_text(outputs[0][1] + "\n", encoding="utf-8")
	if args.json:
		_report([], 0, True)
		return 0
	if args.output is not None:
		return 0
	for source_path, text in outputs:
		if len(outputs) > 1:
			print(f"# {source_path}")
		print(text)
	return 0


__all__ = ["expand_or_exit", "main"]
