# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import ast
import json
import runpy
import sys

import pytest

from metaquote.cli import expand_or_exit, main


def test_cli_prints_expanded_source(tmp_path, capsys) -> None:
	src = tmp_path / "case.py"
	src.write_text("tree = expr[a + 1]\n")
	assert main([str(src)]) == 0
	out = capsys.readouterr().out
	assert "import metaquote.runtime as _mq_rt" in out
	assert "tree = _mq_ast.BinOp(" in out


def test_cli_writes_output_file(tmp_path, capsys) -> None:
	src = tmp_path / "case.py"
	dst = tmp_path / "expanded.py"
	src.write_text("tree = expr[a]\n")
	assert main([str(src), "-o", str(dst)]) == 0
	assert capsys.readouterr().out == ""
	assert "_mq_ast.Name(id='a'" in dst.read_text()


def test_cli_namespace_options(tmp_path, capsys) -> None:
	src = tmp_path / "case.py"
	src.write_text("triple = code[f(1)]\n")
	assert main([str(src), "--reference-namespace", "Ref", "--submission-namespace", "Sub"]) == 0
	out = capsys.readouterr().out
	assert "_mq_rt.eval_under(Ref," in out
	assert "_mq_rt.eval_under(Sub," in out


def test_cli_expansion_failure_exits_2(tmp_path, capsys) -> None:
	src = tmp_path / "case.py"
	dst = tmp_path / "expanded.py"
	src.write_text("f = funty[int]\n")
	assert main([str(src), "-o", str(dst)]) == 2
	captured = capsys.readouterr()
	assert captured.out == ""
	assert "arrow type expected" in captured.err
	assert f"{src}:1:4: error:" in captured.err
	assert not dst.exists()


def test_cli_json_diagnostics(tmp_path, capsys) -> None:
	src = tmp_path / "case.py"
	src.write_text("x = 1\nf = funty[int]\n")
	assert main([str(src), "--json"]) == 2
	payload = json.loads(capsys.readouterr().out)
	assert payload["exit_code"] == 2
	(diag,) = payload["diagnostics"]
	assert diag["message"] == "arrow type expected"
	assert diag["phase"] == "expand"
	assert (diag["file"], diag["line"], diag["column"]) == (str(src), 2, 4)


def test_cli_syntax_error_exits_1(tmp_path, capsys) -> None:
	src = tmp_path / "case.py"
	src.write_text("def broken(:\n")
	assert main([str(src), "--json"]) == 1
	payload = json.loads(capsys.readouterr().out)
	assert payload["diagnostics"][0]["phase"] == "parser"


def test_cli_missing_file_exits_1(tmp_path, capsys) -> None:
	assert main([str(tmp_path / "missing.py")]) == 1
	assert "cannot read source" in capsys.readouterr().err


def test_expand_or_exit_terminates_with_status_2(capsys) -> None:
	with pytest.raises(SystemExit) as excinfo:
		expand_or_exit(ast.parse("f = funty[int]"), file="case.py")
	assert excinfo.value.code == 2
	assert "arrow type expected" in capsys.readouterr().err


def test_module_entrypoint_runs_main(tmp_path, capsys, monkeypatch) -> None:
	src = tmp_path / "case.py"
	src.write_text("tree = expr[a]\n")
	monkeypatch.setattr(sys, "argv", ["metaquote", str(src)])
	with pytest.raises(SystemExit) as excinfo:
		runpy.run_module("metaquote", run_name="__main__")
	assert excinfo.value.code == 0
	assert "tree = _mq_ast.Name(" in capsys.readouterr().out
