"""Tests for compiler adapters and tsc output parsing."""

from __future__ import annotations

import json
import subprocess
from pathlib import Path

import pytest

from diaglens.collector.compiler import (
    JsonDiagnosticSource,
    RawDiagnostic,
    TscRunner,
    parse_tsc_output,
)
from diaglens.core.config import CompilerProfile
from diaglens.core.errors import CompilerError, ConfigurationError

TSC_OUTPUT = """\
src/app.ts(3,15): error TS2307: Cannot find module './missing' or its corresponding type declarations.
src/billing/invoice.ts(10,5): error TS2322: Type 'string' is not assignable to type 'number'.
  Type 'string' is not assignable to type 'number'.
error TS5083: Cannot read file '/base/tsconfig.json'.
Found 3 errors.
"""


class TestParseTscOutput:
    def test_parses_located_diagnostics(self):
        diagnostics = parse_tsc_output(TSC_OUTPUT)

        first = diagnostics[0]
        assert first.file == "src/app.ts"
        assert (first.line, first.column, first.code) == (3, 15, 2307)
        assert first.severity == "error"
        assert first.message.startswith("Cannot find module './missing'")

    def test_continuation_lines_join_message(self):
        second = parse_tsc_output(TSC_OUTPUT)[1]

        assert second.message.count("\n") == 1
        assert second.message.endswith("Type 'string' is not assignable to type 'number'.")

    def test_global_diagnostic_has_no_file(self):
        global_diag = parse_tsc_output(TSC_OUTPUT)[2]

        assert global_diag.code == 5083
        assert global_diag.file is None

    def test_summary_line_ignored(self):
        assert len(parse_tsc_output(TSC_OUTPUT)) == 3

    def test_empty_output(self):
        assert parse_tsc_output("") == []


class TestRawDiagnostic:
    def test_from_dict_tolerates_bad_numbers(self):
        raw = RawDiagnostic.from_dict({"message": "m", "file": "a.ts", "line": "x", "column": 1, "code": 2304})

        assert raw.line is None
        assert raw.column == 1
        assert raw.code == 2304


class TestTscRunner:
    def test_missing_tsconfig_is_configuration_error(self, tmp_path: Path):
        with pytest.raises(ConfigurationError):
            TscRunner().collect(tmp_path)

    def test_missing_compiler_binary(self, tmp_path: Path):
        (tmp_path / "tsconfig.json").write_text("{}")
        runner = TscRunner(CompilerProfile(command=["diaglens-no-such-compiler"]))

        with pytest.raises(CompilerError):
            runner.collect(tmp_path)

    def test_parses_compiler_stdout(self, tmp_path: Path, monkeypatch):
        (tmp_path / "tsconfig.json").write_text("{}")
        calls = []

        def fake_run(cmd, **kwargs):
            calls.append(cmd)
            return subprocess.CompletedProcess(cmd, 2, stdout=TSC_OUTPUT, stderr="")

        monkeypatch.setattr(subprocess, "run", fake_run)
        diagnostics = TscRunner().collect(tmp_path)

        assert len(diagnostics) == 3
        assert "--noEmit" in calls[0]

    def test_failure_without_diagnostics(self, tmp_path: Path, monkeypatch):
        (tmp_path / "tsconfig.json").write_text("{}")

        def fake_run(cmd, **kwargs):
            return subprocess.CompletedProcess(cmd, 1, stdout="", stderr="npx: command failed")

        monkeypatch.setattr(subprocess, "run", fake_run)

        with pytest.raises(CompilerError):
            TscRunner().collect(tmp_path)


class TestJsonDiagnosticSource:
    def test_reads_list(self, tmp_path: Path):
        path = tmp_path / "diags.json"
        path.write_text(json.dumps([
            {"file": "a.ts", "line": 1, "column": 1, "code": 2304, "message": "Cannot find name 'x'."},
        ]))

        diagnostics = JsonDiagnosticSource(path).collect(tmp_path)

        assert diagnostics[0].code == 2304

    def test_reads_wrapped_object(self, tmp_path: Path):
        path = tmp_path / "diags.json"
        path.write_text(json.dumps({"diagnostics": [{"message": "m"}, "not-a-record"]}))

        diagnostics = JsonDiagnosticSource(path).collect(tmp_path)

        assert len(diagnostics) == 2
        assert diagnostics[1].file is None

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigurationError):
            JsonDiagnosticSource(tmp_path / "nope.json").collect(tmp_path)

    def test_invalid_json(self, tmp_path: Path):
        path = tmp_path / "diags.json"
        path.write_text("{not json")

        with pytest.raises(ConfigurationError):
            JsonDiagnosticSource(path).collect(tmp_path)
