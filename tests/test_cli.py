"""Tests for the command line interface."""

import json

import pytest
from click.testing import CliRunner

from templint.cli import EXIT_FATAL, EXIT_PASSED, EXIT_WARNING, exit_code_for, main
from templint.models.diagnostic import Diagnostic, LintReport, Severity
from templint.models.lint import LintRunResult
from tests.conftest import BROKEN_DIR, RULES_DIR, TEMPLATES_DIR


@pytest.fixture
def runner():
    return CliRunner()


def run_json(runner, *args):
    result = runner.invoke(main, [*args[:-1], "lint", "--format", "json", args[-1]])
    return result, json.loads(result.stdout)


class TestLintCommand:
    """Tests for `templint lint`."""

    def test_fatal_exit_code_and_json(self, runner):
        result, data = run_json(runner, "--rules-dir", str(RULES_DIR / "mixed"), str(TEMPLATES_DIR))

        assert result.exit_code == EXIT_FATAL
        assert data["status"] == "fatal"
        assert data["linted_files"] == 3
        page = data["reports"][1]
        assert page["fatals"][0]["rule"] == "b_no_debug_filter"
        assert page["fatals"][0]["line"] == 4

    def test_warning_exit_code(self, runner):
        result, data = run_json(runner, "--rules-dir", str(RULES_DIR / "hey"), str(BROKEN_DIR / "ok.html"))

        assert result.exit_code == EXIT_WARNING
        assert data["reports"][0]["warnings"][0]["rule"] == "no_set_with_hey"

    def test_passing_exit_code(self, runner):
        result, data = run_json(runner, "--rules-dir", str(RULES_DIR / "hey"), str(TEMPLATES_DIR / "clean.html"))

        assert result.exit_code == EXIT_PASSED
        assert data["status"] == "passed"

    def test_unparsable_template_is_fatal(self, runner):
        result = runner.invoke(main, ["--rules-dir", str(RULES_DIR / "hey"), "lint", "--format", "json", str(BROKEN_DIR)])

        assert result.exit_code == EXIT_FATAL
        data = json.loads(result.stdout)
        assert [e["file_path"].rsplit("/", 1)[-1] for e in data["parse_errors"]] == ["broken.html"]

    def test_template_mode(self, runner):
        result = runner.invoke(
            main,
            [
                "--rules-dir",
                str(RULES_DIR / "hey"),
                "lint",
                "--mode",
                "template",
                "--format",
                "json",
                "--ignore",
                "page.html,clean.html",
                str(TEMPLATES_DIR),
            ],
        )

        data = json.loads(result.stdout)
        assert result.exit_code == EXIT_WARNING
        assert [r["filename"].rsplit("/", 1)[-1] for r in data["reports"]] == ["header.j2"]

    def test_text_output_to_file(self, runner, tmp_path):
        output = tmp_path / "out.txt"
        result = runner.invoke(
            main,
            [
                "--rules-dir",
                str(RULES_DIR / "hey"),
                "lint",
                "--format",
                "text",
                "-o",
                str(output),
                str(BROKEN_DIR / "ok.html"),
            ],
        )

        assert result.exit_code == EXIT_WARNING
        text = output.read_text()
        assert text.startswith("no_set_with_hey\nWARN: line 1 in ")
        assert "{% set hey = 1 %}" in text

    def test_sarif_output(self, runner):
        result = runner.invoke(
            main,
            ["--rules-dir", str(RULES_DIR / "hey"), "lint", "--format", "sarif", str(BROKEN_DIR / "ok.html")],
        )

        data = json.loads(result.stdout)
        assert data["runs"][0]["results"][0]["ruleId"] == "no_set_with_hey"

    def test_console_output(self, runner):
        result = runner.invoke(main, ["--rules-dir", str(RULES_DIR / "mixed"), "lint", str(TEMPLATES_DIR)])

        assert result.exit_code == EXIT_FATAL
        assert "b_no_debug_filter" in result.output
        assert "Summary" in result.output

    def test_invalid_rules(self, runner):
        result = runner.invoke(main, ["--rules-dir", str(RULES_DIR / "invalid"), "lint", str(TEMPLATES_DIR)])

        assert result.exit_code == EXIT_FATAL
        assert "not an allowed target" in result.output


class TestRulesCommand:
    """Tests for `templint rules`."""

    def test_lists_rules(self, runner):
        result = runner.invoke(main, ["--rules-dir", str(RULES_DIR / "mixed"), "rules"])

        assert result.exit_code == 0
        assert "a_log_blocks" in result.output
        assert "Filter" in result.output

    def test_no_rules(self, runner):
        result = runner.invoke(main, ["rules"])

        assert result.exit_code == 0
        assert "No rules loaded" in result.output


class TestInspectCommand:
    """Tests for `templint inspect`."""

    def test_dump(self, runner):
        result = runner.invoke(main, ["inspect", str(TEMPLATES_DIR / "partials" / "header.j2")])

        assert result.exit_code == 0
        assert "ROOT: Node,Root,NodeList" in result.output
        assert "body:1: Node,Set" in result.output

    def test_parse_error(self, runner):
        result = runner.invoke(main, ["inspect", str(BROKEN_DIR / "broken.html")])

        assert result.exit_code == EXIT_FATAL
        assert "Failed to parse template" in result.output


class TestExitCode:
    """Tests for mapping results to exit codes."""

    def _result(self, *severities: Severity) -> LintRunResult:
        diagnostics = [
            Diagnostic(severity=s, rule="r", line=1, filename="t.html", message="m") for s in severities
        ]
        report = LintReport(
            filename="t.html",
            logs=[d for d in diagnostics if d.severity is Severity.LOG],
            warnings=[d for d in diagnostics if d.severity is Severity.WARN],
            fatals=[d for d in diagnostics if d.severity is Severity.FATAL],
        )
        return LintRunResult(reports=[report])

    def test_logs_only_pass(self):
        assert exit_code_for(self._result(Severity.LOG)) == EXIT_PASSED

    def test_warnings(self):
        assert exit_code_for(self._result(Severity.LOG, Severity.WARN)) == EXIT_WARNING

    def test_fatal(self):
        assert exit_code_for(self._result(Severity.WARN, Severity.FATAL)) == EXIT_FATAL

    def test_failed_files(self, tmp_path):
        result = LintRunResult(failed_files={tmp_path: "boom"})
        assert exit_code_for(result) == EXIT_FATAL
