"""Tests for diagnostic and report models."""

import pytest
from pydantic import ValidationError

from templint.models.diagnostic import Diagnostic, LintReport, LintStatus, Severity
from templint.models.lint import LintRunResult


def entry(severity: Severity) -> Diagnostic:
    return Diagnostic(severity=severity, rule="r", line=2, filename="t.html", message="m")


class TestDiagnostic:
    def test_str(self):
        assert str(entry(Severity.FATAL)) == "FATAL: line 2 in t.html, m"

    def test_line_is_one_indexed(self):
        with pytest.raises(ValidationError):
            Diagnostic(severity=Severity.LOG, rule="r", line=0, filename="t.html", message="m")


class TestLintReport:
    def test_status(self):
        assert LintReport(filename="t").status is LintStatus.PASSED
        assert LintReport(filename="t", logs=[entry(Severity.LOG)]).status is LintStatus.PASSED
        assert LintReport(filename="t", warnings=[entry(Severity.WARN)]).status is LintStatus.WARNING
        assert (
            LintReport(
                filename="t", warnings=[entry(Severity.WARN)], fatals=[entry(Severity.FATAL)]
            ).status
            is LintStatus.FATAL
        )

    def test_failures_prefer_fatals(self):
        report = LintReport(
            filename="t", warnings=[entry(Severity.WARN)], fatals=[entry(Severity.FATAL)]
        )
        assert [d.severity for d in report.failures] == [Severity.FATAL]


class TestLintRunResult:
    def test_worst_status(self):
        result = LintRunResult(
            reports=[
                LintReport(filename="a", warnings=[entry(Severity.WARN)]),
                LintReport(filename="b"),
            ]
        )
        assert result.status is LintStatus.WARNING
        assert result.count(LintStatus.PASSED) == 1

    def test_empty(self):
        assert LintRunResult().status is LintStatus.PASSED
