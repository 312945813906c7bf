"""JSON formatter for lint results."""

import json
from typing import Any

from templint.models.diagnostic import Diagnostic, LintReport
from templint.models.lint import LintRunResult


def _diagnostic_to_dict(diagnostic: Diagnostic) -> dict[str, Any]:
    """Convert a Diagnostic to a dictionary."""
    return {
        "rule": diagnostic.rule,
        "severity": diagnostic.severity.value,
        "line": diagnostic.line,
        "filename": diagnostic.filename,
        "message": diagnostic.message,
        "source": diagnostic.source,
    }


def _report_to_dict(report: LintReport) -> dict[str, Any]:
    """Convert a LintReport to a dictionary."""
    return {
        "filename": report.filename,
        "status": report.status.value,
        "logs": [_diagnostic_to_dict(d) for d in report.logs],
        "warnings": [_diagnostic_to_dict(d) for d in report.warnings],
        "fatals": [_diagnostic_to_dict(d) for d in report.fatals],
    }


def format_as_json(result: LintRunResult, *, pretty: bool = True) -> str:
    """Format lint results as JSON.

    Args:
        result: The lint run result to format
        pretty: If True, format with indentation for readability

    Returns:
        JSON-formatted string
    """
    data = {
        "status": result.status.value,
        "total_files": result.total_files,
        "linted_files": result.success_count,
        "failed_files": result.failure_count,
        "reports": [_report_to_dict(report) for report in result.reports],
        "parse_errors": [
            {"file_path": str(path), "error": error}
            for path, error in result.failed_files.items()
        ],
    }

    if pretty:
        return json.dumps(data, indent=2)
    return json.dumps(data)
