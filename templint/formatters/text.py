"""Plain text formatter for lint reports."""

from templint.models.diagnostic import Diagnostic, LintReport
from templint.models.lint import LintRunResult


def render_diagnostic(diagnostic: Diagnostic) -> str:
    """Render one entry as rule name, summary line, source snippet and a blank line."""
    return (
        f"{diagnostic.rule}\n"
        f"{diagnostic.severity.label}: line {diagnostic.line} in {diagnostic.filename}, "
        f"{diagnostic.message}\n"
        f"{diagnostic.source}\n\n"
    )


def render_report(report: LintReport) -> str:
    """Render log entries, then fatal entries, or warnings when nothing is fatal."""
    entries = [*report.logs, *report.failures]
    return "".join(render_diagnostic(diagnostic) for diagnostic in entries)


def format_as_text(result: LintRunResult) -> str:
    """Render every report of a run, followed by files that could not be linted."""
    parts = [render_report(report) for report in result.reports]
    for path, error in result.failed_files.items():
        parts.append(f"{path}\nERROR: {error}\n\n")
    return "".join(parts)
