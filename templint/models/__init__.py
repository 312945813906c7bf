"""Data models shared across the lint pipeline."""

from templint.models.diagnostic import Diagnostic, LintReport, LintStatus, Severity
from templint.models.lint import LintRunResult
from templint.models.source import SourceIndex, Token

__all__ = [
    "Diagnostic",
    "LintReport",
    "LintRunResult",
    "LintStatus",
    "Severity",
    "SourceIndex",
    "Token",
]
