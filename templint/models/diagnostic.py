"""Models for lint diagnostics and per-document reports."""

from enum import Enum

from pydantic import BaseModel, Field


class Severity(str, Enum):
    """Diagnostic severities, weakest first."""

    LOG = "log"
    WARN = "warn"
    FATAL = "fatal"

    @property
    def label(self) -> str:
        return self.name


class LintStatus(str, Enum):
    """Outcome of linting a document."""

    PASSED = "passed"
    WARNING = "warning"
    FATAL = "fatal"

    @property
    def failed(self) -> bool:
        return self is not LintStatus.PASSED

    @property
    def rank(self) -> int:
        return _STATUS_RANK[self]


_STATUS_RANK = {LintStatus.PASSED: 0, LintStatus.WARNING: 1, LintStatus.FATAL: 2}


class Diagnostic(BaseModel):
    """A single event recorded by a rule."""

    severity: Severity = Field(description="Log, warn or fatal")
    rule: str = Field(description="Name of the rule module that recorded it")
    line: int | None = Field(
        default=None, ge=1, description="Line number (1-indexed), None when no source is available"
    )
    source: str = Field(default="", description="Source of the line, collapsed to a single line")
    filename: str = Field(description="Template file name")
    message: str = Field(description="Message supplied by the rule")

    def __str__(self) -> str:
        return f"{self.severity.label}: line {self.line} in {self.filename}, {self.message}"


class LintReport(BaseModel):
    """Diagnostics drained from one linted document."""

    filename: str = Field(description="Template file name")
    logs: list[Diagnostic] = Field(default_factory=list, description="Log entries, in order")
    warnings: list[Diagnostic] = Field(default_factory=list, description="Warn entries, in order")
    fatals: list[Diagnostic] = Field(default_factory=list, description="Fatal entries, in order")

    @property
    def status(self) -> LintStatus:
        """Fatal dominates, warnings come next, logs never fail a document."""
        if self.fatals:
            return LintStatus.FATAL
        if self.warnings:
            return LintStatus.WARNING
        return LintStatus.PASSED

    @property
    def failed(self) -> bool:
        return self.status.failed

    @property
    def failures(self) -> list[Diagnostic]:
        """Entries that decide the outcome: fatals if any, otherwise warnings."""
        return self.fatals if self.fatals else self.warnings

    @property
    def diagnostics(self) -> list[Diagnostic]:
        return [*self.logs, *self.warnings, *self.fatals]
