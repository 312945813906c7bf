"""Models for linting one or more template files."""

from pathlib import Path

from pydantic import BaseModel, Field

from templint.models.diagnostic import LintReport, LintStatus


class LintRunResult(BaseModel):
    """Result of linting a file or a directory of templates."""

    reports: list[LintReport] = Field(
        default_factory=list, description="One report per linted document"
    )
    linted_files: list[Path] = Field(
        default_factory=list, description="Templates that were read and parsed"
    )
    failed_files: dict[Path, str] = Field(
        default_factory=dict, description="Templates that could not be linted, with error messages"
    )

    @property
    def total_files(self) -> int:
        return len(self.linted_files) + len(self.failed_files)

    @property
    def success_count(self) -> int:
        return len(self.linted_files)

    @property
    def failure_count(self) -> int:
        return len(self.failed_files)

    @property
    def status(self) -> LintStatus:
        """The worst status over every report."""
        worst = LintStatus.PASSED
        for report in self.reports:
            if report.status.rank > worst.rank:
                worst = report.status
        return worst

    def count(self, status: LintStatus) -> int:
        return sum(1 for report in self.reports if report.status is status)
