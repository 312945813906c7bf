"""Draining diagnostic buffers and deciding the outcome of a document."""

import logging

from templint.models.diagnostic import Diagnostic, LintReport, LintStatus
from templint.pipeline.context import LintDocument

logger = logging.getLogger(__name__)


def drain(document: LintDocument) -> LintReport:
    """Move the document's buffers into a report, leaving the buffers empty."""
    report = LintReport(
        filename=document.filename,
        logs=list(document.logs),
        warnings=list(document.warnings),
        fatals=list(document.fatals),
    )
    document.logs.clear()
    document.warnings.clear()
    document.fatals.clear()
    return report


def _describe(diagnostic: Diagnostic) -> str:
    return f"{diagnostic.rule}: {diagnostic}\n{diagnostic.source}"


def emit(report: LintReport) -> LintStatus:
    """Log a report and return its status.

    Log entries are always shown. Fatal entries dominate; warnings are only
    shown when there is nothing fatal.
    """
    for diagnostic in report.logs:
        logger.info("%s", _describe(diagnostic))

    status = report.status
    if status is LintStatus.FATAL:
        for diagnostic in report.fatals:
            logger.error("%s", _describe(diagnostic))
    elif status is LintStatus.WARNING:
        for diagnostic in report.warnings:
            logger.warning("%s", _describe(diagnostic))

    logger.debug(
        "%s: %s (%d log, %d warn, %d fatal)",
        report.filename,
        status.value,
        len(report.logs),
        len(report.warnings),
        len(report.fatals),
    )
    return status
