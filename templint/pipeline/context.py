"""Per-document lint state and the context API exposed to rules."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Optional

from templint.models.diagnostic import Diagnostic, Severity
from templint.models.source import SourceIndex, Token

logger = logging.getLogger(__name__)


class LintStateError(RuntimeError):
    """Raised when a rule uses its context while no document is being linted."""

    pass


@dataclass
class LintDocument:
    """State for one linted document, discarded after reporting."""

    filename: str
    source_index: SourceIndex
    root: Any = None
    app: Optional[str] = None
    logs: list[Diagnostic] = field(default_factory=list)
    warnings: list[Diagnostic] = field(default_factory=list)
    fatals: list[Diagnostic] = field(default_factory=list)

    def buffer(self, severity: Severity) -> list[Diagnostic]:
        if severity is Severity.FATAL:
            return self.fatals
        if severity is Severity.WARN:
            return self.warnings
        return self.logs


class LintSession:
    """Tracks the document that rule contexts currently report into."""

    def __init__(self) -> None:
        self._document: Optional[LintDocument] = None

    @property
    def active(self) -> bool:
        return self._document is not None

    @property
    def document(self) -> LintDocument:
        if self._document is None:
            raise LintStateError("No document is being linted")
        return self._document

    @contextmanager
    def open(self, document: LintDocument) -> Iterator[LintDocument]:
        previous = self._document
        self._document = document
        try:
            yield document
        finally:
            self._document = previous


def _collapse(text: str) -> str:
    return text.replace("\r\n", " ").replace("\n", " ").replace("\r", " ")


class DiagnosticContext:
    """The API a rule module works with.

    One context is created per rule module when the rule table is built.
    Everything document-specific is read from the session, so the same
    context keeps working for every document linted with that table.
    """

    def __init__(self, rule_name: str, session: LintSession):
        self._rule_name = rule_name
        self._session = session

    @property
    def rule_name(self) -> str:
        return self._rule_name

    @property
    def filename(self) -> str:
        return self._session.document.filename

    @property
    def app(self) -> Optional[str]:
        return self._session.document.app

    @property
    def root(self) -> Any:
        return self._session.document.root

    def get_source(self) -> str:
        """Full reconstructed source of the document."""
        return self._session.document.source_index.text()

    def get_all_comments(self) -> list[Token]:
        return list(self._session.document.source_index.comments)

    def get_line_number(self, node: Any) -> Optional[int]:
        return getattr(node, "lineno", None)

    def get_surrounding_source(self, node: Any, lines: int) -> str:
        """Lines around a node: ``lines`` before, the node's line, ``lines`` after."""
        lineno = self.get_line_number(node)
        if lineno is None:
            return ""
        return self._session.document.source_index.surrounding(lineno, lines)

    def log(self, message: str, node: Any = None) -> Diagnostic:
        return self._record(Severity.LOG, message, node)

    def warn(self, message: str, node: Any = None) -> Diagnostic:
        return self._record(Severity.WARN, message, node)

    def fatal(self, message: str, node: Any = None) -> Diagnostic:
        return self._record(Severity.FATAL, message, node)

    def _record(self, severity: Severity, message: str, node: Any) -> Diagnostic:
        document = self._session.document
        index = document.source_index
        lineno = self.get_line_number(node)
        if index.has_line(lineno):
            line = lineno
            source = _collapse(index.line(lineno) or "")
        else:
            line = None
            source = ""
        diagnostic = Diagnostic(
            severity=severity,
            rule=self._rule_name,
            line=line,
            source=source,
            filename=document.filename,
            message=message,
        )
        document.buffer(severity).append(diagnostic)
        logger.debug("%s recorded %s at line %s", self._rule_name, severity.label, line)
        return diagnostic
