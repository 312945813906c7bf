"""Jinja2 extensions: ``{% lint %}`` runs the rules, ``{% inspect %}`` dumps node categories.

Enable linting on an environment and lint blocks are checked while the
template is parsed::

    env = Environment(extensions=[LintExtension])
    env.lint_rules = "path/to/rules"
    env.parse("{% lint %}{% set hey = 1 %}{% endlint %}")

A failing block raises ``TemplateLintError`` unless
``env.lint_raise_on_failure`` is false; every report is appended to
``env.lint_reports``. The environment never clears ``lint_reports`` or
``inspect_dumps``: a long-lived environment should remove the entries it has
read, as ``lint_source`` does.
"""

import logging
from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, TemplateSyntaxError, nodes
from jinja2.ext import Extension
from jinja2.parser import Parser

from templint.models.diagnostic import LintReport, LintStatus
from templint.models.source import SourceIndex
from templint.pipeline.categories import describe_tree
from templint.pipeline.lint import lint_tree
from templint.pipeline.rules import RuleTable, build_rule_table, build_rule_table_from_directory
from templint.pipeline.source_index import index_source

logger = logging.getLogger(__name__)


class TemplateLintError(TemplateSyntaxError):
    """Raised from a lint block whose report failed."""

    def __init__(
        self,
        message: str,
        lineno: int,
        name: Optional[str] = None,
        filename: Optional[str] = None,
        report: Optional[LintReport] = None,
    ):
        super().__init__(message, lineno, name, filename)
        self.report = report

    @property
    def status(self) -> LintStatus:
        return self.report.status if self.report is not None else LintStatus.FATAL


def resolve_rule_table(rules: Any) -> RuleTable:
    """Turn the ``lint_rules`` environment attribute into a rule table."""
    if isinstance(rules, RuleTable):
        return rules
    if rules is None:
        logger.warning("No rules configured for the lint extension")
        return build_rule_table([])
    return build_rule_table_from_directory(Path(rules))


def _failure_message(report: LintReport) -> str:
    label = "fatal" if report.status is LintStatus.FATAL else "warning"
    summary = "; ".join(f"{d.rule}: {d.message}" for d in report.failures)
    return f"Lint {label} in {report.filename}: {summary}"


class LintExtension(Extension):
    """Lints the contents of ``{% lint %}...{% endlint %}`` blocks."""

    tags = {"lint"}
    # Runs after every other preprocessor, so the captured source is what the lexer sees.
    priority = 1000

    def __init__(self, environment: Environment):
        super().__init__(environment)
        environment.extend(
            lint_rules=None,
            lint_app=None,
            lint_mode="block",
            lint_raise_on_failure=True,
            lint_reports=[],
        )
        self._rule_table: Optional[RuleTable] = None
        # source and lint tag count of the template being parsed
        self._source: Optional[str] = None
        self._source_name: Optional[str] = None
        self._block_count = 0

    @property
    def rule_table(self) -> RuleTable:
        """The rule table, built on first use and reused for every document."""
        if self._rule_table is None:
            self._rule_table = resolve_rule_table(self.environment.lint_rules)
        return self._rule_table

    def preprocess(self, source: str, name: Optional[str], filename: Optional[str] = None) -> str:
        self._source = source
        self._source_name = name
        self._block_count = 0
        return source

    def parse(self, parser: Parser) -> list[nodes.Node]:
        lineno = next(parser.stream).lineno
        # counted before the body is parsed so nested blocks get later numbers
        block_index = self._block_count
        self._block_count += 1
        body = parser.parse_statements(("name:endlint",), drop_needle=True)
        if self.environment.lint_mode != "block":
            return body

        report = self._lint_block(body, lineno, block_index, parser.name, parser.filename)
        self.environment.lint_reports.append(report)
        if report.failed and self.environment.lint_raise_on_failure:
            raise TemplateLintError(
                _failure_message(report), lineno, parser.name, parser.filename, report=report
            )
        return body

    def _lint_block(
        self,
        body: list[nodes.Node],
        lineno: int,
        block_index: int,
        name: Optional[str],
        filename: Optional[str],
    ) -> LintReport:
        source = self._source if self._source_name == name else None
        if source is None:
            logger.warning("Source of %s is unavailable, snippets will be empty", name or "template")
            source_index = SourceIndex()
        else:
            source_index = index_source(
                self.environment, source, name, filename, block_index=block_index
            )

        root = nodes.Template(body, lineno=lineno)
        return lint_tree(
            root,
            self.rule_table,
            source_index,
            filename=filename or name,
            app=self.environment.lint_app,
        )


class InspectExtension(Extension):
    """Logs how the nodes inside ``{% inspect %}...{% endinspect %}`` are built.

    Useful when writing a rule: wrap the construct in an inspect block to see
    which categories each node matches. The block renders nothing.
    """

    tags = {"inspect"}

    def __init__(self, environment: Environment):
        super().__init__(environment)
        environment.extend(inspect_dumps=[])

    def parse(self, parser: Parser) -> list[nodes.Node]:
        lineno = next(parser.stream).lineno
        body = parser.parse_statements(("name:endinspect",), drop_needle=True)
        lines = describe_tree(nodes.Template(body, lineno=lineno))
        for line in lines:
            logger.info("%s", line)
        self.environment.inspect_dumps.append(lines)
        return []
