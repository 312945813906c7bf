"""One lint pass over a document: traverse with the rule table, then report."""

import logging
from typing import Optional

from jinja2 import nodes

from templint.models.diagnostic import LintReport
from templint.models.source import SourceIndex
from templint.pipeline.context import LintDocument
from templint.pipeline.reporter import drain, emit
from templint.pipeline.rules.models import RuleTable
from templint.pipeline.walker import TreeWalker

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "<template>"


def lint_tree(
    root: nodes.Node,
    rule_table: RuleTable,
    source_index: SourceIndex,
    filename: Optional[str] = None,
    app: Optional[str] = None,
) -> LintReport:
    """Walk a parsed tree with every rule and return the drained report.

    Diagnostics never stop the walk; the report's status is decided only
    once every node has been visited.
    """
    document = LintDocument(
        filename=filename or DEFAULT_FILENAME,
        source_index=source_index,
        root=root,
        app=app,
    )
    logger.debug("Linting %s", document.filename)
    with rule_table.session.open(document):
        TreeWalker(rule_table).walk(root)
    report = drain(document)
    emit(report)
    return report
