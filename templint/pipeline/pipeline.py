"""Top-level pipeline orchestration.

This module provides the main pipeline that orchestrates all stages:
Load rules → Collect templates → Lint each template
"""

import logging
from pathlib import Path
from typing import Optional

from jinja2 import Environment, TemplateSyntaxError

from templint.config import LintSettings, get_settings
from templint.extension import InspectExtension, LintExtension
from templint.models.diagnostic import LintReport
from templint.models.lint import LintRunResult
from templint.pipeline.lint import lint_tree
from templint.pipeline.parse import collect_template_files, read_template
from templint.pipeline.rules import RuleExecutionError, RuleTable
from templint.pipeline.rules_factory import build_rule_table_from_settings
from templint.pipeline.source_index import index_source
from templint.pipeline.walker import TreeDepthError

logger = logging.getLogger(__name__)


def create_environment(settings: LintSettings, rule_table: RuleTable) -> Environment:
    """Create a Jinja2 environment that lints with the given rule table.

    Failing lint blocks are collected in ``environment.lint_reports`` instead
    of raising, so a whole directory can be reported at once.
    """
    syntax = settings.syntax
    environment = Environment(
        block_start_string=syntax.block_start_string,
        block_end_string=syntax.block_end_string,
        variable_start_string=syntax.variable_start_string,
        variable_end_string=syntax.variable_end_string,
        comment_start_string=syntax.comment_start_string,
        comment_end_string=syntax.comment_end_string,
        line_statement_prefix=syntax.line_statement_prefix,
        line_comment_prefix=syntax.line_comment_prefix,
        trim_blocks=syntax.trim_blocks,
        lstrip_blocks=syntax.lstrip_blocks,
        extensions=[LintExtension, InspectExtension, *syntax.extensions],
    )
    environment.lint_rules = rule_table
    environment.lint_app = settings.rules.app
    environment.lint_mode = settings.mode
    environment.lint_raise_on_failure = False
    return environment


def _lint_extension(environment: Environment) -> LintExtension:
    return environment.extensions[LintExtension.identifier]  # type: ignore[return-value]


def lint_source(
    source: str,
    environment: Environment,
    name: Optional[str] = None,
    filename: Optional[str] = None,
) -> list[LintReport]:
    """Lint one template and return its reports.

    In ``block`` mode there is one report per lint block. In ``template``
    mode the whole template is linted and there is exactly one report.
    """
    reports = environment.lint_reports
    start = len(reports)
    tree = environment.parse(source, name, filename)
    block_reports = reports[start:]
    del reports[start:]

    if environment.lint_mode != "template":
        return block_reports

    extension = _lint_extension(environment)
    processed = environment.preprocess(source, name, filename)
    source_index = index_source(environment, processed, name, filename)
    report = lint_tree(
        tree,
        extension.rule_table,
        source_index,
        filename=filename or name,
        app=environment.lint_app,
    )
    return [report]


def _run_lint_stage(
    files: list[Path], base_path: Path, environment: Environment, result: LintRunResult
) -> None:
    """Lint each file, recording files that cannot be linted without stopping the run."""
    for file_path in files:
        name = file_path.relative_to(base_path).as_posix()
        try:
            source = read_template(file_path)
            reports = lint_source(source, environment, name=name, filename=str(file_path))
        except (ValueError, TemplateSyntaxError, TreeDepthError) as e:
            logger.error("Failed to lint %s: %s", file_path, e)
            result.failed_files[file_path] = str(e)
            continue
        except RuleExecutionError as e:
            logger.error("Failed to lint %s: %s: %s", file_path, e, e.__cause__)
            result.failed_files[file_path] = f"{e}: {e.__cause__}"
            continue

        result.linted_files.append(file_path)
        result.reports.extend(reports)


def run_pipeline(target_path: Path) -> LintRunResult:
    """Lint a template file or a directory of templates.

    Raises:
        RuleConfigurationError: If the rules cannot be loaded. Nothing is
            linted in that case.
    """
    settings = get_settings()

    logger.info("Stage 1/3: Loading rules...")
    rule_table = build_rule_table_from_settings(settings)

    logger.info("Stage 2/3: Collecting templates...")
    result = LintRunResult()
    files = collect_template_files(target_path)
    if not files:
        logger.error("Path does not exist or contains no templates: %s", target_path)
        result.failed_files[target_path] = "Path does not exist or contains no templates"
        return result

    logger.info("Stage 3/3: Linting %d template(s) in %s mode...", len(files), settings.mode)
    base_path = target_path if target_path.is_dir() else target_path.parent
    environment = create_environment(settings, rule_table)
    _run_lint_stage(files, base_path, environment, result)

    logger.info(
        "Lint complete: %d linted, %d failed, status %s",
        result.success_count,
        result.failure_count,
        result.status.value,
    )
    return result
