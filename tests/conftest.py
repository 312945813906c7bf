from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

import pytest
from jinja2 import Environment, nodes

from templint.config import LintSettings, get_settings, set_settings
from templint.extension import InspectExtension, LintExtension
from templint.models.diagnostic import LintReport
from templint.pipeline.lint import lint_tree
from templint.pipeline.rules import RuleModule, RuleTable, build_rule_table
from templint.pipeline.source_index import index_source

FIXTURES = Path(__file__).parent / "fixtures"
RULES_DIR = FIXTURES / "rules"
TEMPLATES_DIR = FIXTURES / "templates"
BROKEN_DIR = FIXTURES / "broken"


def rule_module(name: str, create: Callable[[Any], Mapping[str, Callable]]) -> RuleModule:
    """Wrap a ``create`` function as an in-memory rule module."""
    return RuleModule(name=name, create=create)


def recording_rule(name: str, keys: list[str], calls: list[tuple]) -> RuleModule:
    """A rule that appends ``(rule, key, node)`` to ``calls`` for every callback it receives."""

    def create(context):
        def make(key):
            return lambda node: calls.append((name, key, node))

        return {key: make(key) for key in keys}

    return rule_module(name, create)


def make_rule_table(*modules: RuleModule) -> RuleTable:
    return build_rule_table(modules)


def make_environment(rules: Any = None, **options: Any) -> Environment:
    """Create an environment with both extensions and the given ``lint_rules``."""
    environment = Environment(extensions=[LintExtension, InspectExtension], **options)
    environment.lint_rules = rules
    return environment


def lint_text(
    source: str, rule_table: RuleTable, filename: str = "test.html", app: str | None = None
) -> LintReport:
    """Parse a whole template and lint it with ``rule_table``."""
    environment = Environment()
    tree = environment.parse(source)
    source_index = index_source(environment, source)
    return lint_tree(tree, rule_table, source_index, filename=filename, app=app)


def names_of(calls: list[tuple]) -> list[str]:
    """Names of the Name nodes among recorded calls, in call order."""
    return [node.name for _, _, node in calls if isinstance(node, nodes.Name)]


@pytest.fixture(autouse=True)
def default_settings():
    """Run every test against default settings and restore the previous ones afterwards."""
    original_settings = get_settings()
    set_settings(LintSettings())
    yield
    set_settings(original_settings)
