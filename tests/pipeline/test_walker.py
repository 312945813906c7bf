"""Tests for tree traversal and callback dispatch."""

import pytest
from jinja2 import Environment, nodes

from templint.pipeline.context import LintDocument
from templint.pipeline.lint import lint_tree
from templint.pipeline.rules import Phase, RuleExecutionError, build_rule_table
from templint.pipeline.source_index import index_source
from templint.pipeline.walker import TreeWalker, walk_children
from tests.conftest import make_rule_table, names_of, recording_rule, rule_module


def walk(source: str, *modules) -> int:
    """Walk a parsed template with the given rule modules and return the node count."""
    environment = Environment()
    tree = environment.parse(source)
    table = make_rule_table(*modules)
    document = LintDocument(
        filename="t.html", source_index=index_source(environment, source), root=tree
    )
    with table.session.open(document):
        return TreeWalker(table).walk(tree)


class TestTraversal:
    """Tests for visit order."""

    def test_enter_and_exit_once_per_node(self):
        calls: list[tuple] = []
        count = walk("{% if a %}{{ b + 1 }}{% endif %}", recording_rule("r", ["Node", "Node:exit"], calls))

        entered = [node for _, key, node in calls if key == "Node"]
        exited = [node for _, key, node in calls if key == "Node:exit"]
        assert len(entered) == count
        assert len(exited) == count
        assert {id(n) for n in entered} == {id(n) for n in exited}

    def test_exit_after_descendants(self):
        calls: list[tuple] = []
        walk("{{ a + b }}", recording_rule("r", ["Node", "Node:exit"], calls))

        events = [(key, type(node).__name__) for _, key, node in calls]
        assert events == [
            ("Node", "Template"),
            ("Node", "Output"),
            ("Node", "Add"),
            ("Node", "Name"),
            ("Node:exit", "Name"),
            ("Node", "Name"),
            ("Node:exit", "Name"),
            ("Node:exit", "Add"),
            ("Node:exit", "Output"),
            ("Node:exit", "Template"),
        ]

    def test_exit_fires_on_leaves(self):
        calls: list[tuple] = []
        walk("{{ x }}", recording_rule("r", ["Symbol:exit"], calls))
        assert names_of(calls) == ["x"]

    def test_if_elif_else_order(self):
        calls: list[tuple] = []
        walk(
            "{% if x %}{{ y }}{% elif z %}{{ w }}{% else %}{{ v }}{% endif %}",
            recording_rule("r", ["Symbol"], calls),
        )
        assert names_of(calls) == ["x", "y", "z", "w", "v"]

    def test_inline_if_order(self):
        calls: list[tuple] = []
        walk("{{ a if b else c }}", recording_rule("r", ["Symbol"], calls))
        assert names_of(calls) == ["b", "a", "c"]

    def test_pair_key_not_walked(self):
        calls: list[tuple] = []
        walk("{{ {'k': v} }}", recording_rule("r", ["Value"], calls))
        values = [node for _, _, node in calls]
        assert [type(n).__name__ for n in values] == ["Name"]
        assert values[0].name == "v"

    def test_call_callee_not_walked(self):
        calls: list[tuple] = []
        walk("{{ f(a, b=c) }}", recording_rule("r", ["Symbol"], calls))
        assert names_of(calls) == ["a", "c"]

    def test_macro_arguments_defaults_then_body(self):
        calls: list[tuple] = []
        walk("{% macro m(a, b=d) %}{{ e }}{% endmacro %}", recording_rule("r", ["Symbol"], calls))
        assert names_of(calls) == ["a", "b", "d", "e"]

    def test_for_loop(self):
        calls: list[tuple] = []
        walk("{% for i in items %}{{ i }}{% endfor %}", recording_rule("r", ["Symbol"], calls))
        assert names_of(calls) == ["i", "items", "i"]

    def test_empty_template_visits_root(self):
        calls: list[tuple] = []
        assert walk("", recording_rule("r", ["Root", "Root:exit"], calls)) == 1
        assert [key for _, key, _ in calls] == ["Root", "Root:exit"]


class TestDispatchOrder:
    """Tests for the order callbacks fire in for a single node."""

    def test_category_order_before_registration_order(self):
        calls: list[tuple] = []
        walk(
            "{{ 1 }}",
            recording_rule("first", ["Literal"], calls),
            recording_rule("second", ["Node", "Value"], calls),
        )
        const_calls = [(rule, key) for rule, key, node in calls if isinstance(node, nodes.Const)]
        assert const_calls == [("second", "Node"), ("second", "Value"), ("first", "Literal")]

    def test_registration_order_within_category(self):
        calls: list[tuple] = []
        walk(
            "{{ x }}",
            recording_rule("b", ["Symbol"], calls),
            recording_rule("a", ["Symbol"], calls),
        )
        assert [rule for rule, _, _ in calls] == ["b", "a"]

    def test_rule_table_categories_drive_dispatch(self):
        calls: list[tuple] = []
        categories = {"Names": (nodes.Name,), "Anything": (nodes.Node,)}
        table = build_rule_table([recording_rule("r", ["Anything", "Names"], calls)], categories)
        environment = Environment()
        tree = environment.parse("{{ x }}")
        document = LintDocument(
            filename="t.html", source_index=index_source(environment, "{{ x }}"), root=tree
        )

        with table.session.open(document):
            TreeWalker(table).walk(tree)

        name_keys = [key for _, key, node in calls if isinstance(node, nodes.Name)]
        assert name_keys == ["Names", "Anything"]
        assert len(calls) == 4


class TestWalkChildren:
    """Tests for the child accessors."""

    def test_default_uses_fields(self):
        tree = Environment().parse("{% set x = 1 %}")
        assign = tree.body[0]
        assert [type(c).__name__ for c in walk_children(assign)] == ["Name", "Const"]

    def test_if_without_branches(self):
        tree = Environment().parse("{% if x %}{% endif %}")
        assert [type(c).__name__ for c in walk_children(tree.body[0])] == ["Name"]


class TestCallbackErrors:
    """Tests for failures raised by rule callbacks."""

    def test_error_propagates_and_stops_traversal(self):
        calls: list[tuple] = []

        def create(context):
            def boom(node):
                raise ValueError("bad node")

            return {"Symbol": boom}

        with pytest.raises(RuleExecutionError) as excinfo:
            walk(
                "{{ a }}\n{{ b }}",
                rule_module("explodes", create),
                recording_rule("recorder", ["Symbol"], calls),
            )

        error = excinfo.value
        assert error.rule_name == "explodes"
        assert error.category == "Symbol"
        assert error.phase is Phase.ENTER
        assert error.lineno == 1
        assert isinstance(error.__cause__, ValueError)
        assert calls == []

    def test_report_not_produced_on_error(self):
        def create(context):
            def boom(node):
                context.warn("before failing", node)
                raise RuntimeError("fail")

            return {"Set": boom}

        environment = Environment()
        source = "{% set x = 1 %}"
        table = make_rule_table(rule_module("r", create))
        with pytest.raises(RuleExecutionError):
            lint_tree(environment.parse(source), table, index_source(environment, source))
        assert not table.session.active
