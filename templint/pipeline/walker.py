"""Depth-first traversal of a template tree, dispatching rule callbacks."""

import logging
from collections.abc import Iterable, Iterator
from functools import singledispatch
from typing import Any

from jinja2 import nodes

from templint.pipeline.categories import classify
from templint.pipeline.rules.models import Phase, RuleTable

logger = logging.getLogger(__name__)


class TreeDepthError(RuntimeError):
    """Raised when a tree is nested too deeply to be walked."""

    pass


def _present(*items: Any) -> Iterator[nodes.Node]:
    for item in items:
        if isinstance(item, nodes.Node):
            yield item
        elif isinstance(item, Iterable) and not isinstance(item, (str, bytes)):
            yield from (child for child in item if isinstance(child, nodes.Node))


@singledispatch
def walk_children(node: nodes.Node) -> Iterator[nodes.Node]:
    """Yield the children of a node in traversal order."""
    return node.iter_child_nodes()


@walk_children.register
def _(node: nodes.If) -> Iterator[nodes.Node]:
    # condition, then-branch, else-branch
    return _present(node.test, node.body, node.elif_, node.else_)


@walk_children.register
def _(node: nodes.CondExpr) -> Iterator[nodes.Node]:
    return _present(node.test, node.expr1, node.expr2)


@walk_children.register
def _(node: nodes.Call) -> Iterator[nodes.Node]:
    # arguments only, the callee is not walked
    return _present(node.args, node.kwargs, node.dyn_args, node.dyn_kwargs)


@walk_children.register
def _(node: nodes.Pair) -> Iterator[nodes.Node]:
    return _present(node.value)


@walk_children.register
def _(node: nodes.Macro) -> Iterator[nodes.Node]:
    return _present(node.args, node.defaults, node.body)


class TreeWalker:
    """Walks a tree once, firing enter callbacks before and exit callbacks after children."""

    def __init__(self, rule_table: RuleTable):
        self.rule_table = rule_table
        self.categories = rule_table.categories
        self.visited = 0

    def walk(self, root: nodes.Node) -> int:
        """Walk the tree and return the number of nodes visited."""
        self.visited = 0
        try:
            self._visit(root)
        except RecursionError as e:
            raise TreeDepthError(
                f"Template tree is nested too deeply to lint (visited {self.visited} nodes)"
            ) from e
        logger.debug("Walked %d node(s)", self.visited)
        return self.visited

    def _visit(self, node: nodes.Node) -> None:
        node_categories = classify(node, self.categories)
        self.visited += 1
        self._dispatch(node, node_categories, Phase.ENTER)
        for child in walk_children(node):
            self._visit(child)
        self._dispatch(node, node_categories, Phase.EXIT)

    def _dispatch(self, node: nodes.Node, node_categories: tuple[str, ...], phase: Phase) -> None:
        for category in node_categories:
            for callback in self.rule_table.callbacks_for(category, phase):
                callback(node)
