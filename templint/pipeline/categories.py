"""Node categories and classification of Jinja2 nodes.

A node belongs to every category whose classes it is an instance of, so a
single node usually matches several categories at once. A constant, for
example, is a ``Node``, a ``Value`` and a ``Literal``.
"""

from collections.abc import Iterator, Mapping
from functools import lru_cache
from types import MappingProxyType
from typing import Any

from jinja2 import nodes

CategoryTable = Mapping[str, tuple[type[nodes.Node], ...]]

# Order matters: callbacks for a node fire in this category order.
CATEGORY_TABLE: CategoryTable = MappingProxyType(
    {
        "Node": (nodes.Node,),
        "Root": (nodes.Template,),
        "NodeList": (nodes.Template, nodes.Output, nodes.Tuple, nodes.List, nodes.Dict),
        "Value": (nodes.Const, nodes.TemplateData, nodes.Name, nodes.NSRef),
        "Literal": (nodes.Const, nodes.TemplateData),
        "Symbol": (nodes.Name, nodes.NSRef),
        "Group": (nodes.Tuple,),
        "Array": (nodes.List,),
        "Pair": (nodes.Pair,),
        "Dict": (nodes.Dict,),
        "Output": (nodes.Output,),
        "TemplateData": (nodes.TemplateData,),
        "If": (nodes.If,),
        "InlineIf": (nodes.CondExpr,),
        "For": (nodes.For,),
        "Macro": (nodes.Macro, nodes.CallBlock),
        "Caller": (nodes.CallBlock,),
        "Import": (nodes.Import,),
        "FromImport": (nodes.FromImport,),
        "FunCall": (nodes.Call, nodes.Filter),
        "Filter": (nodes.Filter, nodes.FilterBlock),
        "KeywordArgs": (nodes.Keyword,),
        "Block": (nodes.Block,),
        "Extends": (nodes.Extends,),
        "Include": (nodes.Include,),
        "Set": (nodes.Assign, nodes.AssignBlock),
        "With": (nodes.With,),
        "LookupVal": (nodes.Getattr, nodes.Getitem),
        "BinOp": (nodes.BinExpr,),
        "Or": (nodes.Or,),
        "And": (nodes.And,),
        "Not": (nodes.Not,),
        "Add": (nodes.Add,),
        "Sub": (nodes.Sub,),
        "Mul": (nodes.Mul,),
        "Div": (nodes.Div,),
        "FloorDiv": (nodes.FloorDiv,),
        "Mod": (nodes.Mod,),
        "Pow": (nodes.Pow,),
        "Neg": (nodes.Neg,),
        "Pos": (nodes.Pos,),
        "Compare": (nodes.Compare,),
        "CompareOperand": (nodes.Operand,),
        "Test": (nodes.Test,),
        "Concat": (nodes.Concat,),
        "Slice": (nodes.Slice,),
        "CallExtension": (nodes.ExtensionAttribute,),
    }
)

ROOT_LABEL = "ROOT"


def is_category(name: str, table: CategoryTable = CATEGORY_TABLE) -> bool:
    """Check whether a name belongs to the category vocabulary."""
    return name in table


@lru_cache(maxsize=None)
def _categories_for_type(node_type: type, table_items: tuple) -> tuple[str, ...]:
    return tuple(name for name, classes in table_items if issubclass(node_type, classes))


def classify(node: Any, table: CategoryTable = CATEGORY_TABLE) -> tuple[str, ...]:
    """Return the categories a node satisfies, in vocabulary order.

    Membership only depends on the node's class, so the answer is computed
    once per class and table.
    """
    if node is None:
        return ()
    return _categories_for_type(type(node), tuple(table.items()))


def _iter_field_nodes(node: nodes.Node) -> Iterator[tuple[str, nodes.Node]]:
    for field, value in node.iter_fields():
        if isinstance(value, nodes.Node):
            yield field, value
        elif isinstance(value, list):
            for index, item in enumerate(value):
                if isinstance(item, nodes.Node):
                    yield f"{field}:{index}", item


def describe_tree(
    node: nodes.Node,
    table: CategoryTable = CATEGORY_TABLE,
    label: str = ROOT_LABEL,
) -> list[str]:
    """Describe how a tree is built, one line per node.

    Every field that holds a node is listed with the node's categories and
    indented under its parent::

        ROOT: Node,Root,NodeList
          body:0: Node,Extends
            template: Node,Value,Literal
    """
    lines: list[str] = []

    def describe(current: nodes.Node, name: str, indent: str) -> None:
        categories = classify(current, table)
        if not categories:
            return
        lines.append(f"{indent}{name}: {','.join(categories)}")
        for field, child in _iter_field_nodes(current):
            describe(child, field, indent + "  ")

    describe(node, label, "")
    return lines
