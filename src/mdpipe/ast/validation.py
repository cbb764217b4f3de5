#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdpipe/ast/validation.py
"""Structural validation of syntax trees.

Block containers may only hold block nodes and phrasing containers may only
hold phrasing nodes. A tree that breaks this rule was produced by a defective
parser or transform, so validation raises instead of repairing it.

"""

from __future__ import annotations

from mdpipe.ast.nodes import (
    BLOCK_NODE_TYPES,
    INLINE_CONTAINER_TYPES,
    INLINE_NODE_TYPES,
    Alert,
    BlockQuote,
    Details,
    Document,
    FootnoteDefinition,
    Heading,
    List,
    ListItem,
    Node,
    Paragraph,
    Table,
    TableCell,
    TableRow,
)
from mdpipe.ast.transforms import iter_nodes
from mdpipe.exceptions import InvariantViolationError

_BLOCK_CONTAINERS = (Document, BlockQuote, ListItem, Details, Alert, FootnoteDefinition)
_PHRASING_CONTAINERS = (Heading, Paragraph, TableCell) + INLINE_CONTAINER_TYPES


def _check(children: list[Node], allowed: tuple[type[Node], ...], context: str, category: str) -> None:
    for index, child in enumerate(children):
        if not isinstance(child, allowed):
            raise InvariantViolationError(
                f"{context} can only contain {category} nodes, but child {index} is {type(child).__name__}",
                node_kind=type(child).__name__,
            )


def validate_tree(root: Node) -> None:
    """Check block/phrasing containment for every node under ``root``.

    Parameters
    ----------
    root : Node
        Tree to validate, usually a Document

    Raises
    ------
    InvariantViolationError
        If any container holds a child of the wrong category

    """
    for node in iter_nodes(root):
        context = type(node).__name__
        if isinstance(node, _BLOCK_CONTAINERS):
            _check(node.children, BLOCK_NODE_TYPES, context, "block")
        elif isinstance(node, _PHRASING_CONTAINERS):
            _check(node.content, INLINE_NODE_TYPES, context, "phrasing")  # type: ignore[attr-defined]
        elif isinstance(node, List):
            _check(list(node.items), (ListItem,), context, "list item")
        elif isinstance(node, Table):
            rows: list[Node] = ([node.header] if node.header else []) + list(node.rows)
            _check(rows, (TableRow,), context, "table row")
        elif isinstance(node, TableRow):
            _check(list(node.cells), (TableCell,), context, "table cell")
