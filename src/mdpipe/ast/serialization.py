#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdpipe/ast/serialization.py
"""JSON serialization of syntax trees and document trees.

Both tree shapes are dataclasses, so serialization walks their fields.
Each node becomes a dictionary with a ``node_type`` key naming its class;
marks become ``{"kind": ..., "attrs": {...}}``.

Examples
--------
    >>> from mdpipe.ast import Document, Heading, Text
    >>> doc = Document(children=[Heading(level=1, content=[Text(content="Title")])])
    >>> ast_to_dict(doc)["children"][0]["node_type"]
    'Heading'

"""

from __future__ import annotations

import json
from dataclasses import fields, is_dataclass
from typing import Any

from mdpipe.ast.nodes import Node
from mdpipe.document import DocDocument, Mark

SCHEMA_VERSION = 1


def _serialize_value(value: Any) -> Any:
    if isinstance(value, Mark):
        return {"kind": value.kind.value, "attrs": dict(value.attrs)}
    if is_dataclass(value) and not isinstance(value, type):
        result: dict[str, Any] = {"node_type": type(value).__name__}
        for field in fields(value):
            result[field.name] = _serialize_value(getattr(value, field.name))
        return result
    if isinstance(value, (list, tuple)):
        return [_serialize_value(item) for item in value]
    if isinstance(value, dict):
        return {str(key): _serialize_value(item) for key, item in value.items()}
    return value


def ast_to_dict(node: Node) -> dict[str, Any]:
    """Convert a syntax tree node to a dictionary.

    Parameters
    ----------
    node : Node
        Node to convert, usually a Document

    Returns
    -------
    dict
        Dictionary with a ``node_type`` key and one key per node field

    Raises
    ------
    ValueError
        If ``node`` is not a syntax tree node

    """
    if not isinstance(node, Node):
        raise ValueError(f"Unknown node type for serialization: {type(node).__name__}")
    return _serialize_value(node)


def document_to_dict(document: DocDocument) -> dict[str, Any]:
    """Convert a document tree to a dictionary."""
    if not isinstance(document, DocDocument):
        raise ValueError(f"Expected DocDocument, got {type(document).__name__}")
    return _serialize_value(document)


def _to_json(data: dict[str, Any], indent: int | None) -> str:
    versioned = {"schema_version": SCHEMA_VERSION, **data}
    return json.dumps(versioned, indent=indent, ensure_ascii=False, default=str)


def ast_to_json(node: Node, indent: int | None = None) -> str:
    """Serialize a syntax tree to JSON with a ``schema_version`` field.

    Parameters
    ----------
    node : Node
        Node to serialize
    indent : int or None, default None
        Indentation; None for compact output

    Returns
    -------
    str
        JSON text; non-ASCII characters are kept as-is

    """
    return _to_json(ast_to_dict(node), indent)


def document_to_json(document: DocDocument, indent: int | None = None) -> str:
    """Serialize a document tree to JSON with a ``schema_version`` field."""
    return _to_json(document_to_dict(document), indent)
