#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdpipe/ast/__init__.py
"""Syntax tree module for parsed markdown.

The syntax tree is the intermediate representation shared by the fast and
full parsers, the grammar extensions, the serializer, and the converters to
and from the document tree.

- nodes: node classes representing markdown structure
- visitors: visitor base class for traversal
- transforms: transformer base class and traversal helpers
- validation: block/phrasing containment checks

Examples
--------
    >>> from mdpipe.ast import Document, Heading, Paragraph, Text
    >>> from mdpipe.renderers.markdown import MarkdownSerializer
    >>> doc = Document(children=[
    ...     Heading(level=1, content=[Text(content="Title")]),
    ...     Paragraph(content=[Text(content="Hello world")]),
    ... ])
    >>> MarkdownSerializer().render_to_string(doc)
    '# Title\\n\\nHello world'

"""

from __future__ import annotations

from mdpipe.ast.nodes import (
    BLOCK_NODE_TYPES,
    INLINE_CONTAINER_TYPES,
    INLINE_NODE_TYPES,
    Alert,
    BlockQuote,
    Code,
    CodeBlock,
    Details,
    Document,
    Emphasis,
    FootnoteDefinition,
    FootnoteReference,
    Frontmatter,
    Heading,
    Highlight,
    HTMLBlock,
    HTMLInline,
    Image,
    LineBreak,
    Link,
    LinkDefinition,
    List,
    ListItem,
    MathBlock,
    MathInline,
    Node,
    Paragraph,
    Strikethrough,
    Strong,
    Subscript,
    Superscript,
    Table,
    TableCell,
    TableRow,
    Text,
    ThematicBreak,
    Underline,
    WikiEmbed,
    WikiLink,
    get_node_children,
    replace_node_children,
)
from mdpipe.ast.transforms import NodeTransformer, TextTransformer, count_nodes, iter_nodes, merge_adjacent_text
from mdpipe.ast.validation import validate_tree
from mdpipe.ast.visitors import NodeVisitor

__all__ = [
    "BLOCK_NODE_TYPES",
    "INLINE_CONTAINER_TYPES",
    "INLINE_NODE_TYPES",
    "Alert",
    "BlockQuote",
    "Code",
    "CodeBlock",
    "Details",
    "Document",
    "Emphasis",
    "FootnoteDefinition",
    "FootnoteReference",
    "Frontmatter",
    "Heading",
    "Highlight",
    "HTMLBlock",
    "HTMLInline",
    "Image",
    "LineBreak",
    "Link",
    "LinkDefinition",
    "List",
    "ListItem",
    "MathBlock",
    "MathInline",
    "Node",
    "NodeTransformer",
    "NodeVisitor",
    "Paragraph",
    "Strikethrough",
    "Strong",
    "Subscript",
    "Superscript",
    "Table",
    "TableCell",
    "TableRow",
    "Text",
    "TextTransformer",
    "ThematicBreak",
    "Underline",
    "WikiEmbed",
    "WikiLink",
    "count_nodes",
    "get_node_children",
    "iter_nodes",
    "merge_adjacent_text",
    "replace_node_children",
    "validate_tree",
]
