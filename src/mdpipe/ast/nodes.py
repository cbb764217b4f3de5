#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdpipe/ast/nodes.py
"""Syntax tree node classes for parsed markdown.

This module defines the intermediate syntax tree produced by both parsers and
consumed by the serializer and the tree converters. Each node represents a
structural or inline element in the markdown source.

Node Hierarchy
--------------
All nodes inherit from the base Node class and support the visitor pattern.

Block-level nodes represent structural document elements:
    - Document, Heading, Paragraph, CodeBlock, MathBlock, BlockQuote
    - List, ListItem, Table, TableRow, TableCell
    - ThematicBreak, HTMLBlock, Frontmatter
    - Details, Alert, FootnoteDefinition, LinkDefinition

Inline (phrasing) nodes represent text and formatting:
    - Text, Emphasis, Strong, Strikethrough, Code
    - Link, Image, LineBreak, HTMLInline
    - MathInline, FootnoteReference, WikiLink, WikiEmbed
    - Highlight, Underline, Superscript, Subscript

Block containers keep their children in ``children``; inline containers keep
theirs in ``content``. Soft line breaks are represented as a newline inside a
Text node, so only hard breaks appear as LineBreak nodes.

"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import Any, Optional

from mdpipe.constants import ALERT_KINDS, DEFAULT_DETAILS_SUMMARY, Alignment


class Node(ABC):
    """Base class for all syntax tree nodes.

    All nodes inherit from this base class and support the visitor pattern
    for traversal, transformation, and serialization.

    Parameters
    ----------
    metadata : dict, default = empty dict
        Arbitrary metadata associated with this node

    """

    metadata: dict[str, Any]

    @abstractmethod
    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this node.

        Parameters
        ----------
        visitor : Any
            A visitor object with visit_* methods

        Returns
        -------
        Any
            Result from the visitor's processing

        """
        pass


# ============================================================================
# Block-level Nodes
# ============================================================================


@dataclass
class Document(Node):
    """Root node containing the block-level children of a parsed document.

    Parameters
    ----------
    children : list of Node, default = empty list
        Block-level nodes in the document
    metadata : dict, default = empty dict
        Document metadata

    """

    children: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this document.

        Parameters
        ----------
        visitor : Any
            A visitor object with visit_document method

        Returns
        -------
        Any
            Result from visitor.visit_document(self)

        """
        return visitor.visit_document(self)


@dataclass
class Heading(Node):
    """Heading node (h1-h6).

    Parameters
    ----------
    level : int
        Heading level (1-6, where 1 is most important)
    content : list of Node, default = empty list
        Inline nodes representing heading text
    metadata : dict, default = empty dict
        Heading metadata

    """

    level: int
    content: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate heading level is between 1 and 6."""
        if not 1 <= self.level <= 6:
            raise ValueError(f"Heading level must be 1-6, got {self.level}")

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this heading."""
        return visitor.visit_heading(self)


@dataclass
class Paragraph(Node):
    """Paragraph node containing inline content.

    Parameters
    ----------
    content : list of Node, default = empty list
        Inline nodes representing paragraph content
    metadata : dict, default = empty dict
        Paragraph metadata

    """

    content: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this paragraph."""
        return visitor.visit_paragraph(self)


@dataclass
class CodeBlock(Node):
    """Code block node with optional language specification.

    Both fenced and indented code blocks produce this node. The content never
    includes the trailing newline before the closing fence.

    Parameters
    ----------
    content : str
        Literal code content
    language : str or None, default = None
        Language from the fence info string (first word)
    metadata : dict, default = empty dict
        Code block metadata

    """

    content: str
    language: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this code block."""
        return visitor.visit_code_block(self)


@dataclass
class MathBlock(Node):
    """Display math block (``$$ ... $$``).

    Parameters
    ----------
    content : str
        LaTeX source of the math block
    metadata : dict, default = empty dict
        Math block metadata

    """

    content: str
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this math block."""
        return visitor.visit_math_block(self)


@dataclass
class BlockQuote(Node):
    """Block quote node containing block-level content.

    Parameters
    ----------
    children : list of Node, default = empty list
        Block-level nodes in the quote
    metadata : dict, default = empty dict
        Block quote metadata

    """

    children: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this block quote."""
        return visitor.visit_block_quote(self)


@dataclass
class List(Node):
    """Ordered or unordered list.

    Parameters
    ----------
    ordered : bool, default = False
        Whether the list is numbered
    items : list of ListItem, default = empty list
        The list items
    start : int, default = 1
        Starting number for ordered lists
    tight : bool, default = True
        Tight lists have no blank lines between items
    metadata : dict, default = empty dict
        List metadata

    """

    ordered: bool = False
    items: list[ListItem] = field(default_factory=list)
    start: int = 1
    tight: bool = True
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this list."""
        return visitor.visit_list(self)


@dataclass
class ListItem(Node):
    """List item node containing block content.

    Parameters
    ----------
    children : list of Node, default = empty list
        Block-level nodes in the list item
    checked : bool or None, default = None
        Task state: True for ``[x]``, False for ``[ ]``, None for plain items
    metadata : dict, default = empty dict
        List item metadata

    """

    children: list[Node] = field(default_factory=list)
    checked: Optional[bool] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this list item."""
        return visitor.visit_list_item(self)


@dataclass
class ThematicBreak(Node):
    """Thematic break (horizontal rule)."""

    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this thematic break."""
        return visitor.visit_thematic_break(self)


@dataclass
class Table(Node):
    """Table node with header row and per-column alignment.

    Parameters
    ----------
    header : TableRow or None, default = None
        Header row
    rows : list of TableRow, default = empty list
        Body rows
    alignments : list, default = empty list
        Alignment for each column ("left", "center", "right" or None)
    metadata : dict, default = empty dict
        Table metadata

    """

    header: Optional[TableRow] = None
    rows: list[TableRow] = field(default_factory=list)
    alignments: list[Optional[Alignment]] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this table."""
        return visitor.visit_table(self)


@dataclass
class TableRow(Node):
    """Table row containing cells."""

    cells: list[TableCell] = field(default_factory=list)
    is_header: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this table row."""
        return visitor.visit_table_row(self)


@dataclass
class TableCell(Node):
    """Table cell with inline content and the column alignment."""

    content: list[Node] = field(default_factory=list)
    alignment: Optional[Alignment] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this table cell."""
        return visitor.visit_table_cell(self)


@dataclass
class HTMLBlock(Node):
    """Raw HTML block, kept verbatim.

    Parameters
    ----------
    content : str
        Raw HTML without the trailing newline
    metadata : dict, default = empty dict
        HTML block metadata

    """

    content: str
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this HTML block."""
        return visitor.visit_html_block(self)


@dataclass
class Frontmatter(Node):
    """YAML frontmatter block delimited by ``---`` lines.

    Parameters
    ----------
    content : str
        Raw YAML between the fences
    metadata : dict, default = empty dict
        Frontmatter metadata

    """

    content: str
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this frontmatter block."""
        return visitor.visit_frontmatter(self)


@dataclass
class Details(Node):
    """Collapsible ``<details>`` block.

    Parameters
    ----------
    summary : str, default = "Details"
        Plain-text summary line
    children : list of Node, default = empty list
        Block-level body
    open : bool, default = False
        Whether the block is expanded by default
    metadata : dict, default = empty dict
        Details metadata

    """

    summary: str = DEFAULT_DETAILS_SUMMARY
    children: list[Node] = field(default_factory=list)
    open: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this details block."""
        return visitor.visit_details(self)


@dataclass
class Alert(Node):
    """GitHub-style alert (``> [!NOTE]``).

    Parameters
    ----------
    kind : str
        One of NOTE, TIP, IMPORTANT, WARNING, CAUTION
    children : list of Node, default = empty list
        Block-level body
    metadata : dict, default = empty dict
        Alert metadata

    """

    kind: str
    children: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate the alert kind."""
        if self.kind not in ALERT_KINDS:
            raise ValueError(f"Alert kind must be one of {ALERT_KINDS}, got {self.kind!r}")

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this alert."""
        return visitor.visit_alert(self)


@dataclass
class FootnoteDefinition(Node):
    """Footnote definition (``[^label]: text``).

    Parameters
    ----------
    identifier : str
        Footnote label as written in the source
    children : list of Node, default = empty list
        Block-level footnote body
    metadata : dict, default = empty dict
        Footnote metadata

    """

    identifier: str
    children: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this footnote definition."""
        return visitor.visit_footnote_definition(self)


@dataclass
class LinkDefinition(Node):
    """Link reference definition (``[label]: url "title"``).

    Reference links are resolved while parsing, but the definition itself is
    kept in the tree so it survives a round trip.

    Parameters
    ----------
    identifier : str
        Normalized (case-folded, whitespace-collapsed) label
    url : str
        Link destination
    title : str or None, default = None
        Optional link title
    label : str or None, default = None
        Label exactly as written in the source
    metadata : dict, default = empty dict
        Definition metadata

    """

    identifier: str
    url: str
    title: Optional[str] = None
    label: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this link definition."""
        return visitor.visit_link_definition(self)


# ============================================================================
# Inline Nodes
# ============================================================================


@dataclass
class Text(Node):
    """Plain text content.

    Parameters
    ----------
    content : str
        The text content; may contain newlines from soft breaks
    metadata : dict, default = empty dict
        Text metadata

    """

    content: str
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this text."""
        return visitor.visit_text(self)


@dataclass
class Emphasis(Node):
    """Emphasized (italic) text."""

    content: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this emphasis."""
        return visitor.visit_emphasis(self)


@dataclass
class Strong(Node):
    """Strong (bold) text."""

    content: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this strong text."""
        return visitor.visit_strong(self)


@dataclass
class Strikethrough(Node):
    """Strikethrough text (``~~text~~``)."""

    content: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this strikethrough."""
        return visitor.visit_strikethrough(self)


@dataclass
class Code(Node):
    """Inline code span.

    Parameters
    ----------
    content : str
        Literal code text
    metadata : dict, default = empty dict
        Code metadata

    """

    content: str
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this code span."""
        return visitor.visit_code(self)


@dataclass
class Link(Node):
    """Hyperlink with inline content.

    Parameters
    ----------
    url : str
        Link destination
    content : list of Node, default = empty list
        Inline nodes forming the link text
    title : str or None, default = None
        Optional link title
    metadata : dict, default = empty dict
        Link metadata

    """

    url: str
    content: list[Node] = field(default_factory=list)
    title: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this link."""
        return visitor.visit_link(self)


@dataclass
class Image(Node):
    """Inline image.

    Parameters
    ----------
    url : str
        Image source
    alt_text : str, default = ""
        Plain-text alternative description
    title : str or None, default = None
        Optional image title
    metadata : dict, default = empty dict
        Image metadata

    """

    url: str
    alt_text: str = ""
    title: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this image."""
        return visitor.visit_image(self)


@dataclass
class LineBreak(Node):
    """Hard line break.

    Parameters
    ----------
    soft : bool, default = False
        Kept for API compatibility with hosts that emit soft breaks as nodes;
        the parsers only produce hard breaks
    metadata : dict, default = empty dict
        Line break metadata

    """

    soft: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this line break."""
        return visitor.visit_line_break(self)


@dataclass
class HTMLInline(Node):
    """Raw inline HTML tag or comment."""

    content: str
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this inline HTML."""
        return visitor.visit_html_inline(self)


@dataclass
class MathInline(Node):
    """Inline math (``$...$``).

    Parameters
    ----------
    content : str
        LaTeX source without the dollar delimiters
    metadata : dict, default = empty dict
        Math metadata

    """

    content: str
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this inline math."""
        return visitor.visit_math_inline(self)


@dataclass
class FootnoteReference(Node):
    """Footnote reference (``[^label]``)."""

    identifier: str
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this footnote reference."""
        return visitor.visit_footnote_reference(self)


@dataclass
class WikiLink(Node):
    """Wiki-style link (``[[target]]`` or ``[[target|alias]]``).

    Parameters
    ----------
    target : str
        Page the link points to
    alias : str or None, default = None
        Optional display text
    metadata : dict, default = empty dict
        Wiki link metadata

    """

    target: str
    alias: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this wiki link."""
        return visitor.visit_wiki_link(self)


@dataclass
class WikiEmbed(Node):
    """Wiki-style embed (``![[target]]``)."""

    target: str
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this wiki embed."""
        return visitor.visit_wiki_embed(self)


# ============================================================================
# Custom Mark Nodes
# ============================================================================


@dataclass
class Highlight(Node):
    """Highlighted text (``==text==``)."""

    content: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this highlight."""
        return visitor.visit_highlight(self)


@dataclass
class Underline(Node):
    """Underlined text (``++text++``)."""

    content: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this underline."""
        return visitor.visit_underline(self)


@dataclass
class Superscript(Node):
    """Superscript text (``^text^``)."""

    content: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this superscript."""
        return visitor.visit_superscript(self)


@dataclass
class Subscript(Node):
    """Subscript text (``~text~``)."""

    content: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this subscript."""
        return visitor.visit_subscript(self)


# ============================================================================
# Node categories and traversal helpers
# ============================================================================

BLOCK_NODE_TYPES: tuple[type[Node], ...] = (
    Heading,
    Paragraph,
    CodeBlock,
    MathBlock,
    BlockQuote,
    List,
    ThematicBreak,
    Table,
    HTMLBlock,
    Frontmatter,
    Details,
    Alert,
    FootnoteDefinition,
    LinkDefinition,
)

INLINE_NODE_TYPES: tuple[type[Node], ...] = (
    Text,
    Emphasis,
    Strong,
    Strikethrough,
    Code,
    Link,
    Image,
    LineBreak,
    HTMLInline,
    MathInline,
    FootnoteReference,
    WikiLink,
    WikiEmbed,
    Highlight,
    Underline,
    Superscript,
    Subscript,
)

# Inline wrappers whose ``content`` holds phrasing children
INLINE_CONTAINER_TYPES: tuple[type[Node], ...] = (
    Emphasis,
    Strong,
    Strikethrough,
    Link,
    Highlight,
    Underline,
    Superscript,
    Subscript,
)


def get_node_children(node: Node) -> list[Node]:
    """Get all child nodes from a node.

    Parameters
    ----------
    node : Node
        The node to get children from

    Returns
    -------
    list of Node
        List of child nodes (empty list if node has no children)

    """
    if isinstance(node, (Document, BlockQuote, ListItem, Details, Alert, FootnoteDefinition)):
        return list(node.children)

    if isinstance(node, (Heading, Paragraph, TableCell) + INLINE_CONTAINER_TYPES):
        return list(node.content)  # type: ignore[attr-defined]

    if isinstance(node, List):
        return list(node.items)

    if isinstance(node, Table):
        children: list[Node] = []
        if node.header:
            children.append(node.header)
        children.extend(node.rows)
        return children

    if isinstance(node, TableRow):
        return list(node.cells)

    return []


def replace_node_children(node: Node, new_children: list[Node]) -> Node:
    """Create a copy of a node with replaced children.

    Parameters
    ----------
    node : Node
        The node to copy
    new_children : list of Node
        New children to use in the copy

    Returns
    -------
    Node
        New node of the same type with its children replaced

    Raises
    ------
    ValueError
        If the node type does not hold children

    """
    if isinstance(node, (Document, BlockQuote, ListItem, Details, Alert, FootnoteDefinition)):
        return replace(node, children=new_children, metadata=node.metadata.copy())

    if isinstance(node, (Heading, Paragraph, TableCell) + INLINE_CONTAINER_TYPES):
        return replace(node, content=new_children, metadata=node.metadata.copy())

    if isinstance(node, List):
        return replace(node, items=new_children, metadata=node.metadata.copy())

    if isinstance(node, Table):
        header = None
        rows: list[TableRow] = []
        for child in new_children:
            if not isinstance(child, TableRow):
                raise ValueError(f"Table children must be TableRow, got {type(child).__name__}")
            if child.is_header and header is None:
                header = child
            else:
                rows.append(child)
        return replace(node, header=header, rows=rows, metadata=node.metadata.copy())

    if isinstance(node, TableRow):
        return replace(node, cells=new_children, metadata=node.metadata.copy())

    raise ValueError(f"{type(node).__name__} does not have children")
