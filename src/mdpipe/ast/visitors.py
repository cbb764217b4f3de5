#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdpipe/ast/visitors.py
"""Visitor pattern implementation for syntax tree traversal.

This module provides the abstract visitor base class used by the serializer,
the tree converters, and the grammar extension transforms. Every node kind
has an abstract ``visit_*`` method, so a visitor that forgets to handle a
kind fails at instantiation time instead of silently skipping nodes.

"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from mdpipe.ast.nodes import (
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
)


class NodeVisitor(ABC):
    """Abstract base class for syntax tree visitors.

    Subclasses implement a ``visit_*`` method for each node type. Nodes
    dispatch to these methods through ``node.accept(visitor)``.

    Examples
    --------
    Collecting every heading level:

        >>> class HeadingLevels(NodeTransformer):
        ...     def __init__(self):
        ...         self.levels = []
        ...
        ...     def visit_heading(self, node):
        ...         self.levels.append(node.level)
        ...         return node

    """

    # Block-level nodes

    @abstractmethod
    def visit_document(self, node: Document) -> Any:
        """Visit a Document node.

        Parameters
        ----------
        node : Document
            The document node to visit

        Returns
        -------
        Any
            Result of processing this node

        """
        pass

    @abstractmethod
    def visit_heading(self, node: Heading) -> Any:
        """Visit a Heading node."""
        pass

    @abstractmethod
    def visit_paragraph(self, node: Paragraph) -> Any:
        """Visit a Paragraph node."""
        pass

    @abstractmethod
    def visit_code_block(self, node: CodeBlock) -> Any:
        """Visit a CodeBlock node."""
        pass

    @abstractmethod
    def visit_math_block(self, node: MathBlock) -> Any:
        """Visit a MathBlock node."""
        pass

    @abstractmethod
    def visit_block_quote(self, node: BlockQuote) -> Any:
        """Visit a BlockQuote node."""
        pass

    @abstractmethod
    def visit_list(self, node: List) -> Any:
        """Visit a List node."""
        pass

    @abstractmethod
    def visit_list_item(self, node: ListItem) -> Any:
        """Visit a ListItem node."""
        pass

    @abstractmethod
    def visit_thematic_break(self, node: ThematicBreak) -> Any:
        """Visit a ThematicBreak node."""
        pass

    @abstractmethod
    def visit_table(self, node: Table) -> Any:
        """Visit a Table node."""
        pass

    @abstractmethod
    def visit_table_row(self, node: TableRow) -> Any:
        """Visit a TableRow node."""
        pass

    @abstractmethod
    def visit_table_cell(self, node: TableCell) -> Any:
        """Visit a TableCell node."""
        pass

    @abstractmethod
    def visit_html_block(self, node: HTMLBlock) -> Any:
        """Visit an HTMLBlock node."""
        pass

    @abstractmethod
    def visit_frontmatter(self, node: Frontmatter) -> Any:
        """Visit a Frontmatter node."""
        pass

    @abstractmethod
    def visit_details(self, node: Details) -> Any:
        """Visit a Details node."""
        pass

    @abstractmethod
    def visit_alert(self, node: Alert) -> Any:
        """Visit an Alert node."""
        pass

    @abstractmethod
    def visit_footnote_definition(self, node: FootnoteDefinition) -> Any:
        """Visit a FootnoteDefinition node."""
        pass

    @abstractmethod
    def visit_link_definition(self, node: LinkDefinition) -> Any:
        """Visit a LinkDefinition node."""
        pass

    # Inline nodes

    @abstractmethod
    def visit_text(self, node: Text) -> Any:
        """Visit a Text node."""
        pass

    @abstractmethod
    def visit_emphasis(self, node: Emphasis) -> Any:
        """Visit an Emphasis node."""
        pass

    @abstractmethod
    def visit_strong(self, node: Strong) -> Any:
        """Visit a Strong node."""
        pass

    @abstractmethod
    def visit_strikethrough(self, node: Strikethrough) -> Any:
        """Visit a Strikethrough node."""
        pass

    @abstractmethod
    def visit_code(self, node: Code) -> Any:
        """Visit a Code node."""
        pass

    @abstractmethod
    def visit_link(self, node: Link) -> Any:
        """Visit a Link node."""
        pass

    @abstractmethod
    def visit_image(self, node: Image) -> Any:
        """Visit an Image node."""
        pass

    @abstractmethod
    def visit_line_break(self, node: LineBreak) -> Any:
        """Visit a LineBreak node."""
        pass

    @abstractmethod
    def visit_html_inline(self, node: HTMLInline) -> Any:
        """Visit an HTMLInline node."""
        pass

    @abstractmethod
    def visit_math_inline(self, node: MathInline) -> Any:
        """Visit a MathInline node."""
        pass

    @abstractmethod
    def visit_footnote_reference(self, node: FootnoteReference) -> Any:
        """Visit a FootnoteReference node."""
        pass

    @abstractmethod
    def visit_wiki_link(self, node: WikiLink) -> Any:
        """Visit a WikiLink node."""
        pass

    @abstractmethod
    def visit_wiki_embed(self, node: WikiEmbed) -> Any:
        """Visit a WikiEmbed node."""
        pass

    @abstractmethod
    def visit_highlight(self, node: Highlight) -> Any:
        """Visit a Highlight node."""
        pass

    @abstractmethod
    def visit_underline(self, node: Underline) -> Any:
        """Visit an Underline node."""
        pass

    @abstractmethod
    def visit_superscript(self, node: Superscript) -> Any:
        """Visit a Superscript node."""
        pass

    @abstractmethod
    def visit_subscript(self, node: Subscript) -> Any:
        """Visit a Subscript node."""
        pass
