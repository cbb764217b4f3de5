#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdpipe/ast/transforms.py
"""Syntax tree transformation utilities.

This module provides the NodeTransformer base class that every grammar
extension builds on, plus small helpers shared by the parsers and
converters.

A transformer's ``visit_*`` method may return:

- a node, which replaces the visited node;
- a list of nodes, which is spliced into the parent's children;
- None, which removes the node.

Examples
--------
Upper-case every text node:

    >>> class UppercaseTransformer(NodeTransformer):
    ...     def visit_text(self, node):
    ...         return Text(content=node.content.upper())
    >>>
    >>> new_doc = UppercaseTransformer().transform(doc)

"""

from __future__ import annotations

import copy
from typing import Iterator, Union

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
from mdpipe.ast.visitors import NodeVisitor

TransformResult = Union[Node, list[Node], None]


class NodeTransformer(NodeVisitor):
    """Base class for transforming syntax trees.

    Every ``visit_*`` method defaults to a generic copy that transforms the
    node's children. Subclasses override only the node kinds they rewrite.
    The input tree is never mutated.

    """

    def transform(self, node: Node) -> TransformResult:
        """Transform a node.

        Parameters
        ----------
        node : Node
            Node to transform

        Returns
        -------
        Node, list of Node, or None
            Replacement node(s), or None to remove the node

        """
        return node.accept(self)

    def _transform_children(self, children: list[Node]) -> list[Node]:
        """Transform a list of child nodes, splicing list results.

        Adjacent Text nodes produced by the transformation are merged so
        that tree shape does not depend on how text was split.
        """
        result: list[Node] = []
        for child in children:
            transformed = self.transform(child)
            if transformed is None:
                continue
            if isinstance(transformed, list):
                result.extend(transformed)
            else:
                result.append(transformed)
        return merge_adjacent_text(result)

    def _generic_transform(self, node: Node) -> Node:
        """Copy a node with its children transformed.

        Parameters
        ----------
        node : Node
            Node to transform

        Returns
        -------
        Node
            Transformed node with children replaced

        """
        children = get_node_children(node)
        if not children:
            return copy.copy(node)
        return replace_node_children(node, self._transform_children(children))

    def visit_document(self, node: Document) -> TransformResult:
        """Transform a Document node."""
        return Document(children=self._transform_children(node.children), metadata=node.metadata.copy())

    def visit_heading(self, node: Heading) -> TransformResult:
        """Transform a Heading node."""
        return self._generic_transform(node)

    def visit_paragraph(self, node: Paragraph) -> TransformResult:
        """Transform a Paragraph node."""
        return self._generic_transform(node)

    def visit_code_block(self, node: CodeBlock) -> TransformResult:
        """Transform a CodeBlock node."""
        return self._generic_transform(node)

    def visit_math_block(self, node: MathBlock) -> TransformResult:
        """Transform a MathBlock node."""
        return self._generic_transform(node)

    def visit_block_quote(self, node: BlockQuote) -> TransformResult:
        """Transform a BlockQuote node."""
        return self._generic_transform(node)

    def visit_list(self, node: List) -> TransformResult:
        """Transform a List node."""
        return self._generic_transform(node)

    def visit_list_item(self, node: ListItem) -> TransformResult:
        """Transform a ListItem node."""
        return self._generic_transform(node)

    def visit_thematic_break(self, node: ThematicBreak) -> TransformResult:
        """Transform a ThematicBreak node."""
        return self._generic_transform(node)

    def visit_table(self, node: Table) -> TransformResult:
        """Transform a Table node."""
        return Table(
            header=self.transform(node.header) if node.header else None,  # type: ignore[arg-type]
            rows=self._transform_children(node.rows),  # type: ignore[arg-type]
            alignments=list(node.alignments),
            metadata=node.metadata.copy(),
        )

    def visit_table_row(self, node: TableRow) -> TransformResult:
        """Transform a TableRow node."""
        return self._generic_transform(node)

    def visit_table_cell(self, node: TableCell) -> TransformResult:
        """Transform a TableCell node."""
        return self._generic_transform(node)

    def visit_html_block(self, node: HTMLBlock) -> TransformResult:
        """Transform an HTMLBlock node."""
        return self._generic_transform(node)

    def visit_frontmatter(self, node: Frontmatter) -> TransformResult:
        """Transform a Frontmatter node."""
        return self._generic_transform(node)

    def visit_details(self, node: Details) -> TransformResult:
        """Transform a Details node."""
        return self._generic_transform(node)

    def visit_alert(self, node: Alert) -> TransformResult:
        """Transform an Alert node."""
        return self._generic_transform(node)

    def visit_footnote_definition(self, node: FootnoteDefinition) -> TransformResult:
        """Transform a FootnoteDefinition node."""
        return self._generic_transform(node)

    def visit_link_definition(self, node: LinkDefinition) -> TransformResult:
        """Transform a LinkDefinition node."""
        return self._generic_transform(node)

    def visit_text(self, node: Text) -> TransformResult:
        """Transform a Text node."""
        return self._generic_transform(node)

    def visit_emphasis(self, node: Emphasis) -> TransformResult:
        """Transform an Emphasis node."""
        return self._generic_transform(node)

    def visit_strong(self, node: Strong) -> TransformResult:
        """Transform a Strong node."""
        return self._generic_transform(node)

    def visit_strikethrough(self, node: Strikethrough) -> TransformResult:
        """Transform a Strikethrough node."""
        return self._generic_transform(node)

    def visit_code(self, node: Code) -> TransformResult:
        """Transform a Code node."""
        return self._generic_transform(node)

    def visit_link(self, node: Link) -> TransformResult:
        """Transform a Link node."""
        return self._generic_transform(node)

    def visit_image(self, node: Image) -> TransformResult:
        """Transform an Image node."""
        return self._generic_transform(node)

    def visit_line_break(self, node: LineBreak) -> TransformResult:
        """Transform a LineBreak node."""
        return self._generic_transform(node)

    def visit_html_inline(self, node: HTMLInline) -> TransformResult:
        """Transform an HTMLInline node."""
        return self._generic_transform(node)

    def visit_math_inline(self, node: MathInline) -> TransformResult:
        """Transform a MathInline node."""
        return self._generic_transform(node)

    def visit_footnote_reference(self, node: FootnoteReference) -> TransformResult:
        """Transform a FootnoteReference node."""
        return self._generic_transform(node)

    def visit_wiki_link(self, node: WikiLink) -> TransformResult:
        """Transform a WikiLink node."""
        return self._generic_transform(node)

    def visit_wiki_embed(self, node: WikiEmbed) -> TransformResult:
        """Transform a WikiEmbed node."""
        return self._generic_transform(node)

    def visit_highlight(self, node: Highlight) -> TransformResult:
        """Transform a Highlight node."""
        return self._generic_transform(node)

    def visit_underline(self, node: Underline) -> TransformResult:
        """Transform an Underline node."""
        return self._generic_transform(node)

    def visit_superscript(self, node: Superscript) -> TransformResult:
        """Transform a Superscript node."""
        return self._generic_transform(node)

    def visit_subscript(self, node: Subscript) -> TransformResult:
        """Transform a Subscript node."""
        return self._generic_transform(node)


class TextTransformer(NodeTransformer):
    """Transformer that rewrites Text nodes outside verbatim regions.

    Code spans, code blocks, math, and raw HTML carry their own string
    content rather than Text children, so a transformer that only touches
    ``visit_text`` never sees verbatim content. Subclasses implement
    :meth:`transform_text`.

    """

    def transform_text(self, text: str) -> list[Node]:
        """Return the nodes replacing a Text node's content."""
        raise NotImplementedError

    def visit_text(self, node: Text) -> TransformResult:
        """Replace a Text node with the nodes from ``transform_text``."""
        return self.transform_text(node.content)


def iter_nodes(node: Node) -> Iterator[Node]:
    """Yield ``node`` and all of its descendants depth-first, pre-order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(get_node_children(current)))


def count_nodes(node: Node) -> int:
    """Count ``node`` and all of its descendants."""
    return sum(1 for _ in iter_nodes(node))


def merge_adjacent_text(nodes: list[Node]) -> list[Node]:
    """Merge runs of adjacent Text nodes and drop empty ones.

    Parameters
    ----------
    nodes : list of Node
        Inline nodes

    Returns
    -------
    list of Node
        New list in which no two Text nodes are adjacent

    """
    merged: list[Node] = []
    for node in nodes:
        if isinstance(node, Text):
            if not node.content:
                continue
            if merged and isinstance(merged[-1], Text):
                merged[-1] = Text(content=merged[-1].content + node.content)
                continue
        merged.append(node)
    return merged
