#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdpipe/converters/to_document.py
"""Syntax tree to document tree conversion.

Block nodes map one-to-one onto document blocks. Inline wrapper nodes
(strong, emphasis, strikethrough, link, the custom marks and inline code) do
not produce nodes of their own: each pushes a mark and the leaves below it
become runs carrying every mark collected on the way down, sorted into the
canonical mark order regardless of how the wrappers nested in the source.

Link and image URLs are checked against the URL scheme allowlist here, since
the document tree is what an editor displays and follows.

"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from mdpipe.ast import (
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
)
from mdpipe.constants import MATH_BLOCK_LANGUAGE
from mdpipe.document import (
    MARK_RANK,
    DocAlert,
    DocBlock,
    DocBlockQuote,
    DocCodeBlock,
    DocDetails,
    DocDocument,
    DocFootnoteDefinition,
    DocFrontmatter,
    DocHeading,
    DocHtmlBlock,
    DocLinkDefinition,
    DocList,
    DocListItem,
    DocParagraph,
    DocTable,
    DocTableCell,
    DocTableRow,
    DocThematicBreak,
    FootnoteAtom,
    HardBreak,
    HtmlAtom,
    ImageAtom,
    Mark,
    MarkKind,
    MathAtom,
    Run,
    TextNode,
    WikiEmbedAtom,
    WikiLinkAtom,
)
from mdpipe.exceptions import InvariantViolationError
from mdpipe.utils.security import sanitize_url_with_fallback

logger = logging.getLogger(__name__)

# Wrapper node -> mark kind it contributes
WRAPPER_MARKS: dict[type[Node], MarkKind] = {
    Strong: MarkKind.BOLD,
    Emphasis: MarkKind.ITALIC,
    Strikethrough: MarkKind.STRIKE,
    Highlight: MarkKind.HIGHLIGHT,
    Underline: MarkKind.UNDERLINE,
    Subscript: MarkKind.SUBSCRIPT,
    Superscript: MarkKind.SUPERSCRIPT,
}


def _push_mark(marks: tuple[Mark, ...], mark: Mark) -> tuple[Mark, ...]:
    """Add ``mark`` unless a mark of the same kind is already applied.

    The result is kept sorted by ``MARK_RANK`` so runs that carry the same
    marks compare equal however their wrappers were nested.

    """
    if any(existing.kind == mark.kind for existing in marks):
        return marks
    return tuple(sorted(marks + (mark,), key=lambda existing: MARK_RANK[existing.kind]))


def coalesce_runs(runs: list[Run]) -> list[Run]:
    """Merge adjacent text runs whose marks are equal and drop empty text."""
    merged: list[Run] = []
    for run in runs:
        if isinstance(run.node, TextNode):
            if not run.node.text:
                continue
            if merged and isinstance(merged[-1].node, TextNode) and merged[-1].marks == run.marks:
                merged[-1] = Run(TextNode(merged[-1].node.text + run.node.text), run.marks)
                continue
        merged.append(run)
    return merged


class DocumentTreeBuilder:
    """Convert a syntax tree into a document tree.

    Parameters
    ----------
    strict : bool, default False
        Raise on node kinds the converter does not recognize instead of
        logging a warning and skipping them

    Examples
    --------
        >>> from mdpipe.ast import Document, Paragraph, Strong, Text
        >>> tree = Document(children=[Paragraph(content=[Strong(content=[Text(content="hi")])])])
        >>> doc = DocumentTreeBuilder().build(tree)
        >>> doc.children[0].runs[0].marks[0].kind
        <MarkKind.BOLD: 'bold'>

    """

    def __init__(self, strict: bool = False):
        """Initialize the builder."""
        self.strict = strict

    def build(self, document: Document) -> DocDocument:
        """Convert a syntax tree Document.

        Parameters
        ----------
        document : Document
            Syntax tree root

        Returns
        -------
        DocDocument
            Document tree root

        Raises
        ------
        InvariantViolationError
            In strict mode, if an unrecognized node kind is encountered

        """
        return DocDocument(children=self._convert_blocks(document.children))

    def _unknown(self, node: Any, context: str) -> None:
        kind = type(node).__name__
        if self.strict:
            raise InvariantViolationError(f"Unrecognized {context} node kind: {kind}", node_kind=kind)
        logger.warning("Skipping unrecognized %s node kind: %s", context, kind)

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    def _convert_blocks(self, children: list[Node]) -> list[DocBlock]:
        blocks: list[DocBlock] = []
        for child in children:
            block = self._convert_block(child)
            if block is not None:
                blocks.append(block)
        return blocks

    def _convert_block(self, node: Node) -> Optional[DocBlock]:
        """Convert one block node.

        Parameters
        ----------
        node : Node
            Block-level syntax tree node

        Returns
        -------
        DocBlock or None
            Converted block; None when the node kind is not recognized

        """
        handler_map: dict[type[Node], Callable[[Any], DocBlock]] = {
            Paragraph: lambda n: DocParagraph(runs=self._convert_inlines(n.content)),
            Heading: lambda n: DocHeading(level=n.level, runs=self._convert_inlines(n.content)),
            CodeBlock: lambda n: DocCodeBlock(content=n.content, language=n.language),
            MathBlock: lambda n: DocCodeBlock(content=n.content, language=MATH_BLOCK_LANGUAGE),
            BlockQuote: lambda n: DocBlockQuote(children=self._convert_blocks(n.children)),
            List: self._convert_list,
            ThematicBreak: lambda _n: DocThematicBreak(),
            Table: self._convert_table,
            HTMLBlock: lambda n: DocHtmlBlock(content=n.content),
            Frontmatter: lambda n: DocFrontmatter(content=n.content),
            Details: lambda n: DocDetails(summary=n.summary, children=self._convert_blocks(n.children), open=n.open),
            Alert: lambda n: DocAlert(kind=n.kind, children=self._convert_blocks(n.children)),
            FootnoteDefinition: lambda n: DocFootnoteDefinition(
                identifier=n.identifier, children=self._convert_blocks(n.children)
            ),
            LinkDefinition: lambda n: DocLinkDefinition(
                identifier=n.identifier, url=sanitize_url_with_fallback(n.url), title=n.title, label=n.label
            ),
        }

        handler = handler_map.get(type(node))
        if handler is None:
            self._unknown(node, "block")
            return None
        return handler(node)

    def _convert_list(self, node: List) -> DocList:
        items = [
            DocListItem(children=self._convert_blocks(item.children), checked=item.checked) for item in node.items
        ]
        return DocList(ordered=node.ordered, items=items, start=node.start, tight=node.tight)

    def _convert_table(self, node: Table) -> DocTable:
        rows = ([node.header] if node.header else []) + list(node.rows)
        return DocTable(rows=[self._convert_table_row(row) for row in rows], alignments=list(node.alignments))

    def _convert_table_row(self, row: TableRow) -> DocTableRow:
        cells = [self._convert_table_cell(cell) for cell in row.cells]
        return DocTableRow(cells=cells, is_header=row.is_header)

    def _convert_table_cell(self, cell: TableCell) -> DocTableCell:
        return DocTableCell(runs=self._convert_inlines(cell.content), alignment=cell.alignment)

    # ------------------------------------------------------------------
    # Inlines
    # ------------------------------------------------------------------

    def _convert_inlines(self, nodes: list[Node], marks: tuple[Mark, ...] = ()) -> list[Run]:
        """Flatten inline nodes into runs.

        Parameters
        ----------
        nodes : list of Node
            Inline syntax tree nodes
        marks : tuple of Mark, default ()
            Marks accumulated from enclosing wrappers

        Returns
        -------
        list of Run
            Runs with adjacent equal-mark text merged

        """
        runs: list[Run] = []
        for node in nodes:
            runs.extend(self._convert_inline(node, marks))
        return coalesce_runs(runs)

    def _convert_inline(self, node: Node, marks: tuple[Mark, ...]) -> list[Run]:
        node_type = type(node)

        if node_type in WRAPPER_MARKS:
            return self._convert_inlines(node.content, _push_mark(marks, Mark(WRAPPER_MARKS[node_type])))  # type: ignore[attr-defined]

        if isinstance(node, Link):
            link_mark = Mark.link(sanitize_url_with_fallback(node.url), node.title)
            return self._convert_inlines(node.content, _push_mark(marks, link_mark))

        if isinstance(node, Text):
            return [Run(TextNode(node.content), marks)]

        if isinstance(node, Code):
            return [Run(TextNode(node.content), _push_mark(marks, Mark(MarkKind.CODE)))]

        leaf = self._convert_leaf(node)
        if leaf is None:
            self._unknown(node, "inline")
            return []
        return [Run(leaf, marks)]

    def _convert_leaf(self, node: Node) -> Any:
        if isinstance(node, Image):
            return ImageAtom(src=sanitize_url_with_fallback(node.url), alt=node.alt_text, title=node.title)
        if isinstance(node, LineBreak):
            return TextNode("\n") if node.soft else HardBreak()
        if isinstance(node, MathInline):
            return MathAtom(node.content)
        if isinstance(node, FootnoteReference):
            return FootnoteAtom(node.identifier)
        if isinstance(node, WikiLink):
            return WikiLinkAtom(node.target, node.alias)
        if isinstance(node, WikiEmbed):
            return WikiEmbedAtom(node.target)
        if isinstance(node, HTMLInline):
            return HtmlAtom(node.content)
        return None


def syntax_to_document(document: Document, strict: bool = False) -> DocDocument:
    """Convert a syntax tree into a document tree."""
    return DocumentTreeBuilder(strict=strict).build(document)
