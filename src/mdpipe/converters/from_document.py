#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdpipe/converters/from_document.py
"""Document tree to syntax tree conversion.

A run's marks do not say how wrappers nested in the source, so runs are
re-wrapped by a fixed rule. Scanning left to right, the wrapper opened next is
the mark carried by the longest stretch of consecutive runs; ties go to the
kind that comes first in the canonical order::

    link > highlight > underline > strike > bold > italic
         > subscript > superscript > code

An outer mark that spans runs carrying extra inner marks therefore stays one
wrapper, and ``x^a~b~c^`` comes back as one superscript holding a subscript
rather than three superscripts. Inline code is always innermost.

"""

from __future__ import annotations

import logging
from itertools import groupby
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
    merge_adjacent_text,
)
from mdpipe.constants import MATH_BLOCK_LANGUAGE
from mdpipe.document import (
    MARK_RANK,
    DocAlert,
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
    DocParagraph,
    DocTable,
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

logger = logging.getLogger(__name__)

# Mark kind -> wrapper node class
MARK_WRAPPERS: dict[MarkKind, type[Node]] = {
    MarkKind.HIGHLIGHT: Highlight,
    MarkKind.UNDERLINE: Underline,
    MarkKind.STRIKE: Strikethrough,
    MarkKind.BOLD: Strong,
    MarkKind.ITALIC: Emphasis,
    MarkKind.SUBSCRIPT: Subscript,
    MarkKind.SUPERSCRIPT: Superscript,
}


def _span_end(runs: list[Run], start: int, mark: Mark) -> int:
    """Return the end of the stretch of runs from ``start`` that carry ``mark``."""
    end = start
    while end < len(runs) and mark in runs[end].marks:
        end += 1
    return end


class SyntaxTreeBuilder:
    """Convert a document tree back into a syntax tree.

    Parameters
    ----------
    strict : bool, default False
        Raise on node kinds the converter does not recognize instead of
        logging a warning and skipping them

    """

    def __init__(self, strict: bool = False):
        """Initialize the builder."""
        self.strict = strict

    def build(self, document: DocDocument) -> Document:
        """Convert a document tree root.

        Parameters
        ----------
        document : DocDocument
            Document tree root

        Returns
        -------
        Document
            Syntax tree root

        Raises
        ------
        InvariantViolationError
            In strict mode, if an unrecognized node kind is encountered

        """
        return Document(children=self._convert_blocks(document.children))

    def _unknown(self, node: Any, context: str) -> None:
        kind = type(node).__name__
        if self.strict:
            raise InvariantViolationError(f"Unrecognized {context} node kind: {kind}", node_kind=kind)
        logger.warning("Skipping unrecognized %s node kind: %s", context, kind)

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    def _convert_blocks(self, blocks: list[Any]) -> list[Node]:
        nodes: list[Node] = []
        for block in blocks:
            node = self._convert_block(block)
            if node is not None:
                nodes.append(node)
        return nodes

    def _convert_block(self, block: Any) -> Optional[Node]:
        handler_map: dict[type, Callable[[Any], Node]] = {
            DocParagraph: lambda b: Paragraph(content=self._convert_runs(b.runs)),
            DocHeading: lambda b: Heading(level=b.level, content=self._convert_runs(b.runs)),
            DocCodeBlock: self._convert_code_block,
            DocBlockQuote: lambda b: BlockQuote(children=self._convert_blocks(b.children)),
            DocList: self._convert_list,
            DocThematicBreak: lambda _b: ThematicBreak(),
            DocTable: self._convert_table,
            DocHtmlBlock: lambda b: HTMLBlock(content=b.content),
            DocFrontmatter: lambda b: Frontmatter(content=b.content),
            DocDetails: lambda b: Details(summary=b.summary, children=self._convert_blocks(b.children), open=b.open),
            DocAlert: lambda b: Alert(kind=b.kind, children=self._convert_blocks(b.children)),
            DocFootnoteDefinition: lambda b: FootnoteDefinition(
                identifier=b.identifier, children=self._convert_blocks(b.children)
            ),
            DocLinkDefinition: lambda b: LinkDefinition(identifier=b.identifier, url=b.url, title=b.title, label=b.label),
        }

        handler = handler_map.get(type(block))
        if handler is None:
            self._unknown(block, "block")
            return None
        return handler(block)

    def _convert_code_block(self, block: DocCodeBlock) -> Node:
        if block.language == MATH_BLOCK_LANGUAGE:
            return MathBlock(content=block.content)
        return CodeBlock(content=block.content, language=block.language)

    def _convert_list(self, block: DocList) -> List:
        items = [ListItem(children=self._convert_blocks(item.children), checked=item.checked) for item in block.items]
        return List(ordered=block.ordered, items=items, start=block.start, tight=block.tight)

    def _convert_table(self, block: DocTable) -> Table:
        """Convert a table; the first header row, else the first row, is the header."""
        rows = [self._convert_table_row(row) for row in block.rows]
        header_index = next((index for index, row in enumerate(block.rows) if row.is_header), 0)

        header: Optional[TableRow] = None
        if rows:
            header = rows.pop(header_index)
            header.is_header = True
        return Table(header=header, rows=rows, alignments=list(block.alignments))

    def _convert_table_row(self, row: DocTableRow) -> TableRow:
        cells = [TableCell(content=self._convert_runs(cell.runs), alignment=cell.alignment) for cell in row.cells]
        return TableRow(cells=cells, is_header=row.is_header)

    # ------------------------------------------------------------------
    # Inlines
    # ------------------------------------------------------------------

    def _convert_runs(self, runs: list[Run]) -> list[Node]:
        return self._wrap_runs(runs, frozenset())

    def _wrap_runs(self, runs: list[Run], applied: frozenset[MarkKind]) -> list[Node]:
        """Re-wrap runs below wrappers that already apply ``applied``.

        Walking left to right, the next wrapper opened is the mark shared by
        the longest stretch of runs starting at the current run. Ties go to
        the kind that comes first in ``MARK_ORDER``. Inline code is only
        opened once no other mark is left, so it always ends up innermost.

        Parameters
        ----------
        runs : list of Run
            Consecutive runs
        applied : frozenset of MarkKind
            Mark kinds already applied by enclosing wrappers

        Returns
        -------
        list of Node
            Inline syntax tree nodes

        """

        def remaining(run: Run) -> list[Mark]:
            return sorted(
                (mark for mark in run.marks if mark.kind not in applied),
                key=lambda mark: MARK_RANK[mark.kind],
            )

        result: list[Node] = []
        index = 0
        while index < len(runs):
            marks = remaining(runs[index])
            end = index + 1

            if not marks:
                while end < len(runs) and not remaining(runs[end]):
                    end += 1
                result.extend(node for node in map(self._convert_leaf, runs[index:end]) if node is not None)
                index = end
                continue

            candidates = [mark for mark in marks if mark.kind != MarkKind.CODE]
            if not candidates:
                while end < len(runs) and remaining(runs[end]) == marks:
                    end += 1
                result.extend(self._wrap_code(runs[index:end]))
                index = end
                continue

            best, best_end = candidates[0], _span_end(runs, index, candidates[0])
            for mark in candidates[1:]:
                mark_end = _span_end(runs, index, mark)
                if mark_end > best_end:
                    best, best_end = mark, mark_end

            content = self._wrap_runs(runs[index:best_end], applied | {best.kind})
            if best.kind == MarkKind.LINK:
                result.append(Link(url=best.attr("href", ""), title=best.attr("title"), content=content))
            else:
                result.append(MARK_WRAPPERS[best.kind](content=content))  # type: ignore[call-arg]
            index = best_end
        return merge_adjacent_text(result)

    def _wrap_code(self, runs: list[Run]) -> list[Node]:
        """Join code-marked text into one Code node; atoms stay outside it."""
        nodes: list[Node] = []
        for is_text, group in groupby(runs, key=lambda run: run.is_text):
            members = list(group)
            if is_text:
                nodes.append(Code(content="".join(run.node.text for run in members)))  # type: ignore[union-attr]
            else:
                nodes.extend(node for node in map(self._convert_leaf, members) if node is not None)
        return nodes

    def _convert_leaf(self, run: Run) -> Optional[Node]:
        leaf = run.node
        if isinstance(leaf, TextNode):
            return Text(content=leaf.text)
        if isinstance(leaf, ImageAtom):
            return Image(url=leaf.src, alt_text=leaf.alt, title=leaf.title)
        if isinstance(leaf, HardBreak):
            return LineBreak()
        if isinstance(leaf, MathAtom):
            return MathInline(content=leaf.content)
        if isinstance(leaf, FootnoteAtom):
            return FootnoteReference(identifier=leaf.identifier)
        if isinstance(leaf, WikiLinkAtom):
            return WikiLink(target=leaf.target, alias=leaf.alias)
        if isinstance(leaf, WikiEmbedAtom):
            return WikiEmbed(target=leaf.target)
        if isinstance(leaf, HtmlAtom):
            return HTMLInline(content=leaf.content)
        self._unknown(leaf, "inline")
        return None


def document_to_syntax(document: DocDocument, strict: bool = False) -> Document:
    """Convert a document tree back into a syntax tree."""
    return SyntaxTreeBuilder(strict=strict).build(document)
