#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdpipe/parsers/fast.py
"""Structural fast parser built on markdown-it-py.

The fast parser covers plain CommonMark plus tables and nothing else. It is
only selected for documents that contain none of the constructs on the
sniffer's denylist, and for those documents it produces exactly the tree the
full parser would.

"""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import Any, Callable, Optional

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode

from mdpipe.ast import (
    BlockQuote,
    Code,
    CodeBlock,
    Document,
    Emphasis,
    Heading,
    HTMLBlock,
    HTMLInline,
    Image,
    LineBreak,
    Link,
    List,
    ListItem,
    Node,
    Paragraph,
    Strong,
    Table,
    TableCell,
    TableRow,
    Text,
    ThematicBreak,
    merge_adjacent_text,
)
from mdpipe.constants import Alignment
from mdpipe.parsers.base import BaseParser, language_from_info, normalize_newlines, plain_text, strip_trailing_newline

logger = logging.getLogger(__name__)

ALIGN_STYLE_RE = re.compile(r"text-align:\s*(left|center|right)")


@lru_cache(maxsize=1)
def get_markdown_it() -> MarkdownIt:
    """Return the shared markdown-it instance (CommonMark + tables)."""
    return MarkdownIt("commonmark", {"html": True}).enable("table")


class FastMarkdownParser(BaseParser):
    r"""Parse plain CommonMark with markdown-it-py.

    Examples
    --------
        >>> doc = FastMarkdownParser().parse("# Title\n\nSome *text*\n")
        >>> [type(n).__name__ for n in doc.children]
        ['Heading', 'Paragraph']

    """

    def parse(self, text: str) -> Document:
        """Parse markdown text into a syntax tree.

        Parameters
        ----------
        text : str
            Markdown source without any denylisted construct

        Returns
        -------
        Document
            Syntax tree root

        """
        tokens = get_markdown_it().parse(normalize_newlines(text))
        root = SyntaxTreeNode(tokens)
        return Document(children=self._process_blocks(root.children))

    # ------------------------------------------------------------------
    # Block nodes
    # ------------------------------------------------------------------

    def _process_blocks(self, nodes: list[SyntaxTreeNode]) -> list[Node]:
        result: list[Node] = []
        for node in nodes:
            converted = self._process_block(node)
            if converted is not None:
                result.append(converted)
        return result

    def _process_block(self, node: SyntaxTreeNode) -> Optional[Node]:
        """Convert one block-level syntax tree node.

        Parameters
        ----------
        node : SyntaxTreeNode
            markdown-it block node

        Returns
        -------
        Node or None
            Converted node; None for node types the fast path never sees

        """
        handler_map: dict[str, Callable[[SyntaxTreeNode], Node]] = {
            "paragraph": self._process_paragraph,
            "heading": self._process_heading,
            "fence": self._process_fence,
            "code_block": lambda n: CodeBlock(content=strip_trailing_newline(n.content)),
            "blockquote": lambda n: BlockQuote(children=self._process_blocks(n.children)),
            "bullet_list": self._process_list,
            "ordered_list": self._process_list,
            "hr": lambda _n: ThematicBreak(),
            "html_block": lambda n: HTMLBlock(content=strip_trailing_newline(n.content)),
            "table": self._process_table,
        }

        handler = handler_map.get(node.type)
        if handler is None:
            logger.debug("Ignoring markdown-it node of type %r", node.type)
            return None
        return handler(node)

    def _process_paragraph(self, node: SyntaxTreeNode) -> Paragraph:
        return Paragraph(content=self._process_inline_container(node))

    def _process_heading(self, node: SyntaxTreeNode) -> Heading:
        return Heading(level=int(node.tag[1:]), content=self._process_inline_container(node))

    def _process_fence(self, node: SyntaxTreeNode) -> CodeBlock:
        return CodeBlock(content=strip_trailing_newline(node.content), language=language_from_info(node.info))

    def _process_list(self, node: SyntaxTreeNode) -> List:
        """Convert a bullet or ordered list.

        markdown-it marks the paragraphs of tight lists as hidden; a list is
        tight when none of its items holds a visible paragraph.
        """
        ordered = node.type == "ordered_list"
        start = int(node.attrs.get("start", 1)) if ordered else 1

        tight = True
        items: list[ListItem] = []
        for item in node.children:
            for child in item.children:
                if child.type == "paragraph" and not child.hidden:
                    tight = False
            items.append(ListItem(children=self._process_blocks(item.children)))

        return List(ordered=ordered, items=items, start=start, tight=tight)

    def _process_table(self, node: SyntaxTreeNode) -> Table:
        header: Optional[TableRow] = None
        rows: list[TableRow] = []
        alignments: list[Optional[Alignment]] = []

        for section in node.children:
            for row in section.children:
                cells = [self._process_table_cell(cell) for cell in row.children]
                if section.type == "thead":
                    header = TableRow(cells=cells, is_header=True)
                    alignments = [cell.alignment for cell in cells]
                else:
                    rows.append(TableRow(cells=cells))

        return Table(header=header, rows=rows, alignments=alignments)

    def _process_table_cell(self, node: SyntaxTreeNode) -> TableCell:
        match = ALIGN_STYLE_RE.search(str(node.attrs.get("style", "")))
        alignment: Any = match.group(1) if match else None
        return TableCell(content=self._process_inline_container(node), alignment=alignment)

    # ------------------------------------------------------------------
    # Inline nodes
    # ------------------------------------------------------------------

    def _process_inline_container(self, node: SyntaxTreeNode) -> list[Node]:
        """Convert the inline children of a paragraph, heading or cell."""
        nodes: list[Node] = []
        for child in node.children:
            if child.type == "inline":
                nodes.extend(self._process_inlines(child.children))
        return merge_adjacent_text(nodes)

    def _process_inlines(self, nodes: list[SyntaxTreeNode]) -> list[Node]:
        result: list[Node] = []
        for node in nodes:
            converted = self._process_inline(node)
            if converted is not None:
                result.append(converted)
        return merge_adjacent_text(result)

    def _process_inline(self, node: SyntaxTreeNode) -> Optional[Node]:
        """Convert one inline syntax tree node."""
        handler_map: dict[str, Callable[[SyntaxTreeNode], Node]] = {
            "text": lambda n: Text(content=n.content),
            "text_special": lambda n: Text(content=n.content),
            "softbreak": lambda _n: Text(content="\n"),
            "hardbreak": lambda _n: LineBreak(),
            "strong": lambda n: Strong(content=self._process_inlines(n.children)),
            "em": lambda n: Emphasis(content=self._process_inlines(n.children)),
            "code_inline": lambda n: Code(content=n.content),
            "link": self._process_link,
            "image": self._process_image,
            "html_inline": lambda n: HTMLInline(content=n.content),
        }

        handler = handler_map.get(node.type)
        if handler is None:
            logger.debug("Ignoring markdown-it inline node of type %r", node.type)
            return None
        return handler(node)

    def _process_link(self, node: SyntaxTreeNode) -> Link:
        title = node.attrs.get("title")
        return Link(
            url=str(node.attrs.get("href", "")),
            content=self._process_inlines(node.children),
            title=str(title) if title else None,
        )

    def _process_image(self, node: SyntaxTreeNode) -> Image:
        title = node.attrs.get("title")
        return Image(
            url=str(node.attrs.get("src", "")),
            alt_text=plain_text(self._process_inlines(node.children)),
            title=str(title) if title else None,
        )
