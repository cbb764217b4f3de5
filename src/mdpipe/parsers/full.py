#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdpipe/parsers/full.py
"""Full markdown parser built on mistune.

This parser handles the complete grammar: CommonMark plus GFM tables, task
lists, strikethrough and footnotes, and the extensions that content sniffing
enables (math, frontmatter, wiki links, details blocks). Mistune produces a
token stream, which is converted into the syntax tree and then run through
the grammar extension transforms.

"""

from __future__ import annotations

import logging
from dataclasses import replace
from functools import lru_cache
from typing import Any, Callable, Optional

import mistune
from mistune.util import unescape

from mdpipe.ast import (
    BlockQuote,
    Code,
    CodeBlock,
    Document,
    Emphasis,
    FootnoteDefinition,
    FootnoteReference,
    Frontmatter,
    Heading,
    HTMLBlock,
    HTMLInline,
    Image,
    LineBreak,
    Link,
    List,
    ListItem,
    MathBlock,
    MathInline,
    Node,
    NodeTransformer,
    Paragraph,
    Strikethrough,
    Strong,
    Table,
    TableCell,
    TableRow,
    Text,
    ThematicBreak,
    merge_adjacent_text,
)
from mdpipe.options import PipelineOptions
from mdpipe.parsers.base import BaseParser, language_from_info, normalize_newlines, plain_text, strip_trailing_newline
from mdpipe.plugins import (
    AlertTransform,
    BreaksTransform,
    CustomInlineTransform,
    DetailsTransform,
    MathValidationTransform,
    WikiLinkTransform,
    collect_link_definitions,
    frontmatter,
)
from mdpipe.sniffing import ContentAnalysis, analyze_content

logger = logging.getLogger(__name__)

BASE_PLUGINS: tuple[Any, ...] = ("strikethrough", "table", "task_lists", "footnotes")


@lru_cache(maxsize=None)
def create_markdown(has_math: bool, has_frontmatter: bool) -> mistune.Markdown:
    """Build (once) a mistune instance with the extensions a document needs.

    Parameters
    ----------
    has_math : bool
        Attach the math plugin
    has_frontmatter : bool
        Attach the frontmatter hook

    Returns
    -------
    mistune.Markdown
        Markdown instance producing raw tokens (no renderer)

    """
    plugins: list[Any] = list(BASE_PLUGINS)
    if has_math:
        plugins.append("math")
    if has_frontmatter:
        plugins.append(frontmatter)
    logger.debug("Creating mistune parser with plugins %s", plugins)
    return mistune.create_markdown(renderer=None, plugins=plugins)


class FullMarkdownParser(BaseParser):
    r"""Parse markdown with mistune and the grammar extensions.

    Parameters
    ----------
    options : PipelineOptions or None, default = None
        Pipeline options
    analysis : ContentAnalysis or None, default = None
        Extension flags; computed from the text when omitted

    Examples
    --------
        >>> doc = FullMarkdownParser().parse("H~2~O and x^2^\n")
        >>> [type(n).__name__ for n in doc.children[0].content]
        ['Text', 'Subscript', 'Text', 'Superscript']

    """

    def __init__(self, options: Optional[PipelineOptions] = None, analysis: Optional[ContentAnalysis] = None):
        """Initialize the parser with options and optional sniffing results."""
        super().__init__(options)
        self.analysis = analysis

    def parse(self, text: str) -> Document:
        """Parse markdown text into a syntax tree.

        Parameters
        ----------
        text : str
            Markdown source, after escape preprocessing

        Returns
        -------
        Document
            Syntax tree with all enabled extensions applied

        """
        analysis = self.analysis or analyze_content(text)
        logger.debug("Full parser extensions: %s", analysis.enabled() or "none")

        children = self._parse_blocks(text, analysis, keep_definitions=True)
        document = Document(children=children)

        for transform in self._build_transforms(analysis):
            result = transform.transform(document)
            if isinstance(result, Document):
                document = result
        return document

    def _build_transforms(self, analysis: ContentAnalysis) -> list[NodeTransformer]:
        transforms: list[NodeTransformer] = []
        if analysis.has_details:
            transforms.append(DetailsTransform(self._parse_details_body))
        transforms.append(AlertTransform())
        if analysis.has_math:
            transforms.append(MathValidationTransform())
        if analysis.has_wiki_links:
            transforms.append(WikiLinkTransform())
        transforms.append(CustomInlineTransform())
        if self.options.preserve_line_breaks:
            transforms.append(BreaksTransform())
        return transforms

    def _parse_details_body(self, body: str) -> list[Node]:
        """Parse the markdown inside a single-block details element."""
        analysis = replace(analyze_content(body), has_frontmatter=False)
        return self._parse_blocks(body, analysis, keep_definitions=False)

    def _parse_blocks(self, text: str, analysis: ContentAnalysis, keep_definitions: bool) -> list[Node]:
        markdown = create_markdown(analysis.has_math, analysis.has_frontmatter)
        tokens, state = markdown.parse(normalize_newlines(text))

        children = self._process_tokens(tokens if isinstance(tokens, list) else [])
        if keep_definitions:
            children.extend(collect_link_definitions(state.env))
        return children

    # ------------------------------------------------------------------
    # Block tokens
    # ------------------------------------------------------------------

    def _process_tokens(self, tokens: list[dict[str, Any]]) -> list[Node]:
        """Process a list of mistune block tokens into syntax tree nodes."""
        nodes: list[Node] = []
        for token in tokens:
            node = self._process_token(token)
            if node is None:
                continue
            if isinstance(node, list):
                nodes.extend(node)
            else:
                nodes.append(node)
        return nodes

    def _process_token(self, token: dict[str, Any]) -> Node | list[Node] | None:
        """Process a single mistune block token.

        Parameters
        ----------
        token : dict
            Mistune token dictionary with 'type' and other fields

        Returns
        -------
        Node, list of Node, or None
            Resulting node(s); None for tokens without a tree counterpart

        """
        token_type = token.get("type", "")
        handler_map: dict[str, Callable[[dict[str, Any]], Node | list[Node] | None]] = {
            "paragraph": self._process_paragraph,
            # block_text is used for tight list items
            "block_text": self._process_paragraph,
            "heading": self._process_heading,
            "block_code": self._process_code_block,
            "block_quote": self._process_block_quote,
            "list": self._process_list,
            "table": self._process_table,
            "thematic_break": lambda _token: ThematicBreak(),
            "block_html": self._process_html_block,
            "block_math": self._process_math_block,
            "frontmatter": lambda tok: Frontmatter(content=tok.get("raw", "")),
            "footnotes": self._process_footnotes,
            "footnote_item": self._process_footnote_item,
        }

        handler = handler_map.get(token_type)
        if handler is not None:
            return handler(token)
        if token_type not in ("blank_line", "block_error"):
            logger.debug("Ignoring mistune token of type %r", token_type)
        return None

    def _process_paragraph(self, token: dict[str, Any]) -> Paragraph:
        return Paragraph(content=self._process_inline_tokens(token.get("children", [])))

    def _process_heading(self, token: dict[str, Any]) -> Heading:
        """Process heading token.

        Parameters
        ----------
        token : dict
            Heading token with 'attrs' (level) and 'children'

        Returns
        -------
        Heading
            Heading node

        """
        attrs = token.get("attrs") or {}
        level = attrs.get("level", 1)
        if not isinstance(level, int) or not 1 <= level <= 6:
            level = 1
        return Heading(level=level, content=self._process_inline_tokens(token.get("children", [])))

    def _process_code_block(self, token: dict[str, Any]) -> Optional[CodeBlock]:
        raw = token.get("raw", "")
        # Blank lines alone never form an indented code block
        if token.get("style") == "indent" and not raw.strip():
            return None
        attrs = token.get("attrs") or {}
        return CodeBlock(
            content=strip_trailing_newline(raw),
            language=language_from_info(attrs.get("info")),
        )

    def _process_block_quote(self, token: dict[str, Any]) -> BlockQuote:
        return BlockQuote(children=self._process_tokens(token.get("children", [])))

    def _process_list(self, token: dict[str, Any]) -> List:
        """Process list token.

        Tightness is a top-level key on mistune list tokens; ``ordered``
        and ``start`` live in ``attrs``.
        """
        attrs = token.get("attrs") or {}
        ordered = bool(attrs.get("ordered", False))
        start = attrs.get("start", 1) if ordered else 1
        tight = bool(token.get("tight", attrs.get("tight", True)))

        items = [
            self._process_list_item(child)
            for child in token.get("children", [])
            if isinstance(child, dict) and child.get("type") in ("list_item", "task_list_item")
        ]
        return List(ordered=ordered, items=items, start=start, tight=tight)

    def _process_list_item(self, token: dict[str, Any]) -> ListItem:
        checked: Optional[bool] = None
        if token.get("type") == "task_list_item":
            attrs = token.get("attrs") or {}
            checked = bool(attrs.get("checked", False))
        return ListItem(children=self._process_tokens(token.get("children", [])), checked=checked)

    def _process_table(self, token: dict[str, Any]) -> Table:
        """Process table token.

        The header cells are direct children of ``table_head``; body rows are
        ``table_row`` tokens inside ``table_body``.
        """
        header: Optional[TableRow] = None
        rows: list[TableRow] = []
        alignments: list[Any] = []

        for part in token.get("children", []):
            part_type = part.get("type", "")
            if part_type == "table_head":
                cells = self._process_table_cells(part.get("children", []))
                header = TableRow(cells=cells, is_header=True)
                alignments = [cell.alignment for cell in cells]
            elif part_type == "table_body":
                for row_token in part.get("children", []):
                    rows.append(TableRow(cells=self._process_table_cells(row_token.get("children", []))))

        return Table(header=header, rows=rows, alignments=alignments)

    def _process_table_cells(self, cell_tokens: list[dict[str, Any]]) -> list[TableCell]:
        cells = []
        for cell_token in cell_tokens:
            if cell_token.get("type") != "table_cell":
                continue
            attrs = cell_token.get("attrs") or {}
            cells.append(
                TableCell(
                    content=self._process_inline_tokens(cell_token.get("children", [])),
                    alignment=attrs.get("align") or None,
                )
            )
        return cells

    def _process_html_block(self, token: dict[str, Any]) -> HTMLBlock:
        return HTMLBlock(content=strip_trailing_newline(token.get("raw", "")))

    def _process_math_block(self, token: dict[str, Any]) -> MathBlock:
        return MathBlock(content=token.get("raw", ""))

    def _process_footnotes(self, token: dict[str, Any]) -> list[Node]:
        """Process the footnote section appended after the document body."""
        return self._process_tokens(token.get("children", []))

    def _process_footnote_item(self, token: dict[str, Any]) -> FootnoteDefinition:
        attrs = token.get("attrs") or {}
        return FootnoteDefinition(
            identifier=str(attrs.get("key", "")).lower(),
            children=self._process_tokens(token.get("children", [])),
        )

    # ------------------------------------------------------------------
    # Inline tokens
    # ------------------------------------------------------------------

    def _process_inline_tokens(self, tokens: list[dict[str, Any]]) -> list[Node]:
        """Process inline tokens into merged inline nodes.

        Parameters
        ----------
        tokens : list of dict
            Inline token dictionaries

        Returns
        -------
        list of Node
            Inline nodes with adjacent text merged

        """
        nodes: list[Node] = []
        for token in tokens:
            node = self._process_inline_token(token)
            if node is not None:
                nodes.append(node)
        return merge_adjacent_text(nodes)

    def _handle_text_token(self, token: dict[str, Any]) -> Text:
        """Handle text token, decoding character references."""
        return Text(content=unescape(token.get("raw", "")))

    def _handle_strong_token(self, token: dict[str, Any]) -> Strong:
        return Strong(content=self._process_inline_tokens(token.get("children", [])))

    def _handle_emphasis_token(self, token: dict[str, Any]) -> Emphasis:
        return Emphasis(content=self._process_inline_tokens(token.get("children", [])))

    def _handle_strikethrough_token(self, token: dict[str, Any]) -> Strikethrough:
        return Strikethrough(content=self._process_inline_tokens(token.get("children", [])))

    def _handle_codespan_token(self, token: dict[str, Any]) -> Code:
        return Code(content=token.get("raw", ""))

    def _handle_link_token(self, token: dict[str, Any]) -> Link:
        """Handle link token."""
        attrs = token.get("attrs") or {}
        title = attrs.get("title")
        return Link(
            url=attrs.get("url", ""),
            content=self._process_inline_tokens(token.get("children", [])),
            title=unescape(title) if title else None,
        )

    def _handle_image_token(self, token: dict[str, Any]) -> Image:
        """Handle image token; alt text is carried in the children."""
        attrs = token.get("attrs") or {}
        title = attrs.get("title")
        alt_nodes = self._process_inline_tokens(token.get("children", []))
        return Image(url=attrs.get("url", ""), alt_text=plain_text(alt_nodes), title=unescape(title) if title else None)

    def _handle_footnote_ref_token(self, token: dict[str, Any]) -> FootnoteReference:
        return FootnoteReference(identifier=str(token.get("raw", "")).lower())

    def _process_inline_token(self, token: dict[str, Any]) -> Node | None:
        """Process a single inline token.

        Parameters
        ----------
        token : dict
            Inline token dictionary

        Returns
        -------
        Node or None
            Inline node

        """
        token_type = token.get("type", "")

        handler_map: dict[str, Callable[[dict[str, Any]], Node]] = {
            "text": self._handle_text_token,
            "softbreak": lambda _token: Text(content="\n"),
            "linebreak": lambda _token: LineBreak(),
            "strong": self._handle_strong_token,
            "emphasis": self._handle_emphasis_token,
            "strikethrough": self._handle_strikethrough_token,
            "codespan": self._handle_codespan_token,
            "link": self._handle_link_token,
            "image": self._handle_image_token,
            "inline_html": lambda tok: HTMLInline(content=tok.get("raw", "")),
            "inline_math": lambda tok: MathInline(content=tok.get("raw", "")),
            # Inline ``$$...$$`` arrives as a block_math token inside a paragraph
            "block_math": lambda tok: MathInline(content=tok.get("raw", "")),
            "footnote_ref": self._handle_footnote_ref_token,
        }

        handler = handler_map.get(token_type)
        if handler is not None:
            return handler(token)
        logger.debug("Ignoring mistune inline token of type %r", token_type)
        return None
