#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdpipe/renderers/markdown.py
"""Markdown serializer.

This module writes a syntax tree back out as markdown text. The output is
shaped so that parsing it again yields the same tree: text is escaped only
where a character would otherwise start a construct, and every grammar
extension is written in the syntax its parser recognizes.

Block output conventions:

- blocks are separated by one blank line; tight list items by a newline
- ATX headings, ``-`` bullets and ``N.`` ordered markers
- fenced code with a fence longer than any backtick run in the content
- block math as ``$$`` fences

"""

from __future__ import annotations

import html
import logging
import re
from typing import Optional

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
    NodeVisitor,
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
    iter_nodes,
)
from mdpipe.constants import BULLET_MARKER, MIN_CODE_FENCE_LENGTH
from mdpipe.options import PipelineOptions
from mdpipe.plugins.custom_inline import MARKERS_BY_TYPE

logger = logging.getLogger(__name__)

ENTITY_START_RE = re.compile(r"&(?:#[0-9]{1,7}|#[xX][0-9a-fA-F]{1,6}|[A-Za-z][A-Za-z0-9]{1,31});")
BACKTICK_RUN_RE = re.compile(r"`+")

# Line starts that would open a block construct inside a paragraph
_LINE_START_ESCAPES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"^([#>])", re.MULTILINE), r"\\\1"),
    (re.compile(r"^([-+])(?=[ \t]|$)", re.MULTILINE), r"\\\1"),
    (re.compile(r"^(\d{1,9})([.)])(?=[ \t]|$)", re.MULTILINE), r"\1\\\2"),
    (re.compile(r"^(?=(?:=+|-+)[ \t]*$)", re.MULTILINE), "\\\\"),
)

_ALIGNMENT_ROW = {"left": ":--", "center": ":-:", "right": "--:", None: "---"}

# Marker text each extension node contributes when its container is written
_MARKER_CHARS: tuple[tuple[str, tuple[type[Node], ...]], ...] = (
    ("==", (Highlight,)),
    ("++", (Underline,)),
    ("^", (Superscript,)),
    ("~", (Subscript, Strikethrough)),
    ("$", (MathInline,)),
)


def active_markers(nodes: list[Node]) -> frozenset[str]:
    """Find the extension markers that could pair up inside an inline container.

    A marker needs escaping only when it occurs at least twice among the
    container's text and the markup written for its nodes.

    Parameters
    ----------
    nodes : list of Node
        Inline content of a paragraph, heading or table cell

    Returns
    -------
    frozenset of str
        Markers whose literal occurrences must be escaped

    """
    texts: list[str] = []
    counts: dict[str, int] = {}
    for root in nodes:
        for node in iter_nodes(root):
            if isinstance(node, Text):
                texts.append(node.content)
                continue
            for marker, node_types in _MARKER_CHARS:
                if isinstance(node, node_types):
                    counts[marker] = counts.get(marker, 0) + 2

    joined = "\n".join(texts)
    return frozenset(marker for marker, _ in _MARKER_CHARS if joined.count(marker) + counts.get(marker, 0) >= 2)


def escape_text(text: str, active: frozenset[str] = frozenset()) -> str:
    r"""Escape characters in ``text`` that would be read as markup.

    Parameters
    ----------
    text : str
        Literal text
    active : frozenset of str, default empty
        Extension markers that must be escaped, from :func:`active_markers`,
        plus ``"|"`` inside table cells

    Returns
    -------
    str
        Escaped text

    Examples
    --------
        >>> escape_text("snake_case and *stars*")
        'snake_case and \\*stars\\*'
        >>> escape_text("a == b == c", frozenset({"=="}))
        'a \\== b \\== c'

    """
    escaped: list[str] = []
    i = 0
    length = len(text)
    while i < length:
        char = text[i]
        if char in "\\*`[]":
            escaped.append("\\" + char)
        elif char == "_":
            prev_alnum = i > 0 and text[i - 1].isalnum()
            next_alnum = i < length - 1 and text[i + 1].isalnum()
            escaped.append("_" if prev_alnum and next_alnum else "\\_")
        elif char == "<":
            following = text[i + 1 : i + 2]
            escaped.append("\\<" if following and (following.isalpha() or following in "/!?") else "<")
        elif char == "&":
            escaped.append("\\&" if ENTITY_START_RE.match(text, i) else "&")
        elif char in "=+" and char * 2 in active and text.startswith(char * 2, i):
            escaped.append("\\" + char * 2)
            i += 2
            continue
        elif char in "^~$|" and char in active:
            escaped.append("\\" + char)
        else:
            escaped.append(char)
        i += 1
    return "".join(escaped)


def escape_line_starts(text: str) -> str:
    """Escape block markers at the start of each line of paragraph text."""
    for pattern, replacement in _LINE_START_ESCAPES:
        text = pattern.sub(replacement, text)
    return text


def format_url(url: str) -> str:
    """Format a link destination, wrapping it in ``<...>`` when needed.

    Destinations with whitespace or unbalanced parentheses are wrapped in
    angle brackets rather than percent-encoded, which keeps them readable.
    """
    if not url:
        return "<>"
    if any(ch.isspace() for ch in url) or "<" in url or ">" in url or url.count("(") != url.count(")"):
        return "<" + url.replace("<", "\\<").replace(">", "\\>") + ">"
    return url


def format_title(title: Optional[str]) -> str:
    """Format a link title as a leading-space, double-quoted suffix."""
    if not title:
        return ""
    return ' "' + title.replace("\\", "\\\\").replace('"', '\\"') + '"'


def indent_lines(text: str, prefix: str, first_prefix: Optional[str] = None) -> str:
    """Prefix every non-empty line of ``text``; blank lines stay empty."""
    lines = text.split("\n")
    result = []
    for index, line in enumerate(lines):
        lead = first_prefix if index == 0 and first_prefix is not None else prefix
        result.append(lead + line if line else lead.rstrip())
    return "\n".join(result)


class MarkdownSerializer(NodeVisitor):
    r"""Serialize a syntax tree to markdown text.

    Parameters
    ----------
    options : PipelineOptions or None, default = None
        Serialization options; ``hard_break_style`` picks the hard break
        markup

    Examples
    --------
        >>> from mdpipe.ast import Document, Paragraph, Text, Subscript
        >>> doc = Document(children=[Paragraph(content=[
        ...     Text(content="H"), Subscript(content=[Text(content="2")]), Text(content="O"),
        ... ])])
        >>> MarkdownSerializer().render_to_string(doc)
        'H~2~O'

    """

    def __init__(self, options: Optional[PipelineOptions] = None):
        """Initialize the serializer with options."""
        self.options = options or PipelineOptions()
        self._output: list[str] = []
        self._active: frozenset[str] = frozenset()
        self._alternate_list_marker = False

    def render_to_string(self, document: Document) -> str:
        """Render a syntax tree to markdown.

        Parameters
        ----------
        document : Document
            Syntax tree to serialize

        Returns
        -------
        str
            Markdown text without a trailing newline

        """
        self._output = []
        self._active = frozenset()
        self._alternate_list_marker = False
        document.accept(self)
        return self._cleanup_output("".join(self._output))

    def _cleanup_output(self, text: str) -> str:
        text = text.replace("\r\n", "\n").replace("\r", "\n")
        return text.rstrip()

    # ------------------------------------------------------------------
    # Rendering helpers
    # ------------------------------------------------------------------

    def _render_node(self, node: Node) -> str:
        saved_output = self._output
        self._output = []
        node.accept(self)
        rendered = "".join(self._output)
        self._output = saved_output
        return rendered

    def _render_blocks(self, children: list[Node], separator: str = "\n\n") -> str:
        """Render block siblings and join them with ``separator``.

        Two lists of the same kind in a row would merge when parsed again,
        so every other one is written with the alternate marker.
        """
        parts: list[str] = []
        previous: Optional[Node] = None
        alternate = False
        for child in children:
            if isinstance(child, List) and isinstance(previous, List) and child.ordered == previous.ordered:
                alternate = not alternate
            else:
                alternate = False
            self._alternate_list_marker = alternate
            rendered = self._render_node(child)
            if rendered:
                parts.append(rendered)
            previous = child
        return separator.join(parts)

    def _render_inline(self, nodes: list[Node]) -> str:
        saved_output = self._output
        self._output = []
        for node in nodes:
            node.accept(self)
        rendered = "".join(self._output)
        self._output = saved_output
        return rendered

    def _render_inline_content(self, nodes: list[Node], table_cell: bool = False) -> str:
        """Render the inline content of a paragraph, heading or table cell."""
        # A trailing hard break has no markup that survives re-parsing
        while nodes and isinstance(nodes[-1], LineBreak):
            nodes = nodes[:-1]

        saved_active = self._active
        active = active_markers(nodes)
        self._active = active | {"|"} if table_cell else active
        try:
            return self._render_inline(nodes)
        finally:
            self._active = saved_active

    def _render_wrapped(self, node: Node, marker: str, hoist_whitespace: bool = True) -> None:
        """Write ``marker``-delimited inline content.

        Emphasis-style delimiters do not open or close next to whitespace, so
        leading and trailing whitespace is moved outside the markers.
        """
        content = self._render_inline(node.content)  # type: ignore[attr-defined]
        if not content:
            return
        if not hoist_whitespace:
            self._output.append(f"{marker}{content}{marker}")
            return

        stripped = content.strip()
        if not stripped:
            self._output.append(content)
            return
        lead = content[: len(content) - len(content.lstrip())]
        trail = content[len(content.rstrip()) :]
        self._output.append(f"{lead}{marker}{stripped}{marker}{trail}")

    # ------------------------------------------------------------------
    # Block nodes
    # ------------------------------------------------------------------

    def visit_document(self, node: Document) -> None:
        """Render a Document node."""
        self._output.append(self._render_blocks(node.children))

    def visit_heading(self, node: Heading) -> None:
        """Render a Heading node as an ATX heading.

        Parameters
        ----------
        node : Heading
            Heading to render

        """
        content = self._render_inline_content(node.content).replace("\n", " ").strip()
        # A trailing run of "#" would be read as the closing sequence
        if content.endswith("#"):
            content = content[:-1] + "\\#"
        prefix = "#" * node.level
        self._output.append(f"{prefix} {content}" if content else prefix)

    def visit_paragraph(self, node: Paragraph) -> None:
        """Render a Paragraph node."""
        self._output.append(escape_line_starts(self._render_inline_content(node.content)))

    def visit_code_block(self, node: CodeBlock) -> None:
        """Render a CodeBlock node as a fenced block.

        Parameters
        ----------
        node : CodeBlock
            Code block to render

        """
        language = node.language or ""
        fence_char = "~" if "`" in language else "`"

        longest = max((len(run) for run in re.findall(re.escape(fence_char) + "+", node.content)), default=0)
        fence = fence_char * max(MIN_CODE_FENCE_LENGTH, longest + 1)

        body = node.content + "\n" if node.content else ""
        self._output.append(f"{fence}{language}\n{body}{fence}")

    def visit_math_block(self, node: MathBlock) -> None:
        """Render a MathBlock node between ``$$`` fences."""
        self._output.append(f"$$\n{node.content}\n$$")

    def visit_block_quote(self, node: BlockQuote) -> None:
        """Render a BlockQuote node."""
        self._output.append(indent_lines(self._render_blocks(node.children), "> "))

    def visit_list(self, node: List) -> None:
        """Render a List node.

        Parameters
        ----------
        node : List
            List to render

        """
        alternate = self._alternate_list_marker
        rendered_items = []
        for index, item in enumerate(node.items):
            if node.ordered:
                marker = f"{node.start + index}{')' if alternate else '.'} "
            else:
                marker = f"{'*' if alternate else BULLET_MARKER} "
            continuation = " " * len(marker)
            if item.checked is not None:
                marker += "[x] " if item.checked else "[ ] "

            body = self._render_blocks(item.children, "\n" if node.tight else "\n\n")
            rendered_items.append(indent_lines(body, continuation, first_prefix=marker).rstrip())

        self._output.append(("\n" if node.tight else "\n\n").join(rendered_items))

    def visit_list_item(self, node: ListItem) -> None:
        """Render a ListItem node's blocks; markers are written by visit_list."""
        self._output.append(self._render_blocks(node.children))

    def visit_thematic_break(self, node: ThematicBreak) -> None:
        """Render a ThematicBreak node."""
        self._output.append("---")

    def visit_table(self, node: Table) -> None:
        """Render a Table node.

        Parameters
        ----------
        node : Table
            Table to render

        """
        rows = ([node.header] if node.header else []) + list(node.rows)
        if not rows:
            return

        num_cols = max(len(node.alignments), max(len(row.cells) for row in rows))
        alignments = list(node.alignments) + [None] * (num_cols - len(node.alignments))

        lines = []
        for index, row in enumerate(rows):
            cells = [self._render_node(cell) for cell in row.cells]
            cells += [""] * (num_cols - len(cells))
            lines.append("| " + " | ".join(cells) + " |")
            if index == 0:
                lines.append("| " + " | ".join(_ALIGNMENT_ROW.get(a, "---") for a in alignments) + " |")

        self._output.append("\n".join(lines))

    def visit_table_row(self, node: TableRow) -> None:
        """Render a TableRow node."""
        self._output.append("| " + " | ".join(self._render_node(cell) for cell in node.cells) + " |")

    def visit_table_cell(self, node: TableCell) -> None:
        """Render a TableCell node's content with pipes escaped."""
        content = self._render_inline_content(node.content, table_cell=True)
        self._output.append(content.replace("\n", " ").strip())

    def visit_html_block(self, node: HTMLBlock) -> None:
        """Render an HTMLBlock node verbatim."""
        self._output.append(node.content)

    def visit_frontmatter(self, node: Frontmatter) -> None:
        """Render a Frontmatter node."""
        if node.content:
            self._output.append(f"---\n{node.content}\n---")
        else:
            self._output.append("---\n---")

    def visit_details(self, node: Details) -> None:
        """Render a Details node as raw HTML around a markdown body.

        The opening tag and summary form one HTML block, and the closing tag
        another, so the body in between is parsed as markdown.
        """
        open_attr = " open" if node.open else ""
        parts = [f"<details{open_attr}>\n<summary>{html.escape(node.summary, quote=False)}</summary>"]
        body = self._render_blocks(node.children).strip("\n")
        if body:
            parts.append(body)
        parts.append("</details>")
        self._output.append("\n\n".join(parts))

    def visit_alert(self, node: Alert) -> None:
        """Render an Alert node as a marked block quote."""
        body = self._render_blocks(node.children)
        text = f"[!{node.kind}]\n{body}" if body else f"[!{node.kind}]"
        self._output.append(indent_lines(text, "> "))

    def visit_footnote_definition(self, node: FootnoteDefinition) -> None:
        """Render a FootnoteDefinition node with its body indented."""
        body = self._render_blocks(node.children)
        self._output.append(indent_lines(body, "    ", first_prefix=f"[^{node.identifier}]: ").rstrip())

    def visit_link_definition(self, node: LinkDefinition) -> None:
        """Render a LinkDefinition node."""
        label = node.label or node.identifier
        self._output.append(f"[{label}]: {format_url(node.url)}{format_title(node.title)}")

    # ------------------------------------------------------------------
    # Inline nodes
    # ------------------------------------------------------------------

    def visit_text(self, node: Text) -> None:
        """Render a Text node with markup characters escaped."""
        self._output.append(escape_text(node.content, self._active))

    def visit_emphasis(self, node: Emphasis) -> None:
        """Render an Emphasis node."""
        self._render_wrapped(node, "*")

    def visit_strong(self, node: Strong) -> None:
        """Render a Strong node."""
        self._render_wrapped(node, "**")

    def visit_strikethrough(self, node: Strikethrough) -> None:
        """Render a Strikethrough node."""
        self._render_wrapped(node, "~~")

    def visit_code(self, node: Code) -> None:
        """Render a Code node.

        The delimiter is one backtick longer than the longest run inside the
        content. Content touching a backtick, or padded with spaces on both
        sides, gets an extra space inside the delimiters that the parser
        strips again.
        """
        content = node.content
        if not content:
            return
        longest = max((len(run) for run in BACKTICK_RUN_RE.findall(content)), default=0)
        ticks = "`" * (longest + 1)
        needs_padding = (
            content.startswith("`")
            or content.endswith("`")
            or (content.startswith(" ") and content.endswith(" ") and content.strip() != "")
        )
        if needs_padding:
            content = f" {content} "
        self._output.append(f"{ticks}{content}{ticks}")

    def visit_link(self, node: Link) -> None:
        """Render a Link node inline-style."""
        content = self._render_inline(node.content)
        self._output.append(f"[{content}]({format_url(node.url)}{format_title(node.title)})")

    def visit_image(self, node: Image) -> None:
        """Render an Image node."""
        alt = escape_text(node.alt_text, self._active)
        self._output.append(f"![{alt}]({format_url(node.url)}{format_title(node.title)})")

    def visit_line_break(self, node: LineBreak) -> None:
        """Render a LineBreak node in the configured hard break style."""
        if node.soft:
            self._output.append("\n")
        elif self.options.hard_break_style == "trailing-spaces":
            self._output.append("  \n")
        else:
            self._output.append("\\\n")

    def visit_html_inline(self, node: HTMLInline) -> None:
        """Render an HTMLInline node verbatim."""
        self._output.append(node.content)

    def visit_math_inline(self, node: MathInline) -> None:
        """Render a MathInline node."""
        self._output.append(f"${node.content}$")

    def visit_footnote_reference(self, node: FootnoteReference) -> None:
        """Render a FootnoteReference node."""
        self._output.append(f"[^{node.identifier}]")

    def visit_wiki_link(self, node: WikiLink) -> None:
        """Render a WikiLink node."""
        if node.alias:
            self._output.append(f"[[{node.target}|{node.alias}]]")
        else:
            self._output.append(f"[[{node.target}]]")

    def visit_wiki_embed(self, node: WikiEmbed) -> None:
        """Render a WikiEmbed node."""
        self._output.append(f"![[{node.target}]]")

    def visit_highlight(self, node: Highlight) -> None:
        """Render a Highlight node."""
        self._render_wrapped(node, MARKERS_BY_TYPE[Highlight], hoist_whitespace=False)

    def visit_underline(self, node: Underline) -> None:
        """Render an Underline node."""
        self._render_wrapped(node, MARKERS_BY_TYPE[Underline], hoist_whitespace=False)

    def visit_superscript(self, node: Superscript) -> None:
        """Render a Superscript node."""
        self._render_wrapped(node, MARKERS_BY_TYPE[Superscript], hoist_whitespace=False)

    def visit_subscript(self, node: Subscript) -> None:
        """Render a Subscript node."""
        self._render_wrapped(node, MARKERS_BY_TYPE[Subscript], hoist_whitespace=False)
