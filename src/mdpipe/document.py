#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdpipe/document.py
"""Rich-text document tree.

The document tree is the editable representation of a markdown document.
Block structure mirrors the syntax tree one-to-one, but inline content is a
flat list of runs instead of nested wrapper nodes:

    **bold _both_**  ->  [Run("bold ", (BOLD,)), Run("both", (BOLD, ITALIC))]

Each :class:`Run` holds a text node or an atom (image, hard break, inline
math, footnote reference, wiki link or embed, raw inline HTML) together with
the tuple of marks applied to it, sorted in canonical order so that equal
mark sets compare equal. Marks are hashable so runs can be compared and
grouped by their mark sets.

Block math has no block of its own here; it is carried as a code block whose
language is the ``"$$math$$"`` sentinel.

"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

from mdpipe.constants import Alignment


class MarkKind(str, Enum):
    """Kinds of inline marks."""

    LINK = "link"
    HIGHLIGHT = "highlight"
    UNDERLINE = "underline"
    STRIKE = "strike"
    BOLD = "bold"
    ITALIC = "italic"
    SUBSCRIPT = "subscript"
    SUPERSCRIPT = "superscript"
    CODE = "code"


# Canonical nesting order, outermost first
MARK_ORDER: tuple[MarkKind, ...] = (
    MarkKind.LINK,
    MarkKind.HIGHLIGHT,
    MarkKind.UNDERLINE,
    MarkKind.STRIKE,
    MarkKind.BOLD,
    MarkKind.ITALIC,
    MarkKind.SUBSCRIPT,
    MarkKind.SUPERSCRIPT,
    MarkKind.CODE,
)

MARK_RANK: dict[MarkKind, int] = {kind: rank for rank, kind in enumerate(MARK_ORDER)}


@dataclass(frozen=True)
class Mark:
    """An inline mark with optional attributes.

    Parameters
    ----------
    kind : MarkKind
        The mark kind
    attrs : tuple of (str, Any) pairs, default ()
        Mark attributes; a link mark carries ``href`` and ``title``

    """

    kind: MarkKind
    attrs: tuple[tuple[str, Any], ...] = ()

    def attr(self, name: str, default: Any = None) -> Any:
        """Return the value of attribute ``name``."""
        for key, value in self.attrs:
            if key == name:
                return value
        return default

    @classmethod
    def link(cls, href: str, title: Optional[str] = None) -> Mark:
        """Create a link mark."""
        return cls(MarkKind.LINK, (("href", href), ("title", title)))


# ============================================================================
# Inline leaves
# ============================================================================


@dataclass(frozen=True)
class TextNode:
    """A run of plain text."""

    text: str


@dataclass(frozen=True)
class ImageAtom:
    """Inline image."""

    src: str
    alt: str = ""
    title: Optional[str] = None


@dataclass(frozen=True)
class HardBreak:
    """Hard line break."""


@dataclass(frozen=True)
class MathAtom:
    """Inline math source."""

    content: str


@dataclass(frozen=True)
class FootnoteAtom:
    """Footnote reference."""

    identifier: str


@dataclass(frozen=True)
class WikiLinkAtom:
    """Wiki link with optional display alias."""

    target: str
    alias: Optional[str] = None


@dataclass(frozen=True)
class WikiEmbedAtom:
    """Wiki embed."""

    target: str


@dataclass(frozen=True)
class HtmlAtom:
    """Raw inline HTML."""

    content: str


InlineLeaf = Union[TextNode, ImageAtom, HardBreak, MathAtom, FootnoteAtom, WikiLinkAtom, WikiEmbedAtom, HtmlAtom]


@dataclass(frozen=True)
class Run:
    """A text node or atom together with its ordered marks.

    Parameters
    ----------
    node : InlineLeaf
        Text or atom
    marks : tuple of Mark, default ()
        Marks applied to the leaf, sorted by ``MARK_RANK``

    """

    node: InlineLeaf
    marks: tuple[Mark, ...] = ()

    @property
    def is_text(self) -> bool:
        """Whether the run holds text rather than an atom."""
        return isinstance(self.node, TextNode)

    def has_mark(self, kind: MarkKind) -> bool:
        """Whether any mark of ``kind`` applies to this run."""
        return any(mark.kind == kind for mark in self.marks)


# ============================================================================
# Blocks
# ============================================================================


@dataclass
class DocDocument:
    """Root of the document tree."""

    children: list[DocBlock] = field(default_factory=list)


@dataclass
class DocParagraph:
    """Paragraph of inline runs."""

    runs: list[Run] = field(default_factory=list)


@dataclass
class DocHeading:
    """ATX heading, level 1-6."""

    level: int
    runs: list[Run] = field(default_factory=list)


@dataclass
class DocCodeBlock:
    """Code block; language ``"$$math$$"`` marks block math."""

    content: str
    language: Optional[str] = None


@dataclass
class DocBlockQuote:
    children: list[DocBlock] = field(default_factory=list)


@dataclass
class DocList:
    """Ordered or bullet list."""

    ordered: bool = False
    items: list[DocListItem] = field(default_factory=list)
    start: int = 1
    tight: bool = True


@dataclass
class DocListItem:
    """List item; ``checked`` is None for plain items."""

    children: list[DocBlock] = field(default_factory=list)
    checked: Optional[bool] = None


@dataclass
class DocThematicBreak:
    pass


@dataclass
class DocTableCell:
    runs: list[Run] = field(default_factory=list)
    alignment: Optional[Alignment] = None


@dataclass
class DocTableRow:
    cells: list[DocTableCell] = field(default_factory=list)
    is_header: bool = False


@dataclass
class DocTable:
    """Table; the first row is the header row."""

    rows: list[DocTableRow] = field(default_factory=list)
    alignments: list[Optional[Alignment]] = field(default_factory=list)


@dataclass
class DocHtmlBlock:
    content: str


@dataclass
class DocFrontmatter:
    content: str


@dataclass
class DocDetails:
    summary: str
    children: list[DocBlock] = field(default_factory=list)
    open: bool = False


@dataclass
class DocAlert:
    kind: str
    children: list[DocBlock] = field(default_factory=list)


@dataclass
class DocFootnoteDefinition:
    identifier: str
    children: list[DocBlock] = field(default_factory=list)


@dataclass
class DocLinkDefinition:
    identifier: str
    url: str
    title: Optional[str] = None
    label: Optional[str] = None


DocBlock = Union[
    DocParagraph,
    DocHeading,
    DocCodeBlock,
    DocBlockQuote,
    DocList,
    DocThematicBreak,
    DocTable,
    DocHtmlBlock,
    DocFrontmatter,
    DocDetails,
    DocAlert,
    DocFootnoteDefinition,
    DocLinkDefinition,
]


def plain_text(runs: list[Run]) -> str:
    """Concatenate the text of all text runs."""
    return "".join(run.node.text for run in runs if isinstance(run.node, TextNode))


def count_nodes(document: DocDocument) -> int:
    """Count every block, list item, table row and cell, and run in ``document``."""
    total = 0
    stack: list[Any] = list(document.children)
    while stack:
        block = stack.pop()
        total += 1
        if isinstance(block, DocList):
            stack.extend(block.items)
        elif isinstance(block, DocTable):
            stack.extend(block.rows)
        elif isinstance(block, DocTableRow):
            stack.extend(block.cells)
        elif hasattr(block, "children"):
            stack.extend(block.children)
        total += len(getattr(block, "runs", ()))
    return total
