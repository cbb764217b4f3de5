#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdpipe/sniffing.py
"""Content sniffing and parser selection.

Two independent passes run over the source text:

1. Extension flags decide which optional grammar extensions the full parser
   attaches. An extension that is not needed is never constructed.
2. Fast-path eligibility checks a denylist of patterns. Any construct the
   fast parser does not reproduce exactly like the full parser routes the
   document to the full parser.

"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from mdpipe.constants import ParserKind
from mdpipe.options import PipelineOptions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContentAnalysis:
    """Which optional extensions a document needs.

    Parameters
    ----------
    has_math : bool
        A dollar sign is present
    has_frontmatter : bool
        The document starts with ``---``
    has_wiki_links : bool
        ``[[`` is present
    has_details : bool
        A ``<details`` tag is present

    """

    has_math: bool = False
    has_frontmatter: bool = False
    has_wiki_links: bool = False
    has_details: bool = False

    def enabled(self) -> list[str]:
        """Return the names of the flags that are set."""
        return [name for name, value in vars(self).items() if value]


def analyze_content(text: str) -> ContentAnalysis:
    """Detect which optional grammar extensions ``text`` needs.

    Parameters
    ----------
    text : str
        Markdown source

    Returns
    -------
    ContentAnalysis
        Flags for math, frontmatter, wiki links and details blocks

    """
    return ContentAnalysis(
        has_math="$" in text,
        has_frontmatter=text.startswith("---"),
        has_wiki_links="[[" in text,
        has_details="<details" in text.lower(),
    )


# Constructs the fast parser does not handle, or represents differently
FAST_PATH_DENYLIST: tuple[re.Pattern[str], ...] = (
    re.compile(r"\$[^$]+\$"),  # inline math
    re.compile(r"\$\$[^$]+\$\$"),  # block math
    re.compile(r"\[\[[^\]]+\]\]"),  # wiki links
    re.compile(r"==.+=="),  # highlight
    re.compile(r"\+\+.+\+\+"),  # underline
    re.compile(r"~[^~]+~"),  # subscript
    re.compile(r"\^[^^]+\^"),  # superscript
    re.compile(r"<details", re.IGNORECASE),
    re.compile(r"^[ \t]*(?:[-*+]|\d{1,9}[.)])[ \t]+\[[ xX]\]", re.MULTILINE),  # task list checkbox
    re.compile(r"^[ \t]*(?:[-*+]|\d{1,9}[.)])[ \t]*$", re.MULTILINE),  # empty list item
    re.compile(r"^\|.+\|$", re.MULTILINE),  # table row
    re.compile(r" {2}\n"),  # two-space hard break
    re.compile(r"~~.+~~", re.DOTALL),  # strikethrough
    re.compile(r"^---\s*$", re.MULTILINE),  # frontmatter fence
    re.compile(r"\[\^"),  # footnotes
    re.compile(r"^ {0,3}\[[^\]]+\]:", re.MULTILINE),  # link reference definition
    re.compile(r"\[!"),  # alerts
    re.compile(r"&(?:#[0-9]{1,7}|#[xX][0-9a-fA-F]{1,6}|[A-Za-z][A-Za-z0-9]{1,31});"),  # entities
)


def can_use_fast_parser(text: str, options: PipelineOptions | None = None) -> bool:
    """Check whether the fast parser can handle ``text``.

    Parameters
    ----------
    text : str
        Markdown source
    options : PipelineOptions or None, default None
        Explicit options; any explicit options force the full parser

    Returns
    -------
    bool
        True when no denylisted construct is present and no options were given

    """
    if options is not None:
        return False
    return not any(pattern.search(text) for pattern in FAST_PATH_DENYLIST)


def select_parser(text: str, options: PipelineOptions | None = None) -> ParserKind:
    """Choose between the fast and full parser for ``text``."""
    kind: ParserKind = "fast" if can_use_fast_parser(text, options) else "full"
    logger.debug("Selected %s parser for %d characters", kind, len(text))
    return kind
