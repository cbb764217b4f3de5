#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdpipe/plugins/details.py
"""Collapsible ``<details>`` blocks.

Markdown has no syntax for details blocks, so they appear as raw HTML. Two
shapes are recognized in every block container:

1. A single HTML block holding the whole element. The markdown between the
   summary and the closing tag is parsed again as a nested document.
2. Sibling HTML blocks: one opening ``<details>`` (usually with the summary)
   and a later one holding ``</details>``. The blocks in between become the
   body. This is the shape the serializer writes, since a blank line ends an
   HTML block.

An element with content before the opening tag or after the closing tag is
left alone so nothing outside the element is dropped. An opening tag without
a matching close is kept as raw HTML.

"""

from __future__ import annotations

import html
import re
from typing import Callable, Optional

from mdpipe.ast.nodes import Details, HTMLBlock, Node
from mdpipe.ast.transforms import NodeTransformer
from mdpipe.constants import DEFAULT_DETAILS_SUMMARY

DETAILS_OPEN_RE = re.compile(r"<details\b[^>]*>", re.IGNORECASE)
DETAILS_CLOSE_RE = re.compile(r"</details>", re.IGNORECASE)
SUMMARY_RE = re.compile(r"<summary>([\s\S]*?)</summary>", re.IGNORECASE)
OPEN_ATTR_RE = re.compile(r"\bopen\b", re.IGNORECASE)

BodyParser = Callable[[str], list[Node]]


def _summary_text(match: Optional[re.Match[str]]) -> str:
    if match is None:
        return DEFAULT_DETAILS_SUMMARY
    return html.unescape(match.group(1)).strip() or DEFAULT_DETAILS_SUMMARY


def _is_details_close(value: str) -> bool:
    return DETAILS_CLOSE_RE.search(value.strip()) is not None


class DetailsTransform(NodeTransformer):
    """Group raw ``<details>`` HTML blocks into Details nodes.

    Parameters
    ----------
    parse_body : callable
        Parses the markdown body of a single-block details element into
        block nodes

    """

    def __init__(self, parse_body: BodyParser):
        """Initialize the transform with the nested body parser."""
        self.parse_body = parse_body

    def _transform_children(self, children: list[Node]) -> list[Node]:
        return self.group_details(super()._transform_children(children))

    def parse_single_block(self, value: str) -> Optional[Details]:
        """Parse an HTML block that holds an entire details element.

        Parameters
        ----------
        value : str
            Raw HTML block content

        Returns
        -------
        Details or None
            The details node, or None when the block is not exactly one
            complete element

        """
        open_match = DETAILS_OPEN_RE.search(value)
        close_match = DETAILS_CLOSE_RE.search(value)
        if open_match is None or close_match is None or close_match.start() <= open_match.start():
            return None

        if value[: open_match.start()].strip() or value[close_match.end() :].strip():
            return None

        summary_match = SUMMARY_RE.search(value)
        body_start = summary_match.end() if summary_match else open_match.end()
        body = value[body_start : close_match.start()]
        children = self._transform_children(self.parse_body(body)) if body.strip() else []

        return Details(
            summary=_summary_text(summary_match),
            children=children,
            open=OPEN_ATTR_RE.search(open_match.group(0)) is not None,
        )

    @staticmethod
    def _find_matching_close(children: list[Node], start: int) -> Optional[int]:
        # Nested sibling-form elements open and close between our tags
        depth = 1
        for cursor in range(start, len(children)):
            candidate = children[cursor]
            if not isinstance(candidate, HTMLBlock):
                continue
            opens = DETAILS_OPEN_RE.search(candidate.content) is not None
            closes = _is_details_close(candidate.content)
            if opens and not closes:
                depth += 1
            elif closes and not opens:
                depth -= 1
                if depth == 0:
                    return cursor
        return None

    def group_details(self, children: list[Node]) -> list[Node]:
        """Replace details markup in a list of block siblings.

        Parameters
        ----------
        children : list of Node
            Block-level siblings, already transformed

        Returns
        -------
        list of Node
            Siblings with details elements replaced by Details nodes

        """
        result: list[Node] = []
        index = 0
        while index < len(children):
            node = children[index]
            index += 1
            if not isinstance(node, HTMLBlock):
                result.append(node)
                continue

            single = self.parse_single_block(node.content)
            if single is not None:
                result.append(single)
                continue

            open_match = DETAILS_OPEN_RE.search(node.content)
            if open_match is None:
                result.append(node)
                continue

            close_index = self._find_matching_close(children, index)
            if close_index is None:
                result.append(node)
                continue

            inner = children[index:close_index]
            index = close_index + 1

            summary_match = SUMMARY_RE.search(node.content)
            if summary_match is None and inner and isinstance(inner[0], HTMLBlock):
                summary_match = SUMMARY_RE.search(inner[0].content)
                if summary_match is not None:
                    inner = inner[1:]

            result.append(
                Details(
                    summary=_summary_text(summary_match),
                    children=self.group_details(inner),
                    open=OPEN_ATTR_RE.search(open_match.group(0)) is not None,
                )
            )
        return result
