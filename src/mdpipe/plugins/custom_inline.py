#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdpipe/plugins/custom_inline.py
"""Custom inline marks: highlight, underline, superscript and subscript.

The base grammars know nothing about ``==highlight==``, ``++underline++``,
``^superscript^`` or ``~subscript~``, so these marks are recovered from the
text nodes of the parsed tree. A pair of markers may enclose other inline
nodes of the same container (``==**bold**==``), but both markers must sit in
text at that level. Code content is never scanned.

Tokenizing rules:

- For every mark definition, find the next opening marker at or after the
  cursor that has a matching closing marker with non-empty content between.
- Among all definitions, the pair with the smallest opening position wins.
  Ties go to the definition listed first in ``MARKS``.
- The content between the markers is tokenized recursively, so marks nest.
- The cursor moves past the closing marker; unclosed markers stay literal.
- The subscript marker skips doubled tildes, which belong to strikethrough.

"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional

from mdpipe.ast.nodes import Highlight, Node, Subscript, Superscript, Text, Underline
from mdpipe.ast.transforms import NodeTransformer, merge_adjacent_text


@dataclass(frozen=True)
class MarkDefinition:
    """Marker syntax for one custom inline mark.

    Parameters
    ----------
    name : str
        Mark name
    marker : str
        Opening and closing marker
    node_type : type
        Syntax tree node class produced for the mark
    skip_double : bool, default False
        Ignore doubled single-character markers (``~~``)

    """

    name: str
    marker: str
    node_type: type[Node]
    skip_double: bool = False


MARKS: tuple[MarkDefinition, ...] = (
    MarkDefinition("highlight", "==", Highlight),
    MarkDefinition("underline", "++", Underline),
    MarkDefinition("superscript", "^", Superscript),
    MarkDefinition("subscript", "~", Subscript, skip_double=True),
)

MARKERS_BY_TYPE: dict[type[Node], str] = {mark.node_type: mark.marker for mark in MARKS}

# Stands in for non-text siblings while a container's text is tokenized
OBJECT_PLACEHOLDER = "\ue010"


def _is_doubled(text: str, index: int, mark: MarkDefinition) -> bool:
    return mark.skip_double and len(mark.marker) == 1 and text[index + 1 : index + 2] == mark.marker


def find_mark_pair(text: str, mark: MarkDefinition, start: int) -> Optional[tuple[int, int]]:
    """Find the next valid opening/closing pair for ``mark``.

    Parameters
    ----------
    text : str
        Text to scan
    mark : MarkDefinition
        Mark to look for
    start : int
        Index to start scanning from

    Returns
    -------
    tuple of (int, int) or None
        Index of the opening marker and index of the closing marker, or None
        if no pair with non-empty content exists

    """
    marker_len = len(mark.marker)
    search_from = start

    while search_from < len(text):
        open_index = text.find(mark.marker, search_from)
        if open_index == -1:
            return None

        if _is_doubled(text, open_index, mark):
            search_from = open_index + 2
            continue

        close_from = open_index + marker_len
        while close_from < len(text):
            close_index = text.find(mark.marker, close_from)
            if close_index == -1:
                break
            if _is_doubled(text, close_index, mark):
                close_from = close_index + 2
                continue
            if close_index > open_index + marker_len:
                return open_index, close_index
            break

        search_from = open_index + 1

    return None


def parse_marks_in_text(text: str) -> list[Node]:
    """Tokenize custom marks in ``text``.

    Parameters
    ----------
    text : str
        Text node content

    Returns
    -------
    list of Node
        Text and mark nodes; a single Text node when no mark matches

    Examples
    --------
        >>> parse_marks_in_text("H~2~O")
        [Text(content='H', ...), Subscript(content=[Text(content='2', ...)], ...), Text(content='O', ...)]

    """
    result: list[Node] = []
    position = 0
    # Next pair per definition; a pair stays valid until the cursor passes its opener
    candidates: dict[str, Optional[tuple[int, int]]] = {}

    while position < len(text):
        best: Optional[tuple[MarkDefinition, int, int]] = None
        for mark in MARKS:
            if mark.name not in candidates or (
                candidates[mark.name] is not None and candidates[mark.name][0] < position  # type: ignore[index]
            ):
                candidates[mark.name] = find_mark_pair(text, mark, position)
            pair = candidates[mark.name]
            if pair is not None and (best is None or pair[0] < best[1]):
                best = (mark, pair[0], pair[1])

        if best is None:
            result.append(Text(content=text[position:]))
            break

        mark, open_index, close_index = best
        if open_index > position:
            result.append(Text(content=text[position:open_index]))

        inner = text[open_index + len(mark.marker) : close_index]
        result.append(mark.node_type(content=parse_marks_in_text(inner)))  # type: ignore[call-arg]
        position = close_index + len(mark.marker)

    if not result:
        return [Text(content=text)]
    return merge_adjacent_text(result)


def _has_marker(node: Node) -> bool:
    return isinstance(node, Text) and any(mark.marker in node.content for mark in MARKS)


def _restore_objects(nodes: list[Node], objects: Iterator[Node]) -> list[Node]:
    """Put the non-text siblings back in place of their placeholders."""
    result: list[Node] = []
    for node in nodes:
        if isinstance(node, Text):
            pieces = node.content.split(OBJECT_PLACEHOLDER)
            for index, piece in enumerate(pieces):
                if index:
                    result.append(next(objects))
                if piece:
                    result.append(Text(content=piece))
        else:
            node.content = _restore_objects(node.content, objects)  # type: ignore[attr-defined]
            result.append(node)
    return merge_adjacent_text(result)


def parse_marks_in_nodes(nodes: list[Node]) -> list[Node]:
    """Tokenize custom marks across the inline children of one container.

    Non-text siblings are replaced by a placeholder character while the
    combined text is tokenized, then put back inside whichever mark nodes
    enclose them.

    Parameters
    ----------
    nodes : list of Node
        Inline siblings, already merged so no two Text nodes are adjacent

    Returns
    -------
    list of Node
        Siblings with custom mark syntax replaced by mark nodes

    """
    if not any(_has_marker(node) for node in nodes):
        return nodes

    if any(isinstance(node, Text) and OBJECT_PLACEHOLDER in node.content for node in nodes):
        result: list[Node] = []
        for node in nodes:
            result.extend(parse_marks_in_text(node.content) if _has_marker(node) else [node])  # type: ignore[attr-defined]
        return merge_adjacent_text(result)

    objects = [node for node in nodes if not isinstance(node, Text)]
    combined = "".join(node.content if isinstance(node, Text) else OBJECT_PLACEHOLDER for node in nodes)
    return _restore_objects(parse_marks_in_text(combined), iter(objects))


class CustomInlineTransform(NodeTransformer):
    """Replace custom mark syntax in inline content with mark nodes."""

    def _transform_children(self, children: list[Node]) -> list[Node]:
        return parse_marks_in_nodes(super()._transform_children(children))
