#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdpipe/plugins/alerts.py
"""GitHub-style alerts.

A block quote whose first paragraph starts with ``[!KIND]`` on its own line
is an alert::

    > [!WARNING]
    > Back up your files first.

The marker line is removed and the rest of the quote becomes the alert body.
Kinds are matched case-insensitively and stored in upper case.

"""

from __future__ import annotations

import re

from mdpipe.ast.nodes import Alert, BlockQuote, LineBreak, Node, Paragraph, Text
from mdpipe.ast.transforms import NodeTransformer, TransformResult
from mdpipe.constants import ALERT_KINDS

ALERT_MARKER_RE = re.compile(r"^\[!(?P<kind>" + "|".join(ALERT_KINDS) + r")\][ \t]*(?:\n|$)", re.IGNORECASE)


class AlertTransform(NodeTransformer):
    """Convert ``> [!KIND]`` block quotes into Alert nodes."""

    def visit_block_quote(self, node: BlockQuote) -> TransformResult:
        """Return an Alert when the quote starts with an alert marker."""
        children = self._transform_children(node.children)
        if not children or not isinstance(children[0], Paragraph):
            return BlockQuote(children=children, metadata=node.metadata.copy())

        first = children[0]
        lead = first.content[0] if first.content else None
        match = ALERT_MARKER_RE.match(lead.content) if isinstance(lead, Text) else None
        if match is None:
            return BlockQuote(children=children, metadata=node.metadata.copy())

        remainder: list[Node] = []
        rest = lead.content[match.end() :]  # type: ignore[union-attr]
        if rest:
            remainder.append(Text(content=rest))
        tail = first.content[1:]
        if not rest and tail and isinstance(tail[0], LineBreak):
            tail = tail[1:]
        remainder.extend(tail)

        body = children[1:]
        if remainder:
            body = [Paragraph(content=remainder, metadata=first.metadata.copy())] + body

        return Alert(kind=match.group("kind").upper(), children=body, metadata=node.metadata.copy())
