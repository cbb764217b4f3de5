#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdpipe/plugins/breaks.py
"""Soft break preservation.

With ``preserve_line_breaks`` enabled every soft break (a newline inside a
text node) becomes a hard ``LineBreak``, so single newlines in paragraphs
survive serialization as explicit breaks.

"""

from __future__ import annotations

from mdpipe.ast.nodes import LineBreak, Node, Text
from mdpipe.ast.transforms import TextTransformer


class BreaksTransform(TextTransformer):
    """Turn newlines inside text nodes into hard line breaks."""

    def transform_text(self, text: str) -> list[Node]:
        """Split ``text`` on newlines, inserting a LineBreak between lines."""
        if "\n" not in text:
            return [Text(content=text)]

        nodes: list[Node] = []
        for index, line in enumerate(text.split("\n")):
            if index:
                nodes.append(LineBreak())
            if line:
                nodes.append(Text(content=line))
        return nodes
