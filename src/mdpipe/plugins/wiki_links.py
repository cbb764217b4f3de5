#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdpipe/plugins/wiki_links.py
"""Wiki-style links and embeds.

Recognized forms:

- ``[[target]]`` becomes ``WikiLink(target)``
- ``[[target|alias]]`` becomes ``WikiLink(target, alias)``
- ``![[target]]`` becomes ``WikiEmbed(target)``

Both base grammars leave these as plain text (an undefined ``[target]``
reference stays literal), so they are recovered from text nodes.

"""

from __future__ import annotations

import re

from mdpipe.ast.nodes import Node, Text, WikiEmbed, WikiLink
from mdpipe.ast.transforms import TextTransformer

WIKI_LINK_RE = re.compile(r"(?P<embed>!?)\[\[(?P<target>[^\[\]|\n]+)(?:\|(?P<alias>[^\[\]\n]+))?\]\]")


def parse_wiki_links(text: str) -> list[Node]:
    """Split ``text`` into Text, WikiLink and WikiEmbed nodes.

    Parameters
    ----------
    text : str
        Text node content

    Returns
    -------
    list of Node
        Nodes in source order; a single Text node when nothing matches

    """
    result: list[Node] = []
    position = 0
    for match in WIKI_LINK_RE.finditer(text):
        target = match.group("target").strip()
        if not target:
            continue
        if match.start() > position:
            result.append(Text(content=text[position : match.start()]))
        if match.group("embed"):
            # Embeds take no alias; keep the alias text visible
            if match.group("alias") is not None:
                result.append(Text(content=match.group(0)))
            else:
                result.append(WikiEmbed(target=target))
        else:
            alias = match.group("alias")
            result.append(WikiLink(target=target, alias=alias.strip() if alias else None))
        position = match.end()

    if position < len(text):
        result.append(Text(content=text[position:]))
    return result or [Text(content=text)]


class WikiLinkTransform(TextTransformer):
    """Replace wiki link syntax in text nodes with WikiLink/WikiEmbed nodes."""

    def transform_text(self, text: str) -> list[Node]:
        """Tokenize wiki links in a single text node."""
        if "[[" not in text:
            return [Text(content=text)]
        return parse_wiki_links(text)
