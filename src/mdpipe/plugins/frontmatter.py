#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdpipe/plugins/frontmatter.py
"""YAML frontmatter support.

A document that starts with a ``---`` line and has a later closing ``---``
line carries YAML frontmatter. The mistune plugin consumes that block before
block parsing starts and emits a ``frontmatter`` token holding the raw YAML,
which the full parser turns into a ``Frontmatter`` node.

"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)

FRONTMATTER_RE = re.compile(r"\A---[ \t]*\n(?P<body>(?:.*?\n)??)---[ \t]*(?:\n|\Z)", re.DOTALL)


def split_frontmatter(text: str) -> Optional[tuple[str, int]]:
    """Find a leading frontmatter block.

    Parameters
    ----------
    text : str
        Markdown source with ``\\n`` line endings

    Returns
    -------
    tuple of (str, int) or None
        Raw YAML without the trailing newline and the offset where the
        markdown body starts, or None if there is no frontmatter

    """
    match = FRONTMATTER_RE.match(text)
    if match is None:
        return None
    body = match.group("body")
    if body.endswith("\n"):
        body = body[:-1]
    return body, match.end()


def _before_parse(md: Any, state: Any) -> None:
    found = split_frontmatter(state.src)
    if found is None:
        return
    raw, end = found
    state.tokens.append({"type": "frontmatter", "raw": raw})
    state.cursor = end


def frontmatter(md: Any) -> None:
    """Mistune plugin registering the frontmatter ``before_parse`` hook.

    Parameters
    ----------
    md : mistune.Markdown
        Markdown instance to extend

    """
    md.before_parse_hooks.append(_before_parse)


def parse_frontmatter(raw: str) -> dict[str, Any]:
    """Load frontmatter YAML into a dictionary.

    Parameters
    ----------
    raw : str
        Raw YAML from a Frontmatter node

    Returns
    -------
    dict
        Parsed mapping; empty when the YAML is invalid or not a mapping

    Examples
    --------
        >>> parse_frontmatter("title: Notes\\ntags: [a, b]")
        {'title': 'Notes', 'tags': ['a', 'b']}

    """
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        logger.warning("Invalid frontmatter YAML: %s", e)
        return {}
    if not isinstance(data, dict):
        return {}
    return data
