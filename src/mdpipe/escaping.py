#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdpipe/escaping.py
"""Protection of escaped extension markers.

The base grammars resolve backslash escapes before the custom inline mark
tokenizer runs, so ``\\==text==`` would reach the tokenizer as ``==text==``
and become a highlight. To keep such escapes literal, the source is
rewritten before parsing: each escaped marker is replaced with a private-use
sentinel character, and the sentinels are mapped back after parsing.

Verbatim regions (inline code spans and fenced code blocks) are copied
untouched, since backslashes are literal inside code.

"""

from __future__ import annotations

import re
from typing import Optional

from mdpipe.ast.nodes import (
    Code,
    CodeBlock,
    Details,
    Frontmatter,
    HTMLBlock,
    HTMLInline,
    Image,
    Link,
    LinkDefinition,
    MathBlock,
    MathInline,
    Node,
    Text,
    WikiEmbed,
    WikiLink,
)
from mdpipe.ast.transforms import iter_nodes
from mdpipe.constants import ESCAPE_SEQUENCES, SENTINEL_RESTORE

# Fence opener: up to 3 spaces, then 3+ backticks (info string without
# backticks) or 3+ tildes
FENCE_OPEN_RE = re.compile(r"^ {0,3}(?:(?P<ticks>`{3,})[^`]*|(?P<tildes>~{3,}).*)$")
PARAGRAPH_BREAK_RE = re.compile(r"\n[ \t]*\n")

_LITERAL_TABLE = {ord(sentinel): literal for sentinel, literal in SENTINEL_RESTORE.items()}


def _closes_fence(line: str, fence_char: str, fence_len: int) -> bool:
    pattern = r"^ {0,3}" + re.escape(fence_char) + "{" + str(fence_len) + r",}(?=\s|$)"
    return re.match(pattern, line) is not None


def _find_code_span_end(region: str, start: int, run_length: int) -> Optional[int]:
    """Return the index just past the backtick run closing a code span.

    The closing run must have exactly ``run_length`` backticks and occur
    before the end of the current paragraph.
    """
    paragraph_end = PARAGRAPH_BREAK_RE.search(region, start)
    limit = paragraph_end.start() if paragraph_end else len(region)
    closer = re.compile(r"(?<!`)`{" + str(run_length) + r"}(?!`)")
    match = closer.search(region, start, limit)
    return match.end() if match else None


def _replace_inline_escapes(region: str) -> str:
    parts: list[str] = []
    i = 0
    length = len(region)
    while i < length:
        char = region[i]
        if char == "`":
            run_end = i
            while run_end < length and region[run_end] == "`":
                run_end += 1
            span_end = _find_code_span_end(region, run_end, run_end - i)
            # An unmatched backtick run is literal text, not a code span
            stop = span_end if span_end is not None else run_end
            parts.append(region[i:stop])
            i = stop
            continue
        if char == "\\":
            for sequence, placeholder in ESCAPE_SEQUENCES:
                if region.startswith(sequence, i):
                    parts.append(placeholder)
                    i += len(sequence)
                    break
            else:
                # Keep any other escape pair intact so "\\`" and "\\\\" stay escapes
                parts.append(region[i : i + 2])
                i += 2
            continue
        parts.append(char)
        i += 1
    return "".join(parts)


def preprocess_escaped_markers(text: str) -> str:
    """Replace escaped custom markers outside code with sentinel placeholders.

    Parameters
    ----------
    text : str
        Raw markdown source

    Returns
    -------
    str
        Source with ``\\==``, ``\\++``, ``\\^`` and ``\\~`` replaced by
        sentinels everywhere except inside code spans and fenced code blocks

    Examples
    --------
        >>> preprocess_escaped_markers("\\\\==x== and `\\\\==y==`")
        '\\ue001\\ue001x== and `\\\\==y==`'

    """
    if "\\" not in text:
        return text

    output: list[str] = []
    pending: list[str] = []
    fence_char = ""
    fence_len = 0

    def flush() -> None:
        if pending:
            output.append(_replace_inline_escapes("".join(pending)))
            pending.clear()

    for line in text.splitlines(keepends=True):
        detect = line.rstrip("\n")
        if detect.endswith("\r"):
            detect = detect[:-1]

        if fence_char:
            output.append(line)
            if _closes_fence(detect, fence_char, fence_len):
                fence_char = ""
                fence_len = 0
            continue

        match = FENCE_OPEN_RE.match(detect)
        if match:
            flush()
            fence = match.group("ticks") or match.group("tildes")
            fence_char = fence[0]
            fence_len = len(fence)
            output.append(line)
            continue

        pending.append(line)

    flush()
    return "".join(output)


def restore_literal_markers(text: str) -> str:
    """Map sentinel placeholders in rendered text back to marker characters."""
    return text.translate(_LITERAL_TABLE)


def restore_escape_sequences(text: str) -> str:
    """Map sentinel placeholders in verbatim content back to the original escapes."""
    for sequence, placeholder in ESCAPE_SEQUENCES:
        text = text.replace(placeholder, sequence)
    return text


def restore_escaped_markers(root: Node) -> Node:
    """Restore sentinel placeholders throughout a parsed tree, in place.

    Text-bearing fields get the literal marker characters back. Verbatim
    fields (code, math, raw HTML, frontmatter) only receive sentinels when a
    code region was detected differently by the base grammar; those get the
    original backslash escape back, since escapes are not processed there.

    Parameters
    ----------
    root : Node
        Parsed tree to fix up

    Returns
    -------
    Node
        The same tree, for chaining

    """
    for node in iter_nodes(root):
        if isinstance(node, Text):
            node.content = restore_literal_markers(node.content)
        elif isinstance(node, (Code, CodeBlock, MathInline, MathBlock, HTMLInline, HTMLBlock, Frontmatter)):
            node.content = restore_escape_sequences(node.content)
        elif isinstance(node, Image):
            node.alt_text = restore_literal_markers(node.alt_text)
            if node.title:
                node.title = restore_literal_markers(node.title)
        elif isinstance(node, Link) and node.title:
            node.title = restore_literal_markers(node.title)
        elif isinstance(node, LinkDefinition) and node.title:
            node.title = restore_literal_markers(node.title)
        elif isinstance(node, WikiLink):
            node.target = restore_literal_markers(node.target)
            if node.alias:
                node.alias = restore_literal_markers(node.alias)
        elif isinstance(node, WikiEmbed):
            node.target = restore_literal_markers(node.target)
        elif isinstance(node, Details):
            node.summary = restore_literal_markers(node.summary)
    return root
