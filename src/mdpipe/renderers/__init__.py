#  Copyright (c) 2025 Tom Villani, Ph.D.

# src/mdpipe/renderers/__init__.py
"""Syntax tree renderers.

- MarkdownSerializer: render a syntax tree back to markdown text

Examples
--------
    >>> from mdpipe.ast import Document, Heading, Text
    >>> from mdpipe.renderers import MarkdownSerializer
    >>> doc = Document(children=[Heading(level=1, content=[Text(content="Title")])])
    >>> MarkdownSerializer().render_to_string(doc)
    '# Title'

"""

from mdpipe.renderers.markdown import MarkdownSerializer, escape_text

__all__ = ["MarkdownSerializer", "escape_text"]
