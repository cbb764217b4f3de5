#  Copyright (c) 2025 Tom Villani, Ph.D.
"""mdpipe - markdown document conversion pipeline.

mdpipe parses markdown into a syntax tree, converts it into a rich-text
document tree of runs and marks for editing, and takes edited document trees
back through the syntax tree to markdown text.

Key Features
------------
- Dual parser: markdown-it-py for plain CommonMark, mistune plus grammar
  extensions for everything else, chosen by sniffing the content
- Extensions: highlight, underline, superscript, subscript, math, wiki links,
  details blocks, alerts, footnotes, frontmatter and reference links
- Stable round trips: serializing a parse and re-parsing gives the same tree
- Content-addressed cache for large documents
- Background parsing of very large documents in a worker process

Requirements
------------
- Python 3.10+
- mistune, markdown-it-py, PyYAML, rich

Examples
--------
Round trip a document:

    >>> from mdpipe import parse, serialize
    >>> doc = parse("# Notes\\n\\nWater is H~2~O.")
    >>> serialize(doc)
    '# Notes\\n\\nWater is H~2~O.'

Use an explicit context:

    >>> from mdpipe import PipelineContext, PipelineOptions
    >>> with PipelineContext() as context:
    ...     doc = context.parse("line one\\nline two", PipelineOptions(preserve_line_breaks=True))
    ...     context.serialize(doc)
    'line one\\\\\\nline two'

"""

from mdpipe.cache import CacheStats, ParsingCache, hash_string
from mdpipe.document import DocDocument, Mark, MarkKind, Run
from mdpipe.exceptions import (
    InvariantViolationError,
    MdPipeError,
    OffloadError,
    ParseError,
    SerializeError,
    ValidationError,
)
from mdpipe.offload import OffloadAdapter
from mdpipe.options import PipelineOptions
from mdpipe.pipeline import (
    PipelineContext,
    get_default_context,
    parse,
    parse_async,
    parse_to_syntax_tree,
    reset_default_context,
    serialize,
    serialize_syntax_tree,
)

__all__ = [
    "CacheStats",
    "DocDocument",
    "InvariantViolationError",
    "Mark",
    "MarkKind",
    "MdPipeError",
    "OffloadAdapter",
    "OffloadError",
    "ParseError",
    "ParsingCache",
    "PipelineContext",
    "PipelineOptions",
    "Run",
    "SerializeError",
    "ValidationError",
    "get_default_context",
    "hash_string",
    "parse",
    "parse_async",
    "parse_to_syntax_tree",
    "reset_default_context",
    "serialize",
    "serialize_syntax_tree",
]
