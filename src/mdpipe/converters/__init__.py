#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Conversion between the markdown syntax tree and the editor document tree."""

from mdpipe.converters.from_document import SyntaxTreeBuilder, document_to_syntax
from mdpipe.converters.to_document import DocumentTreeBuilder, coalesce_runs, syntax_to_document

__all__ = [
    "DocumentTreeBuilder",
    "SyntaxTreeBuilder",
    "coalesce_runs",
    "document_to_syntax",
    "syntax_to_document",
]
