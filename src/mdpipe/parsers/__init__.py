#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdpipe/parsers/__init__.py
"""Markdown parsers producing the shared syntax tree.

- fast: markdown-it-py, plain CommonMark plus tables
- full: mistune plus every grammar extension

"""

from __future__ import annotations

from typing import Optional

from mdpipe.constants import ParserKind
from mdpipe.exceptions import ValidationError
from mdpipe.options import PipelineOptions
from mdpipe.parsers.base import BaseParser
from mdpipe.parsers.fast import FastMarkdownParser
from mdpipe.parsers.full import FullMarkdownParser
from mdpipe.sniffing import ContentAnalysis


def create_parser(
    kind: ParserKind, options: Optional[PipelineOptions] = None, analysis: Optional[ContentAnalysis] = None
) -> BaseParser:
    """Create the parser for ``kind``.

    Parameters
    ----------
    kind : {"fast", "full"}
        Which parser to build
    options : PipelineOptions or None, default None
        Pipeline options
    analysis : ContentAnalysis or None, default None
        Sniffing results, used by the full parser to pick extensions

    Returns
    -------
    BaseParser
        Parser instance

    Raises
    ------
    ValidationError
        If ``kind`` is not a known parser

    """
    if kind == "fast":
        return FastMarkdownParser(options)
    if kind == "full":
        return FullMarkdownParser(options, analysis=analysis)
    raise ValidationError(f"Unknown parser: {kind!r}", parameter_name="parser", parameter_value=kind)


__all__ = ["BaseParser", "FastMarkdownParser", "FullMarkdownParser", "create_parser"]
