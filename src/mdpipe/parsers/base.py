#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdpipe/parsers/base.py
"""Base class for the markdown parsers.

Both the fast and the full parser turn preprocessed markdown text into a
syntax tree ``Document``. They must agree on node shapes for every input the
fast parser accepts, so the normalizations they share live here.

"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

from mdpipe.ast import Document, Image, Node, Text, get_node_children
from mdpipe.exceptions import ValidationError
from mdpipe.options import PipelineOptions

logger = logging.getLogger(__name__)


class BaseParser(ABC):
    """Abstract base class for markdown parsers.

    Parameters
    ----------
    options : PipelineOptions or None, default = None
        Pipeline options; None means the defaults

    Examples
    --------
    Creating a custom parser:

        >>> class EmptyParser(BaseParser):
        ...     def parse(self, text):
        ...         return Document(children=[])

    """

    def __init__(self, options: Optional[PipelineOptions] = None):
        """Initialize the parser with optional configuration."""
        self._validate_options_type(options)
        self.options: PipelineOptions = options or PipelineOptions()

    @staticmethod
    def _validate_options_type(options: Optional[PipelineOptions]) -> None:
        """Reject option objects of the wrong type.

        Raises
        ------
        ValidationError
            If options are not None and not a PipelineOptions instance

        """
        if options is not None and not isinstance(options, PipelineOptions):
            raise ValidationError(
                f"Expected PipelineOptions, got {type(options).__name__}",
                parameter_name="options",
                parameter_value=options,
            )

    @abstractmethod
    def parse(self, text: str) -> Document:
        """Parse markdown text into a syntax tree.

        Parameters
        ----------
        text : str
            Markdown source, after escape preprocessing

        Returns
        -------
        Document
            Syntax tree root

        """
        raise NotImplementedError


def normalize_newlines(text: str) -> str:
    """Convert ``\\r\\n`` and ``\\r`` line endings to ``\\n``."""
    return text.replace("\r\n", "\n").replace("\r", "\n")


def strip_trailing_newline(text: str) -> str:
    """Remove exactly one trailing newline, if present."""
    return text[:-1] if text.endswith("\n") else text


def language_from_info(info: Optional[str]) -> Optional[str]:
    """Return the first word of a fence info string, or None."""
    if not info:
        return None
    parts = info.strip().split(maxsplit=1)
    return parts[0] if parts else None


def plain_text(nodes: list[Node]) -> str:
    """Flatten inline nodes to their plain text, as used for image alt text."""
    parts: list[str] = []
    stack = list(reversed(nodes))
    while stack:
        node = stack.pop()
        if isinstance(node, Text):
            parts.append(node.content)
        elif isinstance(node, Image):
            parts.append(node.alt_text)
        elif hasattr(node, "content") and isinstance(node.content, str):
            parts.append(node.content)
        else:
            stack.extend(reversed(get_node_children(node)))
    return "".join(parts)
