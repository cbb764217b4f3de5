#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdpipe/pipeline.py
"""Parse and serialize pipelines.

Parsing runs::

    text -> escape preprocessing -> parser selection -> (cache | parser)
         -> sentinel restoration -> syntax tree -> document tree

and serializing runs the reverse converter followed by the markdown
serializer. A ``PipelineContext`` owns the parse cache and the background
parse worker; the module-level functions use a lazily created default
context unless one is passed in.

Examples
--------
    >>> from mdpipe import parse, serialize
    >>> doc = parse("H~2~O and x^2^")
    >>> serialize(doc)
    'H~2~O and x^2^'

"""

from __future__ import annotations

import copy
import logging
import threading
from types import TracebackType
from typing import Optional

from mdpipe.ast.nodes import Document
from mdpipe.ast.validation import validate_tree
from mdpipe.cache import ParsingCache
from mdpipe.constants import ERROR_PREVIEW_LENGTH, ParserKind
from mdpipe.converters.from_document import document_to_syntax
from mdpipe.converters.to_document import syntax_to_document
from mdpipe.document import DocDocument, count_nodes
from mdpipe.escaping import preprocess_escaped_markers, restore_escaped_markers
from mdpipe.exceptions import MdPipeError, ParseError, SerializeError, ValidationError
from mdpipe.offload import OffloadAdapter
from mdpipe.options import PipelineOptions
from mdpipe.parsers import create_parser
from mdpipe.renderers.markdown import MarkdownSerializer
from mdpipe.sniffing import analyze_content, select_parser

logger = logging.getLogger(__name__)


def build_syntax_tree(
    text: str, options: Optional[PipelineOptions] = None, parser: Optional[ParserKind] = None
) -> Document:
    """Parse markdown into a syntax tree without caching or error wrapping.

    Parameters
    ----------
    text : str
        Markdown source
    options : PipelineOptions or None, default None
        Pipeline options; any explicit options select the full parser
    parser : {"fast", "full"} or None, default None
        Force a parser instead of sniffing the content

    Returns
    -------
    Document
        Syntax tree with escaped markers restored

    """
    source = preprocess_escaped_markers(text)
    kind = parser or select_parser(source, options)
    analysis = analyze_content(source) if kind == "full" else None
    tree = create_parser(kind, options, analysis).parse(source)
    restore_escaped_markers(tree)
    return tree


def _check_text(text: Optional[str]) -> str:
    if text is None:
        return ""
    if not isinstance(text, str):
        raise ValidationError(
            f"Expected markdown text as str, got {type(text).__name__}",
            parameter_name="text",
            parameter_value=type(text).__name__,
        )
    return text


def _parse_error(text: str, error: Exception) -> ParseError:
    return ParseError(
        f"Markdown parse failed: {error!r}",
        input_preview=text[:ERROR_PREVIEW_LENGTH],
        input_length=len(text),
        original_error=error,
    )


class PipelineContext:
    """Owner of the parse cache and background parse worker.

    Parameters
    ----------
    strict : bool, default False
        Validate syntax trees and raise on unrecognized node kinds instead
        of skipping them
    cache : ParsingCache, optional
        Cache to use; a new one is created by default
    offload : OffloadAdapter, optional
        Adapter for background parsing; created on first async parse

    Examples
    --------
        >>> with PipelineContext(strict=True) as context:
        ...     doc = context.parse("# Title")
        ...     context.serialize(doc)
        '# Title'

    """

    def __init__(
        self,
        strict: bool = False,
        cache: Optional[ParsingCache] = None,
        offload: Optional[OffloadAdapter] = None,
    ) -> None:
        """Initialize the context."""
        self.strict = strict
        self.cache = cache if cache is not None else ParsingCache()
        self._offload = offload
        self._closed = False

    def __enter__(self) -> PipelineContext:
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.close()

    @property
    def offload(self) -> OffloadAdapter:
        """Background parse adapter, created on first use."""
        if self._offload is None:
            self._offload = OffloadAdapter()
        return self._offload

    def _finish_tree(self, tree: Document) -> Document:
        if self.strict:
            validate_tree(tree)
        return tree

    def _syntax_tree(self, text: str, options: Optional[PipelineOptions], parser: Optional[ParserKind]) -> Document:
        if parser is not None:
            return self._finish_tree(build_syntax_tree(text, options, parser))
        return self._finish_tree(self.cache.get_or_parse(text, options, build_syntax_tree))

    def parse_to_syntax_tree(
        self, text: str, options: Optional[PipelineOptions] = None, parser: Optional[ParserKind] = None
    ) -> Document:
        """Parse markdown into a syntax tree.

        Parameters
        ----------
        text : str
            Markdown source
        options : PipelineOptions or None, default None
            Pipeline options
        parser : {"fast", "full"} or None, default None
            Force a parser; a forced parse bypasses the cache

        Returns
        -------
        Document
            Syntax tree owned by the caller

        Raises
        ------
        ParseError
            If the pipeline fails internally

        """
        text = _check_text(text)
        try:
            tree = self._syntax_tree(text, options, parser)
        except MdPipeError:
            raise
        except Exception as e:
            raise _parse_error(text, e) from e
        # Cached trees are shared between callers
        return copy.deepcopy(tree) if parser is None and self.cache.is_cacheable(text) else tree

    def parse(self, text: str, options: Optional[PipelineOptions] = None) -> DocDocument:
        """Parse markdown into a document tree.

        Malformed markdown never raises; every input has a parse.

        Parameters
        ----------
        text : str
            Markdown source; None is treated as empty text
        options : PipelineOptions or None, default None
            Pipeline options

        Returns
        -------
        DocDocument
            Document tree

        Raises
        ------
        ParseError
            If the pipeline fails internally
        InvariantViolationError
            In strict mode, if the tree holds an unrecognized or misplaced node

        """
        text = _check_text(text)
        try:
            return syntax_to_document(self._syntax_tree(text, options, None), strict=self.strict)
        except MdPipeError:
            raise
        except Exception as e:
            raise _parse_error(text, e) from e

    async def parse_async(self, text: str, options: Optional[PipelineOptions] = None) -> DocDocument:
        """Parse markdown into a document tree, offloading large documents.

        Same contract as :meth:`parse`. Results parsed in the worker are
        stored in the cache once they return.
        """
        text = _check_text(text)
        try:
            tree = self.cache.lookup(text, options)
            if tree is None:
                tree = await self.offload.parse_syntax_tree_async(text, options)
                self.cache.store(text, options, tree)
            return syntax_to_document(self._finish_tree(tree), strict=self.strict)
        except MdPipeError:
            raise
        except Exception as e:
            raise _parse_error(text, e) from e

    def serialize_syntax_tree(self, tree: Document, options: Optional[PipelineOptions] = None) -> str:
        """Serialize a syntax tree to markdown."""
        if self.strict:
            validate_tree(tree)
        return MarkdownSerializer(options).render_to_string(tree)

    def serialize(self, document: DocDocument, options: Optional[PipelineOptions] = None) -> str:
        """Serialize a document tree to markdown.

        Parameters
        ----------
        document : DocDocument
            Document tree
        options : PipelineOptions or None, default None
            Pipeline options; ``hard_break_style`` selects the hard break markup

        Returns
        -------
        str
            Markdown text

        Raises
        ------
        ValidationError
            If ``document`` is not a document tree
        SerializeError
            If the pipeline fails internally

        """
        if not isinstance(document, DocDocument):
            raise ValidationError(
                f"Expected DocDocument, got {type(document).__name__}",
                parameter_name="document",
                parameter_value=type(document).__name__,
            )
        try:
            return self.serialize_syntax_tree(document_to_syntax(document, strict=self.strict), options)
        except MdPipeError:
            raise
        except Exception as e:
            raise SerializeError(
                f"Markdown serialization failed: {e!r}",
                node_count=count_nodes(document),
                block_count=len(document.children),
                original_error=e,
            ) from e

    def close(self) -> None:
        """Stop the background worker and drop cached trees."""
        if self._closed:
            return
        self._closed = True
        if self._offload is not None:
            self._offload.terminate()
        self.cache.clear()
        logger.debug("Closed pipeline context")


_default_context: Optional[PipelineContext] = None
_default_context_lock = threading.Lock()


def get_default_context() -> PipelineContext:
    """Return the shared default context, creating it on first use."""
    global _default_context
    if _default_context is None:
        with _default_context_lock:
            if _default_context is None:
                _default_context = PipelineContext()
    return _default_context


def reset_default_context(context: Optional[PipelineContext] = None) -> None:
    """Close the default context and replace it.

    Parameters
    ----------
    context : PipelineContext, optional
        New default; a fresh context is created lazily when omitted

    """
    global _default_context
    with _default_context_lock:
        previous, _default_context = _default_context, context
    if previous is not None and previous is not context:
        previous.close()


def parse(
    text: str, options: Optional[PipelineOptions] = None, *, context: Optional[PipelineContext] = None
) -> DocDocument:
    """Parse markdown into a document tree.

    Parameters
    ----------
    text : str
        Markdown source
    options : PipelineOptions or None, default None
        Pipeline options
    context : PipelineContext, optional
        Context to parse with; the default context when omitted

    Returns
    -------
    DocDocument
        Document tree

    """
    return (context or get_default_context()).parse(text, options)


def serialize(
    document: DocDocument, options: Optional[PipelineOptions] = None, *, context: Optional[PipelineContext] = None
) -> str:
    """Serialize a document tree to markdown."""
    return (context or get_default_context()).serialize(document, options)


async def parse_async(
    text: str, options: Optional[PipelineOptions] = None, *, context: Optional[PipelineContext] = None
) -> DocDocument:
    """Parse markdown into a document tree, offloading large documents to a worker process."""
    return await (context or get_default_context()).parse_async(text, options)


def parse_to_syntax_tree(
    text: str,
    options: Optional[PipelineOptions] = None,
    parser: Optional[ParserKind] = None,
    *,
    context: Optional[PipelineContext] = None,
) -> Document:
    """Parse markdown into a syntax tree, optionally forcing a parser."""
    return (context or get_default_context()).parse_to_syntax_tree(text, options, parser)


def serialize_syntax_tree(
    tree: Document, options: Optional[PipelineOptions] = None, *, context: Optional[PipelineContext] = None
) -> str:
    """Serialize a syntax tree to markdown."""
    return (context or get_default_context()).serialize_syntax_tree(tree, options)
