#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdpipe/offload.py
"""Background parsing of large documents in a worker process.

The adapter owns one single-worker process pool. Requests and responses
are plain picklable messages matched by a correlation id; the worker shares
no memory with the caller.

Any problem with the worker makes the adapter fall back to parsing in the
calling thread. Failures that mean the pool itself is unusable also set the
permanent ``failed`` flag, after which every request is parsed synchronously.

"""

from __future__ import annotations

import asyncio
import itertools
import logging
import threading
from concurrent.futures import BrokenExecutor, Executor, ProcessPoolExecutor
from dataclasses import dataclass
from typing import Callable, Optional, Union

from mdpipe.ast.nodes import Document
from mdpipe.constants import WORKER_SIZE_THRESHOLD
from mdpipe.exceptions import OffloadError
from mdpipe.options import PipelineOptions

logger = logging.getLogger(__name__)

# Errors meaning the pool cannot be used any more
EXECUTOR_ERRORS: tuple[type[BaseException], ...] = (BrokenExecutor, OSError, RuntimeError)


@dataclass(frozen=True)
class ParseRequest:
    """Message sent to the worker.

    Parameters
    ----------
    id : int
        Correlation id
    text : str
        Markdown source
    options : PipelineOptions or None
        Pipeline options

    """

    id: int
    text: str
    options: Optional[PipelineOptions] = None


@dataclass(frozen=True)
class ParseSuccess:
    """Worker response carrying the parsed syntax tree."""

    id: int
    tree: Document


@dataclass(frozen=True)
class ParseFailure:
    """Worker response carrying the error message of a failed parse."""

    id: int
    error: str


ParseResponse = Union[ParseSuccess, ParseFailure]
SyncParseFunction = Callable[[str, Optional[PipelineOptions]], Document]


def parse_request(request: ParseRequest) -> ParseResponse:
    """Parse one request inside the worker process.

    Parameters
    ----------
    request : ParseRequest
        Request to handle

    Returns
    -------
    ParseSuccess or ParseFailure
        Response carrying the request's id

    """
    from mdpipe.pipeline import build_syntax_tree

    try:
        return ParseSuccess(id=request.id, tree=build_syntax_tree(request.text, request.options))
    except Exception as e:
        return ParseFailure(id=request.id, error=f"{type(e).__name__}: {e}")


def _default_executor_factory() -> Executor:
    return ProcessPoolExecutor(max_workers=1)


def _default_sync_parse(text: str, options: Optional[PipelineOptions]) -> Document:
    from mdpipe.pipeline import build_syntax_tree

    return build_syntax_tree(text, options)


class OffloadAdapter:
    """Run syntax tree parsing in a worker process.

    Parameters
    ----------
    executor_factory : callable, optional
        Zero-argument callable returning the executor; defaults to a
        ``ProcessPoolExecutor`` with one worker
    threshold : int, default 10000
        Minimum text length, in characters, for a request to be offloaded
    sync_parse : callable, optional
        ``sync_parse(text, options)`` used below the threshold and on fallback
    worker : callable, optional
        Function the executor runs for each request; must be picklable when
        the executor is a process pool

    Examples
    --------
        >>> adapter = OffloadAdapter()
        >>> adapter.should_use_async_parsing(50000)
        True
        >>> adapter.terminate()

    """

    def __init__(
        self,
        executor_factory: Optional[Callable[[], Executor]] = None,
        threshold: int = WORKER_SIZE_THRESHOLD,
        sync_parse: Optional[SyncParseFunction] = None,
        worker: Callable[[ParseRequest], ParseResponse] = parse_request,
    ) -> None:
        """Initialize the adapter; the executor is created on first use."""
        self._executor_factory = executor_factory or _default_executor_factory
        self._sync_parse = sync_parse or _default_sync_parse
        self._worker = worker
        self.threshold = threshold
        self.failed = False
        self._executor: Optional[Executor] = None
        self._pending: dict[int, ParseRequest] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    @property
    def pending_count(self) -> int:
        """Number of requests submitted and not yet answered."""
        return len(self._pending)

    def should_use_async_parsing(self, length: int) -> bool:
        """Check whether a document of ``length`` characters would be offloaded."""
        return length >= self.threshold and not self.failed

    def _get_executor(self) -> Optional[Executor]:
        """Return the executor, creating it on first use; None once failed."""
        with self._lock:
            if self.failed:
                return None
            if self._executor is None:
                try:
                    self._executor = self._executor_factory()
                except EXECUTOR_ERRORS as e:
                    logger.warning(f"Could not start parse worker, parsing synchronously from now on: {e}")
                    self.failed = True
                    return None
            return self._executor

    def _mark_failed(self, error: BaseException) -> None:
        logger.warning(f"Parse worker failed, parsing synchronously from now on: {error}")
        with self._lock:
            self.failed = True
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=False, cancel_futures=True)

    async def _submit(self, executor: Executor, request: ParseRequest) -> Document:
        """Send ``request`` to the worker and return its tree.

        Raises
        ------
        OffloadError
            If the worker reports a failure or answers a different request

        """
        self._pending[request.id] = request
        try:
            response = await asyncio.wrap_future(executor.submit(self._worker, request))
        finally:
            self._pending.pop(request.id, None)

        if response.id != request.id:
            raise OffloadError(f"Response id {response.id} does not match request", request_id=request.id)
        if isinstance(response, ParseFailure):
            raise OffloadError(f"Worker parse failed: {response.error}", request_id=request.id)
        return response.tree

    async def parse_syntax_tree_async(self, text: str, options: Optional[PipelineOptions] = None) -> Document:
        """Parse ``text``, in the worker when it is large enough.

        Parameters
        ----------
        text : str
            Markdown source
        options : PipelineOptions or None, default None
            Pipeline options

        Returns
        -------
        Document
            Syntax tree

        Notes
        -----
        Exceptions from the synchronous fallback parse propagate. Cancelling
        the awaiting task abandons the request and its result is discarded.

        """
        if len(text) < self.threshold:
            return self._sync_parse(text, options)

        executor = self._get_executor()
        if executor is None:
            return self._sync_parse(text, options)

        request = ParseRequest(id=next(self._ids), text=text, options=options)
        try:
            return await self._submit(executor, request)
        except OffloadError as e:
            logger.warning(f"Offloaded parse of request {e.request_id} failed, parsing synchronously: {e}")
        except EXECUTOR_ERRORS as e:
            self._mark_failed(e)
        return self._sync_parse(text, options)

    def terminate(self) -> None:
        """Shut the worker down and forget pending requests.

        A later request starts a new worker unless the adapter has failed.
        """
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=False, cancel_futures=True)
        self._pending.clear()
