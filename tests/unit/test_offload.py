#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Tests for background parsing in a worker."""

from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor

import pytest

from mdpipe.ast import Document, Paragraph, Text
from mdpipe.offload import OffloadAdapter, ParseFailure, ParseRequest, ParseSuccess, parse_request

SYNC_TREE = Document(children=[Paragraph(content=[Text(content="sync")])])
WORKER_TREE = Document(children=[Paragraph(content=[Text(content="worker")])])


class ExecutorFactory:
    """Executor factory that counts the executors it creates."""

    def __init__(self, error: Exception = None):
        self.created = 0
        self.error = error

    def __call__(self):
        self.created += 1
        if self.error is not None:
            raise self.error
        return ThreadPoolExecutor(max_workers=1)


def sync_parse(text, options) -> Document:
    return SYNC_TREE


def worker_success(request: ParseRequest) -> ParseSuccess:
    return ParseSuccess(id=request.id, tree=WORKER_TREE)


def worker_wrong_id(request: ParseRequest) -> ParseSuccess:
    return ParseSuccess(id=request.id + 100, tree=WORKER_TREE)


def worker_failure(request: ParseRequest) -> ParseFailure:
    return ParseFailure(id=request.id, error="ValueError: bad input")


def worker_crash(request: ParseRequest) -> ParseSuccess:
    raise RuntimeError("worker died")


def make_adapter(factory, worker=worker_success) -> OffloadAdapter:
    return OffloadAdapter(executor_factory=factory, threshold=10, sync_parse=sync_parse, worker=worker)


LARGE = "x" * 20


@pytest.mark.unit
class TestParseRequest:
    """Test the function run inside the worker."""

    def test_success(self) -> None:
        """Test that a request is parsed into a tree."""
        response = parse_request(ParseRequest(id=7, text="# Title"))
        assert isinstance(response, ParseSuccess)
        assert response.id == 7
        assert response.tree.children[0].level == 1

    def test_failure_is_reported(self) -> None:
        """Test that parse errors become failure responses."""
        response = parse_request(ParseRequest(id=1, text=None))
        assert isinstance(response, ParseFailure)
        assert response.id == 1
        assert ": " in response.error


@pytest.mark.unit
class TestOffloadAdapter:
    """Test dispatching, fallback and termination."""

    def test_should_use_async_parsing(self) -> None:
        """Test the size threshold and the failed flag."""
        adapter = make_adapter(ExecutorFactory())
        assert adapter.should_use_async_parsing(10)
        assert not adapter.should_use_async_parsing(9)
        adapter.failed = True
        assert not adapter.should_use_async_parsing(10)

    @pytest.mark.asyncio
    async def test_small_text_parsed_synchronously(self) -> None:
        """Test that small documents never start a worker."""
        factory = ExecutorFactory()
        adapter = make_adapter(factory)

        assert await adapter.parse_syntax_tree_async("short") is SYNC_TREE
        assert factory.created == 0

    @pytest.mark.asyncio
    async def test_large_text_parsed_in_worker(self) -> None:
        """Test that large documents are parsed by the worker."""
        factory = ExecutorFactory()
        adapter = make_adapter(factory)
        try:
            assert await adapter.parse_syntax_tree_async(LARGE) == WORKER_TREE
            assert await adapter.parse_syntax_tree_async(LARGE) == WORKER_TREE
        finally:
            adapter.terminate()

        assert factory.created == 1
        assert adapter.pending_count == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("worker", [worker_wrong_id, worker_failure])
    async def test_bad_response_falls_back(self, worker) -> None:
        """Test that failed or mismatched responses are re-parsed synchronously."""
        adapter = make_adapter(ExecutorFactory(), worker=worker)
        try:
            assert await adapter.parse_syntax_tree_async(LARGE) is SYNC_TREE
        finally:
            adapter.terminate()
        assert not adapter.failed

    @pytest.mark.asyncio
    async def test_executor_start_failure(self) -> None:
        """Test that a worker that cannot start disables offloading."""
        factory = ExecutorFactory(error=OSError("no processes"))
        adapter = make_adapter(factory)

        assert await adapter.parse_syntax_tree_async(LARGE) is SYNC_TREE
        assert await adapter.parse_syntax_tree_async(LARGE) is SYNC_TREE
        assert adapter.failed
        assert factory.created == 1

    @pytest.mark.asyncio
    async def test_worker_crash_marks_failed(self) -> None:
        """Test that a crashing worker disables offloading."""
        factory = ExecutorFactory()
        adapter = make_adapter(factory, worker=worker_crash)

        assert await adapter.parse_syntax_tree_async(LARGE) is SYNC_TREE
        assert adapter.failed
        assert not adapter.should_use_async_parsing(len(LARGE))

    @pytest.mark.asyncio
    async def test_terminate_restarts_worker(self) -> None:
        """Test that a request after termination starts a new worker."""
        factory = ExecutorFactory()
        adapter = make_adapter(factory)
        try:
            await adapter.parse_syntax_tree_async(LARGE)
            adapter.terminate()
            await adapter.parse_syntax_tree_async(LARGE)
        finally:
            adapter.terminate()

        assert factory.created == 2
        assert not adapter.failed


@pytest.mark.unit
@pytest.mark.slow
class TestProcessWorker:
    """Test parsing in a real worker process."""

    @pytest.mark.asyncio
    async def test_process_pool_parse(self) -> None:
        """Test a round trip through a process pool."""
        adapter = OffloadAdapter(executor_factory=lambda: ProcessPoolExecutor(max_workers=1), threshold=10)
        try:
            tree = await adapter.parse_syntax_tree_async("# Heading\n\nSome **bold** text.")
        finally:
            adapter.terminate()

        assert tree.children[0].level == 1
        assert not adapter.failed
