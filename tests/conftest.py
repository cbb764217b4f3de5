"""Pytest configuration and shared fixtures for the mdpipe test suite.

This module provides shared fixtures and test configuration used across the
unit and integration tests.
"""

import logging
from typing import Generator

import pytest

from mdpipe.cache import ParsingCache
from mdpipe.logging_utils import PARSER_LOGGERS
from mdpipe.pipeline import PipelineContext, reset_default_context


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests - fast, isolated component tests")
    config.addinivalue_line("markers", "integration: Integration tests - component interaction tests")
    config.addinivalue_line("markers", "e2e: End-to-end tests - full pipeline tests")
    config.addinivalue_line("markers", "slow: Slow tests that may take several seconds")
    config.addinivalue_line("markers", "cli: Tests related to command-line interface")


@pytest.fixture(autouse=True)
def _fresh_default_context() -> Generator[None, None, None]:
    """Close the shared default context after every test."""
    yield
    reset_default_context()


@pytest.fixture
def context() -> Generator[PipelineContext, None, None]:
    """Provide a pipeline context with a fresh cache.

    Yields
    ------
    PipelineContext
        Context that is closed after the test.

    """
    ctx = PipelineContext()
    try:
        yield ctx
    finally:
        ctx.close()


@pytest.fixture
def small_cache() -> ParsingCache:
    """Provide a cache that accepts documents of any length."""
    return ParsingCache(max_size=2, min_size=0)


@pytest.fixture
def restore_logging() -> Generator[None, None, None]:
    """Restore root logger handlers and level changed by configure_logging."""
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    saved_parser_levels = {name: logging.getLogger(name).level for name in PARSER_LOGGERS}
    try:
        yield
    finally:
        for name, level in saved_parser_levels.items():
            logging.getLogger(name).setLevel(level)
        for handler in root.handlers:
            if handler not in saved_handlers:
                handler.close()
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


@pytest.fixture
def sample_markdown() -> str:
    """Provide a document exercising the common block and inline constructs.

    Returns
    -------
    str
        Markdown source that only uses plain CommonMark.

    """
    return """# Sample Document

This is a **sample document** with *italic text* and some `inline code`.

## Section 2

Here is a list:

- Item 1
- Item 2
- Item 3

And a numbered list:

1. First item
2. Second item

> A quoted line

```python
def hello_world():
    print("Hello, World!")
```"""


@pytest.fixture
def large_markdown() -> str:
    """Provide a plain document long enough to be cached and offloaded.

    Returns
    -------
    str
        Markdown source of more than 10000 characters.

    """
    sections = [f"## Section {i}\n\nParagraph {i} has **bold** and *italic* words in it." for i in range(250)]
    return "\n\n".join(sections)
