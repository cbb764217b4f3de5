#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Tests that the fast and full parsers agree on plain CommonMark."""

import pytest

from mdpipe import parse_to_syntax_tree
from mdpipe.sniffing import select_parser

PLAIN_DOCUMENTS = [
    "# Title\n\nParagraph with *em* and **strong** text.",
    "Some `inline code` here.",
    "- a\n- b\n- c",
    "- loose\n\n- items",
    "1. one\n2. two",
    "> quoted\n> lines",
    "```python\nprint(1)\n```",
    "[link](https://example.com)",
    "line one\nline two",
    "before\n\n***\n\nafter",
    "Nested **strong with *emphasis* inside**.",
    "![x\\*y](u)",
    "a \\* b",
]

# Inputs where the two libraries disagree; these must be routed to the full parser
FULL_ONLY_DOCUMENTS = [
    "* [ ] task",
    "1. [x] done",
    "- a\n-\n\nnext",
]


@pytest.mark.integration
class TestParserEquivalence:
    """Test fast path parity with the full parser."""

    @pytest.mark.parametrize("text", PLAIN_DOCUMENTS)
    def test_same_tree(self, text: str) -> None:
        """Test that both parsers build the same syntax tree."""
        assert select_parser(text) == "fast"
        assert parse_to_syntax_tree(text, parser="fast") == parse_to_syntax_tree(text, parser="full")

    def test_sample_document(self, sample_markdown: str) -> None:
        """Test parity on a longer document."""
        fast = parse_to_syntax_tree(sample_markdown, parser="fast")
        full = parse_to_syntax_tree(sample_markdown, parser="full")
        assert fast == full
        assert len(fast.children) == 9

    @pytest.mark.parametrize("text", FULL_ONLY_DOCUMENTS)
    def test_divergent_inputs_use_full_parser(self, text: str) -> None:
        """Test that inputs the fast parser would represent differently are sniffed as full."""
        assert select_parser(text) == "full"
        assert parse_to_syntax_tree(text) == parse_to_syntax_tree(text, parser="full")

    def test_whitespace_only_line(self) -> None:
        """Test that an indented blank line is not an empty code block in either parser."""
        assert parse_to_syntax_tree("     \n", parser="fast") == parse_to_syntax_tree("     \n", parser="full")
        assert parse_to_syntax_tree("     \n", parser="full").children == []
