#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Tests for the highlight, underline, superscript and subscript tokenizer."""

import pytest

from mdpipe.ast import (
    Code,
    Document,
    Highlight,
    Paragraph,
    Strong,
    Subscript,
    Superscript,
    Text,
    Underline,
)
from mdpipe.plugins.custom_inline import (
    MARKS,
    CustomInlineTransform,
    find_mark_pair,
    parse_marks_in_nodes,
    parse_marks_in_text,
)

HIGHLIGHT, UNDERLINE, SUPERSCRIPT, SUBSCRIPT = MARKS


@pytest.mark.unit
class TestFindMarkPair:
    """Test locating opening and closing markers."""

    def test_simple_pair(self) -> None:
        """Test finding a pair with content."""
        assert find_mark_pair("a==b==c", HIGHLIGHT, 0) == (1, 4)

    def test_respects_start(self) -> None:
        """Test that scanning begins at the start index."""
        assert find_mark_pair("^a^ ^b^", SUPERSCRIPT, 3) == (4, 6)

    def test_empty_content_is_not_a_pair(self) -> None:
        """Test that adjacent markers do not form a pair."""
        assert find_mark_pair("====", HIGHLIGHT, 0) is None
        assert find_mark_pair("^^", SUPERSCRIPT, 0) is None

    def test_unclosed(self) -> None:
        """Test that an unclosed marker yields no pair."""
        assert find_mark_pair("x^2", SUPERSCRIPT, 0) is None

    def test_subscript_skips_double_tilde(self) -> None:
        """Test that strikethrough markers are not subscript markers."""
        assert find_mark_pair("~~a~~", SUBSCRIPT, 0) is None
        assert find_mark_pair("~~a~~ ~b~", SUBSCRIPT, 0) == (6, 8)


@pytest.mark.unit
class TestParseMarksInText:
    """Test tokenizing marks in a single string."""

    def test_subscript(self) -> None:
        """Test a chemical formula."""
        assert parse_marks_in_text("H~2~O") == [
            Text(content="H"),
            Subscript(content=[Text(content="2")]),
            Text(content="O"),
        ]

    def test_all_marks(self) -> None:
        """Test every mark kind in one string."""
        nodes = parse_marks_in_text("==a== ++b++ ^c^ ~d~")
        kinds = [type(node) for node in nodes if not isinstance(node, Text)]
        assert kinds == [Highlight, Underline, Superscript, Subscript]

    def test_nesting(self) -> None:
        """Test that mark content is tokenized recursively."""
        assert parse_marks_in_text("==a ^b^ c==") == [
            Highlight(content=[Text(content="a "), Superscript(content=[Text(content="b")]), Text(content=" c")])
        ]

    def test_earliest_opener_wins(self) -> None:
        """Test that the pair opening first is taken, even when pairs overlap."""
        assert parse_marks_in_text("^a ==b^ c==") == [
            Superscript(content=[Text(content="a ==b")]),
            Text(content=" c=="),
        ]

    def test_no_marks(self) -> None:
        """Test that plain text comes back as one text node."""
        assert parse_marks_in_text("2 + 2 = 4") == [Text(content="2 + 2 = 4")]

    def test_unclosed_stays_literal(self) -> None:
        """Test that unmatched markers are literal."""
        assert parse_marks_in_text("x^2 and ==y") == [Text(content="x^2 and ==y")]


@pytest.mark.unit
class TestParseMarksInNodes:
    """Test tokenizing marks across inline siblings."""

    def test_mark_around_other_nodes(self) -> None:
        """Test a highlight enclosing strong text."""
        nodes = [Text(content="==a "), Strong(content=[Text(content="b")]), Text(content=" c==")]
        assert parse_marks_in_nodes(nodes) == [
            Highlight(content=[Text(content="a "), Strong(content=[Text(content="b")]), Text(content=" c")])
        ]

    def test_siblings_without_markers_unchanged(self) -> None:
        """Test that containers without markers are returned as-is."""
        nodes = [Text(content="a"), Strong(content=[Text(content="b")])]
        assert parse_marks_in_nodes(nodes) is nodes

    def test_code_is_not_scanned(self) -> None:
        """Test that markers inside code spans stay literal."""
        doc = Document(children=[Paragraph(content=[Code(content="==x=="), Text(content=" and ~y~")])])
        result = CustomInlineTransform().transform(doc)
        assert result.children[0].content == [
            Code(content="==x=="),
            Text(content=" and "),
            Subscript(content=[Text(content="y")]),
        ]

    def test_transform_reaches_nested_containers(self) -> None:
        """Test that marks inside strong text are found."""
        doc = Document(children=[Paragraph(content=[Strong(content=[Text(content="x^2^")])])])
        result = CustomInlineTransform().transform(doc)
        assert result.children[0].content == [
            Strong(content=[Text(content="x"), Superscript(content=[Text(content="2")])])
        ]
