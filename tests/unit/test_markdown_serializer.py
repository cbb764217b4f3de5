#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Tests for the markdown serializer."""

import pytest

from mdpipe.ast import (
    Alert,
    BlockQuote,
    Code,
    CodeBlock,
    Details,
    Document,
    Emphasis,
    FootnoteDefinition,
    FootnoteReference,
    Frontmatter,
    Heading,
    Highlight,
    Image,
    LineBreak,
    Link,
    LinkDefinition,
    List,
    ListItem,
    MathBlock,
    MathInline,
    Paragraph,
    Strikethrough,
    Strong,
    Subscript,
    Superscript,
    Table,
    TableCell,
    TableRow,
    Text,
    ThematicBreak,
    Underline,
    WikiEmbed,
    WikiLink,
)
from mdpipe.options import PipelineOptions
from mdpipe.renderers.markdown import MarkdownSerializer, active_markers, escape_text, format_url


def render(*blocks, options=None) -> str:
    return MarkdownSerializer(options).render_to_string(Document(children=list(blocks)))


def para(*nodes) -> Paragraph:
    return Paragraph(content=list(nodes))


def text(value: str) -> Text:
    return Text(content=value)


def item(value: str, checked=None) -> ListItem:
    return ListItem(children=[para(text(value))], checked=checked)


@pytest.mark.unit
class TestEscapeText:
    """Test escaping of literal text."""

    def test_markup_characters(self) -> None:
        """Test that emphasis, code and link characters are escaped."""
        assert escape_text("*a* `b` [c]") == "\\*a\\* \\`b\\` \\[c\\]"

    def test_intraword_underscore_kept(self) -> None:
        """Test that underscores inside words stay bare."""
        assert escape_text("snake_case _x_") == "snake_case \\_x\\_"

    def test_html_and_entities(self) -> None:
        """Test escaping of tag openers and entity references."""
        assert escape_text("<div> a < b") == "\\<div> a < b"
        assert escape_text("&amp; & co") == "\\&amp; & co"

    def test_extension_markers_only_when_active(self) -> None:
        """Test that extension markers are escaped only when they could pair."""
        assert escape_text("a == b ^ c ~ d $ e") == "a == b ^ c ~ d $ e"
        assert escape_text("a == b == c", frozenset({"=="})) == "a \\== b \\== c"
        assert escape_text("$1 and $2", frozenset({"$"})) == "\\$1 and \\$2"

    def test_pipe_escaped_when_active(self) -> None:
        """Test pipe escaping for table cells."""
        assert escape_text("a|b", frozenset({"|"})) == "a\\|b"
        assert escape_text("a|b") == "a|b"


@pytest.mark.unit
class TestActiveMarkers:
    """Test detection of markers that need escaping."""

    def test_single_marker_inactive(self) -> None:
        """Test that one occurrence cannot pair."""
        assert active_markers([text("x^2 and a == b")]) == frozenset()

    def test_two_markers_active(self) -> None:
        """Test that two literal occurrences are active."""
        assert active_markers([text("a == b == c")]) == frozenset({"=="})

    def test_marker_nodes_count(self) -> None:
        """Test that written markup counts towards activation."""
        nodes = [text("~"), Subscript(content=[text("2")])]
        assert "~" in active_markers(nodes)
        assert active_markers([Subscript(content=[text("2")])]) == frozenset({"~"})


@pytest.mark.unit
class TestBlocks:
    """Test block serialization."""

    def test_heading_and_paragraph(self) -> None:
        """Test blank-line separated blocks."""
        assert render(Heading(level=2, content=[text("Title")]), para(text("Body"))) == "## Title\n\nBody"

    def test_heading_trailing_hash_escaped(self) -> None:
        """Test that a trailing hash is not read as a closing sequence."""
        assert render(Heading(level=1, content=[text("C#")])) == "# C\\#"

    def test_paragraph_line_starts_escaped(self) -> None:
        """Test escaping of block markers at the start of paragraph lines."""
        assert render(para(text("# not a heading"))) == "\\# not a heading"
        assert render(para(text("1. not a list"))) == "1\\. not a list"
        assert render(para(text("- not a bullet"))) == "\\- not a bullet"
        assert render(para(text("a\n==="))) == "a\n\\==="

    def test_code_block_fence_longer_than_content(self) -> None:
        """Test that the fence outgrows backtick runs in the content."""
        block = CodeBlock(content="```\ninner\n```", language="md")
        assert render(block) == "````md\n```\ninner\n```\n````"

    def test_empty_code_block(self) -> None:
        """Test a code block with no content."""
        assert render(CodeBlock(content="")) == "```\n```"

    def test_math_block(self) -> None:
        """Test block math fences."""
        assert render(MathBlock(content="E = mc^2")) == "$$\nE = mc^2\n$$"

    def test_block_quote(self) -> None:
        """Test block quote prefixes, including blank lines."""
        quote = BlockQuote(children=[para(text("one")), para(text("two"))])
        assert render(quote) == "> one\n>\n> two"

    def test_tight_bullet_list(self) -> None:
        """Test a tight bullet list."""
        assert render(List(items=[item("a"), item("b")])) == "- a\n- b"

    def test_loose_ordered_list(self) -> None:
        """Test a loose ordered list with a start number."""
        lst = List(ordered=True, start=3, tight=False, items=[item("a"), item("b")])
        assert render(lst) == "3. a\n\n4. b"

    def test_task_list(self) -> None:
        """Test task list checkboxes."""
        assert render(List(items=[item("done", True), item("todo", False)])) == "- [x] done\n- [ ] todo"

    def test_nested_list(self) -> None:
        """Test continuation indentation of nested lists."""
        inner = List(items=[item("b")])
        outer = List(items=[ListItem(children=[para(text("a")), inner])])
        assert render(outer) == "- a\n  - b"

    def test_consecutive_lists_alternate_markers(self) -> None:
        """Test that adjacent lists of the same kind stay separate."""
        result = render(List(items=[item("a")]), List(items=[item("b")]), List(items=[item("c")]))
        assert result == "- a\n\n* b\n\n- c"

    def test_consecutive_ordered_lists(self) -> None:
        """Test the alternate ordered list delimiter."""
        result = render(List(ordered=True, items=[item("a")]), List(ordered=True, items=[item("b")]))
        assert result == "1. a\n\n1) b"

    def test_thematic_break(self) -> None:
        """Test thematic breaks."""
        assert render(ThematicBreak()) == "---"

    def test_table(self) -> None:
        """Test table rows and the alignment row."""
        header = TableRow(
            cells=[TableCell(content=[text("a")]), TableCell(content=[text("b")]), TableCell(content=[text("c")])],
            is_header=True,
        )
        row = TableRow(cells=[TableCell(content=[text("1|2")]), TableCell(content=[text("3")])])
        table = Table(header=header, rows=[row], alignments=["left", "center", "right"])
        assert render(table) == "| a | b | c |\n| :-- | :-: | --: |\n| 1\\|2 | 3 |  |"

    def test_frontmatter(self) -> None:
        """Test frontmatter fences."""
        assert render(Frontmatter(content="title: x"), para(text("body"))) == "---\ntitle: x\n---\n\nbody"
        assert render(Frontmatter(content="")) == "---\n---"

    def test_details(self) -> None:
        """Test details blocks as HTML around a markdown body."""
        details = Details(summary="A & B", open=True, children=[para(Strong(content=[text("x")]))])
        assert render(details) == "<details open>\n<summary>A &amp; B</summary>\n\n**x**\n\n</details>"

    def test_alert(self) -> None:
        """Test alert markers."""
        assert render(Alert(kind="NOTE", children=[para(text("body"))])) == "> [!NOTE]\n> body"

    def test_footnote_definition(self) -> None:
        """Test footnote definitions with continuation indentation."""
        note = FootnoteDefinition(identifier="1", children=[para(text("one")), para(text("two"))])
        assert render(note) == "[^1]: one\n\n    two"

    def test_link_definition(self) -> None:
        """Test link reference definitions keep their label."""
        definition = LinkDefinition(identifier="foo", url="https://example.com", title="T", label="Foo")
        assert render(definition) == '[Foo]: https://example.com "T"'


@pytest.mark.unit
class TestInlines:
    """Test inline serialization."""

    def test_emphasis_and_strong(self) -> None:
        """Test emphasis delimiters."""
        result = render(para(text("a "), Strong(content=[text("b")]), text(" "), Emphasis(content=[text("c")])))
        assert result == "a **b** *c*"

    def test_whitespace_hoisted_out_of_delimiters(self) -> None:
        """Test that delimiters never touch whitespace."""
        assert render(para(text("a"), Strong(content=[text(" b ")]), text("c"))) == "a **b** c"

    def test_strikethrough(self) -> None:
        """Test strikethrough delimiters."""
        assert render(para(Strikethrough(content=[text("gone")]))) == "~~gone~~"

    def test_custom_marks(self) -> None:
        """Test highlight, underline, superscript and subscript."""
        nodes = [
            Highlight(content=[text("h")]),
            text(" "),
            Underline(content=[text("u")]),
            text(" x"),
            Superscript(content=[text("2")]),
            text(" H"),
            Subscript(content=[text("2")]),
            text("O"),
        ]
        assert render(para(*nodes)) == "==h== ++u++ x^2^ H~2~O"

    def test_literal_marker_next_to_mark_escaped(self) -> None:
        """Test that literal markers are escaped when the container has mark markup."""
        assert render(para(text("~"), Subscript(content=[text("2")]))) == "\\~~2~"

    @pytest.mark.parametrize(
        "content,expected",
        [
            ("code", "`code`"),
            ("a`b", "``a`b``"),
            ("`x", "`` `x ``"),
            ("  padded  ", "`   padded   `"),
        ],
    )
    def test_code_spans(self, content: str, expected: str) -> None:
        """Test code span delimiters and padding."""
        assert render(para(Code(content=content))) == expected

    def test_link_and_image(self) -> None:
        """Test inline links and images with titles."""
        link = Link(url="https://example.com", title="Home", content=[text("site")])
        image = Image(url="a b.png", alt_text="alt")
        assert render(para(link, text(" "), image)) == '[site](https://example.com "Home") ![alt](<a b.png>)'

    def test_hard_break_styles(self) -> None:
        """Test both hard break styles."""
        content = (text("a"), LineBreak(), text("b"))
        assert render(para(*content)) == "a\\\nb"
        options = PipelineOptions(hard_break_style="trailing-spaces")
        assert render(para(*content), options=options) == "a  \nb"

    def test_trailing_hard_break_dropped(self) -> None:
        """Test that a hard break at the end of a paragraph is dropped."""
        assert render(para(text("a"), LineBreak())) == "a"

    def test_math_footnote_and_wiki(self) -> None:
        """Test atom markup."""
        nodes = [
            MathInline(content="x^2"),
            text(" "),
            FootnoteReference(identifier="1"),
            text(" "),
            WikiLink(target="Page", alias="alias"),
            text(" "),
            WikiEmbed(target="img.png"),
        ]
        assert render(para(*nodes)) == "$x^2$ [^1] [[Page|alias]] ![[img.png]]"


@pytest.mark.unit
class TestFormatUrl:
    """Test link destination formatting."""

    def test_plain(self) -> None:
        """Test destinations that need no wrapping."""
        assert format_url("https://example.com/a_(b)") == "https://example.com/a_(b)"

    def test_wrapped(self) -> None:
        """Test destinations that need angle brackets."""
        assert format_url("") == "<>"
        assert format_url("a b") == "<a b>"
        assert format_url("a(b") == "<a(b>"
