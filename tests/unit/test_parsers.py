#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Tests for the fast and full markdown parsers."""

import pytest

from mdpipe.ast import (
    Alert,
    CodeBlock,
    Details,
    Emphasis,
    FootnoteDefinition,
    FootnoteReference,
    Frontmatter,
    Heading,
    Highlight,
    HTMLBlock,
    Image,
    LineBreak,
    Link,
    LinkDefinition,
    List,
    MathBlock,
    MathInline,
    Paragraph,
    Strikethrough,
    Strong,
    Table,
    Text,
    WikiLink,
)
from mdpipe.exceptions import ValidationError
from mdpipe.options import PipelineOptions
from mdpipe.parsers import FastMarkdownParser, FullMarkdownParser, create_parser


@pytest.mark.unit
class TestCreateParser:
    """Test parser construction."""

    def test_kinds(self) -> None:
        """Test creating each parser."""
        assert isinstance(create_parser("fast"), FastMarkdownParser)
        assert isinstance(create_parser("full"), FullMarkdownParser)

    def test_unknown_kind(self) -> None:
        """Test that unknown parser names are rejected."""
        with pytest.raises(ValidationError):
            create_parser("slow")  # type: ignore[arg-type]

    def test_wrong_options_type(self) -> None:
        """Test that options must be PipelineOptions."""
        with pytest.raises(ValidationError):
            FastMarkdownParser({"preserve_line_breaks": True})  # type: ignore[arg-type]


@pytest.mark.unit
class TestFastParser:
    """Test the markdown-it based parser."""

    def test_heading_and_emphasis(self) -> None:
        """Test headings and inline emphasis."""
        doc = FastMarkdownParser().parse("# Title\n\nSome *soft* and **strong** text\n")
        assert doc.children[0] == Heading(level=1, content=[Text(content="Title")])
        assert doc.children[1].content == [
            Text(content="Some "),
            Emphasis(content=[Text(content="soft")]),
            Text(content=" and "),
            Strong(content=[Text(content="strong")]),
            Text(content=" text"),
        ]

    def test_soft_break_is_newline_text(self) -> None:
        """Test that soft breaks merge into the surrounding text."""
        doc = FastMarkdownParser().parse("one\ntwo\n")
        assert doc.children[0].content == [Text(content="one\ntwo")]

    def test_lists(self) -> None:
        """Test tight and loose lists and ordered start numbers."""
        doc = FastMarkdownParser().parse("- a\n- b\n\n3. x\n\n4. y\n")
        bullets, ordered = doc.children
        assert bullets.tight and not bullets.ordered
        assert ordered.ordered and ordered.start == 3 and not ordered.tight

    def test_fenced_code(self) -> None:
        """Test fence language and content."""
        doc = FastMarkdownParser().parse("```python extra\nprint(1)\n```\n")
        assert doc.children == [CodeBlock(content="print(1)", language="python")]

    def test_table_alignments(self) -> None:
        """Test table header and column alignments."""
        doc = FastMarkdownParser().parse("| a | b |\n| :-: | --- |\n| 1 | 2 |\n")
        table = doc.children[0]
        assert isinstance(table, Table)
        assert table.alignments == ["center", None]
        assert table.header.cells[0].content == [Text(content="a")]
        assert len(table.rows) == 1

    def test_link_and_image(self) -> None:
        """Test link and image attributes."""
        doc = FastMarkdownParser().parse('[site](https://example.com "Home") ![alt *text*](a.png)\n')
        link, _, image = doc.children[0].content
        assert link == Link(url="https://example.com", title="Home", content=[Text(content="site")])
        assert image == Image(url="a.png", alt_text="alt text")

    def test_escaped_character_in_image_alt(self) -> None:
        """Test that backslash escapes inside image alt text keep the escaped character."""
        doc = FastMarkdownParser().parse("![x\\*y](u)\n")
        assert doc.children[0].content == [Image(url="u", alt_text="x*y")]

    def test_html_block(self) -> None:
        """Test raw HTML blocks."""
        doc = FastMarkdownParser().parse("<div>\nraw\n</div>\n")
        assert doc.children == [HTMLBlock(content="<div>\nraw\n</div>")]


@pytest.mark.unit
class TestFullParser:
    """Test the mistune based parser and its extensions."""

    def test_custom_inline_marks(self) -> None:
        """Test subscript and superscript in one paragraph."""
        doc = FullMarkdownParser().parse("H~2~O and x^2^\n")
        assert [type(node).__name__ for node in doc.children[0].content] == [
            "Text",
            "Subscript",
            "Text",
            "Superscript",
        ]

    def test_strikethrough_and_highlight(self) -> None:
        """Test strikethrough and highlight together."""
        doc = FullMarkdownParser().parse("~~old~~ ==new==\n")
        content = doc.children[0].content
        assert content[0] == Strikethrough(content=[Text(content="old")])
        assert content[-1] == Highlight(content=[Text(content="new")])

    def test_task_list(self) -> None:
        """Test task list checkboxes."""
        doc = FullMarkdownParser().parse("- [x] done\n- [ ] todo\n")
        lst = doc.children[0]
        assert isinstance(lst, List)
        assert [item.checked for item in lst.items] == [True, False]

    def test_footnotes_lowercased(self) -> None:
        """Test footnote references and definitions with case-insensitive labels."""
        doc = FullMarkdownParser().parse("Note[^Ref].\n\n[^Ref]: The body.\n")
        assert FootnoteReference(identifier="ref") in doc.children[0].content
        definition = doc.children[-1]
        assert isinstance(definition, FootnoteDefinition)
        assert definition.identifier == "ref"
        assert definition.children == [Paragraph(content=[Text(content="The body.")])]

    def test_link_definitions_kept(self) -> None:
        """Test that reference definitions are appended to the document."""
        doc = FullMarkdownParser().parse('See [foo].\n\n[Foo]: https://example.com "T"\n')
        link = doc.children[0].content[1]
        assert isinstance(link, Link)
        assert link.url == "https://example.com"
        assert doc.children[-1] == LinkDefinition(identifier="foo", url="https://example.com", title="T", label="Foo")

    def test_math(self) -> None:
        """Test inline and block math."""
        doc = FullMarkdownParser().parse("Inline $x^2$ here.\n\n$$\nE = mc^2\n$$\n")
        assert MathInline(content="x^2") in doc.children[0].content
        assert doc.children[1] == MathBlock(content="E = mc^2")

    def test_currency_is_not_math(self) -> None:
        """Test that dollar amounts stay text."""
        doc = FullMarkdownParser().parse("$100 and $200\n")
        assert doc.children[0].content == [Text(content="$100 and $200")]

    def test_frontmatter(self) -> None:
        """Test a leading YAML block."""
        doc = FullMarkdownParser().parse("---\ntitle: x\n---\n\nBody\n")
        assert doc.children[0] == Frontmatter(content="title: x")
        assert doc.children[1] == Paragraph(content=[Text(content="Body")])

    def test_alert(self) -> None:
        """Test GitHub-style alerts."""
        doc = FullMarkdownParser().parse("> [!NOTE]\n> Read this.\n")
        assert doc.children == [Alert(kind="NOTE", children=[Paragraph(content=[Text(content="Read this.")])])]

    def test_details(self) -> None:
        """Test a details element with a markdown body."""
        doc = FullMarkdownParser().parse("<details>\n<summary>More</summary>\n\nHidden **text**\n\n</details>\n")
        details = doc.children[0]
        assert isinstance(details, Details)
        assert details.summary == "More"
        assert details.children[0].content[-1] == Strong(content=[Text(content="text")])

    def test_wiki_links(self) -> None:
        """Test wiki links with aliases."""
        doc = FullMarkdownParser().parse("See [[Home|the home page]].\n")
        assert WikiLink(target="Home", alias="the home page") in doc.children[0].content

    def test_entities_decoded(self) -> None:
        """Test that character references decode to text."""
        doc = FullMarkdownParser().parse("caf&eacute; &amp; tea\n")
        assert doc.children[0].content == [Text(content="café & tea")]

    def test_indented_blank_line_is_not_code(self) -> None:
        """Test that a whitespace-only line produces no code block."""
        assert FullMarkdownParser().parse("     \n").children == []

    def test_indented_code(self) -> None:
        """Test that real indented code is kept."""
        assert FullMarkdownParser().parse("    x = 1\n").children == [CodeBlock(content="x = 1")]

    def test_preserve_line_breaks(self) -> None:
        """Test turning soft breaks into hard breaks."""
        doc = FullMarkdownParser(PipelineOptions(preserve_line_breaks=True)).parse("one\ntwo\n")
        assert doc.children[0].content == [Text(content="one"), LineBreak(), Text(content="two")]
