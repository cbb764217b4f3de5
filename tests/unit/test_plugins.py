#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Tests for the grammar extension transforms."""

import pytest

from mdpipe.ast import (
    Alert,
    BlockQuote,
    Details,
    Document,
    HTMLBlock,
    LineBreak,
    MathInline,
    Paragraph,
    Text,
    WikiEmbed,
    WikiLink,
)
from mdpipe.plugins import (
    AlertTransform,
    BreaksTransform,
    DetailsTransform,
    MathValidationTransform,
    WikiLinkTransform,
    collect_link_definitions,
    normalize_label,
    parse_frontmatter,
    split_frontmatter,
)
from mdpipe.plugins.wiki_links import parse_wiki_links


def _paragraph(text: str) -> Paragraph:
    return Paragraph(content=[Text(content=text)])


def _body_parser(body: str) -> list:
    return [_paragraph(body.strip())]


@pytest.mark.unit
class TestDetailsTransform:
    """Test grouping of details HTML blocks."""

    def test_single_block(self) -> None:
        """Test a details element contained in one HTML block."""
        block = HTMLBlock(content="<details open>\n<summary>Sum &amp; more</summary>\nbody\n</details>")
        result = DetailsTransform(_body_parser).transform(Document(children=[block]))

        details = result.children[0]
        assert isinstance(details, Details)
        assert details.summary == "Sum & more"
        assert details.open is True
        assert details.children == [_paragraph("body")]

    def test_missing_summary_uses_default(self) -> None:
        """Test the default summary text."""
        block = HTMLBlock(content="<details>\nbody\n</details>")
        details = DetailsTransform(_body_parser).parse_single_block(block.content)
        assert details.summary == "Details"
        assert details.open is False

    def test_sibling_blocks(self) -> None:
        """Test the opening and closing tags in separate HTML blocks."""
        children = [
            HTMLBlock(content="<details>\n<summary>More</summary>"),
            _paragraph("inside"),
            HTMLBlock(content="</details>"),
            _paragraph("after"),
        ]
        result = DetailsTransform(_body_parser).transform(Document(children=children))

        assert result.children == [Details(summary="More", children=[_paragraph("inside")]), _paragraph("after")]

    def test_summary_in_following_block(self) -> None:
        """Test a summary written in the block after the opening tag."""
        children = [
            HTMLBlock(content="<details>"),
            HTMLBlock(content="<summary>Later</summary>"),
            _paragraph("inside"),
            HTMLBlock(content="</details>"),
        ]
        result = DetailsTransform(_body_parser).transform(Document(children=children))
        assert result.children == [Details(summary="Later", children=[_paragraph("inside")])]

    def test_nested_sibling_blocks(self) -> None:
        """Test that a nested element closes before its parent."""
        children = [
            HTMLBlock(content="<details>\n<summary>Outer</summary>"),
            HTMLBlock(content="<details>\n<summary>Inner</summary>"),
            _paragraph("deep"),
            HTMLBlock(content="</details>"),
            HTMLBlock(content="</details>"),
        ]
        result = DetailsTransform(_body_parser).transform(Document(children=children))

        outer = result.children[0]
        assert len(result.children) == 1
        assert outer.summary == "Outer"
        assert outer.children == [Details(summary="Inner", children=[_paragraph("deep")])]

    def test_unclosed_stays_html(self) -> None:
        """Test that an opening tag without a close is kept as raw HTML."""
        block = HTMLBlock(content="<details>\n<summary>Open</summary>")
        result = DetailsTransform(_body_parser).transform(Document(children=[block, _paragraph("x")]))
        assert result.children == [block, _paragraph("x")]

    def test_content_outside_element_stays_html(self) -> None:
        """Test that surrounding HTML is not dropped."""
        block = HTMLBlock(content="<div>x</div>\n<details>\nbody\n</details>")
        result = DetailsTransform(_body_parser).transform(Document(children=[block]))
        assert result.children == [block]


@pytest.mark.unit
class TestAlertTransform:
    """Test conversion of marked block quotes into alerts."""

    def test_alert_with_body(self) -> None:
        """Test an alert whose body follows the marker line."""
        quote = BlockQuote(children=[_paragraph("[!warning]\nBack up first.")])
        result = AlertTransform().transform(Document(children=[quote]))
        assert result.children == [Alert(kind="WARNING", children=[_paragraph("Back up first.")])]

    def test_marker_only_paragraph(self) -> None:
        """Test an alert whose body is in later blocks."""
        quote = BlockQuote(children=[_paragraph("[!TIP]"), _paragraph("body")])
        result = AlertTransform().transform(Document(children=[quote]))
        assert result.children == [Alert(kind="TIP", children=[_paragraph("body")])]

    def test_marker_followed_by_hard_break(self) -> None:
        """Test that a hard break after the marker is dropped."""
        para = Paragraph(content=[Text(content="[!NOTE]"), LineBreak(), Text(content="body")])
        result = AlertTransform().transform(Document(children=[BlockQuote(children=[para])]))
        assert result.children == [Alert(kind="NOTE", children=[_paragraph("body")])]

    def test_unknown_kind_stays_quote(self) -> None:
        """Test that unknown kinds are ordinary block quotes."""
        quote = BlockQuote(children=[_paragraph("[!FOO]\nbody")])
        result = AlertTransform().transform(Document(children=[quote]))
        assert isinstance(result.children[0], BlockQuote)

    def test_marker_must_be_alone_on_line(self) -> None:
        """Test that text on the marker line prevents an alert."""
        quote = BlockQuote(children=[_paragraph("[!NOTE] inline text")])
        result = AlertTransform().transform(Document(children=[quote]))
        assert isinstance(result.children[0], BlockQuote)


@pytest.mark.unit
class TestWikiLinks:
    """Test wiki link and embed recognition."""

    def test_links_and_embeds(self) -> None:
        """Test every recognized form."""
        assert parse_wiki_links("a [[Target|Alias]] b ![[image.png]] [[Plain]]") == [
            Text(content="a "),
            WikiLink(target="Target", alias="Alias"),
            Text(content=" b "),
            WikiEmbed(target="image.png"),
            Text(content=" "),
            WikiLink(target="Plain"),
        ]

    def test_embed_with_alias_stays_literal(self) -> None:
        """Test that embeds take no alias."""
        assert parse_wiki_links("![[a.png|b]]") == [Text(content="![[a.png|b]]")]

    def test_blank_target_stays_literal(self) -> None:
        """Test that whitespace-only targets are not links."""
        assert parse_wiki_links("[[  ]]") == [Text(content="[[  ]]")]

    def test_transform(self) -> None:
        """Test the transform on a paragraph."""
        doc = Document(children=[_paragraph("see [[Home]]")])
        result = WikiLinkTransform().transform(doc)
        assert result.children[0].content == [Text(content="see "), WikiLink(target="Home")]


@pytest.mark.unit
class TestMathValidation:
    """Test rejection of inline math padded with whitespace."""

    def test_valid_math_kept(self) -> None:
        """Test that tight inline math is kept."""
        doc = Document(children=[Paragraph(content=[MathInline(content="x^2")])])
        result = MathValidationTransform().transform(doc)
        assert result.children[0].content == [MathInline(content="x^2")]

    def test_padded_math_becomes_text(self) -> None:
        """Test that padded math turns back into dollar text."""
        doc = Document(children=[Paragraph(content=[Text(content="a "), MathInline(content=" x")])])
        result = MathValidationTransform().transform(doc)
        assert result.children[0].content == [Text(content="a $ x$")]


@pytest.mark.unit
class TestFrontmatter:
    """Test frontmatter detection and YAML loading."""

    def test_split(self) -> None:
        """Test splitting off a leading YAML block."""
        text = "---\ntitle: Notes\n---\nbody"
        raw, end = split_frontmatter(text)
        assert raw == "title: Notes"
        assert text[end:] == "body"

    def test_empty_block(self) -> None:
        """Test a frontmatter block with no content."""
        assert split_frontmatter("---\n---\n") == ("", 8)

    def test_no_closing_fence(self) -> None:
        """Test that an unclosed block is not frontmatter."""
        assert split_frontmatter("---\ntitle: x\n") is None

    def test_not_at_start(self) -> None:
        """Test that frontmatter must start the document."""
        assert split_frontmatter("text\n---\na: 1\n---\n") is None

    def test_parse_mapping(self) -> None:
        """Test loading a YAML mapping."""
        assert parse_frontmatter("title: Notes\ntags: [a, b]") == {"title": "Notes", "tags": ["a", "b"]}

    def test_parse_invalid_yaml(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that invalid YAML gives an empty mapping and a warning."""
        assert parse_frontmatter("key: [unclosed") == {}
        assert "Invalid frontmatter YAML" in caplog.text

    def test_parse_non_mapping(self) -> None:
        """Test that non-mapping YAML gives an empty mapping."""
        assert parse_frontmatter("- a\n- b") == {}


@pytest.mark.unit
class TestReferences:
    """Test link reference definition helpers."""

    def test_normalize_label(self) -> None:
        """Test case folding and whitespace collapsing."""
        assert normalize_label("  Foo \n  Bar ") == "foo bar"
        assert normalize_label("FOO") == normalize_label("foo")

    def test_collect_definitions(self) -> None:
        """Test building definitions from a parser environment."""
        env = {
            "ref_links": {
                "FOO": {"url": "https://example.com", "label": "Foo", "title": "T &amp; U"},
                "BAR": {"url": "/bar", "label": "Bar"},
            }
        }
        definitions = collect_link_definitions(env)

        assert [d.identifier for d in definitions] == ["foo", "bar"]
        assert definitions[0].label == "Foo"
        assert definitions[0].title == "T & U"
        assert definitions[1].title is None

    def test_collect_without_definitions(self) -> None:
        """Test an environment with no reference links."""
        assert collect_link_definitions({}) == []


@pytest.mark.unit
class TestBreaksTransform:
    """Test soft break preservation."""

    def test_newlines_become_breaks(self) -> None:
        """Test that newlines inside text become hard breaks."""
        result = BreaksTransform().transform(Document(children=[_paragraph("a\nb")]))
        assert result.children[0].content == [Text(content="a"), LineBreak(), Text(content="b")]

    def test_text_without_newline_unchanged(self) -> None:
        """Test that single-line text is untouched."""
        result = BreaksTransform().transform(Document(children=[_paragraph("ab")]))
        assert result.children[0].content == [Text(content="ab")]
