import pytest

from mdpress.markup import HighlightError, extract_excerpt, highlight, highlight_html, markdown_to_html

DOC = """# Title

## Context

Short *summary* here.

## Details

More text.
"""


class TestMarkdownToHtml:
    def test_converts_body(self):
        html, _ = markdown_to_html(DOC)
        assert "<h1>Title</h1>" in html
        assert "More text." in html

    def test_excerpt_is_context_section(self):
        _, excerpt = markdown_to_html(DOC)
        assert excerpt == "<p>Short <em>summary</em> here.</p>"

    def test_no_context_section(self):
        _, excerpt = markdown_to_html("# Title\n\nBody\n")
        assert excerpt == ""

    def test_raw_html_is_escaped_by_default(self):
        html, _ = markdown_to_html("Hi <b>there</b>\n\n<script>alert(1)</script>\n")
        assert "<script>" not in html
        assert "<b>" not in html
        assert "&lt;script&gt;" in html

    def test_raw_html_allowed_when_enabled(self):
        html, _ = markdown_to_html("<div>raw</div>\n", allow_dangerous_html=True)
        assert "<div>raw</div>" in html

    def test_header_anchors(self):
        html, _ = markdown_to_html("## Section One\n", header_anchors=True)
        assert 'id="section-one"' in html
        assert "headerlink" in html

    def test_tables(self):
        html, _ = markdown_to_html("| a | b |\n|---|---|\n| 1 | 2 |\n")
        assert "<table>" in html


    def test_nested_blockquotes_keep_their_depth(self):
        html, _ = markdown_to_html("> outer\n>\n>> inner\n")
        assert html.count("<blockquote>") == 2

    def test_paragraph_before_list_is_left_alone(self):
        html, _ = markdown_to_html("Intro line\n- not a list\n")
        assert "<ul>" not in html


def test_extract_excerpt_stops_at_next_heading():
    assert extract_excerpt(DOC) == "Short *summary* here."


class TestExcerptFences:
    def test_heading_inside_fence_is_not_an_excerpt(self):
        text = "```\n## Context\nnot an excerpt\n```\n\nBody.\n"
        assert extract_excerpt(text) == ""
        assert markdown_to_html(text)[1] == ""

    def test_real_heading_after_fenced_one(self):
        text = "~~~\n## Context\n~~~\n\n## Context\n\nThe real one.\n"
        assert extract_excerpt(text) == "The real one."

    def test_fenced_heading_does_not_end_the_section(self):
        text = "## Context\n\nIntro.\n\n```python\n# comment\n```\n\n## Next\n\nRest.\n"
        assert extract_excerpt(text) == "Intro.\n\n```python\n# comment\n```"


class TestHighlight:
    def test_known_language(self):
        out = highlight("print(1)\n", "python", "github-dark")
        assert "code-block language-python" in out
        assert "style=" in out
        assert "print" in out

    def test_unknown_language_falls_back_to_text(self):
        out = highlight("whatever\n", "no-such-language", "github-dark")
        assert "whatever" in out

    def test_unknown_theme(self):
        with pytest.raises(HighlightError):
            highlight("x\n", "python", "no-such-theme")

    def test_highlight_html_replaces_fenced_blocks(self):
        html, _ = markdown_to_html("```python\nx = 1 < 2\n```\n")
        out = highlight_html(html, "github-dark")
        assert "<pre><code" not in out
        assert "code-block language-python" in out
        assert "&lt;" in out

    def test_highlight_html_without_code(self):
        assert highlight_html("<p>plain</p>", "github-dark") == "<p>plain</p>"
