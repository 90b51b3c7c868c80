"""Markdown conversion and code highlighting.

``markdown_to_html`` and ``highlight_html`` are the two collaborators the
loader calls for every item. Both are pure functions of their arguments, so
they are safe to call from worker threads; a fresh ``markdown.Markdown``
instance is built per call because instances keep parser state.
"""

from __future__ import annotations

import html
import re

import markdown
from markdown.extensions import Extension
from pygments import highlight as pygments_highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import TextLexer, get_lexer_by_name
from pygments.util import ClassNotFound

EXCERPT_HEADING_RE = re.compile(r"^##[ \t]+Context[ \t]*#*[ \t]*$")
NEXT_HEADING_RE = re.compile(r"^#{1,6}[ \t]")
FENCE_RE = re.compile(r"^[ \t]{0,3}(`{3,}|~{3,})")
CODE_BLOCK_RE = re.compile(
    r'<pre><code(?: class="(?P<cls>[^"]*)")?>(?P<code>.*?)</code></pre>',
    re.DOTALL,
)
LANG_PREFIX = "language-"


class HighlightError(Exception):
    pass


class EscapeRawHtmlExtension(Extension):
    """Treat raw HTML in the source as text so it is escaped on output."""

    def extendMarkdown(self, md):
        md.preprocessors.deregister("html_block")
        md.inlinePatterns.deregister("html")


def _converter(allow_dangerous_html: bool, header_anchors: bool) -> markdown.Markdown:
    extensions: list = ["fenced_code", "tables"]
    extension_configs = {}
    if header_anchors:
        extensions.append("toc")
        extension_configs["toc"] = {"permalink": True}
    if not allow_dangerous_html:
        extensions.append(EscapeRawHtmlExtension())
    return markdown.Markdown(extensions=extensions, extension_configs=extension_configs)


def render_markdown(text: str, allow_dangerous_html: bool = False, header_anchors: bool = False) -> str:
    md = _converter(allow_dangerous_html, header_anchors)
    return md.convert(text)


def _unfenced_lines(lines: list[str]):
    """Yield ``(index, line)`` for every line outside fenced code blocks."""
    fence = ""
    for index, line in enumerate(lines):
        match = FENCE_RE.match(line)
        if match:
            marker = match.group(1)
            if not fence:
                fence = marker
            elif marker[0] == fence[0] and len(marker) >= len(fence):
                fence = ""
            continue
        if not fence:
            yield index, line


def extract_excerpt(text: str) -> str:
    """Return the markdown of the first ``## Context`` section, or ``""``.

    Headings inside fenced code blocks neither open nor close the section.
    """
    lines = text.splitlines()
    start = None
    end = len(lines)
    for index, line in _unfenced_lines(lines):
        if start is None:
            if EXCERPT_HEADING_RE.match(line):
                start = index + 1
        elif NEXT_HEADING_RE.match(line):
            end = index
            break
    if start is None:
        return ""
    return "\n".join(lines[start:end]).strip()


def markdown_to_html(
    text: str, allow_dangerous_html: bool = False, header_anchors: bool = False
) -> tuple[str, str]:
    body = render_markdown(text, allow_dangerous_html, header_anchors)
    excerpt_md = extract_excerpt(text)
    excerpt = render_markdown(excerpt_md, allow_dangerous_html) if excerpt_md else ""
    return body, excerpt


def highlight(code: str, lang: str, theme: str) -> str:
    lexer = TextLexer()
    if lang:
        try:
            lexer = get_lexer_by_name(lang)
        except ClassNotFound:
            pass
    css_class = "code-block"
    if lang:
        css_class = f"code-block {LANG_PREFIX}{lang}"
    try:
        formatter = HtmlFormatter(style=theme, noclasses=True, cssclass=css_class)
    except ClassNotFound as exc:
        raise HighlightError(f"unknown highlighting theme {theme!r}") from exc
    return pygments_highlight(code, lexer, formatter)


def _language(class_attr: str) -> str:
    for name in class_attr.split():
        if name.startswith(LANG_PREFIX):
            return name[len(LANG_PREFIX):]
    return ""


def highlight_html(html_text: str, theme: str) -> str:
    """Replace every ``<pre><code>`` block in ``html_text`` with highlighted markup."""
    if "<pre><code" not in html_text:
        return html_text

    def repl(match: re.Match) -> str:
        lang = _language(match.group("cls") or "")
        code = html.unescape(match.group("code"))
        return highlight(code, lang, theme)

    return CODE_BLOCK_RE.sub(repl, html_text)
