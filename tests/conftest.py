from __future__ import annotations

import datetime as dt
import json
from pathlib import Path

import pytest

from mdpress.config import Config, config_from_mapping
from mdpress.content import ContentItem, ContentMeta

ARTICLE_TEMPLATE = """<h1>{{ meta.title }}</h1>
<p class="date">{{ formatted_date }}</p>
<div class="body">{{ content }}</div>
<a href="{{ url | url }}">permalink</a>
"""

TYPE_INDEX_TEMPLATE = """<h1>{{ content_type }}</h1>
{% for item in contents %}<li>{{ item.meta.title }}</li>
{% endfor %}"""

SITE_INDEX_TEMPLATE = """<title>{{ config.site.title }}</title>
{% for item in contents %}<a href="{{ item.url }}">{{ item.meta.title }}</a>
{% endfor %}{% for tag in tags %}<span>{{ tag.name }}={{ tag.count }}</span>
{% endfor %}"""


def toml_value(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(toml_value(v) for v in value) + "]"
    return json.dumps(value)


class SiteTree:
    """A throwaway project directory with templates, content and a config."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.site: dict = {
            "title": "Test Site",
            "tagline": "Notes & things",
            "domain": "example.com",
            "author": "Ada",
        }
        self.content: dict = {
            "articles": {"index_template": "articles_index.html", "content_template": "article.html"},
        }
        self.dynamic: dict = {}
        self.redirects: dict = {}
        templates = root / "templates"
        templates.mkdir(parents=True)
        (templates / "article.html").write_text(ARTICLE_TEMPLATE, encoding="utf-8")
        (templates / "articles_index.html").write_text(TYPE_INDEX_TEMPLATE, encoding="utf-8")
        (templates / "notes_index.html").write_text(TYPE_INDEX_TEMPLATE, encoding="utf-8")
        (templates / "index.html").write_text(SITE_INDEX_TEMPLATE, encoding="utf-8")
        (root / "content").mkdir()

    def template(self, name: str, text: str) -> None:
        (self.root / "templates" / name).write_text(text, encoding="utf-8")

    def add(
        self,
        content_type: str,
        stem: str,
        body: str = "Hello there.\n",
        *,
        title: str | None = None,
        date: str = "2024-01-15T10:00:00Z",
        author: str = "Ada",
        tags: tuple = (),
        draft: bool = False,
        template: str | None = None,
    ) -> Path:
        folder = self.root / "content" / content_type
        folder.mkdir(parents=True, exist_ok=True)
        path = folder / f"{stem}.md"
        path.write_text(body, encoding="utf-8")
        meta = {"title": title or stem, "date": date, "author": author, "tags": list(tags), "draft": draft}
        if template:
            meta["template"] = template
        lines = [f"{key} = {toml_value(value)}" for key, value in meta.items()]
        (folder / f"{stem}.meta.toml").write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    def mapping(self) -> dict:
        return {
            "site": dict(self.site),
            "content": {name: dict(value) for name, value in self.content.items()},
            "dynamic": dict(self.dynamic),
            "redirects": dict(self.redirects),
        }

    def config(self) -> Config:
        return config_from_mapping(self.mapping(), self.root / "site.toml")

    def write_config(self, name: str = "site.json") -> Path:
        path = self.root / name
        path.write_text(json.dumps(self.mapping(), indent=2), encoding="utf-8")
        return path

    def read_output(self) -> dict[str, bytes]:
        output = self.root / "output"
        return {
            path.relative_to(output).as_posix(): path.read_bytes()
            for path in sorted(output.rglob("*"))
            if path.is_file()
        }


@pytest.fixture
def site(tmp_path: Path) -> SiteTree:
    return SiteTree(tmp_path)


def make_item(
    slug: str,
    *,
    content_type: str = "articles",
    date: dt.datetime = dt.datetime(2024, 1, 15, 10, 0, tzinfo=dt.timezone.utc),
    title: str | None = None,
    tags: tuple = (),
    draft: bool = False,
    template: str | None = None,
    html: str = "<p>Body</p>",
    excerpt: str = "",
    clean: bool = False,
) -> ContentItem:
    meta = ContentMeta(
        title=title or slug.title(),
        date=date,
        author="Ada",
        tags=tuple(tags),
        template=template,
        draft=draft,
    )
    if clean:
        output_path, url = f"{content_type}/{slug}/index.html", f"/{content_type}/{slug}/"
    else:
        output_path, url = f"{content_type}/{slug}.html", f"/{content_type}/{slug}.html"
    return ContentItem(
        source_path=Path("content") / content_type / f"{slug}.md",
        content_type=content_type,
        raw="Body",
        html=html,
        excerpt=excerpt,
        meta=meta,
        slug=slug,
        output_path=output_path,
        url=url,
    )
