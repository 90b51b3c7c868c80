"""Template data for pages and indexes.

Three scopes are assembled from the sorted, published items:

* site scope (``config``): site settings plus ``[dynamic]`` values
* type scope (``contents``): the items of one content type
* global scope (``all_content`` and ``tags``): every item across types

Nothing here touches the filesystem.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from markupsafe import Markup

from .config import Config
from .content import ContentItem, count_words, strip_tags
from .utils import long_date


@dataclass(frozen=True)
class Assembly:
    config: dict
    all_content: list[dict]
    by_type: dict[str, list[dict]]
    tags: list[dict]


def site_context(config: Config) -> dict:
    return {"site": config.site.as_context(), "dynamic": dict(config.dynamic)}


def item_context(item: ContentItem) -> dict:
    return {
        "meta": item.meta.as_context(),
        "content": Markup(item.html),
        "excerpt": Markup(item.excerpt),
        "filename": item.filename,
        "url": item.url,
        "formatted_date": long_date(item.meta.date),
        "content_type": item.content_type,
        "slug": item.slug,
        "words": count_words(strip_tags(item.html)),
    }


def tag_counts(items: Iterable[ContentItem]) -> list[dict]:
    counts: dict[str, int] = {}
    for item in items:
        for tag in item.meta.tags:
            counts[tag] = counts.get(tag, 0) + 1
    ordered = sorted(counts.items(), key=lambda x: (-x[1], x[0].lower(), x[0]))
    return [{"name": name, "count": count} for name, count in ordered]


def content_template(item: ContentItem, config: Config) -> str:
    if item.meta.template:
        return item.meta.template
    return config.content[item.content_type].content_template


def assemble(items: list[ContentItem], config: Config) -> Assembly:
    """Build the shared template data for ``items`` (already sorted and filtered)."""
    contexts = [item_context(item) for item in items]
    by_type: dict[str, list[dict]] = {name: [] for name in config.content}
    for item, ctx in zip(items, contexts):
        by_type.setdefault(item.content_type, []).append(ctx)
    return Assembly(
        config=site_context(config),
        all_content=contexts,
        by_type=by_type,
        tags=tag_counts(items),
    )


def page_context(assembly: Assembly, item_ctx: dict) -> dict:
    return {
        "config": assembly.config,
        "item": item_ctx,
        "meta": item_ctx["meta"],
        "content": item_ctx["content"],
        "excerpt": item_ctx["excerpt"],
        "url": item_ctx["url"],
        "formatted_date": item_ctx["formatted_date"],
        "all_content": assembly.all_content,
        "tags": assembly.tags,
    }


def index_context(assembly: Assembly, content_type: str | None = None) -> dict:
    if content_type is None:
        contents = assembly.all_content
    else:
        contents = assembly.by_type.get(content_type, [])
    return {
        "config": assembly.config,
        "content_type": content_type,
        "contents": contents,
        "all_content": assembly.all_content,
        "tags": assembly.tags,
    }
