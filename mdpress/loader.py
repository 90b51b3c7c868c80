"""Parallel loading of work items into ``ContentItem`` records.

Each work item is processed on its own by a worker thread: resolve the
metadata and URL, read the markdown, convert it, highlight code blocks. The
only state workers share is the frozen ``LoadSettings``. Results are joined,
then sorted by date (newest first) and slug so the order never depends on
which worker finished first.
"""

from __future__ import annotations

import logging
import os
import time
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Mapping, Optional

from .config import Config, ContentTypeConfig
from .content import ContentItem, ContentMeta, load_meta
from .discovery import WorkItem
from .errors import LoadError, MetadataError, SiteError
from .markup import highlight_html, markdown_to_html
from .urls import item_location, resolve_url_pattern, strip_date_prefix

logger = logging.getLogger(__name__)

MAX_WORKERS = 32

Converter = Callable[[str], tuple[str, str]]
Highlighter = Callable[[str, str], str]


@dataclass(frozen=True)
class LoadSettings:
    content_types: Mapping[str, ContentTypeConfig] = field(default_factory=dict)
    clean_urls: bool = False
    highlighting_enabled: bool = True
    theme: str = "github-dark"
    allow_dangerous_html: bool = False
    header_anchors: bool = False

    @classmethod
    def from_config(cls, config: Config) -> "LoadSettings":
        site = config.site
        return cls(
            content_types=config.content,
            clean_urls=site.clean_urls,
            highlighting_enabled=site.syntax_highlighting_enabled,
            theme=site.syntax_highlighting_theme,
            allow_dangerous_html=site.allow_dangerous_html,
            header_anchors=site.header_uri_fragment,
        )


@dataclass(frozen=True)
class ResolvedItem:
    work: WorkItem
    meta: ContentMeta
    slug: str
    output_path: str
    url: str


def content_stem(path: Path) -> str:
    return path.name[: -len(path.suffix)] if path.suffix else path.name


def resolve(work: WorkItem, settings: LoadSettings) -> ResolvedItem:
    type_config = settings.content_types.get(work.content_type)
    if type_config is None:
        raise MetadataError(
            f"no [content.{work.content_type}] entry for content type '{work.content_type}'",
            work.content_path,
        )
    meta = load_meta(work.metadata_path)
    stem = content_stem(work.content_path)
    resolved = resolve_url_pattern(type_config.effective_url_pattern, stem, meta.date)
    output_path, url = item_location(work.content_type, resolved, settings.clean_urls)
    return ResolvedItem(work, meta, strip_date_prefix(stem), output_path, url)


def load_item(
    work: WorkItem,
    settings: LoadSettings,
    converter: Optional[Converter] = None,
    highlighter: Optional[Highlighter] = None,
) -> ContentItem:
    resolved = resolve(work, settings)
    path = work.content_path
    logger.debug("content::load %s", path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise LoadError(f"cannot read content: {exc}", path) from exc

    try:
        if converter is None:
            html, excerpt = markdown_to_html(raw, settings.allow_dangerous_html, settings.header_anchors)
        else:
            html, excerpt = converter(raw)
    except Exception as exc:
        raise LoadError(f"markdown conversion failed: {exc}", path) from exc

    if settings.highlighting_enabled:
        try:
            html = (highlighter or highlight_html)(html, settings.theme)
        except Exception as exc:
            raise LoadError(f"syntax highlighting failed: {exc}", path) from exc

    return ContentItem(
        source_path=path,
        content_type=work.content_type,
        raw=raw,
        html=html,
        excerpt=excerpt,
        meta=resolved.meta,
        slug=resolved.slug,
        output_path=resolved.output_path,
        url=resolved.url,
    )


def sort_key(item: ContentItem) -> tuple:
    return (item.slug, item.content_type, item.source_path.as_posix())


def sort_items(items: Iterable[ContentItem]) -> list[ContentItem]:
    # Two stable passes: slug (then type and path) ascending, then date descending.
    ordered = sorted(items, key=sort_key)
    ordered.sort(key=lambda item: item.meta.date, reverse=True)
    return ordered


def published(items: Iterable[ContentItem], include_drafts: bool = False) -> list[ContentItem]:
    if include_drafts:
        return list(items)
    return [item for item in items if not item.meta.draft]


def resolve_workers(requested: int) -> int:
    if requested <= 0:
        requested = os.cpu_count() or 1
    return max(1, min(requested, MAX_WORKERS))


def load_all(
    work_items: list[WorkItem],
    settings: LoadSettings,
    workers: int = 0,
    converter: Optional[Converter] = None,
    highlighter: Optional[Highlighter] = None,
) -> list[ContentItem]:
    """Load every work item and return them sorted.

    The first failure cancels work that has not started yet and is raised
    once running workers have finished. Non-``SiteError`` failures are
    wrapped in ``LoadError`` with the offending path.
    """
    start = time.perf_counter()
    workers = min(resolve_workers(workers), max(1, len(work_items)))

    def run(work: WorkItem) -> ContentItem:
        try:
            return load_item(work, settings, converter, highlighter)
        except SiteError:
            raise
        except Exception as exc:
            raise LoadError(str(exc), work.content_path) from exc

    if workers <= 1:
        items = [run(work) for work in work_items]
    else:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(run, work) for work in work_items]
            done, pending = wait(futures, return_when=FIRST_EXCEPTION)
            failed = [future for future in futures if future in done and future.exception()]
            if failed:
                for future in pending:
                    future.cancel()
                executor.shutdown(wait=True, cancel_futures=True)
                raise failed[0].exception()
            items = [future.result() for future in futures]

    logger.info("content::load %d files in %.2fs", len(items), time.perf_counter() - start)
    return sort_items(items)
