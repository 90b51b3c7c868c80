from __future__ import annotations

import logging

from jinja2 import Environment

from .config import Config
from .content import ContentItem
from .context import Assembly, content_template, index_context, page_context
from .errors import MetadataError
from .render import render

logger = logging.getLogger(__name__)

SITE_INDEX = "index.html"


def type_index_path(content_type: str) -> str:
    return f"{content_type}/index.html"


def build_content_pages(
    env: Environment, items: list[ContentItem], assembly: Assembly, config: Config
) -> dict[str, str]:
    outputs: dict[str, str] = {}
    owners: dict[str, ContentItem] = {}
    for item, item_ctx in zip(items, assembly.all_content):
        if item.output_path in owners:
            other = owners[item.output_path].source_path
            raise MetadataError(f"output path {item.output_path} is also produced by {other}", item.source_path)
        owners[item.output_path] = item
        template = content_template(item, config)
        logger.debug("content::render %s -> %s", item.source_path, item.output_path)
        outputs[item.output_path] = render(env, template, page_context(assembly, item_ctx), item.source_path)
    return outputs


def build_indexes(env: Environment, assembly: Assembly, config: Config) -> dict[str, str]:
    outputs: dict[str, str] = {}
    for content_type in sorted(config.content):
        template = config.content[content_type].index_template
        logger.debug("index::render %s -> %s", content_type, template)
        outputs[type_index_path(content_type)] = render(
            env, template, index_context(assembly, content_type), content_type
        )
    outputs[SITE_INDEX] = render(env, config.site.site_index_template, index_context(assembly), "site index")
    return outputs


def build_pages(env: Environment, items: list[ContentItem], assembly: Assembly, config: Config) -> dict[str, str]:
    """Render every item page, type index and the site index into memory."""
    outputs = build_content_pages(env, items, assembly, config)
    for path, text in build_indexes(env, assembly, config).items():
        if path in outputs:
            raise MetadataError(f"content page collides with index page {path}", path)
        outputs[path] = text
    logger.info("pages::render %d pages", len(outputs))
    return outputs
