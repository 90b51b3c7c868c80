from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .artifacts import (
    FEED_FILE,
    SITEMAP_FILE,
    export_manifest,
    generate_redirects,
    generate_rss,
    generate_sitemap,
)
from .assets import build_manifest, publish_hashed_assets
from .config import Config
from .content import ContentItem
from .context import assemble
from .discovery import discover
from .errors import ArtifactError, WriteError
from .loader import LoadSettings, load_all, published
from .pages import build_pages
from .render import copy_static, create_environment, write_text

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    output_dir: Path
    items: list[ContentItem] = field(default_factory=list)
    outputs: dict[str, str] = field(default_factory=dict)
    manifest: dict[str, str] = field(default_factory=dict)
    elapsed: float = 0.0


def load_content(
    config: Config, include_drafts: bool = False, workers: Optional[int] = None
) -> list[ContentItem]:
    """Discover and load every item, returning the published ones in order."""
    work_items = discover(config.content_dir)
    if workers is None:
        workers = config.site.build_workers
    items = load_all(work_items, LoadSettings.from_config(config), workers)
    visible = published(items, include_drafts)
    if len(visible) != len(items):
        logger.info("content::drafts skipped %d drafts", len(items) - len(visible))
    return visible


def _add_output(outputs: dict[str, str], path: str, text: str) -> None:
    if path in outputs:
        raise ArtifactError(f"output {path} is produced twice", path)
    outputs[path] = text


def generate_artifacts(items: list[ContentItem], config: Config, manifest: dict[str, str]) -> dict[str, str]:
    site = config.site
    outputs: dict[str, str] = {}
    if site.sitemap_enabled:
        _add_output(outputs, SITEMAP_FILE, generate_sitemap(items, config))
    if site.rss_enabled:
        _add_output(outputs, FEED_FILE, generate_rss(items, config))
    for path, text in generate_redirects(config.redirects, site.domain).items():
        _add_output(outputs, path, text)
    if site.asset_hashing_enabled and site.asset_manifest_path:
        _add_output(outputs, site.asset_manifest_path.lstrip("/"), export_manifest(manifest))
    return outputs


def render_site(
    items: list[ContentItem], config: Config, manifest: Optional[dict[str, str]] = None
) -> dict[str, str]:
    """Produce every page and artifact document in memory, keyed by output path."""
    manifest = manifest or {}
    if not config.template_dir.is_dir():
        raise WriteError("templates directory not found", config.template_dir)
    env = create_environment(config.template_dir, manifest)
    assembly = assemble(items, config)
    outputs = build_pages(env, items, assembly, config)
    for path, text in generate_artifacts(items, config, manifest).items():
        if path in outputs:
            raise ArtifactError(f"output {path} collides with a rendered page", path)
        outputs[path] = text
    return outputs


def write_outputs(config: Config, outputs: dict[str, str], manifest: dict[str, str]) -> None:
    output_dir = config.output_dir
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise WriteError(f"cannot create output directory: {exc}", output_dir) from exc
    if config.site.asset_hashing_enabled:
        publish_hashed_assets(config.static_dir, output_dir, manifest)
    copy_static(config.static_dir, output_dir, config.site.root_static)
    for rel in sorted(outputs):
        write_text(output_dir / rel, outputs[rel])
        if rel in (SITEMAP_FILE, FEED_FILE):
            logger.info("%s::write -> %s", Path(rel).stem, rel)
    logger.info("output::write %d files -> %s", len(outputs), output_dir)


def build_site(config: Config, include_drafts: bool = False, workers: Optional[int] = None) -> BuildResult:
    start = time.perf_counter()
    items = load_content(config, include_drafts, workers)
    manifest: dict[str, str] = {}
    if config.site.asset_hashing_enabled:
        manifest = build_manifest(config.static_dir)
    outputs = render_site(items, config, manifest)
    write_outputs(config, outputs, manifest)
    return BuildResult(
        output_dir=config.output_dir,
        items=items,
        outputs=outputs,
        manifest=manifest,
        elapsed=time.perf_counter() - start,
    )


def check_site(config: Config, include_drafts: bool = False, workers: Optional[int] = None) -> list[ContentItem]:
    """Discover and load all content without rendering or writing anything."""
    return load_content(config, include_drafts, workers)
