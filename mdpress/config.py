from __future__ import annotations

import json
import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

import yaml

from .errors import ConfigError, SiteError
from .utils import parse_bool, parse_int

logger = logging.getLogger(__name__)

DEFAULT_URL_PATTERN = "{stem}"
LEGACY_DATE_PATTERN = "{date}-{stem}"
DEFAULT_THEME = "github-dark"


def parse_document(text: str, suffix: str) -> dict:
    """Parse a TOML, YAML or JSON mapping, picking the format from ``suffix``.

    Raises ``ValueError`` for syntax errors and non-mapping documents.
    """
    suffix = suffix.lower()
    if suffix == ".toml":
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise ValueError(f"invalid TOML: {exc}") from exc
    elif suffix in {".yml", ".yaml"}:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ValueError(f"invalid YAML: {exc}") from exc
        if data is None:
            data = {}
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError(f"invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError("document must be a mapping")
    return data


def load_document(path: Path, error: type[SiteError] = ConfigError) -> dict:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise error("file not found", path) from exc
    except OSError as exc:
        raise error(f"cannot read file: {exc}", path) from exc
    try:
        return parse_document(text, path.suffix)
    except ValueError as exc:
        raise error(str(exc), path) from exc


@dataclass(frozen=True)
class ContentTypeConfig:
    index_template: str
    content_template: str
    url_pattern: Optional[str] = None
    output_naming: Optional[str] = None
    rss_include: bool = True

    @property
    def effective_url_pattern(self) -> str:
        if self.url_pattern:
            return self.url_pattern
        if self.output_naming == "date":
            return LEGACY_DATE_PATTERN
        return DEFAULT_URL_PATTERN


@dataclass(frozen=True)
class SiteConfig:
    title: str
    tagline: str = ""
    domain: str = ""
    author: str = ""
    content_dir: str = "content"
    output_dir: str = "output"
    template_dir: str = "templates"
    static_dir: str = "static"
    site_index_template: str = "index.html"
    syntax_highlighting_enabled: bool = True
    syntax_highlighting_theme: str = DEFAULT_THEME
    sitemap_enabled: bool = True
    rss_enabled: bool = True
    allow_dangerous_html: bool = False
    header_uri_fragment: bool = False
    clean_urls: bool = False
    asset_hashing_enabled: bool = False
    asset_manifest_path: Optional[str] = None
    root_static: Mapping[str, str] = field(default_factory=dict)
    feed_limit: int = 0
    build_workers: int = 0

    def as_context(self) -> dict:
        return {
            "title": self.title,
            "tagline": self.tagline,
            "domain": self.domain,
            "author": self.author,
            "site_index_template": self.site_index_template,
            "clean_urls": self.clean_urls,
            "sitemap_enabled": self.sitemap_enabled,
            "rss_enabled": self.rss_enabled,
        }


@dataclass(frozen=True)
class Config:
    site: SiteConfig
    content: Mapping[str, ContentTypeConfig] = field(default_factory=dict)
    dynamic: Mapping[str, str] = field(default_factory=dict)
    redirects: Mapping[str, str] = field(default_factory=dict)
    root: Path = Path(".")

    def path(self, value: str) -> Path:
        candidate = Path(value)
        if candidate.is_absolute():
            return candidate
        return self.root / candidate

    @property
    def content_dir(self) -> Path:
        return self.path(self.site.content_dir)

    @property
    def output_dir(self) -> Path:
        return self.path(self.site.output_dir)

    @property
    def template_dir(self) -> Path:
        return self.path(self.site.template_dir)

    @property
    def static_dir(self) -> Path:
        return self.path(self.site.static_dir)


def _string_map(value: object, name: str, source: Path) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"[{name}] must be a table", source)
    result = {}
    for key, item in value.items():
        if isinstance(item, (dict, list)):
            raise ConfigError(f"[{name}] value for {key!r} must be a string", source)
        result[str(key)] = str(item)
    return result


def _content_type(name: str, value: object, source: Path) -> ContentTypeConfig:
    if not isinstance(value, dict):
        raise ConfigError(f"[content.{name}] must be a table", source)
    for key in ("index_template", "content_template"):
        if not str(value.get(key) or "").strip():
            raise ConfigError(f"[content.{name}] is missing {key}", source)
    output_naming = value.get("output_naming")
    if output_naming not in (None, "default", "date"):
        logger.warning("content.%s: unknown output_naming %r, using default", name, output_naming)
    url_pattern = value.get("url_pattern")
    return ContentTypeConfig(
        index_template=str(value["index_template"]),
        content_template=str(value["content_template"]),
        url_pattern=str(url_pattern) if url_pattern else None,
        output_naming=str(output_naming) if output_naming else None,
        rss_include=parse_bool(value.get("rss_include", True)),
    )


def config_from_mapping(data: dict, source: Path = Path("site.toml")) -> Config:
    site_data = data.get("site")
    if not isinstance(site_data, dict):
        raise ConfigError("missing [site] table", source)
    title = str(site_data.get("title") or "").strip()
    if not title:
        raise ConfigError("[site] title is required", source)

    def cfg_str(key: str, default: str) -> str:
        value = site_data.get(key)
        return default if value is None else str(value)

    def cfg_bool(key: str, default: bool) -> bool:
        value = site_data.get(key)
        return default if value is None else parse_bool(value)

    manifest_path = site_data.get("asset_manifest_path")
    site = SiteConfig(
        title=title,
        tagline=cfg_str("tagline", ""),
        domain=cfg_str("domain", "").strip(),
        author=cfg_str("author", ""),
        content_dir=cfg_str("content_dir", "content"),
        output_dir=cfg_str("output_dir", "output"),
        template_dir=cfg_str("template_dir", "templates"),
        static_dir=cfg_str("static_dir", "static"),
        site_index_template=cfg_str("site_index_template", "index.html"),
        syntax_highlighting_enabled=cfg_bool("syntax_highlighting_enabled", True),
        syntax_highlighting_theme=cfg_str("syntax_highlighting_theme", DEFAULT_THEME),
        sitemap_enabled=cfg_bool("sitemap_enabled", True),
        rss_enabled=cfg_bool("rss_enabled", True),
        allow_dangerous_html=cfg_bool("allow_dangerous_html", False),
        header_uri_fragment=cfg_bool("header_uri_fragment", False),
        clean_urls=cfg_bool("clean_urls", False),
        asset_hashing_enabled=cfg_bool("asset_hashing_enabled", False),
        asset_manifest_path=str(manifest_path) if manifest_path else None,
        root_static=_string_map(site_data.get("root_static"), "site.root_static", source),
        feed_limit=max(0, parse_int(site_data.get("feed_limit"), 0)),
        build_workers=parse_int(site_data.get("build_workers"), 0),
    )

    content_data = data.get("content") or {}
    if not isinstance(content_data, dict):
        raise ConfigError("[content] must be a table of content types", source)
    content = {name: _content_type(name, value, source) for name, value in content_data.items()}

    return Config(
        site=site,
        content=content,
        dynamic=_string_map(data.get("dynamic"), "dynamic", source),
        redirects=_string_map(data.get("redirects"), "redirects", source),
        root=source.parent,
    )


def load_config(path: Path) -> Config:
    data = load_document(path, ConfigError)
    config = config_from_mapping(data, path)
    logger.info("config::load %s (%d content types)", path, len(config.content))
    return config
