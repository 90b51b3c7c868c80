"""Sitemap, RSS feed, redirect stubs and asset manifest export.

Each generator is a pure function of the published items and the config
and returns the document text; writing is left to the build.
"""

from __future__ import annotations

import html
import json
import posixpath
from typing import Mapping

from .config import Config
from .content import ContentItem
from .errors import ArtifactError
from .utils import base_url, join_url, rfc822_date, short_date

SITEMAP_FILE = "sitemap.xml"
FEED_FILE = "feed.xml"


def _require_domain(config: Config, artifact: str) -> str:
    if not config.site.domain:
        raise ArtifactError(f"{artifact} is enabled but [site] domain is empty", artifact)
    return base_url(config.site.domain)


def _url_entry(loc: str, lastmod: str = "") -> str:
    lines = ["  <url>", f"    <loc>{html.escape(loc)}</loc>"]
    if lastmod:
        lines.append(f"    <lastmod>{lastmod}</lastmod>")
    lines.append("  </url>")
    return "\n".join(lines)


def generate_sitemap(items: list[ContentItem], config: Config) -> str:
    site_url = _require_domain(config, SITEMAP_FILE)
    entries = [_url_entry(site_url + "/")]
    for content_type in sorted(config.content):
        entries.append(_url_entry(join_url(site_url, f"{content_type}/")))
    for item in items:
        entries.append(_url_entry(site_url + item.url, short_date(item.meta.date)))
    return "\n".join(
        [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">',
            "\n".join(entries),
            "</urlset>",
            "",
        ]
    )


def include_in_feed(config: Config, content_type: str) -> bool:
    type_config = config.content.get(content_type)
    return type_config.rss_include if type_config else True


def _feed_item(item: ContentItem, site_url: str) -> str:
    link = site_url + item.url
    description = item.excerpt or item.html
    return "\n".join(
        [
            "    <item>",
            f"      <title>{html.escape(item.meta.title)}</title>",
            f"      <link>{html.escape(link)}</link>",
            f"      <guid>{html.escape(link)}</guid>",
            f"      <description>{html.escape(description)}</description>",
            f"      <author>{html.escape(item.meta.author)}</author>",
            f"      <pubDate>{rfc822_date(item.meta.date)}</pubDate>",
            "    </item>",
        ]
    )


def generate_rss(items: list[ContentItem], config: Config) -> str:
    site_url = _require_domain(config, FEED_FILE)
    site = config.site
    entries = [item for item in items if include_in_feed(config, item.content_type)]
    if site.feed_limit > 0:
        entries = entries[: site.feed_limit]
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<rss version="2.0" xmlns:atom="http://www.w3.org/2005/Atom">',
        "  <channel>",
        f"    <title>{html.escape(site.title)}</title>",
        f"    <link>{html.escape(site_url)}/</link>",
        f"    <description>{html.escape(site.tagline)}</description>",
        "    <language>en</language>",
    ]
    if site.author:
        lines.append(f"    <managingEditor>{html.escape(site.author)}</managingEditor>")
    if entries:
        # Newest item date, never wall-clock time.
        lines.append(f"    <lastBuildDate>{rfc822_date(entries[0].meta.date)}</lastBuildDate>")
    lines.append(
        f'    <atom:link href="{html.escape(join_url(site_url, FEED_FILE))}" rel="self" type="application/rss+xml"/>'
    )
    lines.extend(_feed_item(item, site_url) for item in entries)
    lines.extend(["  </channel>", "</rss>", ""])
    return "\n".join(lines)


def redirect_output_path(from_path: str) -> str:
    path = from_path.strip()
    rel = path.lstrip("/")
    if not rel:
        raise ArtifactError("redirect source must not be the site root", from_path)
    if ".." in rel.split("/"):
        raise ArtifactError("redirect source must not contain '..'", from_path)
    if path.endswith("/"):
        return posixpath.join(rel, "index.html")
    if path.endswith(".html"):
        return rel
    return posixpath.join(rel, "index.html")


def generate_redirect_html(target: str, domain: str = "") -> str:
    target_attr = html.escape(target, quote=True)
    canonical = target
    if domain and not target.startswith(("http://", "https://")):
        canonical = base_url(domain) + "/" + target.lstrip("/")
    return "\n".join(
        [
            "<!DOCTYPE html>",
            "<html>",
            "<head>",
            '  <meta charset="utf-8">',
            f'  <meta http-equiv="refresh" content="0; url={target_attr}">',
            f'  <link rel="canonical" href="{html.escape(canonical, quote=True)}">',
            "  <title>Redirecting...</title>",
            "</head>",
            "<body>",
            f'  <p>Redirecting to <a href="{target_attr}">{html.escape(target)}</a>...</p>',
            "</body>",
            "</html>",
            "",
        ]
    )


def generate_redirects(redirects: Mapping[str, str], domain: str = "") -> dict[str, str]:
    outputs: dict[str, str] = {}
    for from_path, to_path in redirects.items():
        if not to_path.strip():
            raise ArtifactError("redirect target must not be empty", from_path)
        outputs[redirect_output_path(from_path)] = generate_redirect_html(to_path, domain)
    return outputs


def export_manifest(manifest: Mapping[str, str]) -> str:
    return json.dumps(dict(manifest), indent=2, sort_keys=True, ensure_ascii=True) + "\n"
