from __future__ import annotations

from . import __version__

GUIDE = """# mdpress {version}

mdpress turns markdown files with companion metadata files into a static site.

## Commands

    mdpress build                  Build the site into output_dir
    mdpress build -c prod.toml     Build with another config file
    mdpress build --include-drafts Render items marked as draft
    mdpress build --clean          Remove output_dir before building
    mdpress check                  Load and validate content without writing
    mdpress guide                  Show this guide

## Project layout

    site.toml            site configuration (TOML, YAML or JSON)
    content/<type>/      one directory per content type
      hello.md           markdown body
      hello.meta.toml    metadata (.meta.toml, .meta.yaml, .meta.yml, .meta.json)
    templates/           Jinja2 templates
    static/              copied to output/static/

## site.toml

    [site]
    title = "My Website"
    tagline = "A personal blog"
    domain = "example.com"          # required when sitemap or RSS is enabled
    author = "Your Name"
    clean_urls = false              # /blog/post/ instead of /blog/post.html
    syntax_highlighting_theme = "github-dark"
    asset_hashing_enabled = false   # style.css -> style.a1b2c3d4.css
    feed_limit = 0                  # 0 keeps every item in feed.xml

    [site.root_static]
    "favicon.ico" = "favicon.ico"

    [content.blog]
    index_template = "blog_index.html"
    content_template = "post.html"
    url_pattern = "{{year}}/{{stem}}"   # {{stem}} {{date}} {{year}} {{month}} {{day}}
    rss_include = true

    [dynamic]
    github_url = "https://github.com/user"

    [redirects]
    "/old-post/" = "/blog/new-post/"

## Metadata

    title = "Hello World"               # required
    date = "2024-01-15T10:00:00+00:00"  # required, RFC 3339 with offset
    author = "Your Name"                # required
    tags = ["intro"]
    template = "custom.html"            # overrides content_template
    draft = false

    [extra]
    reading_time = "5 min"              # meta.extra.reading_time

A "## Context" section in the markdown becomes the item's excerpt.

## Template data

Content pages: content, excerpt, meta, url, formatted_date, config, all_content, tags.
Index pages: contents, content_type, config, all_content, tags.
Filters: url, asset_hash, datetimeformat.
"""


def render_guide() -> str:
    return GUIDE.format(version=__version__)
