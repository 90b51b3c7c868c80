from __future__ import annotations

import datetime as dt
import re

DATE_PREFIX_RE = re.compile(r"^(?P<date>\d{4}-\d{2}-\d{2})-(?P<rest>.+)$")
PLACEHOLDER_RE = re.compile(r"\{(stem|date|year|month|day)\}")


def strip_date_prefix(stem: str) -> str:
    """Drop a leading ``YYYY-MM-DD-`` from ``stem`` when it is a real date."""
    match = DATE_PREFIX_RE.match(stem)
    if not match:
        return stem
    try:
        dt.date.fromisoformat(match.group("date"))
    except ValueError:
        return stem
    return match.group("rest")


def resolve_url_pattern(pattern: str, stem: str, date: dt.datetime) -> str:
    values = {
        "stem": strip_date_prefix(stem),
        "date": date.strftime("%Y-%m-%d"),
        "year": f"{date.year:04d}",
        "month": f"{date.month:02d}",
        "day": f"{date.day:02d}",
    }
    # Single pass so substituted values are never rescanned; unknown tokens stay.
    return PLACEHOLDER_RE.sub(lambda m: values[m.group(1)], pattern)


def item_location(content_type: str, resolved: str, clean_urls: bool) -> tuple[str, str]:
    """Return ``(output_path, url)`` for a resolved pattern.

    ``output_path`` is relative to the output directory. ``url`` is the
    canonical site-relative URL every page, feed and sitemap uses.
    """
    resolved = resolved.strip("/")
    if clean_urls:
        return f"{content_type}/{resolved}/index.html", f"/{content_type}/{resolved}/"
    return f"{content_type}/{resolved}.html", f"/{content_type}/{resolved}.html"
