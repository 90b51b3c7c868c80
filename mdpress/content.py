from __future__ import annotations

import datetime as dt
import html as html_lib
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from .config import load_document
from .errors import MetadataError

RFC3339_RE = re.compile(
    r"^(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})[Tt ]"
    r"(?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2})(?:\.(?P<fraction>\d+))?"
    r"(?P<offset>[Zz]|[+-]\d{2}:\d{2})$"
)
CJK_RE = re.compile(r"[\u3040-\u30ff\u3400-\u4dbf\u4e00-\u9fff\uac00-\ud7af]")
WORD_RE = re.compile(r"[A-Za-z0-9]+(?:'[A-Za-z0-9]+)?")
TAG_RE = re.compile(r"<[^>]+>")


@dataclass(frozen=True)
class ContentMeta:
    title: str
    date: dt.datetime
    author: str
    tags: tuple[str, ...] = ()
    template: Optional[str] = None
    cover: Optional[str] = None
    draft: bool = False
    extra: Mapping[str, str] = field(default_factory=dict)

    def as_context(self) -> dict:
        return {
            "title": self.title,
            "date": self.date,
            "author": self.author,
            "tags": list(self.tags),
            "template": self.template,
            "cover": self.cover,
            "draft": self.draft,
            "extra": dict(self.extra),
        }


@dataclass(frozen=True)
class ContentItem:
    """A fully loaded piece of content. Built once by the loader, then only read."""

    source_path: Path
    content_type: str
    raw: str
    html: str
    excerpt: str
    meta: ContentMeta
    slug: str
    output_path: str
    url: str

    @property
    def filename(self) -> str:
        return self.url.lstrip("/")


def parse_rfc3339(value: str) -> dt.datetime:
    match = RFC3339_RE.match(value.strip())
    if not match:
        raise ValueError(f"not an RFC3339 timestamp: {value!r}")
    offset = match.group("offset")
    if offset in {"Z", "z"}:
        tz = dt.timezone.utc
    else:
        sign = -1 if offset[0] == "-" else 1
        hours, minutes = int(offset[1:3]), int(offset[4:6])
        tz = dt.timezone(sign * dt.timedelta(hours=hours, minutes=minutes))
    fraction = (match.group("fraction") or "0")[:6].ljust(6, "0")
    return dt.datetime(
        int(match.group("year")),
        int(match.group("month")),
        int(match.group("day")),
        int(match.group("hour")),
        int(match.group("minute")),
        int(match.group("second")),
        int(fraction),
        tzinfo=tz,
    )


def _parse_date(value: object, path: Path) -> dt.datetime:
    # TOML and YAML hand back native datetimes for unquoted timestamps.
    if isinstance(value, dt.datetime):
        if value.tzinfo is None:
            raise MetadataError("date must include a UTC offset (RFC3339)", path)
        return value
    if isinstance(value, dt.date):
        raise MetadataError("date must be a full RFC3339 timestamp, not a bare date", path)
    if not isinstance(value, str):
        raise MetadataError("date must be an RFC3339 string", path)
    try:
        return parse_rfc3339(value)
    except ValueError as exc:
        raise MetadataError(f"invalid date: {exc}", path) from exc


def _required_str(data: dict, key: str, path: Path) -> str:
    value = data.get(key)
    if value is None:
        raise MetadataError(f"missing required field '{key}'", path)
    if not isinstance(value, str):
        raise MetadataError(f"field '{key}' must be a string", path)
    if not value.strip():
        raise MetadataError(f"field '{key}' must not be empty", path)
    return value


def _optional_str(data: dict, key: str, path: Path) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise MetadataError(f"field '{key}' must be a string", path)
    return value or None


def parse_meta(data: dict, path: Path) -> ContentMeta:
    title = _required_str(data, "title", path)
    author = _required_str(data, "author", path)
    if "date" not in data or data["date"] in (None, ""):
        raise MetadataError("missing required field 'date'", path)
    date = _parse_date(data["date"], path)

    tags = data.get("tags") or []
    if not isinstance(tags, list) or not all(isinstance(tag, str) for tag in tags):
        raise MetadataError("field 'tags' must be a list of strings", path)

    draft = data.get("draft", False)
    if not isinstance(draft, bool):
        raise MetadataError("field 'draft' must be a boolean", path)

    extra = data.get("extra") or {}
    if not isinstance(extra, dict):
        raise MetadataError("field 'extra' must be a table of strings", path)
    for key, value in extra.items():
        if not isinstance(value, str):
            raise MetadataError(f"extra field '{key}' must be a string", path)

    return ContentMeta(
        title=title,
        date=date,
        author=author,
        tags=tuple(tags),
        template=_optional_str(data, "template", path),
        cover=_optional_str(data, "cover", path),
        draft=draft,
        extra={str(key): value for key, value in extra.items()},
    )


def load_meta(path: Path) -> ContentMeta:
    return parse_meta(load_document(path, MetadataError), path)


def strip_tags(html_text: str) -> str:
    return TAG_RE.sub("", html_text)


def count_words(text: str) -> int:
    text = html_lib.unescape(text)
    cjk_count = len(CJK_RE.findall(text))
    text = CJK_RE.sub(" ", text)
    word_count = len(WORD_RE.findall(text))
    return cjk_count + word_count
