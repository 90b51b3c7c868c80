from __future__ import annotations

import logging
from pathlib import Path
from typing import NamedTuple

from .errors import DiscoveryError, MissingMetadata

logger = logging.getLogger(__name__)

CONTENT_SUFFIXES = (".md", ".markdown")
META_SUFFIXES = (".meta.toml", ".meta.yaml", ".meta.yml", ".meta.json")


class WorkItem(NamedTuple):
    content_path: Path
    metadata_path: Path
    content_type: str


def find_metadata(content_path: Path) -> Path | None:
    stem = content_path.name[: -len(content_path.suffix)]
    for suffix in META_SUFFIXES:
        candidate = content_path.with_name(stem + suffix)
        if candidate.is_file():
            return candidate
    return None


def discover(content_root: Path) -> list[WorkItem]:
    """Pair every markdown file under ``content_root`` with its metadata file.

    The content type of an item is the name of the directory that directly
    contains it. Order follows the filesystem walk and is not stable; the
    loader sorts its output.
    """
    if not content_root.is_dir():
        raise DiscoveryError("content directory not found", content_root)
    items = []
    for path in content_root.rglob("*"):
        if not path.is_file() or path.suffix not in CONTENT_SUFFIXES:
            continue
        meta_path = find_metadata(path)
        if meta_path is None:
            raise MissingMetadata(
                f"no metadata file found (expected one of: {', '.join(META_SUFFIXES)})", path
            )
        items.append(WorkItem(path, meta_path, path.parent.name))
        logger.debug("content::scan %s + %s", path, meta_path.name)
    logger.info("content::scan found %d files", len(items))
    return items
