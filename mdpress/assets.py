from __future__ import annotations

import hashlib
import logging
import re
import shutil
from pathlib import Path
from typing import Mapping

from .errors import WriteError

logger = logging.getLogger(__name__)

HASHABLE_SUFFIXES = {".css", ".js"}
HASH_LENGTH = 8
HASHED_NAME_RE = re.compile(r"\.[0-9a-f]{8}\.(?:css|js)$")
STATIC_PREFIX = "/static/"


def list_files(root: Path) -> list[Path]:
    if not root.exists():
        return []
    return sorted((path for path in root.rglob("*") if path.is_file()), key=lambda p: p.as_posix())


def hash_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def hash_file(path: Path) -> str:
    return hash_bytes(path.read_bytes())


def is_hashed_filename(name: str) -> bool:
    return bool(HASHED_NAME_RE.search(name))


def hashed_filename(rel_path: str, digest: str) -> str:
    head, dot, ext = rel_path.rpartition(".")
    if not dot or "/" in ext:
        return f"{rel_path}.{digest}"
    return f"{head}.{digest}.{ext}"


def build_manifest(static_dir: Path) -> dict[str, str]:
    """Map every CSS/JS file under ``static_dir`` to its hashed URL.

    Only reads files; publishing the hashed copies happens in
    ``publish_hashed_assets`` once the build is known to succeed.
    """
    manifest: dict[str, str] = {}
    for path in list_files(static_dir):
        if path.suffix not in HASHABLE_SUFFIXES or is_hashed_filename(path.name):
            continue
        rel = path.relative_to(static_dir).as_posix()
        digest = hash_file(path)[:HASH_LENGTH]
        manifest[rel] = STATIC_PREFIX + hashed_filename(rel, digest)
    logger.info("asset_hash::hash %d files", len(manifest))
    return manifest


def resolve_asset(manifest: Mapping[str, str], path: str) -> str:
    normalized = path.lstrip("/")
    if normalized.startswith("static/"):
        normalized = normalized[len("static/"):]
    hashed = manifest.get(normalized)
    if hashed:
        return hashed
    if path.startswith(STATIC_PREFIX):
        return path
    if path.startswith("static/"):
        return f"/{path}"
    return f"{STATIC_PREFIX}{path.lstrip('/')}"


def cleanup_hashed_files(output_static_dir: Path) -> int:
    removed = 0
    for path in list_files(output_static_dir):
        if is_hashed_filename(path.name):
            logger.debug("asset_hash::cleanup %s", path)
            path.unlink()
            removed += 1
    if removed:
        logger.info("asset_hash::cleanup %d old hashed files", removed)
    return removed


def publish_hashed_assets(static_dir: Path, output_dir: Path, manifest: Mapping[str, str]) -> None:
    output_static_dir = output_dir / "static"
    try:
        cleanup_hashed_files(output_static_dir)
        for rel, url in manifest.items():
            source = static_dir / rel
            dest = output_dir / url.lstrip("/")
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, dest)
            logger.debug("asset_hash::copy %s -> %s", rel, url)
    except OSError as exc:
        raise WriteError(f"cannot publish hashed assets: {exc}", output_static_dir) from exc
