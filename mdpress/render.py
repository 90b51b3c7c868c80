from __future__ import annotations

import datetime as dt
import logging
import shutil
from pathlib import Path
from typing import Mapping, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from .assets import resolve_asset
from .errors import SiteError, TemplateError, WriteError

logger = logging.getLogger(__name__)


def url_filter(value: object) -> Markup:
    return Markup(str(value))


def datetimeformat(value: dt.datetime, format: str = "%b %d %Y") -> str:
    return value.strftime(format)


def create_environment(template_dir: Path, manifest: Optional[Mapping[str, str]] = None) -> Environment:
    """Build the template environment for one build.

    The environment is created explicitly and handed to every render call;
    nothing about it outlives the build that made it.
    """
    manifest = dict(manifest or {})
    env = Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=select_autoescape(["html", "htm", "xml"]),
        keep_trailing_newline=True,
    )
    env.filters["url"] = url_filter
    env.filters["asset_hash"] = lambda path: Markup(resolve_asset(manifest, str(path)))
    env.filters["datetimeformat"] = datetimeformat
    return env


def render(env: Environment, template_name: str, context: dict, source: object = None) -> str:
    try:
        return env.get_template(template_name).render(context)
    except SiteError:
        raise
    except Exception as exc:
        where = source if source is not None else template_name
        raise TemplateError(f"rendering {template_name} failed: {exc}", where) from exc


def write_text(path: Path, text: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise WriteError(f"cannot write file: {exc}", path) from exc


def copy_static(static_dir: Path, output_dir: Path, root_static: Mapping[str, str]) -> None:
    """Copy ``static_dir`` to ``output_dir/static`` and ``root_static`` entries to the root."""
    if not static_dir.exists():
        logger.debug("static::scan no directory found")
        return
    root_sources = set(root_static.values())
    dest_root = output_dir / "static"
    try:
        for item in sorted(static_dir.rglob("*")):
            if not item.is_file():
                continue
            rel = item.relative_to(static_dir).as_posix()
            if rel in root_sources:
                continue
            dest = dest_root / rel
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(item, dest)
        for name, rel in root_static.items():
            source = static_dir / rel
            if not source.is_file():
                raise WriteError(f"root static file not found: {rel}", source)
            shutil.copy2(source, output_dir / name)
            logger.debug("static::root %s -> %s", rel, name)
    except OSError as exc:
        raise WriteError(f"cannot copy static files: {exc}", static_dir) from exc
