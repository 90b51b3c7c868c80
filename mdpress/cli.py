from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Optional, Sequence

from . import __version__
from .build import build_site, check_site
from .config import load_config
from .errors import SiteError
from .guide import render_guide
from .utils import clean_output_dir

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-c", "--config", default="site.toml", help="Path to site config file (TOML/YAML/JSON).")
    common.add_argument("--include-drafts", action="store_true", help="Render items marked as draft.")
    common.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Loader threads (0 = one per CPU). Defaults to build_workers from the config.",
    )
    common.add_argument("-v", "--verbose", action="store_true", help="Log per-file detail.")

    parser = argparse.ArgumentParser(prog="mdpress", description="Static site generator for paired Markdown content.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    commands = parser.add_subparsers(dest="command", required=True)

    build = commands.add_parser("build", parents=[common], help="Build the site into the output directory.")
    build.add_argument(
        "--clean",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="Remove the output directory before building.",
    )
    commands.add_parser("check", parents=[common], help="Load and validate all content without writing.")
    commands.add_parser("guide", help="Print a short guide to project layout and configuration.")
    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )


def run(args: argparse.Namespace) -> None:
    if args.command == "guide":
        print(render_guide(), end="")
        return
    config = load_config(Path(args.config))
    if args.command == "check":
        items = check_site(config, args.include_drafts, args.workers)
        print(f"Checked {len(items)} items.")
        return
    if args.clean:
        clean_output_dir(config.output_dir, config.root)
    result = build_site(config, args.include_drafts, args.workers)
    print(f"Build completed in {result.elapsed:.2f}s.")
    print(f"Site generated in: {result.output_dir}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(getattr(args, "verbose", False))
    start = time.perf_counter()
    try:
        run(args)
    except SiteError as exc:
        print(f"error: {exc}", file=sys.stderr)
        logger.debug("failed after %.2fs", time.perf_counter() - start, exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
