from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from pathlib import Path
from typing import Optional, Sequence

from .collection import ContentCollection, discover_sources, load_collection
from .config import SiteConfig, load_config, site_config_from_file
from .errors import BuildError, DevblogError
from .listing import group_by_tag
from .log import setup_logging
from .pages import build_404, build_index, build_posts, build_rss, build_sitemap, build_tags
from .render import DEFAULT_TEMPLATES_DIR, copy_static, read_template
from .utils import clean_output_dir, parse_bool, parse_int

logger = logging.getLogger(__name__)

FEED_LIMIT = 20
POSTS_PER_PAGE = 8
MAX_WORKERS = 32


def resolve_workers(value: object) -> int:
    workers = parse_int(value, 0)
    if workers <= 0:
        workers = os.cpu_count() or 1
    return max(1, min(workers, MAX_WORKERS))


def build_site(args: argparse.Namespace, site: SiteConfig) -> ContentCollection:
    """Load and validate every post, then write the site into ``args.output``.

    Validation runs before the output directory is touched, so a bad post
    leaves the previous build in place.
    """
    posts_dir = Path(args.posts)
    static_dir = Path(args.static)
    output_dir = Path(args.output)
    templates_dir = Path(args.templates)
    project_root = Path.cwd()
    workers = resolve_workers(args.build_workers)

    if not posts_dir.is_dir():
        raise BuildError(f"Posts directory not found: {posts_dir}")
    collection = load_collection(discover_sources(posts_dir), workers=workers)
    if args.check:
        return collection

    if not templates_dir.is_dir():
        raise BuildError(f"Templates directory not found: {templates_dir}")
    try:
        base_template = read_template(templates_dir)
    except FileNotFoundError as exc:
        raise BuildError(str(exc)) from exc

    posts = collection.list_all_posts()
    tag_map = group_by_tag(posts)

    if args.clean:
        try:
            clean_output_dir(output_dir, project_root)
        except ValueError as exc:
            raise BuildError(str(exc)) from exc
    output_dir.mkdir(parents=True, exist_ok=True)
    if static_dir.is_dir():
        copy_static(static_dir, output_dir)
    else:
        logger.info("No static directory at %s, skipping assets", static_dir)

    total_pages = build_index(base_template, output_dir, site, posts, args.posts_per_page)
    build_posts(base_template, output_dir, site, posts, workers=workers)
    build_tags(base_template, output_dir, site, tag_map)
    if args.enable_rss:
        build_rss(output_dir, site, posts, args.feed_limit)
    if args.enable_sitemap:
        build_sitemap(output_dir, site, posts, tag_map, total_pages)
    if args.enable_404:
        build_404(base_template, output_dir, site)
    logger.info("Rendered %d posts, %d tags and %d index pages", len(posts), len(tag_map), total_pages)
    return collection


def build_parser(config: dict, config_path: str) -> argparse.ArgumentParser:
    def cfg_value(key: str, default: object) -> object:
        value = config.get(key)
        return default if value is None else value

    def cfg_str(key: str, default: str) -> str:
        return str(cfg_value(key, default))

    def cfg_bool(key: str, default: bool) -> bool:
        return parse_bool(cfg_value(key, default))

    def cfg_int(key: str, default: int) -> int:
        return parse_int(cfg_value(key, default), default)

    parser = argparse.ArgumentParser(prog="devblog", description="Build the developer blog from Markdown posts.")
    parser.add_argument("--config", default=config_path, help="Path to site config file (TOML/YAML/JSON).")
    parser.add_argument("--posts", default=cfg_str("posts", "posts"), help="Directory containing Markdown posts.")
    parser.add_argument("--static", default=cfg_str("static", "static"), help="Directory containing static assets.")
    parser.add_argument("--output", default=cfg_str("output", "dist"), help="Output directory for the site.")
    parser.add_argument(
        "--templates",
        default=cfg_str("templates", str(DEFAULT_TEMPLATES_DIR)),
        help="Directory containing base.html.",
    )
    parser.add_argument(
        "--build-workers",
        default=cfg_int("build_workers", 0),
        type=int,
        help="Number of worker threads for parsing/rendering (0 = auto).",
    )
    parser.add_argument(
        "--feed-limit",
        default=cfg_int("feed_limit", FEED_LIMIT),
        type=int,
        help="Maximum number of posts in the RSS feed.",
    )
    parser.add_argument(
        "--posts-per-page",
        default=cfg_int("posts_per_page", POSTS_PER_PAGE),
        type=int,
        help="Number of posts on the home page before pagination.",
    )
    parser.add_argument(
        "--clean",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("clean", True),
        help="Clean output directory before build.",
    )
    parser.add_argument(
        "--enable-rss",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("enable_rss", True),
        help="Generate rss.xml.",
    )
    parser.add_argument(
        "--enable-sitemap",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("enable_sitemap", True),
        help="Generate sitemap.xml.",
    )
    parser.add_argument(
        "--enable-404",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("enable_404", True),
        help="Generate 404.html.",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Validate posts and config without writing any output.",
    )
    parser.add_argument(
        "--log-level",
        default=cfg_str("log_level", "INFO"),
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Logging verbosity.",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument(
        "--config",
        default="site.toml",
        help="Path to site config file (TOML/YAML/JSON).",
    )
    pre_args, _ = pre_parser.parse_known_args(argv)

    try:
        config = load_config(Path(pre_args.config))
        args = build_parser(config, pre_args.config).parse_args(argv)
        setup_logging(args.log_level)
        site = site_config_from_file(config)
        start = time.perf_counter()
        collection = build_site(args, site)
    except DevblogError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    elapsed = time.perf_counter() - start
    if args.check:
        print(f"Checked {len(collection)} posts and {len(collection.tags())} tags in {elapsed:.2f}s.")
    else:
        print(f"Build completed in {elapsed:.2f}s.")
        print(f"Site generated in: {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
