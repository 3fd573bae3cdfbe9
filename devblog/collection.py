from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, Iterator

from .content import BlogPost, DocumentSource, load_post
from .errors import DuplicateSlugError, NotFoundError, SchemaValidationError
from .listing import group_by_tag, sort_by_pub_date

logger = logging.getLogger(__name__)

SOURCE_SUFFIXES = {".md", ".markdown"}


class ContentCollection:
    """Validated posts keyed by slug. Iteration follows load order."""

    def __init__(self, posts: Iterable[BlogPost]) -> None:
        self._posts: dict[str, BlogPost] = {}
        for post in posts:
            existing = self._posts.get(post.slug)
            if existing is not None:
                raise DuplicateSlugError(post.slug, existing.source_path, post.source_path)
            self._posts[post.slug] = post

    def __len__(self) -> int:
        return len(self._posts)

    def __iter__(self) -> Iterator[BlogPost]:
        return iter(self._posts.values())

    def __contains__(self, slug: object) -> bool:
        return slug in self._posts

    def list_all_posts(self) -> list[BlogPost]:
        return sort_by_pub_date(self._posts.values())

    def get_post_by_slug(self, slug: str) -> BlogPost:
        try:
            return self._posts[slug]
        except KeyError:
            raise NotFoundError(slug) from None

    def tags(self) -> list[str]:
        """Tag names as they appear on tag pages, case variants merged."""
        return sorted(group_by_tag(self), key=lambda tag: (tag.lower(), tag))


def discover_sources(content_dir: Path) -> list[DocumentSource]:
    if not content_dir.is_dir():
        raise FileNotFoundError(f"Content directory not found: {content_dir}")
    files = sorted(
        (path for path in content_dir.rglob("*") if path.is_file() and path.suffix.lower() in SOURCE_SUFFIXES),
        key=lambda p: p.relative_to(content_dir).as_posix(),
    )
    sources = []
    for path in files:
        rel = path.relative_to(content_dir).as_posix()
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise SchemaValidationError(rel, "encoding", f"not valid UTF-8: {exc}") from exc
        sources.append(DocumentSource(rel, text))
    logger.info("Discovered %d documents in %s", len(sources), content_dir)
    return sources


def load_collection(sources: Iterable[DocumentSource], workers: int = 1) -> ContentCollection:
    sources = list(sources)
    workers = max(1, int(workers or 1))
    parse_workers = min(workers, len(sources)) if sources else 1
    if parse_workers > 1:
        with ThreadPoolExecutor(max_workers=parse_workers) as executor:
            posts = list(executor.map(load_post, sources))
    else:
        posts = [load_post(source) for source in sources]
    collection = ContentCollection(posts)
    logger.info("Loaded %d posts", len(collection))
    return collection
