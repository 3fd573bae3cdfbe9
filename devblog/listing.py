from __future__ import annotations

from typing import Iterable

from .content import BlogPost, slugify


def sort_by_pub_date(posts: Iterable[BlogPost]) -> list[BlogPost]:
    # sorted() is stable with reverse=True, so equal dates keep their input order.
    return sorted(posts, key=lambda post: post.pub_date, reverse=True)


def group_by_tag(posts: Iterable[BlogPost]) -> dict[str, list[BlogPost]]:
    """Map each tag to its posts, in input order.

    Tags that share a page slug (``Web`` and ``web``) are one group, named by
    the first spelling seen.
    """
    names: dict[str, str] = {}
    tag_map: dict[str, list[BlogPost]] = {}
    for post in posts:
        for tag in post.tags:
            name = names.setdefault(slugify(tag), tag)
            group = tag_map.setdefault(name, [])
            if not group or group[-1] is not post:
                group.append(post)
    return tag_map
