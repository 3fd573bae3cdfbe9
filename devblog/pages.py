from __future__ import annotations

import datetime as dt
import html
import logging
import math
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from .config import SiteConfig
from .content import BlogPost, slugify
from .render import pygments_css, render_markdown, render_template, resolve_asset, write_text
from .utils import join_url, relative_root, rfc822_date

logger = logging.getLogger(__name__)

DATE_FMT = "%b %d, %Y"


def post_path(post: BlogPost) -> str:
    return f"posts/{post.slug}.html"


def tag_path(tag: str) -> str:
    return f"tags/{slugify(tag)}.html"


def format_date(value: dt.date) -> str:
    return value.strftime(DATE_FMT)


def page_context(site: SiteConfig, root: str, title: str, description: str = "", canonical: str = "") -> dict:
    """Placeholders shared by every page rendered from the base template."""
    return {
        "title": html.escape(title),
        "root": root,
        "site_name": html.escape(site.title),
        "site_description": html.escape(site.description),
        "meta_description": html.escape(description or site.description, quote=True),
        "canonical": html.escape(canonical or join_url(site.url, ""), quote=True),
        "author": html.escape(site.author),
        "email": html.escape(site.email, quote=True),
        "github_url": html.escape(site.github_url, quote=True),
        "linkedin_url": html.escape(site.linkedin_url, quote=True),
        "year": str(dt.date.today().year),
        "extra_head": "",
    }


def build_tag_chips(tags, root: str) -> str:
    return " ".join(
        f'<a class="chip" href="{root}/{tag_path(tag)}">{html.escape(tag)}</a>' for tag in tags
    )


def build_post_cards(posts: list[BlogPost], root: str) -> str:
    cards = []
    for idx, post in enumerate(posts):
        delay = min(idx * 0.05, 0.3)
        url = f"{root}/{post_path(post)}"
        cards.append(
            f'<article class="post-card" style="animation-delay: {delay:.2f}s">'
            '<div class="post-meta">'
            f'<time class="post-date" datetime="{post.pub_date.isoformat()}">{format_date(post.pub_date)}</time>'
            f'<div class="post-tags">{build_tag_chips(post.tags, root)}</div></div>'
            f'<h2 class="post-title"><a href="{url}">{html.escape(post.title)}</a></h2>'
            f'<p class="post-summary">{html.escape(post.description)}</p>'
            f'<a class="post-more" href="{url}">Read more</a>'
            "</article>"
        )
    return "\n".join(cards) if cards else '<p class="post-empty">No posts yet.</p>'


def build_index(
    base_template: str, output_dir: Path, site: SiteConfig, posts: list[BlogPost], posts_per_page: int = 8
) -> int:
    """Write ``index.html`` and ``page-N.html``. Returns the page count."""

    def page_url(page: int) -> str:
        if page == 1:
            return "index.html"
        return f"page-{page}.html"

    def build_pagination(page: int, total_pages: int) -> str:
        if total_pages <= 1:
            return ""
        items = []
        if page > 1:
            items.append(f'<a class="page-link" href="./{page_url(page - 1)}">Newer</a>')
        else:
            items.append('<span class="page-link is-disabled">Newer</span>')
        numbers = []
        for num in range(1, total_pages + 1):
            if num == page:
                numbers.append(f'<span class="page-number is-active">{num}</span>')
            else:
                numbers.append(f'<a class="page-number" href="./{page_url(num)}">{num}</a>')
        items.append(f'<div class="page-numbers">{"".join(numbers)}</div>')
        if page < total_pages:
            items.append(f'<a class="page-link" href="./{page_url(page + 1)}">Older</a>')
        else:
            items.append('<span class="page-link is-disabled">Older</span>')
        return f'<nav class="pagination">{"".join(items)}</nav>'

    root = "."
    per_page = max(1, int(posts_per_page))
    total_pages = max(1, math.ceil(len(posts) / per_page))

    for page in range(1, total_pages + 1):
        start = (page - 1) * per_page
        page_posts = posts[start : start + per_page]
        content = (
            '<div class="section-head">'
            "<h2>Latest posts</h2>"
            f"<p>{html.escape(site.description)}</p>"
            "</div>"
            f'<div class="post-grid">{build_post_cards(page_posts, root)}</div>'
            f"{build_pagination(page, total_pages)}"
        )
        page_title = site.title if page == 1 else f"{site.title} | Page {page}"
        filename = page_url(page)
        context = page_context(site, root, page_title, canonical=join_url(site.url, "" if page == 1 else filename))
        write_text(output_dir / filename, render_template(base_template, content=content, **context))
        logger.debug("Wrote %s", filename)

    return total_pages


def build_posts(
    base_template: str, output_dir: Path, site: SiteConfig, posts: list[BlogPost], workers: int = 1
) -> None:
    def render_post(post: BlogPost) -> None:
        rel_path = post_path(post)
        root = relative_root(rel_path)
        body_html, toc_html = render_markdown(post.body, root)
        hero_html = ""
        if post.hero_image:
            hero_src = html.escape(resolve_asset(post.hero_image, root), quote=True)
            hero_html = f'<img class="post-hero" src="{hero_src}" alt="{html.escape(post.title, quote=True)}">'
        updated_html = ""
        if post.updated_date and post.updated_date != post.pub_date:
            updated_html = (
                f'<span class="post-updated">Updated '
                f'<time datetime="{post.updated_date.isoformat()}">{format_date(post.updated_date)}</time></span>'
            )
        toc_panel = ""
        if toc_html and "<li" in toc_html:
            toc_panel = f'<aside class="post-toc"><h3>Contents</h3>{toc_html}</aside>'
        content = (
            '<article class="post">'
            f"{hero_html}"
            '<div class="post-meta">'
            f'<time class="post-date" datetime="{post.pub_date.isoformat()}">{format_date(post.pub_date)}</time>'
            f"{updated_html}"
            f'<div class="post-tags">{build_tag_chips(post.tags, root)}</div></div>'
            f'<h1 class="post-title">{html.escape(post.title)}</h1>'
            f"{toc_panel}"
            f'<div class="post-body">{body_html}</div>'
            f'<div class="post-footer"><a href="{root}/index.html">Back to home</a></div>'
            "</article>"
        )
        context = page_context(
            site,
            root,
            f"{post.title} | {site.title}",
            description=post.description,
            canonical=join_url(site.url, rel_path),
        )
        context["extra_head"] = f'<link rel="stylesheet" href="{root}/css/pygments.css">'
        write_text(output_dir / rel_path, render_template(base_template, content=content, **context))
        logger.debug("Wrote %s", rel_path)

    workers = max(1, int(workers or 1))
    if workers <= 1 or len(posts) <= 1:
        for post in posts:
            render_post(post)
    else:
        with ThreadPoolExecutor(max_workers=min(workers, len(posts))) as executor:
            list(executor.map(render_post, posts))
    write_text(output_dir / "css" / "pygments.css", pygments_css())


def build_tags(base_template: str, output_dir: Path, site: SiteConfig, tag_map: dict[str, list[BlogPost]]) -> None:
    root = ".."
    for tag, posts in sorted(tag_map.items(), key=lambda x: x[0].lower()):
        rel_path = tag_path(tag)
        content = (
            '<div class="section-head">'
            f"<h2>#{html.escape(tag)}</h2>"
            f"<p>{len(posts)} post{'s' if len(posts) != 1 else ''} tagged {html.escape(tag)}.</p>"
            "</div>"
            f'<div class="post-grid">{build_post_cards(posts, root)}</div>'
        )
        context = page_context(site, root, f"{tag} | {site.title}", canonical=join_url(site.url, rel_path))
        write_text(output_dir / rel_path, render_template(base_template, content=content, **context))
        logger.debug("Wrote %s", rel_path)


def build_rss(output_dir: Path, site: SiteConfig, posts: list[BlogPost], feed_limit: int = 20) -> None:
    items = []
    for post in posts[: max(0, feed_limit)]:
        link = join_url(site.url, post_path(post))
        categories = "".join(f"<category>{html.escape(tag)}</category>" for tag in post.tags)
        items.append(
            "\n".join(
                [
                    "<item>",
                    f"<title>{html.escape(post.title)}</title>",
                    f"<link>{link}</link>",
                    f"<guid>{link}</guid>",
                    f"<pubDate>{rfc822_date(post.pub_date)}</pubDate>",
                    f"<description>{html.escape(post.description)}</description>",
                    categories,
                    "</item>",
                ]
            )
        )
    last_build = rfc822_date(posts[0].pub_date) if posts else rfc822_date(dt.date.today())
    rss = "\n".join(
        [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<rss version="2.0">',
            "<channel>",
            f"<title>{html.escape(site.title)}</title>",
            f"<link>{join_url(site.url, '')}/</link>",
            f"<description>{html.escape(site.description)}</description>",
            f"<managingEditor>{html.escape(site.email)} ({html.escape(site.author)})</managingEditor>",
            f"<lastBuildDate>{last_build}</lastBuildDate>",
            "\n".join(items),
            "</channel>",
            "</rss>",
        ]
    )
    write_text(output_dir / "rss.xml", rss)
    logger.debug("Wrote rss.xml with %d items", len(items))


def build_sitemap(
    output_dir: Path, site: SiteConfig, posts: list[BlogPost], tag_map: dict, total_pages: int
) -> None:
    urls: list[tuple[str, dt.date | None]] = [(join_url(site.url, "") + "/", None)]
    for page in range(2, total_pages + 1):
        urls.append((join_url(site.url, f"page-{page}.html"), None))
    for post in posts:
        urls.append((join_url(site.url, post_path(post)), post.updated_date or post.pub_date))
    for tag in sorted(tag_map, key=str.lower):
        urls.append((join_url(site.url, tag_path(tag)), None))
    items = []
    for url, lastmod in urls:
        lines = ["<url>", f"<loc>{html.escape(url)}</loc>"]
        if lastmod:
            lines.append(f"<lastmod>{lastmod.isoformat()}</lastmod>")
        lines.append("</url>")
        items.append("\n".join(lines))
    sitemap = "\n".join(
        [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">',
            "\n".join(items),
            "</urlset>",
        ]
    )
    write_text(output_dir / "sitemap.xml", sitemap)
    logger.debug("Wrote sitemap.xml with %d urls", len(urls))


def build_404(base_template: str, output_dir: Path, site: SiteConfig) -> None:
    root = "."
    content = (
        '<div class="section-head">'
        "<h2>404</h2>"
        "<p>Page not found. Try heading back to the homepage.</p>"
        "</div>"
        '<div class="post-card">'
        '<p class="post-summary">The page you requested does not exist.</p>'
        f'<a class="post-more" href="{root}/index.html">Back to home</a>'
        "</div>"
    )
    context = page_context(site, root, f"404 | {site.title}")
    write_text(output_dir / "404.html", render_template(base_template, content=content, **context))
