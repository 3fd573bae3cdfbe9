from __future__ import annotations

import pytest

from devblog.content import DocumentSource


def make_document(
    title: str | None = "A post",
    description: str | None = "Short summary.",
    pub_date: str | None = "2024-01-15",
    body: str = "Hello **world**.\n",
    extra: str = "",
) -> str:
    lines = ["---"]
    if title is not None:
        lines.append(f"title: {title}")
    if description is not None:
        lines.append(f"description: {description}")
    if pub_date is not None:
        lines.append(f"pubDate: {pub_date}")
    if extra:
        lines.append(extra.rstrip("\n"))
    lines.append("---")
    return "\n".join(lines) + "\n" + body


@pytest.fixture
def source():
    def factory(path: str = "a-post.md", **kwargs) -> DocumentSource:
        return DocumentSource(path, make_document(**kwargs))

    return factory


@pytest.fixture
def site_toml():
    return (
        'posts = "posts"\n'
        'output = "dist"\n'
        'static = "static"\n'
        "\n"
        "[site]\n"
        'title = "Test Blog"\n'
        'description = "Notes for tests"\n'
        'url = "https://blog.example.com"\n'
        'author = "Test Author"\n'
        'email = "author@example.com"\n'
        'github = "https://github.com/example"\n'
        'linkedin = "https://linkedin.com/in/example"\n'
    )
