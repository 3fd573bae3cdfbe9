from __future__ import annotations

import re
import shutil
from pathlib import Path

import markdown
from pygments.formatters import HtmlFormatter

IMG_SRC_RE = re.compile(r'<img([^>]*?)src="([^"]+)"', re.IGNORECASE)
PLACEHOLDER_RE = re.compile(r"\{\{(\w+)\}\}")
DEFAULT_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
CODEHILITE_CLASS = "codehilite"


def render_markdown(body: str, root: str = ".") -> tuple[str, str]:
    """Convert a post body to HTML. Returns ``(html, toc_html)``."""
    md = markdown.Markdown(
        extensions=["fenced_code", "tables", "toc", "codehilite"],
        extension_configs={
            "toc": {"toc_depth": "2-4"},
            "codehilite": {"css_class": CODEHILITE_CLASS, "guess_lang": False},
        },
    )
    html_content = md.convert(body)
    toc_html = getattr(md, "toc", "")
    return fix_relative_img_src(html_content, root), toc_html


def pygments_css(style: str = "default") -> str:
    return HtmlFormatter(style=style).get_style_defs(f".{CODEHILITE_CLASS}")


def fix_relative_img_src(html_text: str, root: str) -> str:
    def repl(match: re.Match) -> str:
        attrs = match.group(1)
        src = match.group(2)
        if src.startswith(("http://", "https://", "data:", "#", "/", "./", "../")):
            return match.group(0)
        return f'<img{attrs}src="{root}/{src}"'

    return IMG_SRC_RE.sub(repl, html_text)


def resolve_asset(src: str, root: str) -> str:
    if src.startswith(("http://", "https://", "data:")):
        return src
    return f"{root}/{src.lstrip('/')}"


def render_template(template: str, **context: str) -> str:
    # One pass, so "{{...}}" inside a substituted value is never expanded.
    def repl(match: re.Match) -> str:
        return context.get(match.group(1), match.group(0))

    return PLACEHOLDER_RE.sub(repl, template)


def read_template(templates_dir: Path, name: str = "base.html") -> str:
    path = templates_dir / name
    if not path.exists():
        raise FileNotFoundError(f"Template not found: {path}")
    return path.read_text(encoding="utf-8")


def write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def copy_static(static_dir: Path, output_dir: Path) -> None:
    for item in static_dir.iterdir():
        dest = output_dir / item.name
        if item.is_dir():
            if dest.exists():
                shutil.rmtree(dest)
            shutil.copytree(item, dest)
        else:
            shutil.copy2(item, dest)
