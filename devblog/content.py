from __future__ import annotations

import datetime as dt
import logging
import re
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Any, Optional

import yaml

from .errors import SchemaValidationError

logger = logging.getLogger(__name__)

FRONT_MATTER_RE = re.compile(r"\A---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)", re.DOTALL | re.MULTILINE)
DESCRIPTION_LIMIT = 160
HUMAN_DATE_FORMATS = ("%b %d %Y", "%B %d %Y", "%b %d, %Y", "%B %d, %Y", "%d %b %Y", "%d %B %Y")


class FrontMatterLoader(yaml.SafeLoader):
    """Safe loader that leaves impossible timestamps (2024-02-30) as plain strings."""


def _construct_timestamp(loader: FrontMatterLoader, node: yaml.ScalarNode) -> object:
    try:
        return yaml.SafeLoader.construct_yaml_timestamp(loader, node)
    except ValueError:
        return loader.construct_scalar(node)


FrontMatterLoader.add_constructor("tag:yaml.org,2002:timestamp", _construct_timestamp)


@dataclass(frozen=True)
class DocumentSource:
    path: str
    text: str


@dataclass(frozen=True)
class BlogPost:
    slug: str
    title: str
    description: str
    pub_date: dt.date
    body: str
    source_path: str
    tags: tuple[str, ...] = ()
    hero_image: Optional[str] = None
    updated_date: Optional[dt.date] = None


@dataclass
class ValidationResult:
    value: dict[str, Any] = field(default_factory=dict)
    errors: list[SchemaValidationError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def slugify(text: str) -> str:
    text = text.lower()
    text = re.sub(r"[^\w]+", "-", text, flags=re.UNICODE)
    text = text.strip("-_").replace("_", "-")
    return text or "post"


def derive_slug(path: str) -> str:
    """Build the slug from a source path: extension dropped, each segment slugified."""
    posix = PurePosixPath(path.replace("\\", "/"))
    parts = [part for part in posix.with_suffix("").parts if part not in {"", ".", "/"}]
    return "/".join(slugify(part) for part in parts)


def parse_front_matter(text: str, path: str = "<string>") -> tuple[dict, str]:
    clean_text = text.lstrip("\ufeff")
    match = FRONT_MATTER_RE.match(clean_text)
    if not match:
        return {}, clean_text
    try:
        meta = yaml.load(match.group(1), Loader=FrontMatterLoader)
    except yaml.YAMLError as exc:
        raise SchemaValidationError(path, "front-matter", f"invalid YAML: {exc}") from exc
    if meta is None:
        meta = {}
    if not isinstance(meta, dict):
        raise SchemaValidationError(path, "front-matter", "must be a mapping of key: value pairs")
    return meta, clean_text[match.end() :]


def parse_date(value: object) -> Optional[dt.date]:
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if not isinstance(value, str):
        return None
    value = value.strip()
    if not value:
        return None
    try:
        return dt.date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return dt.datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for fmt in HUMAN_DATE_FORMATS:
        try:
            return dt.datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None


def _check_text(meta: dict, key: str, required: bool) -> tuple[Optional[str], Optional[str]]:
    value = meta.get(key)
    if value is None:
        return None, "required field is missing" if required else None
    if not isinstance(value, str):
        return None, f"expected a string, got {type(value).__name__}"
    if not value.strip():
        return None, "must not be empty"
    return value.strip(), None


def _check_date(meta: dict, key: str, required: bool) -> tuple[Optional[dt.date], Optional[str]]:
    value = meta.get(key)
    if value is None:
        return None, "required field is missing" if required else None
    parsed = parse_date(value)
    if parsed is None:
        return None, f"not a valid date: {value!r}"
    return parsed, None


def _check_tags(meta: dict) -> tuple[tuple[str, ...], Optional[str]]:
    value = meta.get("tags")
    if value is None:
        return (), None
    if not isinstance(value, list):
        return (), f"expected a list of strings, got {type(value).__name__}"
    tags = []
    for index, item in enumerate(value):
        if not isinstance(item, str):
            return (), f"item {index} is {type(item).__name__}, expected a string"
        if not item.strip():
            return (), f"item {index} is empty"
        tags.append(item.strip())
    return tuple(tags), None


def validate_front_matter(path: str, meta: dict) -> ValidationResult:
    """Check each schema field in order and collect one error per bad field."""
    result = ValidationResult()
    checks = [
        ("title", "title", _check_text(meta, "title", required=True)),
        ("description", "description", _check_text(meta, "description", required=True)),
        ("pubDate", "pub_date", _check_date(meta, "pubDate", required=True)),
        ("updatedDate", "updated_date", _check_date(meta, "updatedDate", required=False)),
        ("heroImage", "hero_image", _check_text(meta, "heroImage", required=False)),
        ("tags", "tags", _check_tags(meta)),
    ]
    for key, attr, (value, problem) in checks:
        if problem:
            result.errors.append(SchemaValidationError(path, key, problem))
        else:
            result.value[attr] = value
    return result


def load_post(source: DocumentSource) -> BlogPost:
    meta, body = parse_front_matter(source.text, source.path)
    result = validate_front_matter(source.path, meta)
    if not result.ok:
        raise result.errors[0]
    description = result.value["description"]
    if len(description) > DESCRIPTION_LIMIT:
        logger.warning(
            "%s: description is %d characters, meta descriptions over %d are usually truncated",
            source.path,
            len(description),
            DESCRIPTION_LIMIT,
        )
    return BlogPost(
        slug=derive_slug(source.path),
        body=body,
        source_path=source.path,
        **result.value,
    )
