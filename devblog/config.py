from __future__ import annotations

import json
import logging
import re
import tomllib
from dataclasses import dataclass, fields
from pathlib import Path
from urllib.parse import urlsplit

import yaml

from .errors import ConfigValidationError

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
WHITESPACE_RE = re.compile(r"\s")
URL_FIELDS = ("url", "github_url", "linkedin_url")

# Alternate spellings accepted in config files.
FIELD_ALIASES = {
    "site_title": "title",
    "site_description": "description",
    "site_url": "url",
    "github": "github_url",
    "linkedin": "linkedin_url",
}


@dataclass(frozen=True)
class SiteConfig:
    """Site-wide strings shared by every rendered page."""

    title: str = "Nishant Kumawat - Developer Blog"
    description: str = (
        "A blog about web development, programming insights, and tech experiences by Nishant Kumawat"
    )
    url: str = "https://nishantkumawat.me"
    author: str = "Nishant Kumawat"
    email: str = "nishant@example.com"
    github_url: str = "https://github.com/Nishu1103"
    linkedin_url: str = "https://linkedin.com/in/nishant-kumawat"

    def __post_init__(self) -> None:
        for item in fields(self):
            value = getattr(self, item.name)
            if not isinstance(value, str):
                raise ConfigValidationError(item.name, f"expected a string, got {type(value).__name__}")
            value = value.strip()
            if not value:
                raise ConfigValidationError(item.name, "must not be empty")
            object.__setattr__(self, item.name, value)
        for name in URL_FIELDS:
            if not is_absolute_url(getattr(self, name)):
                raise ConfigValidationError(name, f"not an absolute http(s) URL: {getattr(self, name)!r}")
        if not EMAIL_RE.match(self.email):
            raise ConfigValidationError("email", f"not an email address: {self.email!r}")

    @classmethod
    def from_mapping(cls, data: dict | None) -> SiteConfig:
        if not data:
            return cls()
        if not isinstance(data, dict):
            raise ConfigValidationError("site", "must be a mapping")
        known = {item.name for item in fields(cls)}
        values = {}
        for key, value in data.items():
            name = FIELD_ALIASES.get(str(key).lower(), str(key).lower())
            if name in known:
                values[name] = value
        return cls(**values)


def default_site_config() -> SiteConfig:
    return SiteConfig()


def is_absolute_url(value: str) -> bool:
    value = value.strip()
    if WHITESPACE_RE.search(value):
        return False
    try:
        parts = urlsplit(value)
        hostname = parts.hostname
    except ValueError:
        return False
    return parts.scheme in {"http", "https"} and bool(hostname)


def load_config(path: Path) -> dict:
    """Read a TOML, YAML or JSON build config. A missing file yields ``{}``."""
    if not path.exists():
        return {}
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix == ".toml":
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigValidationError(str(path), f"invalid TOML: {exc}") from exc
    elif suffix in {".yml", ".yaml"}:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigValidationError(str(path), f"invalid YAML: {exc}") from exc
        if data is None:
            return {}
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigValidationError(str(path), f"invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigValidationError(str(path), "config file must be a mapping")
    return data


def site_config_from_file(data: dict) -> SiteConfig:
    site = data.get("site")
    if site is None:
        logger.info("No [site] table in config, using the default site strings")
        return default_site_config()
    return SiteConfig.from_mapping(site)
