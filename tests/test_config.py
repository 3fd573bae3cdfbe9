from __future__ import annotations

import dataclasses
import json

import pytest

from devblog.config import SiteConfig, default_site_config, is_absolute_url, load_config, site_config_from_file
from devblog.errors import ConfigValidationError

VALID = {
    "title": "Blog",
    "description": "About things",
    "url": "https://example.com",
    "author": "Someone",
    "email": "someone@example.com",
    "github_url": "https://github.com/someone",
    "linkedin_url": "https://linkedin.com/in/someone",
}


class TestSiteConfig:
    def test_defaults_are_the_site_constants(self):
        site = default_site_config()
        assert site.title == "Nishant Kumawat - Developer Blog"
        assert site.url == "https://nishantkumawat.me"
        assert site.author == "Nishant Kumawat"
        assert site.email == "nishant@example.com"
        assert site.github_url == "https://github.com/Nishu1103"
        assert site.linkedin_url == "https://linkedin.com/in/nishant-kumawat"

    def test_explicit_values(self):
        site = SiteConfig(**VALID)
        assert dataclasses.asdict(site) == VALID

    def test_is_immutable(self):
        site = SiteConfig(**VALID)
        with pytest.raises(dataclasses.FrozenInstanceError):
            site.author = "Someone else"

    @pytest.mark.parametrize("field", sorted(VALID))
    def test_empty_field(self, field):
        with pytest.raises(ConfigValidationError) as excinfo:
            SiteConfig(**{**VALID, field: "  "})
        assert excinfo.value.field == field

    def test_empty_author(self):
        with pytest.raises(ConfigValidationError) as excinfo:
            SiteConfig(**{**VALID, "author": ""})
        assert excinfo.value.field == "author"
        assert "author" in str(excinfo.value)

    @pytest.mark.parametrize("field", ["url", "github_url", "linkedin_url"])
    @pytest.mark.parametrize("value", ["example.com", "ftp://example.com", "https://", "/relative/path"])
    def test_malformed_urls(self, field, value):
        with pytest.raises(ConfigValidationError) as excinfo:
            SiteConfig(**{**VALID, field: value})
        assert excinfo.value.field == field

    def test_values_are_stripped(self):
        site = SiteConfig(**{**VALID, "url": "  https://example.com ", "author": " Someone\n"})
        assert site.url == "https://example.com"
        assert site.author == "Someone"

    @pytest.mark.parametrize("value", ["http://exa mple.com", "https://example.com/a b", "https://[broken"])
    def test_url_with_whitespace_or_bad_host(self, value):
        with pytest.raises(ConfigValidationError) as excinfo:
            SiteConfig(**{**VALID, "url": value})
        assert excinfo.value.field == "url"

    def test_malformed_email(self):
        with pytest.raises(ConfigValidationError) as excinfo:
            SiteConfig(**{**VALID, "email": "not-an-email"})
        assert excinfo.value.field == "email"

    def test_non_string_value(self):
        with pytest.raises(ConfigValidationError) as excinfo:
            SiteConfig(**{**VALID, "title": 42})
        assert excinfo.value.field == "title"


class TestFromMapping:
    def test_empty_gives_defaults(self):
        assert SiteConfig.from_mapping(None) == SiteConfig()
        assert SiteConfig.from_mapping({}) == SiteConfig()

    def test_aliases_and_fallbacks(self):
        site = SiteConfig.from_mapping(
            {"title": "Mine", "github": "https://github.com/me", "LinkedIn": "https://linkedin.com/in/me"}
        )
        assert site.title == "Mine"
        assert site.github_url == "https://github.com/me"
        assert site.linkedin_url == "https://linkedin.com/in/me"
        assert site.author == SiteConfig().author

    def test_unknown_keys_ignored(self):
        assert SiteConfig.from_mapping({"theme": "dark"}) == SiteConfig()

    def test_not_a_mapping(self):
        with pytest.raises(ConfigValidationError):
            SiteConfig.from_mapping(["title"])

    def test_invalid_value(self):
        with pytest.raises(ConfigValidationError) as excinfo:
            SiteConfig.from_mapping({"url": "nishantkumawat.me"})
        assert excinfo.value.field == "url"


class TestLoadConfig:
    def test_missing_file(self, tmp_path):
        assert load_config(tmp_path / "site.toml") == {}

    def test_toml(self, tmp_path, site_toml):
        path = tmp_path / "site.toml"
        path.write_text(site_toml, encoding="utf-8")
        data = load_config(path)
        assert data["posts"] == "posts"
        site = site_config_from_file(data)
        assert site.title == "Test Blog"
        assert site.github_url == "https://github.com/example"

    def test_yaml(self, tmp_path):
        path = tmp_path / "site.yaml"
        path.write_text("output: public\nsite:\n  author: Yaml Author\n", encoding="utf-8")
        data = load_config(path)
        assert data["output"] == "public"
        assert site_config_from_file(data).author == "Yaml Author"

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "site.yml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == {}

    def test_json(self, tmp_path):
        path = tmp_path / "site.json"
        path.write_text(json.dumps({"feed_limit": 5}), encoding="utf-8")
        assert load_config(path) == {"feed_limit": 5}

    def test_no_site_table_gives_defaults(self):
        assert site_config_from_file({"posts": "content"}) == SiteConfig()

    @pytest.mark.parametrize(
        ("name", "text"),
        [
            ("site.toml", "title = "),
            ("site.yaml", "site: [unclosed"),
            ("site.json", "{not json"),
            ("site.json", "[1, 2]"),
        ],
    )
    def test_bad_files(self, tmp_path, name, text):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        with pytest.raises(ConfigValidationError) as excinfo:
            load_config(path)
        assert excinfo.value.field == str(path)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("https://example.com", True),
        ("http://example.com/blog/", True),
        (" https://example.com ", True),
        ("mailto:me@example.com", False),
        ("", False),
    ],
)
def test_is_absolute_url(value, expected):
    assert is_absolute_url(value) is expected
