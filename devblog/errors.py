from __future__ import annotations


class DevblogError(Exception):
    """Base class for every error that aborts a build."""


class ConfigValidationError(DevblogError):
    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid site config field {field!r}: {reason}")


class ContentError(DevblogError):
    pass


class SchemaValidationError(ContentError):
    def __init__(self, path: str, field: str, reason: str) -> None:
        self.path = path
        self.field = field
        self.reason = reason
        super().__init__(f"{path}: invalid front-matter field {field!r}: {reason}")


class DuplicateSlugError(ContentError):
    def __init__(self, slug: str, first_path: str, second_path: str) -> None:
        self.slug = slug
        self.first_path = first_path
        self.second_path = second_path
        super().__init__(f"Duplicate slug {slug!r}: {first_path} and {second_path}")


class NotFoundError(ContentError, KeyError):
    def __init__(self, slug: str) -> None:
        self.slug = slug
        super().__init__(f"No post with slug {slug!r}")

    def __str__(self) -> str:
        # KeyError would repr() the message otherwise.
        return self.args[0]


class BuildError(DevblogError):
    pass
