"""Exception types raised by buildmeta."""

from __future__ import annotations


class BuildMetaError(Exception):
    """Base class for all buildmeta errors."""


class ConfigError(BuildMetaError):
    """Invalid or unreadable configuration."""


class RepositoryAccessError(BuildMetaError):
    """Reading from the underlying repository failed."""


class RepositoryNotFoundError(RepositoryAccessError):
    """No repository could be opened at the configured location."""


class RefResolutionError(BuildMetaError):
    """A ref expression could not be turned into a commit."""

    def __init__(self, expression: str, message: str) -> None:
        super().__init__(f"{expression}: {message}")
        self.expression = expression


class UnresolvableRefError(RefResolutionError):
    """The base name is unknown or a hop walked past a root commit."""


class AmbiguousRefError(RefResolutionError):
    """A bare ``^`` was applied to a merge commit."""


class InvalidRefError(RefResolutionError):
    """Malformed expression or parent index out of range."""


class TagPeelError(BuildMetaError):
    """A tag reference could not be peeled to its target."""

    def __init__(self, tag: str, message: str) -> None:
        super().__init__(f"tag {tag}: {message}")
        self.tag = tag


class ExtractionError(BuildMetaError):
    """Terminal failure of a metadata extraction, tagged with the failing stage."""

    def __init__(self, stage: str, cause: Exception) -> None:
        super().__init__(f"{stage} failed: {cause}")
        self.stage = stage
        self.cause = cause
