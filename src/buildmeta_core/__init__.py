from .describe import Description, NearestTag, build_tag_map, describe, find_nearest_tag, format_describe
from .errors import (
    AmbiguousRefError,
    BuildMetaError,
    ConfigError,
    ExtractionError,
    InvalidRefError,
    RefResolutionError,
    RepositoryAccessError,
    RepositoryNotFoundError,
    TagPeelError,
    UnresolvableRefError,
)
from .refexpr import parse_ref_expression, resolve_ref
from .vcs import GitAdapter, RepositoryAccess, VcsMeta, open_repository

__all__ = [
    "AmbiguousRefError",
    "BuildMetaError",
    "ConfigError",
    "Description",
    "ExtractionError",
    "GitAdapter",
    "InvalidRefError",
    "NearestTag",
    "RefResolutionError",
    "RepositoryAccess",
    "RepositoryAccessError",
    "RepositoryNotFoundError",
    "TagPeelError",
    "UnresolvableRefError",
    "VcsMeta",
    "build_tag_map",
    "describe",
    "find_nearest_tag",
    "format_describe",
    "open_repository",
    "parse_ref_expression",
    "resolve_ref",
]
