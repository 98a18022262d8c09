from .goals import BRANCH, DESCRIBE, GOALS, collect_properties, extract, resolve_branch, resolve_describe
from .properties import (
    OUTPUT_FORMATS,
    PrefixedPropertySink,
    PropertySink,
    StagingSink,
    render_properties,
    write_properties,
)

__all__ = [
    "BRANCH",
    "DESCRIBE",
    "GOALS",
    "OUTPUT_FORMATS",
    "PrefixedPropertySink",
    "PropertySink",
    "StagingSink",
    "collect_properties",
    "extract",
    "render_properties",
    "resolve_branch",
    "resolve_describe",
    "write_properties",
]
