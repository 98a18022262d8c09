from __future__ import annotations

import json
import shlex
from pathlib import Path
from typing import Dict, List, Mapping, MutableMapping, Protocol, Sequence

OUTPUT_FORMATS = ("properties", "json", "env")


class PropertySink(Protocol):
    """Receives ``(key, value)`` pairs produced by the goals."""

    def set_property(self, key: str, value: str) -> None:
        ...


class PrefixedPropertySink:
    """Publish every property once per prefix, as ``<prefix>.<key>``."""

    def __init__(self, target: MutableMapping[str, str], prefixes: Sequence[str]) -> None:
        if not prefixes:
            raise ValueError("at least one property prefix is required")
        self.target = target
        self.prefixes: List[str] = list(prefixes)

    def set_property(self, key: str, value: str) -> None:
        for prefix in self.prefixes:
            self.target[f"{prefix}.{key}"] = value


class StagingSink:
    """Hold properties back until the whole extraction has succeeded."""

    def __init__(self) -> None:
        self.values: Dict[str, str] = {}

    def set_property(self, key: str, value: str) -> None:
        self.values[key] = value

    def flush(self, sink: PropertySink) -> None:
        for key, value in self.values.items():
            sink.set_property(key, value)


def _escape_properties(text: str, is_key: bool = False) -> str:
    out = text.replace("\\", "\\\\").replace("\n", "\\n").replace("\r", "\\r").replace("\t", "\\t")
    if is_key:
        out = out.replace(" ", "\\ ").replace("=", "\\=").replace(":", "\\:")
    elif out.startswith(" "):
        out = "\\" + out
    return out


def _env_key(key: str) -> str:
    return "".join(c if c.isalnum() else "_" for c in key).upper()


def render_properties(properties: Mapping[str, str], fmt: str = "properties") -> str:
    """Render a flat mapping as a Java ``.properties``, JSON or dotenv text."""
    keys = sorted(properties)
    if fmt == "properties":
        lines = [f"{_escape_properties(k, is_key=True)}={_escape_properties(properties[k])}" for k in keys]
    elif fmt == "json":
        return json.dumps({k: properties[k] for k in keys}, indent=2) + "\n"
    elif fmt == "env":
        lines = [f"{_env_key(k)}={shlex.quote(properties[k])}" for k in keys]
    else:
        raise ValueError(f"Unknown output format: {fmt} (expected one of {', '.join(OUTPUT_FORMATS)})")
    return "\n".join(lines) + ("\n" if lines else "")


def write_properties(properties: Mapping[str, str], path: Path, fmt: str = "properties") -> Path:
    text = render_properties(properties, fmt)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path
