"""Layered configuration: built-in defaults overlaid with a TOML file.

The file is ``buildmeta.toml`` in the project directory, or the
``[tool.buildmeta]`` table of ``pyproject.toml``. ``BUILDMETA_CONFIG_PATH``
points at an explicit file instead.
"""

from __future__ import annotations

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

try:
    import tomllib
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib  # type: ignore

import tomli_w

from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "buildmeta.toml"
CONFIG_PATH_ENV = "BUILDMETA_CONFIG_PATH"
DEFAULT_PREFIXES = ("buildmeta", "git")
LOG_VERBOSITIES = {"debug", "info", "warn", "warning", "error", "off", "none", "disabled"}

DEFAULT_CONFIG: Dict[str, Any] = {
    "git": {
        "dir": ".",
        "head": "HEAD",
    },
    "properties": {
        "prefixes": [],
    },
    "describe": {
        "abbrev": 7,
    },
    "log": {
        "verbosity": "info",
    },
}


def default_config() -> Dict[str, Any]:
    return copy.deepcopy(DEFAULT_CONFIG)


def resolve_config_path(project_dir: Path, config_path: Optional[str] = None) -> Optional[Path]:
    """Return the config file to read, or ``None`` when there is none."""
    raw = config_path or os.getenv(CONFIG_PATH_ENV)
    if raw:
        path = Path(raw)
        if not path.is_absolute():
            path = (project_dir / path).resolve()
        if not path.is_file():
            raise ConfigError(f"Config file not found: {path}")
        return path
    for candidate in (project_dir / CONFIG_FILENAME, project_dir / "pyproject.toml"):
        if candidate.is_file():
            return candidate
    return None


def _read_toml(path: Path) -> Dict[str, Any]:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid config TOML: {path} ({exc})") from exc
    except OSError as exc:
        raise ConfigError(f"Unable to read config: {path} ({exc})") from exc
    if path.name == "pyproject.toml":
        data = data.get("tool", {}).get("buildmeta", {})
    if not isinstance(data, dict):
        raise ConfigError(f"Config must be a table: {path}")
    return data


def load_config(project_dir: Optional[Path] = None, config_path: Optional[str] = None) -> Dict[str, Any]:
    root = project_dir or Path.cwd().resolve()
    path = resolve_config_path(root, config_path)
    if path is None:
        return {}
    logger.debug(f"Loading config from {path}")
    return _read_toml(path)


def merge_defaults(defaults: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(defaults)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_defaults(merged[key], value)
        else:
            merged[key] = value
    return merged


def get_config_value(config: Dict[str, Any], path: str, default: Any = None) -> Any:
    if not config or not path:
        return default
    current: Any = config
    for segment in path.split("."):
        if not isinstance(current, dict) or segment not in current:
            return default
        current = current[segment]
    return current


def validate_config(config: Dict[str, Any]) -> List[str]:
    errors: List[str] = []

    git_cfg = config.get("git", {})
    if not isinstance(git_cfg, dict):
        errors.append("[git] must be a table.")
    else:
        for key in ("dir", "head"):
            value = git_cfg.get(key)
            if value is not None and (not isinstance(value, str) or not value.strip()):
                errors.append(f"git.{key} must be a non-empty string.")

    properties_cfg = config.get("properties", {})
    if not isinstance(properties_cfg, dict):
        errors.append("[properties] must be a table.")
    else:
        prefixes = properties_cfg.get("prefixes", [])
        if not isinstance(prefixes, list) or not all(isinstance(p, str) and p.strip() for p in prefixes):
            errors.append("properties.prefixes must be a list of non-empty strings.")

    describe_cfg = config.get("describe", {})
    if not isinstance(describe_cfg, dict):
        errors.append("[describe] must be a table.")
    else:
        abbrev = describe_cfg.get("abbrev")
        if abbrev is not None and (isinstance(abbrev, bool) or not isinstance(abbrev, int) or not 4 <= abbrev <= 40):
            errors.append("describe.abbrev must be an integer between 4 and 40.")

    log_cfg = config.get("log", {})
    if not isinstance(log_cfg, dict):
        errors.append("[log] must be a table.")
    else:
        verbosity = log_cfg.get("verbosity")
        if verbosity is not None and (
            not isinstance(verbosity, str) or verbosity.strip().lower() not in LOG_VERBOSITIES
        ):
            errors.append("log.verbosity must be one of: debug, info, warn, error, off.")

    return errors


def load_effective_config(
    project_dir: Optional[Path] = None,
    config_path: Optional[str] = None,
) -> Dict[str, Any]:
    """Defaults merged with the config file; raises ``ConfigError`` if invalid."""
    effective = merge_defaults(default_config(), load_config(project_dir, config_path))
    errors = validate_config(effective)
    if errors:
        raise ConfigError("; ".join(errors))
    return effective


def property_prefixes(config: Dict[str, Any], extra: Optional[List[str]] = None) -> List[str]:
    """Default prefixes followed by configured and ``extra`` ones, without repeats."""
    configured = get_config_value(config, "properties.prefixes", []) or []
    prefixes: List[str] = []
    for prefix in (*DEFAULT_PREFIXES, *configured, *(extra or [])):
        prefix = prefix.strip().rstrip(".")
        if prefix and prefix not in prefixes:
            prefixes.append(prefix)
    return prefixes


def dump_config(config: Dict[str, Any]) -> str:
    return tomli_w.dumps(config)
