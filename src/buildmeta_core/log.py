"""Console logging for the buildmeta packages."""

from __future__ import annotations

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

_PACKAGES = ("buildmeta_core", "buildmeta_ops", "buildmeta_cli")
_OFF = {"off", "none", "disabled"}
_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def configure_logging(verbosity: str = "info", console: Optional[Console] = None) -> None:
    """Route buildmeta logs to a rich handler on stderr at ``verbosity``."""
    verbosity = verbosity.strip().lower()
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=False,
        show_path=False,
    )
    for name in _PACKAGES:
        package_logger = logging.getLogger(name)
        for existing in list(package_logger.handlers):
            if isinstance(existing, RichHandler):
                package_logger.removeHandler(existing)
        if verbosity in _OFF:
            package_logger.setLevel(logging.CRITICAL + 1)
            continue
        package_logger.setLevel(_LEVELS.get(verbosity, logging.INFO))
        package_logger.addHandler(handler)
