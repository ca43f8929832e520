"""Logging configuration using rich handlers."""

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

LOG_LEVEL_ENV = "PYKILL_LOG_LEVEL"


def resolve_level(environ: dict[str, str] | None = None) -> int:
    """Return the logging level named by PYKILL_LOG_LEVEL, WARNING by default."""
    if environ is None:
        environ = dict(os.environ)
    name = environ.get(LOG_LEVEL_ENV, "").strip().upper()
    level = logging.getLevelName(name) if name else logging.WARNING
    return level if isinstance(level, int) else logging.WARNING


def setup_logging(level: int = logging.WARNING) -> None:
    """Send log records to stderr so they never mix with the selector output."""
    logging.basicConfig(
        level=level,
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        format="%(message)s",
        force=True,
    )
