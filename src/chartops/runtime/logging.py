"""Loguru sink configuration for the CLI."""

import sys

from loguru import logger


def configure_logging(debug: bool = False) -> None:
    """Install a single stderr sink.

    Diagnostics stay quiet (WARNING) unless debug mode is on. User-facing
    messages go through the Rich console, not the logger.
    """
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if debug else "WARNING",
        format="<dim>{time:HH:mm:ss}</dim> <level>{level: <7}</level> {message}",
    )
