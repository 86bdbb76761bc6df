"""Utility functions for vault-query."""

import sys
from pathlib import Path

from loguru import logger


def setup_logging(level: str = "INFO", log_file: Path | str | None = None) -> None:
    """Configure loguru sinks.

    Replaces the default handler with a stderr sink at `level`. When `log_file`
    is given, a rotating file sink is added that always records DEBUG.
    """
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format="{level.icon} {message}")

    if log_file is not None:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            path,
            level="DEBUG",
            rotation="10 MB",
            retention="10 days",
            backtrace=True,
            diagnose=False,
        )
