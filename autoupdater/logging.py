"""Logging configuration for autoupdater."""

import sys

from loguru import logger

# Loguru level names -> tags written in each line.
LEVEL_TAGS = {
    "WARNING": "WARN",
    "SUCCESS": "OK",
}

LINE_FORMAT = "[{time:YYYY-MM-DDTHH:mm:ss.SSS[Z]!UTC}] [{extra[tag]}] {message}"


def _tag_level(record) -> None:
    name = record["level"].name
    record["extra"]["tag"] = LEVEL_TAGS.get(name, name)


def setup_logging(log_file: str | None = None, verbose: bool = False) -> None:
    """
    Configure console and file sinks.

    Every line looks like ``[2024-01-01T00:00:00.000Z] [INFO] message``.
    The file, when given, is opened in append mode.
    """
    level = "DEBUG" if verbose else "INFO"

    logger.remove()
    logger.configure(patcher=_tag_level)
    logger.add(sys.stdout, format=LINE_FORMAT, level=level, colorize=False)

    if log_file:
        logger.add(
            log_file,
            format=LINE_FORMAT,
            level=level,
            mode="a",
            encoding="utf-8",
            colorize=False,
        )
