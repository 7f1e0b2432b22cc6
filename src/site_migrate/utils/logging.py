"""Loguru sinks for site-migrate.

Every record carries a ``component`` extra; classes bind theirs with
``logger.bind(component=...)`` and unbound records fall back to
``site-migrate``.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

DEFAULT_COMPONENT = 'site-migrate'

CONSOLE_FORMAT = (
    '<green>{time:YYYY-MM-DD HH:mm:ss}</green> | '
    '<level>{level: <8}</level> | '
    '<cyan>{extra[component]}</cyan> | '
    '<level>{message}</level>'
)

FILE_FORMAT = (
    '{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[component]} | '
    '{name}:{function}:{line} | {message}'
)


def setup_logging(
    level: str = 'INFO',
    log_file: Optional[str] = None,
    log_format: Optional[str] = None,
) -> None:
    """Route migration logs to stderr and, optionally, a rotated file.

    Calling this again replaces the previous sinks, so the CLI can start
    with a basic setup and reconfigure once the config file is read.

    Args:
        level: Minimum level for both sinks
        log_file: File sink path; its parent directory is created
        log_format: Console format, defaults to ``CONSOLE_FORMAT``
    """
    logger.remove()
    logger.configure(extra={'component': DEFAULT_COMPONENT})

    logger.add(
        sys.stderr,
        format=log_format or CONSOLE_FORMAT,
        level=level,
        colorize=True,
        backtrace=True,
        diagnose=False,
    )

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            format=FILE_FORMAT,
            level=level,
            rotation='10 MB',
            retention='30 days',
            compression='gz',
            backtrace=True,
            diagnose=False,
        )

    logger.debug(f'Logging at {level}' + (f', writing to {log_file}' if log_file else ''))
