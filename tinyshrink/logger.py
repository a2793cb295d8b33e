"""
Logging setup using Loguru.

Result lines ("OK, saved 20%!") are plain prints on stdout. Loguru only
carries diagnostics and goes to stderr, so piping the output stays clean.

Loguru formats with f-strings or "{}" placeholders, never "%s".
"""

import sys

from loguru import logger  # type: ignore


CONSOLE_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>"


def setup_logger(verbose: bool = False) -> None:
    """Replace loguru's default handler with one stderr sink."""
    logger.remove()
    logger.add(
        sys.stderr,
        colorize=None,
        format=CONSOLE_FORMAT,
        level="DEBUG" if verbose else "WARNING",
    )


__all__ = ["logger", "setup_logger"]
