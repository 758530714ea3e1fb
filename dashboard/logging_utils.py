"""Logging setup shared by the tracker front-ends."""

import logging
from typing import Optional

DEFAULT_LOG_LEVEL = "INFO"
LOG_FORMAT = "[%(asctime)s] %(levelname)s: %(message)s"


def setup_logging(
    level: Optional[str] = None,
    filename: Optional[str] = None,
    format_string: Optional[str] = None,
) -> logging.Logger:
    """Configure root logging for the tracker.

    Parameters
    ----------
    level:
        Log level name, defaults to ``DEFAULT_LOG_LEVEL``
    filename:
        Write records to this file instead of stderr. Full-screen and live
        views pass a file so log lines do not overwrite the display.
    format_string:
        Log format string, defaults to ``LOG_FORMAT``

    Returns
    -------
    logging.Logger
        The package logger
    """
    logging.basicConfig(
        level=(level or DEFAULT_LOG_LEVEL).upper(),
        format=format_string or LOG_FORMAT,
        filename=filename,
        force=True,
    )

    # Suppress noisy third-party loggers
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    return logging.getLogger("dashboard")
