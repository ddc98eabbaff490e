"""
Logging configuration for the comment harvester.

Everything is attached to the ``ytcomments`` logger: a console handler and,
when a log directory is given, a rotating file. Level, file name and rotation
come from ``LoggingSettings``. Modules log through:
    import logging
    logger = logging.getLogger(__name__)
"""

from __future__ import annotations

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional, Union

from ytcomments.config.settings import LoggingSettings

LOGGER_NAME = "ytcomments"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_level(level: Union[int, str]) -> int:
    """Turn a level name such as ``"debug"`` into its numeric value."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    return value


def setup_logging(
    log_dir: Path | None = None,
    level: Union[int, str, None] = None,
    settings: Optional[LoggingSettings] = None,
) -> logging.Logger:
    """
    Configure the ``ytcomments`` logger and return it.

    Args:
        log_dir: Directory for the rotating log file. If None, only console logging is set up.
        level: Overrides ``settings.level`` (a name or a number).
        settings: Logging settings; defaults to ``LoggingSettings()``.

    A second call only changes the level; handlers are attached once.
    """
    settings = settings or LoggingSettings()
    resolved = resolve_level(settings.level if level is None else level)

    app_logger = logging.getLogger(LOGGER_NAME)
    app_logger.setLevel(resolved)
    if app_logger.handlers:
        for handler in app_logger.handlers:
            handler.setLevel(resolved)
        return app_logger

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(resolved)
    console_handler.setFormatter(formatter)
    app_logger.addHandler(console_handler)

    if log_dir is not None:
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                filename=log_dir / settings.log_file,
                maxBytes=settings.max_bytes,
                backupCount=settings.backup_count,
                encoding="utf-8",
            )
            file_handler.setLevel(resolved)
            file_handler.setFormatter(formatter)
            app_logger.addHandler(file_handler)
        except OSError as e:
            app_logger.warning("Could not set up file logging: %s", e)

    for name in settings.quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)
    return app_logger
