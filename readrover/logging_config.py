"""
Logging setup for ReadRover.

Every module logs through ``logging.getLogger(__name__)``; the root-level
modules (``app``, ``main``) use names under ``readrover.`` so that one
configured ``readrover`` logger covers the whole application.

Usage:
    from readrover.config import get_settings
    from readrover.logging_config import setup_logging
    setup_logging(get_settings())
"""

import logging
import sys
import json
from datetime import datetime, timezone
from typing import List, Optional

ROOT_LOGGER = "readrover"

# Record attributes passed via ``extra=`` that the JSON output keeps.
CONTEXT_FIELDS = ('user_id', 'activity_id', 'comment_id', 'book_id', 'path')

THIRD_PARTY_LOGGERS = (
    'uvicorn.access',
    'watchfiles.main',
    'httpx',
    'httpcore',
    'fastmigrate',
)


class JSONFormatter(logging.Formatter):
    """One JSON object per line, with any known context fields lifted to the top level."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                entry[field] = value
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable lines: ``2026-01-26 19:45:00 INFO readrover.app: message``."""

    def __init__(self):
        super().__init__(
            fmt='%(asctime)s %(levelname)s %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )


def parse_level(name: Optional[str]) -> int:
    """Map a level name such as 'debug' to its logging constant, defaulting to INFO."""
    level = logging.getLevelName((name or 'INFO').upper())
    return level if isinstance(level, int) else logging.INFO


def build_handlers(formatter: logging.Formatter, log_file: Optional[str] = None) -> List[logging.Handler]:
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def setup_logging(settings=None, use_json: Optional[bool] = None) -> logging.Logger:
    """
    Configure the ``readrover`` logger from Settings.

    Calling it again replaces the handlers rather than stacking them.

    Args:
        settings: A readrover.config.Settings; read from the environment if None
        use_json: Force JSON output on or off; defaults to settings.log_format == 'json'

    Returns:
        The configured ``readrover`` logger.
    """
    if settings is None:
        from .config import get_settings
        settings = get_settings()
    if use_json is None:
        use_json = settings.log_format == 'json'

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(parse_level(settings.log_level))
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    formatter = JSONFormatter() if use_json else TextFormatter()
    for handler in build_handlers(formatter, settings.log_file or None):
        logger.addHandler(handler)

    logger.propagate = False
    return logger


def quiet_third_party(level: int = logging.WARNING):
    """Raise the threshold of server and HTTP client loggers."""
    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(level)
