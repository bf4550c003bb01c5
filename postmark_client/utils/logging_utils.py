import logging
import sys
from typing import Optional, TextIO

from postmark_client.utils.structured_logging import JSONFormatter

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_level(level_name: str) -> Optional[int]:
    """Map a level name such as "debug" to its logging constant, or None if unknown"""
    level = logging.getLevelName(str(level_name).upper())
    return level if isinstance(level, int) else None


def configure_logging(
    level_name: str = "INFO",
    json_format: bool = False,
    stream: Optional[TextIO] = None,
) -> logging.Handler:
    """
    Install a single stream handler on the root logger.

    Args:
        level_name: Log level name; unknown names fall back to INFO
        json_format: Emit one JSON object per record instead of plain text
        stream: Output stream (default: stdout)

    Returns:
        The installed handler, so callers can remove it again
    """
    level = resolve_level(level_name)

    handler = logging.StreamHandler(stream or sys.stdout)
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(level if level is not None else logging.INFO)

    if level is None:
        logging.getLogger("postmark_client").warning(
            "Invalid log level '%s'; defaulting to INFO", level_name
        )

    return handler
