"""Logging setup for the MCP chat client.

The log level is explicit configuration: build a ``LogSettings`` and hand it
to ``setup_logging``. Changing the level means building new settings and
calling ``setup_logging`` again.
"""

import logging
import sys
from dataclasses import dataclass, replace
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def parse_level(name: Optional[str]) -> int:
    """Map a LOG_LEVEL name (debug, info, warn, error) to a logging level."""
    if not name:
        return logging.INFO
    return _LEVELS.get(name.strip().lower(), logging.INFO)


@dataclass(frozen=True)
class LogSettings:
    level: int = logging.INFO
    logger_name: str = "mcp_client"

    @classmethod
    def from_name(cls, name: Optional[str]) -> "LogSettings":
        return cls(level=parse_level(name))

    def with_level(self, name: str) -> "LogSettings":
        return replace(self, level=parse_level(name))


def setup_logging(settings: LogSettings) -> logging.Logger:
    """Configure the client logger to write to stderr at the given level."""
    logger = logging.getLogger(settings.logger_name)
    logger.setLevel(settings.level)
    logger.handlers.clear()

    # stdout carries the chat output
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(settings.level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
