"""
modhost/core/logger_setup.py - Logging for the host process.

setup_logging() routes everything through one rich console handler. A
reconnect storm makes discord.py repeat the same warning many times in a
row, so consecutive repeats from one logger are collapsed.
"""

import copy
import logging
import logging.config
import os
from collections.abc import Mapping
from typing import Any

# Library loggers and the level they run at unless LOG_LEVEL asks for DEBUG.
QUIET_LOGGERS: dict[str, str] = {
    "discord": "WARNING",
    "discord.gateway": "WARNING",
    "discord.http": "WARNING",
}

BASE_CONFIG: dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        # RichHandler renders its own time column and only reads datefmt.
        "rich": {"datefmt": "%H:%M:%S"},
    },
    "filters": {"collapse_repeats": {"()": "modhost.core.logger_setup.RepeatCollapser"}},
    "handlers": {
        "console": {
            "class": "rich.logging.RichHandler",
            "formatter": "rich",
            "filters": ["collapse_repeats"],
            "markup": False,
            "rich_tracebacks": True,
            "show_path": False,
        },
    },
    "loggers": {},
    "root": {"handlers": ["console"], "level": "INFO"},
}


class RepeatCollapser(logging.Filter):
    """Let a record through unless it repeats the previous one from the same logger."""

    def __init__(self) -> None:
        super().__init__()
        self._last: dict[str, tuple[int, str]] = {}
        self.suppressed = 0

    def filter(self, record: logging.LogRecord) -> bool:
        key = (record.levelno, record.getMessage())
        if self._last.get(record.name) == key:
            self.suppressed += 1
            return False
        self._last[record.name] = key
        return True


def build_config(
    overrides: Mapping[str, Any] | None = None, *, level: str | None = None
) -> dict[str, Any]:
    """Return the dictConfig for *level*, with *overrides* merged one section deep."""
    config = copy.deepcopy(BASE_CONFIG)
    root_level = (os.getenv("LOG_LEVEL") or level or "INFO").upper()
    config["root"]["level"] = root_level
    if root_level != "DEBUG":
        config["loggers"].update({name: {"level": lvl} for name, lvl in QUIET_LOGGERS.items()})

    for section, value in (overrides or {}).items():
        if isinstance(value, Mapping) and isinstance(config.get(section), dict):
            config[section].update(value)
        else:
            config[section] = value
    return config


_configured = False


def setup_logging(
    overrides: Mapping[str, Any] | None = None,
    *,
    level: str | None = None,
    force: bool = False,
) -> None:
    """Configure logging once; *force* reapplies it (tests, ``--log-level``)."""
    global _configured
    if _configured and not force:
        return
    logging.config.dictConfig(build_config(overrides, level=level))
    _configured = True
