"""
main.py - Runs the module host until the process is interrupted.
"""

from __future__ import annotations

import asyncio
import logging

from modhost.core.containers import Container
from modhost.core.loader import load_features
from modhost.core.settings import Settings

logger = logging.getLogger(__name__)


async def main(settings: Settings | None = None) -> None:
    """
    Main asynchronous entry point.
    Publishes every built-in feature, connects, then idles until cancelled.
    """
    container = Container()
    if settings is not None:
        container.config.override(settings)
    settings = container.config()
    host = container.host()

    try:
        await load_features(host, settings)
        await host.start()
        await asyncio.Event().wait()
    finally:
        logger.info("Shutting down module host")
        await host.close()
