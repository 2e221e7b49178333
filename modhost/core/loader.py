"""
Feature discovery and hot reload.

A feature is a Python module exposing ``setup(host, settings)``; it stages
its modules with ``host.begin_module`` and populates them. Loading (or
reloading) a package runs every feature's ``setup`` and then publishes the
result with a single ``commit_staged``.
"""

from __future__ import annotations

import importlib
import logging
import sys
from types import ModuleType
from typing import TYPE_CHECKING

from modhost.utils.async_helpers import maybe_await
from modhost.utils.module_discovery import iter_submodules

if TYPE_CHECKING:
    from modhost.core.host import ModuleHost
    from modhost.core.settings import Settings

logger = logging.getLogger(__name__)

__all__ = ["load_features", "reload_features"]


async def _run_setup(host: ModuleHost, settings: Settings, feature: ModuleType) -> bool:
    setup = getattr(feature, "setup", None)
    if setup is None:
        logger.warning("Feature %s has no setup(); skipped", feature.__name__)
        return False
    await maybe_await(setup, host, settings)
    return True


async def load_features(host: ModuleHost, settings: Settings, package: str | None = None) -> list[str]:
    """Import every feature in *package*, run its ``setup`` and commit. Returns the loaded names."""
    package = package or settings.features_package
    loaded: list[str] = []
    for name in iter_submodules(package):
        feature = importlib.import_module(name)
        if await _run_setup(host, settings, feature):
            loaded.append(name)
    await host.commit_staged()
    logger.info("Loaded %d feature(s) from %s", len(loaded), package)
    return loaded


async def reload_features(host: ModuleHost, settings: Settings, package: str | None = None) -> list[str]:
    """Re-import every feature in *package* from source and republish it."""
    package = package or settings.features_package
    importlib.invalidate_caches()
    loaded: list[str] = []
    for name in iter_submodules(package):
        if name in sys.modules:
            feature = importlib.reload(sys.modules[name])
        else:
            feature = importlib.import_module(name)
        if await _run_setup(host, settings, feature):
            loaded.append(name)
    await host.commit_staged()
    logger.info("Reloaded %d feature(s) from %s", len(loaded), package)
    return loaded
