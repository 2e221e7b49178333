from __future__ import annotations

from collections.abc import Iterator
from importlib import import_module, resources
from pathlib import PurePath
from types import ModuleType

# Utility helpers for module/package discovery.
#
# Provides :func:`iter_submodules`, used by the feature loader to find every
# feature module shipped in a package.

__all__ = ["iter_submodules"]


def iter_submodules(pkg: str) -> Iterator[str]:
    """Yield fully qualified names for every direct or nested sub-module in *pkg*.

    Package ``__init__`` files and private modules (leading underscore) are
    skipped. The order is alphabetic so features load in the same order on
    every OS.
    """

    root: ModuleType = import_module(pkg)
    root_files = resources.files(root)

    module_names = [
        f"{pkg}." + ".".join(PurePath(path.relative_to(root_files)).with_suffix("").parts)
        for path in root_files.rglob("*.py")  # type: ignore[attr-defined]
        if not path.name.startswith("_")
    ]

    yield from sorted(module_names)
