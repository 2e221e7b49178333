"""Helpers for calling user-supplied callbacks that may or may not be async."""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Any

__all__ = ["maybe_await"]


async def maybe_await(func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result when it is awaitable.

    Example
    -------
    >>> value = await maybe_await(check, interaction)
    """
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
