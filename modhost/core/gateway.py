"""
The shared Discord connection that every module subscribes its handlers to.

``Gateway`` is the stable handle modules hold on to. It owns the listener
table and the current ``discord.Client``; when the host needs more gateway
intents it destroys the client and builds a fresh one, and the handle (and
its listener table) survives the swap.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

import discord

from modhost.utils.async_helpers import maybe_await

logger = logging.getLogger(__name__)

__all__ = ["Gateway", "GatewayClient", "intents_from_names", "intents_union"]


def intents_from_names(names: Iterable[str]) -> discord.Intents:
    """Build an ``Intents`` with exactly the given flag names enabled."""
    intents = discord.Intents.none()
    for name in names:
        if name not in discord.Intents.VALID_FLAGS:
            raise ValueError(f"Unknown gateway intent: {name!r}")
        setattr(intents, name, True)
    return intents


def intents_union(*many: discord.Intents) -> discord.Intents:
    intents = discord.Intents.none()
    for item in many:
        intents.value |= item.value
    return intents


@dataclass
class Listener:
    callback: Callable[..., Any]
    once: bool = False


class GatewayClient(discord.Client):
    """``discord.Client`` that forwards every dispatched event to its gateway."""

    def __init__(self, gateway: Gateway, **options: Any) -> None:
        super().__init__(intents=gateway.intents, **options)
        self.gateway = gateway

    def dispatch(self, event: str, /, *args: Any, **kwargs: Any) -> None:
        super().dispatch(event, *args, **kwargs)
        self.gateway.forward(self, event, *args, **kwargs)


class Gateway:
    """Connection handle with a client-independent listener table.

    Event names are discord.py event names without the ``on_`` prefix, e.g.
    ``"message"`` or ``"interaction"``.
    """

    def __init__(
        self,
        token: str,
        intents: discord.Intents,
        *,
        client_factory: Callable[[Gateway], discord.Client] = GatewayClient,
    ) -> None:
        self._token = token
        self.intents = intents
        self._client_factory = client_factory
        self._listeners: dict[str, list[Listener]] = {}
        self._runner: asyncio.Task[None] | None = None
        self._http_ready = False
        # Concurrent registry calls share one login.
        self._login_lock = asyncio.Lock()
        self.logged_in = False
        self.client = client_factory(self)

    # ------------------------------------------------------------------+
    # Subscriptions                                                     |
    # ------------------------------------------------------------------+

    def on(self, event: str, callback: Callable[..., Any]) -> None:
        self._listeners.setdefault(event, []).append(Listener(callback))

    def once(self, event: str, callback: Callable[..., Any]) -> None:
        self._listeners.setdefault(event, []).append(Listener(callback, once=True))

    def off(self, event: str, callback: Callable[..., Any]) -> None:
        """Remove one subscription of *callback* to *event*, if there is one."""
        listeners = self._listeners.get(event, [])
        for listener in listeners:
            if listener.callback == callback:
                listeners.remove(listener)
                break
        if not listeners:
            self._listeners.pop(event, None)

    def remove_all_listeners(self) -> None:
        self._listeners.clear()

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    def forward(self, client: discord.Client, event: str, *args: Any, **kwargs: Any) -> None:
        """Schedule every listener of *event*; events from a replaced client are dropped."""
        if client is not self.client:
            return
        listeners = self._listeners.get(event, [])
        for listener in list(listeners):
            if listener.once:
                listeners.remove(listener)
                if not listeners:
                    self._listeners.pop(event, None)
            client._schedule_event(  # noqa: SLF001 – same path discord.ext.commands uses
                functools.partial(maybe_await, listener.callback),
                f"on_{event}",
                *args,
                **kwargs,
            )

    # ------------------------------------------------------------------+
    # Capabilities                                                      |
    # ------------------------------------------------------------------+

    def missing(self, required: discord.Intents) -> discord.Intents:
        """Return the intents in *required* that the connection is not subscribed to."""
        missing = discord.Intents.none()
        missing.value = required.value & ~self.intents.value
        return missing

    def add(self, extra: discord.Intents) -> None:
        self.intents = intents_union(self.intents, extra)

    # ------------------------------------------------------------------+
    # Lifecycle                                                         |
    # ------------------------------------------------------------------+

    async def ensure_http(self) -> None:
        """Log the REST client in without opening the websocket."""
        async with self._login_lock:
            if not self._http_ready:
                await self.client.login(self._token)
                self._http_ready = True

    async def start(self) -> None:
        """Log in and run the websocket connection in the background."""
        await self.ensure_http()
        self._runner = asyncio.create_task(self.client.connect(reconnect=True), name="modhost-gateway")
        self._runner.add_done_callback(self._on_runner_done)
        self.logged_in = True
        logger.info("Gateway connecting with intents %s", self.intents.value)

    async def destroy(self) -> None:
        """Close the current client; its subscriptions and in-flight events are abandoned."""
        runner, self._runner = self._runner, None
        await self.client.close()
        if runner is not None and not runner.done():
            runner.cancel()
            await asyncio.gather(runner, return_exceptions=True)
        self._http_ready = False
        self.logged_in = False

    def reopen(self) -> None:
        """Replace the (destroyed) client with a fresh one using the current intents."""
        self.client = self._client_factory(self)

    @staticmethod
    def _on_runner_done(task: asyncio.Task[None]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Gateway connection stopped: %s", exc, exc_info=exc)
