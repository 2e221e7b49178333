"""
ModuleHost – publishes modules onto one shared Discord connection.

Modules are staged with :meth:`ModuleHost.begin_module`, populated by the
caller, then published together by :meth:`ModuleHost.commit_staged`. A
commit swaps listeners from the previous version of each module to the new
one, brings the remote command registry in line, and reconnects when the new
version needs gateway intents the connection does not have.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

import discord

from modhost.core.diff import command_diff
from modhost.core.exceptions import RegistrationConflict
from modhost.core.gateway import Gateway, intents_from_names, intents_union
from modhost.core.module import Module
from modhost.core.registry import CommandRegistry

logger = logging.getLogger(__name__)

__all__ = ["ModuleHost"]


class ModuleHost:
    def __init__(
        self,
        gateway: Gateway,
        registry: CommandRegistry,
        base_intents: discord.Intents | None = None,
    ) -> None:
        self.gateway = gateway
        self.registry = registry
        self.base_intents = base_intents if base_intents is not None else discord.Intents.none()
        self.modules: dict[str, Module] = {}
        self.staged_modules: dict[str, Module] = {}
        # Commits and removals mutate the active set and may rebuild the
        # connection; only one runs at a time.
        self._lock = asyncio.Lock()

    def begin_module(
        self, id: str, capabilities: discord.Intents | Iterable[str] = ()
    ) -> Module:
        """Stage a new (or replacement) module under *id* and return it for population."""
        intents = (
            capabilities
            if isinstance(capabilities, discord.Intents)
            else intents_from_names(capabilities)
        )
        module = Module(id, intents, self.gateway)
        if id in self.staged_modules:
            logger.debug("Re-staging module %r; the earlier staged version is dropped", id)
        self.staged_modules[id] = module
        return module

    async def commit_staged(self) -> None:
        """Publish every staged module, one id at a time."""
        async with self._lock:
            for module_id in list(self.staged_modules):
                after = self.staged_modules.get(module_id)
                if after is None:
                    continue
                await self._commit(module_id, after)

    async def _commit(self, module_id: str, after: Module) -> None:
        before = self.modules.get(module_id)

        # The old listeners must be gone before the new ones go live.
        if before is not None and before.attached:
            before.detach_all()
        if after.attached:
            # Left attached by an earlier commit attempt that failed remotely.
            after.detach_all()
        after.attach_all()

        diff = command_diff(before, after)
        await asyncio.gather(*(self.registry.delete(cid.name, cid.guild) for cid in diff.remove))
        await asyncio.gather(*(self.registry.upsert(rec.payload, rec.guild) for rec in after.commands()))

        self.modules[module_id] = after
        if self.staged_modules.get(module_id) is after:
            del self.staged_modules[module_id]
        logger.info(
            "Committed module %r (%d removed, %d upserted)",
            module_id,
            len(diff.remove),
            len(diff.upsert),
        )

        # Reads self.modules, so it has to run after the swap above.
        missing = self.gateway.missing(after.intents)
        if missing.value:
            logger.info("Module %r needs intents %s; reconnecting", module_id, missing.value)
            await self._reset_connection()

    async def remove_module(self, module: Module) -> None:
        """Unpublish *module*: detach it, delete its remote commands and forget it."""
        async with self._lock:
            active = self.modules.get(module.id)
            if active is None:
                raise RegistrationConflict(f"Module {module.id!r} is not registered")
            if active is not module:
                raise RegistrationConflict(
                    f"The registered module with ID {module.id!r} is a different "
                    "instance from the given module"
                )

            if module.attached:
                module.detach_all()
            await asyncio.gather(*(self.registry.delete(rec.name, rec.guild) for rec in module.commands()))
            del self.modules[module.id]
            # Shrinking takes effect at the next reconnect; extra intents are harmless.
            self.gateway.intents = self._required_intents()
            logger.info("Removed module %r", module.id)

    async def start(self) -> None:
        await self.gateway.start()

    async def close(self) -> None:
        await self.gateway.destroy()

    def _required_intents(self) -> discord.Intents:
        return intents_union(self.base_intents, *(m.intents for m in self.modules.values()))

    async def _reset_connection(self) -> None:
        logged_in = self.gateway.logged_in
        self.gateway.remove_all_listeners()
        await self.gateway.destroy()

        self.gateway.add(self._required_intents())
        self.gateway.reopen()
        self.gateway.once("ready", self._on_ready)
        for module in self.modules.values():
            module.attach_all()

        if logged_in:
            await self.gateway.start()

    def _on_ready(self) -> None:
        logger.info("ModuleHost client is ready!")
