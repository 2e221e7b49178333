"""
Remote application-command registry.

Commands are addressed by ``(name, guild)``; ``guild=None`` means a global
command. Discord's REST API addresses commands by snowflake, so deletions
look the name up first.

The identity carries no command type. Deleting a name removes every command
with that name in the scope, so a user menu and a message menu sharing a
label in one scope are deleted together.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from modhost.core.exceptions import ModuleHostError
from modhost.core.gateway import Gateway

logger = logging.getLogger(__name__)

__all__ = ["CommandRegistry", "DiscordCommandRegistry"]


class CommandRegistry(Protocol):
    async def delete(self, name: str, guild: int | None = None) -> None: ...

    async def upsert(self, payload: dict[str, Any], guild: int | None = None) -> None: ...


class DiscordCommandRegistry:
    """``CommandRegistry`` backed by the gateway client's HTTP session."""

    def __init__(self, gateway: Gateway, application_id: int | None = None) -> None:
        self.gateway = gateway
        self._application_id = application_id

    async def _application(self) -> int:
        await self.gateway.ensure_http()
        app_id = self._application_id or self.gateway.client.application_id
        if app_id is None:
            raise ModuleHostError("No application id configured and none reported at login")
        return app_id

    async def delete(self, name: str, guild: int | None = None) -> None:
        """Delete every remote command called *name* in the scope, whatever its type."""
        app_id = await self._application()
        http = self.gateway.client.http
        if guild is None:
            existing = await http.get_global_commands(app_id)
        else:
            existing = await http.get_guild_commands(app_id, guild)

        matches = [cmd for cmd in existing if cmd["name"] == name]
        if not matches:
            logger.debug("No remote command %r in scope %s to delete", name, guild or "global")
        for cmd in matches:
            if guild is None:
                await http.delete_global_command(app_id, cmd["id"])
            else:
                await http.delete_guild_command(app_id, guild, cmd["id"])
            logger.info("Deleted command %r (%s)", name, guild or "global")

    async def upsert(self, payload: dict[str, Any], guild: int | None = None) -> None:
        app_id = await self._application()
        http = self.gateway.client.http
        if guild is None:
            await http.upsert_global_command(app_id, payload)
        else:
            await http.upsert_guild_command(app_id, guild, payload)
        logger.info("Upserted command %r (%s)", payload.get("name"), guild or "global")
