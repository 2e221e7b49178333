"""/reload – owner-only hot reload of every feature module."""

from __future__ import annotations

import discord

from modhost.core.exceptions import CheckRejection
from modhost.core.host import ModuleHost
from modhost.core.loader import reload_features
from modhost.core.module import CommandConfig
from modhost.core.settings import Settings


def owner_only(settings: Settings):
    def check(interaction: discord.Interaction) -> int:
        if settings.owner_id is None or interaction.user.id != settings.owner_id:
            raise CheckRejection("🚫 Only the bot owner can reload features.")
        return interaction.user.id

    return check


def setup(host: ModuleHost, settings: Settings) -> None:
    mod = host.begin_module("admin")

    async def reload(interaction: discord.Interaction, owner_id: int) -> str:
        # Publishing can outlast the 3 s response window.
        await interaction.response.defer(ephemeral=True, thinking=True)
        loaded = await reload_features(host, settings)
        return f"♻️ Reloaded {len(loaded)} feature(s); {len(host.modules)} module(s) active."

    mod.register_slash_command(
        "reload",
        "Reload and republish every feature module",
        CommandConfig(
            run=reload,
            check=owner_only(settings),
            build=lambda payload: {**payload, "dm_permission": False},
        ),
    )
