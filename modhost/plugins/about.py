"""/about – shows which modules the bot is currently running."""

from __future__ import annotations

import logging

import discord

from modhost import __version__
from modhost.core.host import ModuleHost
from modhost.core.settings import Settings

logger = logging.getLogger(__name__)


def build_embed(host: ModuleHost) -> discord.Embed:
    embed = discord.Embed(title="About this bot", colour=discord.Colour.blurple())
    names = sorted(host.modules)
    embed.add_field(
        name=f"Active modules ({len(names)})",
        value="\n".join(f"• `{name}`" for name in names) or "none",
        inline=False,
    )
    embed.set_footer(text=f"modhost {__version__}")
    return embed


def setup(host: ModuleHost, settings: Settings) -> None:
    mod = host.begin_module("about", ["guilds"])

    def on_ready() -> None:
        logger.info("%s is LIVE with %d module(s)", mod.client.user, len(host.modules))

    mod.when("ready", on_ready)
    mod.register_slash_command("about", "Show what this bot is running", lambda interaction: build_embed(host))
