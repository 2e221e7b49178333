"""Helpers for responding to Discord interactions.

An interaction accepts exactly one initial response; anything after that has
to go through the follow-up webhook. These helpers pick the right channel so
callers do not have to track whether a reply was already sent.

Usage:
    >>> from modhost.utils.interactions import safe_send
"""

from __future__ import annotations

import inspect
import logging
from typing import Any

import discord

__all__ = ["response_done", "safe_send"]

logger = logging.getLogger(__name__)


async def response_done(interaction: discord.Interaction) -> bool:
    """Return whether the initial response of *interaction* was already used.

    Copes with test doubles whose ``is_done`` is a coroutine or a plain flag.
    """
    attr = interaction.response.is_done
    if callable(attr):
        maybe = attr()
        if inspect.isawaitable(maybe):
            maybe = await maybe
        return bool(maybe)
    return bool(attr)


async def safe_send(
    interaction: discord.Interaction,
    content: str | None = None,
    **kwargs: Any,
) -> None:
    """Send *content* as the interaction response, or as a follow-up once answered.

    ``discord.HTTPException`` is propagated; callers decide whether a failed
    reply matters.
    """
    if not await response_done(interaction):
        await interaction.response.send_message(content, **kwargs)
        return
    await interaction.followup.send(content, **kwargs)
