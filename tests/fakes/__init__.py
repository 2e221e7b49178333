"""
Test Fakes Module
=================

Fake implementations of the Discord client, HTTP session and interactions,
so the host can be exercised without a network connection.
"""

from .fake_discord import (
    GUILD_ID,
    FakeClient,
    FakeCommandRegistry,
    FakeFollowup,
    FakeHTTP,
    FakeInteraction,
    FakeInteractionResponse,
    FakeUser,
)

__all__ = [
    "GUILD_ID",
    "FakeClient",
    "FakeCommandRegistry",
    "FakeFollowup",
    "FakeHTTP",
    "FakeInteraction",
    "FakeInteractionResponse",
    "FakeUser",
]
