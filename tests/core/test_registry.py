"""DiscordCommandRegistry against a fake HTTP client."""

import asyncio

import discord
import pytest

from modhost.core.exceptions import ModuleHostError
from modhost.core.gateway import Gateway
from modhost.core.host import ModuleHost
from modhost.core.registry import DiscordCommandRegistry
from tests.fakes import GUILD_ID


@pytest.fixture
def http(gateway: Gateway):
    return gateway.client.http


@pytest.mark.asyncio
async def test_upsert_global_and_guild(gateway: Gateway, http) -> None:
    registry = DiscordCommandRegistry(gateway, application_id=99)

    await registry.upsert({"name": "quote"})
    await registry.upsert({"name": "imitate"}, GUILD_ID)

    http.upsert_global_command.assert_awaited_once_with(99, {"name": "quote"})
    http.upsert_guild_command.assert_awaited_once_with(99, GUILD_ID, {"name": "imitate"})
    gateway.client.login.assert_awaited_once()


@pytest.mark.asyncio
async def test_delete_resolves_the_command_id_by_name(gateway: Gateway, http) -> None:
    http.global_commands = [{"id": "1", "name": "quote"}, {"id": "2", "name": "Praise"}]
    http.guild_commands = {GUILD_ID: [{"id": "3", "name": "imitate"}]}
    registry = DiscordCommandRegistry(gateway)

    await registry.delete("Praise")
    await registry.delete("imitate", GUILD_ID)

    # Falls back to the application id reported at login.
    http.delete_global_command.assert_awaited_once_with(4242, "2")
    http.delete_guild_command.assert_awaited_once_with(4242, GUILD_ID, "3")


@pytest.mark.asyncio
async def test_delete_of_unknown_name_is_a_noop(gateway: Gateway, http) -> None:
    http.global_commands = [{"id": "1", "name": "quote"}]
    registry = DiscordCommandRegistry(gateway)

    await registry.delete("imitate")

    http.delete_global_command.assert_not_awaited()


@pytest.mark.asyncio
async def test_missing_application_id(gateway: Gateway) -> None:
    gateway.client.application_id = None
    registry = DiscordCommandRegistry(gateway)

    with pytest.raises(ModuleHostError):
        await registry.upsert({"name": "quote"})


@pytest.mark.asyncio
async def test_commit_before_start_logs_in_once(gateway: Gateway, http) -> None:
    async def slow_login(token: str) -> None:
        await asyncio.sleep(0.01)

    gateway.client.login.side_effect = slow_login
    host = ModuleHost(gateway, DiscordCommandRegistry(gateway), discord.Intents.none())
    module = host.begin_module("quotes")
    for name in ("quote", "imitate", "praise"):
        module.register_slash_command(name, "", lambda i: None)

    await host.commit_staged()

    gateway.client.login.assert_awaited_once_with("fake_token")
    assert http.upsert_global_command.await_count == 3


@pytest.mark.asyncio
async def test_delete_matches_on_name_across_command_types(gateway: Gateway, http) -> None:
    http.global_commands = [
        {"id": "1", "name": "Quote", "type": discord.AppCommandType.user.value},
        {"id": "2", "name": "Quote", "type": discord.AppCommandType.message.value},
    ]
    registry = DiscordCommandRegistry(gateway)

    await registry.delete("Quote")

    deleted = [call.args[1] for call in http.delete_global_command.await_args_list]
    assert deleted == ["1", "2"]
