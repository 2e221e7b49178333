"""Listener table, capability queries and lifecycle of modhost.core.gateway.Gateway."""

import asyncio

import discord
import pytest

from modhost.core.gateway import Gateway, GatewayClient, intents_from_names, intents_union


def test_intents_from_names_and_union() -> None:
    a = intents_from_names(["guilds"])
    b = intents_from_names(["message_content", "guild_messages"])

    merged = intents_union(a, b)

    assert merged.guilds and merged.message_content and merged.guild_messages
    assert not merged.members
    assert intents_from_names([]).value == 0


def test_intents_from_names_rejects_unknown() -> None:
    with pytest.raises(ValueError):
        intents_from_names(["telepathy"])


def test_missing_and_add(gateway: Gateway) -> None:
    required = intents_from_names(["guilds", "members"])

    missing = gateway.missing(required)
    assert missing.members and not missing.guilds

    gateway.add(required)
    assert gateway.missing(required).value == 0


def test_off_removes_a_single_subscription(gateway: Gateway) -> None:
    def cb(*args: object) -> None: ...

    gateway.on("message", cb)
    gateway.on("message", cb)
    gateway.off("message", cb)
    assert gateway.listener_count("message") == 1

    gateway.off("message", cb)
    gateway.off("message", cb)
    assert gateway.listener_count("message") == 0


@pytest.mark.asyncio
async def test_forward_runs_sync_and_async_listeners(gateway: Gateway) -> None:
    seen: list[str] = []

    def sync_cb(message: str) -> None:
        seen.append(f"sync:{message}")

    async def async_cb(message: str) -> None:
        seen.append(f"async:{message}")

    gateway.on("message", sync_cb)
    gateway.on("message", async_cb)
    gateway.client.dispatch("message", "hi")
    await gateway.client.drain()

    assert sorted(seen) == ["async:hi", "sync:hi"]


@pytest.mark.asyncio
async def test_once_listener_fires_once(gateway: Gateway) -> None:
    seen: list[str] = []
    gateway.once("ready", lambda: seen.append("ready"))

    gateway.client.dispatch("ready")
    gateway.client.dispatch("ready")
    await gateway.client.drain()

    assert seen == ["ready"]
    assert gateway.listener_count("ready") == 0


@pytest.mark.asyncio
async def test_once_listener_leaves_persistent_twin_subscribed(gateway: Gateway) -> None:
    seen: list[str] = []

    def cb(message: str) -> None:
        seen.append(message)

    gateway.on("message", cb)
    gateway.once("message", cb)

    gateway.client.dispatch("message", "first")
    gateway.client.dispatch("message", "second")
    await gateway.client.drain()

    assert seen.count("first") == 2
    assert seen.count("second") == 1
    assert gateway.listener_count("message") == 1


@pytest.mark.asyncio
async def test_remove_all_listeners(gateway: Gateway) -> None:
    gateway.on("message", lambda m: None)
    gateway.once("ready", lambda: None)

    gateway.remove_all_listeners()

    assert gateway.listener_count("message") == gateway.listener_count("ready") == 0


@pytest.mark.asyncio
async def test_ensure_http_logs_in_once(gateway: Gateway) -> None:
    await gateway.ensure_http()
    await gateway.ensure_http()

    gateway.client.login.assert_awaited_once_with("fake_token")
    assert not gateway.logged_in


@pytest.mark.asyncio
async def test_concurrent_ensure_http_shares_one_login(gateway: Gateway) -> None:
    async def slow_login(token: str) -> None:
        await asyncio.sleep(0.01)

    gateway.client.login.side_effect = slow_login

    await asyncio.gather(*(gateway.ensure_http() for _ in range(3)))

    gateway.client.login.assert_awaited_once_with("fake_token")


@pytest.mark.asyncio
async def test_start_destroy_reopen(gateway: Gateway) -> None:
    first = gateway.client
    await gateway.start()
    assert gateway.logged_in

    await gateway.destroy()
    first.close.assert_awaited_once()
    assert not gateway.logged_in

    gateway.intents = intents_from_names(["guilds", "members"])
    gateway.reopen()
    assert gateway.client is not first
    assert gateway.client.intents.members

    # A fresh client needs its own login.
    await gateway.ensure_http()
    gateway.client.login.assert_awaited_once_with("fake_token")


def test_gateway_client_uses_gateway_intents() -> None:
    gateway = Gateway("fake_token", intents_from_names(["guilds", "message_content"]))

    assert isinstance(gateway.client, GatewayClient)
    assert gateway.client.intents.message_content
    assert gateway.client.gateway is gateway
    assert isinstance(gateway.client, discord.Client)
