"""
tests/conftest.py – test harness bootstrap.
Provides a gateway wired to fake clients, a recording command registry and a host.
"""

import discord
import pytest

from modhost.core.gateway import Gateway, intents_from_names
from modhost.core.host import ModuleHost
from modhost.core.logger_setup import setup_logging
from modhost.core.settings import Settings
from tests.fakes import FakeClient, FakeCommandRegistry

# ------------------------------------------------------------------+
# Global logging setup                                              +
# ------------------------------------------------------------------+
setup_logging(level="WARNING")


@pytest.fixture
def settings() -> Settings:
    return Settings(discord_token="fake_token", owner_id=987654321, _env_file=None)


@pytest.fixture
def base_intents() -> discord.Intents:
    return intents_from_names(["guilds"])


@pytest.fixture
def gateway(base_intents: discord.Intents) -> Gateway:
    return Gateway("fake_token", base_intents, client_factory=FakeClient)


@pytest.fixture
def registry() -> FakeCommandRegistry:
    return FakeCommandRegistry()


@pytest.fixture
def host(gateway: Gateway, registry: FakeCommandRegistry, base_intents: discord.Intents) -> ModuleHost:
    return ModuleHost(gateway, registry, base_intents)
