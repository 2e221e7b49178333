from dependency_injector import containers, providers

from modhost.core.gateway import Gateway, intents_from_names
from modhost.core.host import ModuleHost
from modhost.core.registry import DiscordCommandRegistry
from modhost.core.settings import Settings


class Container(containers.DeclarativeContainer):
    """Dependency Injection Container for the module host.

    Everything is a singleton: one process hosts one connection, one command
    registry and one host. Tests override ``config`` (or any other provider)
    before resolving ``host``.
    """

    # Settings are read from the environment / .env when first resolved
    config = providers.Singleton(Settings)

    base_intents = providers.Singleton(intents_from_names, config.provided.base_intents)

    gateway = providers.Singleton(
        Gateway,
        token=config.provided.discord_token,
        intents=base_intents,
    )

    registry = providers.Singleton(
        DiscordCommandRegistry,
        gateway=gateway,
        application_id=config.provided.application_id,
    )

    host = providers.Singleton(
        ModuleHost,
        gateway=gateway,
        registry=registry,
        base_intents=base_intents,
    )
