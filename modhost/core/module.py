"""
A module is one independently published feature: its event handlers and the
slash / context-menu commands it registers with Discord.

Modules never own the connection. They store their registrations and
(un)subscribe them on the shared :class:`~modhost.core.gateway.Gateway` when
the host attaches or detaches them.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Awaitable, Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Union

import discord
from discord import app_commands

from modhost.core.gateway import Gateway
from modhost.utils.async_helpers import maybe_await
from modhost.utils.interactions import safe_send

logger = logging.getLogger(__name__)

__all__ = ["CommandConfig", "CommandRecord", "EventHandler", "HandlerID", "Module"]

INTERACTION_EVENT = "interaction"
ERROR_NOTICE = "❗ There was an error while handling `{name}`. It has been logged."

Guard = Callable[[discord.Interaction], Awaitable[None]]
RunStep = Callable[..., Any]


@dataclass(frozen=True)
class HandlerID:
    """Token identifying one registration of the module that issued it."""

    id: str
    owner: Module | None = field(default=None, compare=False, repr=False)


@dataclass
class CommandConfig:
    """How a command is scoped, built, validated and fulfilled.

    ``build`` receives the command's JSON payload and may edit it in place or
    return a replacement. ``check`` raises
    :class:`~modhost.core.exceptions.CheckRejection` to refuse an
    interaction; whatever it returns is handed to ``run`` as a second
    argument. ``run`` may return a string (sent as an ephemeral reply), a
    mapping of reply keyword arguments, an embed, or ``None``.
    """

    run: RunStep
    guild: int | None = None
    build: Callable[[dict[str, Any]], dict[str, Any] | None] | None = None
    check: Callable[[discord.Interaction], Any] | None = None

    def __post_init__(self) -> None:
        if self.guild is not None:
            self.guild = int(self.guild)

    @classmethod
    def coerce(cls, value: ConfigOrRun) -> CommandConfig:
        if isinstance(value, CommandConfig):
            return value
        if isinstance(value, Mapping):
            return cls(**value)
        if callable(value):
            return cls(run=value)
        raise TypeError(f"Expected a run callable or command config, got {type(value).__name__}")

    def payload(self, seed: dict[str, Any]) -> dict[str, Any]:
        if self.build is None:
            return seed
        built = self.build(seed)
        return seed if built is None else built


ConfigOrRun = Union[CommandConfig, Mapping[str, Any], RunStep]


@dataclass
class EventHandler:
    events: tuple[str, ...]
    once: bool
    callback: Callable[..., Any]


@dataclass
class CommandRecord:
    name: str
    guild: int | None
    payload: dict[str, Any]
    guard: Guard


class Module:
    def __init__(self, id: str, intents: discord.Intents, gateway: Gateway) -> None:
        self.id = id
        self.intents = intents
        self.gateway = gateway
        self.event_handlers: dict[str, EventHandler] = {}
        self.slash_commands: dict[str, CommandRecord] = {}
        self.menu_commands: dict[str, CommandRecord] = {}
        self.attached = False
        self._ids = itertools.count(1)

    def __repr__(self) -> str:
        return f"<Module {self.id!r} attached={self.attached}>"

    @property
    def client(self) -> discord.Client:
        """The client currently behind the shared connection."""
        return self.gateway.client

    def commands(self) -> Iterator[CommandRecord]:
        yield from self.slash_commands.values()
        yield from self.menu_commands.values()

    # ------------------------------------------------------------------+
    # Event handlers                                                    |
    # ------------------------------------------------------------------+

    def register_event(
        self, events: str | Iterable[str], callback: Callable[..., Any], once: bool = False
    ) -> HandlerID:
        """Register *callback* for one or more gateway events.

        >>> mod.register_event("message", on_message)
        >>> mod.register_event(["message_edit", "message_delete"], sneaky)
        """
        names = (events,) if isinstance(events, str) else tuple(events)
        handler_id = self._generate_id("once" if once else "when")
        handler = EventHandler(names, once, callback)
        self.event_handlers[handler_id] = handler
        if self.attached:
            self._subscribe(handler)
        return HandlerID(handler_id, self)

    def when(self, events: str | Iterable[str], callback: Callable[..., Any]) -> HandlerID:
        return self.register_event(events, callback)

    def once(self, events: str | Iterable[str], callback: Callable[..., Any]) -> HandlerID:
        return self.register_event(events, callback, once=True)

    # ------------------------------------------------------------------+
    # Commands                                                          |
    # ------------------------------------------------------------------+

    def register_slash_command(self, name: str, description: str, config: ConfigOrRun) -> HandlerID:
        """Create ``/name``. *config* is a run function or a :class:`CommandConfig`."""
        cfg = CommandConfig.coerce(config)
        reg_id = _scoped(f"{self.id}: /{name}", cfg.guild)
        payload = cfg.payload(
            {
                "name": name,
                "description": description,
                "type": discord.AppCommandType.chat_input.value,
            }
        )
        guard = self._chat_input_guard(name, reg_id, cfg)
        self._store(self.slash_commands, reg_id, CommandRecord(name, cfg.guild, payload, guard))
        return HandlerID(reg_id, self)

    def register_menu_command(
        self, label: str, target: discord.AppCommandType, config: ConfigOrRun
    ) -> HandlerID:
        """Create a context-menu item shown on users or on messages."""
        if target is discord.AppCommandType.user:
            make_guard = self._user_menu_guard
        elif target is discord.AppCommandType.message:
            make_guard = self._message_menu_guard
        else:
            raise ValueError(f"Context menus target users or messages, not {target!r}")

        cfg = CommandConfig.coerce(config)
        reg_id = _scoped(f"{self.id}: {target.name} menu {label!r}", cfg.guild)
        payload = cfg.payload({"name": label, "type": target.value})
        guard = make_guard(label, reg_id, cfg)
        self._store(self.menu_commands, reg_id, CommandRecord(label, cfg.guild, payload, guard))
        return HandlerID(reg_id, self)

    def _store(self, registry: dict[str, CommandRecord], reg_id: str, record: CommandRecord) -> None:
        previous = registry.get(reg_id)
        if previous is not None and self.attached:
            self.gateway.off(INTERACTION_EVENT, previous.guard)
        registry[reg_id] = record
        if self.attached:
            self.gateway.on(INTERACTION_EVENT, record.guard)

    # ------------------------------------------------------------------+
    # Dispatch guards                                                   |
    # ------------------------------------------------------------------+

    def _chat_input_guard(self, name: str, reg_id: str, config: CommandConfig) -> Guard:
        async def guard(interaction: discord.Interaction) -> None:
            if _invokes(interaction, discord.AppCommandType.chat_input, name):
                await self._check_then_run(interaction, name, reg_id, config)

        return guard

    def _user_menu_guard(self, label: str, reg_id: str, config: CommandConfig) -> Guard:
        async def guard(interaction: discord.Interaction) -> None:
            if _invokes(interaction, discord.AppCommandType.user, label):
                await self._check_then_run(interaction, label, reg_id, config)

        return guard

    def _message_menu_guard(self, label: str, reg_id: str, config: CommandConfig) -> Guard:
        async def guard(interaction: discord.Interaction) -> None:
            if _invokes(interaction, discord.AppCommandType.message, label):
                await self._check_then_run(interaction, label, reg_id, config)

        return guard

    async def _check_then_run(
        self, interaction: discord.Interaction, name: str, reg_id: str, config: CommandConfig
    ) -> None:
        if config.guild is not None and interaction.guild_id != config.guild:
            return
        try:
            if config.check is None:
                result = await maybe_await(config.run, interaction)
            else:
                try:
                    resolved = await maybe_await(config.check, interaction)
                except app_commands.CheckFailure as rejection:
                    await safe_send(interaction, str(rejection) or "🚫 You can't do that here.", ephemeral=True)
                    return
                result = await maybe_await(config.run, interaction, resolved)
            await _reply_with(interaction, result)
        except Exception:
            logger.exception("%s failed", reg_id)
            try:
                await safe_send(interaction, ERROR_NOTICE.format(name=name), ephemeral=True)
            except Exception:
                logger.exception("%s: could not send the error notice", reg_id)

    # ------------------------------------------------------------------+
    # Connection bookkeeping                                            |
    # ------------------------------------------------------------------+

    def remove_registration(self, token: HandlerID) -> bool:
        """Unregister an event handler or command; False if *token* is unknown here."""
        if token.owner is not self:
            return False
        handler = self.event_handlers.pop(token.id, None)
        if handler is not None:
            if self.attached:
                self._unsubscribe(handler)
            return True
        record = self.slash_commands.pop(token.id, None) or self.menu_commands.pop(token.id, None)
        if record is not None:
            if self.attached:
                self.gateway.off(INTERACTION_EVENT, record.guard)
            return True
        return False

    def attach_all(self) -> None:
        for handler in self.event_handlers.values():
            self._subscribe(handler)
        for record in self.commands():
            self.gateway.on(INTERACTION_EVENT, record.guard)
        self.attached = True

    def detach_all(self) -> None:
        for handler in self.event_handlers.values():
            self._unsubscribe(handler)
        for record in self.commands():
            self.gateway.off(INTERACTION_EVENT, record.guard)
        self.attached = False

    def _subscribe(self, handler: EventHandler) -> None:
        for event in handler.events:
            if handler.once:
                self.gateway.once(event, handler.callback)
            else:
                self.gateway.on(event, handler.callback)

    def _unsubscribe(self, handler: EventHandler) -> None:
        for event in handler.events:
            self.gateway.off(event, handler.callback)

    def _generate_id(self, source: str) -> str:
        return f"{self.id}: {source} #{next(self._ids)}"


def _scoped(reg_id: str, guild: int | None) -> str:
    return reg_id if guild is None else f"{reg_id} @ {guild}"


def _invokes(interaction: discord.Interaction, kind: discord.AppCommandType, name: str) -> bool:
    if interaction.type is not discord.InteractionType.application_command:
        return False
    data = interaction.data or {}
    return data.get("type") == kind.value and data.get("name") == name


async def _reply_with(interaction: discord.Interaction, result: Any) -> None:
    if result is None:
        return
    if isinstance(result, str):
        if not result:
            return
        await safe_send(interaction, result, ephemeral=True)
    elif isinstance(result, discord.Embed):
        await safe_send(interaction, embed=result, ephemeral=True)
    elif isinstance(result, Mapping):
        await safe_send(interaction, **result)
    else:
        raise TypeError(f"Unsupported command result: {type(result).__name__}")
