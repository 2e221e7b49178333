"""Compare the remote commands owned by two versions of a module."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, NamedTuple, Protocol

__all__ = ["CommandID", "CommandDiff", "command_diff"]


class CommandID(NamedTuple):
    """Identity of a remote command: its name and guild (``None`` = global)."""

    name: str
    guild: int | None = None


class CommandDiff(NamedTuple):
    remove: list[CommandID]
    upsert: list[CommandID]


class CommandSnapshot(Protocol):
    slash_commands: Mapping[str, Any]
    menu_commands: Mapping[str, Any]


def _identities(snapshot: CommandSnapshot | None) -> list[CommandID]:
    if snapshot is None:
        return []
    records: Iterable[Any] = [
        *snapshot.slash_commands.values(),
        *snapshot.menu_commands.values(),
    ]
    return [CommandID(record.name, record.guild) for record in records]


def command_diff(before: CommandSnapshot | None, after: CommandSnapshot) -> CommandDiff:
    """Return the commands to delete and the commands to (re-)submit.

    ``remove`` holds every identity of *before* that *after* no longer has.
    ``upsert`` is every identity of *after*, unchanged ones included, so the
    remote registry is rewritten with the full new set on each publish.
    A missing *before* behaves like a module without commands.
    """
    old = _identities(before)
    new = _identities(after)
    return CommandDiff(remove=[cid for cid in old if cid not in new], upsert=new)
