"""
Settings for the module host. Values come from the environment or a ``.env`` file.
"""

from typing import TYPE_CHECKING, Annotated, Any

import discord
from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode

DEFAULT_INTENTS: list[str] = ["guilds", "guild_messages", "message_content"]


class Settings(BaseSettings):
    if TYPE_CHECKING:  # pragma: no cover

        def __init__(self, **data: Any) -> None: ...

    discord_token: str

    # Application (client) id used for command registration; falls back to
    # the id reported by Discord at login.
    application_id: int | None = None

    # Bot owner Discord user ID – the only user allowed to /reload
    owner_id: int | None = None

    # Gateway intents the connection always subscribes to, on top of the
    # ones requested by active modules.
    base_intents: Annotated[list[str], NoDecode] = DEFAULT_INTENTS

    # Package scanned for feature modules exposing ``setup(host)``
    features_package: str = "modhost.plugins"

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @field_validator("discord_token")
    @classmethod
    def _must_exist(cls, v: str) -> str:
        placeholder = {"", "YOUR_TOKEN_HERE"}
        if v in placeholder:
            raise ValueError("DISCORD_TOKEN is required")
        return v

    @field_validator("base_intents", mode="before")
    @classmethod
    def _split_csv(cls, v: Any) -> Any:  # noqa: D401
        """
        Allow simple comma‑separated strings in .env:

            BASE_INTENTS=guilds,guild_messages
        """
        if isinstance(v, str):
            return [name.strip() for name in v.split(",") if name.strip()]
        return v

    @field_validator("base_intents")
    @classmethod
    def _known_intents(cls, v: list[str]) -> list[str]:
        unknown = [name for name in v if name not in discord.Intents.VALID_FLAGS]
        if unknown:
            raise ValueError(f"Unknown gateway intents: {', '.join(unknown)}")
        return v
