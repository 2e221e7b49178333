"""
Custom exceptions for the module host and the modules it publishes.
"""

from discord import app_commands


class ModuleHostError(Exception):
    """Base class for exceptions raised by the module host."""

    pass


class RegistrationConflict(ModuleHostError):
    """Raised when a module handle does not match the module the host has active."""

    pass


class CheckRejection(app_commands.CheckFailure):
    """Raised by a command's ``check`` step to reject an interaction.

    The message is shown to the invoking user as an ephemeral reply.
    """

    pass
