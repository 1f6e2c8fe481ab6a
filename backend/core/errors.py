"""Startup failure taxonomy for the composition root.

Every error raised while assembling the application is a ``StartupError``.
None of them is recoverable locally: the process logs the cause and exits.
Messages never carry credentials.
"""


class StartupError(Exception):
    """Base class for failures while bootstrapping the application."""


class ConfigurationError(StartupError):
    """Raised when connection settings or the module graph are invalid."""


class ConnectivityError(StartupError):
    """Raised when the relational store cannot be reached."""


class SchemaSyncError(StartupError):
    """Raised when the live schema cannot be synchronized without destructive changes."""
