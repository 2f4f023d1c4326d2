"""Core domain logic for commandbot."""

from .bot import Bot
from .config import Config, load_config
from .errors import (
    CommandBotError,
    ConfigError,
    PatternError,
    RegistrationError,
    TransportError,
)
from .intake import IntakeLoop
from .models import (
    BotIdentity,
    CommandAlias,
    CommandDescriptor,
    CommandSpec,
    IncomingMessage,
    MessageKind,
    Presence,
    bare_identity,
)

__all__ = [
    "Bot",
    "Config",
    "load_config",
    "IntakeLoop",
    "BotIdentity",
    "CommandAlias",
    "CommandDescriptor",
    "CommandSpec",
    "IncomingMessage",
    "MessageKind",
    "Presence",
    "bare_identity",
    "CommandBotError",
    "ConfigError",
    "PatternError",
    "RegistrationError",
    "TransportError",
]
