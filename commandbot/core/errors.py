"""Custom exception hierarchy for commandbot."""


class CommandBotError(Exception):
    """Base error type."""


class ConfigError(CommandBotError):
    pass


class RegistrationError(CommandBotError):
    """Raised when a command cannot be added to the registry."""
    pass


class PatternError(RegistrationError):
    """Raised when a trigger pattern fails to compile."""
    pass


class TransportError(CommandBotError):
    pass
