"""Command registry, authorization, dispatch and help."""

from .dispatcher import CommandDispatcher
from .help import HelpSynthesizer
from .policy import AuthorizationPolicy
from .registry import CommandRegistry

__all__ = [
    "AuthorizationPolicy",
    "CommandDispatcher",
    "CommandRegistry",
    "HelpSynthesizer",
]
