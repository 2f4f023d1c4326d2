"""Authorization rules for invoking and listing commands."""

from __future__ import annotations

from dataclasses import dataclass
from typing import AbstractSet, FrozenSet


def passes_bot_gate(sender: str, bot_is_public: bool, masters: AbstractSet[str]) -> bool:
    return sender in masters or bot_is_public


def can_invoke(
    sender: str,
    bot_is_public: bool,
    command_is_public: bool,
    masters: AbstractSet[str],
) -> bool:
    return sender in masters or (bot_is_public and command_is_public)


def can_list_in_help(sender: str, command_is_public: bool, masters: AbstractSet[str]) -> bool:
    """Command-level half of ``can_invoke``.

    Help is only reachable through dispatch after the bot gate passed, so for
    any sender that can ask for help this agrees with ``can_invoke``.
    """
    return sender in masters or command_is_public


@dataclass(frozen=True)
class AuthorizationPolicy:
    masters: FrozenSet[str]
    bot_is_public: bool = False

    def is_master(self, sender: str) -> bool:
        return sender in self.masters

    def passes_bot_gate(self, sender: str) -> bool:
        return passes_bot_gate(sender, self.bot_is_public, self.masters)

    def can_invoke(self, sender: str, command_is_public: bool) -> bool:
        return can_invoke(sender, self.bot_is_public, command_is_public, self.masters)

    def can_list_in_help(self, sender: str, command_is_public: bool) -> bool:
        return can_list_in_help(sender, command_is_public, self.masters)
