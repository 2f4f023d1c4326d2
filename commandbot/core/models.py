"""Domain models for commandbot."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, FrozenSet, List, NamedTuple, Optional, Pattern, Union

HandlerResult = Union[Optional[str], Awaitable[Optional[str]]]
CommandHandler = Callable[[str, str], HandlerResult]


class Presence(str, Enum):
    ONLINE = "online"
    CHAT = "chat"
    AWAY = "away"
    DND = "dnd"
    XA = "xa"


class MessageKind(str, Enum):
    CHAT = "chat"
    GROUPCHAT = "groupchat"
    OTHER = "other"


@dataclass
class BotIdentity:
    account_id: str
    name: str
    masters: FrozenSet[str]
    is_public: bool = False
    presence: Optional[Presence] = None
    status: Optional[str] = None
    priority: Optional[int] = None


@dataclass(frozen=True)
class IncomingMessage:
    sender: str
    kind: MessageKind
    body: str


class CommandAlias(NamedTuple):
    syntax: str
    pattern: Union[str, Pattern[str]]


@dataclass
class CommandDescriptor:
    """What help output knows about a command."""

    name: str
    syntaxes: List[str]
    description: str
    is_public: bool = False
    is_alias: bool = False


@dataclass(frozen=True)
class CommandSpec:
    """A single trigger pattern bound to a handler."""

    name: str
    pattern: Pattern[str]
    handler: CommandHandler = field(compare=False)
    is_public: bool = False

    def matches(self, text: str) -> bool:
        return self.pattern.fullmatch(text) is not None


RESOURCE_SUFFIX = re.compile(r"/.*$")


def bare_identity(sender: str) -> str:
    """Strip a transport resource suffix (``user@host/phone`` -> ``user@host``)."""
    return RESOURCE_SUFFIX.sub("", sender.strip())
