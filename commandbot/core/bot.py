"""Host-facing bot: owns the registry, dispatcher and intake loop."""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional, Sequence, Tuple, Union

from ..chat_adapters.i_chat_adapter import IChatAdapter
from .commands.dispatcher import CommandDispatcher
from .commands.help import HelpSynthesizer
from .commands.policy import AuthorizationPolicy
from .commands.registry import CommandRegistry, PatternLike
from .config import Config
from .intake import IntakeLoop
from .models import BotIdentity, CommandAlias, CommandDescriptor, CommandHandler, Presence, bare_identity

LOGGER = logging.getLogger(__name__)

AliasLike = Union[CommandAlias, Tuple[str, PatternLike]]
Recipients = Union[str, Iterable[str]]


class Bot:
    """A chat bot that answers pattern-based commands from its masters.

    Every bot knows ``help [<command>]`` (alias ``?``) from the start; further
    commands are added with :meth:`register_command` or the :meth:`command`
    decorator before :meth:`connect` is called.
    """

    def __init__(self, config: Config, transport: IChatAdapter) -> None:
        config.validate()
        self._config = config
        self._transport = transport
        self._identity = BotIdentity(
            account_id=config.account_id,
            name=config.display_name,
            masters=frozenset(bare_identity(master) for master in config.masters),
            is_public=config.is_public,
            presence=config.presence,
            status=config.status,
            priority=config.priority,
        )
        self._registry = CommandRegistry()
        self._policy = AuthorizationPolicy(masters=self._identity.masters, bot_is_public=config.is_public)
        self._help = HelpSynthesizer(self._registry, self._policy)
        self._dispatcher = CommandDispatcher(
            self._registry,
            self._policy,
            handler_timeout=config.handler_timeout,
        )
        self._intake = IntakeLoop(transport, self._dispatcher, poll_interval=config.poll_interval)

        self._registry.register(
            "help [<command>]",
            "Display help for the given command, or all commands",
            r"help(\s+.+)?",
            self._handle_help,
            is_public=True,
            aliases=[CommandAlias("? [<command>]", r"\?(\s+.+)?")],
        )

    @property
    def name(self) -> str:
        return self._identity.name

    @property
    def identity(self) -> BotIdentity:
        return self._identity

    @property
    def masters(self) -> Sequence[str]:
        return sorted(self._identity.masters)

    @property
    def registry(self) -> CommandRegistry:
        return self._registry

    @property
    def dispatcher(self) -> CommandDispatcher:
        return self._dispatcher

    @property
    def transport(self) -> IChatAdapter:
        return self._transport

    def is_master(self, sender: str) -> bool:
        return self._policy.is_master(sender)

    def register_command(
        self,
        syntax: str,
        description: str,
        pattern: PatternLike,
        handler: CommandHandler,
        *,
        is_public: bool = False,
        aliases: Iterable[AliasLike] = (),
    ) -> CommandDescriptor:
        """Add a command to the bot's repertoire.

        ``handler`` is called as ``handler(sender, args)`` where ``args`` is the
        message text minus its first word. It may be a plain function or a
        coroutine function and returns the reply text or ``None``.
        """
        return self._registry.register(
            syntax,
            description,
            pattern,
            handler,
            is_public=is_public,
            aliases=aliases,
        )

    def command(
        self,
        syntax: str,
        description: str,
        pattern: PatternLike,
        *,
        is_public: bool = False,
        aliases: Iterable[AliasLike] = (),
    ) -> Callable[[CommandHandler], CommandHandler]:
        """Decorator form of :meth:`register_command`."""

        def decorator(handler: CommandHandler) -> CommandHandler:
            self.register_command(syntax, description, pattern, handler, is_public=is_public, aliases=aliases)
            return handler

        return decorator

    def help_message(self, sender: str, command_name: Optional[str] = None) -> str:
        return self._help.help(sender, command_name)

    async def dispatch(self, sender: str, text: str) -> Optional[str]:
        return await self._dispatcher.dispatch(sender, text)

    async def connect(self) -> None:
        """Connect, announce ourselves to the masters and serve until stopped."""
        self._registry.freeze()
        LOGGER.info("Connecting %s as %s", self.name, self._identity.account_id)
        await self._transport.connect(self._identity.account_id, self._config.credential)
        await self._send_presence()
        await self.deliver(self.masters, self._config.startup_message or f"{self.name} reporting for duty.")
        await self._intake.run()

    async def disconnect(self) -> None:
        """Say goodbye to the masters and close the transport session."""
        self._intake.stop()
        if not self._transport.is_connected():
            return
        LOGGER.info("Disconnecting %s", self.name)
        try:
            await self.deliver(self.masters, f"{self.name} disconnecting...")
        finally:
            await self._transport.disconnect()

    async def deliver(self, recipients: Recipients, text: str) -> None:
        """Send ``text`` to one recipient or to each of a list of recipients."""
        targets = [recipients] if isinstance(recipients, str) else list(recipients)
        for recipient in targets:
            await self._transport.send_message(recipient, text)

    async def set_presence(
        self,
        presence: Optional[Presence] = None,
        status: Optional[str] = None,
        priority: Optional[int] = None,
    ) -> None:
        self._identity.presence = presence
        self._identity.status = status
        self._identity.priority = priority
        await self._send_presence()

    async def set_availability(self, presence: Optional[Presence]) -> None:
        await self.set_presence(presence, self._identity.status, self._identity.priority)

    async def set_status(self, status: Optional[str]) -> None:
        await self.set_presence(self._identity.presence, status, self._identity.priority)

    async def set_priority(self, priority: Optional[int]) -> None:
        await self.set_presence(self._identity.presence, self._identity.status, priority)

    async def _send_presence(self) -> None:
        if not self._transport.is_connected():
            return
        await self._transport.set_presence(self._identity.presence, self._identity.status, self._identity.priority)

    def _handle_help(self, sender: str, args: str) -> str:
        return self.help_message(sender, args)
