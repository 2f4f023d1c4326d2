"""Match incoming text against the registry and run the winning handler."""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Optional

from ..models import CommandSpec
from .policy import AuthorizationPolicy
from .registry import CommandRegistry

LOGGER = logging.getLogger(__name__)

UNKNOWN_COMMAND_TEMPLATE = "I don't understand '{text}'. Try saying 'help' to see what commands I understand."


def extract_arguments(text: str) -> str:
    """Return everything after the first whitespace-delimited token."""
    parts = text.strip().split(None, 1)
    if len(parts) < 2:
        return ""
    return parts[1]


class CommandDispatcher:
    """Routes one message at a time to the first matching, authorized command."""

    def __init__(
        self,
        registry: CommandRegistry,
        policy: AuthorizationPolicy,
        handler_timeout: Optional[float] = None,
    ) -> None:
        self._registry = registry
        self._policy = policy
        self._handler_timeout = handler_timeout

    @property
    def registry(self) -> CommandRegistry:
        return self._registry

    @property
    def policy(self) -> AuthorizationPolicy:
        return self._policy

    async def dispatch(self, sender: str, raw_text: str) -> Optional[str]:
        text = (raw_text or "").strip()

        if not self._policy.passes_bot_gate(sender):
            LOGGER.debug("Ignoring message from unauthorized sender %s", sender)
            return None

        for spec in self._registry.match_specs():
            if not self._policy.can_invoke(sender, spec.is_public):
                continue
            if not spec.matches(text):
                continue
            LOGGER.info("Executing command %s for %s", spec.name, sender)
            return await self._run_handler(spec, sender, extract_arguments(text))

        LOGGER.debug("No command matched %r from %s", text, sender)
        return UNKNOWN_COMMAND_TEMPLATE.format(text=text)

    async def _run_handler(self, spec: CommandSpec, sender: str, args: str) -> Optional[str]:
        call = asyncio.ensure_future(self._call(spec, sender, args))
        try:
            if self._handler_timeout is not None:
                result = await asyncio.wait_for(asyncio.shield(call), self._handler_timeout)
            else:
                result = await call
        except asyncio.TimeoutError:
            LOGGER.error("Command %s timed out after %ss; reply dropped", spec.name, self._handler_timeout)
            if inspect.iscoroutinefunction(spec.handler):
                call.cancel()
            # Worker threads cannot be interrupted; the next handler starts only after this one returns
            outcome = (await asyncio.gather(call, return_exceptions=True))[0]
            if isinstance(outcome, Exception):
                LOGGER.error("Command %s failed after timing out: %s", spec.name, outcome)
            return None
        except Exception:
            LOGGER.exception("Command %s failed for %s", spec.name, sender)
            return None

        if result is None:
            return None
        return str(result)

    async def _call(self, spec: CommandSpec, sender: str, args: str):
        if inspect.iscoroutinefunction(spec.handler):
            result = await spec.handler(sender, args)
        else:
            result = await asyncio.to_thread(spec.handler, sender, args)
        if inspect.isawaitable(result):
            result = await result
        return result
