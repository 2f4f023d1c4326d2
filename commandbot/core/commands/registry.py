"""Registry of pattern-based chat commands."""

from __future__ import annotations

import logging
import re
from typing import Dict, Iterable, List, Optional, Pattern, Sequence, Tuple, Union

from ..errors import PatternError, RegistrationError
from ..models import CommandAlias, CommandDescriptor, CommandHandler, CommandSpec

LOGGER = logging.getLogger(__name__)

PatternLike = Union[str, Pattern[str]]


def canonical_name(syntax: str) -> str:
    """Return the registry key for a display syntax.

    ``puts <string>`` becomes ``puts``; a syntax without whitespace is used as is.
    """
    parts = syntax.split()
    if len(parts) > 1:
        return parts[0]
    return syntax.strip()


def compile_pattern(pattern: PatternLike) -> Pattern[str]:
    if isinstance(pattern, re.Pattern):
        return pattern
    try:
        return re.compile(pattern)
    except (re.error, TypeError) as exc:
        raise PatternError(f"Invalid command pattern {pattern!r}: {exc}") from exc


class CommandRegistry:
    """Holds the ordered match specs and the descriptors used for help."""

    def __init__(self) -> None:
        self._specs: List[CommandSpec] = []
        self._descriptors: Dict[str, CommandDescriptor] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        self._frozen = True

    def register(
        self,
        syntax: str,
        description: str,
        pattern: PatternLike,
        handler: CommandHandler,
        is_public: bool = False,
        aliases: Iterable[Union[CommandAlias, Tuple[str, PatternLike]]] = (),
    ) -> CommandDescriptor:
        if self._frozen:
            raise RegistrationError(f"Cannot register {syntax!r}: registry is frozen")
        if not syntax or not syntax.strip():
            raise RegistrationError("Command syntax must not be empty")
        if not callable(handler):
            raise RegistrationError(f"Handler for {syntax!r} is not callable")

        syntax = syntax.strip()
        compiled = compile_pattern(pattern)
        compiled_aliases: List[Tuple[str, Pattern[str]]] = []
        for alias in aliases:
            alias_syntax, alias_pattern = CommandAlias(*alias)
            if not alias_syntax or not alias_syntax.strip():
                raise RegistrationError(f"Alias syntax for {syntax!r} must not be empty")
            compiled_aliases.append((alias_syntax.strip(), compile_pattern(alias_pattern)))

        name = canonical_name(syntax)
        if name in self._descriptors:
            LOGGER.warning("Command %s registered twice; the later definition replaces the earlier one", name)

        descriptor = CommandDescriptor(
            name=name,
            syntaxes=[syntax],
            description=description,
            is_public=is_public,
        )
        self._descriptors[name] = descriptor
        self._specs.append(CommandSpec(name=name, pattern=compiled, handler=handler, is_public=is_public))

        for alias_syntax, alias_pattern in compiled_aliases:
            descriptor.syntaxes.append(alias_syntax)
            alias_name = canonical_name(alias_syntax)
            if alias_name != name:
                self._add_alias_entry(alias_name, alias_syntax, descriptor)
            self._specs.append(
                CommandSpec(name=alias_name, pattern=alias_pattern, handler=handler, is_public=is_public)
            )

        LOGGER.debug("Registered command %s with %d alias(es)", name, len(compiled_aliases))
        return descriptor

    def _add_alias_entry(self, alias_name: str, alias_syntax: str, descriptor: CommandDescriptor) -> None:
        existing = self._descriptors.get(alias_name)
        if existing is not None and not existing.is_alias:
            # A real command keeps its help entry; the alias pattern still matches
            LOGGER.warning(
                "Alias %s of %s collides with command %s; keeping the command's help entry",
                alias_syntax,
                descriptor.name,
                alias_name,
            )
            return
        if existing is not None:
            LOGGER.warning("Command %s registered twice; the later definition replaces the earlier one", alias_name)
        self._descriptors[alias_name] = CommandDescriptor(
            name=alias_name,
            syntaxes=descriptor.syntaxes,
            description=descriptor.description,
            is_public=descriptor.is_public,
            is_alias=True,
        )

    def lookup(self, name: str) -> Optional[CommandDescriptor]:
        return self._descriptors.get(name)

    def all_descriptors(self) -> Sequence[CommandDescriptor]:
        return tuple(self._descriptors.values())

    def match_specs(self) -> Sequence[CommandSpec]:
        """Return match specs oldest-first."""
        return tuple(self._specs)

    def __len__(self) -> int:
        return len(self._specs)
