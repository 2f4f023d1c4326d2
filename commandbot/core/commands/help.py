"""Builds help text from the command registry."""

from __future__ import annotations

from typing import List, Optional

from ..models import CommandDescriptor
from .policy import AuthorizationPolicy
from .registry import CommandRegistry

HELP_HEADER = "I understand the following commands:"
UNKNOWN_HELP_TEMPLATE = "I don't understand '{name}'. Try saying 'help' to see what commands I understand."


class HelpSynthesizer:
    """Renders the command listing visible to a given sender."""

    def __init__(self, registry: CommandRegistry, policy: AuthorizationPolicy) -> None:
        self._registry = registry
        self._policy = policy

    def visible_descriptors(self, sender: str) -> List[CommandDescriptor]:
        return sorted(
            (
                descriptor
                for descriptor in self._registry.all_descriptors()
                if not descriptor.is_alias and self._policy.can_list_in_help(sender, descriptor.is_public)
            ),
            key=lambda descriptor: descriptor.name,
        )

    def help(self, sender: str, command_name: Optional[str] = None) -> str:
        name = (command_name or "").strip()
        if not name:
            lines = [HELP_HEADER, ""]
            for descriptor in self.visible_descriptors(sender):
                lines.extend(_render(descriptor))
                lines.append("")
            return "\n".join(lines)

        # Direct lookups are not filtered by visibility.
        descriptor = self._registry.lookup(name)
        if descriptor is None:
            return UNKNOWN_HELP_TEMPLATE.format(name=name)
        return "\n".join(_render(descriptor))


def _render(descriptor: CommandDescriptor) -> List[str]:
    return [*descriptor.syntaxes, f"  {descriptor.description}"]
