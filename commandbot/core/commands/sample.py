"""Handlers for the demonstration commands (puts, puts!, rand)."""

from __future__ import annotations

import logging
import random
import sys
from typing import Optional, TextIO

from ..models import CommandAlias
from .registry import CommandRegistry

LOGGER = logging.getLogger(__name__)


class SampleCommandHandler:
    """Writes to a stream and rolls numbers; handy for trying a bot out."""

    def __init__(self, out: Optional[TextIO] = None, rng: Optional[random.Random] = None) -> None:
        self._out = out or sys.stdout
        self._rng = rng or random.Random()

    def handle_puts(self, sender: str, message: str) -> str:
        self._write(message)
        return f"'{message}' written to $stdout"

    def handle_puts_quiet(self, sender: str, message: str) -> None:
        self._write(f"{sender} says '{message}'")
        return None

    def handle_rand(self, sender: str, message: str) -> str:
        return str(self._rng.randrange(10))

    def register(self, registry: CommandRegistry) -> None:
        registry.register(
            "puts <string>",
            "Write something to $stdout",
            r"puts\s+.+",
            self.handle_puts,
        )
        registry.register(
            "puts! <string>",
            "Write something to $stdout (without response)",
            r"puts!\s+.+",
            self.handle_puts_quiet,
            aliases=[CommandAlias("p! <string>", r"p!\s+.+")],
        )
        registry.register(
            "rand",
            "Produce a random number from 0 to 9",
            r"rand",
            self.handle_rand,
            is_public=True,
            aliases=[CommandAlias("r", r"r")],
        )

    def _write(self, text: str) -> None:
        LOGGER.debug("Writing %d character(s) to output", len(text))
        self._out.write(f"{text}\n")
        self._out.flush()
