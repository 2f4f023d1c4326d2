"""commandbot - pattern-based command bots for chat transports."""

from .core import Bot, Config, load_config

__all__ = ["Bot", "Config", "load_config"]
