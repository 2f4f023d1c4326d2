"""Chat transport adapters."""

from .i_chat_adapter import IChatAdapter

__all__ = ["IChatAdapter"]
