"""Chat adapter abstraction."""

from __future__ import annotations

import abc
from typing import List, Optional

from ..core.models import IncomingMessage, Presence


class IChatAdapter(abc.ABC):
    """Abstraction for chat transports (Slack, XMPP, etc.)."""

    @abc.abstractmethod
    async def connect(self, account_id: str, credential: str) -> None:
        """Open the transport session.

        Raises:
            TransportError: if the credential is rejected or the server is unreachable.
        """

    @abc.abstractmethod
    def is_connected(self) -> bool:
        """Return whether the session is currently open."""

    @abc.abstractmethod
    async def set_presence(
        self,
        presence: Optional[Presence],
        status: Optional[str],
        priority: Optional[int],
    ) -> None:
        """Announce availability, status text and priority."""

    @abc.abstractmethod
    async def send_message(self, recipient: str, text: str) -> None:
        """Send a message to a single recipient."""

    @abc.abstractmethod
    async def received_messages(self) -> List[IncomingMessage]:
        """Return messages that arrived since the previous call (may be empty)."""

    @abc.abstractmethod
    async def disconnect(self) -> None:
        """Shutdown the transport session."""
