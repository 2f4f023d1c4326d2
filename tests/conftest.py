"""Shared fixtures for commandbot tests."""

from __future__ import annotations

from typing import List, Optional, Tuple

import pytest

from commandbot.chat_adapters.i_chat_adapter import IChatAdapter
from commandbot.core.bot import Bot
from commandbot.core.config import Config
from commandbot.core.models import IncomingMessage, Presence


class FakeTransport(IChatAdapter):
    """In-memory transport that records everything the bot sends."""

    def __init__(self, batches: Optional[List[List[IncomingMessage]]] = None) -> None:
        self.batches: List[List[IncomingMessage]] = list(batches or [])
        self.sent: List[Tuple[str, str]] = []
        self.presence_updates: List[Tuple[Optional[Presence], Optional[str], Optional[int]]] = []
        self.connect_calls: List[Tuple[str, str]] = []
        self.connected = False
        self.disconnect_calls = 0

    async def connect(self, account_id: str, credential: str) -> None:
        self.connect_calls.append((account_id, credential))
        self.connected = True

    def is_connected(self) -> bool:
        return self.connected

    async def set_presence(self, presence, status, priority) -> None:
        self.presence_updates.append((presence, status, priority))

    async def send_message(self, recipient: str, text: str) -> None:
        self.sent.append((recipient, text))

    async def received_messages(self) -> List[IncomingMessage]:
        if self.batches:
            return self.batches.pop(0)
        return []

    async def disconnect(self) -> None:
        self.disconnect_calls += 1
        self.connected = False


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def make_config():
    """Build a Config with sensible test defaults."""

    def _make(**overrides) -> Config:
        values = dict(
            account_id="bot@example.com",
            credential="secret",
            masters=["master@example.com"],
            poll_interval=0.01,
        )
        values.update(overrides)
        return Config(**values)

    return _make


@pytest.fixture
def private_bot(make_config, transport) -> Bot:
    return Bot(make_config(), transport)


@pytest.fixture
def public_bot(make_config, transport) -> Bot:
    return Bot(make_config(is_public=True), transport)
