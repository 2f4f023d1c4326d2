"""Slack transport using the official Slack SDK (Socket Mode)."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

from slack_sdk.errors import SlackApiError
from slack_sdk.socket_mode.aiohttp import SocketModeClient
from slack_sdk.socket_mode.request import SocketModeRequest
from slack_sdk.socket_mode.response import SocketModeResponse
from slack_sdk.web.async_client import AsyncWebClient

from ..core.errors import TransportError
from ..core.models import IncomingMessage, MessageKind, Presence
from .i_chat_adapter import IChatAdapter

LOGGER = logging.getLogger(__name__)

CHANNEL_KINDS = {
    "im": MessageKind.CHAT,
    "channel": MessageKind.GROUPCHAT,
    "group": MessageKind.GROUPCHAT,
    "mpim": MessageKind.GROUPCHAT,
}


class SlackAdapter(IChatAdapter):
    def __init__(self, app_token: str) -> None:
        self._app_token = app_token
        self._web_client: Optional[AsyncWebClient] = None
        self._client: Optional[SocketModeClient] = None
        self._account_id: Optional[str] = None
        self._inbox: "asyncio.Queue[IncomingMessage]" = asyncio.Queue()
        self._connected = False

    async def connect(self, account_id: str, credential: str) -> None:
        self._account_id = account_id
        self._web_client = AsyncWebClient(token=credential)
        try:
            auth = await self._web_client.auth_test()
        except SlackApiError as exc:
            raise TransportError(f"Slack rejected the bot credential: {exc}") from exc

        LOGGER.info("Authenticated with Slack as %s", auth.get("user_id") or account_id)
        self._client = SocketModeClient(app_token=self._app_token, web_client=self._web_client)
        self._client.socket_mode_request_listeners.append(self._handle_socket_request)
        LOGGER.info("Connecting to Slack via Socket Mode")
        try:
            await self._client.connect()
        except Exception as exc:
            raise TransportError(f"Failed to open Slack Socket Mode connection: {exc}") from exc
        self._connected = True

    def is_connected(self) -> bool:
        return self._connected

    async def set_presence(
        self,
        presence: Optional[Presence],
        status: Optional[str],
        priority: Optional[int],
    ) -> None:
        web_client = self._require_client()
        slack_presence = "auto" if presence in (None, Presence.ONLINE, Presence.CHAT) else "away"
        try:
            await web_client.users_setPresence(presence=slack_presence)
            if status is not None:
                await web_client.users_profile_set(profile={"status_text": status})
        except SlackApiError as exc:
            raise TransportError(f"Failed to update Slack presence: {exc}") from exc
        if priority is not None:
            LOGGER.debug("Slack has no presence priority; ignoring %s", priority)

    async def send_message(self, recipient: str, text: str) -> None:
        web_client = self._require_client()
        try:
            await web_client.chat_postMessage(channel=recipient, text=text)
        except SlackApiError as exc:
            raise TransportError(f"Failed to send Slack message: {exc}") from exc

    async def received_messages(self) -> List[IncomingMessage]:
        messages: List[IncomingMessage] = []
        while not self._inbox.empty():
            messages.append(self._inbox.get_nowait())
        return messages

    async def disconnect(self) -> None:
        self._connected = False
        if self._client is not None:
            await self._client.close()

    def _require_client(self) -> AsyncWebClient:
        if self._web_client is None:
            raise TransportError("Slack adapter is not connected")
        return self._web_client

    async def _handle_socket_request(
        self,
        client: SocketModeClient,
        req: SocketModeRequest,
    ) -> None:
        await client.send_socket_mode_response(SocketModeResponse(envelope_id=req.envelope_id))
        if req.type != "events_api":
            return

        event = (req.payload or {}).get("event", {})
        message = self._to_incoming(event)
        if message is not None:
            self._inbox.put_nowait(message)

    def _to_incoming(self, event: Dict[str, Any]) -> Optional[IncomingMessage]:
        event_type = event.get("type")
        subtype = event.get("subtype")
        bot_id = event.get("bot_id")
        user_id = event.get("user")

        # Ignore non-message events, edits, and bot messages (including our own)
        if event_type != "message" or subtype or bot_id or not user_id or user_id == self._account_id:
            LOGGER.debug("Ignoring Slack event type %s with subtype %s, bot_id %s", event_type, subtype, bot_id)
            return None

        kind = CHANNEL_KINDS.get(event.get("channel_type", ""), MessageKind.OTHER)
        return IncomingMessage(sender=user_id, kind=kind, body=event.get("text") or "")
