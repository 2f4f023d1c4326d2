"""Pulls messages from the transport and feeds them to the dispatcher."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from ..chat_adapters.i_chat_adapter import IChatAdapter
from .commands.dispatcher import CommandDispatcher
from .models import IncomingMessage, MessageKind, bare_identity

LOGGER = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_QUEUE_SIZE = 100


class IntakeLoop:
    """Polls the transport and processes chat messages strictly one at a time.

    A single worker drains a bounded queue, so handlers never run concurrently
    and replies go out in arrival order.
    """

    def __init__(
        self,
        transport: IChatAdapter,
        dispatcher: CommandDispatcher,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        queue_size: int = DEFAULT_QUEUE_SIZE,
    ) -> None:
        self._transport = transport
        self._dispatcher = dispatcher
        self._poll_interval = poll_interval
        self._queue_size = queue_size
        self._queue: Optional["asyncio.Queue[IncomingMessage]"] = None
        self._stop_event = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._queue is not None and not self._stop_event.is_set()

    def stop(self) -> None:
        self._stop_event.set()

    async def run(self) -> None:
        self._queue = asyncio.Queue(maxsize=self._queue_size)
        worker = asyncio.create_task(self._worker(self._queue))
        LOGGER.info("Intake loop started (poll interval %ss)", self._poll_interval)
        try:
            while not self._stop_event.is_set():
                messages = await self._transport.received_messages()
                for message in messages:
                    if message.kind != MessageKind.CHAT:
                        LOGGER.debug("Ignoring %s message from %s", message.kind.value, message.sender)
                        continue
                    if not await self._enqueue(message, worker):
                        break

                if not messages:
                    await self._sleep()

            if worker.done() and not worker.cancelled():
                # Re-raises a transport failure hit while delivering a reply
                worker.result()
        finally:
            if not worker.done():
                worker.cancel()
                await asyncio.gather(worker, return_exceptions=True)
            self._queue = None
            LOGGER.info("Intake loop stopped")

    async def _enqueue(self, message: IncomingMessage, worker: "asyncio.Task[None]") -> bool:
        """Queue one message; False once the worker is gone and nothing will drain the queue."""
        if worker.done() or self._stop_event.is_set():
            return False
        put = asyncio.ensure_future(self._queue.put(message))
        await asyncio.wait({put, worker}, return_when=asyncio.FIRST_COMPLETED)
        if put.done():
            return True
        put.cancel()
        await asyncio.gather(put, return_exceptions=True)
        return False

    async def _sleep(self) -> None:
        try:
            await asyncio.wait_for(self._stop_event.wait(), self._poll_interval)
        except asyncio.TimeoutError:
            pass

    async def _worker(self, queue: "asyncio.Queue[IncomingMessage]") -> None:
        while True:
            message = await queue.get()
            try:
                await self.process(message)
            except Exception:
                LOGGER.error("Failed to deliver reply to %s; stopping intake loop", message.sender)
                self._stop_event.set()
                raise
            finally:
                queue.task_done()

    async def process(self, message: IncomingMessage) -> None:
        """Dispatch one message and deliver its reply, if any."""
        sender = bare_identity(message.sender)
        reply = await self._dispatcher.dispatch(sender, message.body)
        if reply is not None:
            await self._transport.send_message(sender, reply)
