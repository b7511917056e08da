from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from barber_assistant.domain.entities.message import Message


class MessageHandler(Protocol):
    def handle(self, message: Message) -> None: ...


class MessageDispatcher:
    """
    Single consumer over an inbound queue.

    Messages are handled strictly one at a time, in arrival order. The handler
    is synchronous and runs in a worker thread so the event loop keeps accepting
    webhook requests while a message is being processed.
    """

    def __init__(self, handler: MessageHandler, maxsize: int = 0) -> None:
        self._handler = handler
        self._queue: asyncio.Queue[Message | None] = asyncio.Queue(maxsize=maxsize)
        self._task: asyncio.Task[None] | None = None
        self._logger = logging.getLogger(__name__)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._consume())
        self._logger.info("Dispatcher started")

    async def submit(self, message: Message) -> None:
        await self._queue.put(message)

    async def join(self) -> None:
        await self._queue.join()

    async def stop(self) -> None:
        if self._task is None:
            return
        await self._queue.put(None)
        await self._task
        self._task = None
        self._logger.info("Dispatcher stopped")

    async def _consume(self) -> None:
        while True:
            message = await self._queue.get()
            try:
                if message is None:
                    return
                await asyncio.to_thread(self._handler.handle, message)
            except Exception as e:
                self._logger.exception(
                    "Unhandled error while dispatching message",
                    extra={"message_id": getattr(message, "id", None), "error": str(e)},
                )
            finally:
                self._queue.task_done()
