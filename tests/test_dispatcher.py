"""
Tests for the single-consumer inbound message dispatcher.
"""

from __future__ import annotations

import asyncio
import threading
import time

from barber_assistant.application.dispatcher import MessageDispatcher
from barber_assistant.domain.entities.message import Message


def _message(mid: str, text: str) -> Message:
    return Message(id=mid, chat_id="5511988887777", sender_phone="5511988887777", text=text, timestamp=0)


class RecordingHandler:
    def __init__(self) -> None:
        self.handled: list[str] = []
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def handle(self, message: Message) -> None:
        with self._lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            if message.text == "boom":
                raise RuntimeError("boom")
            time.sleep(0.01)
            self.handled.append(message.id)
        finally:
            with self._lock:
                self.active -= 1


def test_messages_are_handled_in_order_one_at_a_time():
    handler = RecordingHandler()

    async def scenario() -> None:
        dispatcher = MessageDispatcher(handler)
        dispatcher.start()
        assert dispatcher.running
        for i in range(5):
            await dispatcher.submit(_message(f"m{i}", "oi"))
        await dispatcher.join()
        await dispatcher.stop()
        assert not dispatcher.running

    asyncio.run(scenario())

    assert handler.handled == ["m0", "m1", "m2", "m3", "m4"]
    assert handler.max_active == 1


def test_handler_errors_do_not_stop_the_loop():
    handler = RecordingHandler()

    async def scenario() -> None:
        dispatcher = MessageDispatcher(handler)
        dispatcher.start()
        for mid, text in (("a", "oi"), ("b", "boom"), ("c", "oi")):
            await dispatcher.submit(_message(mid, text))
        await dispatcher.join()
        await dispatcher.stop()

    asyncio.run(scenario())

    assert handler.handled == ["a", "c"]


def test_stop_without_start_is_a_no_op():
    async def scenario() -> None:
        dispatcher = MessageDispatcher(RecordingHandler())
        await dispatcher.stop()
        assert not dispatcher.running

    asyncio.run(scenario())
