from __future__ import annotations

from abc import ABC, abstractmethod

from barber_assistant.domain.entities.reply import OutboundMessage


class MessagePlatformPort(ABC):
    """
    Outbound side of the chat transport.

    ``recipient_id`` is a chat id: a customer's phone for direct chats or the
    manager group id. Failures surface as ``TransportError``.
    """

    @abstractmethod
    def send_text(self, recipient_id: str, text: str) -> None:
        raise NotImplementedError

    def send(self, message: OutboundMessage) -> None:
        self.send_text(recipient_id=message.recipient_id, text=message.text)
