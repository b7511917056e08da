from __future__ import annotations

import logging

from barber_assistant.application.ports.message_platform import MessagePlatformPort
from barber_assistant.domain.entities.reply import OutboundMessage


class MockWhatsAppPlatform(MessagePlatformPort):
    def __init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def send_text(self, recipient_id: str, text: str) -> None:
        self._logger.info("Mock send to WhatsApp", extra={"phone": recipient_id, "reason": text[:60]})


class RecordingPlatform(MessagePlatformPort):
    """Keeps every outbound message in memory; used by tests and the local chat script."""

    def __init__(self) -> None:
        self.sent: list[OutboundMessage] = []

    def send_text(self, recipient_id: str, text: str) -> None:
        self.sent.append(OutboundMessage(recipient_id, text))

    def texts_to(self, recipient_id: str) -> list[str]:
        return [m.text for m in self.sent if m.recipient_id == recipient_id]

    def clear(self) -> None:
        self.sent.clear()
