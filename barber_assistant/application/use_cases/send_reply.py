from __future__ import annotations

import logging

from barber_assistant.application.ports.message_platform import MessagePlatformPort
from barber_assistant.core.config import settings
from barber_assistant.domain.entities.reply import OutboundMessage


class SendReplyUseCase:
    def __init__(self, platform: MessagePlatformPort, enabled: bool | None = None) -> None:
        self._platform = platform
        self._enabled = settings.AUTO_REPLY_ENABLED if enabled is None else enabled
        self._logger = logging.getLogger(__name__)

    def execute(self, reply: OutboundMessage) -> bool:
        """Send a reply. Returns True if actually sent, False if skipped."""
        if not reply.recipient_id or not reply.text:
            return False
        if not self._enabled:
            self._logger.info("WOULD_SEND_REPLY", extra={"phone": reply.recipient_id, "reason": reply.text[:60]})
            self._logger.info("AUTO_REPLY_ENABLED=false -> skipping send")
            return False
        self._platform.send(reply)
        return True

    def execute_all(self, replies: list[OutboundMessage]) -> int:
        return sum(1 for reply in replies if self.execute(reply))
