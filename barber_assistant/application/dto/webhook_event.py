from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, Field

from barber_assistant.domain.entities.message import Message

logger = logging.getLogger(__name__)


def _extract_text(message: dict[str, Any]) -> str | None:
    kind = message.get("type")
    if kind == "text":
        return (message.get("text") or {}).get("body")
    if kind == "button":
        return (message.get("button") or {}).get("text")
    if kind == "interactive":
        interactive = message.get("interactive") or {}
        reply = interactive.get("button_reply") or interactive.get("list_reply") or {}
        return reply.get("title")
    return None


class WebhookEventDTO(BaseModel):
    """WhatsApp Cloud API webhook payload: ``entry[].changes[].value.messages[]``."""

    object: str | None = None
    entry: list[dict[str, Any]] = Field(default_factory=list)

    def extract_messages(self) -> list[Message]:
        messages: list[Message] = []
        for entry in self.entry or []:
            for change in entry.get("changes", []) or []:
                value = change.get("value") or {}
                # Delivery/read receipts arrive under "statuses" and carry no text.
                for msg in value.get("messages", []) or []:
                    mid = msg.get("id")
                    sender = msg.get("from")
                    text = _extract_text(msg)
                    timestamp = msg.get("timestamp")

                    if not (mid and sender and text and timestamp):
                        continue
                    try:
                        sent_at = int(timestamp)
                    except (TypeError, ValueError):
                        logger.warning("Skipping message with bad timestamp", extra={"message_id": mid})
                        continue

                    group_id = msg.get("group_id")
                    messages.append(
                        Message(
                            id=str(mid),
                            chat_id=str(group_id or sender),
                            sender_phone=str(sender),
                            text=str(text),
                            timestamp=sent_at,
                            group_id=str(group_id) if group_id else None,
                        )
                    )
        return messages
