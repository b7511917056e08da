from dataclasses import dataclass


@dataclass(frozen=True)
class OutboundMessage:
    recipient_id: str
    text: str
