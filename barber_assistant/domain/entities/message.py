from dataclasses import dataclass


@dataclass(frozen=True)
class Message:
    id: str
    chat_id: str  # where replies go: the sender for direct chats, the group otherwise
    sender_phone: str
    text: str
    timestamp: int
    group_id: str | None = None
    platform: str = "whatsapp"

    @property
    def is_group(self) -> bool:
        return self.group_id is not None
