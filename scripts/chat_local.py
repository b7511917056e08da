#!/usr/bin/env python3
"""
Interactive local chat harness (no HTTP, no WhatsApp).

Usage:
  python3 scripts/chat_local.py

What it does:
- Sends your typed messages through the same HandleIncomingMessageUseCase
- Keeps data in memory; every run starts with the default services
- Prints every outbound message with its recipient
"""
from __future__ import annotations

import os
import sys
import time
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from datetime import timedelta  # noqa: E402

from barber_assistant.application.use_cases.availability import AvailabilityCalculator  # noqa: E402
from barber_assistant.application.use_cases.booking import BookingUseCase  # noqa: E402
from barber_assistant.application.use_cases.conflicts import ConflictDetector  # noqa: E402
from barber_assistant.application.use_cases.financial import FinancialEntryUseCase  # noqa: E402
from barber_assistant.application.use_cases.handle_incoming_message import HandleIncomingMessageUseCase  # noqa: E402
from barber_assistant.application.use_cases.manager_panel import ManagerPanelUseCase  # noqa: E402
from barber_assistant.application.use_cases.send_reply import SendReplyUseCase  # noqa: E402
from barber_assistant.core.config import settings  # noqa: E402
from barber_assistant.domain.entities.message import Message  # noqa: E402
from barber_assistant.infrastructure.store.memory_repository import MemoryRepository  # noqa: E402
from barber_assistant.infrastructure.store.memory_session_store import MemorySessionStore  # noqa: E402
from barber_assistant.infrastructure.whatsapp.mock_platform import RecordingPlatform  # noqa: E402
from barber_assistant.wiring.dependencies import business_clock, get_schedule_config  # noqa: E402

DEFAULT_OWNER = "5511999990000"
MANAGER_GROUP = "local_manager_group"


def _print_header(phone: str, group_id: str | None) -> None:
    print("\nLocal Chat Harness")
    print("-" * 60)
    print(f"phone: {phone}  group: {group_id or '-'}")
    print("Type your message and press Enter.")
    print("Commands: /as <phone>, /owner, /group, /dm, /help, /quit")
    print("-" * 60)


def _build_use_case(owner_phone: str) -> tuple[HandleIncomingMessageUseCase, RecordingPlatform]:
    repository = MemoryRepository()
    calculator = AvailabilityCalculator(get_schedule_config(), clock=business_clock)
    financial = FinancialEntryUseCase(repository, clock=business_clock)
    platform = RecordingPlatform()
    use_case = HandleIncomingMessageUseCase(
        repository=repository,
        booking=BookingUseCase(repository, calculator, ConflictDetector(calculator, repository)),
        financial=financial,
        manager_panel=ManagerPanelUseCase(repository, calculator, financial),
        send_reply=SendReplyUseCase(platform=platform, enabled=True),
        booking_sessions=MemorySessionStore(),
        financial_sessions=MemorySessionStore(ttl=timedelta(minutes=settings.FINANCIAL_SESSION_TTL_MINUTES)),
        owner_phone=owner_phone,
        business_name=settings.BUSINESS_NAME,
        bot_name=settings.BOT_NAME,
        clock=business_clock,
        manager_channel_id=MANAGER_GROUP,
    )
    return use_case, platform


def main() -> None:
    owner_phone = settings.OWNER_PHONE or DEFAULT_OWNER
    phone = os.getenv("CHAT_PHONE", "5511988887777")
    group_id: str | None = None
    use_case, platform = _build_use_case(owner_phone)
    _print_header(phone, group_id)

    while True:
        try:
            user_text = input("\n> ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nBye!")
            return

        if not user_text:
            continue

        cmd = user_text.lower()
        if cmd in ("/quit", "/exit"):
            print("Bye!")
            return
        if cmd == "/help":
            print("Commands:")
            print("  /as <phone> -> talk as another customer")
            print("  /owner      -> talk as the owner")
            print(f"  /group      -> send into the manager group ({MANAGER_GROUP})")
            print("  /dm         -> back to direct chat")
            print("  /quit       -> exit")
            continue
        if cmd.startswith("/as "):
            phone = user_text[4:].strip()
            print(f"phone: {phone}")
            continue
        if cmd == "/owner":
            phone = owner_phone
            print(f"phone: {phone} (owner)")
            continue
        if cmd == "/group":
            group_id = MANAGER_GROUP
            print(f"group: {group_id}")
            continue
        if cmd == "/dm":
            group_id = None
            print("direct chat")
            continue

        message = Message(
            id=f"local_{int(time.time() * 1000)}",
            chat_id=group_id or phone,
            sender_phone=phone,
            text=user_text,
            timestamp=int(time.time()),
            group_id=group_id,
            platform="local",
        )

        platform.clear()
        use_case.handle(message)

        if not platform.sent:
            print("(no outbound message)")
            continue
        for outbound in platform.sent:
            print(f"\n--- to {outbound.recipient_id} ---")
            print(outbound.text)
        print("-" * 60)


if __name__ == "__main__":
    main()
