from datetime import datetime, timedelta
from functools import lru_cache
import logging
from zoneinfo import ZoneInfo

from barber_assistant.application.dispatcher import MessageDispatcher
from barber_assistant.application.ports.message_platform import MessagePlatformPort
from barber_assistant.application.ports.repository import BarbershopRepositoryPort
from barber_assistant.application.use_cases.availability import AvailabilityCalculator, ScheduleConfig
from barber_assistant.application.use_cases.booking import BookingUseCase
from barber_assistant.application.use_cases.conflicts import ConflictDetector
from barber_assistant.application.use_cases.financial import FinancialEntryUseCase
from barber_assistant.application.use_cases.handle_incoming_message import (
    MANAGER_CHANNEL_CONFIG_KEY,
    HandleIncomingMessageUseCase,
)
from barber_assistant.application.use_cases.manager_panel import ManagerPanelUseCase
from barber_assistant.application.use_cases.send_reply import SendReplyUseCase
from barber_assistant.core.config import settings
from barber_assistant.infrastructure.store.memory_repository import MemoryRepository
from barber_assistant.infrastructure.store.memory_session_store import MemorySessionStore
from barber_assistant.infrastructure.store.sqlite_repository import SqliteRepository
from barber_assistant.infrastructure.whatsapp.mock_platform import MockWhatsAppPlatform
from barber_assistant.infrastructure.whatsapp.whatsapp_client import WhatsAppClient
from barber_assistant.infrastructure.whatsapp.whatsapp_platform import WhatsAppPlatform


def business_clock() -> datetime:
    """Naive wall-clock time in the business timezone."""
    return datetime.now(ZoneInfo(settings.BUSINESS_TIMEZONE)).replace(tzinfo=None)


def get_schedule_config() -> ScheduleConfig:
    return ScheduleConfig(
        working_hour_start=settings.WORKING_HOUR_START,
        working_hour_end=settings.WORKING_HOUR_END,
        slot_granularity=settings.APPOINTMENT_DURATION,
        lunch_start=settings.LUNCH_START,
        lunch_end=settings.LUNCH_END,
        closed_weekday=settings.CLOSED_WEEKDAY,
        horizon_days=settings.BOOKING_HORIZON_DAYS,
        menu_days=settings.MENU_DAYS,
    )


@lru_cache
def get_repository() -> BarbershopRepositoryPort:
    logger = logging.getLogger(__name__)
    if not settings.DATABASE_PATH:
        logger.info("Using MemoryRepository (DATABASE_PATH empty)")
        return MemoryRepository()
    logger.info("Using SqliteRepository", extra={"reason": settings.DATABASE_PATH})
    return SqliteRepository(settings.DATABASE_PATH)


def get_message_platform() -> MessagePlatformPort:
    logger = logging.getLogger(__name__)
    logger.info("ENV=%s", settings.ENV)

    if not (settings.WHATSAPP_ACCESS_TOKEN and settings.WHATSAPP_PHONE_NUMBER_ID):
        if settings.ENV.lower() in {"dev", "local"}:
            logger.info("Using MockWhatsAppPlatform (credentials missing, ENV=dev/local)")
            return MockWhatsAppPlatform()
        raise ValueError("WHATSAPP_ACCESS_TOKEN and WHATSAPP_PHONE_NUMBER_ID are required to send replies.")

    logger.info("Using real WhatsAppPlatform")
    client = WhatsAppClient(
        access_token=settings.WHATSAPP_ACCESS_TOKEN,
        phone_number_id=settings.WHATSAPP_PHONE_NUMBER_ID,
        api_version=settings.WHATSAPP_GRAPH_API_VERSION,
    )
    return WhatsAppPlatform(client=client)


def _minutes(value: int | None) -> timedelta | None:
    return timedelta(minutes=value) if value else None


@lru_cache
def get_handle_incoming_message_use_case() -> HandleIncomingMessageUseCase:
    repository = get_repository()
    calculator = AvailabilityCalculator(get_schedule_config(), clock=business_clock)
    detector = ConflictDetector(calculator, repository)
    financial = FinancialEntryUseCase(repository, clock=business_clock)
    return HandleIncomingMessageUseCase(
        repository=repository,
        booking=BookingUseCase(repository, calculator, detector),
        financial=financial,
        manager_panel=ManagerPanelUseCase(repository, calculator, financial),
        send_reply=SendReplyUseCase(platform=get_message_platform()),
        booking_sessions=MemorySessionStore(ttl=_minutes(settings.BOOKING_SESSION_TTL_MINUTES)),
        financial_sessions=MemorySessionStore(ttl=_minutes(settings.FINANCIAL_SESSION_TTL_MINUTES)),
        owner_phone=settings.OWNER_PHONE,
        business_name=settings.BUSINESS_NAME,
        bot_name=settings.BOT_NAME,
        clock=business_clock,
        manager_channel_id=repository.get_config(MANAGER_CHANNEL_CONFIG_KEY),
        session_sweep_grace=timedelta(minutes=settings.SESSION_SWEEP_GRACE_MINUTES),
    )


def build_dispatcher() -> MessageDispatcher:
    """Must be called from inside a running event loop."""
    return MessageDispatcher(get_handle_incoming_message_use_case())
