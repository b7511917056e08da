from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    OWNER_PHONE: str = ""
    BOT_NAME: str = "BarberBot"
    BUSINESS_NAME: str = "BARBER SHOP"
    BUSINESS_TIMEZONE: str = "America/Sao_Paulo"

    WORKING_HOUR_START: str = "09:00"
    WORKING_HOUR_END: str = "20:00"
    APPOINTMENT_DURATION: int = 60  # slot granularity in minutes
    LUNCH_START: str = "12:00"
    LUNCH_END: str = "13:00"
    CLOSED_WEEKDAY: int | None = 6  # date.weekday(); 6 is Sunday
    BOOKING_HORIZON_DAYS: int = 30
    MENU_DAYS: int = 7

    FINANCIAL_SESSION_TTL_MINUTES: int = 15
    BOOKING_SESSION_TTL_MINUTES: int | None = None
    # Expired sessions nobody came back to are dropped after this long.
    SESSION_SWEEP_GRACE_MINUTES: int = 60

    DATABASE_PATH: str = "./data/barber.db"
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    AUTO_REPLY_ENABLED: bool = False

    WHATSAPP_VERIFY_TOKEN: str = ""
    WHATSAPP_APP_SECRET: str | None = None
    WHATSAPP_ACCESS_TOKEN: str | None = None
    WHATSAPP_PHONE_NUMBER_ID: str | None = None
    WHATSAPP_GRAPH_API_VERSION: str = "v20.0"


settings = Settings()
