import os
from dataclasses import dataclass
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
from dotenv import load_dotenv

load_dotenv(override=False)  # loads .env if present

def env(key: str, default: str | None = None) -> str | None:
    return os.getenv(key, default)

def build_push_base_url() -> str:
    # Prefer PUSH_BASE_URL. Else fall back to the project URL the functions live under.
    url = env("PUSH_BASE_URL") or env("SUPABASE_URL")
    if url:
        return url.rstrip("/")
    return "http://localhost:54321"

@dataclass(frozen=True)
class Settings:
    database_url: str
    push_base_url: str
    service_key: str
    jwt_secret: str
    alarm_timezone: str
    alarm_locale: str
    push_timeout: float
    log_level: str
    cache_loggers: bool = True

    def __post_init__(self):
        # fail at startup, not on the first alarm
        try:
            ZoneInfo(self.alarm_timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"ALARM_TIMEZONE is not a known IANA zone: {self.alarm_timezone!r}") from e

def load_settings() -> Settings:
    return Settings(
        database_url=env("DATABASE_URL", "sqlite:///./pillhub.db"),
        push_base_url=build_push_base_url(),
        service_key=env("SUPABASE_SERVICE_ROLE_KEY", ""),
        jwt_secret=env("JWT_SECRET", ""),
        alarm_timezone=env("ALARM_TIMEZONE", "America/Mexico_City"),
        alarm_locale=env("ALARM_LOCALE", "es-MX"),
        push_timeout=float(env("PUSH_TIMEOUT", "10")),
        log_level=env("LOG_LEVEL", "INFO").upper(),
    )
