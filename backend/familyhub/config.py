"""Runtime configuration read from environment variables.

Values are resolved once at import time. Tests override them by setting the
environment before importing the application or by patching module attributes.
"""
import os

# --- Optional .env loading (opt-in via APP_LOAD_DOTENV) ---
if os.getenv("APP_LOAD_DOTENV") in {"1", "true", "TRUE", "yes", "on"}:  # pragma: no cover
    from dotenv import load_dotenv

    # Respect existing env (override=False). Default search walks up from CWD.
    load_dotenv(override=False)


def _csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [v.strip() for v in value.split(",") if v.strip()]


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+pysqlite:///./familyhub.db")

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")  # in production load from env
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

CORS_ALLOW_ORIGINS = _csv(os.getenv("CORS_ALLOW_ORIGINS")) or ["http://localhost:3000"]

# Demo family (everyone else belongs to the real family)
DEMO_USER_ID = os.getenv("DEMO_USER_ID", "demo-user")
DEMO_EMAIL = os.getenv("DEMO_EMAIL", "demo@example.com")
DEMO_USER_IDS = sorted({DEMO_USER_ID, *_csv(os.getenv("DEMO_USER_IDS"))})

# Event cache
EVENT_CACHE_TTL_SECONDS = int(os.getenv("EVENT_CACHE_TTL_SECONDS", "3600"))
EVENT_CACHE_MAX_ENTRIES = int(os.getenv("EVENT_CACHE_MAX_ENTRIES", "500"))

# Days before a birthday / event on which reminders go out
REMINDER_DAYS = (30, 7, 1, 0)
