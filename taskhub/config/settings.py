# taskhub/config/settings.py
# Application configuration read from the environment

import os
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def _env_list(name: str, default: str) -> List[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


class Settings:
    """Runtime settings for the API, the scheduler and the client"""

    # Database
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./taskhub.db")
    DATABASE_SSL = _env_bool("DATABASE_SSL", "false")

    # Tokens
    SECRET_KEY = os.getenv("SECRET_KEY", "change-me-in-production")
    ALGORITHM = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60))
    REFRESH_TOKEN_EXPIRE_DAYS = int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", 7))

    # HTTP
    CORS_ORIGINS = _env_list("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000")
    HOST = os.getenv("HOST", "0.0.0.0")
    PORT = int(os.getenv("PORT", "4000"))
    RELOAD = _env_bool("RELOAD", "false")

    # Deadline notifications
    DEADLINE_CHECK_COOLDOWN_MINUTES = int(os.getenv("DEADLINE_CHECK_COOLDOWN_MINUTES", 5))
    DEADLINE_CHECK_DAYS = [int(d) for d in _env_list("DEADLINE_CHECK_DAYS", "1,3,7")]
    DEADLINE_SCHEDULER_ENABLED = _env_bool("DEADLINE_SCHEDULER_ENABLED", "true")
    DEADLINE_SCHEDULER_INTERVAL_MINUTES = int(os.getenv("DEADLINE_SCHEDULER_INTERVAL_MINUTES", 30))

    # Analytics thresholds
    DUE_SOON_DAYS = int(os.getenv("DUE_SOON_DAYS", 3))
    STAGNANT_PROJECT_DAYS = int(os.getenv("STAGNANT_PROJECT_DAYS", 30))
    HIGH_PRIORITY_THRESHOLD = int(os.getenv("HIGH_PRIORITY_THRESHOLD", 8))

    # Client polling
    CLIENT_REFRESH_SECONDS = int(os.getenv("CLIENT_REFRESH_SECONDS", 30))
    CLIENT_DEADLINE_COOLDOWN_SECONDS = int(os.getenv("CLIENT_DEADLINE_COOLDOWN_SECONDS", 120))
    CLIENT_REQUEST_TIMEOUT = float(os.getenv("CLIENT_REQUEST_TIMEOUT", 10))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    @classmethod
    def deadline_cooldown_seconds(cls) -> int:
        return cls.DEADLINE_CHECK_COOLDOWN_MINUTES * 60

    @classmethod
    def is_sqlite(cls) -> bool:
        return cls.DATABASE_URL.startswith("sqlite")


settings = Settings()
