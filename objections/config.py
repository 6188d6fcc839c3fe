"""
Service configuration loaded from environment variables (.env supported).
"""

import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()

DEFAULT_DATABASE_URL = "sqlite:///./objections.db"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return float(raw)


@dataclass
class Settings:
    """Runtime settings for the objection service."""
    database_url: str = DEFAULT_DATABASE_URL
    jwt_secret: str = ""
    jwt_ttl_minutes: int = 60
    admin_username: str = ""
    admin_password: str = ""
    bcrypt_rounds: int = 12
    reset_window_hours: int = 2
    db_init_retries: int = 5
    db_init_retry_delay: float = 5.0
    port: int = 3001

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from the process environment.

        Environment variables:
            DATABASE_URL, JWT_SECRET, JWT_TTL_MINUTES, ADMIN_USERNAME,
            ADMIN_PASSWORD, BCRYPT_ROUNDS, RESET_WINDOW_HOURS,
            DB_INIT_RETRIES, DB_INIT_RETRY_DELAY, PORT
        """
        return cls(
            database_url=os.getenv("DATABASE_URL") or DEFAULT_DATABASE_URL,
            jwt_secret=os.getenv("JWT_SECRET", ""),
            jwt_ttl_minutes=_int_env("JWT_TTL_MINUTES", 60),
            admin_username=os.getenv("ADMIN_USERNAME", ""),
            admin_password=os.getenv("ADMIN_PASSWORD", ""),
            bcrypt_rounds=_int_env("BCRYPT_ROUNDS", 12),
            reset_window_hours=_int_env("RESET_WINDOW_HOURS", 2),
            db_init_retries=_int_env("DB_INIT_RETRIES", 5),
            db_init_retry_delay=_float_env("DB_INIT_RETRY_DELAY", 5.0),
            port=_int_env("PORT", 3001),
        )
