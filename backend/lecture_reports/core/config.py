from pydantic import field_validator
from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path

ASYNC_DRIVERS = {
    "postgres://": "postgresql+asyncpg://",
    "postgresql://": "postgresql+asyncpg://",
    "sqlite://": "sqlite+aiosqlite://",
}


class Settings(BaseSettings):
    """Lecture Reports settings, read from the environment and .env"""

    # Application
    APP_NAME: str = "Lecture Reports"
    ENVIRONMENT: str = "development"  # development | testing | production
    DEBUG: bool = True
    SECRET_KEY: str = "CHANGE_ME"
    API_VERSION: str = "v1"
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    # Database (postgres:// and sqlite:// URLs are switched to their async drivers)
    DATABASE_URL: str
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800
    DB_ECHO: bool = False

    # Tokens and passwords
    JWT_SECRET_KEY: str = "CHANGE_ME"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    BCRYPT_ROUNDS: int = 12

    # Comma-separated list of frontend origins
    CORS_ORIGINS_STR: str = "http://localhost:3000,http://localhost:5173"

    # Rate limiting (slowapi); point the storage at redis:// to share counters between workers
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_DEFAULT: str = "200/15 minutes"
    RATE_LIMIT_STORAGE_URI: str = "memory://"

    # Largest accepted request body in bytes
    MAX_REQUEST_SIZE: int = 1024 * 1024

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/lecture_reports.log"

    # Reports and ratings
    REPORT_LIST_LIMIT: int = 50
    RATING_LIST_LIMIT: int = 100
    MAX_WEEK: int = 52

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

    @field_validator("DATABASE_URL")
    @classmethod
    def use_async_driver(cls, v: str) -> str:
        for prefix, replacement in ASYNC_DRIVERS.items():
            if v.startswith(prefix):
                return replacement + v[len(prefix):]
        return v

    @property
    def CORS_ORIGINS(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS_STR.split(",") if origin.strip()]

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    def is_dev_mode(self) -> bool:
        return self.ENVIRONMENT != "production" or self.DEBUG


settings = Settings()

if settings.LOG_FILE:
    Path(settings.LOG_FILE).parent.mkdir(parents=True, exist_ok=True)
