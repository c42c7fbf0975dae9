from pathlib import Path
from typing import Literal, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── App ─────────────────────────────────────
    APP_NAME: str = "AccessSight"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    DEBUG: bool = True

    # ── Logging ─────────────────────────────────
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_MAX_BYTES: int = 10_000_000
    LOG_BACKUP_COUNT: int = 5

    # ── Database ────────────────────────────────
    DATABASE_URL: str = "sqlite+aiosqlite:///./accesssight.db"
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30

    # ── Browser / accessibility engine ──────────
    CHROMEDRIVER_PATH: Optional[str] = None
    NAVIGATION_TIMEOUT_MS: int = 60_000
    ENGINE_TIMEOUT_MS: int = 60_000
    ENGINE_SETTLE_WAIT_MS: int = 1_000

    # Internal ceiling for a whole scan request; None leaves it to the host
    SCAN_DEADLINE_SECONDS: Optional[float] = None

    # ── AI providers ────────────────────────────
    GOOGLE_GEMINI_API_KEY: Optional[str] = None
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    GEMINI_MODEL: str = "gemini-1.5-pro"

    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-3.5-turbo"

    AI_REQUEST_TIMEOUT_SECONDS: float = 25.0
    AI_MAX_CONNECTIONS: int = 20

    # ── History ─────────────────────────────────
    HISTORY_LIMIT: int = 50

    class Config:
        env_file = str(Path(__file__).parent.parent.parent / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
