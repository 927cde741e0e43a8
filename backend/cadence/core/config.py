"""
Application configuration.
All values loaded from environment variables or a local .env file.
"""
from typing import List
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Storage
    # Supported backends: json (whole-collection file), sql (per-record rows)
    STORAGE_BACKEND: str = "json"
    DATA_FILE: str = "data/cadence.json"
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/cadence.db"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # CORS
    CORS_ORIGINS: List[str] = ["*"]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"  # json or console

    # Session upload from a tracking client
    CADENCE_API_URL: str = "http://localhost:3000"
    SAVE_TIMEOUT_SECONDS: float = 5.0

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
