"""
Store module - Persistence of finished cadence sessions.

This module provides:
- SessionRepository interface with JSON-file and SQL implementations
- SessionRecordStore for validated CRUD
- build_repository to pick a backend from settings
"""
from cadence.core.config import Settings
from cadence.services.store.json_repository import JsonSessionRepository
from cadence.services.store.repository import SessionRepository
from cadence.services.store.sql_repository import SqlSessionRepository
from cadence.services.store.store import SessionRecordStore


async def build_repository(settings: Settings) -> SessionRepository:
    """Create the repository selected by STORAGE_BACKEND."""
    backend = settings.STORAGE_BACKEND.lower()
    if backend == "json":
        return JsonSessionRepository(settings.DATA_FILE)
    if backend == "sql":
        return await SqlSessionRepository.connect(settings.DATABASE_URL)
    raise ValueError(f"Unsupported storage backend: {settings.STORAGE_BACKEND}")


__all__ = [
    "SessionRepository",
    "JsonSessionRepository",
    "SqlSessionRepository",
    "SessionRecordStore",
    "build_repository",
]
