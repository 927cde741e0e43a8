"""
Session Sinks - Destinations for finished tracking sessions.

A sink hands a FinishedSession to the record store and reports the
outcome as a SaveResult instead of raising, so the tracker decides
what to do with failures.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from cadence.core.config import settings
from cadence.core.errors import CadenceError, NetworkSaveError
from cadence.core.logging import get_logger
from cadence.models.schemas import FinishedSession
from cadence.services.store.store import SessionRecordStore

logger = get_logger(__name__)


@dataclass
class SaveResult:
    """Outcome of one save attempt."""
    ok: bool
    record: Optional[Dict[str, Any]] = None
    error: Optional[NetworkSaveError] = None

    @classmethod
    def success(cls, record: Optional[Dict[str, Any]] = None) -> "SaveResult":
        return cls(ok=True, record=record)

    @classmethod
    def failure(cls, error: NetworkSaveError) -> "SaveResult":
        return cls(ok=False, error=error)


class SessionSink(ABC):
    """Abstract destination for finished sessions."""

    @abstractmethod
    async def save(self, session: FinishedSession) -> SaveResult:
        """Persist one finished session."""
        pass


class StoreSessionSink(SessionSink):
    """Saves sessions straight into an in-process record store."""

    def __init__(self, store: SessionRecordStore):
        self.store = store

    async def save(self, session: FinishedSession) -> SaveResult:
        try:
            record = await self.store.create(session.to_payload())
        except CadenceError as e:
            return SaveResult.failure(NetworkSaveError(f"Failed to store session: {e}"))
        return SaveResult.success(record.to_dict())


class HttpSessionSink(SessionSink):
    """
    Uploads sessions to the cadence backend over HTTP.

    Usage:
        sink = HttpSessionSink("http://localhost:3000")
        result = await sink.save(session)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
        path: str = "/api/cadence",
    ):
        self.base_url = (base_url or settings.CADENCE_API_URL).rstrip("/")
        self.url = f"{self.base_url}{path}"
        self.timeout = timeout if timeout is not None else settings.SAVE_TIMEOUT_SECONDS
        self._client = client

    async def save(self, session: FinishedSession) -> SaveResult:
        payload = session.to_payload()
        try:
            if self._client is not None:
                response = await self._client.post(self.url, json=payload, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.url, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            return SaveResult.failure(
                NetworkSaveError(f"Failed to upload session to {self.url}: {type(e).__name__}: {e}")
            )

        try:
            body = response.json()
        except ValueError:
            logger.warning("Session upload returned a non-JSON body", status_code=response.status_code)
            return SaveResult.success()

        record = body.get("data") if isinstance(body, dict) else None
        return SaveResult.success(record)
