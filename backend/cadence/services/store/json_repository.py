"""
JSON Repository - Whole-collection file storage for session records.

The collection is a single JSON array. Every mutation loads the full
collection, applies one change and rewrites the file through a temporary
file plus os.replace, so readers never observe a partial write. Mutations
are serialized by a single-writer lock.
"""
import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import Any, List, Union

from pydantic import ValidationError as PydanticValidationError

from cadence.core.errors import NotFoundError, PersistenceError
from cadence.core.logging import get_logger
from cadence.models.schemas import SessionRecord
from cadence.services.store.repository import RecordChange, SessionRepository

logger = get_logger(__name__)


class JsonSessionRepository(SessionRepository):
    """File-backed repository rewriting the whole collection on each mutation."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = asyncio.Lock()

    async def list_all(self) -> List[SessionRecord]:
        return await self._load()

    async def get(self, record_id: str) -> SessionRecord:
        for record in await self._load():
            if record.id == record_id:
                return record
        raise NotFoundError(record_id)

    async def add(self, record: SessionRecord) -> SessionRecord:
        async with self._lock:
            records = await self._load()
            if any(existing.id == record.id for existing in records):
                raise PersistenceError(f"Duplicate session id: {record.id}")
            records.append(record)
            await self._save(records)
        return record

    async def update(self, record_id: str, change: RecordChange) -> SessionRecord:
        async with self._lock:
            records = await self._load()
            index = self._index_of(records, record_id)
            updated = change(records[index])
            records[index] = updated
            await self._save(records)
        return updated

    async def delete(self, record_id: str) -> SessionRecord:
        async with self._lock:
            records = await self._load()
            index = self._index_of(records, record_id)
            removed = records.pop(index)
            await self._save(records)
        return removed

    @staticmethod
    def _index_of(records: List[SessionRecord], record_id: str) -> int:
        for index, record in enumerate(records):
            if record.id == record_id:
                return index
        raise NotFoundError(record_id)

    # ========================================
    # File I/O
    # ========================================

    async def _load(self) -> List[SessionRecord]:
        raw = await asyncio.to_thread(self._read_file)
        try:
            return [SessionRecord.model_validate(item) for item in raw]
        except PydanticValidationError as e:
            logger.error("Corrupt session record in data file", path=str(self.path), error=str(e))
            raise PersistenceError(f"Corrupt session data in {self.path}") from e

    async def _save(self, records: List[SessionRecord]) -> None:
        await asyncio.to_thread(self._write_file, [record.to_dict() for record in records])

    def _read_file(self) -> List[Any]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            # No sessions stored yet
            return []
        except (OSError, ValueError) as e:
            logger.error("Failed to read session data", path=str(self.path), error=str(e))
            raise PersistenceError(f"Failed to read {self.path}") from e

        if not isinstance(data, list):
            logger.error("Session data file is not a JSON array", path=str(self.path))
            raise PersistenceError(f"Unexpected layout in {self.path}")
        return data

    def _write_file(self, data: List[dict]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
        except OSError as e:
            logger.error("Failed to prepare session data write", path=str(self.path), error=str(e))
            raise PersistenceError(f"Failed to write {self.path}") from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error("Failed to write session data", path=str(self.path), error=str(e))
            try:
                os.remove(tmp_path)
            except OSError:
                pass
            raise PersistenceError(f"Failed to write {self.path}") from e
