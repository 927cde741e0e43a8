"""
Session Record Store - Validated CRUD over finished cadence sessions.
"""
import uuid
from datetime import datetime
from typing import Any, Callable, List, Mapping, Tuple, Type, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from cadence.core.errors import ValidationError
from cadence.core.logging import get_logger
from cadence.models.schemas import (
    SessionCreate,
    SessionPatch,
    SessionRecord,
    apply_patch,
    format_iso,
    utc_now,
)
from cadence.services.store.repository import SessionRepository

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class SessionRecordStore:
    """
    Keyed collection of finished sessions.

    Validates input, generates ids and timestamps, and delegates storage
    to the injected repository.

    Usage:
        store = SessionRecordStore(JsonSessionRepository("data/cadence.json"))
        record = await store.create({
            "timestamp": "2024-01-01T00:00:00Z",
            "averageCadence": 160,
            "totalSteps": 1200,
            "duration": 450,
        })
    """

    def __init__(
        self,
        repository: SessionRepository,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ):
        self.repository = repository
        self._clock = clock
        self._id_factory = id_factory

    async def create(self, fields: Any) -> SessionRecord:
        """
        Create a new session record.

        Args:
            fields: Mapping with timestamp, averageCadence, totalSteps, duration

        Returns:
            The stored record

        Raises:
            ValidationError: A required field is missing or malformed
            PersistenceError: The record could not be stored
        """
        data = _validate(SessionCreate, fields)
        record = SessionRecord(
            id=self._id_factory(),
            timestamp=format_iso(data.timestamp),
            averageCadence=data.averageCadence,
            totalSteps=data.totalSteps,
            duration=data.duration,
            createdAt=format_iso(self._clock()),
        )
        await self.repository.add(record)
        logger.info("Session record created", record_id=record.id)
        return record

    async def read_all(self) -> Tuple[List[SessionRecord], int]:
        """Return all records in insertion order together with their count."""
        records = await self.repository.list_all()
        return records, len(records)

    async def read_by_id(self, record_id: str) -> SessionRecord:
        return await self.repository.get(record_id)

    async def update(self, record_id: str, fields: Union[SessionPatch, Any]) -> SessionRecord:
        """
        Merge supplied fields onto an existing record.

        Unspecified fields are retained; `id` and `createdAt` never change.

        Raises:
            ValidationError: A supplied field is malformed
            NotFoundError: No record with this id
        """
        patch = fields if isinstance(fields, SessionPatch) else _validate(SessionPatch, fields)
        now = self._clock()
        record = await self.repository.update(
            record_id, lambda current: apply_patch(current, patch, now)
        )
        logger.info("Session record updated", record_id=record_id)
        return record

    async def delete(self, record_id: str) -> SessionRecord:
        record = await self.repository.delete(record_id)
        logger.info("Session record deleted", record_id=record_id)
        return record


def _validate(model: Type[ModelT], fields: Any) -> ModelT:
    """Validate raw input against a model, raising our ValidationError."""
    if not isinstance(fields, Mapping):
        raise ValidationError(["body"], "Request body must be a JSON object")

    try:
        return model.model_validate(dict(fields))
    except PydanticValidationError as e:
        missing: List[str] = []
        invalid: List[str] = []
        for error in e.errors():
            name = ".".join(str(part) for part in error["loc"]) or "body"
            target = missing if error["type"] == "missing" else invalid
            if name not in target:
                target.append(name)

        parts = []
        if missing:
            parts.append(f"Missing required fields: {', '.join(missing)}")
        if invalid:
            parts.append(f"Invalid fields: {', '.join(invalid)}")
        raise ValidationError(missing + invalid, "; ".join(parts)) from e
