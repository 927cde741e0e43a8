"""
Cadence Sessions API endpoints.
"""
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from cadence.core.errors import NotFoundError, PersistenceError, ValidationError
from cadence.core.logging import get_logger
from cadence.models.schemas import SessionRecord, SessionStats
from cadence.services.stats import summarize
from cadence.services.store import SessionRecordStore

logger = get_logger(__name__)
router = APIRouter()


# ========================================
# Response Schemas
# ========================================

class SessionListResponse(BaseModel):
    """All stored sessions."""
    success: bool = True
    count: int
    data: list[SessionRecord]


class SessionResponse(BaseModel):
    """A single session record."""
    success: bool = True
    message: Optional[str] = None
    data: SessionRecord


class StatsResponse(BaseModel):
    """Summary statistics."""
    success: bool = True
    data: SessionStats


# ========================================
# Dependencies
# ========================================

def get_store(request: Request) -> SessionRecordStore:
    """Session record store created at application startup."""
    return request.app.state.store


async def _read_body(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError:
        raise HTTPException(
            status_code=400,
            detail={"error": "Request body must be valid JSON", "fields": ["body"]},
        )


def _validation_failed(error: ValidationError) -> HTTPException:
    return HTTPException(status_code=400, detail={"error": str(error), "fields": error.fields})


def _not_found() -> HTTPException:
    return HTTPException(status_code=404, detail="Session record not found")


def _storage_failed(action: str, error: PersistenceError) -> HTTPException:
    # Detail stays in the log, the client gets a generic message
    logger.error(f"Error {action}", error=str(error))
    return HTTPException(status_code=500, detail=f"Failed {action}")


# ========================================
# API Endpoints
# ========================================

@router.get("", response_model=SessionListResponse, response_model_exclude_none=True)
async def list_sessions(store: SessionRecordStore = Depends(get_store)):
    """
    Get all cadence session records.
    """
    try:
        records, count = await store.read_all()
    except PersistenceError as e:
        raise _storage_failed("retrieving cadence data", e)

    return SessionListResponse(count=count, data=records)


@router.post("", status_code=201, response_model=SessionResponse, response_model_exclude_none=True)
async def create_session(
    request: Request,
    store: SessionRecordStore = Depends(get_store),
):
    """
    Create a new cadence session record.
    """
    body = await _read_body(request)
    try:
        record = await store.create(body)
    except ValidationError as e:
        logger.info("Rejected session record", fields=e.fields)
        raise _validation_failed(e)
    except PersistenceError as e:
        raise _storage_failed("creating cadence record", e)

    return SessionResponse(message="Cadence record created successfully", data=record)


@router.get("/stats/summary", response_model=StatsResponse)
async def get_stats_summary(store: SessionRecordStore = Depends(get_store)):
    """
    Get summary statistics across all sessions.
    """
    try:
        records, _ = await store.read_all()
    except PersistenceError as e:
        raise _storage_failed("getting cadence statistics", e)

    return StatsResponse(data=summarize(records))


@router.get("/{record_id}", response_model=SessionResponse, response_model_exclude_none=True)
async def get_session(
    record_id: str,
    store: SessionRecordStore = Depends(get_store),
):
    """
    Get a specific session record by ID.
    """
    try:
        record = await store.read_by_id(record_id)
    except NotFoundError:
        raise _not_found()
    except PersistenceError as e:
        raise _storage_failed("retrieving cadence record", e)

    return SessionResponse(data=record)


@router.put("/{record_id}", response_model=SessionResponse, response_model_exclude_none=True)
async def update_session(
    record_id: str,
    request: Request,
    store: SessionRecordStore = Depends(get_store),
):
    """
    Update fields of a session record.
    """
    body = await _read_body(request)
    try:
        record = await store.update(record_id, body)
    except ValidationError as e:
        raise _validation_failed(e)
    except NotFoundError:
        raise _not_found()
    except PersistenceError as e:
        raise _storage_failed("updating cadence record", e)

    return SessionResponse(message="Cadence record updated successfully", data=record)


@router.delete("/{record_id}", response_model=SessionResponse, response_model_exclude_none=True)
async def delete_session(
    record_id: str,
    store: SessionRecordStore = Depends(get_store),
):
    """
    Delete a session record.
    """
    try:
        record = await store.delete(record_id)
    except NotFoundError:
        raise _not_found()
    except PersistenceError as e:
        raise _storage_failed("deleting cadence record", e)

    return SessionResponse(message="Cadence record deleted successfully", data=record)
