"""
Session data structures shared by the tracker, the store and the API.

Field names are camelCase because they are the persisted and wire format.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def format_iso(value: datetime) -> str:
    """Format a datetime as ISO-8601 UTC with millisecond precision."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def reject_bool(value: Any) -> Any:
    """Refuse JSON booleans before lax numeric coercion turns them into 0/1."""
    if isinstance(value, bool):
        raise ValueError("must be a number, not a boolean")
    return value


class SessionRecord(BaseModel):
    """A finished session as persisted by the record store."""

    id: str
    timestamp: str
    averageCadence: float = Field(..., ge=0)
    totalSteps: int = Field(..., ge=0)
    duration: float = Field(..., ge=0)
    createdAt: str
    updatedAt: Optional[str] = None

    @property
    def formatted_duration(self) -> str:
        return format_duration(self.duration)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage and API responses."""
        return self.model_dump(exclude_none=True)


class SessionCreate(BaseModel):
    """Fields required to create a session record."""

    model_config = ConfigDict(extra="ignore")

    timestamp: datetime
    averageCadence: float = Field(..., ge=0, allow_inf_nan=False)
    totalSteps: int = Field(..., ge=0)
    duration: float = Field(..., ge=0, allow_inf_nan=False)

    @field_validator("averageCadence", "totalSteps", "duration", mode="before")
    @classmethod
    def numbers_not_bool(cls, value: Any) -> Any:
        return reject_bool(value)


class SessionPatch(BaseModel):
    """
    Partial update of a session record.

    Every updatable field is optional; omitted or null fields keep their
    current value. `id` and `createdAt` are not updatable and unknown keys
    are ignored.
    """

    model_config = ConfigDict(extra="ignore")

    timestamp: Optional[datetime] = None
    averageCadence: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    totalSteps: Optional[int] = Field(default=None, ge=0)
    duration: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)

    @field_validator("averageCadence", "totalSteps", "duration", mode="before")
    @classmethod
    def numbers_not_bool(cls, value: Any) -> Any:
        return reject_bool(value)


def apply_patch(record: SessionRecord, patch: SessionPatch, now: datetime) -> SessionRecord:
    """Merge a patch onto a record, stamping `updatedAt`."""
    changes: Dict[str, Any] = patch.model_dump(exclude_unset=True, exclude_none=True)
    if "timestamp" in changes:
        changes["timestamp"] = format_iso(changes["timestamp"])
    changes["updatedAt"] = format_iso(now)
    return record.model_copy(update=changes)


class FinishedSession(BaseModel):
    """Payload emitted by the tracker when a session stops."""

    timestamp: str
    averageCadence: float
    totalSteps: int
    duration: float

    @property
    def formatted_duration(self) -> str:
        return format_duration(self.duration)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump()


class SessionStats(BaseModel):
    """Summary statistics across all stored sessions."""

    totalRecords: int = 0
    averageCadence: float = 0
    totalSteps: int = 0
    totalDuration: float = 0


def format_duration(seconds: float) -> str:
    """Format seconds as MM:SS."""
    total = int(seconds)
    return f"{total // 60:02d}:{total % 60:02d}"
