"""
Session record database model.
"""
from typing import Optional

from sqlalchemy import Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from cadence.core.database import Base
from cadence.models.schemas import SessionRecord


class SessionRow(Base):
    """Finished cadence session stored in database."""

    __tablename__ = "cadence_sessions"

    # Autoincrement sequence keeps insertion order
    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(36), unique=True, index=True, nullable=False)
    timestamp: Mapped[str] = mapped_column(String(32), nullable=False)
    average_cadence: Mapped[float] = mapped_column(Float, nullable=False)
    total_steps: Mapped[int] = mapped_column(Integer, nullable=False)
    duration: Mapped[float] = mapped_column(Float, nullable=False)
    created_at: Mapped[str] = mapped_column(String(32), nullable=False)
    updated_at: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)

    @classmethod
    def from_record(cls, record: SessionRecord) -> "SessionRow":
        row = cls(id=record.id)
        row.assign(record)
        return row

    def assign(self, record: SessionRecord) -> None:
        """Copy every mutable field from a record."""
        self.timestamp = record.timestamp
        self.average_cadence = record.averageCadence
        self.total_steps = record.totalSteps
        self.duration = record.duration
        self.created_at = record.createdAt
        self.updated_at = record.updatedAt

    def to_record(self) -> SessionRecord:
        return SessionRecord(
            id=self.id,
            timestamp=self.timestamp,
            averageCadence=self.average_cadence,
            totalSteps=self.total_steps,
            duration=self.duration,
            createdAt=self.created_at,
            updatedAt=self.updated_at,
        )
