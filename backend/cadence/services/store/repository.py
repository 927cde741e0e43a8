"""
Session Repository - Abstract persistence interface for session records.
"""
from abc import ABC, abstractmethod
from typing import Callable, List

from cadence.models.schemas import SessionRecord

RecordChange = Callable[[SessionRecord], SessionRecord]


class SessionRepository(ABC):
    """
    Storage engine behind the session record store.

    Implementations own durability and write atomicity. Validation, id
    generation and timestamps are handled by SessionRecordStore.
    """

    @abstractmethod
    async def list_all(self) -> List[SessionRecord]:
        """Return every record in insertion order."""
        pass

    @abstractmethod
    async def get(self, record_id: str) -> SessionRecord:
        """
        Get one record.

        Raises:
            NotFoundError: No record with this id
        """
        pass

    @abstractmethod
    async def add(self, record: SessionRecord) -> SessionRecord:
        """Append a new record."""
        pass

    @abstractmethod
    async def update(self, record_id: str, change: RecordChange) -> SessionRecord:
        """
        Replace a record with `change(current)` in one atomic step.

        Raises:
            NotFoundError: No record with this id
        """
        pass

    @abstractmethod
    async def delete(self, record_id: str) -> SessionRecord:
        """
        Remove and return a record.

        Raises:
            NotFoundError: No record with this id
        """
        pass

    async def close(self) -> None:
        """Release any held resources."""
        pass
