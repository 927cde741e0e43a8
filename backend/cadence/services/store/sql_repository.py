"""
SQL Repository - Per-record session storage through async SQLAlchemy.

Each mutation touches a single row inside its own transaction, so
concurrent writers never overwrite each other's records.
"""
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from cadence.core.database import create_engine, create_session_factory, init_db
from cadence.core.errors import NotFoundError, PersistenceError
from cadence.core.logging import get_logger
from cadence.models.schemas import SessionRecord
from cadence.models.session import SessionRow
from cadence.services.store.repository import RecordChange, SessionRepository

logger = get_logger(__name__)


class SqlSessionRepository(SessionRepository):
    """
    Database repository for session records.

    Usage:
        repository = await SqlSessionRepository.connect("sqlite+aiosqlite:///data/cadence.db")
        ...
        await repository.close()
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        engine: Optional[AsyncEngine] = None,
    ):
        self._session_factory = session_factory
        self._engine = engine

    @classmethod
    async def connect(cls, database_url: str) -> "SqlSessionRepository":
        """Create the engine, ensure tables exist and return a repository."""
        engine = create_engine(database_url)
        try:
            await init_db(engine)
        except SQLAlchemyError as e:
            await engine.dispose()
            raise PersistenceError("Failed to initialize session database") from e
        return cls(create_session_factory(engine), engine)

    async def list_all(self) -> List[SessionRecord]:
        try:
            async with self._session_factory() as db:
                result = await db.execute(select(SessionRow).order_by(SessionRow.seq))
                return [row.to_record() for row in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error("Failed to list session records", error=str(e))
            raise PersistenceError("Failed to read session records") from e

    async def get(self, record_id: str) -> SessionRecord:
        try:
            async with self._session_factory() as db:
                row = await self._find(db, record_id)
                return row.to_record()
        except SQLAlchemyError as e:
            logger.error("Failed to read session record", record_id=record_id, error=str(e))
            raise PersistenceError("Failed to read session record") from e

    async def add(self, record: SessionRecord) -> SessionRecord:
        try:
            async with self._session_factory() as db:
                async with db.begin():
                    db.add(SessionRow.from_record(record))
        except SQLAlchemyError as e:
            logger.error("Failed to insert session record", record_id=record.id, error=str(e))
            raise PersistenceError("Failed to write session record") from e
        return record

    async def update(self, record_id: str, change: RecordChange) -> SessionRecord:
        try:
            async with self._session_factory() as db:
                async with db.begin():
                    row = await self._find(db, record_id, for_update=True)
                    updated = change(row.to_record())
                    row.assign(updated)
        except SQLAlchemyError as e:
            logger.error("Failed to update session record", record_id=record_id, error=str(e))
            raise PersistenceError("Failed to write session record") from e
        return updated

    async def delete(self, record_id: str) -> SessionRecord:
        try:
            async with self._session_factory() as db:
                async with db.begin():
                    row = await self._find(db, record_id, for_update=True)
                    removed = row.to_record()
                    await db.delete(row)
        except SQLAlchemyError as e:
            logger.error("Failed to delete session record", record_id=record_id, error=str(e))
            raise PersistenceError("Failed to write session record") from e
        return removed

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()

    @staticmethod
    async def _find(db: AsyncSession, record_id: str, for_update: bool = False) -> SessionRow:
        stmt = select(SessionRow).where(SessionRow.id == record_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await db.execute(stmt)
        row = result.scalar_one_or_none()
        if row is None:
            raise NotFoundError(record_id)
        return row
