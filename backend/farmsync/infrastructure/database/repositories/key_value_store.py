"""Concrete KeyValueStore backed by SQLAlchemy."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from farmsync.application.interfaces import KeyValueStore
from farmsync.infrastructure.database.models import StorageRecordModel


class SQLAlchemyKeyValueStore(KeyValueStore):
    """Implements the KeyValueStore port with one row per key."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get(self, key: str) -> str | None:
        async with self._session_factory() as session:
            model = await session.get(StorageRecordModel, key)
            return model.value if model else None

    async def set(self, key: str, value: str) -> None:
        async with self._session_factory() as session:
            model = await session.get(StorageRecordModel, key)
            if model is None:
                session.add(StorageRecordModel(key=key, value=value))
            else:
                model.value = value
            await session.commit()

    async def remove(self, key: str) -> None:
        async with self._session_factory() as session:
            model = await session.get(StorageRecordModel, key)
            if model is not None:
                await session.delete(model)
                await session.commit()

    async def items(self, prefix: str = "") -> dict[str, str]:
        stmt = select(StorageRecordModel).order_by(StorageRecordModel.key)
        if prefix:
            stmt = stmt.where(StorageRecordModel.key.startswith(prefix, autoescape=True))
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return {row.key: row.value for row in result.scalars().all()}
