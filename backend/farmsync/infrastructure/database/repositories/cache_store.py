"""Concrete CacheStore backed by SQLAlchemy — one row per (partition, key)."""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from farmsync.application.interfaces import CacheStore
from farmsync.domain.entities import CachedResponse
from farmsync.infrastructure.database.models import CacheEntryModel


class SQLAlchemyCacheStore(CacheStore):
    """Implements the CacheStore port.

    The store outlives any single request, so every operation opens its own
    short-lived session from the factory and commits before returning.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    @staticmethod
    def _to_entity(model: CacheEntryModel) -> CachedResponse:
        """Map ORM model → domain entity."""
        return CachedResponse(
            status=model.status,
            status_text=model.status_text,
            headers=dict(model.headers or {}),
            body=model.body,
            url=model.url,
        )

    async def match(self, key: str, partition: str | None = None) -> CachedResponse | None:
        stmt = select(CacheEntryModel).where(CacheEntryModel.key == key)
        if partition is not None:
            stmt = stmt.where(CacheEntryModel.partition == partition)
        stmt = stmt.order_by(CacheEntryModel.id).limit(1)

        async with self._session_factory() as session:
            result = await session.execute(stmt)
            model = result.scalar_one_or_none()
            return self._to_entity(model) if model else None

    async def put(self, partition: str, key: str, response: CachedResponse) -> None:
        async with self._session_factory() as session:
            result = await session.execute(
                select(CacheEntryModel).where(
                    CacheEntryModel.partition == partition,
                    CacheEntryModel.key == key,
                )
            )
            model = result.scalar_one_or_none()
            if model is None:
                model = CacheEntryModel(partition=partition, key=key)
                session.add(model)

            model.status = response.status
            model.status_text = response.status_text
            model.headers = dict(response.headers)
            model.body = response.body
            model.url = response.url or key
            await session.commit()

    async def keys(self, partition: str) -> list[str]:
        stmt = (
            select(CacheEntryModel.key)
            .where(CacheEntryModel.partition == partition)
            .order_by(CacheEntryModel.id)
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def partitions(self) -> list[str]:
        stmt = select(CacheEntryModel.partition).distinct().order_by(CacheEntryModel.partition)
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def delete_partition(self, partition: str) -> bool:
        async with self._session_factory() as session:
            result = await session.execute(
                delete(CacheEntryModel).where(CacheEntryModel.partition == partition)
            )
            await session.commit()
            return (result.rowcount or 0) > 0
