"""SQLAlchemy ORM model for cached edge responses."""

from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, Integer, LargeBinary, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from farmsync.infrastructure.database.base import Base


class CacheEntryModel(Base):
    """ORM model — maps to the 'cache_entries' table, one row per (partition, key)."""

    __tablename__ = "cache_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    partition: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    key: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[int] = mapped_column(Integer, nullable=False)
    status_text: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    headers: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    body: Mapped[bytes] = mapped_column(LargeBinary, nullable=False, default=b"")
    url: Mapped[str] = mapped_column(Text, nullable=False, default="")
    stored_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("partition", "key", name="uq_cache_entries_partition_key"),
    )

    def __repr__(self) -> str:
        return f"<CacheEntryModel(partition='{self.partition}', key='{self.key}', status={self.status})>"
