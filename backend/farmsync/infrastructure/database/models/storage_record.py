"""SQLAlchemy ORM model for the edge's durable key/value records."""

from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from farmsync.infrastructure.database.base import Base


class StorageRecordModel(Base):
    """ORM model — maps to the 'storage_records' table."""

    __tablename__ = "storage_records"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<StorageRecordModel(key='{self.key}', size={len(self.value)})>"
