from datetime import datetime, timezone

from sqlalchemy import Column, String, Text, DateTime

from storefront.data.database import Base


class StorageEntryModel(Base):
    __tablename__ = "storage_entries"

    key = Column(String(100), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
