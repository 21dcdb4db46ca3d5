from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class TaxonomyRecordOrm(Base):
    __tablename__ = "taxonomy_records"

    # Position in the list feed; forests are rebuilt in this order.
    position: Mapped[int] = mapped_column(Integer, primary_key=True)
    record_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    name: Mapped[str] = mapped_column(String, nullable=False, default="")
    type_key: Mapped[str] = mapped_column(String, nullable=False, default="")
    parent_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False)
    remark: Mapped[str] = mapped_column(Text, nullable=False, default="")


class TaxonomySyncStateOrm(Base):
    __tablename__ = "taxonomy_sync_state"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    last_synced_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    record_count: Mapped[int] = mapped_column(Integer, nullable=False)
