from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# ---------------------------
# Key-value: sl_settings
# ---------------------------


class SlSetting(Base):
    """One synced application setting (sheet list, logo URL, store info)."""

    __tablename__ = "sl_settings"

    key: Mapped[str] = mapped_column(String, primary_key=True)
    # Arbitrary JSON document; callers validate the shape on read.
    value: Mapped[Any] = mapped_column(JSON, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
