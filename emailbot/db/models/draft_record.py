"""ORM model for drafts: indexed lookup columns plus the full document as JSON text."""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from emailbot.db.base import Base, TimestampMixin


class DraftRecord(Base, TimestampMixin):
    """One row per draft. document holds the serialized Draft; the other columns mirror it for queries."""

    __tablename__ = "drafts"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    generated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    external_id: Mapped[Optional[str]] = mapped_column(String(512), nullable=True, index=True)
    thread_id: Mapped[Optional[str]] = mapped_column(String(512), nullable=True, index=True)
    client_email: Mapped[str] = mapped_column(String(512), nullable=False, index=True)
    is_followup: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    parent_draft_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    document: Mapped[str] = mapped_column(Text, nullable=False)
