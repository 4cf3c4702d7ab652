"""
ChatSession ORM Model
=====================

A ``ChatSession`` is one patient case: a titled conversation between a
healthcare worker and the assistant, stored in ``chat_sessions``.

Key features
~~~~~~~~~~~~
- UUID primary key (``id``)
- Owner (``user_id`` → ``app_user.id``)
- Editable ``case_title`` (defaults to "New Case")
- ``last_message`` preview and ``updated_at``, refreshed on every message insert
"""

from saver_backend.database.config.connection_engine import declarativeBase
from saver_backend.database.helpers.timestamps import utc_now
from sqlalchemy import ForeignKey, DateTime, TEXT, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from uuid import UUID
from typing import Optional
from datetime import datetime
import uuid

DEFAULT_CASE_TITLE = "New Case"


class ChatSession(declarativeBase):
    """
    ORM model for the `chat_sessions` table.

    Attributes
    ----------
    id : UUID
        Primary key.
    user_id : UUID
        Owner of the case.
    case_title : str
        Human-readable case title.
    last_message : str | None
        Content of the newest message, for list previews.
    created_at, updated_at : datetime
        UTC timestamps.
    """

    __tablename__ = "chat_sessions"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True)

    user_id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), ForeignKey("app_user.id"), nullable=False)

    case_title: Mapped[str] = mapped_column(TEXT, nullable=False)

    last_message: Mapped[Optional[str]] = mapped_column(TEXT, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    def __init__(self, user_id: UUID, case_title: str | None = None, chat_id: UUID | None = None):
        self.id = chat_id or uuid.uuid4()
        self.user_id = user_id
        self.case_title = case_title or DEFAULT_CASE_TITLE
        self.last_message = None
        self.created_at = utc_now()
        self.updated_at = self.created_at

    def to_dict(self) -> dict:
        """Row as a plain dict, the shape returned by the record store."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "case_title": self.case_title,
            "last_message": self.last_message,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def __str__(self) -> str:
        return f"ChatSession: id:{self.id}, user: {self.user_id}, title: {self.case_title}"
