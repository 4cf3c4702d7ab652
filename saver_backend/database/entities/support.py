"""
Support ORM Models
==================

Support conversations between a user and the admin team:

- ``SupportChat`` (``support_chats``): one conversation, "open" or "closed".
- ``SupportMessage`` (``support_messages``): one message; ``is_admin`` tells
  which side wrote it.
"""

from saver_backend.database.config.connection_engine import declarativeBase
from saver_backend.database.helpers.timestamps import utc_now
from sqlalchemy import ForeignKey, DateTime, TEXT, Boolean, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from uuid import UUID
from datetime import datetime
import uuid

SUPPORT_OPEN = "open"
SUPPORT_CLOSED = "closed"


class SupportChat(declarativeBase):
    """ORM model for the `support_chats` table."""

    __tablename__ = "support_chats"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True)
    user_id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), ForeignKey("app_user.id"), nullable=False)
    status: Mapped[str] = mapped_column(TEXT, nullable=False, default=SUPPORT_OPEN)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    def __init__(self, user_id: UUID):
        self.id = uuid.uuid4()
        self.user_id = user_id
        self.status = SUPPORT_OPEN
        self.created_at = utc_now()

    def to_dict(self) -> dict:
        return {"id": self.id, "user_id": self.user_id, "status": self.status, "created_at": self.created_at}


class SupportMessage(declarativeBase):
    """ORM model for the `support_messages` table."""

    __tablename__ = "support_messages"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True)
    chat_id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), ForeignKey("support_chats.id"), nullable=False)
    user_id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), ForeignKey("app_user.id"), nullable=False)
    content: Mapped[str] = mapped_column(TEXT, nullable=False)
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    def __init__(self, chat_id: UUID, user_id: UUID, content: str, is_admin: bool = False):
        self.id = uuid.uuid4()
        self.chat_id = chat_id
        self.user_id = user_id
        self.content = content
        self.is_admin = is_admin
        self.created_at = utc_now()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "chat_id": self.chat_id,
            "user_id": self.user_id,
            "content": self.content,
            "is_admin": self.is_admin,
            "created_at": self.created_at,
        }
