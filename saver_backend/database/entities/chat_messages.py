"""
ChatMessage ORM Model
=====================

A single message of a case, stored in ``chat_messages``. Messages are
append-only: they are inserted and read, never updated.

- ``role`` is "user" for the caller and "assistant" for the model reply.
- ``attachments`` holds the storage paths of files uploaded alongside the message.
"""

from saver_backend.database.config.connection_engine import declarativeBase
from saver_backend.database.helpers.timestamps import utc_now
from sqlalchemy import ForeignKey, DateTime, TEXT, JSON, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from uuid import UUID
from typing import Optional
from datetime import datetime
import uuid

ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"
MESSAGE_ROLES = (ROLE_USER, ROLE_ASSISTANT)


class ChatMessage(declarativeBase):
    """
    ORM model for the `chat_messages` table.

    Attributes
    ----------
    id : UUID
        Primary key.
    chat_id : UUID
        Parent chat session.
    user_id : UUID
        Author identity (the case owner for both roles).
    role : str
        "user" | "assistant".
    content : str
        Message text.
    attachments : list[str] | None
        Storage paths of attached files.
    created_at : datetime
        Insertion time (UTC).
    """

    __tablename__ = "chat_messages"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True)

    chat_id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), ForeignKey("chat_sessions.id"), nullable=False)

    user_id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), ForeignKey("app_user.id"), nullable=False)

    role: Mapped[str] = mapped_column(TEXT, nullable=False)

    content: Mapped[str] = mapped_column(TEXT, nullable=False)

    attachments: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    def __init__(
        self,
        chat_id: UUID,
        user_id: UUID,
        role: str,
        content: str,
        attachments: list[str] | None = None,
        message_id: UUID | None = None,
    ):
        self.id = message_id or uuid.uuid4()
        self.chat_id = chat_id
        self.user_id = user_id
        self.role = role
        self.content = content
        self.attachments = list(attachments) if attachments else None
        self.created_at = utc_now()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "chat_id": self.chat_id,
            "user_id": self.user_id,
            "role": self.role,
            "content": self.content,
            "attachments": self.attachments or [],
            "created_at": self.created_at,
        }

    def __str__(self) -> str:
        return f"ChatMessage: chat:{self.chat_id}, role: {self.role}, created: {self.created_at}"
