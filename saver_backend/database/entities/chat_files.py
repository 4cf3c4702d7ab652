"""
ChatFile ORM Model
==================

Metadata of a file uploaded into a case and stored in S3, kept in the
``chat_files`` table. The object itself lives at ``file_path`` in the bucket.
"""

from saver_backend.database.config.connection_engine import declarativeBase
from saver_backend.database.helpers.timestamps import utc_now
from sqlalchemy import ForeignKey, DateTime, TEXT, Integer, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from uuid import UUID
from datetime import datetime
import uuid


class ChatFile(declarativeBase):
    """ORM model for the `chat_files` table."""

    __tablename__ = "chat_files"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True)

    chat_id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), ForeignKey("chat_sessions.id"), nullable=False)

    user_id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), ForeignKey("app_user.id"), nullable=False)

    file_name: Mapped[str] = mapped_column(TEXT, nullable=False)
    """Sanitized original file name."""

    file_path: Mapped[str] = mapped_column(TEXT, nullable=False)
    """Object key inside the bucket: `{chat_id}/{uuid}.{ext}`."""

    content_type: Mapped[str] = mapped_column(TEXT, nullable=False)

    size: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    def __init__(self, chat_id: UUID, user_id: UUID, file_name: str, file_path: str, content_type: str, size: int):
        self.id = uuid.uuid4()
        self.chat_id = chat_id
        self.user_id = user_id
        self.file_name = file_name
        self.file_path = file_path
        self.content_type = content_type
        self.size = size
        self.created_at = utc_now()
