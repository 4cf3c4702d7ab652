"""
ChatFile DAO

Persists metadata rows for files uploaded to S3.
"""

import logging
from uuid import UUID
from sqlalchemy.orm import Session
from saver_backend.database.entities.chat_files import ChatFile

logger = logging.getLogger("uvicorn")


class ChatFileDao:

    def createFile(self, session: Session, chat_file: ChatFile) -> ChatFile:
        try:
            session.add(chat_file)
            session.flush()
            return chat_file
        except Exception as e:
            logger.error(f"Error in ChatFileDao.createFile. Error Message: {e}")
            raise e

    def fetchFilesByChatId(self, session: Session, chat_id: UUID) -> list[ChatFile]:
        try:
            return (
                session.query(ChatFile)
                .filter(ChatFile.chat_id == chat_id)
                .order_by(ChatFile.created_at)
                .all()
            )
        except Exception as e:
            logger.error(f"Error in ChatFileDao.fetchFilesByChatId. Error Message: {e}")
            raise e
