"""
ChatMessage DAO

Append and read case messages. There is deliberately no update method:
messages are append-only.
"""

import logging
from uuid import UUID
from sqlalchemy import asc
from sqlalchemy.orm import Session
from saver_backend.database.entities.chat_messages import ChatMessage

logger = logging.getLogger("uvicorn")


class ChatMessageDao:
    """
    Data Access Object (DAO) for managing ChatMessage entities.
    """

    def createMessage(self, session: Session, message: ChatMessage) -> ChatMessage:
        """
        Stage a new message.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        message : ChatMessage
            Entity to add.

        Returns
        -------
        ChatMessage
            The flushed entity.
        """
        try:
            session.add(message)
            session.flush()
            return message
        except Exception as e:
            logger.error(f"Error in ChatMessageDao.createMessage. Error Message: {e}")
            raise e

    def fetchMessagesByChatId(self, session: Session, chat_id: UUID) -> list[ChatMessage]:
        """
        Fetch all messages of a chat in chronological order.
        """
        try:
            return (
                session.query(ChatMessage)
                .filter(ChatMessage.chat_id == chat_id)
                .order_by(asc(ChatMessage.created_at))
                .all()
            )
        except Exception as e:
            logger.error(f"Error in ChatMessageDao.fetchMessagesByChatId. Error Message: {e}")
            raise e
