"""
ChatSession DAO

Purpose
-------
Provides a thin data-access layer for the `ChatSession` ORM entity:
- Create chat sessions (cases)
- Query by id or by owner (newest first)
- Update the case title and the last-message preview
- Delete a case together with its messages and file rows

Design
------
- Requires an active SQLAlchemy `Session` supplied by the caller; transaction
  boundaries stay in the service layer.
- Messages and file rows are removed explicitly before their parent chat, so
  no ORM relationship or database cascade is needed.
"""

import logging
from uuid import UUID
from sqlalchemy import desc
from sqlalchemy.orm import Session
from saver_backend.database.entities.chat_sessions import ChatSession
from saver_backend.database.entities.chat_messages import ChatMessage
from saver_backend.database.entities.chat_files import ChatFile

logger = logging.getLogger("uvicorn")


class ChatSessionDao:
    """
    Data Access Object (DAO) for managing ChatSession entities.
    """

    def createChatSession(self, session: Session, chat: ChatSession) -> ChatSession:
        """
        Stage a new chat session.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        chat : ChatSession
            Entity to add.

        Returns
        -------
        ChatSession
            The flushed entity.
        """
        try:
            session.add(chat)
            session.flush()
            return chat
        except Exception as e:
            logger.error(f"Error in ChatSessionDao.createChatSession. Error: {e}")
            raise e

    def fetchChatSessionById(self, session: Session, chat_id: UUID) -> ChatSession | None:
        try:
            return session.query(ChatSession).filter(ChatSession.id == chat_id).one_or_none()
        except Exception as e:
            logger.error(f"Error in ChatSessionDao.fetchChatSessionById. Error: {e}")
            raise e

    def fetchChatSessionsByUserId(self, session: Session, user_id: UUID) -> list[ChatSession]:
        """
        Fetch all chat sessions owned by a user, newest first.
        """
        try:
            return (
                session.query(ChatSession)
                .filter(ChatSession.user_id == user_id)
                .order_by(desc(ChatSession.created_at))
                .all()
            )
        except Exception as e:
            logger.error(f"Error in ChatSessionDao.fetchChatSessionsByUserId. Error: {e}")
            raise e

    def updateCaseTitle(self, session: Session, chat_id: UUID, case_title: str, timestamp) -> ChatSession:
        try:
            chat = session.query(ChatSession).filter(ChatSession.id == chat_id).one()
            chat.case_title = case_title
            chat.updated_at = timestamp
            return chat
        except Exception as e:
            logger.error(f"Error in ChatSessionDao.updateCaseTitle. Error: {e}")
            raise e

    def updateLastMessage(self, session: Session, chat_id: UUID, last_message: str, timestamp) -> None:
        """
        Refresh the preview text and `updated_at` of a chat after a message insert.
        """
        try:
            chat = session.query(ChatSession).filter(ChatSession.id == chat_id).one()
            chat.last_message = last_message
            chat.updated_at = timestamp
        except Exception as e:
            logger.error(f"Error in ChatSessionDao.updateLastMessage. Error: {e}")
            raise e

    def deleteChatSession(self, session: Session, chat_id: UUID) -> None:
        try:
            session.query(ChatMessage).filter(ChatMessage.chat_id == chat_id).delete(synchronize_session=False)
            session.query(ChatFile).filter(ChatFile.chat_id == chat_id).delete(synchronize_session=False)
            session.query(ChatSession).filter(ChatSession.id == chat_id).delete(synchronize_session=False)
        except Exception as e:
            logger.error(f"Error in ChatSessionDao.deleteChatSession. Error: {e}")
            raise e

    def deleteChatSessionsByUserId(self, session: Session, user_id: UUID) -> None:
        try:
            chat_ids = [chat.id for chat in session.query(ChatSession.id).filter(ChatSession.user_id == user_id)]
            for chat_id in chat_ids:
                self.deleteChatSession(session, chat_id)
        except Exception as e:
            logger.error(f"Error in ChatSessionDao.deleteChatSessionsByUserId. Error: {e}")
            raise e
