"""
Support DAO

Data access for support conversations (`SupportChat`) and their messages
(`SupportMessage`).

Design
------
- Caller supplies the session; no commit happens here.
- Listing helpers order chats newest first and messages oldest first, the
  order the back-office shows them in.
"""

import logging
from uuid import UUID
from sqlalchemy import asc, desc
from sqlalchemy.orm import Session
from saver_backend.database.entities.support import SupportChat, SupportMessage, SUPPORT_OPEN

logger = logging.getLogger("uvicorn")


class SupportDao:
    """
    Data Access Object (DAO) for support chats and messages.
    """

    def createChat(self, session: Session, chat: SupportChat) -> SupportChat:
        try:
            session.add(chat)
            session.flush()
            return chat
        except Exception as e:
            logger.error(f"Error in SupportDao.createChat. Error Message: {e}")
            raise e

    def fetchChatById(self, session: Session, chat_id: UUID) -> SupportChat | None:
        try:
            return session.query(SupportChat).filter(SupportChat.id == chat_id).one_or_none()
        except Exception as e:
            logger.error(f"Error in SupportDao.fetchChatById. Error Message: {e}")
            raise e

    def fetchChats(self, session: Session, user_id: UUID | None = None) -> list[SupportChat]:
        """
        Support chats, newest first; only those of `user_id` when given.
        """
        try:
            query = session.query(SupportChat)
            if user_id is not None:
                query = query.filter(SupportChat.user_id == user_id)
            return query.order_by(desc(SupportChat.created_at)).all()
        except Exception as e:
            logger.error(f"Error in SupportDao.fetchChats. Error Message: {e}")
            raise e

    def updateChatStatus(self, session: Session, chat_id: UUID, status: str) -> SupportChat:
        try:
            chat = session.query(SupportChat).filter(SupportChat.id == chat_id).one()
            chat.status = status
            return chat
        except Exception as e:
            logger.error(f"Error in SupportDao.updateChatStatus. Error Message: {e}")
            raise e

    def createMessage(self, session: Session, message: SupportMessage) -> SupportMessage:
        try:
            session.add(message)
            session.flush()
            return message
        except Exception as e:
            logger.error(f"Error in SupportDao.createMessage. Error Message: {e}")
            raise e

    def fetchMessagesByChatId(self, session: Session, chat_id: UUID) -> list[SupportMessage]:
        try:
            return (
                session.query(SupportMessage)
                .filter(SupportMessage.chat_id == chat_id)
                .order_by(asc(SupportMessage.created_at))
                .all()
            )
        except Exception as e:
            logger.error(f"Error in SupportDao.fetchMessagesByChatId. Error Message: {e}")
            raise e

    def countOpenChats(self, session: Session) -> int:
        try:
            return session.query(SupportChat).filter(SupportChat.status == SUPPORT_OPEN).count()
        except Exception as e:
            logger.error(f"Error in SupportDao.countOpenChats. Error Message: {e}")
            raise e

    def deleteByUserId(self, session: Session, user_id: UUID) -> None:
        """Remove a user's support chats (with all their messages) and the user's own messages."""
        try:
            chat_ids = [chat.id for chat in session.query(SupportChat.id).filter(SupportChat.user_id == user_id)]
            if chat_ids:
                session.query(SupportMessage).filter(SupportMessage.chat_id.in_(chat_ids)).delete(synchronize_session=False)
            session.query(SupportMessage).filter(SupportMessage.user_id == user_id).delete(synchronize_session=False)
            session.query(SupportChat).filter(SupportChat.user_id == user_id).delete(synchronize_session=False)
        except Exception as e:
            logger.error(f"Error in SupportDao.deleteByUserId. Error Message: {e}")
            raise e
