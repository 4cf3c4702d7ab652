"""
Service-layer operations for support conversations and enterprise leads.

All functions are `@transactional`; callers pass arguments by keyword.
Owners may read and write their own support chats, admins any of them.
A closed chat accepts no further messages from anyone.
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from saver_backend.database.helpers.transactionManagement import transactional
from saver_backend.database.daos.support_dao import SupportDao
from saver_backend.database.daos.enterprise_lead_dao import EnterpriseLeadDao
from saver_backend.database.entities.support import SupportChat, SupportMessage, SUPPORT_OPEN, SUPPORT_CLOSED
from saver_backend.database.entities.enterprise_leads import EnterpriseLead
from saver_backend.relay.errors import AccessDeniedError, NotFoundError, ValidationFailedError

logger = logging.getLogger("uvicorn")


def _readable_chat(session: Session, user_id: UUID, chat_id: UUID, as_admin: bool) -> SupportChat:
    chat = SupportDao().fetchChatById(session=session, chat_id=chat_id)
    if chat is None:
        raise NotFoundError("Support chat not found")
    if not as_admin and chat.user_id != user_id:
        raise AccessDeniedError("This support chat belongs to another user")
    return chat


@transactional
def open_support_chat(session: Session, user_id: UUID) -> dict:
    """
    Return the caller's open support chat, creating one when none is open.
    """
    support_dao = SupportDao()
    for chat in support_dao.fetchChats(session=session, user_id=user_id):
        if chat.status == SUPPORT_OPEN:
            return chat.to_dict()
    chat = support_dao.createChat(session=session, chat=SupportChat(user_id=user_id))
    logger.info(f"Support chat {chat.id} opened by {user_id}")
    return chat.to_dict()


@transactional
def list_support_chats(session: Session, user_id: Optional[UUID] = None) -> list[dict]:
    """Support chats newest first; only the caller's when `user_id` is given."""
    return [chat.to_dict() for chat in SupportDao().fetchChats(session=session, user_id=user_id)]


@transactional
def get_support_chat(session: Session, user_id: UUID, chat_id: UUID, as_admin: bool = False) -> dict:
    return _readable_chat(session, user_id, chat_id, as_admin).to_dict()


@transactional
def read_support_messages(session: Session, user_id: UUID, chat_id: UUID, as_admin: bool = False) -> list[dict]:
    """Messages of a support chat, oldest first (owner or admin)."""
    _readable_chat(session, user_id, chat_id, as_admin)
    return [message.to_dict() for message in SupportDao().fetchMessagesByChatId(session=session, chat_id=chat_id)]


@transactional
def post_support_message(session: Session, user_id: UUID, chat_id: UUID, content: str, as_admin: bool = False) -> dict:
    """
    Append a message to a support chat.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session (injected by @transactional).
    user_id : UUID
        Author.
    chat_id : UUID
        Target support chat.
    content : str
        Message text (not blank).
    as_admin : bool
        Author acts as support staff: may write into any chat and the message
        is flagged `is_admin`.

    Returns
    -------
    dict
        The stored message.

    Raises
    ------
    ValidationFailedError
        Blank content, or the chat is closed.
    """
    text = (content or "").strip()
    if not text:
        raise ValidationFailedError("Message cannot be empty")
    chat = _readable_chat(session, user_id, chat_id, as_admin)
    if chat.status == SUPPORT_CLOSED:
        raise ValidationFailedError("This support chat is closed")
    message = SupportDao().createMessage(
        session=session,
        message=SupportMessage(chat_id=chat_id, user_id=user_id, content=text, is_admin=as_admin),
    )
    return message.to_dict()


@transactional
def close_support_chat(session: Session, chat_id: UUID) -> dict:
    support_dao = SupportDao()
    if support_dao.fetchChatById(session=session, chat_id=chat_id) is None:
        raise NotFoundError("Support chat not found")
    return support_dao.updateChatStatus(session=session, chat_id=chat_id, status=SUPPORT_CLOSED).to_dict()


@transactional
def create_lead(
    session: Session,
    company_name: str,
    contact_name: str,
    email: str,
    phone: Optional[str] = None,
    message: Optional[str] = None,
) -> dict:
    """
    Record a contact-sales request with status `new`.

    A blank message becomes "Enterprise plan inquiry".
    """
    if not company_name.strip() or not contact_name.strip() or not email.strip():
        raise ValidationFailedError("Company name, contact name and email are required")
    lead = EnterpriseLeadDao().createLead(
        session=session,
        lead=EnterpriseLead(
            company_name=company_name.strip(),
            contact_name=contact_name.strip(),
            email=email.strip(),
            phone=phone,
            message=(message or "").strip() or None,
        ),
    )
    return lead_details(lead)


def lead_details(lead: EnterpriseLead) -> dict:
    return {
        "id": lead.id,
        "company_name": lead.company_name,
        "contact_name": lead.contact_name,
        "email": lead.email,
        "phone": lead.phone,
        "message": lead.message,
        "status": lead.status,
        "created_at": lead.created_at,
    }
