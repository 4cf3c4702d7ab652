"""
Case and chat orchestration.

Two kinds of functions live here:

- Orchestrations (`submit_case`, `send_message`) are plain linear chains of
  calls. They are NOT `@transactional`: every insert goes through the gated
  record store, which commits it on its own. Nothing is rolled back when a
  later step fails.
- Reads and owner-side maintenance (`list_cases`, `list_case_messages`,
  `rename_case`, `delete_case`, `record_chat_file`) are ordinary
  `@transactional` service functions.
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from saver_backend.database.helpers.transactionManagement import transactional
from saver_backend.database.helpers.timestamps import utc_now
from saver_backend.database.daos.chat_session_dao import ChatSessionDao
from saver_backend.database.daos.chat_message_dao import ChatMessageDao
from saver_backend.database.daos.chat_file_dao import ChatFileDao
from saver_backend.database.entities.chat_sessions import ChatSession, DEFAULT_CASE_TITLE
from saver_backend.database.entities.chat_messages import ROLE_USER, ROLE_ASSISTANT
from saver_backend.database.entities.chat_files import ChatFile
from saver_backend.database.entities.user_status import SUBSCRIPTION_ACTIVE
from saver_backend.database.config.config import settings
from saver_backend.database.core.funcs import fetch_user_status
from saver_backend.api.prompt_utilities import CompletionClient, format_conversation
from saver_backend.relay.record_store import RecordStore, CHAT_SESSIONS, CHAT_MESSAGES
from saver_backend.relay.session_resolver import SessionResolver
from saver_backend.relay.errors import (
    AccessDeniedError,
    AuthenticationRequiredError,
    BlockedAccountError,
    BlockedCaseCreationError,
    CaseLimitReachedError,
    NotFoundError,
    ValidationFailedError,
)

logger = logging.getLogger("uvicorn")

MIN_CASE_DETAILS_LENGTH = 10


def _owned_chat(session: Session, user_id: UUID, chat_id: UUID) -> ChatSession:
    chat = ChatSessionDao().fetchChatSessionById(session=session, chat_id=chat_id)
    if chat is None:
        raise NotFoundError("Case not found")
    if chat.user_id != user_id:
        raise AccessDeniedError("This case belongs to another user")
    return chat


def submit_case(store: RecordStore, session_resolver: SessionResolver, case_details: Optional[str] = None) -> dict:
    """
    Open a new case, optionally with its first message.

    Sequence: resolve session → read status (blocking flags, free-tier limit)
    → insert the chat session through `store` → insert the first caller
    message through `store` when details were given.

    Parameters
    ----------
    store : RecordStore
        The gated record store of the request.
    session_resolver : SessionResolver
        Source of the caller identity.
    case_details : str, optional
        Opening description of the case; at least 10 non-blank characters.

    Returns
    -------
    dict
        {'chat': <chat_sessions row>, 'message': <chat_messages row> | None}

    Raises
    ------
    AuthenticationRequiredError
        No session.
    BlockedCaseCreationError, BlockedAccountError, CaseLimitReachedError
        The caller may not open (or describe) a case.
    ValidationFailedError
        Case details too short.
    """
    identity = session_resolver.current_identity()
    if identity is None:
        raise AuthenticationRequiredError()

    details = (case_details or "").strip()
    if case_details is not None and len(details) < MIN_CASE_DETAILS_LENGTH:
        raise ValidationFailedError(
            f"Case details too short: please provide at least {MIN_CASE_DETAILS_LENGTH} characters"
        )

    status = fetch_user_status(user_id=identity.user_id)
    if status is None:
        raise AccessDeniedError("Account status unavailable")
    if status.case_blocked:
        raise BlockedCaseCreationError()
    if details and status.is_blocked:
        raise BlockedAccountError()
    if status.subscription_status != SUBSCRIPTION_ACTIVE and status.case_count >= settings.FREE_TIER_CASE_LIMIT:
        raise CaseLimitReachedError()

    chat = store.insert(CHAT_SESSIONS, {"user_id": identity.user_id, "case_title": DEFAULT_CASE_TITLE})
    message = None
    if details:
        message = store.insert(
            CHAT_MESSAGES,
            {"chat_id": chat["id"], "user_id": identity.user_id, "role": ROLE_USER, "content": details},
        )
    logger.info(f"User {identity.user_id} opened case {chat['id']}")
    return {"chat": chat, "message": message}


def send_message(
    store: RecordStore,
    session_resolver: SessionResolver,
    completion_client: CompletionClient,
    chat_id: UUID,
    content: str,
    image: Optional[str] = None,
    attachments: Optional[list[str]] = None,
) -> dict:
    """
    Send a follow-up message and get the assistant's reply.

    Sequence: insert the caller message → ask the completion endpoint with the
    accumulated conversation (and optional image) → insert the assistant message.

    Returns
    -------
    dict
        {'message': <caller row>, 'reply': <assistant row or transient reply>,
         'persisted': bool}

    Notes
    -----
    - A completion failure propagates (`UpstreamError`); the caller message
      stays stored without a reply.
    - If storing the reply fails, the reply is still returned with
      `persisted=False`; nothing compensates.
    """
    identity = session_resolver.current_identity()
    if identity is None:
        raise AuthenticationRequiredError()
    if not content or not content.strip():
        raise ValidationFailedError("Message cannot be empty")

    history = list_case_messages(user_id=identity.user_id, chat_id=chat_id)

    message = store.insert(
        CHAT_MESSAGES,
        {
            "chat_id": chat_id,
            "user_id": identity.user_id,
            "role": ROLE_USER,
            "content": content,
            "attachments": attachments,
        },
    )

    reply_text = completion_client.complete(format_conversation(history, content), image=image)

    try:
        reply = store.insert(
            CHAT_MESSAGES,
            {"chat_id": chat_id, "user_id": identity.user_id, "role": ROLE_ASSISTANT, "content": reply_text},
        )
        persisted = True
    except Exception as e:
        logger.error(f"Assistant reply for case {chat_id} was not stored: {e}")
        reply = {"chat_id": chat_id, "role": ROLE_ASSISTANT, "content": reply_text, "attachments": []}
        persisted = False

    return {"message": message, "reply": reply, "persisted": persisted}


@transactional
def list_cases(session: Session, user_id: UUID) -> list[dict]:
    """Cases of the caller, newest first."""
    chats = ChatSessionDao().fetchChatSessionsByUserId(session=session, user_id=user_id)
    return [chat.to_dict() for chat in chats]


@transactional
def list_case_messages(session: Session, user_id: UUID, chat_id: UUID) -> list[dict]:
    """Messages of one of the caller's cases, oldest first."""
    _owned_chat(session, user_id, chat_id)
    messages = ChatMessageDao().fetchMessagesByChatId(session=session, chat_id=chat_id)
    return [message.to_dict() for message in messages]


@transactional
def rename_case(session: Session, user_id: UUID, chat_id: UUID, case_title: str) -> dict:
    title = (case_title or "").strip()
    if not title:
        raise ValidationFailedError("Case title cannot be empty")
    _owned_chat(session, user_id, chat_id)
    chat = ChatSessionDao().updateCaseTitle(session=session, chat_id=chat_id, case_title=title, timestamp=utc_now())
    return chat.to_dict()


@transactional
def delete_case(session: Session, user_id: UUID, chat_id: UUID) -> None:
    """Delete one of the caller's cases with its messages and file rows."""
    _owned_chat(session, user_id, chat_id)
    ChatSessionDao().deleteChatSession(session=session, chat_id=chat_id)


@transactional
def assert_case_owner(session: Session, user_id: UUID, chat_id: UUID) -> None:
    _owned_chat(session, user_id, chat_id)


@transactional
def record_chat_file(
    session: Session,
    user_id: UUID,
    chat_id: UUID,
    file_name: str,
    file_path: str,
    content_type: str,
    size: int,
) -> dict:
    """Store the metadata row of an uploaded attachment."""
    chat_file = ChatFileDao().createFile(
        session=session,
        chat_file=ChatFile(
            chat_id=chat_id,
            user_id=user_id,
            file_name=file_name,
            file_path=file_path,
            content_type=content_type,
            size=size,
        ),
    )
    return {"id": chat_file.id, "file_path": chat_file.file_path}
