"""
Record stores: the "insert a row" capability the relay wraps.

`RecordStore` is the interface. `SqlRecordStore` is the real store, writing
`chat_sessions` and `chat_messages` rows through the DAOs.

Each `SqlRecordStore.insert` is its own `@transactional` unit. Steps of a chat
orchestration therefore commit independently, and a later failure never rolls
back an earlier insert.

Besides persisting the payload, the store enforces row ownership and keeps
the derived columns current:
- the owner column (`user_id`) defaults to the acting identity;
- a row owned by someone else, or a message into someone else's chat, is refused;
- derived columns are maintained (`case_count`, `prompt_count`,
  `last_prompt_date`, and the parent chat's `last_message`/`updated_at`).
"""

import logging
from uuid import UUID

from saver_backend.database.daos.chat_session_dao import ChatSessionDao
from saver_backend.database.daos.chat_message_dao import ChatMessageDao
from saver_backend.database.daos.user_status_dao import UserStatusDao
from saver_backend.database.entities.chat_sessions import ChatSession
from saver_backend.database.entities.chat_messages import ChatMessage, MESSAGE_ROLES, ROLE_USER
from saver_backend.database.helpers.transactionManagement import transactional
from saver_backend.database.helpers.timestamps import utc_now
from saver_backend.relay.errors import AccessDeniedError, NotFoundError, ValidationFailedError

logger = logging.getLogger("uvicorn")

CHAT_SESSIONS = "chat_sessions"
CHAT_MESSAGES = "chat_messages"
GATED_KINDS = (CHAT_SESSIONS, CHAT_MESSAGES)


class RecordStore:
    """Interface: insert one row of `kind` and return it as a dict."""

    def insert(self, kind: str, payload: dict) -> dict:
        raise NotImplementedError


def _as_uuid(value, field: str) -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        raise ValidationFailedError(f"Invalid {field}")


class SqlRecordStore(RecordStore):
    """
    SQL-backed record store acting on behalf of one identity.

    Parameters
    ----------
    acting_user_id : UUID
        The identity issuing the writes; used as default owner and for the
        ownership checks.
    """

    def __init__(self, acting_user_id: UUID):
        self.acting_user_id = acting_user_id
        self.session_dao = ChatSessionDao()
        self.message_dao = ChatMessageDao()
        self.status_dao = UserStatusDao()

    @transactional
    def insert(self, kind: str, payload: dict, session=None) -> dict:
        """
        Insert one row.

        Parameters
        ----------
        kind : str
            `chat_sessions` or `chat_messages`.
        payload : dict
            Column values. Not mutated.

        Returns
        -------
        dict
            The stored row.

        Raises
        ------
        ValidationFailedError
            Unknown kind or malformed payload.
        AccessDeniedError
            Row would belong to someone else.
        NotFoundError
            Message targets a chat that does not exist.
        """
        values = dict(payload)
        owner = _as_uuid(values.get("user_id") or self.acting_user_id, "user_id")
        if owner != self.acting_user_id:
            raise AccessDeniedError("Cannot write records on behalf of another user")

        if kind == CHAT_SESSIONS:
            return self._insert_session(session, owner, values)
        if kind == CHAT_MESSAGES:
            return self._insert_message(session, owner, values)
        raise ValidationFailedError(f"Unsupported record kind: {kind}")

    def _insert_session(self, session, owner: UUID, values: dict) -> dict:
        chat_id = _as_uuid(values["id"], "id") if values.get("id") else None
        chat = ChatSession(user_id=owner, case_title=values.get("case_title"), chat_id=chat_id)
        self.session_dao.createChatSession(session, chat)
        self.status_dao.incrementCaseCount(session, owner)
        logger.info(f"Chat session {chat.id} created for user {owner}")
        return chat.to_dict()

    def _insert_message(self, session, owner: UUID, values: dict) -> dict:
        if not values.get("chat_id"):
            raise ValidationFailedError("chat_id is required")
        chat_id = _as_uuid(values["chat_id"], "chat_id")
        role = values.get("role") or ROLE_USER
        if role not in MESSAGE_ROLES:
            raise ValidationFailedError(f"Invalid role: {role}")
        content = values.get("content")
        if not isinstance(content, str) or not content.strip():
            raise ValidationFailedError("Message content is required")

        chat = self.session_dao.fetchChatSessionById(session, chat_id)
        if chat is None:
            raise NotFoundError("Chat not found")
        if chat.user_id != owner:
            raise AccessDeniedError("Cannot write messages into another user's chat")

        message_id = _as_uuid(values["id"], "id") if values.get("id") else None
        message = ChatMessage(
            chat_id=chat_id,
            user_id=owner,
            role=role,
            content=content,
            attachments=values.get("attachments"),
            message_id=message_id,
        )
        self.message_dao.createMessage(session, message)

        now = utc_now()
        self.session_dao.updateLastMessage(session, chat_id, content, now)
        if role == ROLE_USER:
            self.status_dao.recordPrompt(session, owner, now)
        return message.to_dict()
