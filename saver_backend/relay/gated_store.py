"""
Write-gating relay.

`GatedRecordStore` wraps any `RecordStore` and admits inserts of the gated
kinds (`chat_sessions`, `chat_messages`) only when the caller's status flags
allow them. It implements the same `insert` interface, so callers hold the
wrapper and never the raw store.

Per gated insert, in program order:

1. resolve the caller (no identity → `AuthenticationRequiredError`, nothing
   else is called);
2. read the caller's `UserStatus` row;
3. refuse a message when `is_blocked` is set, a session when `case_blocked`
   is set;
4. forward the original payload and return the store's result unchanged.

The status read and the forwarded write are separate round trips. A block
landing between them is not seen by this call. Inserts are not deduplicated:
the same payload forwarded twice yields two rows.
"""

import logging
from typing import Callable, Optional
from uuid import UUID

from saver_backend.database.entities.user_status import UserStatus
from saver_backend.relay.record_store import RecordStore, CHAT_SESSIONS, CHAT_MESSAGES, GATED_KINDS
from saver_backend.relay.session_resolver import SessionResolver
from saver_backend.relay.errors import (
    AccessDeniedError,
    AuthenticationRequiredError,
    BlockedAccountError,
    BlockedCaseCreationError,
)

logger = logging.getLogger("uvicorn")


class GatedRecordStore(RecordStore):
    """
    Record store that checks the caller's blocking flags before each gated insert.

    Parameters
    ----------
    store : RecordStore
        The wrapped store receiving admitted writes.
    session_resolver : SessionResolver
        Source of the current identity; asked on every insert.
    status_lookup : Callable[[UUID], UserStatus | None]
        Single-row status read by user id.
    """

    def __init__(
        self,
        store: RecordStore,
        session_resolver: SessionResolver,
        status_lookup: Callable[[UUID], Optional[UserStatus]],
    ):
        self._store = store
        self._session_resolver = session_resolver
        self._status_lookup = status_lookup

    def insert(self, kind: str, payload: dict) -> dict:
        if kind not in GATED_KINDS:
            return self._store.insert(kind, payload)

        identity = self._session_resolver.current_identity()
        if identity is None:
            raise AuthenticationRequiredError()

        status = self._status_lookup(identity.user_id)
        if status is None:
            logger.warning(f"No status record for user {identity.user_id}; refusing {kind} insert")
            raise AccessDeniedError("Account status unavailable")

        if kind == CHAT_MESSAGES and status.is_blocked:
            raise BlockedAccountError()
        if kind == CHAT_SESSIONS and status.case_blocked:
            raise BlockedCaseCreationError()

        return self._store.insert(kind, payload)
