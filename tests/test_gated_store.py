import uuid
from types import SimpleNamespace

import pytest

from saver_backend.relay.gated_store import GatedRecordStore
from saver_backend.relay.record_store import RecordStore, CHAT_SESSIONS, CHAT_MESSAGES
from saver_backend.relay.session_resolver import Identity, SessionResolver
from saver_backend.relay.errors import (
    AccessDeniedError,
    AuthenticationRequiredError,
    BlockedAccountError,
    BlockedCaseCreationError,
)

USER_ID = uuid.uuid4()


class RecordingStore(RecordStore):
    def __init__(self, log):
        self.log = log
        self.calls = []

    def insert(self, kind, payload):
        self.log.append("insert")
        self.calls.append((kind, payload))
        return {"id": uuid.uuid4(), "kind": kind, **payload}


class CountingResolver(SessionResolver):
    def __init__(self, identity, log):
        self.identity = identity
        self.log = log
        self.calls = 0

    def current_identity(self):
        self.calls += 1
        self.log.append("resolve")
        return self.identity


class StatusTable:
    def __init__(self, log, is_blocked=False, case_blocked=False, missing=False):
        self.log = log
        self.calls = 0
        self.row = None if missing else SimpleNamespace(is_blocked=is_blocked, case_blocked=case_blocked)

    def __call__(self, user_id):
        self.calls += 1
        self.log.append("status")
        return self.row


def build(authenticated=True, **flags):
    log = []
    identity = Identity(user_id=USER_ID, email="u@saver.test") if authenticated else None
    store = RecordingStore(log)
    resolver = CountingResolver(identity, log)
    statuses = StatusTable(log, **flags)
    return GatedRecordStore(store, resolver, statuses), store, resolver, statuses, log


def test_blocked_account_cannot_insert_message():
    gated, store, _, _, _ = build(is_blocked=True)

    with pytest.raises(BlockedAccountError) as exc_info:
        gated.insert(CHAT_MESSAGES, {"chat_id": uuid.uuid4(), "content": "hello", "role": "user"})

    assert isinstance(exc_info.value, AccessDeniedError)
    assert exc_info.value.status_code == 403
    assert exc_info.value.detail == "Your account is blocked from sending messages."
    assert store.calls == []


def test_case_blocked_account_cannot_insert_session():
    gated, store, _, _, _ = build(case_blocked=True)

    with pytest.raises(BlockedCaseCreationError) as exc_info:
        gated.insert(CHAT_SESSIONS, {"case_title": "New Case"})

    assert isinstance(exc_info.value, AccessDeniedError)
    assert exc_info.value.detail == "Your account is blocked from creating new cases."
    assert store.calls == []


@pytest.mark.parametrize("kind", [CHAT_SESSIONS, CHAT_MESSAGES])
def test_clear_flags_forward_payload_and_result_unchanged(kind):
    gated, store, _, _, _ = build()
    payload = {"chat_id": uuid.uuid4(), "content": "hello", "role": "user", "case_title": "New Case"}
    expected = {"row": "stored"}
    store.insert = lambda k, p: store.calls.append((k, p)) or expected

    result = gated.insert(kind, payload)

    assert result is expected
    assert store.calls == [(kind, payload)]
    assert store.calls[0][1] is payload


@pytest.mark.parametrize("kind", [CHAT_SESSIONS, CHAT_MESSAGES])
def test_unauthenticated_insert_fails_before_status_lookup(kind):
    gated, store, resolver, statuses, _ = build(authenticated=False)

    with pytest.raises(AuthenticationRequiredError) as exc_info:
        gated.insert(kind, {"content": "anything"})

    assert exc_info.value.status_code == 401
    assert resolver.calls == 1
    assert statuses.calls == 0
    assert store.calls == []


def test_messaging_block_does_not_stop_case_creation():
    gated, store, _, _, _ = build(is_blocked=True)

    gated.insert(CHAT_SESSIONS, {"case_title": "New Case"})

    assert len(store.calls) == 1


def test_case_creation_block_does_not_stop_messages():
    gated, store, _, _, _ = build(case_blocked=True)

    gated.insert(CHAT_MESSAGES, {"chat_id": uuid.uuid4(), "content": "follow-up", "role": "user"})

    assert len(store.calls) == 1


def test_missing_status_record_is_denied():
    gated, store, _, _, _ = build(missing=True)

    with pytest.raises(AccessDeniedError):
        gated.insert(CHAT_MESSAGES, {"chat_id": uuid.uuid4(), "content": "hello", "role": "user"})
    assert store.calls == []


def test_ungated_kinds_pass_straight_through():
    gated, store, resolver, statuses, _ = build(authenticated=False)

    gated.insert("support_messages", {"content": "help"})

    assert store.calls == [("support_messages", {"content": "help"})]
    assert resolver.calls == 0
    assert statuses.calls == 0


def test_status_check_precedes_every_write_and_is_not_cached():
    gated, store, resolver, statuses, log = build()

    gated.insert(CHAT_SESSIONS, {"case_title": "New Case"})
    gated.insert(CHAT_MESSAGES, {"chat_id": uuid.uuid4(), "content": "hi", "role": "user"})

    assert log == ["resolve", "status", "insert", "resolve", "status", "insert"]
    assert resolver.calls == 2
    assert statuses.calls == 2


def test_block_applied_between_calls_is_seen_by_the_next_call():
    gated, store, _, statuses, _ = build()
    payload = {"chat_id": uuid.uuid4(), "content": "hi", "role": "user"}

    gated.insert(CHAT_MESSAGES, payload)
    statuses.row.is_blocked = True

    with pytest.raises(BlockedAccountError):
        gated.insert(CHAT_MESSAGES, payload)
    assert len(store.calls) == 1


def test_same_payload_twice_is_forwarded_twice():
    gated, store, _, _, _ = build()
    payload = {"case_title": "New Case"}

    first = gated.insert(CHAT_SESSIONS, payload)
    second = gated.insert(CHAT_SESSIONS, payload)

    assert len(store.calls) == 2
    assert first["id"] != second["id"]
