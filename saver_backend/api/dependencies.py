"""
Request-scoped wiring for the routers.

- `get_session_resolver`: cookie token → `TokenSessionResolver`
- `require_identity`: the caller, or 401
- `require_admin`: the caller if `is_admin` holds for their status, or 403
- `get_record_store`: the gated record store of the caller; routes never see
  the raw SQL store
- `get_completion_client`: the completion client stored on `app.state`
"""

from typing import Optional
from uuid import UUID

from fastapi import Cookie, Depends, Request

from saver_backend.api.prompt_utilities import CompletionClient
from saver_backend.database.core.funcs import get_identity, fetch_user_status
from saver_backend.relay.access import is_admin
from saver_backend.relay.errors import AccessDeniedError, AuthenticationRequiredError
from saver_backend.relay.gated_store import GatedRecordStore
from saver_backend.relay.record_store import RecordStore, SqlRecordStore
from saver_backend.relay.session_resolver import Identity, TokenSessionResolver


def lookup_identity(user_id: UUID, token: str) -> Optional[Identity]:
    return get_identity(user_id=user_id, token=token)


def lookup_status(user_id: UUID):
    return fetch_user_status(user_id=user_id)


def get_session_resolver(token: Optional[str] = Cookie(None)) -> TokenSessionResolver:
    return TokenSessionResolver(token, lookup_identity)


def require_identity(resolver: TokenSessionResolver = Depends(get_session_resolver)) -> Identity:
    identity = resolver.current_identity()
    if identity is None:
        raise AuthenticationRequiredError()
    return identity


def require_admin(identity: Identity = Depends(require_identity)) -> Identity:
    """Single admin guard: the caller's own status row must grant the admin role."""
    if not is_admin(lookup_status(identity.user_id)):
        raise AccessDeniedError("Admin access required")
    return identity


def get_record_store(
    identity: Identity = Depends(require_identity),
    resolver: TokenSessionResolver = Depends(get_session_resolver),
) -> RecordStore:
    return GatedRecordStore(SqlRecordStore(identity.user_id), resolver, lookup_status)


def get_completion_client(request: Request) -> CompletionClient:
    client = getattr(request.app.state, "completion_client", None)
    if client is None:
        client = CompletionClient()
        request.app.state.completion_client = client
    return client
