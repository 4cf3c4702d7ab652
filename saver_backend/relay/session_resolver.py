"""
Session resolution for the write-gating relay.

`SessionResolver.current_identity()` answers "who is calling right now?".
The answer is re-fetched on every call: a token that was valid a moment ago
may have been revoked by logout or account deletion since.

An absent identity is a normal result (public pages have none). Callers
decide whether that is fatal.
"""

from typing import Callable, Optional
from uuid import UUID
from pydantic import BaseModel

from saver_backend.api.utils import verify_token


class Identity(BaseModel):
    """Authenticated caller."""
    user_id: UUID
    email: str


class SessionResolver:
    """Interface: resolve the current caller."""

    def current_identity(self) -> Optional[Identity]:
        raise NotImplementedError


class TokenSessionResolver(SessionResolver):
    """
    Resolve the caller from the `token` cookie.

    Parameters
    ----------
    token : str | None
        The raw JWT presented by the client.
    lookup : Callable[[UUID, str], Identity | None]
        Round trip to the user store: given the token's subject and the token
        itself, return the identity if the user exists and the token is the
        one currently issued to it.

    Notes
    -----
    - Signature/expiry are checked with `verify_token` first; a bad token
      never reaches the database.
    - No caching: every call performs the lookup again.
    """

    def __init__(self, token: Optional[str], lookup: Callable[[UUID, str], Optional[Identity]]):
        self._token = token
        self._lookup = lookup

    def current_identity(self) -> Optional[Identity]:
        if not self._token:
            return None
        subject = verify_token(self._token)
        if not subject:
            return None
        try:
            user_id = UUID(subject)
        except ValueError:
            return None
        return self._lookup(user_id, self._token)
