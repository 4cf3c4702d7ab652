"""
Session tokens.

A session token is an HS256 JWT whose subject (`sub`) is the user id. It is
set as the HttpOnly `token` cookie at login and also stored on the user row
(`session_id`), so a token stops working on logout, password reset or account
deletion even before it expires.

Functions
---------
create_access_token(data: dict) -> str
    Sign `data` with an `exp` claim ACCESS_TOKEN_EXPIRE_MINUTES ahead.
verify_token(token: str) -> str | None
    Subject of a well-signed, unexpired token; None otherwise.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError
from saver_backend.database.config.config import settings

logger = logging.getLogger("uvicorn")


def create_access_token(data: dict) -> str:
    """
    Parameters
    ----------
    data : dict
        Claims to embed; `sub` must hold the user id as a string.

    Returns
    -------
    str
        Encoded JWT signed with `settings.SECRET_KEY`.
    """
    claims = dict(data)
    expires = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims["exp"] = int(expires.timestamp())
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_token(token: str) -> Optional[str]:
    """
    Check signature and expiry of a session token.

    A bad token is not an error for the caller: it only means there is no
    session, so the failure is logged at debug level and None is returned.
    """
    try:
        claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.debug(f"Rejected session token: {e}")
        return None
    return claims.get("sub")
