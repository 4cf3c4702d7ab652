"""
User ORM Model
==============

The ``User`` ORM model represents a registered account. It maps to the
``app_user`` table and holds the authentication side of an account:
credentials, e-mail verification, password reset and the currently issued
session token. Authorization flags live on ``UserStatus``.

Key features
~~~~~~~~~~~~
- UUID primary key (``id``)
- Unique e-mail used as login name
- bcrypt password hash
- Verification and password-reset links (token + creation timestamp)
- ``session_id``: the JWT issued at last login, cleared on logout
"""

from saver_backend.database.config.connection_engine import declarativeBase
from saver_backend.database.helpers.timestamps import utc_now
from sqlalchemy import VARCHAR, Boolean, TEXT, DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from uuid import UUID
from typing import Optional
import uuid
from datetime import datetime


class User(declarativeBase):
    """
    ORM model for the `app_user` table.

    Attributes
    ----------
    id : UUID
        Primary key. Unique identifier for the user.
    email : str
        Login e-mail address (unique).
    full_name : str | None
        Display name given at sign-up.
    password : str
        bcrypt hash of the password.
    verified : bool
        Whether the e-mail address has been confirmed.
    verification_token : str | None
        Token embedded in the verification link.
    token_created_on : datetime | None
        When the verification token was issued.
    reset_token : str | None
        Token embedded in the password-reset link.
    reset_token_created_on : datetime | None
        When the reset token was issued.
    session_id : str | None
        Session token (JWT) currently issued to the user.
    created_on : datetime
        Account creation time (UTC).
    """

    __tablename__ = "app_user"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True)
    """Primary key. UUID of the user."""

    email: Mapped[str] = mapped_column(VARCHAR(255), nullable=False, unique=True)
    """Login e-mail address (max length 255)."""

    full_name: Mapped[Optional[str]] = mapped_column(VARCHAR(255), nullable=True)

    password: Mapped[str] = mapped_column(TEXT, nullable=False)
    """bcrypt hash of the password."""

    verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    verification_token: Mapped[Optional[str]] = mapped_column(TEXT, nullable=True)

    token_created_on: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    reset_token: Mapped[Optional[str]] = mapped_column(TEXT, nullable=True)

    reset_token_created_on: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    session_id: Mapped[Optional[str]] = mapped_column(TEXT, nullable=True)
    """JWT issued at the last login; None once logged out."""

    created_on: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    def __init__(
        self,
        email: str,
        password: str,
        full_name: str | None,
        verification_token: str | None,
        token_created_on,
    ):
        """
        Initialize a new, unverified User.

        Parameters
        ----------
        email : str
            Login e-mail address.
        password : str
            Plaintext password; hashed by ``UserDao.createUser`` before insert.
        full_name : str | None
            Display name.
        verification_token : str | None
            Token for the verification link.
        token_created_on : datetime | str
            Issue time of the verification token. Accepts datetime or ISO8601 string.
        """
        self.id = uuid.uuid4()
        self.email = email
        self.password = password
        self.full_name = full_name
        self.verified = False
        self.verification_token = verification_token
        if isinstance(token_created_on, str):
            self.token_created_on = datetime.fromisoformat(token_created_on)
        else:
            self.token_created_on = token_created_on
        self.reset_token = None
        self.reset_token_created_on = None
        self.session_id = None
        self.created_on = utc_now()

    def __str__(self) -> str:
        return f"User: id:{self.id}, email: {self.email}, verified: {self.verified}"
