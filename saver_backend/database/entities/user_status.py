"""
UserStatus ORM Model
====================

``UserStatus`` is the per-account record holding blocking flags, subscription
tier, usage counters and the account role. It maps to the ``user_status``
table and is 1:1 with ``app_user`` (its primary key is the user id).

The write-gating relay reads this row before every gated insert; the admin
back-office mutates it. Nothing locks it between the two.
"""

from saver_backend.database.config.connection_engine import declarativeBase
from saver_backend.database.helpers.timestamps import utc_now
from sqlalchemy import Boolean, TEXT, DateTime, Integer, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from uuid import UUID
from typing import Optional
from datetime import datetime

ROLE_MEMBER = "member"
ROLE_ADMIN = "admin"
ROLES = (ROLE_MEMBER, ROLE_ADMIN)

SUBSCRIPTION_FREE = "free"
SUBSCRIPTION_ACTIVE = "active"
SUBSCRIPTION_CANCELLED = "cancelled"
SUBSCRIPTION_STATUSES = (SUBSCRIPTION_FREE, SUBSCRIPTION_ACTIVE, SUBSCRIPTION_CANCELLED)


class UserStatus(declarativeBase):
    """
    ORM model for the `user_status` table.

    Attributes
    ----------
    user_id : UUID
        Primary key and foreign key to `app_user.id`.
    role : str
        "member" or "admin". The only input of the admin authorization predicate.
    is_blocked : bool
        Blocked from sending chat messages.
    case_blocked : bool
        Blocked from creating new cases (chat sessions).
    subscription_status : str
        "free", "active" or "cancelled".
    case_count : int
        Number of chat sessions created by the user.
    prompt_count : int
        Number of caller messages sent by the user.
    last_prompt_date : datetime | None
        Time of the last caller message.
    country, medical_sector : str | None
        Profile data shown in the back-office.
    """

    __tablename__ = "user_status"

    user_id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), ForeignKey("app_user.id"), primary_key=True)

    role: Mapped[str] = mapped_column(TEXT, nullable=False, default=ROLE_MEMBER)

    is_blocked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    """Blocked-from-messaging flag."""

    case_blocked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    """Blocked-from-case-creation flag."""

    subscription_status: Mapped[str] = mapped_column(TEXT, nullable=False, default=SUBSCRIPTION_FREE)

    case_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    prompt_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    last_prompt_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    country: Mapped[Optional[str]] = mapped_column(TEXT, nullable=True)

    medical_sector: Mapped[Optional[str]] = mapped_column(TEXT, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    def __init__(
        self,
        user_id: UUID,
        role: str = ROLE_MEMBER,
        subscription_status: str = SUBSCRIPTION_FREE,
        country: str | None = None,
        medical_sector: str | None = None,
    ):
        self.user_id = user_id
        self.role = role
        self.is_blocked = False
        self.case_blocked = False
        self.subscription_status = subscription_status
        self.case_count = 0
        self.prompt_count = 0
        self.last_prompt_date = None
        self.country = country
        self.medical_sector = medical_sector
        self.created_at = utc_now()
        self.updated_at = self.created_at

    def __str__(self) -> str:
        return (
            f"UserStatus: user:{self.user_id}, role: {self.role}, blocked: {self.is_blocked}, "
            f"case_blocked: {self.case_blocked}, subscription: {self.subscription_status}"
        )
