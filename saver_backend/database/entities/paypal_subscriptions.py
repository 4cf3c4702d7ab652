"""
PaypalSubscription ORM Model
============================

One PayPal subscription approved by a member at checkout, stored in
``paypal_subscriptions``. The row is the record of the approval; the
effective plan lives in ``user_status.subscription_status``.
"""

from saver_backend.database.config.connection_engine import declarativeBase
from saver_backend.database.helpers.timestamps import utc_now
from sqlalchemy import ForeignKey, DateTime, TEXT, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from uuid import UUID
from datetime import datetime
import uuid


class PaypalSubscription(declarativeBase):
    """ORM model for the `paypal_subscriptions` table."""

    __tablename__ = "paypal_subscriptions"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True)

    user_id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), ForeignKey("app_user.id"), nullable=False)

    subscription_id: Mapped[str] = mapped_column(TEXT, nullable=False)
    """Identifier PayPal returned on approval."""

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    def __init__(self, user_id: UUID, subscription_id: str):
        self.id = uuid.uuid4()
        self.user_id = user_id
        self.subscription_id = subscription_id
        self.created_at = utc_now()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "subscription_id": self.subscription_id,
            "created_at": self.created_at,
        }
