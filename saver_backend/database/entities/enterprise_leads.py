"""
EnterpriseLead ORM Model
========================

A "contact sales" request for the enterprise plan, stored in
``enterprise_leads`` and worked through by admins (new → contacted → closed).
"""

from saver_backend.database.config.connection_engine import declarativeBase
from saver_backend.database.helpers.timestamps import utc_now
from sqlalchemy import DateTime, TEXT, VARCHAR, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from uuid import UUID
from typing import Optional
from datetime import datetime
import uuid

LEAD_NEW = "new"
LEAD_CONTACTED = "contacted"
LEAD_CLOSED = "closed"
LEAD_STATUSES = (LEAD_NEW, LEAD_CONTACTED, LEAD_CLOSED)

DEFAULT_LEAD_MESSAGE = "Enterprise plan inquiry"


class EnterpriseLead(declarativeBase):
    """
    ORM model for the `enterprise_leads` table.

    Attributes
    ----------
    id : UUID
        Primary key.
    company_name, contact_name, email : str
        Who asked.
    phone, message : str | None
        Optional contact details and request text.
    status : str
        "new" | "contacted" | "closed".
    created_at : datetime
        Submission time (UTC).
    """

    __tablename__ = "enterprise_leads"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True)
    company_name: Mapped[str] = mapped_column(TEXT, nullable=False)
    contact_name: Mapped[str] = mapped_column(TEXT, nullable=False)
    email: Mapped[str] = mapped_column(VARCHAR(255), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(TEXT, nullable=True)
    message: Mapped[Optional[str]] = mapped_column(TEXT, nullable=True)
    status: Mapped[str] = mapped_column(TEXT, nullable=False, default=LEAD_NEW)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    def __init__(self, company_name: str, contact_name: str, email: str, phone: str | None = None, message: str | None = None):
        self.id = uuid.uuid4()
        self.company_name = company_name
        self.contact_name = contact_name
        self.email = email
        self.phone = phone
        self.message = message or DEFAULT_LEAD_MESSAGE
        self.status = LEAD_NEW
        self.created_at = utc_now()
