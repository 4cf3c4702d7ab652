"""
Service-layer operations of the admin back-office.

Authorization happens before these functions are reached: the admin router
depends on `require_admin`, which asks `is_admin` about the caller's own
status row. Nothing here compares e-mail addresses.
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from saver_backend.database.helpers.transactionManagement import transactional
from saver_backend.database.daos.user_dao import UserDao
from saver_backend.database.daos.user_status_dao import UserStatusDao
from saver_backend.database.daos.chat_session_dao import ChatSessionDao
from saver_backend.database.daos.enterprise_lead_dao import EnterpriseLeadDao
from saver_backend.database.daos.support_dao import SupportDao
from saver_backend.database.daos.subscription_dao import SubscriptionDao
from saver_backend.database.entities.user_status import SUBSCRIPTION_STATUSES, SUBSCRIPTION_CANCELLED
from saver_backend.database.entities.enterprise_leads import LEAD_STATUSES
from saver_backend.database.core.funcs import request_password_reset, status_details
from saver_backend.database.core.support_funcs import lead_details
from saver_backend.relay.errors import NotFoundError, ValidationFailedError

logger = logging.getLogger("uvicorn")


@transactional
def dashboard_stats(session: Session) -> dict:
    """
    Headline numbers of the admin dashboard.

    Returns
    -------
    dict
        total_users, active_subscriptions (neither free nor cancelled),
        enterprise_leads, open_support_chats.
    """
    status_dao = UserStatusDao()
    return {
        "total_users": status_dao.countStatuses(session=session),
        "active_subscriptions": status_dao.countActiveSubscriptions(session=session),
        "enterprise_leads": EnterpriseLeadDao().countLeads(session=session),
        "open_support_chats": SupportDao().countOpenChats(session=session),
    }


@transactional
def list_users(session: Session) -> list[dict]:
    """All accounts with their status, newest first."""
    statuses = {status.user_id: status for status in UserStatusDao().fetchStatuses(session=session)}
    users = []
    for user in UserDao().fetchUsers(session=session):
        users.append(
            {
                "id": user.id,
                "email": user.email,
                "full_name": user.full_name,
                "verified": user.verified,
                "created_on": user.created_on,
                **status_details(statuses.get(user.id)),
            }
        )
    return users


def _existing_status(session: Session, user_id: UUID):
    status = UserStatusDao().fetchStatus(session=session, user_id=user_id)
    if status is None:
        raise NotFoundError("User not found")
    return status


@transactional
def set_block_flags(
    session: Session,
    user_id: UUID,
    is_blocked: Optional[bool] = None,
    case_blocked: Optional[bool] = None,
) -> dict:
    """
    Set the messaging and/or case-creation block of a user.

    Takes effect on the user's next gated write; a write already past its
    status check still lands.
    """
    _existing_status(session, user_id)
    status = UserStatusDao().updateFlags(
        session=session, user_id=user_id, is_blocked=is_blocked, case_blocked=case_blocked
    )
    logger.info(f"Block flags of {user_id}: is_blocked={status.is_blocked}, case_blocked={status.case_blocked}")
    return status_details(status)


@transactional
def set_subscription(session: Session, user_id: UUID, subscription_status: str) -> dict:
    if subscription_status not in SUBSCRIPTION_STATUSES:
        raise ValidationFailedError(f"Unknown subscription status: {subscription_status}")
    _existing_status(session, user_id)
    status = UserStatusDao().updateSubscription(
        session=session, user_id=user_id, subscription_status=subscription_status
    )
    return status_details(status)


def cancel_subscription(user_id: UUID) -> dict:
    return set_subscription(user_id=user_id, subscription_status=SUBSCRIPTION_CANCELLED)


@transactional
def delete_account(session: Session, user_id: UUID, acting_user_id: UUID) -> None:
    """
    Delete a user with everything they own: cases, messages, file rows,
    support chats and messages, PayPal subscriptions, status row. Their
    session token dies with the user row.

    Raises
    ------
    ValidationFailedError
        An admin tried to delete their own account.
    NotFoundError
        No such user.
    """
    if user_id == acting_user_id:
        raise ValidationFailedError("You cannot delete your own account")
    user_dao = UserDao()
    if user_dao.fetchUserById(session=session, user_id=user_id) is None:
        raise NotFoundError("User not found")
    ChatSessionDao().deleteChatSessionsByUserId(session=session, user_id=user_id)
    SupportDao().deleteByUserId(session=session, user_id=user_id)
    SubscriptionDao().deleteByUserId(session=session, user_id=user_id)
    UserStatusDao().deleteStatus(session=session, user_id=user_id)
    user_dao.deleteUser(session=session, user_id=user_id)
    logger.info(f"Account {user_id} deleted by {acting_user_id}")


@transactional
def send_password_reset(session: Session, user_id: UUID) -> None:
    user = UserDao().fetchUserById(session=session, user_id=user_id)
    if user is None:
        raise NotFoundError("User not found")
    request_password_reset(email=user.email)


@transactional
def list_leads(session: Session) -> list[dict]:
    return [lead_details(lead) for lead in EnterpriseLeadDao().fetchLeads(session=session)]


@transactional
def update_lead_status(session: Session, lead_id: UUID, status: str) -> dict:
    if status not in LEAD_STATUSES:
        raise ValidationFailedError(f"Unknown lead status: {status}")
    lead = EnterpriseLeadDao().updateLeadStatus(session=session, lead_id=lead_id, status=status)
    if lead is None:
        raise NotFoundError("Lead not found")
    return lead_details(lead)


@transactional
def list_support_inbox(session: Session) -> list[dict]:
    """All support chats newest first, with the requester's e-mail."""
    user_dao = UserDao()
    inbox = []
    for chat in SupportDao().fetchChats(session=session):
        user = user_dao.fetchUserById(session=session, user_id=chat.user_id)
        inbox.append({**chat.to_dict(), "user_email": user.email if user else None})
    return inbox
