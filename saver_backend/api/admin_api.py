"""
FastAPI Router — Admin back-office
==================================

Every route depends on `require_admin`, which checks the caller's own
`UserStatus.role` through `is_admin`. Routes are mounted under `/admin`.

- Dashboard stats
- Users: list, block flags, subscription, delete, password reset
- Enterprise leads: list, status
- Support inbox: list, read, reply, close
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends

from saver_backend.api.dependencies import require_admin
from saver_backend.api.models import BlockFlags, SubscriptionUpdate, LeadStatusUpdate, SupportMessageBody
from saver_backend.api.change_feed import change_feed, SUPPORT_TOPIC, support_chat_topic
from saver_backend.database.core.admin_funcs import (
    dashboard_stats,
    list_users,
    set_block_flags,
    set_subscription,
    cancel_subscription,
    delete_account,
    send_password_reset,
    list_leads,
    update_lead_status,
    list_support_inbox,
)
from saver_backend.database.core.support_funcs import read_support_messages, post_support_message, close_support_chat
from saver_backend.relay.session_resolver import Identity

logger = logging.getLogger("uvicorn")

admin_router = APIRouter(prefix="/admin", dependencies=[Depends(require_admin)])


@admin_router.get('/stats')
def stats():
    """Total users, active subscriptions, enterprise leads and open support chats."""
    return dashboard_stats()


@admin_router.get('/users')
def users():
    return list_users()


@admin_router.patch('/users/{user_id}/blocks')
def update_blocks(user_id: UUID, data: BlockFlags):
    """Toggle the messaging and/or case-creation block of a user."""
    return set_block_flags(user_id=user_id, is_blocked=data.is_blocked, case_blocked=data.case_blocked)


@admin_router.patch('/users/{user_id}/subscription')
def update_subscription(user_id: UUID, data: SubscriptionUpdate):
    return set_subscription(user_id=user_id, subscription_status=data.subscription_status)


@admin_router.post('/users/{user_id}/cancel-subscription')
def cancel_user_subscription(user_id: UUID):
    return cancel_subscription(user_id=user_id)


@admin_router.post('/users/{user_id}/reset-password')
def reset_user_password(user_id: UUID):
    """E-mail the user a password-reset link."""
    send_password_reset(user_id=user_id)
    return {'message': 'Password reset email sent'}


@admin_router.delete('/users/{user_id}')
def delete_user(user_id: UUID, identity: Identity = Depends(require_admin)):
    """Delete an account and everything it owns. Admins cannot delete themselves."""
    delete_account(user_id=user_id, acting_user_id=identity.user_id)
    return {'message': 'User deleted'}


@admin_router.get('/leads')
def leads():
    return list_leads()


@admin_router.patch('/leads/{lead_id}')
def update_lead(lead_id: UUID, data: LeadStatusUpdate):
    return update_lead_status(lead_id=lead_id, status=data.status)


@admin_router.get('/support')
def support_inbox():
    return list_support_inbox()


@admin_router.get('/support/{chat_id}/messages')
def support_messages(chat_id: UUID, identity: Identity = Depends(require_admin)):
    return read_support_messages(user_id=identity.user_id, chat_id=chat_id, as_admin=True)


@admin_router.post('/support/{chat_id}/messages')
def support_reply(chat_id: UUID, data: SupportMessageBody, identity: Identity = Depends(require_admin)):
    """Reply as support staff (`is_admin = true`); refused on closed chats."""
    message = post_support_message(user_id=identity.user_id, chat_id=chat_id, content=data.content, as_admin=True)
    change_feed.publish(support_chat_topic(chat_id), {'type': 'message', 'message': message})
    change_feed.publish(SUPPORT_TOPIC, {'type': 'message', 'chat_id': chat_id})
    return message


@admin_router.post('/support/{chat_id}/close')
def close_support(chat_id: UUID):
    chat = close_support_chat(chat_id=chat_id)
    change_feed.publish(SUPPORT_TOPIC, {'type': 'chat_closed', 'chat': chat})
    change_feed.publish(support_chat_topic(chat_id), {'type': 'chat_closed', 'chat': chat})
    return chat
