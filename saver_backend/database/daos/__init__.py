"""
DAOs Package — Data Access Layer (SQLAlchemy 2.0)
=================================================

The `daos` package encapsulates all interactions with the SQLAlchemy ORM
entities, giving the service layer clean CRUD calls while hiding query details.

Conventions
-----------
- Session lifecycle (open/commit/rollback) is handled by callers via `@transactional`
- DAOs log and re-raise so upper layers decide error policy
- Lookups of a single row return the entity or None

Contents
--------
- UserDao: accounts, passwords, verification/reset links, session tokens
- UserStatusDao: role, blocking flags, subscription tier, counters, back-office counts
- ChatSessionDao: cases (create, list, rename, preview refresh, delete with children)
- ChatMessageDao: append-only case messages
- ChatFileDao: metadata of uploaded files
- EnterpriseLeadDao: contact-sales leads
- SupportDao: support chats and messages
- SubscriptionDao: PayPal subscriptions approved at checkout
"""
