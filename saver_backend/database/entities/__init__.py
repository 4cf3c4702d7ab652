"""
Entities Package — SQLAlchemy 2.0 ORM Models (UUID + UTC)
=========================================================

The `entities` package defines the ORM models of the application, mapping
database tables to Python classes using SQLAlchemy 2.0-typed mappings.
These classes form the persistence backbone and are consumed by the DAOs.

Tech Stack & Conventions
------------------------
- PostgreSQL in production; portable `Uuid` columns so SQLite works for tests
- Timezone-aware timestamps (UTC)
- SQLAlchemy 2.0 style `Mapped[...]` + `mapped_column(...)`

Contents
--------
- User (`app_user`): credentials, verification/reset links, issued session token
- UserStatus (`user_status`): role, blocking flags, subscription tier, counters
- ChatSession (`chat_sessions`): one patient case
- ChatMessage (`chat_messages`): append-only case messages ("user" | "assistant")
- ChatFile (`chat_files`): metadata of files uploaded to S3
- EnterpriseLead (`enterprise_leads`): contact-sales requests
- SupportChat / SupportMessage (`support_chats`, `support_messages`)
- PaypalSubscription (`paypal_subscriptions`): approved PayPal checkouts
"""

from saver_backend.database.entities.user import User
from saver_backend.database.entities.user_status import UserStatus
from saver_backend.database.entities.chat_sessions import ChatSession
from saver_backend.database.entities.chat_messages import ChatMessage
from saver_backend.database.entities.chat_files import ChatFile
from saver_backend.database.entities.enterprise_leads import EnterpriseLead
from saver_backend.database.entities.support import SupportChat, SupportMessage
from saver_backend.database.entities.paypal_subscriptions import PaypalSubscription

__all__ = [
    "User",
    "UserStatus",
    "ChatSession",
    "ChatMessage",
    "ChatFile",
    "EnterpriseLead",
    "SupportChat",
    "SupportMessage",
    "PaypalSubscription",
]
