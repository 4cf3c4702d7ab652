"""
Single authorization predicate for administrative actions.

Every admin route and every admin-only realtime channel asks this function,
so the rule lives in one place: the caller's `UserStatus.role`.
"""

from saver_backend.database.entities.user_status import UserStatus, ROLE_ADMIN


def is_admin(status: UserStatus | None) -> bool:
    """True when the status row grants the admin role."""
    return status is not None and status.role == ROLE_ADMIN
