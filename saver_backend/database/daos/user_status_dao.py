"""
UserStatus DAO

Data access for the per-account `UserStatus` row: the relay's single-row
lookup, the admin flag/subscription/role updates, and the counters kept
alongside gated inserts.

There is no locking here: a flag update by an admin and a relay read can
interleave freely.
"""

import logging
from uuid import UUID
from sqlalchemy.orm import Session
from saver_backend.database.entities.user_status import (
    UserStatus,
    SUBSCRIPTION_FREE,
    SUBSCRIPTION_CANCELLED,
)
from saver_backend.database.helpers.timestamps import utc_now

logger = logging.getLogger("uvicorn")


class UserStatusDao:
    """
    Data Access Object (DAO) for managing UserStatus entities.
    """

    def createStatus(self, session: Session, status: UserStatus) -> UserStatus:
        try:
            session.add(status)
            session.flush()
            return status
        except Exception as e:
            logger.error(f"Error in UserStatusDao.createStatus. Error Message: {e}")
            raise e

    def fetchStatus(self, session: Session, user_id: UUID) -> UserStatus | None:
        """
        Fetch the status row of one user.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        user_id : UUID
            Identity whose status is needed.

        Returns
        -------
        UserStatus | None
            The row, or None when the account has no status record.
        """
        try:
            return session.query(UserStatus).filter(UserStatus.user_id == user_id).one_or_none()
        except Exception as e:
            logger.error(f"Error in UserStatusDao.fetchStatus. Error Message: {e}")
            raise e

    def fetchStatuses(self, session: Session) -> list[UserStatus]:
        try:
            return session.query(UserStatus).all()
        except Exception as e:
            logger.error(f"Error in UserStatusDao.fetchStatuses. Error Message: {e}")
            raise e

    def updateFlags(
        self,
        session: Session,
        user_id: UUID,
        is_blocked: bool | None = None,
        case_blocked: bool | None = None,
    ) -> UserStatus:
        """
        Set the messaging and/or case-creation block flags. `None` leaves a flag untouched.
        """
        try:
            status = session.query(UserStatus).filter(UserStatus.user_id == user_id).one()
            if is_blocked is not None:
                status.is_blocked = is_blocked
            if case_blocked is not None:
                status.case_blocked = case_blocked
            status.updated_at = utc_now()
            return status
        except Exception as e:
            logger.error(f"Error in UserStatusDao.updateFlags. Error Message: {e}")
            raise e

    def updateSubscription(self, session: Session, user_id: UUID, subscription_status: str) -> UserStatus:
        try:
            status = session.query(UserStatus).filter(UserStatus.user_id == user_id).one()
            status.subscription_status = subscription_status
            status.updated_at = utc_now()
            return status
        except Exception as e:
            logger.error(f"Error in UserStatusDao.updateSubscription. Error Message: {e}")
            raise e

    def updateRole(self, session: Session, user_id: UUID, role: str) -> UserStatus:
        try:
            status = session.query(UserStatus).filter(UserStatus.user_id == user_id).one()
            status.role = role
            status.updated_at = utc_now()
            return status
        except Exception as e:
            logger.error(f"Error in UserStatusDao.updateRole. Error Message: {e}")
            raise e

    def incrementCaseCount(self, session: Session, user_id: UUID) -> None:
        try:
            status = session.query(UserStatus).filter(UserStatus.user_id == user_id).one_or_none()
            if status is not None:
                status.case_count = (status.case_count or 0) + 1
                status.updated_at = utc_now()
        except Exception as e:
            logger.error(f"Error in UserStatusDao.incrementCaseCount. Error Message: {e}")
            raise e

    def recordPrompt(self, session: Session, user_id: UUID, timestamp) -> None:
        """Count one more caller message and remember when it was sent."""
        try:
            status = session.query(UserStatus).filter(UserStatus.user_id == user_id).one_or_none()
            if status is not None:
                status.prompt_count = (status.prompt_count or 0) + 1
                status.last_prompt_date = timestamp
                status.updated_at = utc_now()
        except Exception as e:
            logger.error(f"Error in UserStatusDao.recordPrompt. Error Message: {e}")
            raise e

    def countActiveSubscriptions(self, session: Session) -> int:
        """Users whose tier is neither free nor cancelled."""
        try:
            return (
                session.query(UserStatus)
                .filter(UserStatus.subscription_status.notin_([SUBSCRIPTION_FREE, SUBSCRIPTION_CANCELLED]))
                .count()
            )
        except Exception as e:
            logger.error(f"Error in UserStatusDao.countActiveSubscriptions. Error Message: {e}")
            raise e

    def countStatuses(self, session: Session) -> int:
        try:
            return session.query(UserStatus).count()
        except Exception as e:
            logger.error(f"Error in UserStatusDao.countStatuses. Error Message: {e}")
            raise e

    def deleteStatus(self, session: Session, user_id: UUID) -> None:
        try:
            session.query(UserStatus).filter(UserStatus.user_id == user_id).delete(synchronize_session=False)
        except Exception as e:
            logger.error(f"Error in UserStatusDao.deleteStatus. Error Message: {e}")
            raise e
