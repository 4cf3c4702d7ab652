"""
PaypalSubscription DAO

Record PayPal approvals and drop them with their account.
"""

import logging
from uuid import UUID
from sqlalchemy import desc
from sqlalchemy.orm import Session
from saver_backend.database.entities.paypal_subscriptions import PaypalSubscription

logger = logging.getLogger("uvicorn")


class SubscriptionDao:
    """
    Data Access Object (DAO) for managing PaypalSubscription entities.
    """

    def createSubscription(self, session: Session, subscription: PaypalSubscription) -> PaypalSubscription:
        try:
            session.add(subscription)
            session.flush()
            return subscription
        except Exception as e:
            logger.error(f"Error in SubscriptionDao.createSubscription. Error Message: {e}")
            raise e

    def fetchByUserId(self, session: Session, user_id: UUID) -> list[PaypalSubscription]:
        """A user's subscriptions, newest first."""
        try:
            return (
                session.query(PaypalSubscription)
                .filter(PaypalSubscription.user_id == user_id)
                .order_by(desc(PaypalSubscription.created_at))
                .all()
            )
        except Exception as e:
            logger.error(f"Error in SubscriptionDao.fetchByUserId. Error Message: {e}")
            raise e

    def deleteByUserId(self, session: Session, user_id: UUID) -> None:
        try:
            session.query(PaypalSubscription).filter(PaypalSubscription.user_id == user_id).delete(synchronize_session=False)
        except Exception as e:
            logger.error(f"Error in SubscriptionDao.deleteByUserId. Error Message: {e}")
            raise e
