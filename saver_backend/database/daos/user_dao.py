"""
User DAO

Purpose
-------
Thin data-access layer for the `User` ORM entity. Provides:
- Creation with password hashing
- Lookup by id, e-mail, verification token or reset token
- Verification, reset-token, password and session-token updates
- Listing and deletion for the admin back-office

Design
------
- The DAO expects an active SQLAlchemy `Session` supplied by the caller.
- Business logic (validation, authorization, transactions) lives in the
  service layer (`saver_backend.database.core`); the DAO only persists.
- Passwords are hashed using `EncryptionDec.hash_password(...)` before insert.

Error Handling
--------------
- Each method logs the failing call and re-raises.
- Lookups return `None` when nothing matches; updates on a missing row raise
  `NoResultFound` via `.one()`.
"""

import logging
from uuid import UUID
from sqlalchemy.orm import Session
from saver_backend.database.entities.user import User
from saver_backend.crypt.encrypt_decrypt import EncryptionDec

logger = logging.getLogger("uvicorn")


class UserDao:
    """
    Data Access Object (DAO) for managing User entities.
    """

    def createUser(self, session: Session, user_data: User) -> User:
        """
        Stage a new user with a hashed password.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        user_data : User
            User entity; `password` holds the plaintext and is replaced by its hash.

        Returns
        -------
        User
            The staged entity.
        """
        try:
            enc = EncryptionDec()
            user_data.password = enc.hash_password(text=user_data.password)
            session.add(user_data)
            session.flush()
            return user_data
        except Exception as e:
            logger.error(f"Error in UserDao.createUser. Error Message: {e}")
            raise e

    def fetchUserById(self, session: Session, user_id: UUID) -> User | None:
        try:
            return session.query(User).filter(User.id == user_id).one_or_none()
        except Exception as e:
            logger.error(f"Error in UserDao.fetchUserById. Error Message: {e}")
            raise e

    def fetchUserByEmail(self, session: Session, email: str) -> User | None:
        """
        Fetch a user by e-mail address (case-insensitive, surrounding blanks ignored).

        Returns
        -------
        User | None
            The matching user, or None.
        """
        try:
            normalized = email.strip().lower()
            return session.query(User).filter(User.email == normalized).one_or_none()
        except Exception as e:
            logger.error(f"Error in UserDao.fetchUserByEmail. Error Message: {e}")
            raise e

    def fetchUserByVerificationToken(self, session: Session, token: str) -> User | None:
        try:
            return session.query(User).filter(User.verification_token == token).one_or_none()
        except Exception as e:
            logger.error(f"Error in UserDao.fetchUserByVerificationToken. Error Message: {e}")
            raise e

    def fetchUserByResetToken(self, session: Session, token: str) -> User | None:
        try:
            return session.query(User).filter(User.reset_token == token).one_or_none()
        except Exception as e:
            logger.error(f"Error in UserDao.fetchUserByResetToken. Error Message: {e}")
            raise e

    def fetchUsers(self, session: Session) -> list[User]:
        """All users, newest account first."""
        try:
            return session.query(User).order_by(User.created_on.desc()).all()
        except Exception as e:
            logger.error(f"Error in UserDao.fetchUsers. Error Message: {e}")
            raise e

    def updateVerified(self, session: Session, user_id: UUID) -> None:
        """
        Mark a user as verified and burn the verification token.

        Raises
        ------
        NoResultFound
            If the user does not exist.
        """
        try:
            user = session.query(User).filter(User.id == user_id).one()
            user.verified = True
            user.verification_token = None
        except Exception as e:
            logger.error(f"Error in UserDao.updateVerified. Error Message: {e}")
            raise e

    def updateVerificationToken(self, session: Session, user_id: UUID, token: str, created_on) -> None:
        try:
            user = session.query(User).filter(User.id == user_id).one()
            user.verification_token = token
            user.token_created_on = created_on
        except Exception as e:
            logger.error(f"Error in UserDao.updateVerificationToken. Error Message: {e}")
            raise e

    def updateResetToken(self, session: Session, user_id: UUID, token: str | None, created_on) -> None:
        try:
            user = session.query(User).filter(User.id == user_id).one()
            user.reset_token = token
            user.reset_token_created_on = created_on
        except Exception as e:
            logger.error(f"Error in UserDao.updateResetToken. Error Message: {e}")
            raise e

    def updatePassword(self, session: Session, user_id: UUID, password: str) -> None:
        """Replace the password hash; plaintext `password` is hashed here."""
        try:
            enc = EncryptionDec()
            user = session.query(User).filter(User.id == user_id).one()
            user.password = enc.hash_password(text=password)
        except Exception as e:
            logger.error(f"Error in UserDao.updatePassword. Error Message: {e}")
            raise e

    def updateToken(self, session: Session, user_id: UUID, token: str | None) -> None:
        """
        Update a user's session token (None revokes it).
        """
        try:
            user = session.query(User).filter(User.id == user_id).one()
            user.session_id = token
        except Exception as e:
            logger.error(f"Error in UserDao.updateToken. Error Message: {e}")
            raise e

    def deleteUser(self, session: Session, user_id: UUID) -> None:
        try:
            session.query(User).filter(User.id == user_id).delete(synchronize_session=False)
        except Exception as e:
            logger.error(f"Error in UserDao.deleteUser. Error Message: {e}")
            raise e
