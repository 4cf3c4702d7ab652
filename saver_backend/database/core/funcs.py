"""
Service-layer operations for authentication and account status.

All functions are wrapped with the `@transactional` decorator, which manages
SQLAlchemy sessions and transactions automatically. Each function accepts (and
uses) an injected `session: Session` provided by the decorator, so callers
pass every other argument by keyword.

This module orchestrates DAO calls and auxiliary services (encryption,
JWT issuing, e-mail). Failures are raised as the typed errors of
`saver_backend.relay.errors`; the router turns them into HTTP answers.
"""

import logging
from datetime import timedelta
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from saver_backend.database.helpers.transactionManagement import transactional
from saver_backend.database.helpers.timestamps import utc_now, as_utc
from saver_backend.database.daos.user_dao import UserDao
from saver_backend.database.daos.user_status_dao import UserStatusDao
from saver_backend.database.daos.subscription_dao import SubscriptionDao
from saver_backend.database.entities.user import User
from saver_backend.database.entities.user_status import UserStatus, ROLES, SUBSCRIPTION_ACTIVE
from saver_backend.database.entities.paypal_subscriptions import PaypalSubscription
from saver_backend.database.config.config import settings
from saver_backend.crypt.encrypt_decrypt import EncryptionDec
from saver_backend.api.utils import create_access_token
from saver_backend.api.mail_funcs.funcs import send_verification_email, send_password_reset_email
from saver_backend.relay.access import is_admin
from saver_backend.relay.session_resolver import Identity
from saver_backend.relay.errors import (
    AccessDeniedError,
    AuthenticationRequiredError,
    NotFoundError,
    UpstreamError,
    ValidationFailedError,
)

logger = logging.getLogger("uvicorn")

PASSWORD_POLICY = "Password is invalid. Must contain at least 8 characters, 1 lowercase, 1 uppercase, 1 digit, and 1 special character."


def verification_link(token: str) -> str:
    return f"{settings.PUBLIC_API_URL.rstrip('/')}/verify?token={token}"


def reset_link(token: str) -> str:
    return f"{settings.FRONTEND_URL.rstrip('/')}/reset-password?token={token}"


def _link_expired(created_on) -> bool:
    created_on = as_utc(created_on)
    if created_on is None:
        return True
    return utc_now() > created_on + timedelta(minutes=settings.VERIFICATION_TOKEN_EXPIRE_MINUTES)


def status_details(status: Optional[UserStatus]) -> dict:
    """Public view of a status row, as sent to the SPA."""
    if status is None:
        return {}
    return {
        "role": status.role,
        "is_admin": is_admin(status),
        "is_blocked": status.is_blocked,
        "case_blocked": status.case_blocked,
        "subscription_status": status.subscription_status,
        "case_count": status.case_count,
        "prompt_count": status.prompt_count,
        "last_prompt_date": status.last_prompt_date,
        "country": status.country,
        "medical_sector": status.medical_sector,
    }


@transactional
def signup_user(
    session: Session,
    email: str,
    password: str,
    full_name: Optional[str],
    accepted_terms: bool,
    country: Optional[str] = None,
    medical_sector: Optional[str] = None,
) -> dict:
    """
    Validate a sign-up, create the account and its status row, and e-mail a verification link.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session (injected by @transactional).
    email : str
        Login e-mail (must be unique).
    password : str
        Plaintext password; validated here, hashed at DAO level.
    full_name : str | None
        Display name.
    accepted_terms : bool
        The caller accepted the terms of service.
    country, medical_sector : str | None
        Optional profile data.

    Returns
    -------
    dict
        {'id': UUID, 'email': str}

    Raises
    ------
    ValidationFailedError
        Terms not accepted, e-mail taken, or password policy violated.
    UpstreamError
        The verification e-mail could not be sent; nothing is persisted.
    """
    user_dao = UserDao()
    status_dao = UserStatusDao()
    enc = EncryptionDec()

    if not accepted_terms:
        raise ValidationFailedError("You must accept the terms and conditions")
    email = email.strip().lower()
    if user_dao.fetchUserByEmail(session=session, email=email) is not None:
        raise ValidationFailedError("Email already exists")
    if not enc.is_valid_password(password):
        raise ValidationFailedError(PASSWORD_POLICY)

    token = enc.generate_link_token()
    user = User(
        email=email,
        password=password,
        full_name=full_name,
        verification_token=token,
        token_created_on=utc_now(),
    )
    user_dao.createUser(session=session, user_data=user)
    status_dao.createStatus(
        session=session,
        status=UserStatus(user_id=user.id, country=country, medical_sector=medical_sector),
    )

    try:
        send_verification_email(email=email, verification_url=verification_link(token))
    except Exception as e:
        logger.error(f"Verification e-mail to {email} failed: {e}")
        raise UpstreamError("Failed to send verification email")
    return {"id": user.id, "email": user.email}


@transactional
def verify_user(session: Session, token: str) -> None:
    """
    Confirm an e-mail address from the verification link.

    Raises
    ------
    ValidationFailedError
        Unknown token, or the link is older than VERIFICATION_TOKEN_EXPIRE_MINUTES.
    """
    user_dao = UserDao()
    user = user_dao.fetchUserByVerificationToken(session=session, token=token)
    if user is None:
        raise ValidationFailedError("Invalid verification link")
    if _link_expired(user.token_created_on):
        raise ValidationFailedError("Verification link expired")
    user_dao.updateVerified(session=session, user_id=user.id)


@transactional
def resend_verification(session: Session, email: str) -> None:
    """
    Issue a fresh verification link. Unknown or already verified addresses are ignored.
    """
    user_dao = UserDao()
    enc = EncryptionDec()
    user = user_dao.fetchUserByEmail(session=session, email=email)
    if user is None or user.verified:
        return
    token = enc.generate_link_token()
    user_dao.updateVerificationToken(session=session, user_id=user.id, token=token, created_on=utc_now())
    try:
        send_verification_email(email=user.email, verification_url=verification_link(token))
    except Exception as e:
        logger.error(f"Verification e-mail to {user.email} failed: {e}")
        raise UpstreamError("Failed to send verification email")


@transactional
def login_user(session: Session, email: str, password: str) -> dict:
    """
    Authenticate by e-mail and password and issue a session token.

    Returns
    -------
    dict
        {'token': str, 'user_details': {id, email, full_name, is_admin, ...status}}

    Raises
    ------
    AuthenticationRequiredError
        Unknown e-mail or wrong password.
    AccessDeniedError
        The e-mail address has not been verified yet.

    Notes
    -----
    - The JWT subject is the user id; the token is stored as `session_id`
      so logout and account deletion can revoke it.
    """
    user_dao = UserDao()
    status_dao = UserStatusDao()
    enc = EncryptionDec()

    user = user_dao.fetchUserByEmail(session=session, email=email)
    if user is None or not enc.check_passwords(password, user.password):
        raise AuthenticationRequiredError("Invalid email or password")
    if not user.verified:
        raise AccessDeniedError("Please verify your email before logging in")

    token = create_access_token({"sub": str(user.id)})
    user_dao.updateToken(session=session, user_id=user.id, token=token)
    status = status_dao.fetchStatus(session=session, user_id=user.id)
    return {
        "token": token,
        "user_details": {
            "id": user.id,
            "email": user.email,
            "full_name": user.full_name,
            "is_admin": is_admin(status),
            **status_details(status),
        },
    }


@transactional
def logout_user(session: Session, user_id: UUID) -> None:
    """Revoke the stored session token."""
    UserDao().updateToken(session=session, user_id=user_id, token=None)


@transactional
def get_identity(session: Session, user_id: UUID, token: str) -> Optional[Identity]:
    """
    Round trip behind `TokenSessionResolver`: the user must exist and `token`
    must be the session token currently issued to it.
    """
    user = UserDao().fetchUserById(session=session, user_id=user_id)
    if user is None or user.session_id != token:
        return None
    return Identity(user_id=user.id, email=user.email)


@transactional
def fetch_user_status(session: Session, user_id: UUID) -> Optional[UserStatus]:
    """Single-row status read used by the relay and the admin guard."""
    return UserStatusDao().fetchStatus(session=session, user_id=user_id)


@transactional
def get_user_profile(session: Session, user_id: UUID) -> dict:
    """Identity and status of the caller for `GET /get_user`."""
    user = UserDao().fetchUserById(session=session, user_id=user_id)
    if user is None:
        raise NotFoundError("User not found")
    status = UserStatusDao().fetchStatus(session=session, user_id=user_id)
    return {
        "id": user.id,
        "email": user.email,
        "full_name": user.full_name,
        "verified": user.verified,
        "created_on": user.created_on,
        **status_details(status),
    }


@transactional
def request_password_reset(session: Session, email: str) -> None:
    """
    E-mail a password-reset link. Unknown addresses are ignored so the
    endpoint does not reveal which accounts exist.
    """
    user_dao = UserDao()
    enc = EncryptionDec()
    user = user_dao.fetchUserByEmail(session=session, email=email)
    if user is None:
        return
    token = enc.generate_link_token()
    user_dao.updateResetToken(session=session, user_id=user.id, token=token, created_on=utc_now())
    try:
        send_password_reset_email(email=user.email, reset_url=reset_link(token))
    except Exception as e:
        logger.error(f"Password reset e-mail to {user.email} failed: {e}")
        raise UpstreamError("Failed to send password reset email")


@transactional
def reset_password(session: Session, token: str, new_password: str) -> None:
    """
    Set a new password from a reset link and revoke the current session.

    Raises
    ------
    ValidationFailedError
        Unknown or expired token, or password policy violated.
    """
    user_dao = UserDao()
    enc = EncryptionDec()
    user = user_dao.fetchUserByResetToken(session=session, token=token)
    if user is None:
        raise ValidationFailedError("Invalid password reset link")
    if _link_expired(user.reset_token_created_on):
        raise ValidationFailedError("Password reset link expired")
    if not enc.is_valid_password(new_password):
        raise ValidationFailedError(PASSWORD_POLICY)
    user_dao.updatePassword(session=session, user_id=user.id, password=new_password)
    user_dao.updateResetToken(session=session, user_id=user.id, token=None, created_on=None)
    user_dao.updateToken(session=session, user_id=user.id, token=None)


@transactional
def set_role(session: Session, email: str, role: str) -> UserStatus:
    """
    Assign a role to an account. Used by the `grant_admin` script only.

    Raises
    ------
    ValidationFailedError
        Unknown role.
    NotFoundError
        No account with that e-mail.
    """
    if role not in ROLES:
        raise ValidationFailedError(f"Unknown role: {role}")
    user = UserDao().fetchUserByEmail(session=session, email=email)
    if user is None:
        raise NotFoundError(f"No account for {email}")
    status_dao = UserStatusDao()
    if status_dao.fetchStatus(session=session, user_id=user.id) is None:
        status_dao.createStatus(session=session, status=UserStatus(user_id=user.id))
    return status_dao.updateRole(session=session, user_id=user.id, role=role)


@transactional
def activate_subscription(session: Session, user_id: UUID, subscription_id: str) -> dict:
    """
    Record a PayPal subscription approved by the caller and switch their plan
    to "active", which lifts the free-tier case limit.

    Returns
    -------
    dict
        The stored subscription and the caller's new status.

    Raises
    ------
    ValidationFailedError
        Blank subscription id.
    """
    subscription_id = (subscription_id or "").strip()
    if not subscription_id:
        raise ValidationFailedError("Subscription ID is required")
    status_dao = UserStatusDao()
    if status_dao.fetchStatus(session=session, user_id=user_id) is None:
        status_dao.createStatus(session=session, status=UserStatus(user_id=user_id))
    subscription = SubscriptionDao().createSubscription(
        session=session,
        subscription=PaypalSubscription(user_id=user_id, subscription_id=subscription_id),
    )
    status = status_dao.updateSubscription(session=session, user_id=user_id, subscription_status=SUBSCRIPTION_ACTIVE)
    logger.info(f"Subscription {subscription_id} activated for {user_id}")
    return {"subscription": subscription.to_dict(), "status": status_details(status)}
