"""
FastAPI Router — Auth • Cases • Completion • Uploads • E-mail • Support
======================================================================

Purpose
-------
Defines the HTTP API consumed by the single-page frontend:
- Authentication: sign-up, verify link, resend link, login, logout, current
  user, forgot/reset password
- Cases: open (with first message), list, rename, delete; messages: list, send
  (caller message → completion → assistant message)
- Completion endpoint (`/medical-ai-chat`)
- Chat file upload to S3 (`/upload-chat-file`)
- Transactional e-mail (`/send-email`)
- PayPal subscription activation (`/subscriptions`)
- Support chat for members and the public contact-sales form

Key Notes
---------
- Input validation via Pydantic models in `saver_backend.api.models`.
- Auth cookie: `token` (JWT, HttpOnly). `require_identity` turns it into the caller.
- Case and message inserts go through the gated record store
  (`get_record_store`), never directly to the database.
- Service errors are `SaverError`s; the app-level handler in `main.py` turns
  them into `{"detail": ...}` answers.
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Response, HTTPException, UploadFile, File, Form, Depends
from fastapi.responses import JSONResponse, RedirectResponse

from saver_backend.api.models import (
    UserCredentials,
    SignUpDetails,
    EmailOnly,
    PasswordReset,
    NewCase,
    CaseRename,
    FollowUpMessage,
    CompletionRequest,
    VerificationEmailRequest,
    SupportMessageBody,
    ContactSalesDetails,
    SubscriptionActivation,
)
from saver_backend.api.dependencies import (
    get_session_resolver,
    require_identity,
    get_record_store,
    get_completion_client,
)
from saver_backend.api.prompt_utilities import CompletionClient
from saver_backend.api.aws_bucket_funcs.funcs import get_client, upload, build_object_key, sanitize_file_name, public_url
from saver_backend.api.mail_funcs.funcs import send_verification_email
from saver_backend.api.change_feed import change_feed, SUPPORT_TOPIC, support_chat_topic
from saver_backend.database.config.config import settings
from saver_backend.database.core.funcs import (
    signup_user,
    verify_user,
    resend_verification,
    login_user,
    logout_user,
    get_user_profile,
    request_password_reset,
    reset_password,
    activate_subscription,
)
from saver_backend.database.core.chat_funcs import (
    submit_case,
    send_message,
    list_cases,
    list_case_messages,
    rename_case,
    delete_case,
    assert_case_owner,
    record_chat_file,
)
from saver_backend.database.core.support_funcs import (
    open_support_chat,
    list_support_chats,
    read_support_messages,
    post_support_message,
    create_lead,
)
from saver_backend.relay.errors import ValidationFailedError
from saver_backend.relay.record_store import RecordStore
from saver_backend.relay.session_resolver import Identity, TokenSessionResolver

logger = logging.getLogger("uvicorn")

router = APIRouter()
"""Creates the FastAPI router in which we define its routes"""


# -----------------------
# Authentication
# -----------------------

@router.post('/signup')
def signup(data: SignUpDetails):
    """Register a new account and e-mail the verification link.

    Returns:
        {'message': ..., 'email': ...}; 400 on validation failure.
    """
    user = signup_user(
        email=data.email,
        password=data.password,
        full_name=data.full_name,
        accepted_terms=data.accepted_terms,
        country=data.country,
        medical_sector=data.medical_sector,
    )
    return {'message': 'Check your email to verify your account', 'email': user['email']}


@router.get('/verify')
def verify(token: str):
    """Verification link target: confirm the address and send the browser to the login page."""
    verify_user(token=token)
    return RedirectResponse(url=f"{settings.FRONTEND_URL.rstrip('/')}/login?verified=true")


@router.post('/resend-verification')
def resend_verification_link(data: EmailOnly):
    resend_verification(email=data.email)
    return {'message': 'If the account exists and is not verified, a new link was sent'}


@router.post('/login')
def login(data: UserCredentials, response: Response):
    """Authenticate a user and set a signed JWT cookie.

    Request body:
        UserCredentials {email, password}

    Behavior:
        - Verifies credentials and the verified flag via `login_user`, which
          also stores the issued token as the user's session.
        - Sets the token as an HttpOnly cookie `token`.
        - `user_details.is_admin` tells the SPA where to route.

    Response:
        200: {'user_details': {...}}
        401: wrong credentials; 403: e-mail not verified
    """
    auth = login_user(email=data.email, password=data.password)
    response.set_cookie(
        key="token",
        value=auth['token'],
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )
    return {'user_details': auth['user_details']}


@router.post('/logout')
def logout(response: Response, resolver: TokenSessionResolver = Depends(get_session_resolver)):
    """Revoke the session token (when still valid) and clear the cookie."""
    identity = resolver.current_identity()
    if identity is not None:
        logout_user(user_id=identity.user_id)
    response.delete_cookie("token")
    return {'message': 'Logged out'}


@router.get('/get_user')
def get_user(identity: Identity = Depends(require_identity)):
    """Identity and status of the caller."""
    return get_user_profile(user_id=identity.user_id)


@router.post('/forgot-password')
def forgot_password(data: EmailOnly):
    request_password_reset(email=data.email)
    return {'message': 'If an account exists for this email, a reset link was sent'}


@router.post('/reset-password')
def reset_password_endpoint(data: PasswordReset):
    reset_password(token=data.token, new_password=data.new_password)
    return {'message': 'Password updated'}


# -----------------------
# Cases and messages
# -----------------------

@router.get('/cases')
def get_cases(identity: Identity = Depends(require_identity)):
    """Cases of the caller, newest first."""
    return list_cases(user_id=identity.user_id)


@router.post('/cases')
def new_case(
    data: NewCase,
    store: RecordStore = Depends(get_record_store),
    resolver: TokenSessionResolver = Depends(get_session_resolver),
):
    """Open a case (and its first message when details are given).

    Errors:
        403 blocked / case limit reached; 400 details too short.
    """
    return submit_case(store=store, session_resolver=resolver, case_details=data.case_details)


@router.patch('/cases/{chat_id}')
def update_case(chat_id: UUID, data: CaseRename, identity: Identity = Depends(require_identity)):
    return rename_case(user_id=identity.user_id, chat_id=chat_id, case_title=data.case_title)


@router.delete('/cases/{chat_id}')
def remove_case(chat_id: UUID, identity: Identity = Depends(require_identity)):
    delete_case(user_id=identity.user_id, chat_id=chat_id)
    return {'message': 'Case deleted'}


@router.get('/cases/{chat_id}/messages')
def get_messages(chat_id: UUID, identity: Identity = Depends(require_identity)):
    """Messages of one of the caller's cases, oldest first."""
    return list_case_messages(user_id=identity.user_id, chat_id=chat_id)


@router.post('/cases/{chat_id}/messages')
def new_message(
    chat_id: UUID,
    data: FollowUpMessage,
    store: RecordStore = Depends(get_record_store),
    resolver: TokenSessionResolver = Depends(get_session_resolver),
    completion_client: CompletionClient = Depends(get_completion_client),
):
    """Send a follow-up message and return it with the assistant's reply.

    Response:
        {'message': {...}, 'reply': {...}, 'persisted': bool}
        `persisted` is False when the reply could not be stored.
    """
    return send_message(
        store=store,
        session_resolver=resolver,
        completion_client=completion_client,
        chat_id=chat_id,
        content=data.content,
        image=data.image,
        attachments=data.attachments,
    )


@router.post('/medical-ai-chat')
def medical_ai_chat(
    data: CompletionRequest,
    identity: Identity = Depends(require_identity),
    completion_client: CompletionClient = Depends(get_completion_client),
):
    """Bare completion: prompt (+ optional image) → {'response': text}."""
    if not data.prompt or not data.prompt.strip():
        raise ValidationFailedError("Prompt cannot be empty")
    return {'response': completion_client.complete(data.prompt, image=data.image)}


# -----------------------
# Files and e-mail
# -----------------------

@router.post('/upload-chat-file')
def upload_chat_file(
    file: Optional[UploadFile] = File(None),
    chat_id: Optional[str] = Form(None),
    identity: Identity = Depends(require_identity),
):
    """Store an attachment of one of the caller's cases in S3.

    Form fields:
        file, chat_id (the uploader is the authenticated caller)

    Response:
        {'message', 'file_path', 'public_url'}
        400 missing fields; 500 'Failed to upload file' / 'Failed to save file metadata'
    """
    if file is None or not chat_id:
        raise HTTPException(status_code=400, detail='Missing required fields')
    try:
        case_id = UUID(chat_id)
    except ValueError:
        raise HTTPException(status_code=400, detail='Invalid chat_id')
    assert_case_owner(user_id=identity.user_id, chat_id=case_id)

    file_name = sanitize_file_name(file.filename)
    key = build_object_key(case_id, file_name)
    content_type = file.content_type or 'application/octet-stream'
    data = file.file.read()
    try:
        upload(fileobj=file.file, key=key, content_type=content_type, s3_client=get_client())
    except Exception as e:
        logger.error(f"S3 upload of {key} failed: {e}")
        raise HTTPException(status_code=500, detail='Failed to upload file')

    try:
        record_chat_file(
            user_id=identity.user_id,
            chat_id=case_id,
            file_name=file_name,
            file_path=key,
            content_type=content_type,
            size=len(data),
        )
    except Exception as e:
        logger.error(f"Saving metadata of {key} failed: {e}")
        raise HTTPException(status_code=500, detail='Failed to save file metadata')

    return {'message': 'File uploaded successfully', 'file_path': key, 'public_url': public_url(key)}


@router.post('/send-email')
def send_email(data: VerificationEmailRequest, identity: Identity = Depends(require_identity)):
    """Send the verification template to `email` with `verification_url`."""
    try:
        send_verification_email(email=data.email, verification_url=data.verification_url)
    except Exception as e:
        logger.error(f"send-email to {data.email} failed: {e}")
        return JSONResponse(status_code=500, content={'message': 'Failed to send email', 'error': str(e)})
    return {'message': 'Email sent successfully'}


# -----------------------
# Subscriptions
# -----------------------

@router.post('/subscriptions')
def subscribe(data: SubscriptionActivation, identity: Identity = Depends(require_identity)):
    """Record the caller's approved PayPal subscription and activate their plan.

    Response:
        {'subscription': {...}, 'status': {...}}; 400 blank subscription_id
    """
    return activate_subscription(user_id=identity.user_id, subscription_id=data.subscription_id)


# -----------------------
# Support and sales
# -----------------------

@router.post('/support/chats')
def start_support_chat(identity: Identity = Depends(require_identity)):
    """Open (or return the already open) support chat of the caller."""
    chat = open_support_chat(user_id=identity.user_id)
    change_feed.publish(SUPPORT_TOPIC, {'type': 'chat_opened', 'chat': chat})
    return chat


@router.get('/support/chats')
def my_support_chats(identity: Identity = Depends(require_identity)):
    return list_support_chats(user_id=identity.user_id)


@router.get('/support/chats/{chat_id}/messages')
def my_support_messages(chat_id: UUID, identity: Identity = Depends(require_identity)):
    return read_support_messages(user_id=identity.user_id, chat_id=chat_id)


@router.post('/support/chats/{chat_id}/messages')
def new_support_message(chat_id: UUID, data: SupportMessageBody, identity: Identity = Depends(require_identity)):
    """Post to one of the caller's support chats; refused once the chat is closed."""
    message = post_support_message(user_id=identity.user_id, chat_id=chat_id, content=data.content)
    change_feed.publish(support_chat_topic(chat_id), {'type': 'message', 'message': message})
    change_feed.publish(SUPPORT_TOPIC, {'type': 'message', 'chat_id': chat_id})
    return message


@router.post('/contact-sales')
def contact_sales(data: ContactSalesDetails):
    """Public enterprise inquiry form."""
    return create_lead(
        company_name=data.company_name,
        contact_name=data.contact_name,
        email=data.email,
        phone=data.phone,
        message=data.message,
    )
