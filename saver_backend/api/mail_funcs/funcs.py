"""
Transactional e-mail over SMTP.

Functions
---------
send_mail(recipient, subject, html) -> None
    Send one HTML message through the configured SMTP relay (STARTTLS).
send_verification_email(email, verification_url) -> None
    Account verification link.
send_password_reset_email(email, reset_url) -> None
    Password reset link.

Configuration (from `settings`): SENDER_EMAIL, APP_PASSWORD, SMTP_HOST, SMTP_PORT.
Exceptions from the SMTP conversation are propagated to the caller.
"""

import logging
import smtplib
from email.mime.text import MIMEText

from saver_backend.database.config.config import settings
from saver_backend.api.mail_funcs.templates import verification_email, password_reset_email

logger = logging.getLogger("uvicorn")


def send_mail(recipient: str, subject: str, html: str) -> None:
    """
    Send an HTML e-mail using the SMTP relay.

    Parameters
    ----------
    recipient : str
        Destination address.
    subject : str
        Subject line.
    html : str
        Rendered HTML body.

    Notes
    -----
    - Uses `settings.SENDER_EMAIL` and `settings.APP_PASSWORD` for SMTP auth.
    - Connects to `settings.SMTP_HOST:settings.SMTP_PORT` with STARTTLS.
    """
    sender_email = settings.SENDER_EMAIL
    sender_password = settings.APP_PASSWORD

    msg = MIMEText(html, "html", "utf-8")
    msg["Subject"] = subject
    msg["From"] = f"Saver <{sender_email}>"
    msg["To"] = recipient

    with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT) as server:
        server.starttls()
        server.login(sender_email, sender_password)
        server.sendmail(sender_email, recipient, msg.as_string())
    logger.info(f"Sent '{subject}' e-mail to {recipient}")


def send_verification_email(email: str, verification_url: str) -> None:
    send_mail(email, "Verify your email address", verification_email(verification_url))


def send_password_reset_email(email: str, reset_url: str) -> None:
    send_mail(email, "Reset your password", password_reset_email(reset_url))
