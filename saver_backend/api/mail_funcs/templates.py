"""
HTML bodies of the transactional e-mails.

Plain string templates with inline styles; mail clients ignore <style> blocks.
"""

from html import escape

_MAIN = (
    "background-color:#ffffff;font-family:-apple-system,BlinkMacSystemFont,'Segoe UI',"
    "Roboto,Oxygen-Sans,Ubuntu,Cantarell,'Helvetica Neue',sans-serif;"
)
_CONTAINER = "margin:0 auto;padding:20px 0 48px;max-width:560px;"
_H1 = "color:#1a1a1a;font-size:24px;font-weight:600;line-height:40px;margin:0 0 20px;"
_TEXT = "color:#444444;font-size:16px;line-height:24px;margin:24px 0;"
_BUTTON = (
    "background-color:#2563eb;border-radius:8px;color:#fff;display:block;font-size:16px;"
    "font-weight:600;line-height:100%;margin:24px auto;max-width:260px;padding:16px 24px;"
    "text-decoration:none;text-align:center;"
)
_LINK = "color:#2563eb;font-size:14px;text-decoration:none;margin:16px 0 32px;word-break:break-all;"
_HR = "border-color:#dddddd;margin:42px 0 26px;"
_FOOTER = "color:#898989;font-size:12px;line-height:22px;margin:12px 0;"


def _render(title: str, intro: str, button_label: str, url: str, footer: str) -> str:
    safe_url = escape(url, quote=True)
    return f"""<!DOCTYPE html>
<html>
  <body style="{_MAIN}">
    <div style="{_CONTAINER}">
      <h1 style="{_H1}">{title}</h1>
      <p style="{_TEXT}">{intro}</p>
      <a href="{safe_url}" style="{_BUTTON}">{button_label}</a>
      <p style="{_TEXT}">Or copy and paste this URL into your browser:</p>
      <p style="{_LINK}">{safe_url}</p>
      <hr style="{_HR}" />
      <p style="{_FOOTER}">{footer}</p>
    </div>
  </body>
</html>"""


def verification_email(verification_url: str) -> str:
    return _render(
        title="Welcome to Saver!",
        intro="Thanks for signing up! Please verify your email address to get started.",
        button_label="Verify Email Address",
        url=verification_url,
        footer="If you didn't create an account with Saver, you can safely ignore this email.",
    )


def password_reset_email(reset_url: str) -> str:
    return _render(
        title="Reset your Saver password",
        intro="We received a request to reset your password. The link below is valid for a limited time.",
        button_label="Reset Password",
        url=reset_url,
        footer="If you didn't ask for a password reset, you can safely ignore this email.",
    )
