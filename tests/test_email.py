from email import message_from_string

from saver_backend.api.mail_funcs.templates import verification_email, password_reset_email
from conftest import FakeSMTP, login


def test_templates_embed_the_link():
    url = "https://api.saver.test/verify?token=abc&next=1"

    html = verification_email(url)

    assert "Verify Email Address" in html
    assert "https://api.saver.test/verify?token=abc&amp;next=1" in html
    assert "reset-password?token=xyz" in password_reset_email("https://saver.test/reset-password?token=xyz")


def test_send_email_delivers_verification_template(client, outbox, make_account):
    make_account()
    login(client, "clinician@saver.test")

    response = client.post(
        "/send-email",
        json={"email": "colleague@saver.test", "verification_url": "https://saver.test/verify?token=t1"},
    )

    assert response.status_code == 200
    assert response.json() == {"message": "Email sent successfully"}
    sent = message_from_string(outbox[0]["message"])
    assert outbox[0]["to"] == "colleague@saver.test"
    assert sent["Subject"] == "Verify your email address"
    assert "https://saver.test/verify?token=t1" in sent.get_payload(decode=True).decode("utf-8")


def test_send_email_failure(client, outbox, make_account):
    make_account()
    login(client, "clinician@saver.test")
    FakeSMTP.fail_with = OSError("535 authentication failed")

    response = client.post(
        "/send-email",
        json={"email": "colleague@saver.test", "verification_url": "https://saver.test/verify?token=t1"},
    )

    assert response.status_code == 500
    assert response.json() == {"message": "Failed to send email", "error": "535 authentication failed"}
    assert outbox == []


def test_send_email_requires_session(client, outbox):
    response = client.post("/send-email", json={"email": "a@saver.test", "verification_url": "https://x"})

    assert response.status_code == 401
    assert outbox == []
