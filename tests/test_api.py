import re
import threading
from email import message_from_string

from fastapi.testclient import TestClient

from saver_backend.api.dependencies import get_completion_client
from saver_backend.api.utils import create_access_token
from conftest import PASSWORD, login


def link_token(sent):
    """Token of the first link in a sent message."""
    body = message_from_string(sent["message"]).get_payload(decode=True).decode("utf-8")
    return re.search(r"token=([A-Za-z0-9_\-]+)", body).group(1)


def signup(client, email="new.doctor@saver.test", **overrides):
    body = {
        "email": email,
        "password": PASSWORD,
        "full_name": "New Doctor",
        "accepted_terms": True,
        "country": "Greece",
        "medical_sector": "Emergency Medicine",
    }
    body.update(overrides)
    return client.post("/signup", json=body)


def test_signup_verify_login_flow(client, outbox):
    response = signup(client)
    assert response.status_code == 200
    assert response.json()["email"] == "new.doctor@saver.test"
    assert len(outbox) == 1
    assert outbox[0]["to"] == "new.doctor@saver.test"

    unverified = client.post("/login", json={"email": "new.doctor@saver.test", "password": PASSWORD})
    assert unverified.status_code == 403

    verified = client.get("/verify", params={"token": link_token(outbox[0])}, follow_redirects=False)
    assert verified.status_code in (302, 307)
    assert verified.headers["location"] == "http://localhost:5173/login?verified=true"

    details = login(client, "new.doctor@saver.test")
    assert details["is_admin"] is False
    assert details["medical_sector"] == "Emergency Medicine"

    profile = client.get("/get_user")
    assert profile.status_code == 200
    assert profile.json()["email"] == "new.doctor@saver.test"
    assert profile.json()["verified"] is True


def test_signup_validation(client, outbox, make_account):
    make_account(email="taken@saver.test")

    assert signup(client, accepted_terms=False).status_code == 400
    assert signup(client, password="weak").status_code == 400
    duplicate = signup(client, email="Taken@saver.test")
    assert duplicate.status_code == 400
    assert duplicate.json()["detail"] == "Email already exists"
    assert outbox == []


def test_signup_is_undone_when_mail_fails(client, outbox):
    from conftest import FakeSMTP

    FakeSMTP.fail_with = OSError("relay unreachable")

    assert signup(client).status_code == 502

    FakeSMTP.fail_with = None
    assert signup(client).status_code == 200


def test_verify_rejects_unknown_token(client):
    assert client.get("/verify", params={"token": "nope"}, follow_redirects=False).status_code == 400


def test_wrong_password_is_unauthorized(client, make_account):
    make_account()

    response = client.post("/login", json={"email": "clinician@saver.test", "password": "Wr0ng!Pass"})

    assert response.status_code == 401


def test_routes_need_a_session(client):
    assert client.get("/get_user").status_code == 401
    assert client.get("/cases").status_code == 401
    assert client.post("/cases", json={}).status_code == 401
    assert client.post("/medical-ai-chat", json={"prompt": "hi"}).status_code == 401


def test_token_of_deleted_session_is_refused(client, other_client, make_account):
    make_account()
    login(client, "clinician@saver.test")
    token = client.cookies.get("token")

    assert client.post("/logout").status_code == 200

    other_client.cookies.set("token", token)
    assert other_client.get("/get_user").status_code == 401


def test_forged_token_is_refused(client, make_account):
    user_id = make_account()
    client.cookies.set("token", create_access_token({"sub": str(user_id)}))

    assert client.get("/get_user").status_code == 401


def test_case_flow(client, make_account, fake_llm):
    make_account()
    login(client, "clinician@saver.test")

    opened = client.post("/cases", json={"case_details": "Child, 4y, fever 39.8C for three days, rash."})
    assert opened.status_code == 200
    chat_id = opened.json()["chat"]["id"]
    assert opened.json()["message"]["role"] == "user"

    reply = client.post(f"/cases/{chat_id}/messages", json={"content": "Kawasaki disease?"})
    assert reply.status_code == 200
    assert reply.json()["persisted"] is True
    assert reply.json()["reply"]["content"] == fake_llm.reply

    messages = client.get(f"/cases/{chat_id}/messages").json()
    assert [m["role"] for m in messages] == ["user", "user", "assistant"]

    renamed = client.patch(f"/cases/{chat_id}", json={"case_title": "Fever and rash"})
    assert renamed.json()["case_title"] == "Fever and rash"
    cases = client.get("/cases").json()
    assert [(c["id"], c["last_message"]) for c in cases] == [(chat_id, fake_llm.reply)]

    assert client.delete(f"/cases/{chat_id}").status_code == 200
    assert client.get("/cases").json() == []


def test_case_rules_reach_the_client(client, make_account):
    make_account()
    login(client, "clinician@saver.test")

    short = client.post("/cases", json={"case_details": "cough"})
    assert short.status_code == 400

    assert client.post("/cases", json={}).status_code == 200
    limited = client.post("/cases", json={})
    assert limited.status_code == 403


def test_completion_failure_is_bad_gateway(client, make_account, fake_llm):
    from saver_backend.relay.errors import UpstreamError

    make_account()
    login(client, "clinician@saver.test")
    chat_id = client.post("/cases", json={}).json()["chat"]["id"]
    fake_llm.error = UpstreamError("Completion request failed")

    response = client.post(f"/cases/{chat_id}/messages", json={"content": "Next step?"})

    assert response.status_code == 502
    assert [m["content"] for m in client.get(f"/cases/{chat_id}/messages").json()] == ["Next step?"]


def test_other_users_case_is_forbidden(client, other_client, make_account):
    make_account()
    make_account(email="other@saver.test")
    login(client, "clinician@saver.test")
    login(other_client, "other@saver.test")
    chat_id = client.post("/cases", json={}).json()["chat"]["id"]

    assert other_client.get(f"/cases/{chat_id}/messages").status_code == 403
    assert other_client.post(f"/cases/{chat_id}/messages", json={"content": "hello"}).status_code == 403
    assert other_client.delete(f"/cases/{chat_id}").status_code == 403


def test_medical_ai_chat(client, make_account, fake_llm):
    make_account()
    login(client, "clinician@saver.test")

    blank = client.post("/medical-ai-chat", json={"prompt": "   "})
    assert blank.status_code == 400

    response = client.post("/medical-ai-chat", json={"prompt": "Dose of amoxicillin?", "image": "aGk="})
    assert response.status_code == 200
    assert response.json() == {"response": fake_llm.reply}
    assert fake_llm.calls == [{"prompt": "Dose of amoxicillin?", "image": "aGk="}]


class HeldCompletionClient:
    """Completion client that answers only once `release` is set."""

    def __init__(self):
        self.entered = threading.Event()
        self.release = threading.Event()
        self.finished = threading.Event()

    def complete(self, prompt, image=None):
        self.entered.set()
        self.release.wait(timeout=10)
        self.finished.set()
        return "Late answer."


def test_slow_completion_does_not_stall_other_requests(app, make_account):
    held = HeldCompletionClient()
    app.dependency_overrides[get_completion_client] = lambda: held
    make_account()
    answers = []

    with TestClient(app) as shared:
        login(shared, "clinician@saver.test")
        worker = threading.Thread(
            target=lambda: answers.append(shared.post("/medical-ai-chat", json={"prompt": "Slow question"}))
        )
        worker.start()
        try:
            assert held.entered.wait(timeout=5)
            profile = shared.get("/get_user")
            answered_while_held = not held.finished.is_set()
        finally:
            held.release.set()
            worker.join(timeout=10)

    assert profile.status_code == 200
    assert answered_while_held
    assert answers[0].json() == {"response": "Late answer."}


def test_password_reset_flow(client, outbox, make_account):
    make_account()

    assert client.post("/forgot-password", json={"email": "nobody@saver.test"}).status_code == 200
    assert outbox == []

    assert client.post("/forgot-password", json={"email": "clinician@saver.test"}).status_code == 200
    token = link_token(outbox[0])

    weak = client.post("/reset-password", json={"token": token, "new_password": "weak"})
    assert weak.status_code == 400

    done = client.post("/reset-password", json={"token": token, "new_password": "N3w!Password"})
    assert done.status_code == 200
    assert client.post("/reset-password", json={"token": token, "new_password": "N3w!Password"}).status_code == 400

    login(client, "clinician@saver.test", password="N3w!Password")


def test_resend_verification(client, outbox, make_account):
    make_account(email="pending@saver.test", verified=False)
    make_account(email="done@saver.test")

    client.post("/resend-verification", json={"email": "done@saver.test"})
    assert outbox == []

    client.post("/resend-verification", json={"email": "pending@saver.test"})
    assert len(outbox) == 1
    assert client.get("/verify", params={"token": link_token(outbox[0])}, follow_redirects=False).status_code in (302, 307)
    login(client, "pending@saver.test")


def test_contact_sales_is_public(client):
    response = client.post(
        "/contact-sales",
        json={"company_name": "General Hospital", "contact_name": "A. Admin", "email": "it@general.test"},
    )

    assert response.status_code == 200
    assert response.json()["status"] == "new"

    assert client.post("/contact-sales", json={"company_name": " ", "contact_name": "x", "email": "y"}).status_code == 400


def test_subscribing_lifts_the_free_case_limit(client, make_account):
    user_id = make_account()
    login(client, "clinician@saver.test")
    assert client.post("/cases", json={}).status_code == 200
    assert client.post("/cases", json={}).status_code == 403

    response = client.post("/subscriptions", json={"subscription_id": " I-BW452GLLEP1G "})

    assert response.status_code == 200
    body = response.json()
    assert body["subscription"]["subscription_id"] == "I-BW452GLLEP1G"
    assert body["subscription"]["user_id"] == str(user_id)
    assert body["status"]["subscription_status"] == "active"
    assert client.get("/get_user").json()["subscription_status"] == "active"
    assert client.post("/cases", json={}).status_code == 200


def test_subscription_needs_an_id_and_a_session(client, make_account):
    assert client.post("/subscriptions", json={"subscription_id": "I-1"}).status_code == 401

    make_account()
    login(client, "clinician@saver.test")
    blank = client.post("/subscriptions", json={"subscription_id": "   "})

    assert blank.status_code == 400
    assert blank.json()["detail"] == "Subscription ID is required"
    assert client.get("/get_user").json()["subscription_status"] == "free"
