import os
import tempfile

# Settings are read at import time: configure a throwaway SQLite database and
# dummy credentials before anything from saver_backend is imported.
_DB_DIR = tempfile.mkdtemp(prefix="saver-tests-")
os.environ.update(
    {
        "FRONTEND_URL": "http://localhost:5173",
        "PUBLIC_API_URL": "http://testserver",
        "DB_DRIVER_NAME": "sqlite",
        "DB_DATABASE_NAME": os.path.join(_DB_DIR, "saver.db"),
        "SECRET_KEY": "test-secret-key",
        "ACCESS_TOKEN_EXPIRE_MINUTES": "60",
        "API_KEY": "sk-test",
        "SENDER_EMAIL": "noreply@saver.test",
        "APP_PASSWORD": "app-password",
        "AWS_ACCESS_KEY": "test-access",
        "AWS_SECRET_KEY": "test-secret",
        "BUCKET_NAME": "chat-files",
        "REGION": "eu-central-1",
    }
)

import pytest
from fastapi.testclient import TestClient

from saver_backend.database.config.connection_engine import connection_engine, metadata, create_schema
from saver_backend.database.helpers.transactionManagement import transactional
from saver_backend.database.daos.user_dao import UserDao
from saver_backend.database.daos.user_status_dao import UserStatusDao
from saver_backend.database.entities.user import User
from saver_backend.database.entities.user_status import UserStatus, ROLE_MEMBER, SUBSCRIPTION_FREE
from saver_backend.relay.errors import UpstreamError
from saver_backend.relay.session_resolver import Identity, SessionResolver

PASSWORD = "Str0ng!Pass"


class StaticSessionResolver(SessionResolver):
    """Resolver that always answers the same identity (or None)."""

    def __init__(self, identity: Identity | None):
        self._identity = identity

    def current_identity(self) -> Identity | None:
        return self._identity


class FakeSMTP:
    """Stands in for smtplib.SMTP; records every sent message in `outbox`."""

    outbox: list = []
    fail_with: Exception | None = None

    def __init__(self, host, port):
        self.host = host
        self.port = port

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        pass

    def login(self, user, password):
        if FakeSMTP.fail_with is not None:
            raise FakeSMTP.fail_with

    def sendmail(self, sender, recipient, message):
        FakeSMTP.outbox.append({"from": sender, "to": recipient, "message": message})


class FakeCompletionClient:
    """Completion client double: echoes a canned reply and records prompts."""

    def __init__(self, reply="Document the red flags and order an ECG."):
        self.reply = reply
        self.calls = []
        self.error = None

    def complete(self, prompt, image=None):
        self.calls.append({"prompt": prompt, "image": image})
        if self.error is not None:
            raise self.error
        return self.reply


class FakeS3:
    def __init__(self):
        self.objects = {}
        self.error = None

    def upload_fileobj(self, fileobj, bucket, key, ExtraArgs=None):
        if self.error is not None:
            raise self.error
        self.objects[key] = {"bucket": bucket, "body": fileobj.read(), "extra": ExtraArgs}


@pytest.fixture(scope="session", autouse=True)
def schema():
    create_schema()
    yield


@pytest.fixture(autouse=True)
def clean_tables():
    yield
    with connection_engine.begin() as conn:
        for table in reversed(metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture
def outbox(monkeypatch):
    FakeSMTP.outbox = []
    FakeSMTP.fail_with = None
    monkeypatch.setattr("saver_backend.api.mail_funcs.funcs.smtplib.SMTP", FakeSMTP)
    yield FakeSMTP.outbox
    FakeSMTP.fail_with = None


@transactional
def _create_account(session, email, password, verified, role, subscription_status):
    user = User(email=email, password=password, full_name="Test User", verification_token=None, token_created_on=None)
    UserDao().createUser(session=session, user_data=user)
    user.verified = verified
    UserStatusDao().createStatus(
        session=session,
        status=UserStatus(user_id=user.id, role=role, subscription_status=subscription_status),
    )
    return user.id


@pytest.fixture
def make_account():
    def factory(email="clinician@saver.test", password=PASSWORD, verified=True, role=ROLE_MEMBER, subscription_status=SUBSCRIPTION_FREE):
        return _create_account(
            email=email,
            password=password,
            verified=verified,
            role=role,
            subscription_status=subscription_status,
        )

    return factory


@pytest.fixture
def fake_llm():
    return FakeCompletionClient()


@pytest.fixture
def failing_llm():
    client = FakeCompletionClient()
    client.error = UpstreamError("Completion request failed")
    return client


@pytest.fixture
def fake_s3(monkeypatch):
    s3 = FakeS3()
    monkeypatch.setattr("saver_backend.api.fast_api.get_client", lambda: s3)
    return s3


@pytest.fixture
def app(fake_llm):
    from saver_backend.main import app as fastapi_app
    from saver_backend.api.dependencies import get_completion_client

    fastapi_app.dependency_overrides[get_completion_client] = lambda: fake_llm
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def other_client(app):
    return TestClient(app)


def login(client, email, password=PASSWORD):
    response = client.post("/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["user_details"]
