from jose import jwt

from saver_backend.api.utils import create_access_token, verify_token
from saver_backend.database.config.config import settings


def test_token_carries_subject_and_expiry():
    token = create_access_token({"sub": "1234"})

    claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    assert claims["sub"] == "1234"
    assert "exp" in claims
    assert verify_token(token) == "1234"


def test_tampered_token_is_rejected():
    forged = jwt.encode({"sub": "1234"}, "another-key", algorithm=settings.ALGORITHM)

    assert verify_token(forged) is None
    assert verify_token("garbage") is None


def test_expired_token_is_rejected(monkeypatch):
    monkeypatch.setattr(settings, "ACCESS_TOKEN_EXPIRE_MINUTES", -5)
    token = create_access_token({"sub": "1234"})

    assert verify_token(token) is None
