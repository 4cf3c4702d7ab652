import pytest

from saver_backend.crypt.encrypt_decrypt import EncryptionDec


@pytest.fixture
def enc():
    return EncryptionDec()


def test_hash_and_check(enc):
    hashed = enc.hash_password(text="Str0ng!Pass")

    assert hashed != "Str0ng!Pass"
    assert enc.check_passwords("Str0ng!Pass", hashed)
    assert not enc.check_passwords("Wr0ng!Pass", hashed)


@pytest.mark.parametrize(
    "password,valid",
    [
        ("Str0ng!Pass", True),
        ("Sh0rt!", False),
        ("alllower1!", False),
        ("ALLUPPER1!", False),
        ("NoDigits!!", False),
        ("NoSpecial11", False),
    ],
)
def test_password_policy(enc, password, valid):
    assert enc.is_valid_password(password) is valid


def test_link_tokens_are_url_safe_and_unique(enc):
    tokens = {enc.generate_link_token() for _ in range(20)}

    assert len(tokens) == 20
    for token in tokens:
        assert len(token) >= 40
        assert all(ch.isalnum() or ch in "-_" for ch in token)
