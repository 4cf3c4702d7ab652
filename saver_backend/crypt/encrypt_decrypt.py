import bcrypt
import re
import secrets

MIN_PASSWORD_LENGTH = 8
# bcrypt only looks at the first 72 bytes and recent releases refuse longer input
MAX_PASSWORD_BYTES = 72

PASSWORD_RULES = (
    re.compile(r"[a-z]"),
    re.compile(r"[A-Z]"),
    re.compile(r"\d"),
    re.compile(r"[!@#$%^&*(),.?\":{}|<>_\-+=\[\]~;'/\\]"),
)


class EncryptionDec:
    """
    Credential helpers of the account flows.

    Methods
    -------
    hash_password(text) -> str
        bcrypt hash (salted) of a plaintext password, stored in `app_user.password`.
    check_passwords(plain_text, passwd) -> bool
        Compare a login attempt with the stored hash.
    is_valid_password(password) -> bool
        Sign-up and reset policy: 8 to 72 bytes with a lowercase letter, an
        uppercase letter, a digit and a special character.
    generate_link_token(nbytes=32) -> str
        Single-use token embedded in verification and password-reset links.
    """

    def hash_password(self, text: str) -> str:
        hashed = bcrypt.hashpw(text.encode("utf-8"), bcrypt.gensalt())
        return hashed.decode("utf-8")

    def check_passwords(self, plain_text: str, passwd: str) -> bool:
        """
        Parameters
        ----------
        plain_text : str
            Password typed by the user.
        passwd : str
            Stored bcrypt hash.

        Returns
        -------
        bool
            True on a match. Input longer than bcrypt accepts never matches.
        """
        candidate = plain_text.encode("utf-8")
        if len(candidate) > MAX_PASSWORD_BYTES:
            return False
        return bcrypt.checkpw(candidate, passwd.encode("utf-8"))

    def is_valid_password(self, password: str) -> bool:
        if len(password) < MIN_PASSWORD_LENGTH or len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            return False
        return all(rule.search(password) for rule in PASSWORD_RULES)

    def generate_link_token(self, nbytes: int = 32) -> str:
        """
        URL-safe random token; 32 bytes give a 43 character string.

        Example
        -------
        >>> len(EncryptionDec().generate_link_token())
        43
        """
        return secrets.token_urlsafe(nbytes)
