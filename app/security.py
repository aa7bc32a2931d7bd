import base64
import hashlib
import hmac
import os

from app.config import get_settings

MIN_PASSWORD_LENGTH = 6
_ITERATIONS = 150_000


def _digest(password: str, salt: bytes) -> bytes:
    settings = get_settings()
    return hashlib.pbkdf2_hmac(
        "sha256",
        (password + settings.password_pepper).encode("utf-8"),
        salt,
        _ITERATIONS,
    )


def hash_password(password: str) -> str:
    salt = os.urandom(16)
    digest = _digest(password, salt)
    return f"{base64.b64encode(salt).decode()}${base64.b64encode(digest).decode()}"


def verify_password(password: str, stored: str) -> bool:
    try:
        salt_b64, digest_b64 = (stored or "").split("$", 1)
        salt = base64.b64decode(salt_b64)
        expected = base64.b64decode(digest_b64)
    except ValueError:
        return False
    return hmac.compare_digest(_digest(password, salt), expected)


def password_is_acceptable(password: str | None) -> bool:
    return len(password or "") >= MIN_PASSWORD_LENGTH
