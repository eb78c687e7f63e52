"""
Showcase Backend — Password and Token Primitives
==================================================

What:  Password hashing and bearer-token secret helpers.
How:   passlib's CryptContext for passwords (pbkdf2_sha256, pure Python),
       `secrets` for token secrets, SHA-256 digests for token storage.
Who:   Used by user_service (hashing), auth_service (verification) and
       token_service (token secrets).
"""

import hashlib
import hmac
import secrets

from passlib.context import CryptContext

_pwd = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

TOKEN_SECRET_LENGTH = 40

# Verified against when the email is unknown, so both failure paths
# spend the same hashing time.
_DUMMY_HASH = _pwd.hash(secrets.token_urlsafe(16))


def hash_password(password: str) -> str:
    if not password:
        raise ValueError("password_blank")
    return _pwd.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    try:
        return _pwd.verify(password, password_hash)
    except (ValueError, TypeError):
        # Unrecognized or malformed hash in the users table
        return False


def burn_password_check(password: str) -> None:
    """Run a verification that always fails, to mirror the real check's cost."""
    verify_password(password or "x", _DUMMY_HASH)


def generate_token_secret() -> str:
    """Random URL-safe secret, exactly TOKEN_SECRET_LENGTH characters."""
    return secrets.token_urlsafe(TOKEN_SECRET_LENGTH)[:TOKEN_SECRET_LENGTH]


def digest_token(secret: str) -> str:
    return hashlib.sha256(secret.encode("utf-8")).hexdigest()


def digests_match(a: str, b: str) -> bool:
    return hmac.compare_digest(a, b)
