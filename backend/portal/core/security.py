"""
Security utilities: password hashing and opaque token generation.
"""

import secrets

import bcrypt

# Use bcrypt directly instead of passlib to avoid initialization issues
# passlib has problems with bcrypt 5.0.0+ during initialization

BCRYPT_ROUNDS = 10
RESET_TOKEN_BYTES = 32
SESSION_ID_BYTES = 32


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash."""
    if not plain_password or not hashed_password:
        return False
    if isinstance(plain_password, str):
        plain_password = plain_password.encode("utf-8")
    if isinstance(hashed_password, str):
        hashed_password = hashed_password.encode("utf-8")
    try:
        return bcrypt.checkpw(plain_password, hashed_password)
    except ValueError:
        # Malformed hash stored in the database
        return False


def get_password_hash(password: str) -> str:
    """Generate a password hash."""
    if isinstance(password, str):
        password = password.encode("utf-8")
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    hashed = bcrypt.hashpw(password, salt)
    return hashed.decode("utf-8")


def generate_reset_token() -> str:
    """64 hex characters from 32 random bytes."""
    return secrets.token_hex(RESET_TOKEN_BYTES)


def generate_session_id() -> str:
    """URL-safe random session id; the only value the session cookie carries."""
    return secrets.token_urlsafe(SESSION_ID_BYTES)
