"""
Security primitives.

- Argon2id password hashing, verification and parameter rotation
- Password policy
- Opaque session tokens and their SHA-256 digests
- Profile tracking identifiers
"""

import hashlib
import re
import secrets

from argon2 import PasswordHasher
from argon2.exceptions import (
    InvalidHashError,
    VerificationError,
    VerifyMismatchError,
)

from workforce_auth.core.config import settings


# =============================================================================
# Password Hashing
# =============================================================================
# Hashes embed their salt and cost parameters, so old credentials keep
# verifying after the configured cost changes and are rehashed on next login.

# Stored next to each local credential hash
HASH_ALGORITHM = "argon2id"

pwd_hasher = PasswordHasher(
    time_cost=settings.hash_cost_factor,
    memory_cost=settings.argon2_memory_cost,
    parallelism=settings.argon2_parallelism,
    hash_len=32,
    salt_len=16,
)

_dummy_hash: str | None = None


def hash_password(password: str) -> str:
    """Return an encoded Argon2id hash ($argon2id$v=19$m=...,t=...,p=...$salt$hash)."""
    return pwd_hasher.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    """Constant-time check; malformed hashes count as a mismatch."""
    try:
        return pwd_hasher.verify(hashed_password, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


def password_needs_rehash(hashed_password: str) -> bool:
    """True when the hash was produced with parameters other than the current ones."""
    try:
        return pwd_hasher.check_needs_rehash(hashed_password)
    except InvalidHashError:
        return True


def verify_dummy_password(password: str) -> None:
    """
    Burn one verification against a throwaway hash.

    Used when no credential exists for a username, so an unknown user
    costs the same as a wrong password.
    """
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = pwd_hasher.hash(secrets.token_urlsafe(16))
    verify_password(password, _dummy_hash)


# =============================================================================
# Password Policy
# =============================================================================

# Upper bound keeps a single login from costing arbitrary hashing time
PASSWORD_MAX_LENGTH = 128

_PASSWORD_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"[A-Z]"), "Password must contain at least one uppercase letter"),
    (re.compile(r"[a-z]"), "Password must contain at least one lowercase letter"),
    (re.compile(r"\d"), "Password must contain at least one digit"),
    (
        re.compile(r"[^A-Za-z0-9\s]"),
        "Password must contain at least one special character",
    ),
)


def validate_password_strength(password: str) -> tuple[bool, str | None]:
    """
    Check a candidate password against the policy.

    Returns:
        (True, None) when acceptable, otherwise (False, first violated rule)
    """
    min_length = settings.password_min_length
    if len(password) < min_length:
        return False, f"Password must be at least {min_length} characters long"
    if len(password) > PASSWORD_MAX_LENGTH:
        return False, f"Password must be at most {PASSWORD_MAX_LENGTH} characters long"

    for pattern, message in _PASSWORD_RULES:
        if not pattern.search(password):
            return False, message

    return True, None


# =============================================================================
# Session Tokens
# =============================================================================
# 256 bits of entropy. Only the digest is persisted, so a database dump
# cannot be replayed as live sessions.

SESSION_TOKEN_BYTES = 32


def generate_session_token() -> str:
    return f"{settings.session_token_prefix}{secrets.token_urlsafe(SESSION_TOKEN_BYTES)}"


def hash_session_token(token: str) -> str:
    """Hex SHA-256 digest used as the session lookup key."""
    return hashlib.sha256(token.encode()).hexdigest()


def generate_tracking_id() -> str:
    """Support/audit reference assigned to a new profile, e.g. TRK-9F3A61C2D4B7."""
    return f"TRK-{secrets.token_hex(6).upper()}"
