# core/security.py

"""
Credential primitives: password hashing, session/state JWTs and
single-use email tokens.

Everything here is pure; persistence of hashes and expiries is the
caller's job.
"""

import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
from jose import JWTError, jwt

from core.config import settings
from core.logging_config import logger


if settings.JWT_SECRET_KEY == "dev_secret":
    logger.warning("JWT_SECRET_KEY not configured. Set a strong value in the environment.")


# ============================================================
# PASSWORDS (bcrypt)
# ============================================================
BCRYPT_MAX_BYTES = 72


def _password_bytes(plain: str) -> bytes:
    # bcrypt only reads the first 72 bytes; newer releases refuse longer input
    return plain.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(plain: str) -> str:
    return bcrypt.hashpw(_password_bytes(plain), bcrypt.gensalt(rounds=10)).decode("utf-8")


def verify_password(plain: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_password_bytes(plain), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash in the store
        return False


# ============================================================
# SESSION TOKENS
# ============================================================
def create_access_token(
    user_id: str,
    role: str,
    administrator_id: Optional[str] = None,
    condominium_id: Optional[str] = None,
) -> str:
    expire = datetime.now(timezone.utc) + timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS)
    to_encode = {
        "sub": user_id,
        "role": str(role),
        "administrator_id": administrator_id,
        "condominium_id": condominium_id,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Raises JWTError when the token is invalid, expired or not a session token."""
    payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    if payload.get("typ") == "state":
        raise JWTError("state token used as session token")
    return payload


# ============================================================
# OAUTH STATE (short-lived, signed)
# ============================================================
def sign_state(payload: Dict[str, Any]) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.STATE_TOKEN_EXPIRE_MINUTES)
    to_encode = {**payload, "typ": "state", "exp": expire}
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def verify_state(token: str) -> Dict[str, Any]:
    payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    if payload.get("typ") != "state":
        raise JWTError("not a state token")
    return payload


# ============================================================
# SINGLE-USE EMAIL TOKENS (verification / reset)
# ============================================================
def generate_token() -> str:
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def issue_token(ttl: timedelta):
    """Returns (raw_token, token_hash, expires_at). Only the hash is persisted."""
    raw = generate_token()
    return raw, hash_token(raw), datetime.now(timezone.utc) + ttl
