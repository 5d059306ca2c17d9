"""
security helpers:
- Argon2 password hashing via argon2-cffi
- Access/refresh JWT issuance and verification via PyJWT
- JTI generation for token identifiers
"""
from __future__ import annotations

import hashlib
import uuid
from datetime import datetime, timezone
from typing import Dict, Any, NamedTuple

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError, VerificationError, InvalidHashError

from flask import current_app

from utils.exceptions import TokenExpired, TokenInvalid

ACCESS = "access"
REFRESH = "refresh"

ph = PasswordHasher()

# Verified against when the user does not exist, so both login failures cost one hash check
_DUMMY_HASH = ph.hash("not-a-real-password")


class TokenPair(NamedTuple):
    access_token: str
    refresh_token: str
    refresh_expires_at: datetime


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2
    """
    return ph.hash(password)


def verify_password(password: str, password_hash: str | None) -> bool:
    """Verify a plaintext password against its Argon2 hash.
    A missing hash still burns one verification and returns False.
    """
    try:
        return ph.verify(password_hash or _DUMMY_HASH, password) and password_hash is not None
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


def needs_rehash(password_hash: str) -> bool:
    return ph.check_needs_rehash(password_hash)


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).
    """
    return str(uuid.uuid4())


def token_digest(token: str) -> str:
    """SHA-256 hex of a token string, the form the session registry stores."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _secret_for(token_type: str) -> str:
    if token_type == ACCESS:
        return current_app.config["JWT_SECRET"]
    if token_type == REFRESH:
        return current_app.config["JWT_REFRESH_SECRET"]
    raise ValueError(f"Unknown token type: {token_type}")


def _lifetime_for(token_type: str):
    if token_type == ACCESS:
        return current_app.config["JWT_ACCESS_TOKEN_EXPIRES"]
    return current_app.config["JWT_REFRESH_TOKEN_EXPIRES"]


def create_token(user, token_type: str) -> tuple[str, datetime]:
    """Sign one token for user; returns (token, expiry)."""
    issued = _now()
    exp = issued + _lifetime_for(token_type)
    payload = {
        "id": str(user.id),
        "email": user.email,
        "username": user.username,
        "type": token_type,
        "jti": generate_jti(),
        "iss": current_app.config.get("JWT_ISSUER", "fittrack-api"),
        "iat": int(issued.timestamp()),
        "exp": int(exp.timestamp()),
    }
    token = jwt.encode(payload, _secret_for(token_type), algorithm=current_app.config["JWT_ALGORITHM"])
    return token, exp


def issue_token_pair(user) -> TokenPair:
    """Access token signed with JWT_SECRET, refresh token with JWT_REFRESH_SECRET."""
    access_token, _ = create_token(user, ACCESS)
    refresh_token, refresh_exp = create_token(user, REFRESH)
    return TokenPair(access_token, refresh_token, refresh_exp)


def decode_token(token: str, expected_type: str = ACCESS) -> Dict[str, Any]:
    """
    Decode and validate a JWT with the secret of expected_type.
    Raises TokenExpired when past exp, TokenInvalid for anything else wrong.
    """
    try:
        decoded = jwt.decode(
            token,
            _secret_for(expected_type),
            algorithms=[current_app.config["JWT_ALGORITHM"]],
            issuer=current_app.config.get("JWT_ISSUER", "fittrack-api"),
            options={"require": ["exp", "iat", "iss", "id"]},
        )
    except jwt.ExpiredSignatureError:
        raise TokenExpired()
    except jwt.InvalidTokenError as exc:
        raise TokenInvalid(detail=str(exc)) from exc

    if decoded.get("type") != expected_type:
        raise TokenInvalid(detail="Wrong token type")
    return decoded
