"""
Credential store: user registration, credential checks and password change.
Passwords are hashed before they reach the session and never logged.
"""
from __future__ import annotations

import logging

from sqlalchemy import or_

from models import storage
from models.user import User
from utils.exceptions import ApiError, Conflict, InvalidCredentials
from utils.security import hash_password, verify_password, needs_rehash
from utils.sessions import revoke_all_sessions

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def find_by_identifier(identifier: str) -> User | None:
    """Email (case-insensitive) or username (exact)."""
    session = storage.get_session()
    return session.query(User).filter(
        or_(User.email == normalize_email(identifier), User.username == identifier.strip())
    ).first()


def register_user(username: str, email: str, password: str, **profile) -> User:
    """Create a user; raises Conflict when the email or username is taken."""
    email = normalize_email(email)
    session = storage.get_session()
    existing = session.query(User).filter(or_(User.email == email, User.username == username)).first()
    if existing:
        field = "email" if existing.email == email else "username"
        logger.info("Registration rejected: %s already in use", field)
        raise Conflict(f"User with this {field} already exists")

    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password),
        **profile,
    )
    storage.new(user)
    storage.save()
    logger.info("User %s registered", user.id)
    return user


def verify_credentials(identifier: str, password: str) -> User:
    """
    Return the user matching identifier/password.
    Unknown identifier and wrong password are indistinguishable to the caller.
    """
    user = find_by_identifier(identifier)
    if not verify_password(password, user.password_hash if user else None):
        logger.info("Login failed for identifier %r", identifier)
        raise InvalidCredentials()

    if needs_rehash(user.password_hash):
        user.password_hash = hash_password(password)
        storage.new(user)
        storage.save()
        logger.info("Upgraded password hash for user %s", user.id)
    return user


def change_password(user_id: str, current_password: str, new_password: str) -> User:
    """Replace the password and drop every session in the same commit."""
    user = storage.get(User, user_id)
    if user is None:
        raise ApiError("User not found", 404, "NOT_FOUND")
    if not verify_password(current_password, user.password_hash):
        raise ApiError("Current password is incorrect", 400, "INVALID_PASSWORD")

    user.password_hash = hash_password(new_password)
    storage.new(user)
    revoke_all_sessions(user.id, commit=False)
    storage.save()
    logger.info("Password changed for user %s; all sessions revoked", user.id)
    return user
