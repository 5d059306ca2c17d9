"""
Session registry: the per-user set of refresh tokens that are still honoured.

A refresh token verifies by signature on its own; it is only accepted by the
refresh endpoint while its digest is present here. Every mutation is a single
commit, and rotation relies on a conditional DELETE so that of two requests
racing with the same token only one can remove it.
"""
from __future__ import annotations

import logging
from datetime import datetime

from flask import current_app

from models import storage
from models.base_model import utcnow
from models.refresh_token import RefreshToken
from utils.security import token_digest

logger = logging.getLogger(__name__)


def _entry(user_id: str, token: str, expires_at: datetime) -> RefreshToken:
    return RefreshToken(
        user_id=str(user_id),
        token_hash=token_digest(token),
        issued_at=utcnow(),
        expires_at=expires_at,
    )


def _prune(session, user_id: str) -> None:
    """Drop expired entries and anything beyond the per-user cap, oldest first."""
    session.query(RefreshToken).filter(
        RefreshToken.user_id == user_id,
        RefreshToken.expires_at < utcnow(),
    ).delete(synchronize_session=False)

    limit = current_app.config.get("MAX_SESSIONS_PER_USER", 10)
    if not limit:
        return
    overflow = (
        session.query(RefreshToken.id)
        .filter(RefreshToken.user_id == user_id)
        .order_by(RefreshToken.issued_at.desc())
        .offset(limit)
        .all()
    )
    if overflow:
        ids = [row.id for row in overflow]
        session.query(RefreshToken).filter(RefreshToken.id.in_(ids)).delete(synchronize_session=False)
        logger.info("Evicted %d oldest session(s) for user %s", len(ids), user_id)


def register_session(user_id: str, token: str, expires_at: datetime, commit: bool = True) -> None:
    """Add a refresh token for user_id (login / register)."""
    session = storage.get_session()
    session.add(_entry(user_id, token, expires_at))
    session.flush()
    _prune(session, str(user_id))
    if commit:
        storage.save()


def rotate_session(user_id: str, old_token: str, new_token: str, expires_at: datetime) -> bool:
    """
    Replace old_token with new_token in one commit.
    Returns False, writing nothing, when old_token is no longer registered.
    """
    session = storage.get_session()
    removed = session.query(RefreshToken).filter(
        RefreshToken.user_id == str(user_id),
        RefreshToken.token_hash == token_digest(old_token),
    ).delete(synchronize_session=False)
    if removed != 1:
        storage.rollback()
        return False
    session.add(_entry(user_id, new_token, expires_at))
    storage.save()
    return True


def revoke_session(user_id: str, token: str, commit: bool = True) -> bool:
    """Forget one refresh token (logout on this device)."""
    session = storage.get_session()
    removed = session.query(RefreshToken).filter(
        RefreshToken.user_id == str(user_id),
        RefreshToken.token_hash == token_digest(token),
    ).delete(synchronize_session=False)
    if commit:
        storage.save()
    return removed > 0


def revoke_all_sessions(user_id: str, commit: bool = True) -> int:
    """Forget every refresh token of user_id (logout-all, password change)."""
    session = storage.get_session()
    removed = session.query(RefreshToken).filter(
        RefreshToken.user_id == str(user_id),
    ).delete(synchronize_session=False)
    if commit:
        storage.save()
    logger.info("Revoked %d session(s) for user %s", removed, user_id)
    return removed


def is_session_valid(user_id: str, token: str) -> bool:
    session = storage.get_session()
    q = session.query(RefreshToken).filter(
        RefreshToken.user_id == str(user_id),
        RefreshToken.token_hash == token_digest(token),
    )
    return session.query(q.exists()).scalar()


def count_sessions(user_id: str) -> int:
    session = storage.get_session()
    return session.query(RefreshToken).filter(RefreshToken.user_id == str(user_id)).count()
