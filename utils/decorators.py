from __future__ import annotations

import logging
from functools import wraps
from typing import NamedTuple

from flask import request, g, current_app
from sqlalchemy.exc import SQLAlchemyError

from models import storage
from models.user import User
from utils.exceptions import ApiError, Unauthenticated, PrincipalNotFound, InternalFailure
from utils.security import decode_token, ACCESS

logger = logging.getLogger(__name__)


class Principal(NamedTuple):
    """The verified identity handed to views; anything else must be looked up."""
    id: str
    email: str
    username: str

    def to_dict(self) -> dict:
        return self._asdict()


def extract_access_token() -> str | None:
    """Bearer header first, then the access-token cookie."""
    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        token = auth[len("Bearer "):].strip()
        if token:
            return token
    return request.cookies.get(current_app.config["ACCESS_COOKIE_NAME"]) or None


def _load_principal(token: str) -> Principal:
    claims = decode_token(token, expected_type=ACCESS)
    try:
        # projection only: no password hash, no sessions
        row = (
            storage.get_session()
            .query(User.id, User.email, User.username)
            .filter(User.id == str(claims["id"]))
            .first()
        )
    except SQLAlchemyError as exc:
        logger.exception("Authentication lookup failed")
        storage.rollback()
        raise InternalFailure(detail=str(exc)) from exc
    if row is None:
        raise PrincipalNotFound()
    return Principal(id=row.id, email=row.email, username=row.username)


def current_principal() -> Principal | None:
    return g.get("current_user")


def require_auth():
    """
    Reject the request with 401 unless it carries a valid access token
    for an existing user. Sets g.current_user.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            token = extract_access_token()
            if not token:
                raise Unauthenticated()
            g.current_user = _load_principal(token)
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def optional_auth():
    """Like require_auth, but anonymous or bad credentials leave g.current_user as None."""
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            g.current_user = None
            token = extract_access_token()
            if token:
                try:
                    g.current_user = _load_principal(token)
                except ApiError as exc:
                    logger.debug("Optional auth ignored credential: %s", exc.message)
            return fn(*args, **kwargs)

        return wrapper

    return decorator
