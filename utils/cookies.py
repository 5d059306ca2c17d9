"""Cookie transport for the token pair."""
from __future__ import annotations

from flask import current_app


def _flags() -> dict:
    return {
        "httponly": True,
        "secure": current_app.config.get("COOKIE_SECURE", False),
        "samesite": current_app.config.get("COOKIE_SAMESITE", "Lax"),
        "path": "/",
    }


def set_auth_cookies(response, access_token: str, refresh_token: str):
    """accessToken lives as long as the access JWT, refreshToken as long as the refresh JWT."""
    cfg = current_app.config
    response.set_cookie(
        cfg["ACCESS_COOKIE_NAME"],
        access_token,
        max_age=int(cfg["JWT_ACCESS_TOKEN_EXPIRES"].total_seconds()),
        **_flags(),
    )
    response.set_cookie(
        cfg["REFRESH_COOKIE_NAME"],
        refresh_token,
        max_age=int(cfg["JWT_REFRESH_TOKEN_EXPIRES"].total_seconds()),
        **_flags(),
    )
    return response


def clear_auth_cookies(response):
    cfg = current_app.config
    for name in (cfg["ACCESS_COOKIE_NAME"], cfg["REFRESH_COOKIE_NAME"]):
        response.delete_cookie(name, **_flags())
    return response
