"""
Authentication blueprint:
- POST /auth/register
- POST /auth/login
- POST /auth/refresh          (refresh cookie only)
- POST /auth/logout
- POST /auth/logout-all
- GET  /auth/me
- PUT  /auth/change-password
- POST /auth/verify-email     (placeholder)
- POST /auth/forgot-password  (placeholder)

The implementation:
- Uses argon2 for password hashing (via utils.security)
- Issues short-lived access tokens and long-lived refresh tokens, each signed with its own secret
- Keeps a digest of every live refresh token (utils.sessions) so refresh tokens can be rotated and revoked
- Access tokens are stateless: logout clears cookies but a copied bearer token lives until it expires
"""
from __future__ import annotations

import logging

from flask import Blueprint, request, jsonify, current_app

from models import storage
from models.user import User
from models.schemas.user import UserCreateSchema, UserOutSchema, UserLoginSchema, ChangePasswordSchema

from utils.credentials import register_user, verify_credentials, change_password as change_user_password
from utils.cookies import set_auth_cookies, clear_auth_cookies
from utils.decorators import require_auth, current_principal
from utils.exceptions import ApiError, TokenExpired, TokenInvalid
from utils.security import issue_token_pair, decode_token, REFRESH
from utils.sessions import register_session, rotate_session, revoke_session, revoke_all_sessions, is_session_valid

logger = logging.getLogger(__name__)

bp = Blueprint("auth", __name__, url_prefix="/auth")

user_create_schema = UserCreateSchema()
user_out_schema = UserOutSchema()
user_login_schema = UserLoginSchema()
change_password_schema = ChangePasswordSchema()


def _summary(user: User) -> dict:
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "isEmailVerified": user.is_email_verified,
        "profilePicture": user.profile_picture,
    }


def _start_session(user: User, message: str, status: int):
    """Issue a token pair, register the refresh token, deliver both."""
    tokens = issue_token_pair(user)
    register_session(user.id, tokens.refresh_token, tokens.refresh_expires_at)
    resp = jsonify(
        {
            "success": True,
            "message": message,
            "data": {"accessToken": tokens.access_token, "user": _summary(user)},
        }
    )
    resp.status_code = status
    return set_auth_cookies(resp, tokens.access_token, tokens.refresh_token)


def _message_response(message: str, status: int = 200):
    return jsonify({"success": True, "message": message}), status


@bp.post("/register")
def register():
    """
    Register a new user and start a session.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [username, email, password, firstName, lastName]
          properties:
            username: { type: string }
            email: { type: string }
            password: { type: string }
            firstName: { type: string }
            lastName: { type: string }
    responses:
      201:
        description: Created (accessToken in body, both tokens as cookies)
      400:
        description: Validation failed
      409:
        description: Email or username already in use
    """
    payload = request.get_json(silent=True) or {}
    data = user_create_schema.load(payload)
    user = register_user(
        data.pop("username"),
        data.pop("email"),
        data.pop("password"),
        **data,
    )
    return _start_session(user, "User registered successfully", 201)


@bp.post("/login")
def login():
    """
    Login with email or username.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             identifier: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (accessToken in body, both tokens as cookies)
      401:
        description: Invalid credentials
    """
    payload = request.get_json(silent=True) or {}
    data = user_login_schema.load(payload)
    user = verify_credentials(data["identifier"], data["password"])
    logger.info("User %s logged in", user.id)
    return _start_session(user, "Login successful", 200)


@bp.post("/refresh")
def refresh():
    """
    Exchange the refresh cookie for a new token pair (rotation).
    The refresh token is read from the cookie only, never from the body or a header.
    ---
    tags:
      - Auth
    responses:
      200:
        description: New accessToken in body, both cookies replaced
      401:
        description: Missing, expired, invalid or already rotated refresh token
    """
    token = request.cookies.get(current_app.config["REFRESH_COOKIE_NAME"])
    if not token:
        raise ApiError("Refresh token not provided.", 401, "NO_REFRESH_TOKEN")

    try:
        claims = decode_token(token, expected_type=REFRESH)
    except TokenExpired:
        raise TokenExpired("Refresh token expired. Please login again.", error="REFRESH_TOKEN_EXPIRED")
    except TokenInvalid:
        raise TokenInvalid("Invalid refresh token.")

    user = storage.get(User, str(claims["id"]))
    if user is None or not is_session_valid(user.id, token):
        logger.warning("Rejected refresh for user %s: session not registered", claims["id"])
        raise TokenInvalid("Invalid refresh token.")

    tokens = issue_token_pair(user)
    # committed before anything is sent; a lost race or failed commit hands out nothing
    if not rotate_session(user.id, token, tokens.refresh_token, tokens.refresh_expires_at):
        logger.warning("Refresh token for user %s was rotated concurrently", user.id)
        raise TokenInvalid("Invalid refresh token.")

    resp = jsonify(
        {
            "success": True,
            "message": "Token refreshed successfully",
            "data": {"accessToken": tokens.access_token, "user": _summary(user)},
        }
    )
    return set_auth_cookies(resp, tokens.access_token, tokens.refresh_token)


@bp.post("/logout")
@require_auth()
def logout():
    """
    Logout this device: forget the presented refresh token and clear cookies.
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: Logout successful
      401:
        description: Unauthorized
    """
    token = request.cookies.get(current_app.config["REFRESH_COOKIE_NAME"])
    if token:
        revoke_session(current_principal().id, token)
    resp, status = _message_response("Logout successful")
    return clear_auth_cookies(resp), status


@bp.post("/logout-all")
@require_auth()
def logout_all():
    """
    Logout every device of the current user.
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: All sessions revoked
      401:
        description: Unauthorized
    """
    revoke_all_sessions(current_principal().id)
    resp, status = _message_response("Logged out from all devices successfully")
    return clear_auth_cookies(resp), status


@bp.get("/me")
@require_auth()
def me():
    """
    Current user's profile.
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
    """
    user = storage.get(User, current_principal().id)
    if user is None:
        raise ApiError("User not found", 404, "NOT_FOUND")
    return jsonify(
        {
            "success": True,
            "message": "User profile retrieved successfully",
            "data": {"user": user_out_schema.dump(user)},
        }
    ), 200


@bp.put("/change-password")
@require_auth()
def change_password():
    """
    Change password; every session is revoked and cookies are cleared.
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             currentPassword: { type: string }
             newPassword: { type: string }
    responses:
      200:
        description: Password changed, login again
      400:
        description: Validation failed or current password incorrect
    """
    payload = request.get_json(silent=True) or {}
    data = change_password_schema.load(payload)
    change_user_password(current_principal().id, data["current_password"], data["new_password"])
    resp, status = _message_response("Password changed successfully. Please login again.")
    return clear_auth_cookies(resp), status


@bp.post("/verify-email")
def verify_email():
    """
    Email verification (not implemented yet).
    ---
    tags:
      - Auth
    responses:
      200: { description: Placeholder }
    """
    return _message_response("Email verification feature coming soon")


@bp.post("/forgot-password")
def forgot_password():
    """
    Password reset request (not implemented yet).
    ---
    tags:
      - Auth
    responses:
      200: { description: Placeholder }
    """
    return _message_response("Password reset feature coming soon")
