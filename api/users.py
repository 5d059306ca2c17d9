from __future__ import annotations

from flask import Blueprint, request, jsonify, abort

from models import storage
from models.user import User
from models.schemas.user import UserUpdateSchema, UserOutSchema, PublicUserSchema
from utils.decorators import require_auth, optional_auth, current_principal

bp = Blueprint("users", __name__, url_prefix="/users")

user_update_schema = UserUpdateSchema()
user_out_schema = UserOutSchema()
public_user_schema = PublicUserSchema()


def _own_user() -> User:
    user = storage.get(User, current_principal().id)
    if user is None:
        abort(404, description="User not found")
    return user


@bp.get("/profile")
@require_auth()
def get_profile():
    """
    Get the current user's profile
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200: { description: OK }
      401: { description: Unauthorized }
    """
    user = _own_user()
    return jsonify(
        {
            "success": True,
            "message": "User profile retrieved successfully",
            "data": {"user": user_out_schema.dump(user)},
        }
    ), 200


@bp.put("/profile")
@require_auth()
def update_profile():
    """
    Update the current user's profile
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            firstName: { type: string }
            lastName: { type: string }
            dateOfBirth: { type: string, format: date }
            gender: { type: string, enum: [male, female, other] }
            height: { type: number }
            weight: { type: number }
            activityLevel: { type: string }
            profilePicture: { type: string }
    responses:
      200: { description: OK }
      400: { description: Validation failed }
    """
    data = user_update_schema.load(request.get_json(silent=True) or {})
    user = _own_user()
    for key, value in data.items():
        setattr(user, key, value)
    user.save()
    return jsonify(
        {
            "success": True,
            "message": "Profile updated successfully",
            "data": {"user": user_out_schema.dump(user)},
        }
    ), 200


@bp.get("/<identifier>")
@optional_auth()
def get_user(identifier: str):
    """
    Public profile by id or username. The owner also sees their email.
    ---
    tags:
      - Users
    parameters:
      - in: path
        name: identifier
        type: string
        required: true
    responses:
      200: { description: OK }
      404: { description: Not found }
    """
    session = storage.get_session()
    user = storage.get(User, identifier) or session.query(User).filter(User.username == identifier).first()
    if user is None:
        abort(404, description="User not found")

    body = public_user_schema.dump(user)
    viewer = current_principal()
    if viewer is not None and viewer.id == user.id:
        body["email"] = user.email
        body["isOwnProfile"] = True
    else:
        body["isOwnProfile"] = False
    return jsonify({"success": True, "message": "User retrieved successfully", "data": {"user": body}}), 200
