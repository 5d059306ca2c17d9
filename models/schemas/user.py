import re
from datetime import date

from marshmallow import Schema, EXCLUDE, fields, pre_load, validates, validate, ValidationError

from models.user import GENDERS, ACTIVITY_LEVELS

USERNAME_RE = re.compile(r"^[a-zA-Z0-9_]+$")
PASSWORD_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")


def _norm_email(v):
    return v.strip().lower() if isinstance(v, str) else v


def _strip_fields(data, *names):
    if isinstance(data, dict):
        for name in names:
            if isinstance(data.get(name), str):
                data[name] = data[name].strip()
    return data


def check_password_strength(value: str) -> None:
    if len(value) < 8:
        raise ValidationError("Password must be at least 8 characters long.")
    if not PASSWORD_RE.match(value):
        raise ValidationError(
            "Password must contain at least one lowercase letter, one uppercase letter, and one number."
        )


class LoadSchema(Schema):
    class Meta:
        unknown = EXCLUDE


class UserCreateSchema(LoadSchema):
    username = fields.String(required=True, validate=validate.Length(min=3, max=30))
    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True)
    first_name = fields.String(required=True, data_key="firstName", validate=validate.Length(min=1, max=50))
    last_name = fields.String(required=True, data_key="lastName", validate=validate.Length(min=1, max=50))

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data["email"] = _norm_email(data["email"])
        return _strip_fields(data, "username", "firstName", "lastName")

    @validates("username")
    def validate_username(self, value, **kwargs):
        if not USERNAME_RE.match(value):
            raise ValidationError("Username can only contain letters, numbers, and underscores.")

    @validates("password")
    def validate_password(self, value, **kwargs):
        check_password_strength(value)


class UserLoginSchema(LoadSchema):
    identifier = fields.String(required=True, validate=validate.Length(min=1, error="Email or username is required"))
    password = fields.String(required=True, load_only=True,
                             validate=validate.Length(min=1, error="Password is required"))


class ChangePasswordSchema(LoadSchema):
    current_password = fields.String(required=True, data_key="currentPassword",
                                     validate=validate.Length(min=1, error="Current password is required"))
    new_password = fields.String(required=True, data_key="newPassword")

    @validates("new_password")
    def validate_new_password(self, value, **kwargs):
        check_password_strength(value)


class UserUpdateSchema(LoadSchema):
    first_name = fields.String(data_key="firstName", validate=validate.Length(min=1, max=50))
    last_name = fields.String(data_key="lastName", validate=validate.Length(min=1, max=50))
    date_of_birth = fields.Date(data_key="dateOfBirth", allow_none=True)
    gender = fields.String(validate=validate.OneOf(GENDERS))
    height = fields.Float(allow_none=True, validate=validate.Range(min=50, max=300))
    weight = fields.Float(allow_none=True, validate=validate.Range(min=20, max=500))
    activity_level = fields.String(data_key="activityLevel", validate=validate.OneOf(ACTIVITY_LEVELS))
    profile_picture = fields.String(data_key="profilePicture")

    @pre_load
    def normalize(self, data, **kwargs):
        # null clears the picture; the column itself is never NULL
        if isinstance(data, dict) and "profilePicture" in data and data["profilePicture"] is None:
            data["profilePicture"] = ""
        return _strip_fields(data, "firstName", "lastName")

    @validates("date_of_birth")
    def validate_date_of_birth(self, value, **kwargs):
        if value is not None and value >= date.today():
            raise ValidationError("Date of birth cannot be in the future.")


class UserOutSchema(Schema):
    """The owner's view of an account."""
    id = fields.String()
    username = fields.String()
    email = fields.String()
    first_name = fields.String(data_key="firstName")
    last_name = fields.String(data_key="lastName")
    date_of_birth = fields.Date(data_key="dateOfBirth", allow_none=True)
    gender = fields.String(allow_none=True)
    height = fields.Float(allow_none=True)
    weight = fields.Float(allow_none=True)
    activity_level = fields.String(data_key="activityLevel")
    profile_picture = fields.String(data_key="profilePicture")
    is_email_verified = fields.Boolean(data_key="isEmailVerified")
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")


class PublicUserSchema(Schema):
    id = fields.String()
    username = fields.String()
    first_name = fields.String(data_key="firstName")
    last_name = fields.String(data_key="lastName")
    profile_picture = fields.String(data_key="profilePicture")
    created_at = fields.DateTime(data_key="createdAt")
