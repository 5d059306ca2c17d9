from models.base_model import Base, BaseModel
from sqlalchemy import Column, String, Boolean, Date, Float, CheckConstraint
from sqlalchemy.orm import relationship

GENDERS = ("male", "female", "other")
ACTIVITY_LEVELS = ("sedentary", "lightly_active", "moderately_active", "very_active", "extremely_active")


class User(BaseModel, Base):
    __tablename__ = "users"

    username = Column(String(30), nullable=False, unique=True, index=True)
    # Always stored lowercase
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)

    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    date_of_birth = Column(Date, nullable=True)
    gender = Column(String(10), nullable=True)  # one of GENDERS, checked in schema
    height = Column(Float, nullable=True)  # cm
    weight = Column(Float, nullable=True)  # kg
    activity_level = Column(String(20), nullable=False, default="moderately_active")
    profile_picture = Column(String(512), nullable=False, default="")
    is_email_verified = Column(Boolean, nullable=False, default=False)

    # The session table: one row per device holding a valid refresh token
    refresh_tokens = relationship(
        "RefreshToken",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint("(height IS NULL) OR (height BETWEEN 50 AND 300)", name="ck_users_height_range"),
        CheckConstraint("(weight IS NULL) OR (weight BETWEEN 20 AND 500)", name="ck_users_weight_range"),
    )

    @property
    def password(self):
        raise AttributeError("Password: Write-only field")
