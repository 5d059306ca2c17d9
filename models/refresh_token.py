"""
RefreshToken model: one row per live refresh token (one device session).
Fields:
- token_hash: SHA-256 hex of the token string; the raw token is never stored
- user_id: FK to users.id
- issued_at: ordering for eviction of the oldest session
- expires_at: copy of the token's exp claim, for pruning
"""
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base, utcnow


class RefreshToken(BaseModel, Base):
    __tablename__ = "refresh_tokens"

    token_hash = Column(String(64), nullable=False, unique=True, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    issued_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    expires_at = Column(DateTime(timezone=True), nullable=False)

    user = relationship("User", back_populates="refresh_tokens")

    def __repr__(self):
        return f"<RefreshToken user={self.user_id} hash={self.token_hash[:8]}>"
