from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, ForeignKey, Uuid
import uuid
from app.database import Base
from sqlalchemy.orm import relationship


class UserSession(Base):
    """Refresh-token session; one row per issued refresh token"""
    __tablename__ = "sessions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=True)
    token = Column(String(512), unique=True, nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    last_accessed = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    user = relationship("User", back_populates="sessions")
