from datetime import datetime, timezone
from typing import Optional
from uuid import UUID
from sqlalchemy.orm import Session
from app.models.session_model import UserSession
from app.models.user_model import User
from app.logger import get_logger

logger = get_logger(__name__)


class SessionStore:
    """Refresh-token sessions persisted in the sessions table"""

    @staticmethod
    def store_refresh_token(db: Session, user_id: UUID, token: str, expires_at: datetime) -> UserSession:
        session = db.query(UserSession).filter(UserSession.token == token).first()
        now = datetime.now(timezone.utc)
        if session:
            session.expires_at = expires_at
            session.last_accessed = now
        else:
            session = UserSession(user_id=user_id, token=token, expires_at=expires_at, last_accessed=now)
            db.add(session)
        db.commit()
        db.refresh(session)
        return session

    @staticmethod
    def get_valid_session(db: Session, token: str) -> Optional[UserSession]:
        """Unexpired session whose owner is still active"""
        return (
            db.query(UserSession)
            .join(User, UserSession.user_id == User.id)
            .filter(
                UserSession.token == token,
                UserSession.expires_at > datetime.now(timezone.utc),
                User.is_active == True,
            )
            .first()
        )

    @staticmethod
    def touch(db: Session, session: UserSession) -> None:
        session.last_accessed = datetime.now(timezone.utc)
        db.commit()

    @staticmethod
    def delete_session(db: Session, token: str) -> int:
        deleted = db.query(UserSession).filter(UserSession.token == token).delete()
        db.commit()
        if deleted:
            logger.info("Session removed")
        return deleted

    @staticmethod
    def delete_user_sessions(db: Session, user_id: UUID) -> int:
        deleted = db.query(UserSession).filter(UserSession.user_id == user_id).delete()
        db.commit()
        logger.info(f"Removed {deleted} sessions for user {user_id}")
        return deleted

    @staticmethod
    def cleanup_expired_sessions(db: Session) -> int:
        """Remove expired sessions to keep the table small"""
        try:
            expired_count = db.query(UserSession).filter(
                UserSession.expires_at <= datetime.now(timezone.utc)
            ).delete()
            db.commit()

            if expired_count > 0:
                logger.info(f"Cleaned up {expired_count} expired sessions")

            return expired_count

        except Exception as e:
            logger.error(f"Error cleaning up expired sessions: {str(e)}")
            db.rollback()
            raise


session_store = SessionStore()
