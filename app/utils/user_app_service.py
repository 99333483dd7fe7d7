from typing import Optional
from sqlalchemy.orm import Session
from jose import JWTError
from fastapi import HTTPException, status
from app.errors import AuthError
from app.models.user_model import User
from app.schemas.user_schema import (
    UserCreate,
    UserOut,
    UserLogin,
    AuthResponse,
    RefreshTokenResponse,
)
from app.security.auth import (
    create_access_token,
    create_refresh_token,
    create_password_reset_token,
    decode_token,
    user_id_from_payload,
    verify_password,
)
from app.services.user_crud import user_crud
from app.utils.cache import invalidate_related_caches
from app.utils.session_store import session_store
from app.logger import get_logger

logger = get_logger(__name__)


class UserService:
    @staticmethod
    def _issue_tokens(db: Session, user: User):
        access_token, _ = create_access_token(user.id)
        refresh_token, refresh_expires_at = create_refresh_token(user.id)
        session_store.store_refresh_token(db, user.id, refresh_token, refresh_expires_at)
        return access_token, refresh_token

    @staticmethod
    def register_user(db: Session, user_create: UserCreate) -> AuthResponse:
        try:
            user = user_crud.create_user(db, user_create)
            access_token, refresh_token = UserService._issue_tokens(db, user)
        except AuthError:
            raise
        except Exception as e:
            db.rollback()
            logger.error(f"Registration failed for {user_create.email}: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Registration failed",
            )

        logger.info(f"User registered: {user.email}")
        return AuthResponse(
            message="User registered successfully",
            user=UserOut.model_validate(user),
            access_token=access_token,
            refresh_token=refresh_token,
        )

    @staticmethod
    def login_user(db: Session, user_login: UserLogin) -> AuthResponse:
        user = user_crud.get_user_by_email(db, user_login.email)
        if not user:
            logger.warning(f"Failed login attempt for email: {user_login.email}")
            raise AuthError("Invalid credentials", "INVALID_CREDENTIALS")

        if not user.is_active:
            raise AuthError("Account is deactivated", "ACCOUNT_DEACTIVATED")

        if not verify_password(user_login.password, user.password_hash):
            logger.warning(f"Failed login attempt for email: {user_login.email}")
            raise AuthError("Invalid credentials", "INVALID_CREDENTIALS")

        try:
            user_crud.record_login(db, user)
            access_token, refresh_token = UserService._issue_tokens(db, user)
        except Exception as e:
            db.rollback()
            logger.error(f"Login failed for {user_login.email}: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Login failed",
            )

        logger.info(f"User logged in: {user_login.email}")
        return AuthResponse(
            message="Login successful",
            user=UserOut.model_validate(user),
            access_token=access_token,
            refresh_token=refresh_token,
        )

    @staticmethod
    def refresh_access_token(db: Session, refresh_token: str) -> RefreshTokenResponse:
        """Issue a new access token for a live refresh-token session"""
        try:
            decode_token(refresh_token, "refresh")
        except JWTError:
            raise AuthError("Invalid refresh token", "INVALID_REFRESH_TOKEN")

        session = session_store.get_valid_session(db, refresh_token)
        if session is None:
            raise AuthError("Invalid refresh token", "INVALID_REFRESH_TOKEN")

        session_store.touch(db, session)
        access_token, _ = create_access_token(session.user_id)
        logger.info(f"Access token refreshed for user {session.user_id}")
        return RefreshTokenResponse(access_token=access_token)

    @staticmethod
    def logout_user(db: Session, refresh_token: Optional[str]) -> None:
        if refresh_token:
            session_store.delete_session(db, refresh_token)
        invalidate_related_caches("user")

    @staticmethod
    def request_password_reset(db: Session, email: str) -> Optional[str]:
        """Create a reset token for an active account; None when there is no such account"""
        user = user_crud.get_user_by_email(db, email)
        if not user or not user.is_active:
            return None

        reset_token, _ = create_password_reset_token(user.id)
        # TODO: deliver the reset link by email once an SMTP relay is configured
        logger.info(f"Password reset requested for user {user.id}")
        return reset_token

    @staticmethod
    def reset_password(db: Session, token: str, new_password: str) -> None:
        try:
            payload = decode_token(token, "password_reset")
            user_id = user_id_from_payload(payload)
        except (JWTError, AuthError):
            raise AuthError("Invalid or expired reset token", "INVALID_RESET_TOKEN")

        user = user_crud.set_password(db, user_id, new_password)
        if user is None:
            raise AuthError("Invalid or expired reset token", "INVALID_RESET_TOKEN")

        # Every existing refresh token is revoked with the old password
        session_store.delete_user_sessions(db, user_id)
        logger.info(f"Password reset for user {user_id}")


user_app_service = UserService()
