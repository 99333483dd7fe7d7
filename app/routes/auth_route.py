from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from app.errors import AuthError
from app.schemas.user_schema import (
    UserCreate,
    UserOut,
    UserLogin,
    AuthResponse,
    RefreshTokenRequest,
    RefreshTokenResponse,
    LogoutRequest,
    PasswordResetRequest,
    PasswordReset,
)
from app.schemas.common import MessageResponse
from app.database import get_db
from app.security.auth import get_current_user
from app.utils.user_app_service import user_app_service
from app.utils.rate_limit import auth_limiter, password_reset_limiter
from app.models.user_model import User
from app.logger import get_logger

auth_router = APIRouter()
logger = get_logger(__name__)

PASSWORD_RESET_MESSAGE = "If an account exists with this email, password reset instructions have been sent."


@auth_router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(auth_limiter)],
)
def register_user(user: UserCreate, db: Session = Depends(get_db)):
    """Register a new customer account"""
    logger.info(f"Registering user: {user.email}")
    return user_app_service.register_user(db, user)


@auth_router.post(
    "/login",
    response_model=AuthResponse,
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(auth_limiter)],
)
def login_user(user_login: UserLogin, db: Session = Depends(get_db)):
    """Login user and return access and refresh tokens"""
    logger.info(f"Login attempt for user: {user_login.email}")
    return user_app_service.login_user(db, user_login)


@auth_router.post("/refresh", response_model=RefreshTokenResponse, status_code=status.HTTP_200_OK)
def refresh_access_token(refresh_request: RefreshTokenRequest, db: Session = Depends(get_db)):
    """Exchange a live refresh token for a new access token"""
    return user_app_service.refresh_access_token(db, refresh_request.refresh_token)


@auth_router.post("/logout", response_model=MessageResponse, status_code=status.HTTP_200_OK)
def logout_user(logout_request: LogoutRequest, db: Session = Depends(get_db)):
    """Drop the refresh-token session; always succeeds so clients can clear local state"""
    try:
        user_app_service.logout_user(db, logout_request.refresh_token)
    except Exception as e:
        db.rollback()
        logger.error(f"Error during logout: {str(e)}")
    return MessageResponse(message="Logged out successfully")


@auth_router.post(
    "/password-reset/request",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(password_reset_limiter)],
)
def request_password_reset(reset_request: PasswordResetRequest, db: Session = Depends(get_db)):
    # Same answer whether or not the account exists
    try:
        user_app_service.request_password_reset(db, reset_request.email)
    except Exception as e:
        logger.error(f"Password reset request error: {str(e)}")
    return MessageResponse(message=PASSWORD_RESET_MESSAGE)


@auth_router.post("/password-reset/reset", response_model=MessageResponse, status_code=status.HTTP_200_OK)
def reset_password(reset: PasswordReset, db: Session = Depends(get_db)):
    try:
        user_app_service.reset_password(db, reset.token, reset.new_password)
    except AuthError:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Password reset error: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Password reset failed"
        )
    return MessageResponse(message="Password reset successfully")


@auth_router.get("/me", response_model=UserOut, status_code=status.HTTP_200_OK)
def get_current_user_profile(current_user: User = Depends(get_current_user)):
    return UserOut.model_validate(current_user)
