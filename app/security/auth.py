from jose import jwt, JWTError
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple
from uuid import UUID, uuid4
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from app import config
from app.errors import AuthError
from app.models.user_model import User
from app.database import get_db

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=config.BCRYPT_ROUNDS)
security = HTTPBearer(auto_error=False)


def verify_password(plain_password, hashed_password):
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password):
    return pwd_context.hash(password)


def _encode(user_id, token_type: str, expires_delta: timedelta, **claims) -> Tuple[str, datetime]:
    now = datetime.now(timezone.utc)
    expire = now + expires_delta
    to_encode = {
        "sub": str(user_id),
        "exp": expire,
        "iat": now,
        "jti": str(uuid4()),  # Unique per token so sessions never collide
        "type": token_type,
        "iss": config.JWT_ISSUER,
        "aud": config.JWT_AUDIENCE,
    }
    to_encode.update(claims)
    encoded_jwt = jwt.encode(to_encode, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)
    return encoded_jwt, expire


def create_access_token(user_id, expires_delta: Optional[timedelta] = None):
    return _encode(user_id, "access", expires_delta or config.JWT_EXPIRES_IN)


def create_refresh_token(user_id, expires_delta: Optional[timedelta] = None):
    return _encode(user_id, "refresh", expires_delta or config.REFRESH_TOKEN_EXPIRES_IN)


def create_password_reset_token(user_id, expires_delta: Optional[timedelta] = None):
    return _encode(user_id, "password_reset", expires_delta or config.PASSWORD_RESET_EXPIRES_IN)


def decode_token(token: str, token_type: str) -> dict:
    """Verify signature, expiry, issuer and audience, and check the token type"""
    payload = jwt.decode(
        token,
        config.JWT_SECRET,
        algorithms=[config.JWT_ALGORITHM],
        audience=config.JWT_AUDIENCE,
        issuer=config.JWT_ISSUER,
    )
    if payload.get("type") != token_type or not payload.get("sub"):
        raise JWTError(f"Expected a {token_type} token")
    return payload


def verify_access_token(token: str) -> dict:
    try:
        return decode_token(token, "access")
    except JWTError:
        raise AuthError("Invalid or expired token", "INVALID_TOKEN")


def user_id_from_payload(payload: dict) -> UUID:
    try:
        return UUID(payload["sub"])
    except (KeyError, ValueError):
        raise AuthError("Invalid or expired token", "INVALID_TOKEN")


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = verify_access_token(credentials.credentials)
    user_id = user_id_from_payload(payload)

    user = db.query(User).filter(User.id == user_id, User.is_active == True).first()
    if user is None:
        raise AuthError("Invalid or expired token", "INVALID_TOKEN")
    return user


def get_current_staff_user(current_user: User = Depends(get_current_user)) -> User:
    """Admins and staff manage every booking"""
    if current_user.role not in ("admin", "staff"):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Staff access required"
        )
    return current_user


def get_current_admin_user(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return current_user
