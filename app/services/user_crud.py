from datetime import datetime, timezone
from typing import Optional
from uuid import UUID
from app.errors import AuthError
from app.schemas.user_schema import UserCreate
from app.models.user_model import User
from sqlalchemy.orm import Session
from app.security.auth import get_password_hash
from app.logger import get_logger

logger = get_logger(__name__)


class UserCRUD:
    @staticmethod
    def get_user_id(db: Session, user_id: UUID) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == email.lower()).first()

    @staticmethod
    def create_user(db: Session, user: UserCreate) -> User:
        if UserCRUD.get_user_by_email(db, user.email):
            raise AuthError("User with this email already exists", "USER_EXISTS")

        db_user = User(
            email=user.email.lower(),
            password_hash=get_password_hash(user.password),
            first_name=user.first_name,
            last_name=user.last_name,
            phone=user.phone,
            role="customer",
            is_active=True,
        )
        db.add(db_user)
        db.commit()
        db.refresh(db_user)
        logger.info(f"User created: {db_user.id}")
        return db_user

    @staticmethod
    def record_login(db: Session, user: User) -> User:
        user.last_login = datetime.now(timezone.utc)
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def set_password(db: Session, user_id: UUID, new_password: str) -> Optional[User]:
        db_user = UserCRUD.get_user_id(db, user_id)
        if not db_user:
            return None
        db_user.password_hash = get_password_hash(new_password)
        db.commit()
        db.refresh(db_user)
        return db_user


user_crud = UserCRUD()
