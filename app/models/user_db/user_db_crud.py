import logging
from typing import List

from sqlalchemy.orm import Session
from app.core.database import store_guard
from app.core.errors import RecyclerNotFound
from app.models.user_db.user_db import User, UserRole
from app.schemas.users.user_base import UserCreate, UserUpdate
from app.core.security import hash_password

logger = logging.getLogger(__name__)

# columns that cannot be cleared through a profile update
REQUIRED_PROFILE_FIELDS = ("email", "username", "name")


def create_user(db: Session, user: UserCreate, role: UserRole = UserRole.recycler):
    db_user = User(
        email=user.email,
        username=user.username,
        name=user.name,
        hashed_password=hash_password(user.password),
        bio=user.bio,
        avatar=user.avatar,
        role=role.value,
        is_verified=False,
    )
    with store_guard(db):
        db.add(db_user)
        db.commit()
        db.refresh(db_user)
    logger.info("Registered user %s (%s)", db_user.id, db_user.role)
    return db_user


def get_user_by_email(db: Session, email: str):
    with store_guard(db):
        return db.query(User).filter(User.email == email).first()


def get_user_by_username(db: Session, username: str):
    with store_guard(db):
        return db.query(User).filter(User.username == username).first()


def get_user_by_id(db: Session, user_id: int):
    with store_guard(db):
        return db.query(User).filter(User.id == user_id).first()


def get_recycler(db: Session, recycler_id: int) -> User:
    user = get_user_by_id(db, recycler_id)
    if not user:
        raise RecyclerNotFound()
    return user


def get_all_users(db: Session, skip: int = 0, limit: int = 100) -> List[User]:
    with store_guard(db):
        return db.query(User).order_by(User.id).offset(skip).limit(limit).all()


def count_users(db: Session) -> int:
    with store_guard(db):
        return db.query(User).count()


def update_user(db: Session, user_id: int, updates: UserUpdate):
    user = get_user_by_id(db, user_id)
    if not user:
        return None

    for field, value in updates.model_dump(exclude_unset=True).items():
        if value is None and field in REQUIRED_PROFILE_FIELDS:
            continue
        setattr(user, field, value)

    with store_guard(db):
        db.commit()
        db.refresh(user)
    return user


def set_verified(db: Session, user_id: int, verified: bool = True):
    user = get_user_by_id(db, user_id)
    if not user:
        return None
    user.is_verified = verified
    with store_guard(db):
        db.commit()
        db.refresh(user)
    logger.info("User %s verification set to %s", user_id, verified)
    return user


def change_password(db: Session, user: User, new_password: str):
    user.hashed_password = hash_password(new_password)
    with store_guard(db):
        db.commit()
    logger.info("Password changed for user %s", user.id)
    return user
