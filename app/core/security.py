from datetime import timedelta
from typing import Optional

from jose import jwt, JWTError
from passlib.context import CryptContext
from fastapi import Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from app.core.clock import utcnow
from app.core.config import settings
from app.core.database import get_db, store_guard
from app.models.user_db.user_db import User, UserRole
from app.schemas.login.login_base import SessionContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


# Password hashing
def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password, hashed_password) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


# Token generation
def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    expire = utcnow() + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


# Token verification
def verify_token(token: str) -> dict:
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
        return payload
    except JWTError:
        raise HTTPException(
            status_code=401,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> User:
    payload = verify_token(token)
    email: str = payload.get("sub")
    if not email:
        raise HTTPException(status_code=401, detail="Invalid token payload")

    with store_guard(db):
        user = db.query(User).filter(User.email == email).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    return user


def get_session_context(current_user: User = Depends(get_current_user)) -> SessionContext:
    """Claims built from the stored user, never from what the client decoded."""
    return SessionContext(
        user_id=current_user.id,
        email=current_user.email,
        role=current_user.role,
        is_verified=current_user.is_verified,
    )


def require_admin(ctx: SessionContext = Depends(get_session_context)) -> SessionContext:
    if ctx.role != UserRole.admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return ctx


def resolve_recycler_id(ctx: SessionContext, recycler_id: Optional[int]) -> int:
    """Default to the caller; acting on someone else requires the admin role."""
    if recycler_id is None or recycler_id == ctx.user_id:
        return ctx.user_id
    if ctx.role != UserRole.admin:
        raise HTTPException(status_code=403, detail="Not allowed to act for another recycler")
    return recycler_id
