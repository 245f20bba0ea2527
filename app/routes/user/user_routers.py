from fastapi import APIRouter, Depends, HTTPException, Body, Query
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.core.security import get_current_user, get_session_context, require_admin, verify_password
from app.models.user_db.user_db import User, UserRole
from app.models.user_db.user_db_crud import create_user, get_user_by_id, get_all_users, count_users, \
    update_user, get_user_by_email, get_user_by_username, set_verified, change_password
from app.schemas.common.page_response import PageResponse
from app.schemas.login.login_base import SessionContext
from app.schemas.users.user_base import UserCreate, UserOut, UserUpdate, VerificationStatus, PasswordChange


user_router = APIRouter(prefix="/users", tags=["Users"])


def _ensure_self_or_admin(ctx: SessionContext, user_id: int):
    if ctx.user_id != user_id and ctx.role != UserRole.admin:
        raise HTTPException(status_code=403, detail="Not allowed to access this user")


@user_router.post("/register", response_model=UserOut)
def register_user(user: UserCreate, db: Session = Depends(get_db)):
    if get_user_by_email(db, user.email):
        raise HTTPException(status_code=400, detail="Email already registered")
    if get_user_by_username(db, user.username):
        raise HTTPException(status_code=400, detail="Username already taken")
    return create_user(db, user)


@user_router.get("/", response_model=PageResponse[UserOut])
def list_users(
    page: int = Query(1, ge=1),
    size: int = Query(10, ge=1),
    db: Session = Depends(get_db),
    _: SessionContext = Depends(require_admin),
):
    skip = (page - 1) * size
    total = count_users(db)
    users = get_all_users(db, skip=skip, limit=size)

    has_next = (page * size) < total
    has_prev = page > 1

    return PageResponse[UserOut](
        page=page,
        size=size,
        total=total,
        has_next=has_next,
        has_prev=has_prev,
        items=[UserOut.model_validate(user) for user in users]
    )


@user_router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: int, db: Session = Depends(get_db), ctx: SessionContext = Depends(get_session_context)):
    _ensure_self_or_admin(ctx, user_id)
    user = get_user_by_id(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@user_router.get("/{user_id}/verification", response_model=VerificationStatus)
def verification_status(
    user_id: int,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    _ensure_self_or_admin(ctx, user_id)
    user = get_user_by_id(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return VerificationStatus(user_id=user.id, verified=user.is_verified)


@user_router.put("/{user_id}/approve-verification", response_model=VerificationStatus)
def approve_verification(
    user_id: int,
    db: Session = Depends(get_db),
    _: SessionContext = Depends(require_admin),
):
    user = set_verified(db, user_id, True)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return VerificationStatus(user_id=user.id, verified=user.is_verified)


@user_router.put("/{user_id}", response_model=UserOut)
def edit_user(
    user_id: int,
    updates: UserUpdate = Body(...),
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    _ensure_self_or_admin(ctx, user_id)
    user = get_user_by_id(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    if updates.email:
        existing_user = get_user_by_email(db, updates.email)
        if existing_user and existing_user.id != user.id:
            raise HTTPException(status_code=400, detail="Email already registered")

    if updates.username:
        existing_username = get_user_by_username(db, updates.username)
        if existing_username and existing_username.id != user.id:
            raise HTTPException(status_code=400, detail="Username already taken")

    return update_user(db, user_id, updates)


@user_router.put("/{user_id}/password")
def update_password(
    user_id: int,
    payload: PasswordChange,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if current_user.id != user_id:
        raise HTTPException(status_code=403, detail="Not allowed to change this password")
    if not verify_password(payload.current_password, current_user.hashed_password):
        raise HTTPException(status_code=400, detail="Current password is incorrect")

    change_password(db, current_user, payload.new_password)
    return {"message": "Password updated successfully"}
