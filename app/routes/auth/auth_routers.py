from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.security import (
    verify_password,
    create_access_token,
    get_session_context,
)
from app.models.user_db.user_db_crud import get_user_by_email
from app.schemas.login.login_base import LoginRequest, LoginResponse, SessionContext

auth_router = APIRouter(prefix="/auth", tags=["Auth"])


@auth_router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = get_user_by_email(db, payload.email)
    if not user or not verify_password(payload.password, user.hashed_password):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token({"sub": user.email})
    return {"user": user, "token": token}


@auth_router.get("/me", response_model=SessionContext)
def get_me(ctx: SessionContext = Depends(get_session_context)):
    return ctx
