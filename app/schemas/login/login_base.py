from pydantic import BaseModel

from app.schemas.users.user_base import UserOut


class LoginRequest(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    user: UserOut
    token: str
    token_type: str = "bearer"


class SessionContext(BaseModel):
    """Server-issued claims for the authenticated caller."""

    user_id: int
    email: str
    role: str
    is_verified: bool
