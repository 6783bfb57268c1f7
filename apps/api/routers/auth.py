"""
Authentication router: signup, signin, session verification and logout.
"""

import logging
from typing import Optional
import uuid

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from database import get_db
from errors import ConflictError, UnauthorizedError
from models.user import User
from routers.auth_scope import AuthContext, get_auth_context
from routers.rate_limit import rate_limit
from services.crypto import hash_password, verify_password
from services.session_token import create_session, revoke_session
from services.storage import get_user

router = APIRouter()
logger = logging.getLogger(__name__)

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class SignupRequest(BaseModel):
    username: str = Field(min_length=3, max_length=20, pattern=r"^[a-zA-Z0-9_-]+$")
    email: str = Field(max_length=254, pattern=EMAIL_PATTERN)
    password: str = Field(min_length=6)
    full_name: Optional[str] = Field(default=None, max_length=120)


class SigninRequest(BaseModel):
    email: str = Field(max_length=254, pattern=EMAIL_PATTERN)
    password: str = Field(min_length=6)


class UserResponse(BaseModel):
    id: str
    username: str
    email: str
    full_name: Optional[str] = None
    carbon_credits: int = 0


class AuthResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    user: UserResponse
    token: Optional[str] = None
    expires_at: Optional[str] = None


def _user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        full_name=user.full_name,
        carbon_credits=int(user.carbon_credits or 0),
    )


@router.post("/signup", response_model=AuthResponse, status_code=201)
async def signup(
    request: SignupRequest,
    _rate_limit: None = Depends(rate_limit("auth_signup", limit=20, window_seconds=3600)),
    db: AsyncSession = Depends(get_db),
):
    """Create a user and open a session for it."""
    email = request.email.strip().lower()
    existing = await db.execute(
        select(User.id).where(or_(User.email == email, User.username == request.username))
    )
    if existing.first() is not None:
        raise ConflictError("Email or username already exists")

    user = User(
        id=str(uuid.uuid4()),
        username=request.username,
        email=email,
        password_hash=hash_password(request.password),
        full_name=request.full_name or None,
        carbon_credits=0,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise ConflictError("Email or username already exists") from exc

    session = await create_session(user.id, db)
    logger.info("signup user=%s username=%s", user.id, user.username)
    return AuthResponse(
        message="User created successfully",
        user=_user_response(user),
        token=session["token"],
        expires_at=session["expires_at"],
    )


@router.post("/signin", response_model=AuthResponse)
async def signin(
    request: SigninRequest,
    _rate_limit: None = Depends(rate_limit("auth_signin", limit=30, window_seconds=900)),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(select(User).where(User.email == request.email.strip().lower()))
    user = result.scalar_one_or_none()
    if user is None or not verify_password(request.password, user.password_hash):
        logger.info("signin rejected email=%s", request.email)
        raise UnauthorizedError("Invalid email or password")

    session = await create_session(user.id, db)
    return AuthResponse(
        message="Signed in successfully",
        user=_user_response(user),
        token=session["token"],
        expires_at=session["expires_at"],
    )


@router.get("/me", response_model=AuthResponse)
async def get_current_user(
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Verify the bearer token and return its user."""
    user = await get_user(auth.user_id, db)
    if user is None:
        raise UnauthorizedError("User not found")
    return AuthResponse(user=_user_response(user), token=auth.token)


@router.post("/logout")
async def logout(
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Revoke the presented session token."""
    await revoke_session(auth.token, db)
    return {"success": True, "message": "Logged out successfully"}
