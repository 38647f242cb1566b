"""Auth API routes: login, signup, current user."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

import config
from teamhub.models import User
from teamhub.models.base import async_session_factory
from teamhub.schemas import UserInfo
from teamhub.services import users
from web.auth import (
    create_access_token,
    get_current_user,
    hash_password,
    require_user,
    verify_password,
)

router = APIRouter(prefix="/api/auth", tags=["auth"])


class LoginRequest(BaseModel):
    email: str
    password: str


class SignupRequest(BaseModel):
    email: str
    password: str
    first_name: str = ""
    last_name: str = ""
    role: str = "player"


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserInfo


def _login_response(user: User) -> LoginResponse:
    token = create_access_token(user.id, user.role)
    return LoginResponse(access_token=token, user=UserInfo.model_validate(user))


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest):
    """Authenticate and return JWT."""
    email = body.email.strip().lower()
    async with async_session_factory() as session:
        user = await users.get_by_email(session, email)
        if not user:
            # Bootstrap: if INITIAL_ADMIN_PASSWORD is set and matches, create admin
            if (
                config.INITIAL_ADMIN_PASSWORD
                and email == config.INITIAL_ADMIN_EMAIL.lower()
                and body.password == config.INITIAL_ADMIN_PASSWORD
            ):
                user = User(
                    email=email,
                    password_hash=hash_password(config.INITIAL_ADMIN_PASSWORD),
                    role="admin",
                    first_name="Admin",
                    last_name="",
                )
                session.add(user)
                await session.commit()
                await session.refresh(user)
                return _login_response(user)
            raise HTTPException(status_code=401, detail="Invalid email or password")
    if not verify_password(body.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")
    return _login_response(user)


@router.post("/signup", response_model=LoginResponse, status_code=201)
async def signup(body: SignupRequest):
    """Create an account and log it in."""
    email = body.email.strip().lower()
    if "@" not in email:
        raise HTTPException(400, "Invalid email address")
    if len(body.password) < 6:
        raise HTTPException(400, "Password must be at least 6 characters")
    if body.role not in config.SIGNUP_ROLES:
        raise HTTPException(400, "Invalid role")
    async with async_session_factory() as session:
        if await users.get_by_email(session, email):
            raise HTTPException(400, "Email already registered")
        user = User(
            email=email,
            password_hash=hash_password(body.password),
            role=body.role,
            first_name=body.first_name.strip(),
            last_name=body.last_name.strip(),
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)
    return _login_response(user)


@router.get("/me", response_model=UserInfo)
async def get_me(user: User = Depends(require_user)):
    """Get current authenticated user."""
    return UserInfo.model_validate(user)


@router.get("/me/optional", response_model=Optional[UserInfo])
async def get_me_optional(user: Optional[User] = Depends(get_current_user)):
    """Get current user if logged in, else null. For frontend auth check."""
    if not user:
        return None
    return UserInfo.model_validate(user)
