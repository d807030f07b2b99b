"""
sms_inspector/api/auth.py

Purpose: Session endpoints

- Signup (honours the signupEnabled flag)
- Login / logout via the `token` cookie
- Current user lookup
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Response

from sms_inspector.api.deps import TOKEN_COOKIE, get_current_user
from sms_inspector.core.config import settings
from sms_inspector.core.exceptions import AuthenticationError
from sms_inspector.core.logging import get_logger
from sms_inspector.core.security import TOKEN_TYPE_USER, create_token
from sms_inspector.schemas.response import SuccessResponse
from sms_inspector.schemas.user import LoginRequest, SignupRequest, UserProfile
from sms_inspector.services import user_service

logger = get_logger(__name__)
router = APIRouter()


@router.post("/auth/signup", response_model=UserProfile, status_code=201)
async def signup(payload: SignupRequest):
    profile = await user_service.signup(payload.name, payload.email, payload.password)
    logger.info("User signed up", extra={"user_id": profile.id, "action": "signup"})
    return profile


@router.post("/auth/login", response_model=UserProfile)
async def login(payload: LoginRequest, response: Response):
    """
    Checks credentials and sets the `token` session cookie.
    Blocked users can still log in; protected endpoints refuse them.
    """
    user = await user_service.authenticate(payload.email, payload.password)
    if not user:
        raise AuthenticationError("Invalid email or password.")

    token = create_token(
        str(user["_id"]),
        TOKEN_TYPE_USER,
        settings.TOKEN_TTL_SECONDS,
        adm=bool(user.get("isAdmin")),
    )
    response.set_cookie(
        TOKEN_COOKIE,
        token,
        max_age=settings.TOKEN_TTL_SECONDS,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
        path="/",
    )
    logger.info("User logged in", extra={"user_id": str(user["_id"]), "action": "login"})
    return user_service.to_profile(user)


@router.post("/auth/logout", response_model=SuccessResponse)
async def logout(response: Response):
    response.delete_cookie(TOKEN_COOKIE, path="/")
    return SuccessResponse(message="Logged out")


@router.get("/auth/me", response_model=UserProfile)
async def me(user: Dict[str, Any] = Depends(get_current_user)):
    return user_service.to_profile(user)
