"""
sms_inspector/api/deps.py

Purpose: Request dependencies shared by the routers

- Resolves the `token` cookie to the current user
- Gates blocked users, number-list editors and admins
- Checks the secondary `admin_session` cookie
"""

from typing import Any, Dict

from fastapi import Depends, Request

from sms_inspector.core.exceptions import AuthenticationError, PermissionDeniedError
from sms_inspector.core.security import TOKEN_TYPE_ADMIN, TOKEN_TYPE_USER, decode_token
from sms_inspector.services import user_service

TOKEN_COOKIE = "token"
ADMIN_SESSION_COOKIE = "admin_session"

BLOCKED_MESSAGE = (
    "Your account has been blocked by an administrator. "
    "Please contact support for assistance."
)


async def get_current_user(request: Request) -> Dict[str, Any]:
    """
    Raises:
        AuthenticationError: If the cookie is missing, invalid, expired or
            points at a deleted user
    """
    payload = decode_token(request.cookies.get(TOKEN_COOKIE), TOKEN_TYPE_USER)
    if payload is None:
        raise AuthenticationError("Not authenticated.")

    user = await user_service.get_user_by_id(str(payload.get("sub", "")))
    if not user:
        raise AuthenticationError("Not authenticated.")
    return user


async def get_active_user(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    if user.get("status") == user_service.STATUS_BLOCKED:
        raise PermissionDeniedError(BLOCKED_MESSAGE)
    return user


async def get_number_editor(user: Dict[str, Any] = Depends(get_active_user)) -> Dict[str, Any]:
    if not (user.get("isAdmin") or user.get("canAddNumbers")):
        raise PermissionDeniedError("You do not have permission to add numbers.")
    return user


async def get_admin_user(user: Dict[str, Any] = Depends(get_active_user)) -> Dict[str, Any]:
    if not user.get("isAdmin"):
        raise PermissionDeniedError("Admin access required.")
    return user


async def require_admin_session(
    request: Request,
    user: Dict[str, Any] = Depends(get_admin_user),
) -> Dict[str, Any]:
    """
    Admin panel gate: an admin user AND an admin_session issued to that user.
    """
    payload = decode_token(request.cookies.get(ADMIN_SESSION_COOKIE), TOKEN_TYPE_ADMIN)
    if payload is None or payload.get("sub") != str(user["_id"]):
        raise AuthenticationError("Admin session expired. Please log in to the admin panel.")
    return user
