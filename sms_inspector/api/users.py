"""
sms_inspector/api/users.py

Purpose: Self-service profile endpoints
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from sms_inspector.api.deps import get_current_user
from sms_inspector.schemas.user import ProfileUpdate, UserProfile
from sms_inspector.services import user_service

router = APIRouter()


@router.get("/users/me", response_model=UserProfile)
async def get_profile(user: Dict[str, Any] = Depends(get_current_user)):
    return user_service.to_profile(user)


@router.put("/users/me", response_model=UserProfile)
async def update_profile(
    payload: ProfileUpdate,
    user: Dict[str, Any] = Depends(get_current_user),
):
    """
    Updates name and email. Email changes obey the emailChangeEnabled flag.
    """
    return await user_service.update_profile(str(user["_id"]), payload.name, payload.email)
