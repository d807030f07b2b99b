"""
sms_inspector/api/numbers.py

Purpose: Shared number list endpoints for dashboard users
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from sms_inspector.api.deps import get_active_user, get_number_editor
from sms_inspector.core.logging import LogContext
from sms_inspector.schemas.admin import NumberListResponse, NumbersRequest
from sms_inspector.services import number_service

router = APIRouter()


@router.get("/numbers", response_model=NumberListResponse)
async def get_numbers(user: Dict[str, Any] = Depends(get_active_user)):
    return NumberListResponse(numbers=await number_service.get_number_list())


@router.post("/numbers", response_model=NumberListResponse)
async def add_numbers(
    payload: NumbersRequest,
    user: Dict[str, Any] = Depends(get_number_editor),
):
    """
    Appends numbers; ones already listed are skipped.
    """
    with LogContext(user_id=str(user["_id"]), action="add_numbers"):
        numbers, added = await number_service.add_numbers(payload.numbers)
    return NumberListResponse(numbers=numbers, added=added)
