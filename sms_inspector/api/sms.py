"""
sms_inspector/api/sms.py

Purpose: SMS inspection endpoints

- Fetch MDR rows from Premiumy and group them by phone number
- Analyze a message body (confirmation code, link)
- Summarize a message body
"""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends
from pydantic import ValidationError as PydanticValidationError

from sms_inspector.api.deps import get_active_user
from sms_inspector.core.exceptions import ValidationError
from sms_inspector.core.logging import get_logger, LogContext
from sms_inspector.schemas.sms import (
    AnalysisResponse,
    MessageRequest,
    SmsFetchResponse,
    SmsFilter,
    SmsSummary,
)
from sms_inspector.services import llm_service
from sms_inspector.services.premiumy_service import get_premiumy_service
from sms_inspector.utils.sms_utils import build_segments, group_records

logger = get_logger(__name__)
router = APIRouter()


def parse_filter(payload: Dict[str, Any]) -> SmsFilter:
    """
    Validates the fetch form.

    Raises:
        ValidationError: "Invalid filter data." with the field errors as details
    """
    try:
        return SmsFilter.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(
            "Invalid filter data.",
            details=e.errors(include_url=False, include_context=False, include_input=False),
        )


@router.post("/sms/fetch", response_model=SmsFetchResponse)
async def fetch_sms(
    payload: Dict[str, Any] = Body(
        ...,
        examples=[{"startDate": "2024-05-01", "endDate": "2024-05-01", "senderId": "Telegram", "phone": ""}],
    ),
    user: Dict[str, Any] = Depends(get_active_user),
):
    """
    Fetches MDR rows for the filter and returns them both flat and grouped
    by phone number.
    """
    service = get_premiumy_service()
    await service.require_api_key()
    sms_filter = parse_filter(payload)

    with LogContext(user_id=str(user["_id"]), action="fetch_sms"):
        records = await service.fetch_sms_data(sms_filter)

    return SmsFetchResponse(data=records, groups=group_records(records), total=len(records))


@router.post("/sms/analyze", response_model=AnalysisResponse)
async def analyze_message(
    payload: MessageRequest,
    user: Dict[str, Any] = Depends(get_active_user),
):
    with LogContext(user_id=str(user["_id"]), action="analyze_message"):
        info = await llm_service.extract_info(payload.message)
        logger.info("Analysis complete")

    return AnalysisResponse(data=info, segments=build_segments(payload.message, info))


@router.post("/sms/summarize", response_model=SmsSummary)
async def summarize_message(
    payload: MessageRequest,
    user: Dict[str, Any] = Depends(get_active_user),
):
    with LogContext(user_id=str(user["_id"]), action="summarize_message"):
        return await llm_service.summarize_sms(payload.message)
