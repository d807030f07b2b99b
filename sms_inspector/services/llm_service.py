"""
sms_inspector/services/llm_service.py

Purpose: AI analysis of SMS bodies

- Extracts confirmation codes and links from a message
- Summarizes a message
- Both prompts return structured output validated by pydantic
"""

from __future__ import annotations

from typing import Final

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from sms_inspector.core.config import settings
from sms_inspector.core.exceptions import ExternalServiceError
from sms_inspector.core.logging import get_logger
from sms_inspector.schemas.sms import ExtractedInfo, SmsSummary

logger = get_logger(__name__)

EXTRACT_PROMPT: Final[str] = (
    "Analyze the following SMS message and extract the confirmation code "
    "(e.g., from Telegram, WhatsApp) and any link. Copy the code and the link "
    "exactly as they appear in the message. Leave a field empty when the "
    "message does not contain it."
)

SUMMARY_PROMPT: Final[str] = "Summarize the following SMS message in a concise manner."

_model: ChatOpenAI | None = None


def get_model() -> ChatOpenAI:
    """
    Lazily create and cache a ChatOpenAI model.

    Uses OPENAI_API_KEY from settings when set, otherwise the environment.
    """
    global _model
    if _model is None:
        kwargs = {}
        if settings.OPENAI_API_KEY:
            kwargs["api_key"] = settings.OPENAI_API_KEY
        _model = ChatOpenAI(
            model=settings.LLM_MODEL,
            temperature=settings.LLM_TEMPERATURE,
            max_tokens=256,  # type: ignore[call-arg]
            **kwargs,
        )
    return _model


async def extract_info(message: str) -> ExtractedInfo:
    """
    Runs the extraction prompt on one message.

    Raises:
        ExternalServiceError: If the model cannot be built or the call fails
    """
    try:
        structured = get_model().with_structured_output(ExtractedInfo)
        result = await structured.ainvoke([
            SystemMessage(content=EXTRACT_PROMPT),
            HumanMessage(content=f'Message: "{message}"'),
        ])
    except Exception as e:
        logger.error(f"Failed to analyze message: {e}", exc_info=True)
        raise ExternalServiceError(str(e) or "An unknown error occurred during analysis.")

    info = result if isinstance(result, ExtractedInfo) else ExtractedInfo.model_validate(result)
    return _drop_hallucinated(message, info)


async def summarize_sms(message: str) -> SmsSummary:
    """
    Runs the summary prompt on one message.

    Raises:
        ExternalServiceError: If the model cannot be built or the call fails
    """
    try:
        structured = get_model().with_structured_output(SmsSummary)
        result = await structured.ainvoke([
            SystemMessage(content=SUMMARY_PROMPT),
            HumanMessage(content=message),
        ])
    except Exception as e:
        logger.error(f"Failed to summarize message: {e}", exc_info=True)
        raise ExternalServiceError(str(e) or "An unknown error occurred during summarization.")

    return result if isinstance(result, SmsSummary) else SmsSummary.model_validate(result)


def _drop_hallucinated(message: str, info: ExtractedInfo) -> ExtractedInfo:
    # Blank strings mean "not found"; values absent from the text cannot be highlighted
    code = (info.confirmation_code or "").strip() or None
    link = (info.link or "").strip() or None
    if code and code not in message:
        logger.info("Extracted code not present in message; dropped")
        code = None
    if link and link not in message:
        logger.info("Extracted link not present in message; dropped")
        link = None
    return ExtractedInfo(confirmation_code=code, link=link, other=(info.other or None))
