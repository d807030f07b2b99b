"""
sms_inspector/schemas/sms.py

Purpose: SMS record schemas

- SmsRecord: the fixed shape every Premiumy response is normalized into
- SmsFilter: the fetch form (date range, sender, phone, paging)
- Analysis results returned by the LLM prompts
"""

from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model exchanged with the front end in camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SmsRecord(CamelModel):
    """One MDR row. Columns missing from the upstream response stay empty."""

    date_time: str = ""
    sender_id: str = ""
    phone: str = ""
    mcc_mnc: str = ""
    destination: str = ""
    range: str = ""
    rate: str = ""
    currency: str = ""
    message: str = ""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "dateTime": "2024-05-01 10:15:02",
                "senderId": "Telegram",
                "phone": "447700900123",
                "mccMnc": "23430",
                "destination": "United Kingdom - Mobile",
                "range": "UK EE",
                "rate": "0.012",
                "currency": "USD",
                "message": "Telegram code: 12345",
            }
        },
    )


class SmsFilter(CamelModel):
    start_date: date
    end_date: date
    sender_id: Optional[str] = None
    phone: Optional[str] = None
    page: int = Field(default=1, ge=1)
    per_page: int = Field(default=100, ge=1, le=1000)

    @model_validator(mode="after")
    def check_date_order(self):
        if self.start_date > self.end_date:
            raise ValueError("startDate must not be after endDate")
        return self


class SmsGroup(CamelModel):
    """Messages received by one phone number, oldest first."""

    phone: str
    sender_id: str
    messages: List[SmsRecord]


class SmsFetchResponse(CamelModel):
    data: List[SmsRecord]
    groups: List[SmsGroup]
    total: int


class MessageRequest(CamelModel):
    message: str = Field(..., min_length=1, description="The SMS message content.")


class ExtractedInfo(CamelModel):
    """Structured output of the extraction prompt."""

    confirmation_code: Optional[str] = Field(
        default=None,
        description="The confirmation code found in the message, if any (e.g., from Telegram, WhatsApp).",
    )
    link: Optional[str] = Field(default=None, description="The link found in the message, if any.")
    other: Optional[str] = Field(default=None, description="Other important information found in the message.")


class SmsSummary(CamelModel):
    summary: str = Field(..., description="A concise summary of the SMS message content.")


class MessageSegment(CamelModel):
    text: str
    kind: Literal["text", "link", "code"] = "text"


class AnalysisResponse(CamelModel):
    data: ExtractedInfo
    segments: List[MessageSegment]
