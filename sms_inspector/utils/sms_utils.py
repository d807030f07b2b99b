"""
sms_inspector/utils/sms_utils.py

Purpose: SMS record presentation helpers

- Groups records by phone number in chronological order
- Splits a message into highlighted segments after analysis
"""

from datetime import datetime
from typing import Dict, List, Optional

from sms_inspector.schemas.sms import ExtractedInfo, MessageSegment, SmsGroup, SmsRecord
from sms_inspector.utils.time_utils import parse_record_datetime

UNKNOWN_NUMBER = "Unknown Number"


def group_records(records: List[SmsRecord]) -> List[SmsGroup]:
    """
    Groups records by phone number.

    Groups keep the order in which their number first appears. Inside a
    group messages are sorted oldest first; records whose datetime cannot be
    parsed go last and keep their original relative order.

    Args:
        records: Normalized MDR rows

    Returns:
        One SmsGroup per phone number
    """
    grouped: Dict[str, List[SmsRecord]] = {}
    for record in records:
        key = record.phone.strip() or UNKNOWN_NUMBER
        grouped.setdefault(key, []).append(record)

    groups = []
    for phone, messages in grouped.items():
        ordered = sorted(messages, key=_chronological_key)
        groups.append(
            SmsGroup(phone=phone, sender_id=ordered[0].sender_id, messages=ordered)
        )
    return groups


def _chronological_key(record: SmsRecord):
    parsed = parse_record_datetime(record.date_time)
    # sorted() is stable, so unparseable rows keep their order after the dated ones
    return (parsed is None, parsed or datetime.min)


def build_segments(message: str, info: ExtractedInfo) -> List[MessageSegment]:
    """
    Splits a message so the extracted link and confirmation code can be
    highlighted. Every occurrence is marked; text between them stays plain.
    """
    segments = [MessageSegment(text=message, kind="text")]
    segments = _split_segments(segments, info.link, "link")
    segments = _split_segments(segments, info.confirmation_code, "code")
    return segments


def _split_segments(segments: List[MessageSegment], term: Optional[str], kind: str) -> List[MessageSegment]:
    if not term:
        return segments

    result = []
    for segment in segments:
        if segment.kind != "text" or term not in segment.text:
            result.append(segment)
            continue
        parts = segment.text.split(term)
        for index, part in enumerate(parts):
            if part:
                result.append(MessageSegment(text=part, kind="text"))
            if index < len(parts) - 1:
                result.append(MessageSegment(text=term, kind=kind))
    return result
