"""
sms_inspector/utils/validation_utils.py

Purpose: Input validation

- Email format checks
- Phone number list parsing and deduplication
- Proxy host/port checks
- Input sanitization
"""

import re
from typing import Iterable, List, Optional


EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# Separators accepted when numbers are pasted as free text
NUMBER_SEPARATORS = re.compile(r"[\s,;]+")


def normalize_email(email: Optional[str]) -> str:
    """
    Trims and lower-cases an email so lookups are case-insensitive.
    """
    if not email:
        return ""
    return email.strip().lower()


def validate_email(email: str) -> bool:
    """
    Validates email format.

    Args:
        email: Email address (already normalized)

    Returns:
        True if the address looks deliverable
    """
    if not email or len(email) > 254:
        return False
    return bool(EMAIL_PATTERN.match(email))


def parse_numbers(text: Optional[str]) -> List[str]:
    """
    Splits pasted text into phone numbers.

    Accepts newlines, commas, semicolons and whitespace as separators.
    Empty entries are dropped and duplicates removed, keeping the first
    occurrence order.

    Args:
        text: Raw text from the number list form

    Returns:
        List of unique, trimmed numbers
    """
    if not text:
        return []
    return dedupe_numbers(NUMBER_SEPARATORS.split(text))


def dedupe_numbers(numbers: Iterable[str]) -> List[str]:
    seen = set()
    unique = []
    for number in numbers:
        number = (number or "").strip()
        if not number or number in seen:
            continue
        seen.add(number)
        unique.append(number)
    return unique


def validate_proxy_host(host: str) -> bool:
    """
    Validates a proxy host: an IPv4 address or a hostname.
    """
    if not host or len(host) > 253:
        return False
    if re.match(r"^\d{1,3}(\.\d{1,3}){3}$", host):
        return all(0 <= int(part) <= 255 for part in host.split("."))
    return bool(re.match(r"^[A-Za-z0-9]([A-Za-z0-9\-\.]*[A-Za-z0-9])?$", host))


def validate_port(port: int) -> bool:
    return 1 <= port <= 65535


def sanitize_text(text: Optional[str], max_length: int = 200) -> str:
    """
    Trims text for form fields such as site name.

    Args:
        text: Input text
        max_length: Maximum allowed length

    Returns:
        Sanitized text
    """
    if not text:
        return ""
    text = " ".join(text.split())
    return text[:max_length]
