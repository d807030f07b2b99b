"""
sms_inspector/services/number_service.py

Purpose: Shared number list

- Read by every active user
- Appended to by users with the canAddNumbers permission
- Replaced or pruned by admins
"""

from typing import List, Tuple

from sms_inspector.core.exceptions import ResourceNotFoundError, ValidationError
from sms_inspector.core.logging import get_logger
from sms_inspector.services import settings_service
from sms_inspector.utils.validation_utils import dedupe_numbers, parse_numbers

logger = get_logger(__name__)


async def get_number_list() -> List[str]:
    numbers = await settings_service.get_setting(settings_service.NUMBER_LIST)
    if not isinstance(numbers, list):
        return []
    return [str(number) for number in numbers]


async def add_numbers(text: str) -> Tuple[List[str], int]:
    """
    Appends numbers parsed from free text, skipping ones already listed.

    Returns:
        (updated list, number of entries actually added)

    Raises:
        ValidationError: If the text holds no numbers
    """
    incoming = parse_numbers(text)
    if not incoming:
        raise ValidationError("Please enter at least one number.")

    current = await get_number_list()
    merged = dedupe_numbers(current + incoming)
    added = len(merged) - len(current)

    if added:
        await settings_service.set_setting(settings_service.NUMBER_LIST, merged)
    logger.info(f"Number list: {added} added, {len(merged)} total")
    return merged, added


async def replace_number_list(text: str) -> List[str]:
    numbers = parse_numbers(text)
    await settings_service.set_setting(settings_service.NUMBER_LIST, numbers)
    logger.info(f"Number list replaced ({len(numbers)} numbers)")
    return numbers


async def remove_number(number: str) -> List[str]:
    """
    Removes one number.

    Raises:
        ResourceNotFoundError: If the number is not listed
    """
    number = number.strip()
    current = await get_number_list()
    if number not in current:
        raise ResourceNotFoundError("Number not found in the list.")
    remaining = [n for n in current if n != number]
    await settings_service.set_setting(settings_service.NUMBER_LIST, remaining)
    logger.info("Number removed")
    return remaining
