"""
sms_inspector/services/settings_service.py

Purpose: Persisted application settings

- One document per key in the settings collection
- Typed defaults for every known key
- Bulk upsert used by the admin panel
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sms_inspector.db.mongo import get_settings_collection
from sms_inspector.core.logging import get_logger
from sms_inspector.schemas.admin import AdminSettings, ErrorMapping, ProxySettings, SiteSettings

logger = get_logger(__name__)

API_KEY = "apiKey"
PROXY_SETTINGS = "proxySettings"
SIGNUP_ENABLED = "signupEnabled"
SITE_NAME = "siteName"
PRIMARY_COLOR = "primaryColor"
EMAIL_CHANGE_ENABLED = "emailChangeEnabled"
NUMBER_LIST = "numberList"
ERROR_MAPPINGS = "errorMappings"

DEFAULT_SETTINGS: Dict[str, Any] = {
    API_KEY: "",
    PROXY_SETTINGS: None,
    SIGNUP_ENABLED: True,
    SITE_NAME: "SMS Inspector",
    PRIMARY_COLOR: "",
    EMAIL_CHANGE_ENABLED: True,
    NUMBER_LIST: [],
    ERROR_MAPPINGS: [],
}


async def get_setting(key: str, default: Any = None) -> Any:
    """
    Reads one setting.

    Args:
        key: Setting key
        default: Returned when the key is missing; falls back to DEFAULT_SETTINGS

    Returns:
        The stored value
    """
    collection = get_settings_collection()
    doc = await collection.find_one({"key": key})
    if doc is None:
        if default is not None:
            return default
        return DEFAULT_SETTINGS.get(key)
    return doc.get("value")


async def set_setting(key: str, value: Any) -> None:
    collection = get_settings_collection()
    await collection.update_one(
        {"key": key},
        {"$set": {"value": value, "updated_at": datetime.utcnow()}},
        upsert=True,
    )
    logger.info(f"Setting updated: {key}")


async def set_settings(values: Dict[str, Any]) -> None:
    """
    Upserts several settings. Callers validate everything first so a
    failure never leaves a half-applied update behind.
    """
    for key, value in values.items():
        await set_setting(key, value)


async def get_all_settings() -> Dict[str, Any]:
    """
    Returns every known setting, defaults filled in for missing keys.
    """
    collection = get_settings_collection()
    values = dict(DEFAULT_SETTINGS)
    async for doc in collection.find({"key": {"$in": list(DEFAULT_SETTINGS)}}):
        values[doc["key"]] = doc.get("value")
    return values


async def get_admin_settings() -> AdminSettings:
    values = await get_all_settings()
    return AdminSettings(
        api_key=values[API_KEY] or "",
        proxy_settings=_proxy_from_value(values[PROXY_SETTINGS]),
        signup_enabled=_as_bool(values[SIGNUP_ENABLED], True),
        site_name=values[SITE_NAME] or "",
        primary_color=values[PRIMARY_COLOR] or "",
        email_change_enabled=_as_bool(values[EMAIL_CHANGE_ENABLED], True),
        number_list=list(values[NUMBER_LIST] or []),
        error_mappings=_mappings_from_value(values[ERROR_MAPPINGS]),
    )


async def get_site_settings() -> SiteSettings:
    values = await get_all_settings()
    return SiteSettings(
        site_name=values[SITE_NAME] or "",
        primary_color=values[PRIMARY_COLOR] or "",
        signup_enabled=_as_bool(values[SIGNUP_ENABLED], True),
        email_change_enabled=_as_bool(values[EMAIL_CHANGE_ENABLED], True),
    )


async def get_api_key() -> str:
    return (await get_setting(API_KEY)) or ""


async def get_proxy_settings() -> Optional[ProxySettings]:
    return _proxy_from_value(await get_setting(PROXY_SETTINGS))


async def get_error_mappings() -> List[ErrorMapping]:
    return _mappings_from_value(await get_setting(ERROR_MAPPINGS))


async def is_signup_enabled() -> bool:
    return _as_bool(await get_setting(SIGNUP_ENABLED), True)


async def is_email_change_enabled() -> bool:
    return _as_bool(await get_setting(EMAIL_CHANGE_ENABLED), True)


def apply_error_mappings(message: str, mappings: List[ErrorMapping]) -> str:
    """
    Replaces a raw upstream error with the first mapping whose pattern it
    contains (case-insensitive). Unmatched messages pass through.
    """
    lowered = message.lower()
    for mapping in mappings:
        if mapping.pattern and mapping.pattern.lower() in lowered:
            return mapping.message
    return message


def _proxy_from_value(value: Any) -> Optional[ProxySettings]:
    if not value or not isinstance(value, dict):
        return None
    proxy = ProxySettings.model_validate(value)
    return None if proxy.is_blank else proxy


def _mappings_from_value(value: Any) -> List[ErrorMapping]:
    if not isinstance(value, list):
        return []
    return [ErrorMapping.model_validate(item) for item in value if isinstance(item, dict)]


def _as_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    return bool(value)
