"""
sms_inspector/api/admin.py

Purpose: Admin panel endpoints

- Admin session login/logout (`admin_session` cookie)
- Settings read/update, with the proxy tested before anything is saved
- User management (status, add-number permission)
- Number list maintenance
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Response

from sms_inspector.api.deps import ADMIN_SESSION_COOKIE, get_admin_user, require_admin_session
from sms_inspector.core.config import settings
from sms_inspector.core.exceptions import AuthenticationError
from sms_inspector.core.logging import get_logger, LogContext
from sms_inspector.core.security import TOKEN_TYPE_ADMIN, create_token, credentials_match
from sms_inspector.schemas.admin import (
    AdminLoginRequest,
    AdminSettings,
    AdminSettingsUpdate,
    NumberListResponse,
    NumbersRequest,
    ProxySettings,
    ProxyTestResponse,
    SettingsUpdateResponse,
)
from sms_inspector.schemas.response import SuccessResponse
from sms_inspector.schemas.user import PermissionUpdate, StatusUpdate, UserProfile
from sms_inspector.services import number_service, settings_service, user_service
from sms_inspector.services.proxy_service import get_proxy_service
from sms_inspector.utils.validation_utils import parse_numbers, sanitize_text

logger = get_logger(__name__)
router = APIRouter(prefix="/admin")


@router.post("/login", response_model=SuccessResponse)
async def admin_login(
    payload: AdminLoginRequest,
    response: Response,
    user: Dict[str, Any] = Depends(get_admin_user),
):
    """
    Opens the admin panel for one hour. The caller must already be logged in
    as an admin user.
    """
    if not credentials_match(
        payload.username, payload.password, settings.ADMIN_USERNAME, settings.ADMIN_PASSWORD
    ):
        logger.warning("Admin login rejected", extra={"user_id": str(user["_id"]), "action": "admin_login"})
        raise AuthenticationError("Invalid admin credentials.")

    session = create_token(str(user["_id"]), TOKEN_TYPE_ADMIN, settings.ADMIN_SESSION_TTL_SECONDS)
    response.set_cookie(
        ADMIN_SESSION_COOKIE,
        session,
        max_age=settings.ADMIN_SESSION_TTL_SECONDS,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
        path=settings.admin_cookie_path,
    )
    logger.info("Admin session opened", extra={"user_id": str(user["_id"]), "action": "admin_login"})
    return SuccessResponse(message="Admin session started")


@router.post("/logout", response_model=SuccessResponse)
async def admin_logout(response: Response):
    response.delete_cookie(ADMIN_SESSION_COOKIE, path=settings.admin_cookie_path)
    return SuccessResponse(message="Admin session closed")


@router.get("/settings", response_model=AdminSettings)
async def get_admin_settings(admin: Dict[str, Any] = Depends(require_admin_session)):
    return await settings_service.get_admin_settings()


@router.put("/settings", response_model=SettingsUpdateResponse)
async def update_admin_settings(
    payload: AdminSettingsUpdate,
    admin: Dict[str, Any] = Depends(require_admin_session),
):
    """
    Saves the supplied settings.

    A non-blank proxy is tested first; if the test fails nothing is saved.
    A proxy with a blank IP clears the stored proxy.
    """
    with LogContext(user_id=str(admin["_id"]), action="update_settings"):
        updates: Dict[str, Any] = {}
        proxy_ip: Optional[str] = None

        if "proxy_settings" in payload.model_fields_set:
            proxy = payload.proxy_settings
            if proxy is None or proxy.is_blank:
                updates[settings_service.PROXY_SETTINGS] = None
            else:
                proxy_ip = await get_proxy_service().test_proxy(proxy)
                updates[settings_service.PROXY_SETTINGS] = proxy.model_dump(by_alias=True)

        if payload.api_key is not None:
            updates[settings_service.API_KEY] = payload.api_key.strip()
        if payload.signup_enabled is not None:
            updates[settings_service.SIGNUP_ENABLED] = payload.signup_enabled
        if payload.site_name is not None:
            updates[settings_service.SITE_NAME] = sanitize_text(payload.site_name, max_length=100)
        if payload.primary_color is not None:
            updates[settings_service.PRIMARY_COLOR] = sanitize_text(payload.primary_color, max_length=64)
        if payload.email_change_enabled is not None:
            updates[settings_service.EMAIL_CHANGE_ENABLED] = payload.email_change_enabled
        if payload.number_list is not None:
            updates[settings_service.NUMBER_LIST] = parse_numbers(payload.number_list)
        if payload.error_mappings is not None:
            updates[settings_service.ERROR_MAPPINGS] = [
                {"pattern": m.pattern.strip(), "message": m.message.strip()}
                for m in payload.error_mappings
                if m.pattern.strip()
            ]

        await settings_service.set_settings(updates)
        logger.info(f"Settings saved: {', '.join(sorted(updates)) or 'none'}")

    return SettingsUpdateResponse(proxy_ip=proxy_ip)


@router.post("/proxy/test", response_model=ProxyTestResponse)
async def test_proxy(
    payload: ProxySettings,
    admin: Dict[str, Any] = Depends(require_admin_session),
):
    ip = await get_proxy_service().test_proxy(payload)
    return ProxyTestResponse(ip=ip)


@router.get("/users", response_model=List[UserProfile])
async def get_all_users(admin: Dict[str, Any] = Depends(require_admin_session)):
    return await user_service.list_users()


@router.put("/users/{user_id}/status", response_model=UserProfile)
async def toggle_user_status(
    user_id: str,
    payload: StatusUpdate,
    admin: Dict[str, Any] = Depends(require_admin_session),
):
    return await user_service.set_user_status(user_id, payload.status)


@router.put("/users/{user_id}/permissions", response_model=UserProfile)
async def toggle_user_add_number_permission(
    user_id: str,
    payload: PermissionUpdate,
    admin: Dict[str, Any] = Depends(require_admin_session),
):
    return await user_service.set_add_number_permission(user_id, payload.can_add_numbers)


@router.put("/numbers", response_model=NumberListResponse)
async def set_number_list(
    payload: NumbersRequest,
    admin: Dict[str, Any] = Depends(require_admin_session),
):
    return NumberListResponse(numbers=await number_service.replace_number_list(payload.numbers))


@router.delete("/numbers/{number}", response_model=NumberListResponse)
async def remove_number(
    number: str,
    admin: Dict[str, Any] = Depends(require_admin_session),
):
    return NumberListResponse(numbers=await number_service.remove_number(number))
