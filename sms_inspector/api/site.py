"""
sms_inspector/api/site.py

Purpose: Public site configuration (branding and registration status)
"""

from fastapi import APIRouter

from sms_inspector.schemas.admin import SignupStatus, SiteSettings
from sms_inspector.services import settings_service

router = APIRouter()


@router.get("/site", response_model=SiteSettings)
async def get_site_settings():
    return await settings_service.get_site_settings()


@router.get("/site/signup-status", response_model=SignupStatus)
async def get_signup_status():
    return SignupStatus(signup_enabled=await settings_service.is_signup_enabled())
