"""
sms_inspector/schemas/admin.py

Purpose: Admin panel schemas

- Proxy settings and error mappings stored in the settings collection
- Partial settings update (only supplied keys change)
- Number list payloads
"""

from typing import List, Optional

from pydantic import Field, field_validator

from sms_inspector.schemas.sms import CamelModel


class ProxySettings(CamelModel):
    ip: str = ""
    port: int = Field(default=0, ge=0, le=65535)
    username: Optional[str] = None
    password: Optional[str] = None

    @field_validator("ip")
    @classmethod
    def strip_ip(cls, v: str) -> str:
        return v.strip()

    @property
    def is_blank(self) -> bool:
        return not self.ip


class ErrorMapping(CamelModel):
    """Replaces a raw Premiumy error containing `pattern` with `message`."""

    pattern: str
    message: str


class AdminSettings(CamelModel):
    api_key: str = ""
    proxy_settings: Optional[ProxySettings] = None
    signup_enabled: bool = True
    site_name: str = "SMS Inspector"
    primary_color: str = ""
    email_change_enabled: bool = True
    number_list: List[str] = Field(default_factory=list)
    error_mappings: List[ErrorMapping] = Field(default_factory=list)


class AdminSettingsUpdate(CamelModel):
    """Every field is optional; omitted fields keep their stored value."""

    api_key: Optional[str] = None
    proxy_settings: Optional[ProxySettings] = None
    signup_enabled: Optional[bool] = None
    site_name: Optional[str] = None
    primary_color: Optional[str] = None
    email_change_enabled: Optional[bool] = None
    number_list: Optional[str] = Field(
        default=None,
        description="Numbers separated by newlines, commas or spaces; replaces the list",
    )
    error_mappings: Optional[List[ErrorMapping]] = None


class SettingsUpdateResponse(CamelModel):
    success: bool = True
    proxy_ip: Optional[str] = None


class ProxyTestResponse(CamelModel):
    success: bool = True
    ip: Optional[str] = None


class AdminLoginRequest(CamelModel):
    username: str
    password: str


class SiteSettings(CamelModel):
    site_name: str
    primary_color: str
    signup_enabled: bool
    email_change_enabled: bool


class SignupStatus(CamelModel):
    signup_enabled: bool


class NumbersRequest(CamelModel):
    numbers: str = Field(..., description="Numbers separated by newlines, commas or spaces")


class NumberListResponse(CamelModel):
    numbers: List[str]
    added: Optional[int] = None
