"""
sms_inspector/schemas/user.py

Purpose: User and auth schemas

- UserProfile returned to the front end (never carries the password hash)
- Signup, login and profile update forms
"""

from typing import Literal

from pydantic import Field, field_validator

from sms_inspector.schemas.sms import CamelModel
from sms_inspector.utils.validation_utils import normalize_email, validate_email

UserStatus = Literal["active", "blocked"]


def _checked_email(value: str) -> str:
    email = normalize_email(value)
    if not validate_email(email):
        raise ValueError("Please enter a valid email.")
    return email


class UserProfile(CamelModel):
    id: str
    email: str
    name: str = ""
    status: UserStatus = "active"
    is_admin: bool = False
    can_add_numbers: bool = False


class SignupRequest(CamelModel):
    name: str = Field(..., min_length=2)
    email: str
    password: str = Field(..., min_length=8)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Name must be at least 2 characters.")
        return v

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return _checked_email(v)


class LoginRequest(CamelModel):
    email: str
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return _checked_email(v)


class ProfileUpdate(CamelModel):
    name: str = Field(..., min_length=2)
    email: str

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Name must be at least 2 characters.")
        return v

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return _checked_email(v)


class StatusUpdate(CamelModel):
    status: UserStatus


class PermissionUpdate(CamelModel):
    can_add_numbers: bool
