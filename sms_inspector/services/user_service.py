"""
sms_inspector/services/user_service.py

Purpose: User data management

- Signup and credential checks
- Profile updates (name, email)
- Admin-side status and permission toggles
- User retrieval and listing
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo.errors import DuplicateKeyError

from sms_inspector.db.mongo import get_users_collection
from sms_inspector.core.exceptions import (
    ConflictError,
    FeatureDisabledError,
    PermissionDeniedError,
    ResourceNotFoundError,
)
from sms_inspector.core.logging import get_logger, LogContext
from sms_inspector.core.security import hash_password, verify_password
from sms_inspector.schemas.user import UserProfile
from sms_inspector.services import settings_service
from sms_inspector.utils.validation_utils import normalize_email

logger = get_logger(__name__)

STATUS_ACTIVE = "active"
STATUS_BLOCKED = "blocked"


def to_profile(user: Dict[str, Any]) -> UserProfile:
    """Converts a user document to the public profile (drops the password)."""
    return UserProfile(
        id=str(user["_id"]),
        email=user.get("email", ""),
        name=user.get("name") or "",
        status=user.get("status", STATUS_ACTIVE),
        is_admin=bool(user.get("isAdmin", False)),
        can_add_numbers=bool(user.get("canAddNumbers", False)),
    )


def _object_id(user_id: str) -> ObjectId:
    try:
        return ObjectId(user_id)
    except (InvalidId, TypeError):
        raise ResourceNotFoundError("User not found.")


async def get_user_by_id(user_id: str) -> Optional[Dict[str, Any]]:
    """
    Retrieves a user by ID.

    Returns:
        User document or None if not found (or the id is malformed)
    """
    try:
        oid = ObjectId(user_id)
    except (InvalidId, TypeError):
        return None
    users = get_users_collection()
    return await users.find_one({"_id": oid})


async def get_user_by_email(email: str) -> Optional[Dict[str, Any]]:
    users = get_users_collection()
    return await users.find_one({"email": normalize_email(email)})


async def create_user(
    name: str,
    email: str,
    password: str,
    is_admin: bool = False,
) -> Dict[str, Any]:
    """
    Inserts a new active user.

    Raises:
        ConflictError: If the email is already registered
    """
    email = normalize_email(email)
    with LogContext(email=email, action="create_user"):
        users = get_users_collection()

        if await users.find_one({"email": email}):
            raise ConflictError("User with this email already exists.")

        now = datetime.utcnow()
        user = {
            "name": name,
            "email": email,
            "password": hash_password(password),
            "status": STATUS_ACTIVE,
            "isAdmin": is_admin,
            "canAddNumbers": False,
            "created_at": now,
            "updated_at": now,
        }

        try:
            result = await users.insert_one(user)
        except DuplicateKeyError:
            raise ConflictError("User with this email already exists.")

        user["_id"] = result.inserted_id
        logger.info("New user created successfully")
        return user


async def signup(name: str, email: str, password: str) -> UserProfile:
    """
    Registers a user when signups are enabled.

    Raises:
        FeatureDisabledError: If the admin turned signups off
        ConflictError: If the email is already registered
    """
    if not await settings_service.is_signup_enabled():
        raise FeatureDisabledError("Signups are currently disabled.")
    user = await create_user(name=name, email=email, password=password)
    return to_profile(user)


async def authenticate(email: str, password: str) -> Optional[Dict[str, Any]]:
    """
    Checks credentials.

    Returns:
        The user document, or None when the email is unknown or the password wrong
    """
    user = await get_user_by_email(email)
    if not user or not verify_password(password, user.get("password")):
        logger.info("Login rejected", extra={"email": normalize_email(email), "action": "login"})
        return None
    return user


async def update_profile(user_id: str, name: str, email: str) -> UserProfile:
    """
    Updates a user's name and email.

    Raises:
        ResourceNotFoundError: Unknown user
        FeatureDisabledError: Email changed while email changes are disabled
        ConflictError: New email belongs to another user
    """
    with LogContext(user_id=user_id, action="update_profile"):
        users = get_users_collection()
        oid = _object_id(user_id)
        user = await users.find_one({"_id": oid})
        if not user:
            raise ResourceNotFoundError("User not found.")

        email = normalize_email(email)
        updates: Dict[str, Any] = {"name": name, "updated_at": datetime.utcnow()}

        if email != user.get("email"):
            if not await settings_service.is_email_change_enabled():
                raise FeatureDisabledError("Email changes are disabled by the administrator.")
            existing = await users.find_one({"email": email})
            if existing and existing["_id"] != oid:
                raise ConflictError("User with this email already exists.")
            updates["email"] = email

        try:
            await users.update_one({"_id": oid}, {"$set": updates})
        except DuplicateKeyError:
            raise ConflictError("User with this email already exists.")

        user.update(updates)
        logger.info("Profile updated")
        return to_profile(user)


async def list_users() -> List[UserProfile]:
    users = get_users_collection()
    cursor = users.find({}, {"password": 0}).sort("created_at", 1)
    return [to_profile(user) async for user in cursor]


async def _update_non_admin(user_id: str, updates: Dict[str, Any]) -> UserProfile:
    users = get_users_collection()
    oid = _object_id(user_id)
    user = await users.find_one({"_id": oid})
    if not user:
        raise ResourceNotFoundError("User not found.")
    if user.get("isAdmin"):
        raise PermissionDeniedError("Admin accounts cannot be modified.")

    updates = dict(updates, updated_at=datetime.utcnow())
    await users.update_one({"_id": oid}, {"$set": updates})
    user.update(updates)
    return to_profile(user)


async def set_user_status(user_id: str, status: str) -> UserProfile:
    """
    Blocks or re-activates a user. Admin accounts cannot be blocked.
    """
    with LogContext(user_id=user_id, action="set_user_status"):
        profile = await _update_non_admin(user_id, {"status": status})
        logger.info(f"User status set to {status}")
        return profile


async def set_add_number_permission(user_id: str, allowed: bool) -> UserProfile:
    """
    Grants or revokes the right to append to the shared number list.
    """
    with LogContext(user_id=user_id, action="set_add_number_permission"):
        profile = await _update_non_admin(user_id, {"canAddNumbers": allowed})
        logger.info(f"canAddNumbers set to {allowed}")
        return profile
