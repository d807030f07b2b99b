"""
sms_inspector/db/seed.py

Purpose: First-start data

- Creates the initial admin user
- Inserts default values for settings that do not exist yet
- Idempotent: existing users and settings are never overwritten
"""

from datetime import datetime

from sms_inspector.core.config import settings
from sms_inspector.core.logging import get_logger
from sms_inspector.db.mongo import get_settings_collection, get_users_collection
from sms_inspector.services import settings_service
from sms_inspector.services.user_service import create_user
from sms_inspector.utils.validation_utils import normalize_email

logger = get_logger(__name__)


async def seed_admin_user() -> bool:
    """
    Creates the admin account from SEED_ADMIN_EMAIL / SEED_ADMIN_PASSWORD.

    Returns:
        True if a user was created
    """
    users = get_users_collection()
    email = normalize_email(settings.SEED_ADMIN_EMAIL)
    if await users.find_one({"email": email}):
        return False

    await create_user(
        name="Admin",
        email=email,
        password=settings.SEED_ADMIN_PASSWORD,
        is_admin=True,
    )
    logger.info(f"Default admin user created: {email}")
    return True


async def seed_default_settings() -> int:
    """
    Inserts missing settings keys with their defaults.

    Returns:
        Number of keys inserted
    """
    collection = get_settings_collection()
    defaults = dict(settings_service.DEFAULT_SETTINGS)
    if settings.PREMIUMY_API_KEY:
        defaults[settings_service.API_KEY] = settings.PREMIUMY_API_KEY

    inserted = 0
    for key, value in defaults.items():
        result = await collection.update_one(
            {"key": key},
            {"$setOnInsert": {"key": key, "value": value, "updated_at": datetime.utcnow()}},
            upsert=True,
        )
        if result.upserted_id is not None:
            inserted += 1

    if inserted:
        logger.info(f"Inserted {inserted} default settings")
    return inserted


async def seed_database():
    await seed_admin_user()
    await seed_default_settings()
