"""
sms_inspector/db/indexes.py

Purpose: Database index management

- Unique email per user
- Unique key per settings document
"""

from sms_inspector.db.mongo import get_users_collection, get_settings_collection
from sms_inspector.core.logging import get_logger

logger = get_logger(__name__)


async def create_indexes():
    """
    Creates all necessary database indexes.
    This function is idempotent - safe to run multiple times.
    """
    try:
        users = get_users_collection()
        app_settings = get_settings_collection()

        logger.info("Creating database indexes...")

        # ==============================================
        # USERS COLLECTION INDEXES
        # ==============================================

        await users.create_index("email", unique=True, name="email_unique")
        logger.debug("Created unique index on users.email")

        await users.create_index("status", name="status_idx")
        logger.debug("Created index on users.status")

        # ==============================================
        # SETTINGS COLLECTION INDEXES
        # ==============================================

        await app_settings.create_index("key", unique=True, name="key_unique")
        logger.debug("Created unique index on settings.key")

        logger.info("✅ All database indexes created successfully")

        user_indexes = await users.index_information()
        settings_indexes = await app_settings.index_information()

        logger.info(
            f"Index summary: Users={len(user_indexes)}, "
            f"Settings={len(settings_indexes)}"
        )

    except Exception as e:
        logger.error(f"Failed to create indexes: {str(e)}", exc_info=True)
        raise


if __name__ == "__main__":
    """
    Run this script directly to create indexes manually.
    """
    import asyncio
    from sms_inspector.db.mongo import connect_to_mongo, close_mongo_connection

    async def main():
        await connect_to_mongo()
        await create_indexes()
        await close_mongo_connection()

    asyncio.run(main())
