"""
Database initialization script

Creates indexes and seeds the admin user and default settings without
starting the web server:
    python scripts/init_db.py
"""

import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Load environment variables before settings are read
load_dotenv()

from sms_inspector.core.logging import setup_logging, get_logger
from sms_inspector.db.mongo import connect_to_mongo, close_mongo_connection
from sms_inspector.db.indexes import create_indexes
from sms_inspector.db.seed import seed_admin_user, seed_default_settings

logger = get_logger("scripts.init_db")


async def main():
    setup_logging()
    await connect_to_mongo()
    try:
        await create_indexes()

        created = await seed_admin_user()
        logger.info("✅ Admin user created" if created else "ℹ️ Admin user already exists")

        inserted = await seed_default_settings()
        logger.info(f"✅ {inserted} default settings inserted")
    finally:
        await close_mongo_connection()


if __name__ == "__main__":
    asyncio.run(main())
