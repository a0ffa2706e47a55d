#!/usr/bin/env python3
"""
Create the default admin user.

Usage: python scripts/create_admin.py

Reads DATABASE_URL and DEFAULT_ADMIN_* from the environment / .env.
"""
import asyncio

from profile_api.core.config import get_settings
from profile_api.core.database import Database
from profile_api.core.security import build_password_hasher
from profile_api.repositories.user import UserRepository
from profile_api.services.bootstrap import create_default_admin


async def main() -> None:
    settings = get_settings()
    database = Database(settings.database_url)

    await database.connect()
    print("📦 Connected to database")

    try:
        async with database.session() as session:
            users = UserRepository(session, build_password_hasher(settings))
            admin = await create_default_admin(users, settings)

        if admin is None:
            print("⚠️  Admin user already exists, nothing to do")
        else:
            print("✅ Default admin user created successfully!")
            print(f"📧 Email: {admin.email}")
            print("⚠️  Please change the password after first login!")
    finally:
        await database.close()
        print("🔌 Database connection closed")


if __name__ == "__main__":
    asyncio.run(main())
