"""
Admin Seed Script
-----------------
Creates the portal's single ADMIN account.

Usage:
    python seed_admin.py --email admin@example.org --password 'a-long-password'

Without arguments the ADMIN_EMAIL / ADMIN_PASSWORD settings are used.
"""

import argparse
import asyncio
import sys

from loguru import logger

from ngo_portal.core.config_manager import settings
from ngo_portal.core.database_connection import db_manager
from ngo_portal.core.logger_setup import configure_logger
from ngo_portal.db_services.users_service import UsersService
from ngo_portal.models.db_tables import UserRole


async def seed_admin(email: str, password: str, first_name: str, last_name: str) -> int:
    await db_manager.initialize()
    try:
        await db_manager.create_schema()
        user = await UsersService().create_user(
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            role=UserRole.ADMIN,
            verified=True,
        )
        logger.info(f"Admin account created: {user.email} ({user.id})")
        return 0
    except ValueError as e:
        logger.error(f"Admin account not created: {e}")
        return 1
    finally:
        await db_manager.close()


def main() -> int:
    parser = argparse.ArgumentParser(description="Create the NGO portal admin account")
    parser.add_argument("--email", default=settings.admin_email)
    parser.add_argument("--password", default=settings.admin_password)
    parser.add_argument("--first-name", default="Site")
    parser.add_argument("--last-name", default="Administrator")
    args = parser.parse_args()

    if not args.email or not args.password:
        parser.error("--email and --password are required (or set ADMIN_EMAIL/ADMIN_PASSWORD)")

    configure_logger()
    return asyncio.run(
        seed_admin(args.email, args.password, args.first_name, args.last_name)
    )


if __name__ == "__main__":
    sys.exit(main())
