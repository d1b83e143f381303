"""
Script to create the super admin programmatically.

Usage:
    python -m app.features.admin.utils.create_super_admin

Refuses to run when a super admin already exists.
"""

import asyncio
import getpass
import sys

from pydantic import ValidationError

from app.features.admin.utils.admin_creator import create_super_admin_programmatically
from app.platform.config import settings
from app.platform.db.session import Database


async def main():
    """Prompt for credentials and create the super admin."""

    print("=== Super Admin Creation Script ===")

    name = input("Name: ").strip()
    email = input("Email: ").strip()
    username = input("Username: ").strip()
    password = getpass.getpass("Password: ")
    if password != getpass.getpass("Confirm password: "):
        print("Error: Passwords do not match")
        sys.exit(1)

    database = Database(settings.DATABASE_URL)
    try:
        await database.connect(retries=settings.DB_CONNECT_RETRIES)
        async with database.session_factory() as db:
            admin = await create_super_admin_programmatically(db, name, email, username, password)
        print("\nSuper admin created successfully")
        print(f"   Username: {admin.username}")
        print(f"   Email: {admin.email}")
        print(f"   ID: {admin.id}")
    except ValidationError as e:
        for err in e.errors():
            print(f"Error: {'.'.join(str(p) for p in err['loc'])}: {err['msg']}")
        sys.exit(1)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)
    finally:
        await database.dispose()


if __name__ == "__main__":
    asyncio.run(main())
