#!/usr/bin/env python3
"""
Bring the schema up to date and, optionally, create a first administrator account.

Examples:
  # Schema only
  python scripts/init_db.py

  # Schema plus an admin login
  python scripts/init_db.py --admin-username admin --admin-email admin@example.org \\
      --admin-password change-me
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from app.core.exceptions import DuplicateResourceException  # noqa: E402
from app.database import AsyncSessionLocal, engine  # noqa: E402
from app.scheduling.visibility import UserRole  # noqa: E402
from app.schemas.users import UserCreate  # noqa: E402
from app.services.user_service import UserService  # noqa: E402
from scripts.migrate import run_migrations  # noqa: E402


async def seed_admin(admin: UserCreate) -> None:
    """Create the admin account unless the username or email is taken."""
    async with AsyncSessionLocal() as session:
        try:
            await UserService(session).create_user(admin)
            print(f"✓ Admin '{admin.username}' created")
        except DuplicateResourceException:
            print(f"• Admin '{admin.username}' already exists, left unchanged")

    await engine.dispose()


def main() -> int:
    """Parse arguments and initialise the database."""
    parser = argparse.ArgumentParser(
        description="Initialise the hospital appointment database",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--admin-username", help="Username of the admin to create")
    parser.add_argument("--admin-email", help="Email of the admin to create")
    parser.add_argument("--admin-password", help="Password of the admin to create")
    args = parser.parse_args()

    admin = None
    given = [args.admin_username, args.admin_email, args.admin_password]
    if any(given):
        if not all(given):
            parser.error("--admin-username, --admin-email and --admin-password go together")
        admin = UserCreate(
            username=args.admin_username,
            email=args.admin_email,
            password=args.admin_password,
            first_name="System",
            last_name="Administrator",
            role=UserRole.ADMIN,
        )

    # Alembic runs its own event loop, so migrate before seeding
    run_migrations()
    print("✓ Schema up to date")

    if admin is not None:
        asyncio.run(seed_admin(admin))
    return 0


if __name__ == "__main__":
    sys.exit(main())
