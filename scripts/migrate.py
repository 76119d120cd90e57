#!/usr/bin/env python3
"""
Run or create database migrations.

Examples:
  python scripts/migrate.py                      # upgrade to the latest revision
  python scripts/migrate.py downgrade -1
  python scripts/migrate.py create "add room assignments"
"""

import argparse
import sys
from pathlib import Path

from alembic import command
from alembic.config import Config

ALEMBIC_INI = Path(__file__).resolve().parent.parent / "alembic.ini"


def alembic_config(database_url: str | None = None) -> Config:
    """Load the project's Alembic config, optionally pointed at another database."""
    alembic_cfg = Config(str(ALEMBIC_INI))
    if database_url:
        alembic_cfg.set_main_option("sqlalchemy.url", database_url.replace("%", "%%"))
    return alembic_cfg


def run_migrations(revision: str = "head", database_url: str | None = None) -> None:
    """Upgrade the database to ``revision``."""
    command.upgrade(alembic_config(database_url), revision)


def main() -> int:
    """Parse arguments and run the requested migration command."""
    parser = argparse.ArgumentParser(
        description="Manage the hospital appointment database schema",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--database-url", help="Override DATABASE_URL")
    subparsers = parser.add_subparsers(dest="command")

    upgrade = subparsers.add_parser("upgrade", help="Upgrade to a revision (default: head)")
    upgrade.add_argument("revision", nargs="?", default="head")

    downgrade = subparsers.add_parser("downgrade", help="Downgrade to a revision")
    downgrade.add_argument("revision")

    create = subparsers.add_parser("create", help="Autogenerate a new revision")
    create.add_argument("message", nargs="+")

    args = parser.parse_args()
    alembic_cfg = alembic_config(args.database_url)

    try:
        if args.command == "downgrade":
            print(f"Downgrading database to {args.revision}...")
            command.downgrade(alembic_cfg, args.revision)
        elif args.command == "create":
            message = " ".join(args.message)
            print(f"Creating migration: {message}")
            command.revision(alembic_cfg, message=message, autogenerate=True)
        else:
            revision = getattr(args, "revision", "head")
            print(f"Upgrading database to {revision}...")
            command.upgrade(alembic_cfg, revision)
    except Exception as e:
        print(f"✗ Migration failed: {e}", file=sys.stderr)
        return 1

    print("✓ Done")
    return 0


if __name__ == "__main__":
    sys.exit(main())
