#!/usr/bin/env python3
"""
Schema management for the content store.

Usage:
    python -m inkwell.scripts.manage_db create
    python -m inkwell.scripts.manage_db inspect
    python -m inkwell.scripts.manage_db reset --yes
"""
import argparse
import sys

from sqlalchemy import inspect

from inkwell.core.config import settings
from inkwell.core.database import Database, metadata
from inkwell.core.logging import configure_logging


def inspect_schema(db: Database) -> None:
    inspector = inspect(db.engine)
    existing = set(inspector.get_table_names())
    for table in metadata.sorted_tables:
        print(f'\n=== {table.name} ===')
        if table.name not in existing:
            print('  (missing)')
            continue
        print('Indexes:')
        for idx in inspector.get_indexes(table.name):
            print(f"  {idx['name']}: {idx['column_names']}")
        print('Unique Constraints:')
        for c in inspector.get_unique_constraints(table.name):
            print(f"  {c['name']}: {c['column_names']}")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Manage the content store schema")
    parser.add_argument("command", choices=["create", "inspect", "reset", "check"])
    parser.add_argument("--database-url", default=None, help="Overrides DATABASE_URL")
    parser.add_argument("--yes", action="store_true", help="Confirm destructive commands")
    args = parser.parse_args(argv)

    configure_logging(settings.ENV, settings.LOG_LEVEL)
    db = Database(args.database_url) if args.database_url else Database.from_settings()

    if args.command == "check":
        ok = db.check_connection()
        print("✅ Database reachable" if ok else "❌ Database unreachable")
        return 0 if ok else 1
    if args.command == "create":
        db.create_all()
        print(f"✅ {len(metadata.sorted_tables)} tables ensured")
    elif args.command == "reset":
        if not args.yes:
            print("Refusing to drop tables without --yes")
            return 2
        db.reset()
        print("✅ Tables dropped and recreated")
    else:
        inspect_schema(db)
    return 0


if __name__ == "__main__":
    sys.exit(main())
