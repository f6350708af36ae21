#!/usr/bin/env python3
"""
Database Initialization Script for Lecture Reports

This script:
1. Tests database connectivity
2. Creates any missing tables
3. Inserts the fixed role set
4. Seeds sample data if asked

Usage:
    lecture-reports-init-db              # Tables + roles
    lecture-reports-init-db --check      # Only check connectivity
    lecture-reports-init-db --seed       # Also load the sample data set
    lecture-reports-init-db --status     # Show table status
"""

import asyncio
import sys
import argparse
import traceback

from sqlalchemy import inspect, text


async def test_connection() -> bool:
    """Test database connectivity"""
    print("\n[InitDB] Testing database connection...")

    try:
        from lecture_reports.core.database import get_database_url, get_engine

        db_url = get_database_url()
        print(f"[InitDB] Connecting to: {db_url.split('@')[1] if '@' in db_url else db_url}")

        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))

        print("[InitDB] Database connection successful!")
        return True

    except Exception as e:
        print(f"[InitDB] ERROR: Database connection failed: {e}")
        return False


async def create_tables() -> bool:
    """Create database tables and the role rows users reference"""
    print("\n[InitDB] Creating/verifying database tables...")

    try:
        from lecture_reports.core.database import AsyncSessionLocal, init_db
        from lecture_reports.db.seed_data import ensure_roles

        await init_db()

        async with AsyncSessionLocal() as session:
            created = await ensure_roles(session)
            await session.commit()

        print(f"[InitDB] Database tables created/verified! ({len(created)} roles added)")
        return True

    except Exception as e:
        print(f"[InitDB] ERROR: Table creation failed: {e}")
        traceback.print_exc()
        return False


async def show_table_status():
    """Show current table status"""
    print("\n[InitDB] Database Table Status:")
    print("-" * 50)

    try:
        from lecture_reports.core.database import get_engine

        def describe(sync_conn):
            inspector = inspect(sync_conn)
            return [(name, len(inspector.get_columns(name))) for name in sorted(inspector.get_table_names())]

        async with get_engine().connect() as conn:
            tables = await conn.run_sync(describe)

        print(f"Total tables: {len(tables)}")
        print("\nTables:")
        for name, columns in tables:
            print(f"  - {name} ({columns} columns)")

    except Exception as e:
        print(f"[InitDB] Could not inspect tables: {e}")


async def run(args) -> int:
    from lecture_reports.core.database import close_db

    print("=" * 50)
    print("  Lecture Reports - Database Initialization")
    print("=" * 50)

    try:
        if not await test_connection():
            print("\n[InitDB] FAILED: Cannot connect to database")
            return 1

        if args.check:
            print("\n[InitDB] Connection check completed!")
            return 0

        if args.status:
            await show_table_status()
            return 0

        if not await create_tables():
            print("[InitDB] FAILED: Could not create tables")
            return 1

        if args.seed:
            from lecture_reports.db.seed_data import seed_all
            await seed_all()

        await show_table_status()

        print("\n" + "=" * 50)
        print("  Database Initialization Complete!")
        print("=" * 50)
        return 0
    finally:
        await close_db()


def main():
    parser = argparse.ArgumentParser(description="Lecture Reports Database Initialization")
    parser.add_argument("--check", action="store_true", help="Only check connectivity")
    parser.add_argument("--seed", action="store_true", help="Include sample data")
    parser.add_argument("--status", action="store_true", help="Show table status")

    sys.exit(asyncio.run(run(parser.parse_args())))


if __name__ == "__main__":
    main()
