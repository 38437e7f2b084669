#!/usr/bin/env python3
"""
Create the forecasts table and its indexes from the ORM metadata.
From repo root: python3 backend/run_migration_001.py
Requires MS_DATABASE_URL (or DATABASE_URL) in the environment or backend/.env.
Safe to re-run: existing tables are left alone.
"""
import asyncio
import os
import sys

# Backend dir on path so "shared" resolves (run from repo root or backend/)
_backend_dir = os.path.dirname(os.path.abspath(__file__))
if _backend_dir not in sys.path:
    sys.path.insert(0, _backend_dir)
os.chdir(_backend_dir)

from sqlalchemy.exc import SQLAlchemyError

from shared.config import get_settings
from shared.utils.database import DatabaseManager
from shared.utils.logging import setup_logging


async def main() -> None:
    settings = get_settings()
    setup_logging("migration")
    db = DatabaseManager(settings)
    await db.connect()
    try:
        await db.create_schema()
        print(f"Migration 001 applied: forecasts table ready on {settings.database_url_safe_log}")
    except (SQLAlchemyError, OSError) as e:
        print(f"Error: {e}")
        sys.exit(1)
    finally:
        await db.disconnect()


if __name__ == "__main__":
    asyncio.run(main())
