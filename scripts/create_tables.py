#!/usr/bin/env python3
"""
Create ApplyPDF database tables:
- users
- submissions
"""
import sys
import os

# Add parent directory to path to import applypdf modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from sqlalchemy import inspect

from applypdf.config import settings
from applypdf.database import create_db_engine, init_db

EXPECTED_TABLES = ("users", "submissions")


def create_tables():
    """Create tables if they don't exist"""
    print("=" * 60)
    print("Creating ApplyPDF Tables")
    print("=" * 60)

    engine = create_db_engine(settings.DATABASE_URL)

    try:
        existing_tables = inspect(engine).get_table_names()
        print(f"\nExisting tables: {len(existing_tables)}")
        for table in existing_tables:
            print(f"  - {table}")

        print("\nCreating tables...")
        # only creates tables that don't exist
        init_db(engine)

        inspector = inspect(engine)
        current_tables = inspector.get_table_names()
        print(f"\nTables after creation: {len(current_tables)}")

        for table in EXPECTED_TABLES:
            if table not in current_tables:
                print(f"  ✗ {table} table NOT created")
                return False
            print(f"  ✓ {table} table created")
            for column in inspector.get_columns(table):
                print(f"      {column['name']}: {column['type']}")

        print("\n" + "=" * 60)
        print("All tables created successfully!")
        print("=" * 60)
        return True

    except Exception as e:
        print(f"\n✗ Error creating tables: {e}")
        return False
    finally:
        engine.dispose()


if __name__ == "__main__":
    success = create_tables()
    sys.exit(0 if success else 1)
