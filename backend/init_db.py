"""
Initialize the database schema.

Run this script once to set up the database:
    python init_db.py
"""

from shortlinks.config import get_settings
from shortlinks.database import create_tables, make_engine


def init_database():
    """Create all database tables"""
    settings = get_settings()
    print(f"Creating database tables in {settings.DATABASE_URL} ...")
    engine = make_engine(settings.DATABASE_URL)
    try:
        create_tables(engine)
    finally:
        engine.dispose()
    print("Database tables created successfully!")


if __name__ == "__main__":
    print("="*50)
    print("Short Links - Database Initialization")
    print("="*50)

    init_database()

    print("\n✅ Database initialization complete!")
    print("\nYou can now start the server with:")
    print("    uvicorn shortlinks.main:create_app --factory --reload")
