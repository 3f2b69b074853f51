"""Initialize the database - creates all tables and adds missing columns."""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from surveyforge.config import settings
from surveyforge.database import Database
from surveyforge.logging_config import configure_logging


def init_db():
    configure_logging(settings.LOG_LEVEL)
    database = Database(settings.DATABASE_URL)
    print(f"Creating all database tables at {settings.DATABASE_URL} ...")
    try:
        database.create_all()
    finally:
        database.dispose()
    print("Database initialized successfully.")


if __name__ == "__main__":
    init_db()
