"""
Check the PostgreSQL database for Scaffold API, then seed roles and the admin account.
Run once after `alembic upgrade head`: python scripts/init_postgres.py

Requires: PostgreSQL installed and running. Create user and database:

  sudo -u postgres psql
  CREATE USER scaffold WITH PASSWORD 'scaffold';
  CREATE DATABASE scaffold_db OWNER scaffold;
  GRANT ALL PRIVILEGES ON DATABASE scaffold_db TO scaffold;
  \q
"""

import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from scaffold_api.config import settings
from scaffold_api.core.database import engine


def main():
    url = settings.get_database_url()
    if not url.startswith("postgresql"):
        print("Database URL is not PostgreSQL. Skipping.")
        return
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("PostgreSQL connection OK. Database exists.")
    except SQLAlchemyError as e:
        print(f"Cannot connect to PostgreSQL: {e}")
        print("\nCreate database first:")
        print("  psql -U postgres -c \"CREATE USER scaffold WITH PASSWORD 'scaffold';\"")
        print("  psql -U postgres -c \"CREATE DATABASE scaffold_db OWNER scaffold;\"")
        print("  psql -U postgres -c \"GRANT ALL PRIVILEGES ON DATABASE scaffold_db TO scaffold;\"")
        sys.exit(1)

    # Imported late so logging from the app module does not fire on a failed connection.
    from scaffold_api.main import bootstrap_access_control

    bootstrap_access_control()
    print(f"Default roles seeded; admin account is {settings.ADMIN_EMAIL}.")


if __name__ == "__main__":
    main()
