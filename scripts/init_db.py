"""Create the PodcastHub schema and the initial admin account.

Intended for local SQLite setups and first deployments. Production
databases should be managed with `alembic upgrade head`; this script
only creates tables that are missing.
"""

import argparse
import logging
import os
import sys

# Adjust path to import from src
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from src.config import Config
from src.db.factory import create_repository, get_database_url_from_config
from src.services.admin_bootstrap import initialize_admin

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def initialize_database(config: Config) -> int:
    """Create missing tables and make sure an admin exists. Returns an exit code."""
    database_url = get_database_url_from_config(config)
    repository = create_repository(database_url, echo=config.DB_ECHO, create_tables=True)
    try:
        logger.info("Tables created (existing tables are left untouched)")
        generated = initialize_admin(repository, config)
        if generated:
            print(f"✓ Admin account {config.ADMIN_EMAIL} created")
            print(f"  Password: {generated}")
            print("  Save this password securely - it won't be shown again!")
        else:
            print("✓ Database ready")
        return 0
    finally:
        repository.close()


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Initialize the database. Creates tables if they don't exist."
    )
    parser.add_argument("--yes", "-y", action="store_true", help="Bypass confirmation prompt.")
    parser.add_argument("--env-file", help="Path to a custom .env file", default=None)
    args = parser.parse_args()

    config = Config(env_file=args.env_file)

    if not args.yes:
        confirm = input(
            "Initialize the database? This will create tables but not delete existing data. (y/n): "
        )
        if confirm.lower() != 'y':
            logger.info("Database initialization cancelled by user.")
            return 0

    return initialize_database(config)


if __name__ == "__main__":
    sys.exit(main())
