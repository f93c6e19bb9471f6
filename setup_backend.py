"""
Infrastructure Setup Script for EcoFinds Backend
This script checks the database connections and creates the schema.
"""

import logging

from ecofinds.db.postgres_client import db
from ecofinds.db.redis_client import redis_client

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def check_database_connections():
    """Check if all database connections are working."""
    logger.info("Checking database connections...")

    # Check PostgreSQL
    try:
        with db.get_cursor() as cursor:
            cursor.execute("SELECT 1 AS ok")
            result = cursor.fetchone()
            if result:
                logger.info("✅ PostgreSQL connection: OK")
            else:
                logger.error("❌ PostgreSQL connection: Failed")
                return False
    except Exception as e:
        logger.error(f"❌ PostgreSQL connection error: {e}")
        return False

    # Check Redis
    try:
        redis_client.ping()
        logger.info("✅ Redis connection: OK")
    except Exception as e:
        logger.error(f"❌ Redis connection error: {e}")
        return False

    return True


def report_table_counts():
    """Log row counts for the marketplace tables."""
    with db.get_cursor() as cursor:
        for table in ("users", "products", "cart_items", "purchases", "reviews"):
            cursor.execute(f"SELECT COUNT(*) FROM {table}")
            logger.info(f"📦 {table}: {cursor.fetchone()['count']}")


def main():
    """Main setup function."""
    logger.info("🚀 Setting up EcoFinds Backend...")

    if not check_database_connections():
        logger.error("❌ Database connection check failed!")
        return False

    db.create_tables()
    report_table_counts()

    logger.info("✅ Setup complete! Ready to start the server.")
    return True


if __name__ == "__main__":
    main()
