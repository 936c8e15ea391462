"""
scripts/setup_db.py - Initialize the database schema.

Run once before starting the application for the first time:
    python scripts/setup_db.py [--demo]

Creates all tables defined in leadflow/db/models.py directly via SQLAlchemy
metadata. With --demo, also inserts one active organization and landing page
so the capture endpoint can be exercised locally.
"""

import argparse
import logging
import os
import sys

# Ensure the project root is on the path so we can import `leadflow`
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from sqlalchemy import inspect, text

from leadflow.config import settings
from leadflow.db.models import Base, LandingPage, Organization
from leadflow.db.session import engine, get_session

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def setup_db() -> None:
    logger.info("Connecting to database %s...", settings.database_url[:40])

    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    logger.info("Connection successful.")

    Base.metadata.create_all(bind=engine)

    tables = inspect(engine).get_table_names()
    logger.info("Tables in database: %s", tables)


def seed_demo() -> None:
    with get_session() as db:
        organization = Organization(
            name="Demo Dental",
            slug="demo-dental",
            notification_email=settings.gmail_user,
        )
        db.add(organization)
        db.flush()
        page = LandingPage(organization_id=organization.id, name="Free Whitening Consult")
        db.add(page)
        db.flush()
        logger.info("Demo organization_id=%s landing_page_id=%s", organization.id, page.id)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create the leadflow schema.")
    parser.add_argument("--demo", action="store_true", help="Insert a demo organization and landing page")
    args = parser.parse_args()

    setup_db()
    if args.demo:
        seed_demo()
