"""
tests/conftest.py - Shared pytest configuration and fixtures.

Sets dummy environment variables BEFORE any leadflow module is imported,
so that pydantic-settings doesn't fail on missing required fields.
"""

import os

# ── Set dummy env vars before any leadflow module is imported ─────────────────
# This runs at collection time, before tests execute.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("NOTIFICATIONS_DRY_RUN", "true")
os.environ.setdefault("GMAIL_USER", "alerts@example.com")
os.environ.setdefault("GMAIL_APP_PASSWORD", "test-password")

import pytest
import sqlalchemy as sa
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from leadflow.db.models import Base, LandingPage, Organization, OrganizationStatus


# ── In-memory DB Fixture ──────────────────────────────────────────────────────

@pytest.fixture
def db(monkeypatch):
    """
    Provide a fresh in-memory SQLite session for each test.

    StaticPool keeps one connection so every session - including the ones
    opened by get_session() in background tasks - sees the same database.
    """
    for table in Base.metadata.tables.values():
        for col in table.columns:
            if isinstance(col.type, sa.Enum):
                col.type.native_enum = False

    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    TestSession = sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    monkeypatch.setattr("leadflow.db.session.SessionLocal", TestSession)

    session = TestSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)
        engine.dispose()
        for table in Base.metadata.tables.values():
            for col in table.columns:
                if isinstance(col.type, sa.Enum):
                    col.type.native_enum = True


# ── Factories ─────────────────────────────────────────────────────────────────

@pytest.fixture
def make_organization(db):
    def _make(**overrides) -> Organization:
        fields = {
            "name": "Bright Smiles Dental",
            "status": OrganizationStatus.ACTIVE,
            "notification_email": "frontdesk@brightsmiles.test",
            "notification_phone": "+15550001111",
        }
        fields.update(overrides)
        organization = Organization(**fields)
        db.add(organization)
        db.commit()
        return organization
    return _make


@pytest.fixture
def make_landing_page(db):
    def _make(organization: Organization, **overrides) -> LandingPage:
        fields = {
            "organization_id": organization.id,
            "name": "Invisalign Spring Offer",
            "campaign_id": "camp-1",
            "territory_id": "terr-1",
        }
        fields.update(overrides)
        page = LandingPage(**fields)
        db.add(page)
        db.commit()
        return page
    return _make


@pytest.fixture
def org(make_organization):
    return make_organization()


@pytest.fixture
def page(make_landing_page, org):
    return make_landing_page(org)
