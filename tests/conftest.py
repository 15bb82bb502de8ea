"""Shared pytest fixtures for KeepWarm tests.

Fixtures:
    - memory_db: Fresh in-memory SQLite contact store
    - now: Fixed timezone-aware instant
    - sample_contact: Contact with every context field filled in
    - bare_contact: Contact with only the required fields
    - stored_contact: sample_contact persisted in memory_db
    - mock_config: Test configuration with temp paths
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Generator

import pytest

from keepwarm.core.config import Config
from keepwarm.db.database import Database
from keepwarm.db.models import Contact, Segment

OWNER_ID = "owner-1"


@pytest.fixture
def memory_db() -> Generator[Database, None, None]:
    """Create an in-memory database for fast tests.

    Yields:
        Database using :memory:, no cleanup needed
    """
    db = Database(":memory:")
    db.initialize()
    yield db
    db.close()


@pytest.fixture
def now() -> datetime:
    """Fixed instant: Tuesday 10 Feb 2026, 09:00 UTC."""
    return datetime(2026, 2, 10, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def sample_contact() -> Contact:
    """Sample Contact record for testing."""
    return Contact(
        owner_id=OWNER_ID,
        first_name="Michael",
        last_name="Rodriguez",
        preferred_name="Mike",
        phone_e164="+1 (512) 555-0134",
        email="mike@growthcorp.com",
        company="GrowthCorp",
        role="CMO",
        city="Austin",
        segment=Segment.TOP5,
        importance_score=9,
        closeness_score=8,
        current_situation="Expanding to new markets",
        working_on="Q1 marketing campaign",
        how_i_can_add_value="growth experiments",
        interests="Marketing, soccer",
        tags="marketing, growth,connector",
    )


@pytest.fixture
def bare_contact() -> Contact:
    """Contact with no optional context at all."""
    return Contact(
        id="bare-1",
        owner_id=OWNER_ID,
        first_name="Camille",
        last_name="Durand",
        segment=Segment.MONTHLY100,
        frequency_days=30,
    )


@pytest.fixture
def stored_contact(memory_db: Database, sample_contact: Contact) -> Contact:
    """sample_contact persisted in memory_db (never contacted, so due)."""
    return memory_db.create_contact(sample_contact)


@pytest.fixture
def mock_config(tmp_path: Path) -> Config:
    """Test configuration with temp paths and no API key."""
    return Config(
        db_path=tmp_path / "test.db",
        log_path=tmp_path / "logs",
        owner_id=OWNER_ID,
        debug=True,
    )


# Markers for different test types
def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line("markers", "integration: marks tests requiring external services")
    config.addinivalue_line("markers", "database: marks tests requiring database")
