"""
Pytest Configuration and Shared Test Fixtures

This module provides pytest configuration and reusable fixtures for all tests.
All fixtures defined here are automatically available to all test files.
"""

import os
import sys

import pytest

# Add project root to sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

# Settings require a sink URL; tests never reach it
os.environ.setdefault("CART_POINTS_SINK_URL", "http://points.test/points")
os.environ.setdefault("LOG_FORMAT", "console")

from tests.test_fixtures.clock import FakeClock, RecordingSleep  # noqa: E402
from tests.test_fixtures.order_factory import OrderFactory  # noqa: E402
from tests.test_fixtures.sink_factory import SINK_URL, ScriptedSink  # noqa: E402


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path}/cart.db"


@pytest.fixture
def settings(database_url):
    """
    Settings for an application under test.

    Retry delays are shrunk so exhausted retries finish quickly.
    """
    from cart.core.config.settings import Settings

    return Settings(
        CART_POINTS_SINK_URL=SINK_URL,
        CART_COFFEES="mocha;latte;espresso",
        DATABASE_URL=database_url,
        ENVIRONMENT="test",
        LOG_FORMAT="console",
        RETRY_INITIAL_DELAY=0.001,
        RETRY_MAX_DELAY=0.004,
        RL_LIMIT_FOR_PERIOD=100,
        SHUTDOWN_DRAIN_TIMEOUT=2.0,
    )


# ============================================================================
# Infrastructure Fixtures
# ============================================================================


@pytest.fixture
async def database(database_url):
    """Fresh SQLite database with the schema created."""
    from cart.infrastructure.database.engine import Database

    db = Database(database_url)
    await db.create_schema()
    yield db
    await db.dispose()


@pytest.fixture
def order_store(database):
    from cart.infrastructure.database.order_store import OrderStore

    return OrderStore(database.engine)


@pytest.fixture
def coffee_store(database):
    from cart.infrastructure.database.coffee_store import CoffeeStore

    return CoffeeStore(database.engine)


# ============================================================================
# Time Fixtures
# ============================================================================


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def recording_sleep(clock):
    return RecordingSleep(clock)


# ============================================================================
# Points Sink Fixtures
# ============================================================================


@pytest.fixture
def sink_url():
    return SINK_URL


@pytest.fixture
def order_factory():
    return OrderFactory


@pytest.fixture
def scripted_sink():
    """Factory fixture: `scripted_sink(503, 200)`."""
    return ScriptedSink
