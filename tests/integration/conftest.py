"""
Shared fixtures for integration tests.

PostgreSQL-backed tests need a database at DATABASE_URL (docker-compose);
they are skipped when it cannot be reached.
"""

from collections.abc import Generator

import pytest
from helpers import RecordingGateway
from psycopg_pool import ConnectionPool, PoolTimeout

from gigpass.adapters.repository.memory import InMemoryAccountRepository
from gigpass.adapters.repository.postgres import run_migrations
from gigpass.api.main import app
from gigpass.config.settings import Settings, get_settings


@pytest.fixture(scope="module")
def pool() -> Generator[ConnectionPool, None, None]:
    """Create connection pool for integration tests, or skip without a database."""
    settings = get_settings()
    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=1,
        max_size=10,
        open=True,
    )
    try:
        pool.wait(timeout=3.0)
    except PoolTimeout:
        pool.close()
        pytest.skip("PostgreSQL not reachable")
    run_migrations(pool)
    yield pool
    pool.close()


@pytest.fixture
def clean_database(pool: ConnectionPool) -> Generator[None, None, None]:
    """Clean accounts table before each test."""
    with pool.connection() as conn:
        conn.execute("DELETE FROM accounts")
        conn.commit()
    yield


@pytest.fixture
def app_gateways() -> Generator[tuple[RecordingGateway, RecordingGateway], None, None]:
    """
    Wire the real app to an in-memory store and recording gateways.

    Returns (email_gateway, sms_gateway) so tests can read delivered codes.
    """
    email_gateway, sms_gateway = RecordingGateway(), RecordingGateway()
    app.state.repository = InMemoryAccountRepository()
    app.state.email_gateway = email_gateway
    app.state.sms_gateway = sms_gateway
    app.dependency_overrides[get_settings] = lambda: Settings(
        repository_backend="memory", bcrypt_cost=4
    )
    yield email_gateway, sms_gateway
    app.dependency_overrides.clear()
