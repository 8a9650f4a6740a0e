# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
import os
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Set test environment before importing app
os.environ["DATABASE_URL"] = "sqlite:///./test.db"

from carcrm.api.deps import get_exchange_rate_service
from carcrm.events import EventBus
from carcrm.main import app
from carcrm.models.base import Base, utcnow
from carcrm.services.exchange_rate_service import ExchangeRateService
from carcrm.services.rate_api_client import RateApiError
from carcrm.services.rate_store import RateStore, RateStoreError, SqlAlchemyRateStore

# Test database setup
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeClock:
    """Controllable replacement for the service clock."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or utcnow()

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class DownApiClient:
    """Rate API that is never reachable."""

    def __init__(self) -> None:
        self.calls = 0

    async def fetch_latest_rates(self) -> dict[str, float]:
        self.calls += 1
        raise RateApiError("Failed to fetch exchange rates: connection refused")

    async def close(self) -> None:
        pass


class DownRateStore(RateStore):
    """Rate store whose database is never reachable."""

    def __init__(self) -> None:
        self.inserted = 0

    async def insert_rate_records(self, records):
        self.inserted += 1
        raise RateStoreError("database unreachable")

    async def query_recent_rate_records(self, since):
        raise RateStoreError("database unreachable")


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def rate_store(db_session) -> SqlAlchemyRateStore:
    """Rate store writing to the test database."""
    return SqlAlchemyRateStore(TestingSessionLocal)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def bus() -> EventBus:
    """A private event bus so tests do not share subscribers."""
    return EventBus()


@pytest.fixture
def down_api_client() -> DownApiClient:
    return DownApiClient()


@pytest.fixture
def down_rate_store() -> DownRateStore:
    return DownRateStore()


@pytest.fixture
def offline_service(clock, bus, down_api_client, down_rate_store) -> ExchangeRateService:
    """Service with both the API and the database unreachable."""
    return ExchangeRateService(
        api_client=down_api_client,
        store=down_rate_store,
        bus=bus,
        clock=clock,
    )


@pytest.fixture(autouse=True)
def reset_singleton():
    """Never leak the process-wide service between tests."""
    ExchangeRateService.reset_instance()
    yield
    ExchangeRateService.reset_instance()


@pytest.fixture(scope="function")
def client(offline_service):
    """Create a test client backed by an offline exchange rate service."""
    app.dependency_overrides[get_exchange_rate_service] = lambda: offline_service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
