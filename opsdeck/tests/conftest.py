from __future__ import annotations

from dataclasses import dataclass

import httpx
import pytest

from opsdeck.core.config import Settings, get_settings
from opsdeck.persistence.db import create_all, create_engine, create_session_factory
from opsdeck.services.http import ApiHttpClient
from opsdeck.services.monitoring.api import MonitoringApi
from opsdeck.services.monitoring.hooks import MonitoringHooks
from opsdeck.services.query import QueryClient
from opsdeck.services.telemetry import reset_telemetry
from opsdeck.tests.utils.fake_api import FakeMonitoringState, create_fake_api


@pytest.fixture(autouse=True)
def isolate_settings_and_telemetry() -> None:
    # Settings are cached per process; counters and samples are module-level.
    get_settings.cache_clear()
    reset_telemetry()
    yield
    get_settings.cache_clear()
    reset_telemetry()


@pytest.fixture
async def query_client() -> QueryClient:
    # One cache per test; aclose() stops timers and drains outstanding requests.
    client = QueryClient()
    yield client
    await client.aclose()


@dataclass
class MonitoringHarness:
    state: FakeMonitoringState
    client: QueryClient
    hooks: MonitoringHooks


@pytest.fixture
def fake_state() -> FakeMonitoringState:
    return FakeMonitoringState.with_defaults()


@pytest.fixture
def fake_transport(fake_state: FakeMonitoringState) -> httpx.ASGITransport:
    return httpx.ASGITransport(app=create_fake_api(fake_state))


@pytest.fixture
async def monitoring(
    fake_state: FakeMonitoringState,
    fake_transport: httpx.ASGITransport,
    query_client: QueryClient,
) -> MonitoringHarness:
    # Hooks wired to the in-process fake API; intervals are long so timers never fire mid-test.
    settings = Settings(refetch_realtime_s=3600, refetch_fast_s=3600, refetch_standard_s=3600)
    async with ApiHttpClient("http://testserver/api", transport=fake_transport) as http:
        yield MonitoringHarness(
            state=fake_state,
            client=query_client,
            hooks=MonitoringHooks(query_client, MonitoringApi(http), settings),
        )
        await query_client.wait_idle()


@pytest.fixture
def seed_settings() -> Settings:
    # Minimum bcrypt cost keeps password hashing fast under test.
    return Settings().model_copy(update={"bcrypt_salt_rounds": 4})


@pytest.fixture
async def seed_engine(tmp_path):
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'seed.db'}")
    await create_all(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def seed_session_factory(seed_engine):
    return create_session_factory(seed_engine)
