"""
Pytest configuration and fixtures for portal tests.
"""

from __future__ import annotations

import os

# Set test environment variables before importing config
os.environ.setdefault("SESSION_SECRET", "test-secret-key-for-testing-only")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("AIRTABLE_API_KEY", "test-airtable-key")
os.environ.setdefault("AIRTABLE_BASE_ID", "appTEST")
os.environ.setdefault("LUMA_EVENTS_URL", "https://api.lu.ma/test/events")

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402

from portal.main import app  # noqa: E402
from portal.middleware.rate_limit import rate_limiter  # noqa: E402
from portal.repos.used_link_repo import used_link_repo  # noqa: E402


class FakeClock:
    """Settable clock returning epoch seconds."""

    def __init__(self, now: float = 1_750_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture(autouse=True)
def reset_in_memory_state():
    """Rate limits and used links are process-global; isolate each test."""
    rate_limiter.reset()
    used_link_repo._used.clear()
    yield
    rate_limiter.reset()
    used_link_repo._used.clear()


@pytest_asyncio.fixture(loop_scope="session")
async def async_client():
    """Async HTTP client against the ASGI app."""
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
