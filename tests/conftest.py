"""
tests/conftest.py -- Shared test fixtures for EmpRecords tests.

This module provides:
  - FakeClock: a settable clock for TokenIssuer so tests move time forward
    without sleeping
  - _make_test_store(): an isolated in-memory employee DB
  - _patch_lifespan(): wires test collaborators into app.state, bypassing real startup
  - api_client: TestClient against the real app with a pre-registered user

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker thread.

Environment must be set before any auth/core import:
  DEBUG=true            -> get_settings() auto-generates both signing secrets
  BCRYPT_ROUNDS=10      -> cheapest allowed cost factor, keeps tests fast
  LOGIN_RATE_LIMIT      -> high enough that login-heavy modules never hit 429
  ALLOWED_HOSTS         -> TestClient sends Host: testserver
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Generator
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone

os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("BCRYPT_ROUNDS", "10")
os.environ.setdefault("LOGIN_RATE_LIMIT", "1000/minute")
os.environ.setdefault("ALLOWED_HOSTS", '["testserver", "localhost"]')

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.passwords import hash_password
from auth.registry import InMemoryRefreshTokenRegistry
from auth.session import SessionService
from auth.tokens import TokenIssuer
from core.config import get_settings
from employees.store import EmployeeStore

TEST_USERNAME = "testuser"
TEST_PASSWORD = "testpass123"


class FakeClock:
    """Callable clock for TokenIssuer. advance() moves time forward."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_store(db_suffix: str) -> EmployeeStore:
    """Create an isolated named shared-memory SQLite store.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state.
    """
    return EmployeeStore(f"sqlite:///file:test_emp_{db_suffix}?mode=memory&cache=shared&uri=true")


def _patch_lifespan(store: EmployeeStore):
    """Return an async context manager that replaces the real lifespan.

    Builds a fresh issuer, registry and session service around the test
    store. The purge_task is a long-sleeping coroutine so shutdown can
    cancel a real asyncio.Task.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.employee_store = store
        app.state.token_issuer = TokenIssuer.from_settings(get_settings())
        app.state.registry = InMemoryRefreshTokenRegistry()
        app.state.sessions = SessionService(
            credentials=store,
            issuer=app.state.token_issuer,
            registry=app.state.registry,
        )
        app.state.purge_task = asyncio.create_task(asyncio.sleep(99999))
        yield
        app.state.purge_task.cancel()

    return test_lifespan


# ---------------------------------------------------------------------------
# Module-scoped fixtures -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, int], None, None]:
    """Yield (client, user_id) for API integration tests.

    A user TEST_USERNAME / TEST_PASSWORD exists before the client starts.
    Collaborators are reachable through client.app.state.
    """
    store = _make_test_store(request.module.__name__.replace(".", "_"))
    uid = store.insert(TEST_USERNAME, hash_password(TEST_PASSWORD))

    app.router.lifespan_context = _patch_lifespan(store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, uid

    store.close()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
