"""
Shared fixtures: an in-memory SubscriptionStore for handler tests and
SQLite-backed repositories for persistence tests.
"""

from datetime import date
from typing import Dict, List, Optional, Tuple
from uuid import UUID

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel

from app.core.exceptions import StoreError, SubscriptionNotFoundError
from app.database import create_session_maker, get_subscription_store
from app.main import app
from app.models.subscription import Subscription
from app.repositories.subscriptions import SubscriptionRepository, SubscriptionStore

USER_ID = UUID("11111111-1111-1111-1111-111111111111")
OTHER_USER_ID = UUID("22222222-2222-2222-2222-222222222222")


def _copy(subscription: Subscription, subscription_id: Optional[int]) -> Subscription:
    return Subscription(
        id=subscription_id,
        service_name=subscription.service_name,
        price=subscription.price,
        user_id=subscription.user_id,
        start_date=subscription.start_date,
        end_date=subscription.end_date,
    )


class InMemorySubscriptionStore(SubscriptionStore):
    """Dict-backed store with the same semantics as SubscriptionRepository."""

    def __init__(self):
        self.rows: Dict[int, Subscription] = {}
        self.next_id = 1
        self.fail_with: Optional[StoreError] = None
        self.list_calls: List[Tuple[int, int, UUID, str]] = []

    def _maybe_fail(self):
        if self.fail_with is not None:
            raise self.fail_with

    async def create(self, subscription: Subscription) -> Subscription:
        self._maybe_fail()
        subscription.id = self.next_id
        self.next_id += 1
        self.rows[subscription.id] = _copy(subscription, subscription.id)
        return subscription

    async def get(self, subscription_id: int) -> Subscription:
        self._maybe_fail()
        if subscription_id not in self.rows:
            raise SubscriptionNotFoundError(subscription_id)
        return _copy(self.rows[subscription_id], subscription_id)

    async def update(self, subscription_id: int, subscription: Subscription) -> Subscription:
        self._maybe_fail()
        if subscription_id in self.rows:
            self.rows[subscription_id] = _copy(subscription, subscription_id)
        subscription.id = subscription_id
        return subscription

    async def delete(self, subscription_id: int) -> None:
        self._maybe_fail()
        if self.rows.pop(subscription_id, None) is None:
            raise SubscriptionNotFoundError(subscription_id)

    async def list(self, limit: int, offset: int, user_id: UUID, service_name: str) -> List[Subscription]:
        self._maybe_fail()
        self.list_calls.append((limit, offset, user_id, service_name))
        matching = [
            _copy(row, row_id)
            for row_id, row in sorted(self.rows.items(), reverse=True)
            if row.user_id == user_id and row.service_name == service_name
        ]
        return matching[offset:offset + limit]

    async def sum_by_period(self, from_month: date, to_month: date, user_id: UUID, service_name: str) -> int:
        self._maybe_fail()
        return sum(
            row.price
            for row in self.rows.values()
            if row.user_id == user_id
            and row.service_name == service_name
            and row.start_date <= to_month
            and (row.end_date is None or row.end_date >= from_month)
        )


@pytest.fixture
def user_id():
    return USER_ID


@pytest.fixture
def other_user_id():
    return OTHER_USER_ID


@pytest.fixture
def fake_store():
    return InMemorySubscriptionStore()


@pytest.fixture
def client(fake_store):
    """TestClient wired to the in-memory store; lifespan (and the database) never starts."""
    app.dependency_overrides[get_subscription_store] = lambda: fake_store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def sqlite_path(tmp_path):
    """SQLite file with the subscriptions schema already created."""
    path = tmp_path / "subscriptions.db"
    sync_engine = create_engine(f"sqlite:///{path}")
    SQLModel.metadata.create_all(sync_engine)
    sync_engine.dispose()
    return path


@pytest.fixture
async def repository(sqlite_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{sqlite_path}")
    yield SubscriptionRepository(create_session_maker(engine))
    await engine.dispose()


@pytest.fixture
def sqlite_client(sqlite_path):
    """TestClient backed by the real repository over SQLite.

    NullPool keeps connections from outliving the client's event loop.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{sqlite_path}", poolclass=NullPool)
    store = SubscriptionRepository(create_session_maker(engine))
    app.dependency_overrides[get_subscription_store] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def make_subscription(
    service_name: str = "netflix",
    price: int = 999,
    user_id: UUID = USER_ID,
    start_date: date = date(2024, 1, 1),
    end_date: Optional[date] = None,
) -> Subscription:
    return Subscription(
        service_name=service_name,
        price=price,
        user_id=user_id,
        start_date=start_date,
        end_date=end_date,
    )


@pytest.fixture
def subscription_factory():
    return make_subscription
