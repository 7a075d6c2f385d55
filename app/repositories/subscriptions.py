"""Persistence for subscriptions.

``SubscriptionStore`` is the contract the HTTP layer depends on;
``SubscriptionRepository`` implements it over SQLAlchemy's asyncio engine.
Every operation opens one session and runs one statement, so a cancelled
request aborts the query in flight instead of leaving work behind.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from datetime import date
from typing import AsyncIterator, List
from uuid import UUID

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.exceptions import StoreError, SubscriptionNotFoundError
from app.models.subscription import Subscription

logger = logging.getLogger(__name__)


class SubscriptionStore(ABC):
    """Create/read/update/delete/list/aggregate operations over subscriptions."""

    @abstractmethod
    async def create(self, subscription: Subscription) -> Subscription:
        """Persist a new subscription and return it with ``id`` assigned."""

    @abstractmethod
    async def get(self, subscription_id: int) -> Subscription:
        """Return the subscription or raise ``SubscriptionNotFoundError``."""

    @abstractmethod
    async def update(self, subscription_id: int, subscription: Subscription) -> Subscription:
        """Overwrite every mutable field of the row identified by ``subscription_id``.

        The row is not checked for existence: updating an unknown id
        reports success and returns the caller's data with that id.
        """

    @abstractmethod
    async def delete(self, subscription_id: int) -> None:
        """Remove the row or raise ``SubscriptionNotFoundError`` if nothing matched."""

    @abstractmethod
    async def list(
        self, limit: int, offset: int, user_id: UUID, service_name: str
    ) -> List[Subscription]:
        """Subscriptions of one user and service, newest id first."""

    @abstractmethod
    async def sum_by_period(
        self, from_month: date, to_month: date, user_id: UUID, service_name: str
    ) -> int:
        """Sum of ``price`` over subscriptions whose active months overlap the window.

        A subscription qualifies when ``start_date <= to_month`` and it is
        open-ended or ``end_date >= from_month``. Returns 0 when none do.
        """


class SubscriptionRepository(SubscriptionStore):
    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_maker() as session:
                yield session
        except (SQLAlchemyError, OSError) as exc:
            logger.error("%s failed: %s", operation, exc)
            raise StoreError(operation, exc) from exc

    async def create(self, subscription: Subscription) -> Subscription:
        async with self._session("create subscription") as session:
            session.add(subscription)
            await session.commit()
        logger.debug("created subscription id=%s", subscription.id)
        return subscription

    async def get(self, subscription_id: int) -> Subscription:
        async with self._session("get subscription") as session:
            subscription = await session.get(Subscription, subscription_id)
        if subscription is None:
            raise SubscriptionNotFoundError(subscription_id)
        return subscription

    async def update(self, subscription_id: int, subscription: Subscription) -> Subscription:
        stmt = (
            update(Subscription)
            .where(Subscription.id == subscription_id)
            .values(
                service_name=subscription.service_name,
                price=subscription.price,
                user_id=subscription.user_id,
                start_date=subscription.start_date,
                end_date=subscription.end_date,
            )
        )
        async with self._session("update subscription") as session:
            await session.execute(stmt)
            await session.commit()
        subscription.id = subscription_id
        return subscription

    async def delete(self, subscription_id: int) -> None:
        stmt = delete(Subscription).where(Subscription.id == subscription_id)
        async with self._session("delete subscription") as session:
            result = await session.execute(stmt)
            await session.commit()
        if result.rowcount == 0:
            raise SubscriptionNotFoundError(subscription_id)

    async def list(
        self, limit: int, offset: int, user_id: UUID, service_name: str
    ) -> List[Subscription]:
        stmt = (
            select(Subscription)
            .where(Subscription.user_id == user_id)
            .where(Subscription.service_name == service_name)
            .order_by(Subscription.id.desc())
            .limit(limit)
            .offset(offset)
        )
        async with self._session("list subscriptions") as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def sum_by_period(
        self, from_month: date, to_month: date, user_id: UUID, service_name: str
    ) -> int:
        # Solapamiento de intervalos: inicio contra el fin de la ventana
        # y fin contra el inicio de la ventana
        stmt = (
            select(func.coalesce(func.sum(Subscription.price), 0))
            .where(Subscription.start_date <= to_month)
            .where(
                or_(
                    Subscription.end_date.is_(None),
                    Subscription.end_date >= from_month,
                )
            )
            .where(Subscription.user_id == user_id)
            .where(Subscription.service_name == service_name)
        )
        async with self._session("sum subscriptions by period") as session:
            total = (await session.execute(stmt)).scalar_one()
        # SUM(BIGINT) llega como NUMERIC desde Postgres
        return int(total)
