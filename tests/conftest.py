"""Pytest configuration with fixtures for async testing."""

import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from production_scheduler.core.clock import FixedClock
from production_scheduler.schemas.order import ScheduledOrder
from production_scheduler.schemas.work_center import WorkCenterResponse
from production_scheduler.services.repository import InMemoryOrderRepository
from production_scheduler.services.scheduler import OrderScheduler

# Monday morning; lateness classes in the tests are relative to this date.
NOW = datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc)


def at(day: int, hour: int = 0, minute: int = 0) -> datetime:
    """Aware UTC datetime in March 2025."""
    return datetime(2025, 3, day, hour, minute, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Test Data Factories
# ---------------------------------------------------------------------------


class WorkCenterFactory:
    """Factory for creating WorkCenterResponse snapshots for testing."""

    _counter = 0

    @classmethod
    def create(cls, **overrides: Any) -> WorkCenterResponse:
        cls._counter += 1
        defaults = {
            "id": uuid.uuid4(),
            "code": f"WC-{cls._counter:02d}",
            "description": f"Work center {cls._counter}",
            "active": True,
            "hourly_capacity": 10,
            "standard_hourly_cost": Decimal("40.00"),
        }
        return WorkCenterResponse(**{**defaults, **overrides})


class OrderFactory:
    """Factory for creating ScheduledOrder snapshots for testing."""

    _counter = 0

    @classmethod
    def create(cls, **overrides: Any) -> ScheduledOrder:
        cls._counter += 1
        defaults = {
            "id": uuid.uuid4(),
            "order_type": "P",
            "order_year": 2025,
            "order_series": "A",
            "order_number": cls._counter,
            "order_line": 1,
            "description": f"Test order {cls._counter}",
            "article_code": f"ART-{cls._counter:03d}",
            "article_description": f"Article {cls._counter}",
            "unit_of_measure": "PZ",
            "ordered_quantity": Decimal("100"),
            "produced_quantity": Decimal("0"),
            "cycle_time": 30.0,
            "setup_time": 15.0,
            "start": NOW,
            "expected_end": NOW + timedelta(hours=8),
            "priority": 2,
            "state_code": "ES",
            "work_center_id": uuid.uuid4(),
            "operation_type_id": uuid.uuid4(),
        }
        return ScheduledOrder(**{**defaults, **overrides})


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def clock():
    """Provide a clock frozen at NOW."""
    return FixedClock(NOW)


@pytest.fixture
def center_factory():
    """Provide WorkCenterFactory for tests."""
    WorkCenterFactory._counter = 0
    return WorkCenterFactory


@pytest.fixture
def order_factory():
    """Provide OrderFactory for tests."""
    OrderFactory._counter = 0
    return OrderFactory


@pytest.fixture
def mock_db():
    """Provide a mock AsyncSession usable as ``async with factory() as session``."""
    session = AsyncMock(spec=AsyncSession)
    session.__aenter__.return_value = session
    session.add = MagicMock()
    session.add_all = MagicMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.delete = AsyncMock()
    return session


@pytest.fixture
def session_factory(mock_db):
    """Provide a session factory that always hands out ``mock_db``."""
    return MagicMock(return_value=mock_db)


@pytest.fixture
def centers(center_factory):
    """Two active work centers, A and B."""
    return [
        center_factory.create(description="Center A"),
        center_factory.create(description="Center B"),
    ]


@pytest.fixture
def repository(centers):
    """Provide an empty in-memory repository knowing centers A and B."""
    return InMemoryOrderRepository(centers=centers)


@pytest.fixture
async def scheduler(repository, clock):
    """Provide a loaded scheduler over the in-memory repository."""
    svc = OrderScheduler(repository, clock=clock)
    await svc.load()
    return svc


async def load_orders(scheduler: OrderScheduler, *orders: ScheduledOrder) -> None:
    """Put ``orders`` in the scheduler's repository and reload."""
    for order in orders:
        await scheduler.repository.add_order(order)
    await scheduler.load()
