"""Tests for the SQLAlchemy and in-memory order repositories."""

import uuid
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError

from production_scheduler.models.production_order import ProductionOrder
from production_scheduler.models.work_center import WorkCenter
from production_scheduler.schemas.query import OrderFilter
from production_scheduler.services.errors import (
    ConcurrencyConflictError,
    DuplicateOrderError,
    NotFoundError,
)
from production_scheduler.services.repository import (
    InMemoryOrderRepository,
    SqlAlchemyOrderRepository,
    system_states,
)


def _row_for(order) -> ProductionOrder:
    """Transient ORM row mirroring a snapshot."""
    return ProductionOrder(**order.model_dump())


def _scalars_result(rows: list) -> MagicMock:
    result = MagicMock()
    result.scalars.return_value.all.return_value = rows
    return result


# ---------------------------------------------------------------------------
# SQLAlchemy repository
# ---------------------------------------------------------------------------


class TestSqlAlchemySaveOrder:
    """Test save_order version checks and transaction handling."""

    @pytest.mark.asyncio
    async def test_copies_mutable_fields_and_commits(self, mock_db, session_factory, order_factory):
        order = order_factory.create()
        row = _row_for(order)
        mock_db.get.return_value = row
        repo = SqlAlchemyOrderRepository(session_factory)

        saved = await repo.save_order(
            order.model_copy(update={"produced_quantity": Decimal("40"), "state_code": "PR"})
        )

        assert row.produced_quantity == Decimal("40")
        assert row.state_code == "PR"
        assert saved.state_code == "PR"
        mock_db.flush.assert_awaited_once()
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_version_mismatch_raises_and_rolls_back(
        self, mock_db, session_factory, order_factory
    ):
        order = order_factory.create()
        row = _row_for(order.model_copy(update={"version": 3}))
        mock_db.get.return_value = row
        repo = SqlAlchemyOrderRepository(session_factory)

        with pytest.raises(ConcurrencyConflictError):
            await repo.save_order(order)

        mock_db.rollback.assert_awaited_once()
        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_stale_data_maps_to_concurrency_conflict(
        self, mock_db, session_factory, order_factory
    ):
        order = order_factory.create()
        mock_db.get.return_value = _row_for(order)
        mock_db.flush.side_effect = StaleDataError("0 rows matched")
        repo = SqlAlchemyOrderRepository(session_factory)

        with pytest.raises(ConcurrencyConflictError):
            await repo.save_order(order)

    @pytest.mark.asyncio
    async def test_missing_row(self, mock_db, session_factory, order_factory):
        mock_db.get.return_value = None
        repo = SqlAlchemyOrderRepository(session_factory)

        with pytest.raises(NotFoundError):
            await repo.save_order(order_factory.create())


class TestSqlAlchemyOtherOperations:
    """Test add, delete and loads."""

    @pytest.mark.asyncio
    async def test_add_order(self, mock_db, session_factory, order_factory):
        order = order_factory.create()
        repo = SqlAlchemyOrderRepository(session_factory)

        saved = await repo.add_order(order)

        added = mock_db.add.call_args.args[0]
        assert isinstance(added, ProductionOrder)
        assert added.id == order.id
        assert added.version == 1
        assert saved.identifier == order.identifier
        assert saved.version == 1
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_add_duplicate(self, mock_db, session_factory, order_factory):
        mock_db.flush.side_effect = IntegrityError("INSERT", {}, Exception("duplicate key"))
        repo = SqlAlchemyOrderRepository(session_factory)

        with pytest.raises(DuplicateOrderError):
            await repo.add_order(order_factory.create())
        mock_db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_delete_order(self, mock_db, session_factory, order_factory):
        order = order_factory.create()
        row = _row_for(order)
        mock_db.get.return_value = row
        repo = SqlAlchemyOrderRepository(session_factory)

        await repo.delete_order(order.id)

        mock_db.delete.assert_awaited_once_with(row)

    @pytest.mark.asyncio
    async def test_delete_missing(self, mock_db, session_factory):
        mock_db.get.return_value = None
        repo = SqlAlchemyOrderRepository(session_factory)

        with pytest.raises(NotFoundError):
            await repo.delete_order(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_load_orders_with_filters(self, mock_db, session_factory, order_factory):
        orders = [order_factory.create(), order_factory.create()]
        mock_db.execute.return_value = _scalars_result([_row_for(o) for o in orders])
        repo = SqlAlchemyOrderRepository(session_factory)

        loaded = await repo.load_orders(OrderFilter(state_code="es", article="ART"))

        assert [o.id for o in loaded] == [o.id for o in orders]
        statement = str(mock_db.execute.call_args.args[0])
        assert "production_orders.state_code" in statement
        assert "ORDER BY production_orders.start DESC" in statement

    @pytest.mark.asyncio
    async def test_load_centers(self, mock_db, session_factory):
        center = WorkCenter(id=uuid.uuid4(), description="Press", active=True)
        mock_db.execute.return_value = _scalars_result([center])
        repo = SqlAlchemyOrderRepository(session_factory)

        centers = await repo.load_centers()

        assert centers[0].id == center.id
        assert centers[0].description == "Press"


# ---------------------------------------------------------------------------
# In-memory repository
# ---------------------------------------------------------------------------


class TestInMemoryRepository:
    """Test the dictionary-backed repository."""

    @pytest.mark.asyncio
    async def test_save_bumps_version(self, order_factory):
        order = order_factory.create()
        repo = InMemoryOrderRepository([order])

        saved = await repo.save_order(order)

        assert saved.version == 2
        assert repo.get(order.id).version == 2

    @pytest.mark.asyncio
    async def test_stale_save_rejected(self, order_factory):
        order = order_factory.create()
        repo = InMemoryOrderRepository([order])
        await repo.save_order(order)

        with pytest.raises(ConcurrencyConflictError):
            await repo.save_order(order)

    @pytest.mark.asyncio
    async def test_load_orders_filters(self, order_factory):
        issued = order_factory.create(state_code="ES")
        repo = InMemoryOrderRepository([issued, order_factory.create(state_code="PR")])

        assert await repo.load_orders(OrderFilter(state_code="ES")) == [issued]

    @pytest.mark.asyncio
    async def test_default_states(self):
        states = await InMemoryOrderRepository().load_states()
        assert [s.code for s in states] == ["ES", "PR", "CH", "SO", "UR"]
        assert states == system_states()

    @pytest.mark.asyncio
    async def test_centers_sorted_by_description(self, center_factory):
        repo = InMemoryOrderRepository(
            centers=[center_factory.create(description="Z"), center_factory.create(description="A")]
        )
        repo.add_center(center_factory.create(description="M"))
        assert [c.description for c in await repo.load_centers()] == ["A", "M", "Z"]
