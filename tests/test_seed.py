"""Tests for seed data and the seeding routine."""

from unittest.mock import AsyncMock, patch

import pytest

from production_scheduler.db.seed import (
    CENTER_IDS,
    _create_operation_types,
    _create_order_states,
    _create_production_orders,
    _create_work_centers,
    seed_if_empty,
)
from production_scheduler.domain import OrderStatus


class TestSeedStates:
    def test_creates_all_lifecycle_states(self):
        states = _create_order_states()
        assert [s.code for s in states] == [s.value for s in OrderStatus]

    def test_display_order_sequential(self):
        assert [s.display_order for s in _create_order_states()] == [1, 2, 3, 4, 5]


class TestSeedDemoData:
    def test_centers_have_fixed_ids(self):
        centers = _create_work_centers()
        assert {c.id for c in centers} == set(CENTER_IDS.values())

    def test_orders_reference_seeded_records(self):
        center_ids = {c.id for c in _create_work_centers()}
        operation_ids = {o.id for o in _create_operation_types()}
        orders = _create_production_orders()
        assert all(o.work_center_id in center_ids for o in orders)
        assert all(o.operation_type_id in operation_ids for o in orders)

    def test_closed_orders_have_actual_end(self):
        orders = _create_production_orders()
        closed = [o for o in orders if o.state_code == OrderStatus.CLOSED.value]
        assert closed
        assert all(o.actual_end is not None for o in closed)

    def test_business_keys_unique(self):
        orders = _create_production_orders()
        keys = {(o.order_type, o.order_year, o.order_series, o.order_number, o.order_line) for o in orders}
        assert len(keys) == len(orders)


class TestSeedIfEmpty:
    @pytest.mark.asyncio
    async def test_skips_when_states_exist(self, mock_db):
        with patch("production_scheduler.db.seed.table_has_data", AsyncMock(return_value=True)):
            assert await seed_if_empty(mock_db) is None
        mock_db.add_all.assert_not_called()

    @pytest.mark.asyncio
    async def test_states_only_without_demo(self, mock_db):
        with patch("production_scheduler.db.seed.table_has_data", AsyncMock(return_value=False)):
            counts = await seed_if_empty(mock_db, demo=False)
        assert counts == {"order_states": 5}
        mock_db.add_all.assert_called_once()

    @pytest.mark.asyncio
    async def test_demo_data(self, mock_db):
        with patch("production_scheduler.db.seed.table_has_data", AsyncMock(return_value=False)):
            counts = await seed_if_empty(mock_db, demo=True)
        assert counts["work_centers"] == 4
        assert counts["production_orders"] == 8
        assert mock_db.add_all.call_count == 3
