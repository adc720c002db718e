"""Seed data: the lifecycle states plus an optional demo shop floor.

The five order states are always seeded; work centers, operation types,
operators and a handful of orders spread around today are added when demo
data is enabled.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from production_scheduler.core.config import settings
from production_scheduler.db.init_db import table_has_data
from production_scheduler.domain import OrderStatus
from production_scheduler.models.operation_type import OperationType
from production_scheduler.models.operator import Operator
from production_scheduler.models.order_state import OrderState
from production_scheduler.models.production_order import ProductionOrder
from production_scheduler.models.work_center import WorkCenter
from production_scheduler.services.repository import system_states

logger = logging.getLogger(__name__)

# Fixed UUIDs for deterministic seeding
CENTER_IDS = {
    "PRESS-01": uuid.UUID("b0000000-0000-0000-0000-000000000001"),
    "LATHE-01": uuid.UUID("b0000000-0000-0000-0000-000000000002"),
    "MILL-01": uuid.UUID("b0000000-0000-0000-0000-000000000003"),
    "ASSY-01": uuid.UUID("b0000000-0000-0000-0000-000000000004"),
}

OPERATION_IDS = {
    "T": uuid.UUID("e0000000-0000-0000-0000-000000000001"),
    "F": uuid.UUID("e0000000-0000-0000-0000-000000000002"),
    "M": uuid.UUID("e0000000-0000-0000-0000-000000000003"),
}

OPERATOR_IDS = {
    "OP001": uuid.UUID("f0000000-0000-0000-0000-000000000001"),
    "OP002": uuid.UUID("f0000000-0000-0000-0000-000000000002"),
    "OP003": uuid.UUID("f0000000-0000-0000-0000-000000000003"),
}


def _today() -> datetime:
    now = datetime.now(timezone.utc)
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def _create_order_states() -> list[OrderState]:
    """The five lifecycle states, in display order."""
    return [
        OrderState(
            id=state.id,
            code=state.code,
            description=state.description,
            active=True,
            display_order=state.display_order,
        )
        for state in system_states()
    ]


def _create_work_centers() -> list[WorkCenter]:
    return [
        WorkCenter(
            id=CENTER_IDS["PRESS-01"],
            code="PRESS-01",
            description="Hydraulic press 250t",
            hourly_capacity=120,
            standard_hourly_cost=Decimal("65.00"),
        ),
        WorkCenter(
            id=CENTER_IDS["LATHE-01"],
            code="LATHE-01",
            description="CNC lathe",
            hourly_capacity=40,
            standard_hourly_cost=Decimal("48.50"),
        ),
        WorkCenter(
            id=CENTER_IDS["MILL-01"],
            code="MILL-01",
            description="5-axis milling center",
            hourly_capacity=25,
            standard_hourly_cost=Decimal("72.00"),
        ),
        WorkCenter(
            id=CENTER_IDS["ASSY-01"],
            code="ASSY-01",
            description="Assembly bench",
            hourly_capacity=None,
            standard_hourly_cost=Decimal("35.00"),
            notes="Manual assembly, capacity depends on staffing",
        ),
    ]


def _create_operation_types() -> list[OperationType]:
    return [
        OperationType(id=OPERATION_IDS["T"], code="T", description="Turning"),
        OperationType(id=OPERATION_IDS["F"], code="F", description="Forming"),
        OperationType(id=OPERATION_IDS["M"], code="M", description="Milling"),
    ]


def _create_operators() -> list[Operator]:
    return [
        Operator(
            id=OPERATOR_IDS["OP001"],
            code="OP001",
            first_name="Anna",
            last_name="Ferri",
            competence_level=4,
        ),
        Operator(
            id=OPERATOR_IDS["OP002"],
            code="OP002",
            first_name="Luca",
            last_name="Moretti",
            competence_level=3,
        ),
        Operator(
            id=OPERATOR_IDS["OP003"],
            code="OP003",
            first_name="Sara",
            last_name="Conti",
            competence_level=5,
        ),
    ]


def _create_production_orders() -> list[ProductionOrder]:
    """Orders covering every lateness class and one overlap on the press.

    (center, operation, operator, article, qty, produced, start offset in
    days, duration in hours, state, priority)
    """
    today = _today()
    rows = [
        ("PRESS-01", "F", "OP001", "BRK-100", "500", "500", -6, 10, OrderStatus.CLOSED, 2),
        ("PRESS-01", "F", "OP001", "BRK-110", "800", "320", -1, 20, OrderStatus.IN_PROGRESS, 3),
        ("PRESS-01", "F", None, "BRK-120", "300", "0", 0, 8, OrderStatus.ISSUED, 2),
        ("LATHE-01", "T", "OP002", "SHF-20", "120", "30", -3, 30, OrderStatus.IN_PROGRESS, 4),
        ("LATHE-01", "T", None, "SHF-25", "60", "0", 2, 12, OrderStatus.SUSPENDED, 1),
        ("MILL-01", "M", "OP003", "HSG-7", "40", "10", -4, 16, OrderStatus.URGENT, 5),
        ("MILL-01", "M", None, "HSG-9", "25", "0", 12, 6, OrderStatus.ISSUED, 2),
        ("ASSY-01", "M", "OP002", "KIT-3", "200", "0", 5, 24, OrderStatus.ISSUED, 3),
    ]

    orders = []
    for number, row in enumerate(rows, start=1):
        center, operation, operator, article, qty, produced, offset, hours, state, priority = row
        start = today + timedelta(days=offset, hours=6)
        end = start + timedelta(hours=hours)
        closed = state is OrderStatus.CLOSED
        orders.append(
            ProductionOrder(
                id=uuid.UUID(f"c0000000-0000-0000-0000-{number:012d}"),
                order_type="P",
                order_year=today.year,
                order_series="A",
                order_number=number,
                order_line=1,
                description=f"Demo order {number}",
                article_code=article,
                article_description=f"Article {article}",
                unit_of_measure="PZ",
                ordered_quantity=Decimal(qty),
                produced_quantity=Decimal(produced),
                cycle_time=45.0,
                setup_time=30.0,
                start=start,
                actual_end=end if closed else None,
                expected_end=end,
                priority=priority,
                state_code=state.value,
                work_center_id=CENTER_IDS[center],
                operation_type_id=OPERATION_IDS[operation],
                operator_id=OPERATOR_IDS[operator] if operator else None,
            )
        )
    return orders


async def seed_if_empty(
    session: AsyncSession, demo: bool = settings.SEED_DEMO_DATA
) -> dict[str, int] | None:
    """Seed states (and demo data) into an empty database.

    Returns the number of rows added per table, or None when the state table
    already has rows. The caller commits.
    """
    if await table_has_data(session, "order_states"):
        return None

    counts: dict[str, int] = {}
    states = _create_order_states()
    session.add_all(states)
    counts["order_states"] = len(states)
    await session.flush()

    if demo:
        centers = _create_work_centers()
        operations = _create_operation_types()
        operators = _create_operators()
        session.add_all([*centers, *operations, *operators])
        await session.flush()

        orders = _create_production_orders()
        session.add_all(orders)
        await session.flush()

        counts["work_centers"] = len(centers)
        counts["operation_types"] = len(operations)
        counts["operators"] = len(operators)
        counts["production_orders"] = len(orders)

    logger.info("Seeded %s", counts)
    return counts
