"""SQLAlchemy ORM models."""

from production_scheduler.models.operation_type import OperationType
from production_scheduler.models.operator import Operator
from production_scheduler.models.order_state import OrderState
from production_scheduler.models.production_order import ProductionOrder
from production_scheduler.models.work_center import WorkCenter

__all__ = [
    "OperationType",
    "Operator",
    "OrderState",
    "ProductionOrder",
    "WorkCenter",
]
