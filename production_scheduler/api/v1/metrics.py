"""Dashboard metrics endpoint."""

from fastapi import APIRouter, Depends

from production_scheduler.api.v1.deps import get_scheduler
from production_scheduler.schemas.metrics import DashboardMetrics
from production_scheduler.services.metrics import MetricsCalculator
from production_scheduler.services.scheduler import OrderScheduler

router = APIRouter(prefix="/metrics", tags=["metrics"])


@router.get("/dashboard", response_model=DashboardMetrics)
async def get_dashboard(
    scheduler: OrderScheduler = Depends(get_scheduler),
) -> DashboardMetrics:
    """Per-state and per-center counts, urgent and overdue orders."""
    return MetricsCalculator(clock=scheduler.clock).summarize(scheduler.orders())
