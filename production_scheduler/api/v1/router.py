"""API v1 router aggregating all sub-routers."""

from fastapi import APIRouter

from production_scheduler.api.v1.metrics import router as metrics_router
from production_scheduler.api.v1.orders import router as orders_router
from production_scheduler.api.v1.schedule import router as schedule_router
from production_scheduler.db.init_db import check_db_connection

api_v1_router = APIRouter()


@api_v1_router.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint; the service stays up when the database is not."""
    database = "ok" if await check_db_connection() else "unavailable"
    return {"status": "ok", "database": database}


api_v1_router.include_router(orders_router)
api_v1_router.include_router(schedule_router)
api_v1_router.include_router(metrics_router)
