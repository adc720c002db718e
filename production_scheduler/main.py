"""FastAPI application entry point."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from production_scheduler.api.v1.router import api_v1_router
from production_scheduler.core.config import settings
from production_scheduler.core.database import async_session_factory, close_db
from production_scheduler.db.init_db import init_db
from production_scheduler.db.seed import seed_if_empty
from production_scheduler.services.repository import SqlAlchemyOrderRepository
from production_scheduler.services.scheduler import OrderScheduler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application startup and shutdown lifecycle."""
    logger.info("Starting %s ...", settings.PROJECT_NAME)

    # Startup
    await init_db()
    logger.info("Database initialized")

    async with async_session_factory() as session:
        result = await seed_if_empty(session)
        if result:
            await session.commit()
            logger.info("Seed data inserted: %s", result)
        else:
            logger.info("Database already has data, skipping seed")

    scheduler = OrderScheduler(SqlAlchemyOrderRepository(async_session_factory))
    loaded = await scheduler.load()
    app.state.scheduler = scheduler
    logger.info("Scheduler ready with %d order(s)", loaded)

    yield

    # Shutdown
    await close_db()
    logger.info("Database disconnected")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Accept"],
)

# Register API v1 router
app.include_router(api_v1_router, prefix="/api/v1")
