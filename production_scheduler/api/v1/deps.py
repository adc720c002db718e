"""Shared dependencies for the v1 API routes."""

from fastapi import HTTPException, Request, status

from production_scheduler.services.errors import (
    ConcurrencyConflictError,
    DuplicateOrderError,
    InvalidTransitionError,
    NotFoundError,
    SchedulingError,
)
from production_scheduler.services.scheduler import OrderScheduler

_STATUS_BY_ERROR: dict[type[SchedulingError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    DuplicateOrderError: status.HTTP_409_CONFLICT,
    ConcurrencyConflictError: status.HTTP_409_CONFLICT,
    InvalidTransitionError: status.HTTP_409_CONFLICT,
}


def get_scheduler(request: Request) -> OrderScheduler:
    """FastAPI dependency returning the scheduler created at startup."""
    return request.app.state.scheduler


def to_http_exception(exc: SchedulingError) -> HTTPException:
    """Structured HTTP error for a scheduling failure."""
    code = _STATUS_BY_ERROR.get(type(exc), status.HTTP_422_UNPROCESSABLE_ENTITY)
    return HTTPException(status_code=code, detail=exc.as_detail())
