"""Error kinds raised by the service layer.

Services raise these instead of HTTPException; ``register_error_handlers``
turns them into ``{"detail": ..., "kind": ...}`` responses.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    kind = "error"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Unauthorized(ServiceError):
    """Actor is not a group/task member where membership is required."""

    kind = "unauthorized"
    status_code = status.HTTP_403_FORBIDDEN


class NotFound(ServiceError):
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class InvalidInput(ServiceError):
    kind = "invalid_input"
    status_code = status.HTTP_400_BAD_REQUEST


class ConflictOrRace(ServiceError):
    """A concurrent or duplicate write hit a uniqueness rule."""

    kind = "conflict"
    status_code = status.HTTP_409_CONFLICT


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    logger.info("%s %s rejected: %s (%s)", request.method, request.url.path, exc.message, exc.kind)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "kind": exc.kind},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, service_error_handler)
