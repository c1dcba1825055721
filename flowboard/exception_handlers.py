import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from flowboard.exceptions import (
    AppError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)

logger = structlog.get_logger()

# Subclasses resolve through the MRO, so graph errors land on ValidationError.
STATUS_CODES: dict[type[AppError], int] = {
    NotFoundError: 404,
    ValidationError: 422,
    ConflictError: 409,
    UnauthorizedError: 401,
    ForbiddenError: 403,
    AppError: 500,
}


def _error_response(status_code: int):
    async def handle(request: Request, exc: AppError) -> JSONResponse:
        log = logger.error if status_code >= 500 else logger.info
        log(
            "request_failed",
            path=request.url.path,
            status_code=status_code,
            error=exc.code,
            message=exc.message,
        )
        return JSONResponse(
            status_code=status_code,
            content={"error": exc.code, "message": exc.message},
        )

    return handle


def register_exception_handlers(app: FastAPI) -> None:
    for exc_class, status_code in STATUS_CODES.items():
        app.add_exception_handler(exc_class, _error_response(status_code))
