"""Maps domain exceptions onto HTTP status classes with an ``{"error": ...}`` body."""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from tradedocs.logging.logger import Log
from tradedocs.processor.exceptions import (
    ConflictError,
    DuplicateKeyError,
    InvalidInputError,
    NotBolError,
    NotFoundError,
    ProcessorError,
    UnauthorizedError,
)
from tradedocs.storage.exceptions import BlobNotFoundError, BlobStoreError

STATUS_BY_EXCEPTION: tuple[tuple[type[Exception], int], ...] = (
    (NotFoundError, 404),
    (BlobNotFoundError, 404),
    (UnauthorizedError, 401),
    (InvalidInputError, 400),
    (NotBolError, 400),
    (DuplicateKeyError, 409),
    (ConflictError, 409),
)


def status_for(exc: Exception) -> int:
    for exc_type, status in STATUS_BY_EXCEPTION:
        if isinstance(exc, exc_type):
            return status
    return 500


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def _domain_error(request: Request, exc: Exception) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        Log.error(f"{request.method} {request.url.path} failed: {exc}")
    return error_response(status_code, str(exc))


async def _validation_error(request: Request, exc: Exception) -> JSONResponse:
    if isinstance(exc, RequestValidationError):
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        return error_response(400, f"Invalid request: {problems}")
    return error_response(400, "Invalid request")


async def _http_error(request: Request, exc: Exception) -> JSONResponse:
    if isinstance(exc, StarletteHTTPException):
        return error_response(exc.status_code, str(exc.detail))
    return error_response(500, "Internal server error")


async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    Log.exception(f"{request.method} {request.url.path} crashed: {exc!r}")
    return error_response(500, "Internal server error")


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ProcessorError, _domain_error)
    app.add_exception_handler(BlobStoreError, _domain_error)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(Exception, _unexpected_error)
