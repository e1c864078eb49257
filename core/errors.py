# core/errors.py
import traceback
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.config import DEBUG
from core.logger import get_logger

logger = get_logger("errors")


class AppError(Exception):
    """Base for errors raised below the router layer."""

    status_code = 500

    def __init__(self, message: str, error: Optional[str] = None, **extra: Any):
        super().__init__(message)
        self.message = message
        self.error = error
        self.extra = extra


class BadRequestError(AppError):
    status_code = 400


class NotFoundError(AppError):
    status_code = 404


class ConcurrentUpdateError(AppError):
    status_code = 409


class DependentRecordsError(BadRequestError):
    """Delete refused because other documents still reference the target."""

    def __init__(self, message: str, products_count: int):
        super().__init__(message, products_count=products_count)
        self.products_count = products_count


class UploadError(BadRequestError):
    """Rejected upload. `error` carries a code such as LIMIT_FILE_SIZE."""


class UpstreamError(AppError):
    """Storage / rendering backend failure."""

    status_code = 500


def envelope_error(message: str, error: Any = None, **extra: Any) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": False, "message": message}
    if error is not None:
        body["error"] = error
    body.update(extra)
    return body


async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(envelope_error(exc.message, exc.error, **exc.extra)),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if isinstance(exc.detail, dict):
        detail = dict(exc.detail)
        message = detail.pop("message", "Request failed")
        body = envelope_error(message, **detail)
    else:
        body = envelope_error(str(exc.detail))
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(body),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(p) for p in e.get("loc", ()) if p != "body"), "message": e.get("msg")}
        for e in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=jsonable_encoder(envelope_error("Validation error", errors)),
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    tb = traceback.format_exc()
    logger.error("Unhandled exception on %s %s: %s\n%s", request.method, request.url.path, exc, tb)
    return JSONResponse(
        status_code=500,
        content=envelope_error(str(exc) or "Something went wrong!", tb if DEBUG else None),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
