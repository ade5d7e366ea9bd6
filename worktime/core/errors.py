from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ErrorEnvelope(JSONResponse):
    """``{"error": ...}`` body used for every non-2xx answer of the API."""

    def __init__(
        self,
        *,
        status_code: int,
        message: str,
        errors: list[Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        payload: dict[str, Any] = {"error": message}
        if errors is not None:
            payload["errors"] = errors
        super().__init__(payload, status_code=status_code, headers=headers)


def _field_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    errors: list[dict[str, Any]] = []
    for item in exc.errors():
        loc = [str(part) for part in item.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({"field": ".".join(loc), "msg": item.get("msg", "Invalid value")})
    return errors


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    if isinstance(detail, str):
        message = detail
    else:
        message = "Error"
    return ErrorEnvelope(
        status_code=exc.status_code,
        message=message,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return ErrorEnvelope(
        status_code=status.HTTP_400_BAD_REQUEST,
        message="Validation failed",
        errors=jsonable_encoder(_field_errors(exc)),
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("request.failed", extra={"extra_data": {"path": request.url.path}})
    return ErrorEnvelope(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, message="Internal server error")


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
