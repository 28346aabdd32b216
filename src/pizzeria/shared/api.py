"""HTTP response envelope, pagination and exception translation.

Every endpoint answers ``{success, message?, data?, errors?}``; paginated
lists add ``pagination``. Errors raised anywhere below the routers are turned
into the same envelope by the handlers registered here.
"""

import math
import traceback
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError
from pydantic import BaseModel, ConfigDict, Field

from pizzeria.config import get_settings
from pizzeria.shared.errors import PizzeriaError, RateLimited
from pizzeria.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current: int
    total: int
    has_next: bool = Field(serialization_alias="hasNext")
    has_prev: bool = Field(serialization_alias="hasPrev")
    total_items: int = Field(serialization_alias="totalItems")


class Envelope(BaseModel):
    success: bool = True
    message: str | None = None
    data: Any = None
    errors: list[dict] | None = None
    pagination: Pagination | None = None


def ok(data: Any = None, message: str | None = None, pagination: Pagination | None = None) -> Envelope:
    return Envelope(success=True, message=message, data=data, pagination=pagination)


def paginate(items: list, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> tuple[list, Pagination]:
    """Slice ``items`` for ``page`` (1-based) and describe the slice."""
    page = max(page, 1)
    limit = min(max(limit, 1), MAX_PAGE_SIZE)
    total_items = len(items)
    total_pages = math.ceil(total_items / limit) if total_items else 0
    start = (page - 1) * limit
    window = items[start : start + limit]
    return window, Pagination(
        current=page,
        total=total_pages,
        has_next=page < total_pages,
        has_prev=page > 1,
        total_items=total_items,
    )


def _render(status_code: int, envelope: Envelope, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=envelope.model_dump(mode="json", by_alias=True, exclude_none=True),
        headers=headers,
    )


def _protean_field_errors(exc: ValidationError) -> list[dict]:
    messages = exc.messages if isinstance(exc.messages, dict) else {"_entity": [str(exc.messages)]}
    errors = []
    for field_name, field_messages in messages.items():
        if isinstance(field_messages, str):
            field_messages = [field_messages]
        for message in field_messages:
            errors.append({"field": field_name, "message": str(message)})
    return errors


async def handle_pizzeria_error(request: Request, exc: PizzeriaError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("request_failed", path=request.url.path, kind=exc.kind, message=exc.message)
    else:
        logger.info("request_rejected", path=request.url.path, kind=exc.kind, message=exc.message)

    headers = None
    data = None
    if isinstance(exc, RateLimited):
        headers = {"Retry-After": str(exc.retry_after)}
        data = {"retryAfter": exc.retry_after}
    return _render(exc.status_code, Envelope(success=False, message=exc.message, data=data, errors=exc.errors), headers)


async def handle_domain_validation(request: Request, exc: ValidationError) -> JSONResponse:
    errors = _protean_field_errors(exc)
    logger.info("domain_validation_failed", path=request.url.path, errors=errors)
    message = errors[0]["message"] if len(errors) == 1 else "Validation failed"
    return _render(400, Envelope(success=False, message=message, errors=errors))


async def handle_not_found(request: Request, exc: ObjectNotFoundError) -> JSONResponse:  # noqa: ARG001
    return _render(404, Envelope(success=False, message="Resource not found"))


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:  # noqa: ARG001
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg", "Invalid value"),
        }
        for error in exc.errors()
    ]
    return _render(400, Envelope(success=False, message="Validation failed", errors=errors))


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", path=request.url.path, error=str(exc))
    envelope = Envelope(success=False, message="Internal server error")
    if not get_settings().is_production:
        envelope.errors = [
            {
                "type": type(exc).__name__,
                "message": str(exc),
                "stack": traceback.format_exception(exc),
            }
        ]
    return _render(500, envelope)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PizzeriaError, handle_pizzeria_error)
    app.add_exception_handler(ValidationError, handle_domain_validation)
    app.add_exception_handler(ObjectNotFoundError, handle_not_found)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(Exception, handle_unexpected)
