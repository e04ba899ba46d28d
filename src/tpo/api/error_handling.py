from __future__ import annotations

from typing import Any, cast

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from tpo.api.middleware.request_id import get_request_id
from tpo.application.ports.collaborators import CollaboratorUnavailableError
from tpo.application.use_cases.edit_composition import PriceEditingForbiddenError, ProductUnavailableError
from tpo.application.use_cases.get_composition import CompositionConflictError, CompositionNotFoundError
from tpo.application.use_cases.invoice_actions import InvoiceNotFoundError
from tpo.application.use_cases.start_composition import OrderNotFoundError
from tpo.domain.order.composition import (
    NotAHotelRowError,
    PricedPerSubLineError,
    ProductTypeMismatchError,
    RowNotFoundError,
    SubLineNotFoundError,
)
from tpo.domain.order.submission import (
    BranchRequiredError,
    NoSubmittableRowsError,
    OwnerRequiredError,
    OwnerWithoutBranchError,
)


def _error_response(
    *,
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
                "details": details or {},
            },
            "requestId": get_request_id(),
        },
    )


def _exception_handler(status_code: int, code: str):
    async def handler(_: Request, exc: Exception) -> JSONResponse:
        details = getattr(exc, "details", None)
        return _error_response(
            status_code=status_code,
            code=code,
            message=str(exc),
            details=details if isinstance(details, dict) else None,
        )

    return handler


async def _http_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    http_exc = cast(StarletteHTTPException, exc)
    message = str(http_exc.detail) if http_exc.detail else "request failed"
    code = "HTTP_ERROR"
    if http_exc.status_code == 404:
        code = "NOT_FOUND"
    elif http_exc.status_code == 400:
        code = "BAD_REQUEST"
    elif http_exc.status_code == 405:
        code = "METHOD_NOT_ALLOWED"
    return _error_response(
        status_code=http_exc.status_code,
        code=code,
        message=message,
    )


async def _validation_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    validation_exc = cast(RequestValidationError, exc)
    return _error_response(
        status_code=400,
        code="INVALID_REQUEST",
        message="request validation failed",
        details={"errors": validation_exc.errors()},
    )


def register_exception_handlers(app: FastAPI) -> None:
    mappings: list[tuple[type[Exception], int, str]] = [
        (CompositionNotFoundError, 404, "COMPOSITION_NOT_FOUND"),
        (RowNotFoundError, 404, "ROW_NOT_FOUND"),
        (SubLineNotFoundError, 404, "SUB_LINE_NOT_FOUND"),
        (OrderNotFoundError, 404, "ORDER_NOT_FOUND"),
        (InvoiceNotFoundError, 404, "INVOICE_NOT_FOUND"),
        (NotAHotelRowError, 400, "NOT_A_HOTEL_ROW"),
        (PricedPerSubLineError, 400, "PRICED_PER_SUB_LINE"),
        (ProductUnavailableError, 400, "PRODUCT_UNAVAILABLE"),
        (ProductTypeMismatchError, 400, "PRODUCT_UNAVAILABLE"),
        (NoSubmittableRowsError, 400, "NO_SUBMITTABLE_ROWS"),
        (BranchRequiredError, 400, "BRANCH_REQUIRED"),
        (OwnerRequiredError, 400, "OWNER_REQUIRED"),
        (OwnerWithoutBranchError, 400, "OWNER_WITHOUT_BRANCH"),
        (PriceEditingForbiddenError, 403, "PRICE_EDITING_FORBIDDEN"),
        (CompositionConflictError, 409, "COMPOSITION_CONFLICT"),
        (CollaboratorUnavailableError, 502, "COLLABORATOR_UNAVAILABLE"),
    ]

    for exc_cls, status_code, code in mappings:
        app.add_exception_handler(exc_cls, _exception_handler(status_code, code))

    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
