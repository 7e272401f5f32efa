"""HTTP mapping for checkout failures.

Protean's own handlers cover plain ``ValidationError`` (400). The handlers
registered here take precedence for the checkout error family because
FastAPI resolves handlers along the exception's MRO.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError
from protean.integrations.fastapi import register_exception_handlers

from checkout.errors import (
    RETRY_MESSAGE,
    CheckoutInProgress,
    ConcurrencyConflict,
    InsufficientStock,
    InvalidCheckoutRequest,
    InvalidTransition,
    StorageFailure,
)

logger = structlog.get_logger(__name__)


async def _invalid_request(request: Request, exc: InvalidCheckoutRequest) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": "invalid_request", "messages": exc.messages})


async def _checkout_in_progress(request: Request, exc: CheckoutInProgress) -> JSONResponse:
    return JSONResponse(status_code=409, content={"error": "checkout_in_progress", "messages": exc.messages})


async def _insufficient_stock(request: Request, exc: InsufficientStock) -> JSONResponse:
    return JSONResponse(
        status_code=409,
        content={
            "error": "insufficient_stock",
            "product_id": exc.product_id,
            "requested": exc.requested,
            "available": exc.available,
            "messages": exc.messages,
        },
    )


async def _concurrency_conflict(request: Request, exc: ConcurrencyConflict) -> JSONResponse:
    return JSONResponse(
        status_code=409,
        content={"error": "concurrency_conflict", "product_id": exc.product_id, "message": RETRY_MESSAGE},
    )


async def _invalid_transition(request: Request, exc: InvalidTransition) -> JSONResponse:
    return JSONResponse(
        status_code=409,
        content={
            "error": "invalid_transition",
            "current_status": exc.current_status,
            "requested_status": exc.requested_status,
            "messages": exc.messages,
        },
    )


async def _not_found(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": "not_found", "message": str(exc)})


async def _storage_failure(request: Request, exc: StorageFailure) -> JSONResponse:
    logger.error("api.storage_failure", path=request.url.path, operation=exc.operation)
    return JSONResponse(status_code=503, content={"error": "storage_failure", "message": RETRY_MESSAGE})


def register_error_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)
    app.add_exception_handler(InvalidCheckoutRequest, _invalid_request)
    app.add_exception_handler(CheckoutInProgress, _checkout_in_progress)
    app.add_exception_handler(InsufficientStock, _insufficient_stock)
    app.add_exception_handler(ConcurrencyConflict, _concurrency_conflict)
    app.add_exception_handler(InvalidTransition, _invalid_transition)
    app.add_exception_handler(ObjectNotFoundError, _not_found)
    app.add_exception_handler(StorageFailure, _storage_failure)
