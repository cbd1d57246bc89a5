"""HTTP mapping for storefront errors.

Protean's handlers cover ``ValidationError`` (400) and missing objects (404).
The storefront-specific subclasses and gateway errors get their own status
codes on top of that.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError
from protean.integrations.fastapi import register_exception_handlers

from storefront.exceptions import (
    ConflictError,
    GatewayError,
    InsufficientPointsError,
    InvalidStateError,
    PaymentIndeterminate,
)


def _validation_response(status_code: int):
    async def handler(request: Request, exc) -> JSONResponse:
        return JSONResponse(status_code=status_code, content={"error": exc.messages})

    return handler


async def _not_found(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": str(exc)})


async def _gateway_error(request: Request, exc: GatewayError) -> JSONResponse:
    return JSONResponse(status_code=502, content={"error": exc.message, "code": exc.code})


async def _indeterminate(request: Request, exc: PaymentIndeterminate) -> JSONResponse:
    return JSONResponse(
        status_code=504,
        content={
            "error": "Payment provider did not respond; the outcome is unknown",
            "idempotency_key": exc.idempotency_key,
        },
    )


def register_error_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)
    app.add_exception_handler(ObjectNotFoundError, _not_found)
    app.add_exception_handler(ConflictError, _validation_response(409))
    app.add_exception_handler(InvalidStateError, _validation_response(409))
    app.add_exception_handler(InsufficientPointsError, _validation_response(422))
    app.add_exception_handler(GatewayError, _gateway_error)
    app.add_exception_handler(PaymentIndeterminate, _indeterminate)
