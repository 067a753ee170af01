"""Translate ordering errors into HTTP responses.

Every error body has the same shape::

    {"error": {"code": ..., "message": ..., "context": {...}, "timestamp": ...}}
"""

from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError

from ordering.domain import logger
from ordering.exceptions import OrderingError

_STATUS_BY_KIND = {
    "not_found": 404,
    "validation": 400,
    "state_conflict": 409,
}


def _error_response(status_code: int, code: str, message: str, context: dict, timestamp: datetime) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(
            {
                "error": {
                    "code": code,
                    "message": message,
                    "context": context,
                    "timestamp": timestamp.isoformat(),
                }
            }
        ),
    )


async def ordering_error_handler(request: Request, exc: OrderingError) -> JSONResponse:
    status_code = _STATUS_BY_KIND.get(exc.kind, 422)
    log = logger.info if status_code == 404 else logger.warning
    log("Request rejected", path=request.url.path, status_code=status_code, **exc.log_details())
    return _error_response(status_code, exc.code, exc.message, exc.context, exc.occurred_at)


def _protean_handler(status_code: int, code: str):
    async def handler(request: Request, exc) -> JSONResponse:
        logger.warning("Request rejected", path=request.url.path, status_code=status_code, error=str(exc))
        return _error_response(
            status_code,
            code,
            "Request could not be processed",
            {"messages": exc.messages},
            datetime.now(UTC),
        )

    return handler


def register_error_handlers(app: FastAPI) -> None:
    # Ordering errors precede their Protean bases in the MRO, so this handler wins
    app.add_exception_handler(OrderingError, ordering_error_handler)
    app.add_exception_handler(ObjectNotFoundError, _protean_handler(404, "NOT_FOUND"))
    app.add_exception_handler(ValidationError, _protean_handler(400, "VALIDATION_ERROR"))
    app.add_exception_handler(InvalidOperationError, _protean_handler(409, "INVALID_OPERATION"))
