"""Order payments FastAPI application.

Processes commands synchronously via HTTP. Each ordering request runs inside
the ordering domain context and is tagged with a request id in the logs.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from ordering.api import health_router, register_error_handlers, router
from ordering.domain import ordering
from ordering.utils.logging import add_context, clear_context, configure_logging

configure_logging()

# PROTEAN_ENV selects the config overlay applied at init
ordering.init()

app = FastAPI(
    title="Order Payments API",
    description="Orders, line items and payment processing",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the ordering domain context and a request id for each request."""
    if not request.url.path.startswith(router.prefix):
        return await call_next(request)

    add_context(request_id=request.headers.get("X-Request-ID") or uuid4().hex)
    try:
        with ordering.domain_context():
            return await call_next(request)
    finally:
        clear_context()


register_error_handlers(app)
app.include_router(router)
app.include_router(health_router)
