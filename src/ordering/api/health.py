"""Health checks for the ordering service.

``/health`` reports each dependency separately:

- database: every configured persistence provider answers ``is_alive()``
- payment_gateway: the gateway answers a status lookup for a test transaction

The overall status is ``ok`` when every check is healthy and ``degraded``
(HTTP 503) otherwise.
"""

import time

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ordering.domain import logger, ordering
from payments.gateway import get_gateway
from payments.gateway.port import PaymentStatus

HEALTH_CHECK_TRANSACTION = "HEALTH_CHECK_TEST"

health_router = APIRouter(tags=["health"])


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


def check_database(domain) -> dict:
    """Ask each persistence provider of the domain whether it is reachable."""
    started = time.perf_counter()
    try:
        with domain.domain_context():
            providers = {name: bool(provider.is_alive()) for name, provider in domain.providers.items()}
    except Exception as exc:
        logger.error("Database health check failed", error=str(exc), error_type=type(exc).__name__)
        return {
            "healthy": False,
            "description": "Database is not reachable",
            "error": str(exc),
            "error_type": type(exc).__name__,
        }

    healthy = all(providers.values())
    if not healthy:
        logger.warning("Database provider not alive", providers=providers)
    return {
        "healthy": healthy,
        "description": "Database connection is healthy" if healthy else "Database is not reachable",
        "providers": providers,
        "response_time_ms": _elapsed_ms(started),
    }


def check_payment_gateway() -> dict:
    """Look up the test transaction on the payment gateway."""
    gateway = get_gateway()
    started = time.perf_counter()
    try:
        response = gateway.get_payment_status(HEALTH_CHECK_TRANSACTION)
    except Exception as exc:
        logger.error("Payment service health check failed", error=str(exc), error_type=type(exc).__name__)
        return {
            "healthy": False,
            "description": "Payment service is not responsive",
            "service": type(gateway).__name__,
            "error": str(exc),
            "error_type": type(exc).__name__,
        }

    healthy = response.status is not PaymentStatus.FAILED
    if not healthy:
        logger.warning("Payment service not responsive", message=response.message)
    return {
        "healthy": healthy,
        "description": "Payment service is responsive" if healthy else "Payment service is not responsive",
        "service": type(gateway).__name__,
        "test_transaction": HEALTH_CHECK_TRANSACTION,
        "payment_status": response.status.value,
        "response_time_ms": _elapsed_ms(started),
    }


@health_router.get("/health")
async def health():
    """Health check for the database and the payment gateway."""
    checks = {
        "database": check_database(ordering),
        "payment_gateway": check_payment_gateway(),
    }
    all_healthy = all(check["healthy"] for check in checks.values())

    return JSONResponse(
        status_code=200 if all_healthy else 503,
        content={
            "status": "ok" if all_healthy else "degraded",
            "domains": {"ordering": {"name": ordering.name}},
            "checks": checks,
        },
    )
