"""FastAPI application factory"""

import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from wallet_gateway.api.dependencies import get_request_id
from wallet_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware, endpoint_label
from wallet_gateway.api.v1 import accounts, debts, goals, recurring, transactions
from wallet_gateway.domain.exceptions import NotFoundError, PartialWriteError, RecordStoreError, ValidationError
from wallet_gateway.infrastructure.observability.logging import setup_logging
from wallet_gateway.infrastructure.observability.metrics import record_store_failures_counter
from wallet_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc)})


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


async def record_store_error_handler(request: Request, exc: RecordStoreError) -> JSONResponse:
    """Store failures are surfaced, never retried"""
    record_store_failures_counter.labels(operation=f"{request.method} {endpoint_label(request)}").inc()
    logging.error(f"Record store error: {exc}", extra={"request_id": get_request_id(request)})

    if isinstance(exc, PartialWriteError):
        return JSONResponse(
            status_code=502,
            content={"detail": {"message": str(exc), "completed_steps": exc.completed_steps}},
        )
    return JSONResponse(status_code=503, content={"detail": "Record store unavailable"})


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Wallet Gateway",
        description="Debts, recurring transactions, goals and accounts over a hosted record store",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(RecordStoreError, record_store_error_handler)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(debts.router, prefix="/v1", tags=["debts"])
    app.include_router(recurring.router, prefix="/v1", tags=["recurring-transactions"])
    app.include_router(accounts.router, prefix="/v1", tags=["accounts"])
    app.include_router(transactions.router, prefix="/v1", tags=["transactions"])
    app.include_router(goals.router, prefix="/v1", tags=["goals"])

    return app


app = create_app()
