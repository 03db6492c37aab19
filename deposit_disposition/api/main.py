"""FastAPI application factory"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from deposit_disposition.api.dependencies import get_request_id
from deposit_disposition.api.middleware import RequestIDMiddleware, MetricsMiddleware
from deposit_disposition.api.v1 import damage_items, deposits, dispositions, move_out
from deposit_disposition.domain.exceptions import (
    ConflictError,
    DispositionValidationError,
    DomainException,
    InvalidTransitionError,
    NotFoundError,
    StoreError,
)
from deposit_disposition.infrastructure.observability.logging import setup_logging
from deposit_disposition.config import settings

# Setup structured logging
setup_logging(settings.log_level)

# Most specific first
ERROR_STATUS = (
    (NotFoundError, 404),
    (ConflictError, 409),
    (InvalidTransitionError, 409),
    (DispositionValidationError, 422),
    (StoreError, 503),
)


def status_for(exc: DomainException) -> int:
    for error_cls, status_code in ERROR_STATUS:
        if isinstance(exc, error_cls):
            return status_code
    return 500


async def domain_error_handler(request: Request, exc: DomainException) -> JSONResponse:
    """Translate domain errors so callers can tell not-found, fix-input and already-done apart"""
    status_code = status_for(exc)
    log = logging.error if status_code >= 500 else logging.warning
    log(f"{type(exc).__name__}: {exc}", extra={"request_id": get_request_id(request), "path": request.url.path})
    return JSONResponse(
        status_code=status_code,
        content={"error": type(exc).__name__, "detail": str(exc)},
    )


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Deposit Disposition Service",
        description="Security-deposit disposition calculation and move-out lifecycle",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(DomainException, domain_error_handler)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name, "jurisdiction": settings.jurisdiction_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(move_out.router, prefix="/v1", tags=["move-out"])
    app.include_router(dispositions.router, prefix="/v1", tags=["dispositions"])
    app.include_router(damage_items.router, prefix="/v1", tags=["damage-items"])
    app.include_router(deposits.router, prefix="/v1", tags=["deposits"])

    return app


app = create_app()
