"""FastAPI application factory"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from petty_cash.api.middleware import RequestIDMiddleware, MetricsMiddleware
from petty_cash.api.v1 import export, ledger, replenishments, transactions, users
from petty_cash.api.v1 import settings as settings_routes
from petty_cash.domain.exceptions import PettyCashError, ValidationError
from petty_cash.infrastructure.observability.logging import setup_logging
from petty_cash.config import settings

# Setup structured logging
setup_logging(settings.log_level)

logger = logging.getLogger(__name__)


async def domain_error_handler(request: Request, exc: PettyCashError) -> JSONResponse:
    """Render domain errors with a stable machine-readable code"""
    if exc.status_code >= 500:
        logger.error(exc.message, extra={"code": exc.code, "request_id": getattr(request.state, "request_id", None)})
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Normalize FastAPI validation responses into the domain error shape"""
    detail = exc.errors()
    message = detail[0].get("msg", "Invalid request") if detail else "Invalid request"
    error = ValidationError(message)
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Petty Cash Gateway",
        description="Petty cash ledger, approvals and float replenishment",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(PettyCashError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(transactions.router, prefix="/v1", tags=["transactions"])
    app.include_router(replenishments.router, prefix="/v1", tags=["replenishments"])
    app.include_router(ledger.router, prefix="/v1", tags=["ledger"])
    app.include_router(users.router, prefix="/v1", tags=["users"])
    app.include_router(settings_routes.router, prefix="/v1", tags=["settings"])
    app.include_router(export.router, prefix="/v1", tags=["export"])

    return app


app = create_app()
