"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from agrocredit.api.middleware import RequestIDMiddleware, MetricsMiddleware
from agrocredit.api.v1 import dashboard, farmers, orders, payments
from agrocredit.infrastructure.observability.logging import setup_logging
from agrocredit.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="AgroCredit Gateway",
        description="Fertilizer credit orders, approvals and repayment schedules",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(dashboard.router, prefix="/v1", tags=["users"])
    app.include_router(orders.router, prefix="/v1", tags=["orders"])
    app.include_router(farmers.router, prefix="/v1", tags=["farmers"])
    app.include_router(payments.router, prefix="/v1", tags=["payments"])

    return app


app = create_app()
