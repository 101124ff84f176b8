"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from nvjmi_finance.api.middleware import RequestIDMiddleware, MetricsMiddleware
from nvjmi_finance.api.v1 import dashboard, plans, schedule, settings as budget_settings
from nvjmi_finance.infrastructure.observability.logging import setup_logging
from nvjmi_finance.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="NvjmiOS Finance",
        description="BNPL installment tracking and available-to-spend projection",
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
    app.include_router(plans.router, prefix="/v1", tags=["plans"])
    app.include_router(schedule.router, prefix="/v1", tags=["schedule"])
    app.include_router(dashboard.router, prefix="/v1", tags=["dashboard"])
    app.include_router(budget_settings.router, prefix="/v1", tags=["settings"])

    return app


app = create_app()
