"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from agency_tracker.api.errors import register_exception_handlers
from agency_tracker.api.middleware import MetricsMiddleware, RequestIDMiddleware
from agency_tracker.api.v1 import agency, category_budgets, payment_cycles, projected_expenses, savings_goals
from agency_tracker.config import settings
from agency_tracker.infrastructure.observability.logging import setup_logging

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Agency Tracker",
        description="Household spending agency, payment cycles, goals and budgets",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(agency.router, prefix="/v1", tags=["agency"])
    app.include_router(payment_cycles.router, prefix="/v1", tags=["payment-cycles"])
    app.include_router(projected_expenses.router, prefix="/v1", tags=["projected-expenses"])
    app.include_router(savings_goals.router, prefix="/v1", tags=["savings-goals"])
    app.include_router(category_budgets.router, prefix="/v1", tags=["category-budgets"])

    return app


app = create_app()
