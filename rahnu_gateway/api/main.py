"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from rahnu_gateway.api.errors import register_exception_handlers
from rahnu_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from rahnu_gateway.api.v1.schemas import ErrorResponse
from rahnu_gateway.api.v1 import (
    clients,
    documents,
    gold_items,
    gold_prices,
    loans,
    notifications,
    payments,
    users,
    valuation,
)
from rahnu_gateway.config import settings
from rahnu_gateway.infrastructure.database.repositories import SqlStorage
from rahnu_gateway.infrastructure.database.session import get_db, init_db
from rahnu_gateway.infrastructure.memory.repositories import InMemoryStorage
from rahnu_gateway.infrastructure.observability.logging import setup_logging
from rahnu_gateway.services.users import UserService, seed_admin_user

# Setup structured logging
setup_logging(settings.log_level)


def _prepare_storage(app: FastAPI) -> None:
    if settings.storage_backend == "memory":
        app.state.memory_storage = InMemoryStorage()
        if settings.seed_admin_user:
            seed_admin_user(UserService(app.state.memory_storage), settings.admin_password)
        return

    app.state.memory_storage = None
    init_db()
    if settings.seed_admin_user:
        for db in get_db():
            seed_admin_user(UserService(SqlStorage(db)), settings.admin_password)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Ar-Rahnu Gateway",
        description="Islamic gold-backed financing: origination, servicing and contracts",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        responses={code: {"model": ErrorResponse} for code in (400, 404, 409, 503)},
    )

    _prepare_storage(app)

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name, "storage": settings.storage_backend}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(users.router, prefix="/v1", tags=["users"])
    app.include_router(clients.router, prefix="/v1", tags=["clients"])
    app.include_router(gold_items.router, prefix="/v1", tags=["gold-items"])
    app.include_router(loans.router, prefix="/v1", tags=["loans"])
    app.include_router(payments.router, prefix="/v1", tags=["payments"])
    app.include_router(documents.router, prefix="/v1", tags=["documents"])
    app.include_router(gold_prices.router, prefix="/v1", tags=["gold-price"])
    app.include_router(valuation.router, prefix="/v1", tags=["valuation"])
    app.include_router(notifications.router, prefix="/v1", tags=["notifications"])

    return app


app = create_app()
