"""FastAPI application factory"""

from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from coop_notify.api.middleware import RequestIDMiddleware, MetricsMiddleware
from coop_notify.api.v1 import notifications, reminders, transactions
from coop_notify.infrastructure.database.session import init_db
from coop_notify.infrastructure.database.store import SqlStore
from coop_notify.infrastructure.observability.logging import setup_logging
from coop_notify.infrastructure.store.factory import build_store
from coop_notify.infrastructure.store.health import check_connectivity
from coop_notify.services.notifications import NotificationService
from coop_notify.config import settings

# Setup structured logging
setup_logging(settings.log_level, settings.service_name)


def create_app(service: Optional[NotificationService] = None) -> FastAPI:
    """Create and configure FastAPI application"""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store = app.state.notification_service.store
        if isinstance(store, SqlStore) and store.engine is not None:
            await init_db(store.engine)
        yield
        await store.close()

    app = FastAPI(
        title="Coop Notify",
        description="Notification lifecycle and installment reminder service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.notification_service = service or NotificationService(build_store())

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint, backed by the store connectivity probe
    @app.get("/health")
    async def health_check():
        service: NotificationService = app.state.notification_service
        status = await check_connectivity(service.store, settings.connectivity_timeout_seconds)
        body = {
            "status": "ok" if status.success else "degraded",
            "service": settings.service_name,
            "store": status.message,
        }
        return JSONResponse(content=body, status_code=200 if status.success else 503)

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(notifications.router, prefix="/v1", tags=["notifications"])
    app.include_router(reminders.router, prefix="/v1", tags=["reminders"])
    app.include_router(transactions.router, prefix="/v1", tags=["transactions"])

    return app


app = create_app()
