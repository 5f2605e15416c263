"""FastAPI application factory"""

from contextlib import asynccontextmanager
from typing import Callable

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from ledgerx_console.api.middleware import RequestIDMiddleware, MetricsMiddleware
from ledgerx_console.api.v1 import dashboard, demo, transfers
from ledgerx_console.infrastructure.observability.logging import setup_logging
from ledgerx_console.orchestration.session import DemoSession
from ledgerx_console.config import settings

# Setup structured logging
setup_logging(settings.log_level, service=settings.service_name)


def create_app(session_factory: Callable[[], DemoSession] = DemoSession) -> FastAPI:
    """Create and configure FastAPI application"""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # One session per process: probing and polling start with the app
        session = session_factory()
        app.state.session = session
        session.start()
        try:
            yield
        finally:
            await session.close()

    app = FastAPI(
        title="LedgerX Console",
        description="Readiness-gated transfer console for the LedgerX demo",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
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
    app.include_router(transfers.router, prefix="/v1", tags=["transfers"])
    app.include_router(dashboard.router, prefix="/v1", tags=["dashboard"])
    app.include_router(demo.router, prefix="/v1", tags=["demo"])

    return app


app = create_app()
