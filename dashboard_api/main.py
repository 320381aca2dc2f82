"""
Publisher Dashboard API Server

Entry point for the FastAPI application.
"""

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dashboard_api import __version__
from dashboard_api.api.v1 import router as api_v1_router
from dashboard_api.core.config import get_settings
from dashboard_api.core.middleware import CacheControlMiddleware, SecurityHeadersMiddleware

settings = get_settings()
log = structlog.get_logger()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Publisher Dashboard API",
        description="Site, payee and revenue share management for publishers.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Middleware (last added runs first)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(CacheControlMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )

    app.include_router(api_v1_router, prefix="/api/v1")

    @app.get("/health", tags=["System"])
    async def health_check():
        """Liveness check endpoint."""
        return {"status": "ok"}

    @app.get("/ready", tags=["System"])
    async def readiness_check():
        """Readiness check endpoint."""
        return {"status": "ready"}

    @app.on_event("startup")
    async def on_startup():
        log.info("Publisher Dashboard API starting", version=__version__, debug=settings.debug)

    @app.on_event("shutdown")
    async def on_shutdown():
        log.info("Publisher Dashboard API shutting down")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("dashboard_api.main:app", host=settings.host, port=settings.port, reload=settings.debug)
