"""
Earth Care Network API Server

Entry point for the FastAPI application.
"""

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from app.api.routes import router as api_router
from app.core.config import get_settings
from app.core.database import engine
from app.core.errors import register_exception_handlers
from app.core.middleware import CSRFMiddleware, RequestContextMiddleware, SecurityHeadersMiddleware
from app.core.redis import close_redis, get_redis

settings = get_settings()
log = structlog.get_logger()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Earth Care Network",
        description="Enterprise directory: profile claims and team membership.",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Middleware (last added runs first)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(CSRFMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["Content-Type", "Authorization", "X-CSRF-Token"],
    )
    app.add_middleware(RequestContextMiddleware)

    register_exception_handlers(app)

    app.include_router(api_router, prefix="/api")

    @app.get("/health", tags=["System"])
    async def health_check():
        """Liveness probe."""
        return {"status": "ok"}

    @app.get("/ready", tags=["System"])
    async def readiness_check():
        """Readiness probe: database and Redis must both answer."""
        checks = {}
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            checks["database"] = "ok"
        except Exception as exc:
            log.warning("ready.database_unavailable", error=str(exc))
            checks["database"] = "unavailable"
        try:
            r = await get_redis()
            await r.ping()
            checks["redis"] = "ok"
        except Exception as exc:
            log.warning("ready.redis_unavailable", error=str(exc))
            checks["redis"] = "unavailable"

        ready = all(v == "ok" for v in checks.values())
        return {"status": "ready" if ready else "degraded", "checks": checks}

    @app.on_event("startup")
    async def on_startup():
        log.info("server.starting", debug=settings.debug)

    @app.on_event("shutdown")
    async def on_shutdown():
        log.info("server.stopping")
        await close_redis()

    return app


app = create_app()
