"""Application factory and top-level wiring for the WorkTime API.

Configuration, logging, middleware, error handlers and the three API routers
(auth, sessions, projects) are assembled here. Tables are created on startup,
not on import, so tests can point the engine at an in-memory database first.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.responses import JSONResponse

from . import __version__
from .core.config import settings
from .core.errors import install_error_handlers
from .core.logging import configure_logging
from .db.session import engine, init_db
from .middlewares import RequestIdMiddleware, SecurityHeadersMiddleware
from .routers import api_auth, api_projects, api_sessions

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(title=settings.APP_NAME, version=__version__)

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIdMiddleware)

    install_error_handlers(app)

    app.include_router(api_auth.router)
    app.include_router(api_sessions.router)
    app.include_router(api_projects.router)

    Instrumentator().instrument(app).expose(app, include_in_schema=False)

    @app.on_event("startup")
    async def _startup() -> None:
        init_db()
        logger.info("app.started", extra={"extra_data": {"env": settings.APP_ENV}})

    @app.get("/health")
    def health():
        now = datetime.now(timezone.utc).isoformat()
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            logger.error("health.database_unreachable", extra={"extra_data": {"error": str(exc)}})
            return JSONResponse(
                {"status": "unhealthy", "timestamp": now, "database": "disconnected"},
                status_code=503,
            )
        return {"status": "healthy", "timestamp": now, "database": "connected"}

    @app.get("/api")
    def api_info():
        return {
            "message": f"{settings.APP_NAME} API v{__version__}",
            "endpoints": {
                "health": "/health",
                "auth": "/api/auth/*",
                "sessions": "/api/sessions",
                "projects": "/api/projects",
            },
        }

    return app


configure_logging()
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("worktime.main:app", host=settings.HOST, port=settings.PORT)
