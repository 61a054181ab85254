"""FastAPI application entry point."""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text

from formdesk.core.config import Settings, get_settings
from formdesk.core.rate_limit import build_limiter
from formdesk.core.structured_logging import configure_logging
from formdesk.db import models  # noqa: F401  (registers tables on Base.metadata)
from formdesk.db.base import Base
from formdesk.db.session import build_engine, build_session_factory
from formdesk.routers import build_public_router, forms_router, submissions_router

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Formdesk API",
        description="Schema-driven forms and submissions",
        version=settings.VERSION,
        docs_url="/docs" if settings.ENV == "dev" else None,
        redoc_url="/redoc" if settings.ENV == "dev" else None,
    )

    engine = build_engine(settings)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)

    # Schema migrations are out of scope; tables are created on startup.
    Base.metadata.create_all(bind=engine)

    # Rate limiting
    limiter = build_limiter(settings)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
        expose_headers=["Content-Disposition"],
    )

    app.include_router(forms_router)
    app.include_router(build_public_router(limiter, settings))
    app.include_router(submissions_router)

    @app.get("/health")
    def health(request: Request):
        """Verifies database connectivity and returns environment info."""
        with request.app.state.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return {"status": "ok", "env": settings.ENV, "version": settings.VERSION}

    logger.info("Formdesk API configured (env=%s)", settings.ENV)
    return app
