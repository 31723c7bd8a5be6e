import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from syncora.config import settings
from syncora.database import Base, engine
from syncora.exception_handlers import register_exception_handlers
from syncora.middleware.logging import StructuredLoggingMiddleware, setup_structured_logging
from syncora.middleware.rate_limit import configure_rate_limiting
from syncora.routes import auth, dashboard, two_factor
from syncora.scheduler import create_scheduler
from syncora.services.pending_auth import PendingAuthRegistry
from syncora.utils.session import build_session_manager

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the process-wide registry, session store and sweep job."""
    logger.info("Starting up the application...")
    if settings.debug:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created (if not existing).")

    registry = PendingAuthRegistry(ttl_seconds=settings.pending_auth_ttl_seconds)
    app.state.pending_auth = registry
    app.state.session_manager = await build_session_manager()

    scheduler = create_scheduler(registry)
    scheduler.start()
    try:
        yield
    finally:
        logger.info("Shutting down the application...")
        scheduler.shutdown(wait=False)
        await app.state.session_manager.disconnect()
        registry.clear()


def create_app() -> FastAPI:
    """Create the FastAPI application."""
    setup_structured_logging(log_level=settings.log_level, json_format=settings.log_json)

    app = FastAPI(
        title=settings.app_name,
        description="Personal productivity dashboard API",
        debug=settings.debug,
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(StructuredLoggingMiddleware)

    register_exception_handlers(app)
    configure_rate_limiting(app)

    app.include_router(auth.router, prefix="/auth", tags=["Auth"])
    app.include_router(two_factor.router, prefix="/auth/2fa", tags=["Two-Factor Authentication"])
    app.include_router(dashboard.router, prefix="/api", tags=["Dashboard"])

    @app.get("/health", tags=["Root"])
    async def health():
        return {"status": "ok"}

    if settings.debug:
        logger.info(f"Running in {settings.environment} mode")
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)

    return app
