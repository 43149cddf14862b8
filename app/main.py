"""
WorkSpace Hub FastAPI application entry point.

Screens: login → workspace list → workspace files; admins also get the admin panel.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app import __version__
from app.config import get_settings
from app.db.session import SessionLocal, check_db_connection, engine, init_db

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown."""
    logger.info("WorkSpace Hub starting")
    try:
        try:
            check_db_connection()
            init_db()
            logger.info("Database connection verified")
        except Exception as e:
            logger.critical("Database unreachable: %s", e)
            raise

        # Seed validation and credential hashing fail startup, not the first login
        try:
            from app.services.auth import get_credential_directory
            from app.services.hub_store import HubStore
            from app.services.kv_store import SqlKeyValueStore

            get_credential_directory()
            db = SessionLocal()
            try:
                if HubStore(SqlKeyValueStore(db)).ensure_seeded():
                    logger.info("Demo data seeded")
            finally:
                db.close()
        except Exception as e:
            logger.critical("Demo seed failed at startup: %s", e)
            raise

        yield
    finally:
        logger.info("WorkSpace Hub shutting down")
        engine.dispose()
        logger.info("Database connection pool closed")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    if not settings.secret_key:
        logger.warning("SECRET_KEY is not set; session tokens are signed with an empty key")
    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    # Mount API routes
    from app.api.admin import router as admin_router
    from app.api.auth import router as auth_router
    from app.api.files import router as files_router
    from app.api.views import router as views_router
    from app.api.workspaces import router as workspaces_router

    app.include_router(auth_router, prefix="/api/auth", tags=["auth"])
    app.include_router(workspaces_router, prefix="/api/workspaces", tags=["workspaces"])
    app.include_router(files_router, prefix="/api/workspaces", tags=["files"])
    app.include_router(admin_router, prefix="/api/admin", tags=["admin"])

    # Mount HTML-serving view routes (no prefix: serves /, /login, /workspaces, /admin)
    app.include_router(views_router, tags=["views"])

    @app.get("/health")
    def health() -> dict:
        """Health check endpoint. Confirms DB connectivity."""
        from sqlalchemy import text

        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return {
                "status": "ok",
                "version": __version__,
                "database": "connected",
            }
        except Exception:
            from fastapi.responses import JSONResponse

            return JSONResponse(
                status_code=503,
                content={
                    "status": "unhealthy",
                    "version": __version__,
                    "database": "disconnected",
                },
            )

    return app


app = create_app()
