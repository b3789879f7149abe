from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from typing import Optional
import logging
import uvicorn
from sqlalchemy import text

from huddy_gate.api.routes import admin, claims, dashboard, health, register
from huddy_gate.core.config import Settings, settings as default_settings
from huddy_gate.core.exceptions import HuddyGateException, StoreUnavailable
from huddy_gate.core.logging import setup_logging
from huddy_gate.db.base import Base
from huddy_gate.db.session import build_engine, make_session_factory

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, configure_logging: bool = True) -> FastAPI:
    """
    Build the application. The engine is created once at startup, shared by
    every request through app.state, and disposed on shutdown.
    """
    settings = settings or default_settings
    if configure_logging:
        setup_logging(settings.LOG_LEVEL, settings.LOG_FILE)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan events for startup and shutdown"""
        logger.info("🚀 Starting Huddy Gate...")

        engine = build_engine(settings)
        app.state.engine = engine
        app.state.session_factory = make_session_factory(engine)

        try:
            logger.info("📦 Creating database tables...")
            Base.metadata.create_all(bind=engine)

            # Test database connection
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            logger.info("✅ Database connection successful")
        except Exception as e:
            logger.error(f"❌ Database connection failed: {e}")
            engine.dispose()
            raise

        yield

        logger.info("👋 Shutting down...")
        engine.dispose()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Event check-in and huddy gifting by QR code",
        version=settings.VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(HuddyGateException)
    async def huddy_gate_exception_handler(request: Request, exc: HuddyGateException):
        headers = {"Retry-After": "1"} if isinstance(exc, StoreUnavailable) else None
        return JSONResponse(
            status_code=exc.status_code,
            content={"status": "error", "error_code": exc.error_code, "message": exc.message},
            headers=headers,
        )

    app.include_router(health.router, prefix="/api", tags=["Health"])
    app.include_router(register.router, prefix="/api", tags=["Registration"])
    app.include_router(claims.router, prefix="/api", tags=["Claims"])
    app.include_router(dashboard.router, prefix="/api", tags=["Dashboard"])
    app.include_router(admin.router, prefix="/api/admin", tags=["Organizer"])

    @app.get("/")
    async def root():
        """Root endpoint with API information"""
        return {
            "service": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "status": "operational",
            "docs": "/docs",
            "endpoints": {
                "health": "/api/health",
                "register": "/api/register",
                "lookup": "/api/attendees/{code}",
                "entry": "/api/claims/entry",
                "gift": "/api/claims/gift",
                "dashboard": "/api/dashboard/{entered,gifted}",
                "upload_csv": "/api/admin/upload-csv"
            }
        }

    return app


def run():
    uvicorn.run(create_app(), host="0.0.0.0", port=8000, reload=False)


if __name__ == "__main__":
    run()
