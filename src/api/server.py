"""FastAPI application setup"""
import logging
from contextlib import asynccontextmanager
import psycopg
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.api.routes import router
from src.api.middleware import setup_cors, setup_rate_limiting
from src.db.connection import db
from src.db.schema import init_schema
from src.exceptions import FitnessTrackerError, wrap_external_exception
from src.services.container import init_container

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle manager for FastAPI application"""
    # Startup
    logger.info("Starting API server...")
    await db.init_pool()
    logger.info("Database pool initialized")

    await init_schema()
    init_container()

    yield

    # Shutdown
    logger.info("Shutting down API server...")
    await db.close_pool()
    logger.info("Database pool closed")


def create_api_application() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Fitness Tracker API",
        description="Goals, streaks, achievements and health metric analysis",
        version="1.0.0",
        lifespan=lifespan
    )

    # Setup middleware
    setup_cors(app)
    setup_rate_limiting(app)

    # Include routes
    app.include_router(router)

    # Domain errors carry their own HTTP status
    @app.exception_handler(FitnessTrackerError)
    async def fitness_tracker_error_handler(request: Request, exc: FitnessTrackerError):
        return JSONResponse(status_code=exc.http_status, content=exc.to_dict())

    # Driver errors become ConnectionError (503) or QueryError (500)
    @app.exception_handler(psycopg.Error)
    async def database_error_handler(request: Request, exc: psycopg.Error):
        error = wrap_external_exception(
            exc,
            operation=f"{request.method} {request.url.path}",
            user_id=request.path_params.get("user_id")
        )
        return JSONResponse(status_code=error.http_status, content=error.to_dict())

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "detail": str(exc)}
        )

    logger.info("FastAPI application created")

    return app
