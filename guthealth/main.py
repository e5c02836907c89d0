from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy import inspect, text
import uvicorn
import logging
import sys

from guthealth.core.config import settings
from guthealth.db.base import Base
from guthealth.db.session import engine, get_db_session
from guthealth.health_scoring.exceptions import HealthScoreError
import guthealth.models  # noqa: F401  registers tables on Base.metadata
import guthealth.health_scoring.models  # noqa: F401

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info(f"Starting up {settings.PROJECT_NAME} ({settings.ENVIRONMENT.value})...")

    existing_tables = inspect(engine).get_table_names()
    missing_tables = [name for name in Base.metadata.tables if name not in existing_tables]
    if missing_tables:
        logger.info(f"Creating missing tables: {', '.join(missing_tables)}")
        Base.metadata.create_all(bind=engine)

    yield

    logger.info(f"{settings.PROJECT_NAME} shutdown complete")


def create_application() -> FastAPI:
    """Create and configure the FastAPI application"""
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description="Bowel-health records, scoring, trends and advice",
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        docs_url=f"{settings.API_V1_STR}/docs",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    from guthealth.api.v1.api import api_router
    app.include_router(api_router, prefix=settings.API_V1_STR)

    if settings.METRICS_ENABLED:
        Instrumentator().instrument(app).expose(app, endpoint="/metrics")

    app.add_exception_handler(HealthScoreError, health_score_exception_handler)
    return app


async def health_score_exception_handler(request: Request, exc: HealthScoreError):
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__}: {exc.message} - {request.url}")
    else:
        logger.warning(f"HTTP {exc.status_code}: {exc.message} - {request.url}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Create the FastAPI app instance
app = create_application()


@app.get("/health", tags=["Health Check"])
def health_check():
    """Health check endpoint"""
    try:
        with get_db_session() as db:
            db.execute(text("SELECT 1"))
        db_status = "healthy"
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        db_status = "unhealthy"

    return {
        "status": "healthy",
        "version": settings.VERSION,
        "project": settings.PROJECT_NAME,
        "database": db_status,
    }


if __name__ == "__main__":
    uvicorn.run(
        "guthealth.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.is_development,
    )
