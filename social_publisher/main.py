from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from . import __version__
from .config import settings
from .infrastructure.logging import configure_logging
from .presentation.api.dependencies import get_database
from .presentation.api.errors import register_exception_handlers
from .presentation.api.v1 import accounts, content, health, oauth, publish, publisher
from .presentation.middleware import CorrelationIdMiddleware

configure_logging(settings.service_name, settings.log_level)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Starting application", service=settings.service_name)

    db = get_database()
    try:
        await db.create_tables()
    except Exception as e:
        logger.error(
            "Failed to create database tables",
            error=str(e),
            error_type=type(e).__name__,
            db_host=settings.db_host,
            db_name=settings.db_name,
            exc_info=True,
        )
        raise

    yield

    await db.close()
    logger.info("Application shutdown complete")


app = FastAPI(
    title="Social Publisher API",
    description="Publish generated posts now or on a schedule to connected social accounts",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(CorrelationIdMiddleware)
register_exception_handlers(app)

app.include_router(health.router)
app.include_router(publish.router, prefix="/api/v1")
app.include_router(publisher.router, prefix="/api/v1")
app.include_router(accounts.router, prefix="/api/v1")
app.include_router(oauth.router, prefix="/api/v1")
app.include_router(content.router, prefix="/api/v1")


@app.get("/")
def root() -> dict:
    return {
        "service": settings.service_name,
        "version": __version__,
        "docs": "/docs",
    }
