"""BuildOps FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from buildops.api.errors import register_error_handlers
from buildops.api.routes import issues, operators
from buildops.config import settings
from buildops.services.logging import setup_server_logging

# Load environment variables (LOG_LEVEL is read straight from the environment)
load_dotenv()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle (startup and shutdown)."""
    # Schema is owned by Alembic (alembic upgrade head)
    logger.info("BuildOps API %s starting", settings.api_version)
    yield
    logger.info("Application shutting down")


def create_app() -> FastAPI:
    """Build the FastAPI application with routers and error handlers."""
    application = FastAPI(
        title=settings.api_title,
        description="Building maintenance platform with operator continuity tracking",
        version=settings.api_version,
        lifespan=lifespan,
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(application)

    # Include routers
    application.include_router(operators.router)
    application.include_router(issues.router)

    @application.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "ok"}

    return application


app = create_app()


def run() -> None:
    """Run the API server with uvicorn."""
    import uvicorn

    setup_server_logging(
        settings.log_file,
        settings.log_level,
        max_bytes=settings.log_max_bytes,
        backup_count=settings.log_backup_count,
    )
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
