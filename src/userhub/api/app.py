"""
Main FastAPI application for userhub
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config import settings
from ..database import close_database, create_tables, init_database
from ..logging import configure_logging, get_logger
from ..middleware import LoggingContextMiddleware
from ..services import Services, build_services
from ..validation import validate_startup_configuration

# Configure logging before creating logger
configure_logging(debug=settings.debug, level=settings.log_level)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting userhub API...")

    services: Services | None = app.state.services
    if services is None:
        # Refuse to start without a signing secret
        await validate_startup_configuration(check_database=False)
        services = build_services()
        app.state.services = services

    if services.uses_database:
        init_database()
        await validate_startup_configuration(check_auth=False)
        if settings.database_create_tables:
            await create_tables()

    yield

    logger.info("Shutting down userhub API...")
    if services.uses_database:
        await close_database()


def create_app(services: Services | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        services: Pre-built services; when omitted they are built from
            settings at startup
    """

    app = FastAPI(
        title="userhub API",
        description="User accounts and administration over GraphQL",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )
    app.state.services = services

    app.add_middleware(LoggingContextMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    @app.get("/health")
    async def health_check():  # pyright: ignore [reportUnusedFunction]
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    try:
        from ..graphql.schema import create_graphql_router, validate_schema

        logger.info("Validating GraphQL schema...")
        validate_schema()

        app.include_router(create_graphql_router(), prefix="")
        logger.info("GraphQL endpoint initialized successfully", endpoint="/graphql")
    except Exception as e:  # pragma: no cover
        logger.error("Failed to initialize GraphQL endpoint", error=str(e))
        # Server should not start with a broken schema
        raise

    return app


# Create the main application instance
app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "userhub.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_level=settings.log_level.lower(),
    )
