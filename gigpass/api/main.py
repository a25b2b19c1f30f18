"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures routers and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from psycopg_pool import ConnectionPool

from gigpass import __version__
from gigpass.adapters.notification.console import ConsoleNotificationGateway
from gigpass.adapters.repository.memory import InMemoryAccountRepository
from gigpass.adapters.repository.postgres import PostgresAccountRepository, run_migrations
from gigpass.api.v1 import router as v1_router
from gigpass.config.settings import get_settings
from gigpass.domain.ports import Channel

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "Account API v1 - Sign up, verify email and phone, sign in, reset password",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Attaches a console log handler and applies LOG_LEVEL to the gigpass loggers
    - Builds the account repository (PostgreSQL pool + migrations, or in-memory)
    - Builds the notification gateways
    - Closes the connection pool on shutdown
    """
    settings = get_settings()
    # No-op when the server (or pytest) already configured the root logger
    logging.basicConfig(format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    logging.getLogger("gigpass").setLevel(settings.log_level.upper())

    logger.info("Starting application...")

    pool = None
    if settings.repository_backend == "postgres":
        logger.info("Connecting to database...")
        pool = ConnectionPool(
            conninfo=settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
        )

        logger.info("Running database migrations...")
        run_migrations(pool)
        app.state.repository = PostgresAccountRepository(pool)
    else:
        logger.warning("Using in-memory account store; data is lost on restart")
        app.state.repository = InMemoryAccountRepository()

    app.state.email_gateway = ConsoleNotificationGateway(Channel.EMAIL)
    app.state.sms_gateway = ConsoleNotificationGateway(Channel.PHONE)

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    if pool is not None:
        pool.close()
        logger.info("Database connection pool closed")


app = FastAPI(
    title="gigpass",
    description="Account verification and credential reset API for the freelancer directory",
    version=__version__,
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

# Include v1 API routes
app.include_router(v1_router, prefix="/v1")


@app.get("/health")
def health_check(request: Request) -> dict[str, str]:
    """
    Health check endpoint with store validation.

    Returns 200 OK if application and account store are healthy.
    Raises exception if the store is unreachable.
    """
    request.app.state.repository.ping()
    return {"status": "healthy"}
