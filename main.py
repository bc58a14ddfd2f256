import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware
from starlette.middleware.sessions import SessionMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from search_dashboard import database
from search_dashboard.auth import initialize_admin
from search_dashboard.config import Settings, settings
from search_dashboard.exception_handlers import register_exception_handlers
from search_dashboard.exceptions import StorageUnavailableError
from search_dashboard.middleware.logging import StructuredLoggingMiddleware, setup_structured_logging
from search_dashboard.middleware.rate_limit import configure_rate_limiting
from search_dashboard.middleware.security_headers import SecurityHeadersMiddleware
from search_dashboard.models import SearchQuery, SessionRecord  # noqa: F401  registers the tables on Base.metadata
from search_dashboard.routes import auth, dashboard, monitoring, stats
from search_dashboard.services.session_store import SessionStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Tasks to run at application startup and shutdown."""
    config: Settings = app.state.settings
    logger.info("Starting up the application...")
    await database.wait_for_database(retries=config.db_connect_retries, delay=config.db_connect_retry_delay)

    if config.debug:
        async with database.engine.begin() as conn:
            await conn.run_sync(database.Base.metadata.create_all)
        logger.info("Database tables created (if not existing).")

    try:
        await app.state.session_store.purge_expired()
    except StorageUnavailableError as e:
        logger.warning(f"Could not purge expired sessions: {e.details.get('reason')}")

    base_url = f"http://{config.host}:{config.port}"
    logger.info(f"{config.app_name} running in {config.environment} mode")
    logger.info(f"Dashboard:    {base_url}/dashboard")
    logger.info(f"Login:        {base_url}/admin/login")
    logger.info(f"Health check: {base_url}/health")
    logger.info(f"API stats:    {base_url}/api/stats")

    yield

    logger.info("Shutting down the application...")
    await database.close_engine()


def create_app(config: Optional[Settings] = None) -> FastAPI:
    """Create the FastAPI application."""
    config = config or settings

    setup_structured_logging(
        log_level=config.log_level,
        json_format=config.is_production,
        log_dir=config.log_dir,
    )

    app = FastAPI(
        title=config.app_name,
        description="Authenticated analytics dashboard for search queries",
        debug=config.debug,
        version=config.app_version,
        lifespan=lifespan,
    )
    app.state.settings = config

    # Fails with ConfigurationError before any request can be served
    initialize_admin(app, config.admin_email, config.admin_password)
    app.state.session_store = SessionStore(config.session_max_age)

    # Add middleware (the last one added runs first)
    app.add_middleware(
        SessionMiddleware,
        secret_key=config.secret_key,
        session_cookie=config.session_cookie,
        max_age=config.session_max_age,
        same_site="strict" if config.is_production else "lax",
        https_only=config.is_production,
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.add_middleware(SecurityHeadersMiddleware, enable_hsts=config.is_production)
    app.add_middleware(StructuredLoggingMiddleware)
    app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=config.forwarded_allow_ips)

    configure_rate_limiting(app)
    register_exception_handlers(app)

    # Include routers
    app.include_router(monitoring.router)
    app.include_router(auth.router)
    app.include_router(stats.router)
    app.include_router(dashboard.router)

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("main:app", host=settings.host, port=settings.port)
